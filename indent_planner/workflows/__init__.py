"""Workflows module."""
from .allocation import StockPosition, compute_overrun_percentage, run_allocation_cascade, to_result_rows
from .risk import ConstraintOutcome, apply_constraints

__all__ = [
    'StockPosition',
    'compute_overrun_percentage',
    'run_allocation_cascade',
    'to_result_rows',
    'ConstraintOutcome',
    'apply_constraints',
]
