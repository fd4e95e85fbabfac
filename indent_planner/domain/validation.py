"""
Centralized input contract checks for the engine.

Dirty data inside the datasets is tolerated (rows are dropped by the
normalizer); only caller-controlled contract violations abort a call.
"""
from typing import Any, Tuple

from .dates import parse_date


class MissingInputError(ValueError):
    """A required engine input was not supplied."""

    def __init__(self, input_name: str):
        self.input_name = input_name
        super().__init__(f"Required input '{input_name}' is missing")


REQUIRED_DATASETS = ("bonding_rows", "indent_rows", "purchase_rows")


def require_inputs(inputs: Any) -> None:
    """
    Raise MissingInputError for the first missing required input.

    Args:
        inputs: CalculationInputs (or any object exposing the same attributes)

    Raises:
        MissingInputError: naming the dataset or the planning date
    """
    if inputs is None:
        raise MissingInputError("inputs")
    for name in REQUIRED_DATASETS:
        if getattr(inputs, name, None) is None:
            raise MissingInputError(name)
    if parse_date(getattr(inputs, "planning_date", None)) is None:
        raise MissingInputError("planning_date")


def validate_impact_factor(value: Any) -> Tuple[bool, str]:
    """
    Validate a constraint impact factor.

    Returns:
        (is_valid, error_message)
    """
    try:
        factor = float(value)
    except (TypeError, ValueError):
        return False, f"Impact factor must be a number, got {value!r}"
    if factor != factor:  # NaN
        return False, "Impact factor cannot be NaN"
    if factor < 0.0 or factor > 1.0:
        return False, f"Impact factor must be between 0.0 and 1.0, got {factor}"
    return True, ""
