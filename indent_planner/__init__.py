"""
indent-planner: daily raw-material indent planning for a plant fed by
many collection centers.

Entry point: calculate_recommended_indents(CalculationInputs) -> CalculationResults
"""

from .domain.contracts import CalculationInputs, CalculationResults
from .domain.validation import MissingInputError
from .engine import calculate_recommended_indents
from .serialization import results_to_dict, results_to_json

__version__ = "1.0.0"

__all__ = [
    "CalculationInputs",
    "CalculationResults",
    "MissingInputError",
    "calculate_recommended_indents",
    "results_to_dict",
    "results_to_json",
]
