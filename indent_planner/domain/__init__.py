"""Domain package: value objects, contracts, dates and input validation."""

from .models import (
    ConstraintKind,
    DayBucket,
    NormalizedBonding,
    NormalizedIndent,
    NormalizedPurchase,
    NormalizedDataset,
    DWeights,
    ZERO_WEIGHTS,
    CenterWeightProfile,
    ClosedIndentAnalysis,
    Constraint,
    RiskAnalysisItem,
)
from .validation import MissingInputError

__all__ = [
    "ConstraintKind",
    "DayBucket",
    "NormalizedBonding",
    "NormalizedIndent",
    "NormalizedPurchase",
    "NormalizedDataset",
    "DWeights",
    "ZERO_WEIGHTS",
    "CenterWeightProfile",
    "ClosedIndentAnalysis",
    "Constraint",
    "RiskAnalysisItem",
    "MissingInputError",
]
