"""
Engine input/output contracts: typed dataclasses forming the single interface
between the data-loading layer, the forecasting & allocation engine and the
reporting layer.

Pipeline (single flow):
    normalize_dataset()
        → estimate_maturity_weights()
            → forecast_pipeline_arrivals()
                → apply_constraints()
                    → run_allocation_cascade()
                        → build_open_indent_matrix()   (read model, display only)

Objects
-------
CalculationInputs              – raw rows + scalar planning parameters
ForecastContribution           – one D-bucket term of a center's pipeline forecast
ForecastBreakdownRow           – all four terms + total for one center
IndentCalculationBreakdownRow  – complete five-step audit record for one center
IndentResultRow                – the published recommendation for one center
OpenIndentMatrix*              – calendar read model (T-3..T+6)
SeasonProgress                 – season run-rate summary
CalculationResults             – everything above, returned to the caller
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import math
from typing import Any, Dict, List, Mapping, Optional

from .models import (
    CenterWeightProfile,
    ClosedIndentAnalysis,
    Constraint,
    DWeights,
    NormalizedPurchase,
    RiskAnalysisItem,
)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

# Numeric parameters coerced with float() and required to be finite
_SCALAR_FIELDS = (
    "plant_capacity_percent",
    "target_daily_requirement",
    "standard_stock_centre",
    "standard_stock_gate",
    "available_stock_centre",
    "available_stock_gate",
    "seasonal_crushing_capacity",
)

_NON_NEGATIVE_FIELDS = ("plant_capacity_percent", "target_daily_requirement", "season_total_days")


def _finite_float(name: str, value: Any) -> float:
    """float(value), or ValueError naming the parameter when it is missing, not numeric or not finite."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class CalculationInputs:
    """
    Everything one engine call needs.

    Row collections are loosely typed mappings straight from the loader; they
    are resolved through the normalizer's alias lists and never read again.

    Attributes
    ----------
    bonding_rows, indent_rows, purchase_rows :
        Raw tabular records. ``None`` is a contract violation.
    planning_date :
        Day T. The recommendation targets arrivals on T+3.
    plant_capacity_percent :
        Share of target_daily_requirement the plant will actually crush (100 = full).
    target_daily_requirement :
        Plant demand per day at full capacity (Qtls).
    center_code_remap :
        Old code → new code. Unmapped codes pass through unchanged.
    standard_stock_centre / standard_stock_gate :
        Desired yard stock for the non-gate and gate cohorts.
    available_stock_centre / available_stock_gate :
        Current yard stock for the two cohorts.
    plant_start_date :
        First day of the crushing season (date or parseable string).
    season_total_days, seasonal_crushing_capacity :
        Season length and total season target, used for the run-rate summary.
    constraints :
        Constraint objects or raw mappings ({date, type, impactFactor, description}).
    """

    bonding_rows: Optional[List[Mapping[str, Any]]]
    indent_rows: Optional[List[Mapping[str, Any]]]
    purchase_rows: Optional[List[Mapping[str, Any]]]
    planning_date: Optional[date]
    plant_capacity_percent: float = 100.0
    target_daily_requirement: float = 0.0
    center_code_remap: Dict[str, str] = field(default_factory=dict)
    standard_stock_centre: float = 0.0
    standard_stock_gate: float = 0.0
    available_stock_centre: float = 0.0
    available_stock_gate: float = 0.0
    plant_start_date: Any = None
    season_total_days: int = 0
    seasonal_crushing_capacity: float = 0.0
    constraints: List[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        for name in _SCALAR_FIELDS:
            object.__setattr__(self, name, _finite_float(name, getattr(self, name)))
        object.__setattr__(self, "season_total_days", int(_finite_float("season_total_days", self.season_total_days)))

        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")


# ---------------------------------------------------------------------------
# Pipeline forecast
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ForecastContribution:
    """indent_qty × weight = result, for one D-bucket."""
    indent_date: Optional[date]
    indent_qty: float
    weight: float
    result: float


@dataclass(frozen=True)
class ForecastBreakdownRow:
    center_id: str
    center_name: str
    bonding: float
    d1: ForecastContribution
    d2: ForecastContribution
    d3: ForecastContribution
    d4: ForecastContribution
    total_forecast: float


# ---------------------------------------------------------------------------
# Allocation cascade
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IndentCalculationBreakdownRow:
    """
    Complete audit record of the five-step cascade for one center.

    Step 1: requirement_by_bonding = effective_requirement × bonding_percentage
    Step 2: adjusted_requirement   = requirement_by_bonding + stock_adjustment
    Step 3: net_requirement        = max(0, adjusted_requirement − forecast_t3)
    Step 4: target_arrival         = net_requirement / (1 + overrun_percentage)
    Step 5: final_indent           = target_arrival / d1_weight   (0 if d1_weight == 0)
    """
    center_id: str
    center_name: str
    # Step 1
    effective_requirement: float
    bonding: float
    total_bonding: float
    bonding_percentage: float
    requirement_by_bonding: float
    # Step 2
    stock_adjustment: float
    adjusted_requirement: float
    # Step 3
    forecast_t3: float
    net_requirement: float
    # Step 4
    overrun_percentage: float
    target_arrival: float
    # Step 5
    d1_weight: float
    final_indent: float


@dataclass(frozen=True)
class IndentResultRow:
    """Published recommendation for one center."""
    center_id: str
    center_name: str
    bonding: float
    adjusted: float
    forecast_t3: float
    indent_to_raise: float


# ---------------------------------------------------------------------------
# Open-indent matrix
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OpenIndentMatrixEntry:
    purchase_date: date
    quantity: float
    kind: str                             # "Actual" | "Forecast"
    d_weight: Optional[float] = None
    d_weight_label: Optional[str] = None  # "D1".."D4" for forecast cells in window
    indent_qty: float = 0.0


@dataclass(frozen=True)
class OpenIndentMatrixRow:
    indent_date: date
    indent_qty: float
    entries: List[OpenIndentMatrixEntry] = field(default_factory=list)


@dataclass(frozen=True)
class OpenIndentMatrixData:
    center_id: str
    center_name: str
    rows: List[OpenIndentMatrixRow] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Season summary
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SeasonProgress:
    planning_date: date
    plant_start_date: date
    days_lapsed: int
    season_total_days: int
    remaining_days: int
    season_purchases: float
    cumulative_run_rate: float
    remaining_qty_needed: float
    net_required_run_rate: float


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalculationResults:
    """Plain results object handed back to the orchestration layer."""
    d_weights: DWeights
    overrun_percentage: float
    effective_requirement: float
    total_forecast_t3: float
    table_data: List[IndentResultRow]
    closed_indent_analysis: List[ClosedIndentAnalysis]
    center_weights: List[CenterWeightProfile]
    forecast_breakdown: List[ForecastBreakdownRow]
    maturity_analysis_purchases: List[NormalizedPurchase]
    open_indent_matrix: List[OpenIndentMatrixData]
    open_indent_matrix_headers: List[date]
    indent_calculation_breakdown: List[IndentCalculationBreakdownRow]
    full_season_analysis: List[ClosedIndentAnalysis]
    season_weights: List[CenterWeightProfile]
    risk_analysis: List[RiskAnalysisItem] = field(default_factory=list)
    season_progress: Optional[SeasonProgress] = None
    applied_constraints: List[Constraint] = field(default_factory=list)

    @property
    def total_indent_to_raise(self) -> float:
        return sum(row.indent_to_raise for row in self.table_data)
