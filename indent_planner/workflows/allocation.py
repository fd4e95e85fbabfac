"""
Allocation cascade: plant-level requirement → per-center indent for T+3.

Five strictly ordered steps per center (no rounding, presentation rounds):

    1. Bonding distribution  requirement = effective × bonding / total_bonding
    2. Stock adjustment      + cohort (standard − available) × bonding / cohort_bonding
    3. Forecast subtraction  net = max(0, adjusted − forecast_t3)
    4. Overrun correction    target = net / (1 + overrun)
    5. D1 gross-up           final = target / d1   (0 when d1 == 0)

Gate and non-gate centers form separate stock cohorts. Every denominator is
guarded: zero bonding, zero D1 or empty history yields 0, never NaN/Infinity.
"""
from dataclasses import dataclass
from typing import Dict, List, Mapping
import logging

from ..domain.contracts import IndentCalculationBreakdownRow, IndentResultRow
from ..domain.models import DWeights, NormalizedBonding, NormalizedIndent, NormalizedPurchase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockPosition:
    """Yard stock targets and actuals for the two cohorts."""
    standard_stock_centre: float = 0.0
    standard_stock_gate: float = 0.0
    available_stock_centre: float = 0.0
    available_stock_gate: float = 0.0

    @property
    def centre_deficit(self) -> float:
        """Positive when the non-gate cohort is below standard."""
        return self.standard_stock_centre - self.available_stock_centre

    @property
    def gate_deficit(self) -> float:
        return self.standard_stock_gate - self.available_stock_gate


def compute_overrun_percentage(
    indents: List[NormalizedIndent],
    purchases: List[NormalizedPurchase],
) -> float:
    """
    Plant-wide overrun: total purchases / total indents − 1.

    Uses all normalized data, not just closed indents. 0 when there are no indents.
    """
    total_indent = sum(i.quantity for i in indents)
    total_purchase = sum(p.quantity for p in purchases)
    if total_indent <= 0:
        return 0.0
    return total_purchase / total_indent - 1.0


def _safe_divide(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def run_allocation_cascade(
    bonding: List[NormalizedBonding],
    effective_requirement: float,
    forecast_by_center: Mapping[str, float],
    center_weights: Mapping[str, DWeights],
    overrun_percentage: float,
    stock: StockPosition,
) -> List[IndentCalculationBreakdownRow]:
    """
    Run the five-step cascade for every bonded center.

    Args:
        bonding: Normalized bonding (defines centers and output order)
        effective_requirement: Plant requirement after mill constraints
        forecast_by_center: center_id -> pipeline forecast for T+3
        center_weights: center_id -> resolved DWeights
        overrun_percentage: Plant-wide overrun (see compute_overrun_percentage)
        stock: Yard stock position per cohort

    Returns:
        One IndentCalculationBreakdownRow per center
    """
    total_bonding = sum(b.committed_qty for b in bonding)
    total_bonding_gate = sum(b.committed_qty for b in bonding if b.is_gate_center)
    total_bonding_centre = sum(b.committed_qty for b in bonding if not b.is_gate_center)
    overrun_divisor = 1.0 + overrun_percentage

    rows = []
    for center in bonding:
        # Step 1
        bonding_percentage = _safe_divide(center.committed_qty, total_bonding)
        requirement_by_bonding = effective_requirement * bonding_percentage

        # Step 2
        if center.is_gate_center:
            stock_adjustment = stock.gate_deficit * _safe_divide(center.committed_qty, total_bonding_gate)
        else:
            stock_adjustment = stock.centre_deficit * _safe_divide(center.committed_qty, total_bonding_centre)
        adjusted_requirement = requirement_by_bonding + stock_adjustment

        # Step 3
        forecast_t3 = forecast_by_center.get(center.center_id, 0.0)
        net_requirement = max(0.0, adjusted_requirement - forecast_t3)

        # Step 4
        target_arrival = _safe_divide(net_requirement, overrun_divisor)

        # Step 5
        weights = center_weights.get(center.center_id)
        d1_weight = weights.d1 if weights is not None else 0.0
        final_indent = _safe_divide(target_arrival, d1_weight)

        rows.append(IndentCalculationBreakdownRow(
            center_id=center.center_id,
            center_name=center.center_name,
            effective_requirement=effective_requirement,
            bonding=center.committed_qty,
            total_bonding=total_bonding,
            bonding_percentage=bonding_percentage,
            requirement_by_bonding=requirement_by_bonding,
            stock_adjustment=stock_adjustment,
            adjusted_requirement=adjusted_requirement,
            forecast_t3=forecast_t3,
            net_requirement=net_requirement,
            overrun_percentage=overrun_percentage,
            target_arrival=target_arrival,
            d1_weight=d1_weight,
            final_indent=final_indent,
        ))

        if d1_weight <= 0 and net_requirement > 0:
            logger.warning(
                f"Center {center.center_id}: net requirement {net_requirement:.2f} but D1 weight is 0, "
                f"no indent recommended"
            )

    return rows


def to_result_rows(breakdown: List[IndentCalculationBreakdownRow]) -> List[IndentResultRow]:
    """Project the audit rows onto the published recommendation table."""
    return [
        IndentResultRow(
            center_id=row.center_id,
            center_name=row.center_name,
            bonding=row.bonding,
            adjusted=row.adjusted_requirement,
            forecast_t3=row.forecast_t3,
            indent_to_raise=row.final_indent,
        )
        for row in breakdown
    ]


def recommended_by_center(breakdown: List[IndentCalculationBreakdownRow]) -> Dict[str, float]:
    return {row.center_id: row.final_indent for row in breakdown}
