"""
Pipeline forecaster for the T+3 target day.

Projects arrivals on T+3 coming purely from indents already placed for
T+2, T+1 and T, using each center's D2, D3 and D4 weights. The D1 share of
T+3 belongs to the indent this engine is about to recommend, so it is
reported as a zero contribution and never enters the forecast total.
"""

from datetime import date
from typing import Dict, List, Tuple
import logging

from ..domain.contracts import ForecastBreakdownRow, ForecastContribution
from ..domain.dates import add_days
from ..domain.models import DWeights, NormalizedBonding, NormalizedIndent, ZERO_WEIGHTS

logger = logging.getLogger(__name__)

# Days between an indent and the bulk arrival it is planned for
LEAD_TIME_DAYS = 3


def index_indents(indents: List[NormalizedIndent]) -> Dict[Tuple[str, date], NormalizedIndent]:
    """Map (center_id, issued_for_date) -> indent (keys are unique after normalization)."""
    return {(i.center_id, i.issued_for_date): i for i in indents}


def _contribution(indent, issued_for: date, weight: float) -> ForecastContribution:
    qty = indent.quantity if indent is not None else 0.0
    return ForecastContribution(
        indent_date=issued_for if indent is not None else None,
        indent_qty=qty,
        weight=weight,
        result=qty * weight,
    )


def forecast_pipeline_arrivals(
    indents: List[NormalizedIndent],
    center_weights: Dict[str, DWeights],
    planning_date: date,
    bonding: List[NormalizedBonding],
) -> Tuple[List[ForecastBreakdownRow], float]:
    """
    Forecast T+3 arrivals per center from indents already placed.

    Args:
        indents: Normalized indents
        center_weights: center_id -> resolved DWeights (missing → all zero)
        planning_date: Day T
        bonding: Centers to forecast, in output order

    Returns:
        (forecast_breakdown, total_forecast_t3)

    Example:
        >>> # T+2 indent 100 × D2 0.3 + T+1 indent 200 × D3 0.1 + T indent 0 × D4
        >>> # = 30 + 20 = 50 for that center
    """
    by_key = index_indents(indents)
    target_day = add_days(planning_date, LEAD_TIME_DAYS)
    t_plus_2 = add_days(planning_date, 2)
    t_plus_1 = add_days(planning_date, 1)

    breakdown = []
    total_forecast = 0.0

    for center in bonding:
        weights = center_weights.get(center.center_id, ZERO_WEIGHTS)

        d2 = _contribution(by_key.get((center.center_id, t_plus_2)), t_plus_2, weights.d2)
        d3 = _contribution(by_key.get((center.center_id, t_plus_1)), t_plus_1, weights.d3)
        d4 = _contribution(by_key.get((center.center_id, planning_date)), planning_date, weights.d4)
        d1 = ForecastContribution(indent_date=target_day, indent_qty=0.0, weight=weights.d1, result=0.0)

        center_forecast = d2.result + d3.result + d4.result
        total_forecast += center_forecast

        breakdown.append(ForecastBreakdownRow(
            center_id=center.center_id,
            center_name=center.center_name,
            bonding=center.committed_qty,
            d1=d1,
            d2=d2,
            d3=d3,
            d4=d4,
            total_forecast=center_forecast,
        ))

    logger.debug(f"Pipeline forecast for {target_day}: {total_forecast:.2f} across {len(breakdown)} centers")

    return breakdown, total_forecast
