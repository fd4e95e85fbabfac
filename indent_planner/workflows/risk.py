"""
Constraint/risk adjuster.

Operator-declared disruptions on the target day (T+3):
- mill  (demand side): auto-applied, reduces the effective requirement
- field (supply side): advisory only, the forecast reduction is reported in
  the risk ledger but the cascade still uses the unconstrained forecast

At most one constraint of each kind is considered (first match wins).
"""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
import logging

from ..domain.dates import add_days, format_date_gb
from ..domain.models import Constraint, ConstraintKind, RiskAnalysisItem
from ..analytics.pipeline import LEAD_TIME_DAYS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstraintOutcome:
    """Result of applying constraints for one planning day."""
    base_requirement: float
    effective_requirement: float
    total_forecast_t3: float
    constrained_forecast_t3: float
    risk_items: List[RiskAnalysisItem] = field(default_factory=list)
    applied: List[Constraint] = field(default_factory=list)


def base_requirement(target_daily_requirement: float, plant_capacity_percent: float) -> float:
    """Plant requirement before constraints: target × capacity%."""
    return target_daily_requirement * (plant_capacity_percent / 100.0)


def find_constraint(constraints: List[Constraint], kind: ConstraintKind, day: date) -> Optional[Constraint]:
    """First constraint of *kind* dated exactly *day*, or None."""
    for constraint in constraints:
        if constraint.kind == kind and constraint.date == day:
            return constraint
    return None


def apply_constraints(
    constraints: List[Constraint],
    planning_date: date,
    target_daily_requirement: float,
    plant_capacity_percent: float,
    total_forecast_t3: float,
) -> ConstraintOutcome:
    """
    Apply the target-day constraints and build the risk ledger.

    Args:
        constraints: Normalized constraints (any dates)
        planning_date: Day T
        target_daily_requirement: Plant demand at full capacity
        plant_capacity_percent: Capacity in percent (100 = full)
        total_forecast_t3: Unconstrained pipeline forecast for T+3

    Returns:
        ConstraintOutcome with the effective requirement for the cascade
    """
    target_day = add_days(planning_date, LEAD_TIME_DAYS)
    requirement = base_requirement(target_daily_requirement, plant_capacity_percent)
    effective = requirement
    constrained_forecast = total_forecast_t3
    risk_items = []
    applied = []

    mill = find_constraint(constraints, ConstraintKind.MILL, target_day)
    if mill is not None:
        reduction = requirement * mill.impact_factor
        effective = requirement - reduction
        applied.append(mill)
        risk_items.append(RiskAnalysisItem(
            date=target_day,
            kind=ConstraintKind.MILL,
            original_value=requirement,
            constrained_value=effective,
            deficit=reduction,
            message=(
                f"Mill constraint on {format_date_gb(target_day)} ({mill.description}) "
                f"reduced effective requirement by {mill.impact_factor * 100:.0f}%."
            ),
        ))
        logger.info(f"Mill constraint on {target_day}: requirement {requirement:.2f} -> {effective:.2f}")

    # Advisory only: does not change the cascade inputs
    field_constraint = find_constraint(constraints, ConstraintKind.FIELD, target_day)
    if field_constraint is not None:
        reduction = total_forecast_t3 * field_constraint.impact_factor
        constrained_forecast = total_forecast_t3 - reduction
        applied.append(field_constraint)
        risk_items.append(RiskAnalysisItem(
            date=target_day,
            kind=ConstraintKind.FIELD,
            original_value=total_forecast_t3,
            constrained_value=constrained_forecast,
            deficit=reduction,
            message=(
                f"Field constraint on {format_date_gb(target_day)} ({field_constraint.description}) "
                f"is projected to impact arrivals by ~{round(reduction):,} Qtls."
            ),
        ))
        logger.warning(f"Field constraint on {target_day}: projected arrival deficit {reduction:.2f}")

    return ConstraintOutcome(
        base_requirement=requirement,
        effective_requirement=effective,
        total_forecast_t3=total_forecast_t3,
        constrained_forecast_t3=constrained_forecast,
        risk_items=risk_items,
        applied=applied,
    )
