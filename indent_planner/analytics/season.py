"""Season run-rate summary: how the season is tracking against its crushing target."""

from datetime import date
from typing import List

from ..domain.contracts import SeasonProgress
from ..domain.dates import days_between
from ..domain.models import NormalizedPurchase


def compute_season_progress(
    purchases: List[NormalizedPurchase],
    planning_date: date,
    plant_start_date: date,
    season_total_days: int,
    seasonal_crushing_capacity: float,
) -> SeasonProgress:
    """
    Cumulative run rate so far vs. the run rate still needed.

    Both day counts are floored at 1 so the rates are always defined.
    Purchases dated plant_start_date..planning_date (inclusive) count as season purchases.
    """
    days_lapsed = max(1, days_between(plant_start_date, planning_date))
    season_purchases = sum(
        p.quantity for p in purchases
        if plant_start_date <= p.purchase_date <= planning_date
    )
    remaining_days = max(1, season_total_days - days_lapsed)
    remaining_qty_needed = max(0.0, seasonal_crushing_capacity - season_purchases)

    return SeasonProgress(
        planning_date=planning_date,
        plant_start_date=plant_start_date,
        days_lapsed=days_lapsed,
        season_total_days=season_total_days,
        remaining_days=remaining_days,
        season_purchases=season_purchases,
        cumulative_run_rate=season_purchases / days_lapsed,
        remaining_qty_needed=remaining_qty_needed,
        net_required_run_rate=remaining_qty_needed / remaining_days,
    )
