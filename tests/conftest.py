"""
Shared builders for indent-planner tests.

Rows are built the way the loader hands them over: string cells keyed by
the original CSV headers.
"""
from datetime import date, timedelta

import pytest

from indent_planner.domain.contracts import CalculationInputs


PLANNING_DATE = date(2025, 11, 20)


def day(offset: int) -> date:
    """PLANNING_DATE + offset days."""
    return PLANNING_DATE + timedelta(days=offset)


def bonding_row(code, name, qty):
    return {"Code": code, "Center": name, "Bonding": str(qty)}


def indent_row(code, issued_for, qty):
    return {"Code": code, "Center Name": "", "Indent Date": issued_for.isoformat(), "Qty in Qtls": str(qty)}


def purchase_row(code, purchase_date, indent_date, qty):
    return {
        "Code": code,
        "Center Name": "",
        "Purchase Date": purchase_date.isoformat(),
        "Indent Date": indent_date.isoformat() if indent_date else "",
        "Qty in Qtls": str(qty),
    }


def make_inputs(bonding, indents, purchases, **overrides) -> CalculationInputs:
    params = dict(
        planning_date=PLANNING_DATE,
        plant_capacity_percent=100.0,
        target_daily_requirement=1000.0,
        plant_start_date=day(-30).isoformat(),
        season_total_days=150,
        seasonal_crushing_capacity=100000.0,
    )
    params.update(overrides)
    return CalculationInputs(bonding_rows=bonding, indent_rows=indents, purchase_rows=purchases, **params)


@pytest.fixture
def single_center_data():
    """
    One center, 100% bonding, D1 = 0.5, zero overrun, nothing in the pipeline.

    Indent T-5: 100 → 50 arrive same day (D1), 50 arrive on T-2 (D4).
    """
    bonding = [bonding_row("C1", "Alpha", 1000)]
    indents = [indent_row("C1", day(-5), 100)]
    purchases = [
        purchase_row("C1", day(-5), day(-5), 50),
        purchase_row("C1", day(-2), day(-5), 50),
    ]
    return bonding, indents, purchases


@pytest.fixture
def two_center_data():
    """
    Non-gate center A (bonding 600) and gate center G (bonding 400).

    A: closed indent T-5 of 100 → ratios D1..D4 = 0.4, 0.3, 0.2, 0.1
       open indents T: 50, T+1: 200, T+2: 100  → pipeline 5 + 40 + 30 = 75
    G: closed indent T-6 of 200 → ratios 0.5, 0.3, 0.2, 0.0 (D4 falls back to season 0)
       open indent T: 100 → pipeline 100 × 0 = 0
    """
    bonding = [bonding_row("A", "Alpha", 600), bonding_row("G", "Main GATE", 400)]
    indents = [
        indent_row("A", day(-5), 100),
        indent_row("A", day(0), 50),
        indent_row("A", day(1), 200),
        indent_row("A", day(2), 100),
        indent_row("G", day(-6), 200),
        indent_row("G", day(0), 100),
    ]
    purchases = [
        purchase_row("A", day(-5), day(-5), 40),
        purchase_row("A", day(-4), day(-5), 30),
        purchase_row("A", day(-3), day(-5), 20),
        purchase_row("A", day(-2), day(-5), 10),
        purchase_row("G", day(-6), day(-6), 100),
        purchase_row("G", day(-5), day(-6), 60),
        purchase_row("G", day(-4), day(-6), 40),
    ]
    return bonding, indents, purchases
