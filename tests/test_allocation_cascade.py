"""
Tests for the allocation cascade.

Validates:
1. Bonding distribution conserves the effective requirement
2. Stock deficits are split within the gate / non-gate cohorts
3. Net requirement is never negative
4. Overrun and D1 corrections, with every zero denominator guarded
"""
import math

import pytest

from indent_planner.domain.models import DWeights, NormalizedBonding, NormalizedIndent, NormalizedPurchase
from indent_planner.workflows.allocation import (
    StockPosition,
    compute_overrun_percentage,
    recommended_by_center,
    run_allocation_cascade,
    to_result_rows,
)

from conftest import day


BONDING = [
    NormalizedBonding(center_id="A", center_name="Alpha", committed_qty=300.0),
    NormalizedBonding(center_id="B", center_name="Beta", committed_qty=100.0),
    NormalizedBonding(center_id="G", center_name="Plant GATE", committed_qty=100.0, is_gate_center=True),
]
WEIGHTS = {c.center_id: DWeights(0.5, 0.2, 0.2, 0.1) for c in BONDING}


def _run(effective=1000.0, forecast=None, weights=None, overrun=0.0, stock=None):
    return run_allocation_cascade(
        BONDING,
        effective,
        forecast or {},
        WEIGHTS if weights is None else weights,
        overrun,
        stock or StockPosition(),
    )


class TestOverrun:
    def test_overrun(self):
        """Purchases 10% above indents give an overrun of 0.1."""
        indents = [NormalizedIndent(center_id="A", issued_for_date=day(-5), quantity=100.0)]
        purchases = [NormalizedPurchase(center_id="A", purchase_date=day(-5), related_indent_date=None, quantity=110.0)]
        assert compute_overrun_percentage(indents, purchases) == pytest.approx(0.1)

    def test_no_indents_means_no_overrun(self):
        """No indent history means no overrun correction."""
        purchases = [NormalizedPurchase(center_id="A", purchase_date=day(-5), related_indent_date=None, quantity=110.0)]
        assert compute_overrun_percentage([], purchases) == 0.0


class TestCascade:
    def test_bonding_distribution_conserves_requirement(self):
        """Bonding shares add back up to the effective requirement."""
        rows = _run()
        assert sum(r.requirement_by_bonding for r in rows) == pytest.approx(1000.0)
        assert [r.bonding_percentage for r in rows] == pytest.approx([0.6, 0.2, 0.2])
        assert all(r.total_bonding == 500.0 for r in rows)

    def test_stock_adjustment_by_cohort(self):
        """Gate and non-gate deficits are split only within their own cohort."""
        stock = StockPosition(
            standard_stock_centre=500.0,
            available_stock_centre=100.0,
            standard_stock_gate=50.0,
            available_stock_gate=80.0,
        )
        rows = {r.center_id: r for r in _run(stock=stock)}
        assert rows["A"].stock_adjustment == pytest.approx(300.0)
        assert rows["B"].stock_adjustment == pytest.approx(100.0)
        assert rows["G"].stock_adjustment == pytest.approx(-30.0)
        assert rows["G"].adjusted_requirement == pytest.approx(170.0)

    def test_net_requirement_never_negative(self):
        """A forecast above the requirement floors the net requirement at 0."""
        rows = {r.center_id: r for r in _run(forecast={"A": 5000.0})}
        assert rows["A"].net_requirement == 0.0
        assert rows["A"].final_indent == 0.0
        assert all(r.net_requirement >= 0 for r in rows.values())

    def test_overrun_and_d1_gross_up(self):
        """Net 500 with 25% overrun and D1 0.5 gives an 800 indent."""
        rows = {r.center_id: r for r in _run(forecast={"A": 100.0}, overrun=0.25)}
        a = rows["A"]
        assert a.net_requirement == pytest.approx(500.0)
        assert a.target_arrival == pytest.approx(400.0)
        assert a.final_indent == pytest.approx(800.0)

    def test_zero_d1_gives_zero_indent(self):
        """A center with no D1 history gets no indent."""
        weights = dict(WEIGHTS, B=DWeights(0.0, 0.5, 0.3, 0.2))
        rows = {r.center_id: r for r in _run(weights=weights)}
        assert rows["B"].net_requirement > 0
        assert rows["B"].final_indent == 0.0

    def test_missing_weights_give_zero_indent(self):
        """Centers without weights get no indent."""
        rows = _run(weights={})
        assert all(r.d1_weight == 0.0 and r.final_indent == 0.0 for r in rows)

    def test_full_overrun_collapse_is_guarded(self):
        """An overrun of -100% yields a zero target, not a division error."""
        rows = _run(overrun=-1.0)
        assert all(r.target_arrival == 0.0 for r in rows)

    def test_empty_gate_cohort(self):
        """A gate deficit with no gate centers adjusts nobody."""
        bonding = [NormalizedBonding(center_id="A", center_name="Alpha", committed_qty=100.0)]
        rows = run_allocation_cascade(
            bonding, 100.0, {}, WEIGHTS, 0.0,
            StockPosition(standard_stock_gate=1000.0),
        )
        assert rows[0].stock_adjustment == 0.0

    def test_no_bonding(self):
        """No bonded centers, no rows."""
        assert run_allocation_cascade([], 1000.0, {}, {}, 0.0, StockPosition()) == []

    def test_outputs_are_finite(self):
        """Degenerate inputs never produce NaN or Infinity."""
        rows = _run(effective=0.0, overrun=-1.0, weights={})
        for row in rows:
            for value in (row.requirement_by_bonding, row.target_arrival, row.final_indent):
                assert math.isfinite(value)


class TestProjections:
    def test_result_rows_and_recommendations(self):
        """Published rows and recommendations mirror the audit rows."""
        breakdown = _run()
        table = to_result_rows(breakdown)
        assert [r.center_id for r in table] == ["A", "B", "G"]
        assert table[0].indent_to_raise == breakdown[0].final_indent
        assert table[0].adjusted == breakdown[0].adjusted_requirement
        assert recommended_by_center(breakdown) == {r.center_id: r.final_indent for r in breakdown}
