"""
Open-indent matrix: calendar read model (T-3 .. T+6) per center.

For every open indent (issued T-3..T+3) each header day shows either the
actual purchases already bucketed onto that day (days before T) or the
forecast arrival indent_qty × D-weight (T and later). The T+3 indent of each
bonded center is the engine's own recommendation, replacing any placeholder
in the history. Nothing here feeds back into the numbers.
"""

from datetime import date
from typing import Dict, List, Mapping, Tuple
import logging

from ..domain.contracts import OpenIndentMatrixData, OpenIndentMatrixEntry, OpenIndentMatrixRow
from ..domain.dates import add_days, date_range, day_offset
from ..domain.models import (
    DWeights,
    NormalizedBonding,
    NormalizedIndent,
    NormalizedPurchase,
    ZERO_WEIGHTS,
)
from ..maturity import BUCKETS, CumulativeBucketing, index_purchases_by_indent

logger = logging.getLogger(__name__)

MATRIX_START_OFFSET = -3
MATRIX_END_OFFSET = 6

# Indents issued in this window (relative to T) are still open
OPEN_INDENT_START_OFFSET = -3
OPEN_INDENT_END_OFFSET = 3


def matrix_headers(planning_date: date) -> List[date]:
    return date_range(
        add_days(planning_date, MATRIX_START_OFFSET),
        add_days(planning_date, MATRIX_END_OFFSET),
    )


def select_open_indents(
    indents: List[NormalizedIndent],
    bonding: List[NormalizedBonding],
    planning_date: date,
    recommended: Mapping[str, float],
) -> List[NormalizedIndent]:
    """
    Open indents plus the injected T+3 recommendation.

    Existing T+3 indents of bonded centers are dropped in favour of the
    recommended quantity (0 when the center has no recommendation).
    """
    open_start = add_days(planning_date, OPEN_INDENT_START_OFFSET)
    target_day = add_days(planning_date, OPEN_INDENT_END_OFFSET)
    bonded = {b.center_id for b in bonding}

    existing = [
        i for i in indents
        if open_start <= i.issued_for_date <= target_day
        and not (i.issued_for_date == target_day and i.center_id in bonded)
    ]
    injected = [
        NormalizedIndent(
            center_id=b.center_id,
            issued_for_date=target_day,
            quantity=recommended.get(b.center_id, 0.0),
        )
        for b in bonding
    ]
    return existing + injected


def _actuals_by_day(indent: NormalizedIndent, purchases: List[NormalizedPurchase]) -> Dict[date, float]:
    """Actual purchases placed on indent date + 0..3 with cumulative bucketing."""
    actuals: Dict[date, float] = {}
    for purchase in purchases:
        bucket = CumulativeBucketing.bucket_for(day_offset(indent.issued_for_date, purchase.purchase_date))
        day = add_days(indent.issued_for_date, BUCKETS.index(bucket))
        actuals[day] = actuals.get(day, 0.0) + purchase.quantity
    return actuals


def _build_row(
    indent: NormalizedIndent,
    purchases: List[NormalizedPurchase],
    weights: DWeights,
    headers: List[date],
    planning_date: date,
) -> OpenIndentMatrixRow:
    actuals = _actuals_by_day(indent, purchases)
    entries = []
    for header in headers:
        if header < planning_date:
            entries.append(OpenIndentMatrixEntry(
                purchase_date=header,
                quantity=actuals.get(header, 0.0),
                kind="Actual",
                indent_qty=indent.quantity,
            ))
            continue

        offset = day_offset(indent.issued_for_date, header)
        if 0 <= offset < len(BUCKETS):
            bucket = BUCKETS[offset]
            weight = weights.get(bucket)
            entries.append(OpenIndentMatrixEntry(
                purchase_date=header,
                quantity=indent.quantity * weight,
                kind="Forecast",
                d_weight=weight,
                d_weight_label=bucket.value,
                indent_qty=indent.quantity,
            ))
        else:
            entries.append(OpenIndentMatrixEntry(
                purchase_date=header,
                quantity=0.0,
                kind="Forecast",
                indent_qty=indent.quantity,
            ))

    return OpenIndentMatrixRow(indent_date=indent.issued_for_date, indent_qty=indent.quantity, entries=entries)


def build_open_indent_matrix(
    indents: List[NormalizedIndent],
    purchases: List[NormalizedPurchase],
    center_weights: Mapping[str, DWeights],
    bonding: List[NormalizedBonding],
    planning_date: date,
    recommended: Mapping[str, float],
) -> Tuple[List[OpenIndentMatrixData], List[date]]:
    """
    Build the per-center open-indent calendar.

    Args:
        indents: Normalized indents
        purchases: Normalized purchases
        center_weights: center_id -> DWeights
        bonding: Centers to include, in output order
        planning_date: Day T
        recommended: center_id -> final indent for T+3

    Returns:
        (matrix, headers) with headers T-3..T+6 and rows sorted by indent date
    """
    headers = matrix_headers(planning_date)
    relevant = select_open_indents(indents, bonding, planning_date, recommended)
    by_indent = index_purchases_by_indent(purchases)

    matrix = []
    for center in bonding:
        weights = center_weights.get(center.center_id, ZERO_WEIGHTS)
        center_indents = sorted(
            (i for i in relevant if i.center_id == center.center_id),
            key=lambda i: i.issued_for_date,
        )
        rows = [
            _build_row(
                indent,
                by_indent.get((indent.center_id, indent.issued_for_date), []),
                weights,
                headers,
                planning_date,
            )
            for indent in center_indents
        ]
        matrix.append(OpenIndentMatrixData(center_id=center.center_id, center_name=center.center_name, rows=rows))

    logger.debug(f"Open-indent matrix: {len(matrix)} centers, {len(headers)} days")
    return matrix, headers
