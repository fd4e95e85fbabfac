"""
Maturity weight estimation: how fast material historically arrives after
being ordered, per center.

Approach:
- Recent window: closed indents issued T-7..T-4, cumulative bucketing,
  plain average of per-indent ratios (purchases / indent qty)
- Season window: every indent since plant start, strict bucketing,
  average of the positive ratios only (AVERAGEIF(range, ">0"))
- Fallback: a recent average below FALLBACK_THRESHOLD is replaced by the
  season average for that bucket
- Global weights: ratio of summed purchases to (1 + summed indent qty) over the
  recent window (ratio-of-sums, unlike the per-center average-of-ratios)

Output: Always non-negative.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple
import logging

import numpy as np

from .domain.dates import add_days, day_offset
from .domain.models import (
    CenterWeightProfile,
    ClosedIndentAnalysis,
    DayBucket,
    DWeights,
    NormalizedBonding,
    NormalizedIndent,
    NormalizedPurchase,
)


logger = logging.getLogger(__name__)


# Recent averages strictly below this use the season value instead
FALLBACK_THRESHOLD = 0.10

# An indent issued on T-4 has its D4 day on T-1, so indents <= T-4 are closed
CLOSED_AFTER_DAYS = 4

# Oldest indent (T-7) included in the recent window
RECENT_WINDOW_DAYS = 7

BUCKETS = (DayBucket.D1, DayBucket.D2, DayBucket.D3, DayBucket.D4)


# ---------------------------------------------------------------------------
# Bucketing strategies
# ---------------------------------------------------------------------------

class CumulativeBucketing:
    """
    Recent-window rule: nothing is dropped.

    offset <= 0 → D1, 1 → D2, 2 → D3, >= 3 → D4
    """

    @staticmethod
    def bucket_for(offset: int) -> Optional[DayBucket]:
        if offset <= 0:
            return DayBucket.D1
        if offset == 1:
            return DayBucket.D2
        if offset == 2:
            return DayBucket.D3
        return DayBucket.D4


class StrictBucketing:
    """
    Season-window rule: only exact offsets 0..3 count.

    Early deliveries (offset < 0) and late ones (offset > 3) are dropped.
    """

    _BY_OFFSET = {0: DayBucket.D1, 1: DayBucket.D2, 2: DayBucket.D3, 3: DayBucket.D4}

    @classmethod
    def bucket_for(cls, offset: int) -> Optional[DayBucket]:
        return cls._BY_OFFSET.get(offset)


def analyze_indent_maturity(
    indent: NormalizedIndent,
    related_purchases: Iterable[NormalizedPurchase],
    center_name: str,
    bucketing=CumulativeBucketing,
) -> ClosedIndentAnalysis:
    """
    Sum an indent's purchases per day bucket.

    Args:
        indent: The indent being analyzed
        related_purchases: Purchases whose related_indent_date is the indent's date
        center_name: Display name (bonding name or "Unknown")
        bucketing: CumulativeBucketing or StrictBucketing

    Returns:
        ClosedIndentAnalysis for the indent
    """
    sums = {bucket: 0.0 for bucket in BUCKETS}
    for purchase in related_purchases:
        bucket = bucketing.bucket_for(day_offset(indent.issued_for_date, purchase.purchase_date))
        if bucket is not None:
            sums[bucket] += purchase.quantity

    return ClosedIndentAnalysis(
        center_id=indent.center_id,
        center_name=center_name,
        issued_for_date=indent.issued_for_date,
        indent_qty=indent.quantity,
        d1_purchases=sums[DayBucket.D1],
        d2_purchases=sums[DayBucket.D2],
        d3_purchases=sums[DayBucket.D3],
        d4_purchases=sums[DayBucket.D4],
    )


# ---------------------------------------------------------------------------
# Averages and fallback
# ---------------------------------------------------------------------------

def average_of_ratios(analyses: List[ClosedIndentAnalysis], bucket: DayBucket) -> float:
    """Plain mean of per-indent ratios (0 for an empty window)."""
    if not analyses:
        return 0.0
    ratios = np.array([a.ratio(bucket) for a in analyses], dtype=float)
    return float(ratios.mean())


def average_of_positive_ratios(analyses: List[ClosedIndentAnalysis], bucket: DayBucket) -> float:
    """
    Mean of the strictly positive, finite ratios only.

    A zero ratio is excluded from the average, not counted as zero:
    ratios [0, 0.2, 0.4] average to 0.3.
    """
    if not analyses:
        return 0.0
    ratios = np.array([a.ratio(bucket) for a in analyses], dtype=float)
    positive = ratios[np.isfinite(ratios) & (ratios > 0)]
    if positive.size == 0:
        return 0.0
    return float(positive.mean())


def resolve_weight(recent_avg: float, season_avg: float) -> Tuple[float, bool]:
    """
    Choose between the recent and the season weight for one bucket.

    Returns:
        (value, used_fallback): season value with True when recent_avg is below
        FALLBACK_THRESHOLD, else recent value with False
    """
    if recent_avg < FALLBACK_THRESHOLD:
        return season_avg, True
    return recent_avg, False


def ratio_of_sums(analyses: List[ClosedIndentAnalysis]) -> DWeights:
    """
    Global weights: Σ bucket purchases / (1 + Σ indent qty).

    The denominator is seeded with 1; an empty window gives 0.
    """
    total_indent = 1.0 + sum(a.indent_qty for a in analyses)
    return DWeights(*(sum(a.purchases_for(b) for a in analyses) / total_indent for b in BUCKETS))


# ---------------------------------------------------------------------------
# Estimator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MaturityWeightsResult:
    """Everything the estimator derives, for the forecaster and for reporting."""
    center_weights: Dict[str, DWeights]
    global_weights: DWeights
    closed_indent_analysis: List[ClosedIndentAnalysis]
    center_profiles: List[CenterWeightProfile]
    maturity_analysis_purchases: List[NormalizedPurchase]
    full_season_analysis: List[ClosedIndentAnalysis]
    season_profiles: List[CenterWeightProfile] = field(default_factory=list)


def index_purchases_by_indent(
    purchases: Iterable[NormalizedPurchase],
) -> Dict[Tuple[str, date], List[NormalizedPurchase]]:
    """Group purchases by (center_id, related_indent_date); unlinked purchases are skipped."""
    index: Dict[Tuple[str, date], List[NormalizedPurchase]] = {}
    for purchase in purchases:
        if purchase.related_indent_date is None:
            continue
        index.setdefault((purchase.center_id, purchase.related_indent_date), []).append(purchase)
    return index


def estimate_maturity_weights(
    indents: List[NormalizedIndent],
    purchases: List[NormalizedPurchase],
    bonding: List[NormalizedBonding],
    planning_date: date,
    plant_start_date: date,
) -> MaturityWeightsResult:
    """
    Derive per-center D-weights with fallback, plus global weights.

    Args:
        indents: Normalized indents
        purchases: Normalized purchases
        bonding: Normalized bonding (defines the set of centers profiled)
        planning_date: Day T
        plant_start_date: First day of the season window

    Returns:
        MaturityWeightsResult
    """
    names = {b.center_id: b.center_name for b in bonding}
    by_indent = index_purchases_by_indent(purchases)

    def _analyze(indent: NormalizedIndent, bucketing) -> ClosedIndentAnalysis:
        return analyze_indent_maturity(
            indent,
            by_indent.get((indent.center_id, indent.issued_for_date), []),
            names.get(indent.center_id, "Unknown"),
            bucketing,
        )

    closed_cutoff = add_days(planning_date, -CLOSED_AFTER_DAYS)
    recent_start = add_days(planning_date, -RECENT_WINDOW_DAYS)

    full_season_analysis = [
        _analyze(indent, StrictBucketing)
        for indent in indents
        if indent.issued_for_date >= plant_start_date
    ]
    closed_indent_analysis = [
        _analyze(indent, CumulativeBucketing)
        for indent in indents
        if recent_start <= indent.issued_for_date <= closed_cutoff
    ]

    recent_by_center: Dict[str, List[ClosedIndentAnalysis]] = {}
    for analysis in closed_indent_analysis:
        recent_by_center.setdefault(analysis.center_id, []).append(analysis)
    season_by_center: Dict[str, List[ClosedIndentAnalysis]] = {}
    for analysis in full_season_analysis:
        season_by_center.setdefault(analysis.center_id, []).append(analysis)

    center_weights: Dict[str, DWeights] = {}
    center_profiles: List[CenterWeightProfile] = []
    season_profiles: List[CenterWeightProfile] = []

    for center in bonding:
        recent = recent_by_center.get(center.center_id, [])
        season = season_by_center.get(center.center_id, [])

        recent_avgs = DWeights(*(average_of_ratios(recent, b) for b in BUCKETS))
        season_avgs = DWeights(*(average_of_positive_ratios(season, b) for b in BUCKETS))

        resolved = [resolve_weight(r, s) for r, s in zip(recent_avgs.as_tuple(), season_avgs.as_tuple())]
        weights = DWeights(*(value for value, _ in resolved))
        fallback_flags = tuple(used for _, used in resolved)

        center_weights[center.center_id] = weights
        center_profiles.append(CenterWeightProfile(
            center_id=center.center_id,
            center_name=center.center_name,
            weights=weights,
            recent_averages=recent_avgs,
            fallback_used=fallback_flags,
        ))
        season_profiles.append(CenterWeightProfile(
            center_id=center.center_id,
            center_name=center.center_name,
            weights=season_avgs,
        ))

        if any(fallback_flags):
            logger.debug(f"Center {center.center_id}: season fallback used for {fallback_flags}")

    global_weights = ratio_of_sums(closed_indent_analysis)

    logger.debug(
        f"Maturity weights: {len(closed_indent_analysis)} recent closed indents, "
        f"{len(full_season_analysis)} season indents, {len(center_profiles)} centers"
    )

    return MaturityWeightsResult(
        center_weights=center_weights,
        global_weights=global_weights,
        closed_indent_analysis=closed_indent_analysis,
        center_profiles=center_profiles,
        maturity_analysis_purchases=list(purchases),
        full_season_analysis=full_season_analysis,
        season_profiles=season_profiles,
    )
