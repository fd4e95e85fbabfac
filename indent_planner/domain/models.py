"""
Domain models for indent-planner.

Pure data classes + value objects. No I/O, no side effects.
Every instance is rebuilt on each engine call; identity is the
center id and/or date key only.
"""
from dataclasses import dataclass, field
from enum import Enum
from datetime import date as Date
import math
from typing import Optional


class ConstraintKind(Enum):
    """Operator-declared disruption kinds."""
    MILL = "mill"      # Demand side: plant crushes less on the target day
    FIELD = "field"    # Supply side: weather/field issues slow arrivals


class DayBucket(Enum):
    """Relative arrival day of a purchase against its indent date."""
    D1 = "D1"   # same day or earlier
    D2 = "D2"   # +1
    D3 = "D3"   # +2
    D4 = "D4"   # +3 (or later, cumulative bucketing only)


@dataclass(frozen=True)
class NormalizedBonding:
    """A center's committed supply share (one row per center)."""
    center_id: str
    center_name: str
    committed_qty: float
    is_gate_center: bool = False

    def __post_init__(self):
        if not self.center_id or not self.center_id.strip():
            raise ValueError("Center id cannot be empty")
        if self.committed_qty <= 0:
            raise ValueError(f"Committed qty must be > 0 for {self.center_id}")


@dataclass(frozen=True)
class NormalizedIndent:
    """A historical order placed on a center for a given day."""
    center_id: str
    issued_for_date: Date
    quantity: float


@dataclass(frozen=True)
class NormalizedPurchase:
    """
    An actual delivery.

    related_indent_date links the delivery back to the indent that caused it;
    deliveries without it still count for overrun but never for maturity.
    """
    center_id: str
    purchase_date: Date
    related_indent_date: Optional[Date]
    quantity: float


@dataclass(frozen=True)
class DWeights:
    """Share of an indent arriving on D1..D4 (may sum to < 1 or > 1)."""
    d1: float = 0.0
    d2: float = 0.0
    d3: float = 0.0
    d4: float = 0.0

    def get(self, bucket: DayBucket) -> float:
        return getattr(self, bucket.value.lower())

    def as_tuple(self):
        return (self.d1, self.d2, self.d3, self.d4)


ZERO_WEIGHTS = DWeights()


@dataclass(frozen=True)
class CenterWeightProfile:
    """
    Resolved D-weights for one center with fallback provenance.

    Attributes:
        center_id: Center code (after remap)
        center_name: Display name from bonding
        weights: Weights actually used by the forecaster and the cascade
        recent_averages: Recent-window averages that drove the fallback decision
        fallback_used: Per-bucket flags (d1..d4), True when the season value replaced
                       the recent one
    """
    center_id: str
    center_name: str
    weights: DWeights
    recent_averages: DWeights = ZERO_WEIGHTS
    fallback_used: tuple = (False, False, False, False)

    @property
    def d1_fallback_used(self) -> bool:
        return self.fallback_used[0]

    @property
    def d2_fallback_used(self) -> bool:
        return self.fallback_used[1]

    @property
    def d3_fallback_used(self) -> bool:
        return self.fallback_used[2]

    @property
    def d4_fallback_used(self) -> bool:
        return self.fallback_used[3]


@dataclass(frozen=True)
class ClosedIndentAnalysis:
    """One indent joined with its purchases summed per day bucket."""
    center_id: str
    center_name: str
    issued_for_date: Date
    indent_qty: float
    d1_purchases: float = 0.0
    d2_purchases: float = 0.0
    d3_purchases: float = 0.0
    d4_purchases: float = 0.0

    @property
    def total_purchases(self) -> float:
        return self.d1_purchases + self.d2_purchases + self.d3_purchases + self.d4_purchases

    def purchases_for(self, bucket: DayBucket) -> float:
        return getattr(self, f"{bucket.value.lower()}_purchases")

    def ratio(self, bucket: DayBucket) -> float:
        """Purchases in bucket / indent qty (0 for a zero-qty indent)."""
        if self.indent_qty <= 0:
            return 0.0
        return self.purchases_for(bucket) / self.indent_qty


@dataclass(frozen=True)
class Constraint:
    """
    Operator-declared disruption on a given day.

    impact_factor is a reduction fraction (0.3 = 30% less).
    """
    date: Date
    kind: ConstraintKind
    impact_factor: float
    description: str = ""
    constraint_id: str = ""

    def __post_init__(self):
        if not isinstance(self.kind, ConstraintKind):
            object.__setattr__(self, "kind", ConstraintKind(str(self.kind).lower()))
        if not math.isfinite(self.impact_factor) or not 0.0 <= self.impact_factor <= 1.0:
            raise ValueError(f"Impact factor must be 0.0-1.0, got {self.impact_factor}")


@dataclass(frozen=True)
class RiskAnalysisItem:
    """Risk ledger entry for a constraint falling on the target day."""
    date: Date
    kind: ConstraintKind
    original_value: float
    constrained_value: float
    deficit: float
    message: str = ""


@dataclass(frozen=True)
class NormalizedDataset:
    """The three normalized collections produced by the normalizer."""
    bonding: list = field(default_factory=list)    # List[NormalizedBonding]
    indents: list = field(default_factory=list)    # List[NormalizedIndent]
    purchases: list = field(default_factory=list)  # List[NormalizedPurchase]
