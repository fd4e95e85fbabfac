"""
Record normalizer: loosely-typed tabular rows → normalized domain entities.

Provides:
- Ordered header aliases per logical field (case- and whitespace-insensitive)
- Center-code remapping (identity for unmapped codes)
- Silent dropping of dirty rows (missing code/date, non-positive quantity)
- Aggregation: indents by (center, date), bonding by center
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .domain.dates import parse_date
from .domain.models import (
    Constraint,
    ConstraintKind,
    NormalizedBonding,
    NormalizedDataset,
    NormalizedIndent,
    NormalizedPurchase,
)
from .domain.validation import validate_impact_factor


logger = logging.getLogger(__name__)


# Column mappings: logical field name -> ordered list of accepted header aliases
COLUMN_ALIASES = {
    "center_code": ["Code", "Centre Code", "Center Code"],
    "center_name": ["Center", "Center Name", "Centre", "Centre Name"],
    "bonding_qty": ["Bonding", "Bonding Qty"],
    "indent_date": ["Indent Date", "Raised For"],
    "purchase_date": ["Purchase Date"],
    "quantity": ["Qty in Qtls", "Qty", "Quantity"],
}

# Marker token in a center name that flags a plant-gate delivery point
GATE_MARKER = "GATE"


def _normalize_header(header: Any) -> str:
    return "".join(str(header).split()).lower()


def find_value(row: Mapping[str, Any], field_name: str) -> Optional[str]:
    """
    Resolve a logical field in a raw row through its alias list.

    Aliases are tried in order; the first header present wins even when its
    value is empty.

    Args:
        row: Raw record (header -> value)
        field_name: Key of COLUMN_ALIASES

    Returns:
        The value as a string, or None when no alias matches or the value is None
    """
    headers = {_normalize_header(key): key for key in row.keys()}
    for alias in COLUMN_ALIASES[field_name]:
        actual = headers.get(_normalize_header(alias))
        if actual is not None:
            value = row[actual]
            return None if value is None else str(value)
    return None


def parse_quantity(value: Optional[str]) -> float:
    """Parse a quantity cell; unparsable or non-finite values become 0."""
    if value is None:
        return 0.0
    text = value.strip().replace(",", "")
    if not text:
        return 0.0
    try:
        qty = float(text)
    except ValueError:
        return 0.0
    if not math.isfinite(qty):
        return 0.0
    return qty


def remap_center(code: Optional[str], center_code_remap: Mapping[str, str]) -> Optional[str]:
    """Strip and remap a center code (identity when not in the remap table)."""
    if code is None:
        return None
    code = code.strip()
    if not code:
        return None
    return center_code_remap.get(code) or code


def is_gate_center(center_name: str) -> bool:
    return GATE_MARKER in center_name.upper().strip()


# ---------------------------------------------------------------------------
# Per-dataset normalizers
# ---------------------------------------------------------------------------

def normalize_bonding(
    rows: Iterable[Mapping[str, Any]],
    center_code_remap: Optional[Mapping[str, str]] = None,
) -> List[NormalizedBonding]:
    """
    Normalize bonding rows, one entry per (remapped) center.

    Rows with no code, no name or a non-positive bonding are dropped.
    Duplicate centers have their bonding summed; the first name seen is kept.
    Output order follows first appearance.
    """
    remap = center_code_remap or {}
    by_center: Dict[str, Tuple[str, float]] = {}
    dropped = 0

    for row in rows:
        center_id = remap_center(find_value(row, "center_code"), remap)
        name = (find_value(row, "center_name") or "").strip()
        qty = parse_quantity(find_value(row, "bonding_qty"))

        if not center_id or not name or qty <= 0:
            dropped += 1
            continue

        existing_name, existing_qty = by_center.get(center_id, (name, 0.0))
        by_center[center_id] = (existing_name, existing_qty + qty)

    if dropped:
        logger.debug(f"Bonding: dropped {dropped} invalid rows")

    return [
        NormalizedBonding(
            center_id=center_id,
            center_name=name,
            committed_qty=qty,
            is_gate_center=is_gate_center(name),
        )
        for center_id, (name, qty) in by_center.items()
    ]


def normalize_indents(
    rows: Iterable[Mapping[str, Any]],
    center_code_remap: Optional[Mapping[str, str]] = None,
) -> List[NormalizedIndent]:
    """
    Normalize indent rows, merging quantities that share (center, date).

    Rows with no code, no parseable indent date or a non-positive quantity
    are dropped. Output order follows first appearance of each key.
    """
    remap = center_code_remap or {}
    merged: Dict[Tuple[str, Any], float] = {}
    dropped = 0

    for row in rows:
        center_id = remap_center(find_value(row, "center_code"), remap)
        issued_for = parse_date(find_value(row, "indent_date"))
        qty = parse_quantity(find_value(row, "quantity"))

        if not center_id or issued_for is None or qty <= 0:
            dropped += 1
            continue

        key = (center_id, issued_for)
        merged[key] = merged.get(key, 0.0) + qty

    if dropped:
        logger.debug(f"Indents: dropped {dropped} invalid rows")

    return [
        NormalizedIndent(center_id=center_id, issued_for_date=issued_for, quantity=qty)
        for (center_id, issued_for), qty in merged.items()
    ]


def normalize_purchases(
    rows: Iterable[Mapping[str, Any]],
    center_code_remap: Optional[Mapping[str, str]] = None,
) -> List[NormalizedPurchase]:
    """
    Normalize purchase rows (one entry per delivery, no merging).

    The related indent date is optional; a missing purchase date or a
    non-positive quantity drops the row.
    """
    remap = center_code_remap or {}
    purchases = []
    dropped = 0

    for row in rows:
        center_id = remap_center(find_value(row, "center_code"), remap)
        purchase_date = parse_date(find_value(row, "purchase_date"))
        qty = parse_quantity(find_value(row, "quantity"))

        if not center_id or purchase_date is None or qty <= 0:
            dropped += 1
            continue

        purchases.append(NormalizedPurchase(
            center_id=center_id,
            purchase_date=purchase_date,
            related_indent_date=parse_date(find_value(row, "indent_date")),
            quantity=qty,
        ))

    if dropped:
        logger.debug(f"Purchases: dropped {dropped} invalid rows")

    return purchases


def normalize_dataset(
    bonding_rows: Iterable[Mapping[str, Any]],
    indent_rows: Iterable[Mapping[str, Any]],
    purchase_rows: Iterable[Mapping[str, Any]],
    center_code_remap: Optional[Mapping[str, str]] = None,
) -> NormalizedDataset:
    dataset = NormalizedDataset(
        bonding=normalize_bonding(bonding_rows, center_code_remap),
        indents=normalize_indents(indent_rows, center_code_remap),
        purchases=normalize_purchases(purchase_rows, center_code_remap),
    )
    logger.debug(
        f"Normalized {len(dataset.bonding)} centers, {len(dataset.indents)} indents, "
        f"{len(dataset.purchases)} purchases"
    )
    return dataset


# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------

def normalize_constraints(raw_constraints: Optional[Iterable[Any]]) -> List[Constraint]:
    """
    Turn operator constraints (Constraint objects or raw mappings) into Constraint objects.

    Raw mappings accept the keys date, type/kind, impactFactor/impact_factor,
    description and id. Entries with an unparseable date, an unknown kind or an
    invalid impact factor are skipped with a warning.
    """
    constraints = []
    for raw in raw_constraints or []:
        if isinstance(raw, Constraint):
            constraints.append(raw)
            continue

        day = parse_date(raw.get("date"))
        kind_value = str(raw.get("type", raw.get("kind", ""))).strip().lower()
        impact = raw.get("impactFactor", raw.get("impact_factor"))

        if day is None:
            logger.warning(f"Skipping constraint with invalid date: {raw.get('date')!r}")
            continue
        try:
            kind = ConstraintKind(kind_value)
        except ValueError:
            logger.warning(f"Skipping constraint with unknown type: {kind_value!r}")
            continue
        is_valid, error = validate_impact_factor(impact)
        if not is_valid:
            logger.warning(f"Skipping {kind.value} constraint on {day}: {error}")
            continue

        constraints.append(Constraint(
            date=day,
            kind=kind,
            impact_factor=float(impact),
            description=str(raw.get("description") or ""),
            constraint_id=str(raw.get("id") or ""),
        ))
    return constraints
