"""
Plain-data rendering of engine results.

Turns the frozen result dataclasses into JSON-safe primitives (dict, list,
str, float, bool, None) so the storage and display layers never depend on
the engine's types. Dates become ISO strings, enums their values.
"""
from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
import json
from typing import Any

from .domain.contracts import CalculationResults
from .domain.models import CenterWeightProfile, ClosedIndentAnalysis

# Derived properties worth exporting alongside the stored fields
_EXTRA_PROPERTIES = {
    ClosedIndentAnalysis: ("total_purchases",),
    CenterWeightProfile: ("d1_fallback_used", "d2_fallback_used", "d3_fallback_used", "d4_fallback_used"),
}


def to_primitive(value: Any) -> Any:
    """Recursively convert dataclasses, dates, enums and containers to primitives."""
    if is_dataclass(value) and not isinstance(value, type):
        data = {f.name: to_primitive(getattr(value, f.name)) for f in fields(value)}
        for prop in _EXTRA_PROPERTIES.get(type(value), ()):
            data[prop] = to_primitive(getattr(value, prop))
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_primitive(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_primitive(v) for v in value]
    return value


def results_to_dict(results: CalculationResults) -> dict:
    data = to_primitive(results)
    data["total_indent_to_raise"] = results.total_indent_to_raise
    return data


def results_to_json(results: CalculationResults, indent: int = 2) -> str:
    return json.dumps(results_to_dict(results), indent=indent, ensure_ascii=False)
