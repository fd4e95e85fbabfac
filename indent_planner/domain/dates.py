"""
Date helpers for indent planning.

All planning arithmetic is done on calendar days (datetime.date); times of
day are dropped at parse time (after converting offset-aware timestamps to
UTC) so that "same day" comparisons are plain equality.

Accepted textual formats:
    2025-11-03               (ISO date)
    2025-11-03T00:00:00.000Z (ISO timestamp; offset-aware values use the UTC day)
    03-11-2025               (DD-MM-YYYY)
    03/11/2025               (DD/MM/YYYY)
"""
from datetime import date as Date, datetime, timedelta, timezone
import re
from typing import Any, List, Optional

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DMY_DASH = re.compile(r"^\d{2}-\d{2}-\d{4}$")
_DMY_SLASH = re.compile(r"^\d{2}/\d{2}/\d{4}$")


def _calendar_day(moment: datetime) -> Date:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def parse_date(value: Any) -> Optional[Date]:
    """
    Parse a loosely-typed date value into a calendar date.

    Args:
        value: date, datetime or string in one of the module's formats

    Returns:
        date, or None when the value is empty or cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _calendar_day(value)
    if isinstance(value, Date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        if "T" in text:
            return _calendar_day(datetime.fromisoformat(text.replace("Z", "+00:00")))
        if _ISO_DATE.match(text):
            return datetime.strptime(text, "%Y-%m-%d").date()
        if _DMY_DASH.match(text):
            return datetime.strptime(text, "%d-%m-%Y").date()
        if _DMY_SLASH.match(text):
            return datetime.strptime(text, "%d/%m/%Y").date()
    except ValueError:
        return None
    return None


def add_days(day: Date, days: int) -> Date:
    return day + timedelta(days=days)


def days_between(start: Date, end: Date) -> int:
    """Absolute number of calendar days between two dates."""
    return abs((end - start).days)


def day_offset(base: Date, other: Date) -> int:
    """Signed offset of *other* relative to *base* (other - base) in days."""
    return (other - base).days


def date_range(start: Date, end: Date) -> List[Date]:
    """Inclusive list of days from start to end (empty if start > end)."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def format_date_gb(day: Date) -> str:
    """DD/MM/YYYY, used in operator-facing messages."""
    return day.strftime("%d/%m/%Y")
