"""Numeric and date normalizers for raw export fields."""

import math
import re
from datetime import date, datetime, time, timedelta

ISO_DAY_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def parse_number(value):
    """Parse a locale-formatted numeric string into a float.

    Only the first comma is treated as a decimal separator, so thousands
    separators are not supported. Never raises and never returns NaN or
    infinity; anything unparseable becomes 0.0. Sign is not clamped.

    Examples:
        "12,5"   -> 12.5
        "12.5"   -> 12.5
        ""       -> 0.0
        "abc"    -> 0.0
        "1,2,3"  -> 0.0
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        result = float(value)
        return result if math.isfinite(result) else 0.0
    s = str(value).strip()
    if not s:
        return 0.0
    s = s.replace(",", ".", 1)
    try:
        result = float(s)
    except ValueError:
        return 0.0
    if not math.isfinite(result):
        return 0.0
    return result


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def is_iso_day(value):
    """True if *value* is a strict ``YYYY-MM-DD`` string."""
    return isinstance(value, str) and ISO_DAY_RE.fullmatch(value) is not None


def to_local_date(value):
    """Normalize a ``YYYY-MM-DD`` string, date or datetime to a calendar date.

    Strings are built from explicit year/month/day components, never parsed
    as an instant, so the calendar day cannot shift with the timezone.
    Dates pass through; datetimes keep their own (local) calendar day.

    Raises:
        ValueError: If a string is not a valid ``YYYY-MM-DD`` day.
        TypeError: For any other input type.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not is_iso_day(s):
            raise ValueError(f"Not a YYYY-MM-DD date: {value!r}")
        year, month, day = (int(part) for part in s.split("-"))
        return date(year, month, day)
    raise TypeError(f"Cannot convert {type(value).__name__} to a date")


def try_local_date(value):
    """Like :func:`to_local_date` but returns None instead of raising."""
    try:
        return to_local_date(value)
    except (TypeError, ValueError):
        return None


def start_of_day(value):
    """Local midnight of the day of *value*."""
    return datetime.combine(to_local_date(value), time.min)


def end_of_day(value):
    """Last representable instant of the day of *value*."""
    return datetime.combine(to_local_date(value), time.max)


def days_before(value, days):
    """Calendar date *days* before *value*."""
    return to_local_date(value) - timedelta(days=days)
