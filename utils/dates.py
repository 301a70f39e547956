"""
Calendar helpers for expiry math.
Business days are Mon-Fri only; there is no holiday calendar.
"""
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

_ISO_RE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})")
_SHORT_RE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{2})$")


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def next_weekday(d: date) -> date:
    """First Mon-Fri date strictly after d."""
    nxt = d + timedelta(days=1)
    while is_weekend(nxt):
        nxt += timedelta(days=1)
    return nxt


def business_days_until(start: date, end: date) -> int:
    """Count weekdays in [start, end)."""
    days = 0
    cur = start
    while cur < end:
        if not is_weekend(cur):
            days += 1
        cur += timedelta(days=1)
    return days


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_expiry_value(value) -> Optional[date]:
    """
    Coerce an upstream expiry value to a calendar date.

    Accepts date/datetime, epoch seconds or milliseconds, "YYYY-MM-DD",
    "YYYY/M/D" (time suffix ignored) and "M/D/YY". Returns None when the
    value cannot be read.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        seconds = value / 1000 if value > 1e12 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        m = _ISO_RE.match(text)
        if m:
            y, mo, d = (int(g) for g in m.groups())
            return _safe_date(y, mo, d)
        m = _SHORT_RE.match(text)
        if m:
            mo, d, y = (int(g) for g in m.groups())
            return _safe_date(2000 + y, mo, d)
    return None
