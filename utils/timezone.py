"""
Timezone utilities - market clock in US/Eastern, calendar math in UTC
"""
from datetime import datetime
from typing import Optional
import pytz

ET = pytz.timezone('US/Eastern')
UTC = pytz.utc


def now_utc() -> datetime:
    """Get current time in UTC"""
    return datetime.now(UTC)


def as_utc(dt: Optional[datetime] = None) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are taken as UTC."""
    if dt is None:
        return now_utc()
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)


def as_eastern(dt: Optional[datetime] = None) -> datetime:
    """Normalize a datetime to US/Eastern. Naive values are taken as UTC."""
    return as_utc(dt).astimezone(ET)


def format_timestamp(dt: datetime = None) -> str:
    """Format a datetime for display in Eastern time"""
    return as_eastern(dt).strftime("%Y-%m-%d %H:%M:%S %Z")
