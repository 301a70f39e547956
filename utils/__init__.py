"""Utility modules"""
from .timezone import now_utc, as_utc, as_eastern, format_timestamp, ET, UTC
from .dates import is_weekend, next_weekday, business_days_until, parse_expiry_value
from .ttl_cache import TTLCache

__all__ = [
    "now_utc", "as_utc", "as_eastern", "format_timestamp", "ET", "UTC",
    "is_weekend", "next_weekday", "business_days_until", "parse_expiry_value",
    "TTLCache",
]
