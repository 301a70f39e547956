"""
Expiry Resolver for option suggestions
Maps a requested cadence (0DTE / weekly / monthly / custom date) and the
symbol's policy to a concrete expiry date.

Business days are Mon-Fri only. Market holidays are not modelled, so
days-to-expiry can be overstated around holidays.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Mapping, Optional

from loguru import logger

import config
from strategy.exceptions import InvalidExpiryOverride
from strategy.symbol_policy import SymbolOptionPolicy, find_symbol_policy
from utils.dates import business_days_until, is_weekend, next_weekday, parse_expiry_value
from utils.timezone import as_eastern, as_utc


class ExpiryCadence(Enum):
    ZERO_DTE = "0dte"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


_COMPUTED_CADENCES = (ExpiryCadence.ZERO_DTE, ExpiryCadence.WEEKLY, ExpiryCadence.MONTHLY)


@dataclass(frozen=True)
class ExpiryResolution:
    date: date
    effective_cadence: str
    requested_cadence: str
    fallback_reason: Optional[str] = None

    @property
    def iso(self) -> str:
        return self.date.isoformat()

    def to_dict(self) -> dict:
        return {
            "date": self.iso,
            "effective_cadence": self.effective_cadence,
            "requested_cadence": self.requested_cadence,
            "fallback_reason": self.fallback_reason,
        }


# ---------------------------------------------------------------------------
# Cadence calculators
# ---------------------------------------------------------------------------

def next_0dte_expiry(now: Optional[datetime] = None) -> date:
    """Today (Eastern) before the 4pm close on a weekday, else the next weekday."""
    now_et = as_eastern(now)
    close = (config.MARKET["close_hour"], config.MARKET["close_minute"])
    if is_weekend(now_et.date()) or (now_et.hour, now_et.minute) >= close:
        return next_weekday(now_et.date())
    return now_et.date()


def next_weekly_expiry(min_business_days: int = 2, now: Optional[datetime] = None) -> date:
    """Next Friday (UTC calendar, never today) with at least min_business_days weekdays before it."""
    today = as_utc(now).date()
    days_to_friday = (4 - today.weekday()) % 7 or 7
    candidate = today + timedelta(days=days_to_friday)
    if business_days_until(today, candidate) < min_business_days:
        candidate += timedelta(days=7)
    return candidate


def _last_friday(year: int, month: int) -> date:
    d = date(year, month, calendar.monthrange(year, month)[1])
    while d.weekday() != 4:
        d -= timedelta(days=1)
    return d


def next_monthly_expiry(now: Optional[datetime] = None) -> date:
    """Last Friday of this month, or of next month once past the 15th."""
    today = as_utc(now).date()
    year, month = today.year, today.month
    if today.day > 15:
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return _last_friday(year, month)


def parse_expiry_override(value) -> date:
    expiry = parse_expiry_value(value)
    if expiry is None:
        raise InvalidExpiryOverride(f"Invalid expiry override: {value!r}")
    return expiry


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

def _normalize_cadence(cadence) -> Optional[ExpiryCadence]:
    if isinstance(cadence, ExpiryCadence):
        return cadence
    text = str(cadence or "").strip().lower()
    for member in ExpiryCadence:
        if member.value == text:
            return member
    return None


def resolve_expiry(
    symbol: str,
    requested_cadence="weekly",
    min_business_days: int = 2,
    override_date=None,
    now: Optional[datetime] = None,
    policies: Optional[Mapping[str, SymbolOptionPolicy]] = None,
) -> ExpiryResolution:
    """
    Resolve the expiry date for a symbol.

    Args:
        symbol: Underlying symbol (policy lookup for 0DTE support)
        requested_cadence: "0dte", "weekly", "monthly" or an ExpiryCadence
        min_business_days: Minimum weekdays before a weekly expiry
        override_date: Explicit date (str/date); wins over cadence
        now: Wall-clock time; defaults to the current time

    Returns:
        ExpiryResolution with the date, effective cadence and any fallback reason

    Raises:
        InvalidExpiryOverride: override_date is given but unparseable
    """
    requested_label = getattr(requested_cadence, "value", requested_cadence)
    requested_label = str(requested_label).strip().lower() if requested_label is not None else ""

    if override_date is not None and override_date != "":
        return ExpiryResolution(
            date=parse_expiry_override(override_date),
            effective_cadence=ExpiryCadence.CUSTOM.value,
            requested_cadence=requested_label or ExpiryCadence.CUSTOM.value,
        )

    cadence = _normalize_cadence(requested_cadence)
    fallback_reason = None

    if cadence not in _COMPUTED_CADENCES:
        fallback_reason = f"Unsupported expiry cadence '{requested_label}', using weekly"
        cadence = ExpiryCadence.WEEKLY

    if cadence is ExpiryCadence.ZERO_DTE:
        # unknown symbols are rejected by the suggestion builder, not here
        policy = find_symbol_policy(symbol, policies)
        if policy is not None and not policy.supports_0dte:
            fallback = _normalize_cadence(policy.fallback_cadence)
            if fallback not in (ExpiryCadence.WEEKLY, ExpiryCadence.MONTHLY):
                fallback = ExpiryCadence.WEEKLY
            fallback_reason = f"{policy.symbol} has no same-day expiries, using {fallback.value}"
            cadence = fallback

    if cadence is ExpiryCadence.ZERO_DTE:
        expiry = next_0dte_expiry(now)
    elif cadence is ExpiryCadence.MONTHLY:
        expiry = next_monthly_expiry(now)
    else:
        expiry = next_weekly_expiry(min_business_days, now)

    if fallback_reason:
        logger.warning(f"{symbol}: {fallback_reason}")

    return ExpiryResolution(
        date=expiry,
        effective_cadence=cadence.value,
        requested_cadence=requested_label,
        fallback_reason=fallback_reason,
    )
