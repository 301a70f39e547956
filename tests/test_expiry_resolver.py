"""Unit tests for expiry resolution."""

from datetime import date, datetime

import pytest

from strategy.exceptions import InvalidExpiryOverride, SuggestionError
from strategy.expiry_resolver import (
    ExpiryCadence,
    next_0dte_expiry,
    next_monthly_expiry,
    next_weekly_expiry,
    resolve_expiry,
)
from strategy.symbol_policy import SymbolOptionPolicy
from utils.dates import business_days_until, next_weekday
from utils.timezone import ET, UTC


def utc(*args):
    return UTC.localize(datetime(*args))


class TestZeroDte:
    """Test suite for same-day expiry around the 4pm Eastern close."""

    def test_before_close_is_today(self):
        # 10:00 EST
        assert next_0dte_expiry(utc(2025, 1, 15, 15, 0)) == date(2025, 1, 15)

    def test_after_close_is_next_weekday(self):
        # 16:30 EST
        assert next_0dte_expiry(utc(2025, 1, 15, 21, 30)) == date(2025, 1, 16)

    def test_exactly_at_close_rolls(self):
        assert next_0dte_expiry(ET.localize(datetime(2025, 1, 15, 16, 0))) == date(2025, 1, 16)

    def test_friday_after_close_rolls_to_monday(self):
        assert next_0dte_expiry(utc(2025, 1, 17, 22, 0)) == date(2025, 1, 20)

    def test_saturday_morning_rolls_to_monday(self):
        # 10:00 EST Saturday
        assert next_0dte_expiry(utc(2025, 1, 11, 15, 0)) == date(2025, 1, 13)

    def test_sunday_rolls_to_monday(self):
        assert next_0dte_expiry(utc(2025, 1, 12, 14, 0)) == date(2025, 1, 13)

    def test_resolve_spy_0dte_on_weekend(self):
        result = resolve_expiry("SPY", "0dte", 0, now=utc(2025, 1, 11, 15, 0))
        assert result.iso == "2025-01-13"
        assert result.effective_cadence == "0dte"

    def test_uses_eastern_calendar_date(self):
        # 02:00 UTC Thursday is 21:00 EST Wednesday
        assert next_0dte_expiry(utc(2025, 1, 16, 2, 0)) == date(2025, 1, 16)

    def test_summer_close_in_edt(self):
        # 19:30 UTC in July is 15:30 EDT
        assert next_0dte_expiry(utc(2025, 7, 9, 19, 30)) == date(2025, 7, 9)
        assert next_0dte_expiry(utc(2025, 7, 9, 20, 30)) == date(2025, 7, 10)

    def test_resolve_spy_0dte(self):
        before = resolve_expiry("SPY", "0dte", 0, now=utc(2025, 1, 15, 15, 0))
        after = resolve_expiry("SPY", "0dte", 0, now=utc(2025, 1, 15, 21, 30))
        assert before.date == date(2025, 1, 15)
        assert before.effective_cadence == "0dte"
        assert before.fallback_reason is None
        assert after.date == date(2025, 1, 16)


class TestWeekly:
    """Test suite for weekly expiries."""

    def test_monday_gets_this_friday(self, monday_morning):
        assert next_weekly_expiry(2, monday_morning) == date(2025, 1, 17)

    def test_thursday_needs_two_business_days(self):
        assert next_weekly_expiry(2, utc(2025, 1, 16, 15, 0)) == date(2025, 1, 24)

    def test_thursday_with_no_minimum(self):
        assert next_weekly_expiry(0, utc(2025, 1, 16, 15, 0)) == date(2025, 1, 17)

    def test_friday_never_today(self):
        assert next_weekly_expiry(0, utc(2025, 1, 17, 14, 0)) == date(2025, 1, 24)

    def test_saturday(self):
        assert next_weekly_expiry(2, utc(2025, 1, 18, 12, 0)) == date(2025, 1, 24)

    def test_result_is_friday_with_enough_days(self):
        for day in range(6, 20):
            now = utc(2025, 1, day, 12, 0)
            expiry = next_weekly_expiry(3, now)
            assert expiry.weekday() == 4
            assert business_days_until(now.date(), expiry) >= 3


class TestMonthly:
    """Test suite for monthly expiries."""

    def test_first_half_uses_current_month(self):
        assert next_monthly_expiry(utc(2025, 1, 10, 12, 0)) == date(2025, 1, 31)
        assert next_monthly_expiry(utc(2025, 1, 15, 12, 0)) == date(2025, 1, 31)

    def test_second_half_uses_next_month(self):
        assert next_monthly_expiry(utc(2025, 1, 20, 12, 0)) == date(2025, 2, 28)

    def test_december_rolls_year(self):
        assert next_monthly_expiry(utc(2025, 12, 20, 12, 0)) == date(2026, 1, 30)

    def test_resolve_monthly(self, monday_morning):
        result = resolve_expiry("QQQ", "monthly", now=monday_morning)
        assert result.date == date(2025, 1, 31)
        assert result.effective_cadence == ExpiryCadence.MONTHLY.value


class TestResolveExpiry:
    """Test suite for resolve_expiry policy handling."""

    def test_weekly_default(self, monday_morning):
        result = resolve_expiry("SPY", now=monday_morning)
        assert result.iso == "2025-01-17"
        assert result.effective_cadence == "weekly"
        assert result.requested_cadence == "weekly"

    def test_override_wins(self, monday_morning):
        result = resolve_expiry("SPY", "0dte", override_date="2025-03-21", now=monday_morning)
        assert result.date == date(2025, 3, 21)
        assert result.effective_cadence == "custom"
        assert result.requested_cadence == "0dte"

    def test_override_accepts_date(self, monday_morning):
        result = resolve_expiry("SPY", override_date=date(2025, 2, 7), now=monday_morning)
        assert result.iso == "2025-02-07"

    def test_invalid_override(self, monday_morning):
        with pytest.raises(InvalidExpiryOverride):
            resolve_expiry("SPY", override_date="next friday", now=monday_morning)

    def test_invalid_override_is_value_error(self, monday_morning):
        with pytest.raises(ValueError):
            resolve_expiry("SPY", override_date="2025-02-30", now=monday_morning)
        with pytest.raises(SuggestionError):
            resolve_expiry("SPY", override_date="2025-02-30", now=monday_morning)

    def test_0dte_falls_back_for_unsupported_symbol(self, monday_morning):
        result = resolve_expiry("AAPL", "0dte", 2, now=monday_morning)
        assert result.effective_cadence == "weekly"
        assert result.requested_cadence == "0dte"
        assert result.date == date(2025, 1, 17)
        assert "AAPL" in result.fallback_reason

    def test_0dte_fallback_to_policy_cadence(self, monday_morning):
        policies = {"XYZ": SymbolOptionPolicy("XYZ", fallback_cadence="monthly")}
        result = resolve_expiry("xyz", "0dte", now=monday_morning, policies=policies)
        assert result.effective_cadence == "monthly"
        assert result.date == date(2025, 1, 31)

    def test_unknown_symbol_not_restricted(self, monday_morning):
        result = resolve_expiry("ZZZZ", "0dte", 0, now=monday_morning)
        assert result.effective_cadence == "0dte"
        assert result.date == date(2025, 1, 13)

    @pytest.mark.parametrize("cadence", ["quarterly", "", None, "custom"])
    def test_unsupported_cadence_falls_back_to_weekly(self, cadence, monday_morning):
        result = resolve_expiry("SPY", cadence, now=monday_morning)
        assert result.effective_cadence == "weekly"
        assert result.date == date(2025, 1, 17)
        assert result.fallback_reason is not None

    def test_accepts_enum(self, monday_morning):
        result = resolve_expiry("SPY", ExpiryCadence.MONTHLY, now=monday_morning)
        assert result.effective_cadence == "monthly"

    def test_to_dict(self, monday_morning):
        data = resolve_expiry("AAPL", "0dte", now=monday_morning).to_dict()
        assert data["date"] == "2025-01-17"
        assert data["effective_cadence"] == "weekly"
        assert data["fallback_reason"]


class TestDateHelpers:
    """Test suite for weekday helpers."""

    def test_next_weekday_skips_weekend(self):
        assert next_weekday(date(2025, 1, 17)) == date(2025, 1, 20)
        assert next_weekday(date(2025, 1, 18)) == date(2025, 1, 20)
        assert next_weekday(date(2025, 1, 13)) == date(2025, 1, 14)

    def test_business_days_until(self):
        assert business_days_until(date(2025, 1, 13), date(2025, 1, 17)) == 4
        assert business_days_until(date(2025, 1, 17), date(2025, 1, 24)) == 5
        assert business_days_until(date(2025, 1, 17), date(2025, 1, 17)) == 0
        assert business_days_until(date(2025, 1, 17), date(2025, 1, 10)) == 0
