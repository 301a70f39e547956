"""Unit tests for the Black-Scholes pricer."""

import math

import pytest

from analysis.option_pricer import black_scholes_price, erf, intrinsic_value, norm_cdf


def _exact_price(spot, strike, t, r, sigma, side):
    def cdf(x):
        return 0.5 * (1 + math.erf(x / math.sqrt(2)))
    d1 = (math.log(spot / strike) + (r + sigma ** 2 / 2) * t) / (sigma * math.sqrt(t))
    d2 = d1 - sigma * math.sqrt(t)
    if side == "call":
        return spot * cdf(d1) - strike * math.exp(-r * t) * cdf(d2)
    return strike * math.exp(-r * t) * cdf(-d2) - spot * cdf(-d1)


class TestErf:
    """Test suite for the erf approximation."""

    @pytest.mark.parametrize("x", [-3.0, -1.2, -0.5, 0.0, 0.3, 1.0, 2.5])
    def test_close_to_math_erf(self, x):
        assert erf(x) == pytest.approx(math.erf(x), abs=2e-7)

    def test_odd_function(self):
        assert erf(-0.7) == -erf(0.7)

    def test_norm_cdf_landmarks(self):
        assert norm_cdf(0.0) == pytest.approx(0.5, abs=1e-7)
        assert norm_cdf(1.96) == pytest.approx(0.975, abs=1e-4)
        assert norm_cdf(-1.96) == pytest.approx(0.025, abs=1e-4)


class TestBlackScholesPrice:
    """Test suite for black_scholes_price."""

    def test_spy_weekly_call_is_plausible(self):
        price = black_scholes_price(450, 455, 0.02, 0.01, 0.2, "call")
        assert 0 < price < 450
        assert 2.0 < price < 4.0

    @pytest.mark.parametrize("side", ["call", "put"])
    def test_matches_exact_formula(self, side):
        price = black_scholes_price(450, 455, 0.05, 0.03, 0.25, side)
        assert price == pytest.approx(_exact_price(450, 455, 0.05, 0.03, 0.25, side), abs=1e-3)

    def test_put_call_parity(self):
        spot, strike, t, r = 450, 455, 0.1, 0.02
        call = black_scholes_price(spot, strike, t, r, 0.2, "call")
        put = black_scholes_price(spot, strike, t, r, 0.2, "put")
        assert call - put == pytest.approx(spot - strike * math.exp(-r * t), abs=1e-6)

    def test_idempotent(self):
        args = (450, 459, 0.0123, 0.01, 0.2, "call")
        assert black_scholes_price(*args) == black_scholes_price(*args)

    def test_expired_returns_intrinsic(self):
        assert black_scholes_price(460, 455, 0, side="call") == 5
        assert black_scholes_price(460, 455, 0, side="put") == 0
        assert black_scholes_price(450, 455, -1, side="put") == 5

    def test_zero_volatility_returns_intrinsic(self):
        assert black_scholes_price(450, 455, 0.1, volatility=0, side="put") == 5
        assert black_scholes_price(450, 455, 0.1, volatility=0, side="call") == 0

    def test_never_negative_deep_otm(self):
        assert black_scholes_price(100, 300, 0.01, 0.01, 0.1, "call") >= 0
        assert black_scholes_price(300, 100, 0.01, 0.01, 0.1, "put") >= 0

    def test_call_increases_with_time(self):
        short = black_scholes_price(450, 459, 0.01, 0.01, 0.2, "call")
        longer = black_scholes_price(450, 459, 0.1, 0.01, 0.2, "call")
        assert longer > short

    def test_accepts_option_type(self):
        from analysis.option_quote import OptionType
        assert black_scholes_price(450, 455, 0.02, side=OptionType.CALL) == \
            black_scholes_price(450, 455, 0.02, side="call")

    @pytest.mark.parametrize("spot,strike", [(0, 455), (-1, 455), (450, 0), (float("nan"), 455)])
    def test_rejects_bad_inputs(self, spot, strike):
        with pytest.raises(ValueError):
            black_scholes_price(spot, strike, 0.02)

    @pytest.mark.parametrize("t,r,sigma", [
        (float("nan"), 0.01, 0.2),
        (float("inf"), 0.01, 0.2),
        (0.02, 0.01, float("nan")),
        (0.02, 0.01, float("inf")),
        (0.02, float("nan"), 0.2),
    ])
    def test_rejects_non_finite_time_rate_or_volatility(self, t, r, sigma):
        with pytest.raises(ValueError):
            black_scholes_price(450, 455, t, r, sigma, "call")

    def test_rejects_bad_side(self):
        with pytest.raises(ValueError):
            black_scholes_price(450, 455, 0.02, side="straddle")


class TestIntrinsicValue:
    """Test suite for intrinsic_value."""

    def test_call_and_put(self):
        assert intrinsic_value(460, 455, "call") == 5
        assert intrinsic_value(450, 455, "call") == 0
        assert intrinsic_value(450, 455, "put") == 5
