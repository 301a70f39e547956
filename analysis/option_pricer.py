"""
Black-Scholes Option Pricer
Theoretical premium for vanilla European calls/puts (no dividend yield).
Used as the pricing fallback when live chain data is unusable.
"""
import math

from analysis.option_quote import OptionType

# Abramowitz-Stegun 7.1.26 coefficients (|error| < 1.5e-7)
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


def erf(x: float) -> float:
    """Error function, Abramowitz-Stegun approximation."""
    sign = 1.0 if x >= 0 else -1.0
    ax = abs(x)
    t = 1.0 / (1.0 + _P * ax)
    y = 1.0 - (((((_A5 * t + _A4) * t) + _A3) * t + _A2) * t + _A1) * t * math.exp(-ax * ax)
    return sign * y


def norm_cdf(x: float) -> float:
    """Standard normal CDF."""
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))


def intrinsic_value(spot: float, strike: float, side) -> float:
    option_type = OptionType.from_side(side)
    if option_type is OptionType.CALL:
        return max(0.0, spot - strike)
    return max(0.0, strike - spot)


def black_scholes_price(
    spot: float,
    strike: float,
    time_to_expiry_years: float,
    risk_free_rate: float = 0.01,
    volatility: float = 0.2,
    side="call",
) -> float:
    """
    Theoretical option price.

    Args:
        spot: Underlying price (> 0)
        strike: Strike price (> 0)
        time_to_expiry_years: Years until expiry; <= 0 returns intrinsic value
        risk_free_rate: Continuously compounded annual rate
        volatility: Annualized implied volatility; <= 0 returns intrinsic value
        side: "call" / "put" or OptionType

    Returns:
        Premium per share, never negative. Callers round for display/sizing.

    Raises:
        ValueError: spot or strike not positive, or any numeric input not finite
    """
    option_type = OptionType.from_side(side)
    for name, value in (("spot", spot), ("strike", strike)):
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"{name} must be a positive finite number, got {value!r}")
    for name, value in (("time_to_expiry_years", time_to_expiry_years),
                        ("volatility", volatility), ("risk_free_rate", risk_free_rate)):
        if not math.isfinite(value):
            raise ValueError(f"{name} must be a finite number, got {value!r}")

    if time_to_expiry_years <= 0 or volatility <= 0:
        return intrinsic_value(spot, strike, option_type)

    sqrt_t = math.sqrt(time_to_expiry_years)
    vol_sqrt_t = volatility * sqrt_t
    d1 = (math.log(spot / strike) + (risk_free_rate + 0.5 * volatility * volatility) * time_to_expiry_years) / vol_sqrt_t
    d2 = d1 - vol_sqrt_t
    discounted_strike = strike * math.exp(-risk_free_rate * time_to_expiry_years)

    if option_type is OptionType.CALL:
        price = spot * norm_cdf(d1) - discounted_strike * norm_cdf(d2)
    else:
        price = discounted_strike * norm_cdf(-d2) - spot * norm_cdf(-d1)

    # the CDF approximation can undershoot by ~1e-7 deep out of the money
    return max(0.0, price)
