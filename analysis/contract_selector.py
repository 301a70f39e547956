"""
Contract Selector for option chains
Ranks candidate contracts by delta proximity, spread quality, open interest
and volume. Tolerates partially-missing chain data.
"""
import math
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Optional

from loguru import logger

import config
from analysis.option_quote import OptionQuote, OptionType, SelectionMetrics

# Neutral credit for quotes with no delta
MISSING_DELTA_SCORE = 0.25
# Delta distance at which delta credit reaches zero
DELTA_BAND = 0.2


@dataclass(frozen=True)
class SelectionCriteria:
    target_delta: float = 0.35     # unsigned magnitude
    max_spread_pct: float = 0.35
    min_open_interest: int = 50

    def to_dict(self) -> dict:
        return {
            "target_delta": self.target_delta,
            "max_spread_pct": self.max_spread_pct,
            "min_open_interest": self.min_open_interest,
        }


def criteria_for_strategy(strategy: str, target_delta: Optional[float] = None) -> SelectionCriteria:
    """Selection thresholds for a trading strategy (day trades demand tighter markets)."""
    key = getattr(strategy, "value", strategy)
    params = dict(config.SELECTION_CRITERIA.get(key, config.SELECTION_CRITERIA["default"]))
    if target_delta is not None:
        params["target_delta"] = abs(target_delta)
    return SelectionCriteria(**params)


def compute_target_delta(strategy: str, strength: float, side) -> float:
    """
    Signed target delta scaled by signal strength.

    Base 0.35; stronger signals push toward higher delta, day trades less
    aggressively than swings. Magnitude clamped to [0.2, 0.75].
    """
    option_type = OptionType.from_side(side)
    key = getattr(strategy, "value", strategy)
    strength = abs(strength) if strength is not None and math.isfinite(strength) else 0.0
    strength = min(1.0, strength)
    aggressiveness = 0.08 if key == "day_trade" else 0.12
    adjust = strength * aggressiveness + (0.05 if strength > 0.6 else 0.0)
    magnitude = min(0.75, max(0.2, 0.35 + adjust))
    return magnitude if option_type is OptionType.CALL else -magnitude


def mid_price(quote) -> Optional[float]:
    """Mid price of an OptionQuote or raw record."""
    if not isinstance(quote, OptionQuote):
        quote = OptionQuote.from_raw(quote)
    return quote.mid if quote is not None else None


def score_quote(quote: OptionQuote, option_type: OptionType, criteria: SelectionCriteria) -> Optional[SelectionMetrics]:
    """Weighted score for one quote, or None if it has no usable mid price."""
    mid = quote.mid
    if mid is None or mid <= 0:
        return None

    weights = config.SELECTION_WEIGHTS

    if quote.bid is not None and quote.ask is not None:
        spread = max(0.0, quote.ask - quote.bid)
        spread_pct = spread / mid
    else:
        spread = None
        spread_pct = criteria.max_spread_pct

    signed_target = abs(criteria.target_delta)
    if option_type is OptionType.PUT:
        signed_target = -signed_target

    if quote.delta is None:
        delta_score = MISSING_DELTA_SCORE
    else:
        delta_score = max(0.0, 1 - abs(quote.delta - signed_target) / DELTA_BAND)

    spread_score = max(0.0, 1 - spread_pct / max(criteria.max_spread_pct, 0.01))

    oi = quote.open_interest or 0
    vol = quote.volume or 0
    # log10(min_oi + 10) is at least 1, never a zero divisor
    oi_score = min(1.0, math.log10(oi + 1) / math.log10(max(criteria.min_open_interest, 0) + 10))
    vol_score = min(1.0, math.log10(vol + 1) / math.log10(1000))

    total = (
        delta_score * weights["delta"]
        + spread_score * weights["spread"]
        + oi_score * weights["open_interest"]
        + vol_score * weights["volume"]
    )

    return SelectionMetrics(
        mid=mid,
        spread=spread,
        spread_pct=spread_pct,
        delta_score=delta_score,
        spread_score=spread_score,
        oi_score=oi_score,
        vol_score=vol_score,
        total_score=total,
    )


def select_optimal(
    quotes: Iterable[Any],
    side,
    target_delta: float = 0.35,
    max_spread_pct: float = 0.35,
    min_open_interest: int = 50,
    criteria: Optional[SelectionCriteria] = None,
) -> Optional[OptionQuote]:
    """
    Pick the best-scoring contract of the requested side.

    Returns a copy of the winning quote with `selection` metrics attached,
    or None if no quote has a usable mid price (callers fall back to
    nearest_strike, then to theoretical pricing).
    """
    option_type = OptionType.from_side(side)
    if criteria is None:
        criteria = SelectionCriteria(
            target_delta=target_delta,
            max_spread_pct=max_spread_pct,
            min_open_interest=min_open_interest,
        )

    best = None
    best_metrics = None
    for quote in _coerce(quotes):
        if quote.option_type is not option_type:
            continue
        metrics = score_quote(quote, option_type, criteria)
        if metrics is None:
            continue
        if best_metrics is None or metrics.total_score > best_metrics.total_score:
            best, best_metrics = quote, metrics

    if best is None:
        logger.debug(f"No scorable {option_type.value} quotes for selection")
        return None

    logger.debug(
        f"Selected {option_type.value} {best.strike} score={best_metrics.total_score:.3f} "
        f"(delta {best_metrics.delta_score:.2f}, spread {best_metrics.spread_score:.2f}, "
        f"oi {best_metrics.oi_score:.2f}, vol {best_metrics.vol_score:.2f})"
    )
    return replace(best, selection=best_metrics)


def nearest_strike(quotes: Iterable[Any], side, target_strike: float) -> Optional[OptionQuote]:
    """Quote of the requested side with the strike closest to target_strike. Ignores pricing."""
    if target_strike is None or not math.isfinite(target_strike):
        return None
    option_type = OptionType.from_side(side)
    best = None
    best_diff = math.inf
    for quote in _coerce(quotes):
        if quote.option_type is not option_type:
            continue
        diff = abs(quote.strike - target_strike)
        if diff < best_diff:
            best, best_diff = quote, diff
    return best


def pick_by_delta(quotes: Iterable[Any], side, target_delta: float = 0.3) -> Optional[OptionQuote]:
    """Quote whose delta is closest to the signed target. Quotes without delta are skipped."""
    option_type = OptionType.from_side(side)
    target = abs(target_delta) if option_type is OptionType.CALL else -abs(target_delta)
    best = None
    best_diff = math.inf
    for quote in _coerce(quotes):
        if quote.option_type is not option_type or quote.delta is None:
            continue
        diff = abs(quote.delta - target)
        if diff < best_diff:
            best, best_diff = quote, diff
    return best


def pick_by_premium(quotes: Iterable[Any], side, target_premium: float = 0.2) -> Optional[OptionQuote]:
    """Quote whose mid price is closest to target_premium."""
    option_type = OptionType.from_side(side)
    best = None
    best_diff = math.inf
    for quote in _coerce(quotes):
        if quote.option_type is not option_type:
            continue
        mid = quote.mid
        if mid is None:
            continue
        diff = abs(mid - target_premium)
        if diff < best_diff:
            best, best_diff = quote, diff
    return best


def _coerce(quotes: Optional[Iterable[Any]]) -> List[OptionQuote]:
    # keep chain order for tie-breaking; normalize_chain sorts by strike
    out = []
    for item in quotes or []:
        if item is None:
            continue
        if isinstance(item, OptionQuote):
            out.append(item)
        else:
            quote = OptionQuote.from_raw(item)
            if quote is not None:
                out.append(quote)
    return out
