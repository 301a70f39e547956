"""
Suggestion Builder for long option trades
Produces a baseline contract (strike, expiry, theoretical entry/stop/target)
and optionally enriches it from a live option chain.
"""
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional

from loguru import logger

import config
from analysis.contract_selector import SelectionCriteria, nearest_strike, select_optimal
from analysis.option_pricer import black_scholes_price
from analysis.option_quote import OptionQuote, OptionType
from strategy.exceptions import UnsupportedDirection
from strategy.expiry_resolver import resolve_expiry
from strategy.symbol_policy import SymbolOptionPolicy, ceil_strike, floor_strike, get_symbol_policy
from utils.timezone import UTC, as_utc

SECONDS_PER_YEAR = 365 * 24 * 60 * 60


class PricingSource(Enum):
    THEORETICAL = "theoretical"
    CHAIN_DERIVED = "chain-derived"


@dataclass(frozen=True)
class ContractSuggestion:
    symbol: str
    side: str                  # "call" | "put"
    strike: float
    expiry: str                # ISO date
    multiplier: int
    entry_price: float
    stop_price: float
    target_price: float
    pricing_source: PricingSource = PricingSource.THEORETICAL
    selection_score: Optional[float] = None
    underlying_price: Optional[float] = None
    expiry_cadence: Optional[str] = None
    fallback_reason: Optional[str] = None
    quote: Optional[OptionQuote] = None
    assumptions: Dict[str, Any] = field(default_factory=dict)
    rationale: str = ""

    @property
    def contract(self) -> str:
        """Readable contract label, not a full OCC ticker."""
        strike = int(self.strike) if float(self.strike).is_integer() else self.strike
        return f"{self.symbol} {self.expiry} {strike}{'C' if self.side == 'call' else 'P'}"

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "side": self.side,
            "contract": self.contract,
            "strike": self.strike,
            "expiry": self.expiry,
            "multiplier": self.multiplier,
            "entry_price": self.entry_price,
            "stop_price": self.stop_price,
            "target_price": self.target_price,
            "pricing_source": self.pricing_source.value,
            "selection_score": self.selection_score,
            "underlying_price": self.underlying_price,
            "expiry_cadence": self.expiry_cadence,
            "fallback_reason": self.fallback_reason,
            "quote": self.quote.to_dict() if self.quote else None,
            "assumptions": dict(self.assumptions),
            "rationale": self.rationale,
        }


def _round_premium(value: float) -> float:
    return max(config.PRICING["min_premium"], round(value, 2))


def _exits(entry: float, stop_loss_pct: float, take_profit_mult: float):
    stop = max(config.PRICING["min_premium"], round(entry * (1 - stop_loss_pct), 2))
    target = round(entry * (1 + take_profit_mult), 2)
    return stop, target


def time_to_expiry_years(expiry_iso: str, now: Optional[datetime] = None) -> float:
    """Years from now until expiry day at the approximate US close (20:00 UTC), floored at zero."""
    expiry_date = datetime.strptime(expiry_iso, "%Y-%m-%d")
    settle = UTC.localize(expiry_date + timedelta(hours=config.MARKET["expiry_settlement_utc_hour"]))
    seconds = (settle - as_utc(now)).total_seconds()
    return max(0.0, seconds) / SECONDS_PER_YEAR


def _target_strike(spot: float, otm_pct: float, option_type: OptionType, policy: SymbolOptionPolicy) -> float:
    if option_type is OptionType.CALL:
        return ceil_strike(spot * (1 + otm_pct), policy.strike_increment)
    return floor_strike(spot * (1 - otm_pct), policy.strike_increment)


def _rationale(cadence: str, side: str, otm_pct: float, take_profit_mult: float, stop_loss_pct: float) -> str:
    label = {"0dte": "0DTE", "monthly": "Monthly", "custom": "Custom-expiry"}.get(cadence, "Weekly")
    return (
        f"{label} {side.upper()} ~{round(otm_pct * 100)}% OTM "
        f"with TP {take_profit_mult}x and SL {round(stop_loss_pct * 100)}%"
    )


def build_suggestion(
    symbol: str,
    side,
    spot: float,
    iv: float = 0.2,
    risk_free_rate: float = 0.01,
    otm_pct: Optional[float] = None,
    min_business_days: int = 2,
    cadence="weekly",
    override_expiry=None,
    stop_loss_pct: float = 0.5,
    take_profit_mult: float = 2.0,
    direction: str = "long",
    now: Optional[datetime] = None,
    policies: Optional[Mapping[str, SymbolOptionPolicy]] = None,
) -> ContractSuggestion:
    """
    Build a theoretical long-option suggestion.

    Raises:
        UnsupportedDirection: direction is not "long"
        UnsupportedSymbol: no option policy for symbol
        InvalidExpiryOverride: override_expiry is unparseable
        ValueError: spot is not a positive finite number
    """
    if str(direction).strip().lower() != "long":
        raise UnsupportedDirection(f"Only long options are supported, got direction={direction!r}")

    policy = get_symbol_policy(symbol, policies)
    option_type = OptionType.from_side(side)
    if spot is None or not math.isfinite(spot) or spot <= 0:
        raise ValueError(f"Underlying price must be a positive number, got {spot!r}")

    if otm_pct is None:
        otm_pct = policy.default_otm_pct
    if otm_pct is None:
        otm_pct = config.SUGGESTION["fallback_otm_pct"]

    strike = _target_strike(spot, otm_pct, option_type, policy)
    resolution = resolve_expiry(
        policy.symbol,
        requested_cadence=cadence,
        min_business_days=min_business_days,
        override_date=override_expiry,
        now=now,
        policies=policies,
    )

    years = time_to_expiry_years(resolution.iso, now)
    raw_entry = black_scholes_price(spot, strike, years, risk_free_rate, iv, option_type)
    entry = _round_premium(raw_entry)
    stop, target = _exits(entry, stop_loss_pct, take_profit_mult)

    logger.debug(
        f"{policy.symbol} {option_type.value} {strike} exp {resolution.iso}: "
        f"T={years:.4f}y theoretical={raw_entry:.4f} entry={entry} stop={stop} target={target}"
    )

    return ContractSuggestion(
        symbol=policy.symbol,
        side=option_type.side,
        strike=strike,
        expiry=resolution.iso,
        multiplier=policy.multiplier,
        entry_price=entry,
        stop_price=stop,
        target_price=target,
        pricing_source=PricingSource.THEORETICAL,
        underlying_price=spot,
        expiry_cadence=resolution.effective_cadence,
        fallback_reason=resolution.fallback_reason,
        assumptions={
            "iv": iv,
            "risk_free_rate": risk_free_rate,
            "otm_pct": otm_pct,
            "min_business_days": min_business_days,
            "stop_loss_pct": stop_loss_pct,
            "take_profit_mult": take_profit_mult,
            "requested_cadence": resolution.requested_cadence,
            "time_to_expiry_years": years,
        },
        rationale=_rationale(resolution.effective_cadence, option_type.side, otm_pct,
                             take_profit_mult, stop_loss_pct),
    )


def apply_chain_selection(
    suggestion: ContractSuggestion,
    quotes: Optional[Iterable[Any]],
    criteria: Optional[SelectionCriteria] = None,
) -> ContractSuggestion:
    """
    Overlay live chain data onto a theoretical suggestion.

    Order: best-scoring quote, else the listed strike nearest the
    theoretical one, else the suggestion unchanged.
    """
    quotes = list(quotes or [])
    if not quotes:
        return suggestion

    stop_loss_pct = suggestion.assumptions.get("stop_loss_pct", config.SUGGESTION["stop_loss_pct"])
    take_profit_mult = suggestion.assumptions.get("take_profit_mult", config.SUGGESTION["take_profit_mult"])

    chosen = select_optimal(quotes, suggestion.side, criteria=criteria or SelectionCriteria())
    if chosen is not None:
        return _from_quote(suggestion, chosen, chosen.mid, chosen.selection.total_score,
                           stop_loss_pct, take_profit_mult)

    nearest = nearest_strike(quotes, suggestion.side, suggestion.strike)
    if nearest is None:
        logger.warning(f"{suggestion.symbol}: no {suggestion.side} contracts in chain, keeping theoretical pricing")
        return suggestion

    # select_optimal scores every quote with a usable mid, so nearest has none
    if nearest.strike == suggestion.strike:
        return replace(suggestion, quote=nearest)

    logger.info(
        f"{suggestion.symbol}: nearest listed strike {nearest.strike} has no usable price, "
        f"repricing theoretically"
    )
    entry = _round_premium(black_scholes_price(
        suggestion.underlying_price,
        nearest.strike,
        suggestion.assumptions.get("time_to_expiry_years", 0.0),
        suggestion.assumptions.get("risk_free_rate", config.PRICING["risk_free_rate"]),
        suggestion.assumptions.get("iv", config.PRICING["iv"]),
        suggestion.side,
    ))
    stop, target = _exits(entry, stop_loss_pct, take_profit_mult)
    return replace(
        suggestion,
        strike=nearest.strike,
        entry_price=entry,
        stop_price=stop,
        target_price=target,
        quote=nearest,
    )


def _from_quote(
    suggestion: ContractSuggestion,
    quote: OptionQuote,
    mid: float,
    score: Optional[float],
    stop_loss_pct: float,
    take_profit_mult: float,
) -> ContractSuggestion:
    entry = _round_premium(mid)
    stop, target = _exits(entry, stop_loss_pct, take_profit_mult)
    expiry = quote.expiry.isoformat() if quote.expiry else suggestion.expiry
    return replace(
        suggestion,
        strike=quote.strike,
        expiry=expiry,
        entry_price=entry,
        stop_price=stop,
        target_price=target,
        pricing_source=PricingSource.CHAIN_DERIVED,
        selection_score=score,
        quote=quote,
    )
