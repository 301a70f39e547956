"""
Symbol option policies
Static per-symbol contract specs: multiplier, strike grid, 0DTE support.
"""
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import config
from strategy.exceptions import UnsupportedSymbol


@dataclass(frozen=True)
class SymbolOptionPolicy:
    symbol: str
    multiplier: int = 100
    strike_increment: float = 1.0
    supports_0dte: bool = False
    default_otm_pct: Optional[float] = None
    fallback_cadence: str = "weekly"

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "multiplier": self.multiplier,
            "strike_increment": self.strike_increment,
            "supports_0dte": self.supports_0dte,
            "default_otm_pct": self.default_otm_pct,
            "fallback_cadence": self.fallback_cadence,
        }


def _build_policies(table: Mapping[str, Mapping]) -> Dict[str, SymbolOptionPolicy]:
    return {
        symbol.upper(): SymbolOptionPolicy(symbol=symbol.upper(), **spec)
        for symbol, spec in table.items()
    }


SYMBOL_POLICIES: Dict[str, SymbolOptionPolicy] = _build_policies(config.OPTION_POLICIES)


def find_symbol_policy(
    symbol: str,
    policies: Optional[Mapping[str, SymbolOptionPolicy]] = None,
) -> Optional[SymbolOptionPolicy]:
    table = SYMBOL_POLICIES if policies is None else policies
    if not symbol:
        return None
    return table.get(symbol.strip().upper())


def get_symbol_policy(
    symbol: str,
    policies: Optional[Mapping[str, SymbolOptionPolicy]] = None,
) -> SymbolOptionPolicy:
    """Policy for symbol; unknown symbols raise UnsupportedSymbol."""
    policy = find_symbol_policy(symbol, policies)
    if policy is None:
        raise UnsupportedSymbol(f"Unsupported symbol for options config: {symbol}")
    return policy


def _grid_steps(price: float, increment: float) -> float:
    if increment <= 0:
        raise ValueError(f"Strike increment must be positive, got {increment}")
    # absorb float noise such as 450 * 1.02 = 459.00000000000006
    return round(price / increment, 9)


def ceil_strike(price: float, increment: float) -> float:
    return round(math.ceil(_grid_steps(price, increment)) * increment, 6)


def floor_strike(price: float, increment: float) -> float:
    return round(math.floor(_grid_steps(price, increment)) * increment, 6)


def round_strike(price: float, increment: float) -> float:
    return round(round(_grid_steps(price, increment)) * increment, 6)
