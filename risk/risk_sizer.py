"""
Risk Sizer for long option positions
Converts account size, risk % and entry/stop premium into a bounded
contract quantity, with strategy-specific caps.
"""
import math
import numbers
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from loguru import logger

import config


class TradingStrategy(Enum):
    DAY_TRADE = "day_trade"
    SWING_TRADE = "swing_trade"
    SCALPING = "scalping"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value) -> "TradingStrategy":
        """Unknown or missing strategies map to DEFAULT."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return cls.DEFAULT


@dataclass
class RiskSizingResult:
    quantity: int
    per_contract_risk: float   # dollars
    total_risk: float          # quantity × per_contract_risk
    risk_budget: float         # account × adjusted risk %
    adjusted_risk_pct: float
    adjusted_max_contracts: int = 0
    strategy: str = TradingStrategy.DEFAULT.value

    def to_dict(self) -> dict:
        return {
            "quantity": self.quantity,
            "per_contract_risk": self.per_contract_risk,
            "total_risk": self.total_risk,
            "risk_budget": self.risk_budget,
            "adjusted_risk_pct": self.adjusted_risk_pct,
            "adjusted_max_contracts": self.adjusted_max_contracts,
            "strategy": self.strategy,
        }


@dataclass
class RiskProfile:
    max_risk_per_trade: float
    max_contracts: int
    recommended_stop_loss: float
    recommended_take_profit: float
    holding_period: str

    def to_dict(self) -> dict:
        return {
            "max_risk_per_trade": self.max_risk_per_trade,
            "max_contracts": self.max_contracts,
            "recommended_stop_loss": self.recommended_stop_loss,
            "recommended_take_profit": self.recommended_take_profit,
            "holding_period": self.holding_period,
        }


@dataclass
class RiskValidation:
    valid: bool
    warnings: List[str] = field(default_factory=list)
    profile: Optional[RiskProfile] = None

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "warnings": list(self.warnings),
            "profile": self.profile.to_dict() if self.profile else None,
        }


def _to_float(value, name: str) -> float:
    """Coerce an int, float or Decimal input; anything else is a caller error."""
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e


def apply_strategy_caps(risk_pct: float, max_contracts: int, strategy) -> tuple:
    """
    Tighten (never loosen) risk % and contract cap for a strategy.

    day_trade:   min(risk, 1%),        min(max, 5)
    swing_trade: min(risk × 1.5, 2%),  min(max, 10)
    scalping:    min(risk, 0.2%),      min(max, 2)
    other:       unchanged
    """
    caps = config.STRATEGY_CAPS.get(TradingStrategy.parse(strategy).value)
    if caps is None:
        return risk_pct, max_contracts
    return (
        min(risk_pct * caps["risk_mult"], caps["risk_pct_max"]),
        min(max_contracts, caps["max_contracts"]),
    )


def compute_qty(
    account_size: float,
    risk_pct: float = 0.01,
    entry: float = 0.0,
    stop: float = 0.0,
    multiplier: int = 100,
    max_contracts: int = 100,
    strategy="default",
) -> RiskSizingResult:
    """
    Size a long option position.

    Formula: quantity = floor((account × adjusted risk%) / ((entry - stop) × multiplier)),
    clamped to [0, adjusted max contracts].

    A stop at or above entry (zero per-contract risk) returns a zero-quantity
    result immediately.
    Decimal inputs are accepted; non-numeric inputs raise ValueError.
    """
    strategy_name = TradingStrategy.parse(strategy).value
    account_size = _to_float(account_size, "account_size")
    risk_pct = _to_float(risk_pct, "risk_pct")
    entry = _to_float(entry, "entry")
    stop = _to_float(stop, "stop")
    multiplier = _to_float(multiplier, "multiplier")
    max_contracts = _to_float(max_contracts, "max_contracts")

    per_contract_risk = max(0.0, entry - stop) * multiplier
    if not math.isfinite(per_contract_risk):
        per_contract_risk = 0.0

    if per_contract_risk <= 0:
        logger.warning(
            f"Zero per-contract risk (entry={entry}, stop={stop}); refusing to size position"
        )
        return RiskSizingResult(
            quantity=0,
            per_contract_risk=0.0,
            total_risk=0.0,
            risk_budget=0.0,
            adjusted_risk_pct=0.0,
            adjusted_max_contracts=0,
            strategy=strategy_name,
        )

    adjusted_risk_pct, adjusted_max = apply_strategy_caps(risk_pct, max_contracts, strategy_name)
    risk_budget = account_size * adjusted_risk_pct
    if not math.isfinite(risk_budget):
        risk_budget = 0.0

    raw_qty = risk_budget / per_contract_risk
    quantity = int(math.floor(raw_qty)) if math.isfinite(raw_qty) and raw_qty > 0 else 0
    if quantity > 0 and quantity * per_contract_risk > risk_budget:
        # float division rounded up across an integer boundary
        quantity -= 1
    cap = int(adjusted_max) if math.isfinite(adjusted_max) and adjusted_max > 0 else 0
    quantity = max(0, min(quantity, cap))

    total_risk = quantity * per_contract_risk

    logger.debug(
        f"Sizing [{strategy_name}]: budget ${risk_budget:,.2f} ({adjusted_risk_pct:.2%}) / "
        f"${per_contract_risk:,.2f} per contract -> {quantity} (cap {cap})"
    )

    return RiskSizingResult(
        quantity=quantity,
        per_contract_risk=per_contract_risk,
        total_risk=total_risk,
        risk_budget=risk_budget,
        adjusted_risk_pct=adjusted_risk_pct,
        adjusted_max_contracts=cap,
        strategy=strategy_name,
    )


def get_risk_profile(strategy="default") -> RiskProfile:
    key = TradingStrategy.parse(strategy).value
    return RiskProfile(**config.RISK_PROFILES.get(key, config.RISK_PROFILES["default"]))


def validate_risk_parameters(
    account_size: float,
    risk_pct: float,
    entry: float,
    stop: float,
    strategy="default",
    multiplier: int = 100,
) -> RiskValidation:
    """Advisory checks of sizing inputs against the strategy's risk profile."""
    account_size = _to_float(account_size, "account_size")
    risk_pct = _to_float(risk_pct, "risk_pct")
    entry = _to_float(entry, "entry")
    stop = _to_float(stop, "stop")
    multiplier = _to_float(multiplier, "multiplier")
    profile = get_risk_profile(strategy)
    strategy_name = TradingStrategy.parse(strategy).value
    warnings = []

    if risk_pct > profile.max_risk_per_trade:
        warnings.append(
            f"Risk per trade ({risk_pct:.1%}) exceeds recommended maximum "
            f"({profile.max_risk_per_trade:.1%}) for {strategy_name}"
        )

    per_contract_risk = max(0.0, entry - stop) * multiplier
    risk_budget = account_size * risk_pct
    if per_contract_risk > risk_budget * 0.1:
        warnings.append("Stop loss is too wide for the risk budget")

    return RiskValidation(valid=not warnings, warnings=warnings, profile=profile)
