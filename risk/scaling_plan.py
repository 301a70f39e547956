"""
Scaling Plan Builder
Splits a sized position into tiered exits at escalating premium targets.
"""
import math
from dataclasses import dataclass, field
from typing import List, Optional

import config


@dataclass
class ScaleOutStep:
    sell_quantity: int
    target_price: Optional[float]
    note: str

    def to_dict(self) -> dict:
        return {
            "sell_quantity": self.sell_quantity,
            "target_price": self.target_price,
            "note": self.note,
        }


@dataclass
class ScalingPlan:
    quantity: int
    stop_price: Optional[float]
    iterations: List[ScaleOutStep] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "quantity": self.quantity,
            "stop_price": self.stop_price,
            "iterations": [step.to_dict() for step in self.iterations],
        }


def _round2(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return round(value, 2)


def build_scaling_plan(
    quantity: int,
    entry: Optional[float],
    take_profit: Optional[float],
    stop: Optional[float] = None,
) -> ScalingPlan:
    """
    Tiered exit plan for a long option position.

    - 1 contract: sell all at take_profit
    - 2+: sell ceil(half) at take_profit and move stop to breakeven; then
      a lone runner at the 1.3x extension, or floor(remaining/2) at 1.3x
      with the rest left as a runner at 1.6x

    Extensions are measured from entry: entry + (take_profit - entry) × factor.
    Sell quantities always sum to quantity.
    """
    plan = ScalingPlan(quantity=quantity, stop_price=_round2(stop))
    if quantity is None or quantity <= 0:
        return plan

    base_target = _round2(take_profit)

    def extended(factor: float) -> Optional[float]:
        if base_target is None or entry is None or not math.isfinite(entry):
            return base_target
        return _round2(entry + (base_target - entry) * factor)

    if quantity == 1:
        plan.iterations.append(ScaleOutStep(
            1, base_target, "Exit full position at target or earlier if momentum fades."))
        return plan

    first = max(1, math.ceil(quantity * config.SCALING["first_fraction"]))
    plan.iterations.append(ScaleOutStep(
        first, base_target, "Scale out half and move stop to breakeven once target prints."))
    remaining = quantity - first
    if remaining <= 0:
        return plan

    if remaining == 1:
        plan.iterations.append(ScaleOutStep(
            1, extended(config.SCALING["extension_factor"]),
            "Let final runner stretch; trail stop below last higher low."))
        return plan

    second = max(1, remaining // 2)
    plan.iterations.append(ScaleOutStep(
        second, extended(config.SCALING["extension_factor"]),
        "Take additional profits if extension continues; trail stop under VWAP."))
    remaining -= second

    if remaining > 0:
        plan.iterations.append(ScaleOutStep(
            remaining, extended(config.SCALING["runner_factor"]),
            "Leave final runner for outsized move; ratchet stop up aggressively."))

    return plan
