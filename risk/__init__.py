"""
Risk Module for option suggestions
Position sizing with strategy caps and tiered exit plans
"""
from .risk_sizer import (
    TradingStrategy, RiskSizingResult, RiskProfile, RiskValidation,
    compute_qty, get_risk_profile, validate_risk_parameters,
)
from .scaling_plan import ScalingPlan, ScaleOutStep, build_scaling_plan

__all__ = [
    "TradingStrategy", "RiskSizingResult", "RiskProfile", "RiskValidation",
    "compute_qty", "get_risk_profile", "validate_risk_parameters",
    "ScalingPlan", "ScaleOutStep", "build_scaling_plan",
]
