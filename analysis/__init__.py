"""
Analysis Module for option chains
Quote normalization, theoretical pricing and contract selection
"""
from .option_quote import OptionQuote, OptionType, SelectionMetrics, normalize_chain, parse_occ_symbol
from .option_pricer import black_scholes_price, norm_cdf, intrinsic_value
from .contract_selector import (
    SelectionCriteria, select_optimal, nearest_strike, pick_by_delta,
    pick_by_premium, mid_price, compute_target_delta, criteria_for_strategy,
)

__all__ = [
    "OptionQuote", "OptionType", "SelectionMetrics", "normalize_chain", "parse_occ_symbol",
    "black_scholes_price", "norm_cdf", "intrinsic_value",
    "SelectionCriteria", "select_optimal", "nearest_strike", "pick_by_delta",
    "pick_by_premium", "mid_price", "compute_target_delta", "criteria_for_strategy",
]
