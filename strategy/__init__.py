"""
Strategy Module for option suggestions
Symbol policies, expiry resolution and suggestion construction
"""
from .exceptions import SuggestionError, InvalidExpiryOverride, UnsupportedSymbol, UnsupportedDirection
from .symbol_policy import SymbolOptionPolicy, SYMBOL_POLICIES, get_symbol_policy, find_symbol_policy
from .expiry_resolver import ExpiryCadence, ExpiryResolution, resolve_expiry
from .suggestion_builder import ContractSuggestion, PricingSource, build_suggestion, apply_chain_selection

__all__ = [
    "SuggestionError", "InvalidExpiryOverride", "UnsupportedSymbol", "UnsupportedDirection",
    "SymbolOptionPolicy", "SYMBOL_POLICIES", "get_symbol_policy", "find_symbol_policy",
    "ExpiryCadence", "ExpiryResolution", "resolve_expiry",
    "ContractSuggestion", "PricingSource", "build_suggestion", "apply_chain_selection",
]
