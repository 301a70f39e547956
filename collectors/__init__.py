"""
Data Collectors for the Options Suggestion Agent
"""
from .fallback import ProviderError, ProviderFailure, FallbackResult, first_successful
from .chain_collector import ChainCollector, ChainSnapshot
from .yahoo_collector import YahooCollector
from .polygon_collector import PolygonCollector

__all__ = [
    "ProviderError", "ProviderFailure", "FallbackResult", "first_successful",
    "ChainCollector", "ChainSnapshot", "YahooCollector", "PolygonCollector",
]
