"""
Option Chain Collector
Walks an ordered list of chain providers, normalizes their records and
returns the first chain with enough contracts.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from analysis.option_quote import OptionQuote, normalize_chain
from collectors.fallback import ProviderError, ProviderFailure, first_successful
from utils.ttl_cache import TTLCache

# (name, fetch(symbol, expiry) -> raw records)
ChainProvider = Tuple[str, Callable[[str, str], List[Dict]]]


@dataclass
class ChainSnapshot:
    source: Optional[str]
    quotes: List[OptionQuote] = field(default_factory=list)
    attempts: List[str] = field(default_factory=list)
    errors: List[ProviderFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.quotes)

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "contracts": len(self.quotes),
            "attempts": list(self.attempts),
            "errors": [e.to_dict() for e in self.errors],
        }


class ChainCollector:
    """
    Fetches a normalized option chain with provider fallback.

    A provider whose normalized chain has fewer than min_contracts quotes
    counts as a failure and the next provider is tried.
    """

    def __init__(
        self,
        providers: Sequence[ChainProvider],
        cache: Optional[TTLCache] = None,
        min_contracts: int = 4,
    ):
        self.providers = list(providers)
        self.cache = cache
        self.min_contracts = min_contracts

    @classmethod
    def from_collectors(cls, collectors, cache: Optional[TTLCache] = None, min_contracts: int = 4):
        """Build from collector objects exposing `name` and `get_option_chain(symbol, expiry)`."""
        return cls(
            [(c.name, c.get_option_chain) for c in collectors],
            cache=cache,
            min_contracts=min_contracts,
        )

    def fetch(self, symbol: str, expiry: str) -> ChainSnapshot:
        key = ("chain", symbol, expiry)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        attempts: List[str] = []

        def attempt(name, fn):
            def run():
                attempts.append(name)
                quotes = normalize_chain(fn(symbol, expiry), source=name)
                if len(quotes) < self.min_contracts:
                    raise ProviderError(
                        f"only {len(quotes)} usable contracts (need {self.min_contracts})"
                    )
                return quotes
            return name, run

        result = first_successful([attempt(name, fn) for name, fn in self.providers])
        snapshot = ChainSnapshot(
            source=result.source,
            quotes=result.value or [],
            attempts=attempts,
            errors=result.errors,
        )

        if snapshot.ok:
            logger.info(f"{symbol} {expiry}: {len(snapshot.quotes)} contracts from {snapshot.source}")
            if self.cache is not None:
                self.cache.set(key, snapshot)
        else:
            failures = "; ".join(f"{e.provider}: {e.message}" for e in snapshot.errors) or "no providers"
            logger.warning(f"{symbol} {expiry}: option chain unavailable ({failures})")

        return snapshot
