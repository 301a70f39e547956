"""
Polygon.io Data Collector
Fetches: option chain snapshots with greeks, open interest and NBBO quotes
Requires API key (Options tier for snapshots)
"""
import os
from typing import Dict, List, Optional

import requests
from dotenv import load_dotenv
from loguru import logger

from collectors.fallback import ProviderError
from utils.ttl_cache import TTLCache

load_dotenv()

POLYGON_BASE = "https://api.polygon.io"
MAX_PAGES = 10


class PolygonCollector:
    """Collects option chain snapshots from Polygon.io"""

    name = "polygon"

    def __init__(self, api_key: str = None, cache: Optional[TTLCache] = None, timeout: float = 10):
        self.api_key = api_key or os.getenv("POLYGON_API_KEY", "")
        self.cache = cache
        self.timeout = timeout
        self.session = requests.Session()

        if not self.api_key:
            logger.warning("Polygon API key not set. Get one at https://polygon.io/")

    def _request(self, url: str, params: dict = None) -> dict:
        """Make API request; raises ProviderError on any failure"""
        if not self.api_key:
            raise ProviderError("Polygon API key required")

        params = dict(params or {})
        params["apiKey"] = self.api_key

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Polygon request error: {e}")
            raise ProviderError(f"Polygon request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Polygon returned invalid JSON: {e}") from e

        if data.get("status") == "ERROR":
            raise ProviderError(f"Polygon API error: {data.get('error')}")

        return data

    def get_option_chain(self, symbol: str, expiry: str) -> List[Dict]:
        """
        Get raw option records for one expiry from the chain snapshot.

        Nested snapshot fields are flattened to strike/type/bid/ask/last/
        delta/openInterest/volume/expiration/contractSymbol.
        """
        key = ("polygon:chain", symbol, expiry)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        url = f"{POLYGON_BASE}/v3/snapshot/options/{symbol}"
        params = {"expiration_date": expiry, "limit": 250}
        records: List[Dict] = []

        for _ in range(MAX_PAGES):
            data = self._request(url, params)
            records.extend(self._flatten(r) for r in data.get("results") or [])
            next_url = data.get("next_url")
            if not next_url:
                break
            url, params = next_url, None

        if not records:
            raise ProviderError(f"Empty Polygon option chain for {symbol} {expiry}")

        logger.debug(f"Polygon chain {symbol} {expiry}: {len(records)} contracts")
        if self.cache is not None:
            self.cache.set(key, records)
        return records

    @staticmethod
    def _flatten(result: Dict) -> Dict:
        details = result.get("details") or {}
        greeks = result.get("greeks") or {}
        last_quote = result.get("last_quote") or {}
        last_trade = result.get("last_trade") or {}
        day = result.get("day") or {}
        return {
            "contractSymbol": details.get("ticker"),
            "strike": details.get("strike_price"),
            "type": details.get("contract_type"),
            "expiration": details.get("expiration_date"),
            "bid": last_quote.get("bid"),
            "ask": last_quote.get("ask"),
            "last": last_trade.get("price", day.get("close")),
            "delta": greeks.get("delta"),
            "openInterest": result.get("open_interest"),
            "volume": day.get("volume"),
        }
