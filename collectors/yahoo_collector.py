"""
Yahoo Finance Data Collector
Fetches: underlying spot price, intraday bars and option chains (no greeks)
Free, no API key required
"""
from typing import Dict, List, Optional

import pandas as pd
import yfinance as yf
from loguru import logger

from collectors.fallback import ProviderError
from utils.ttl_cache import TTLCache


class YahooCollector:
    """Collects quotes, intraday bars and option chains from Yahoo Finance"""

    name = "yahoo"

    def __init__(self, cache: Optional[TTLCache] = None):
        self.cache = cache

    def _cached(self, key):
        return self.cache.get(key) if self.cache is not None else None

    def _store(self, key, value):
        if self.cache is not None:
            self.cache.set(key, value)
        return value

    def get_current_price(self, symbol: str = "SPY") -> Dict:
        """Get the latest traded price"""
        key = ("yahoo:price", symbol)
        cached = self._cached(key)
        if cached is not None:
            return cached

        try:
            ticker = yf.Ticker(symbol)
            hist = ticker.history(period="1d", interval="1m")
            if hist.empty:
                # Market might be closed, get last available
                hist = ticker.history(period="5d")
        except Exception as e:
            logger.error(f"Error fetching current price for {symbol}: {e}")
            raise ProviderError(f"Yahoo price request failed for {symbol}: {e}") from e

        if hist.empty:
            raise ProviderError(f"No price data available for {symbol}")

        latest = hist.iloc[-1]
        return self._store(key, {
            "symbol": symbol,
            "price": float(latest["Close"]),
            "timestamp": str(latest.name),
            "source": self.name,
        })

    def get_intraday_bars(self, symbol: str = "SPY", period: str = "1d", interval: str = "1m") -> pd.DataFrame:
        """
        Get intraday bars for signal analysis

        Args:
            symbol: Stock symbol
            period: Lookback Yahoo accepts for the interval (1d, 5d)
            interval: 1m, 5m, 15m, 30m, 1h

        Returns DataFrame with OHLCV, oldest bar first
        """
        key = ("yahoo:bars", symbol, period, interval)
        cached = self._cached(key)
        if cached is not None:
            return cached

        try:
            hist = yf.Ticker(symbol).history(period=period, interval=interval)
        except Exception as e:
            logger.error(f"Error fetching intraday data for {symbol}: {e}")
            raise ProviderError(f"Yahoo bars request failed for {symbol}: {e}") from e

        if hist.empty:
            raise ProviderError(f"No intraday data for {symbol}")

        return self._store(key, hist[["Open", "High", "Low", "Close", "Volume"]])

    def get_option_chain(self, symbol: str, expiry: str) -> List[Dict]:
        """
        Get raw call and put records for one expiry.

        Records keep Yahoo's column names (contractSymbol, strike, lastPrice,
        bid, ask, volume, openInterest) plus 'type' and 'expiration'.
        """
        key = ("yahoo:chain", symbol, expiry)
        cached = self._cached(key)
        if cached is not None:
            return cached

        try:
            ticker = yf.Ticker(symbol)
            available = list(ticker.options or [])
            if expiry not in available:
                raise ProviderError(f"Yahoo has no {symbol} expiry {expiry}")
            chain = ticker.option_chain(expiry)
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Error fetching option chain for {symbol} {expiry}: {e}")
            raise ProviderError(f"Yahoo chain request failed for {symbol}: {e}") from e

        records = self._frame_records(chain.calls, "CALL", expiry) + self._frame_records(chain.puts, "PUT", expiry)
        if not records:
            raise ProviderError(f"Empty Yahoo option chain for {symbol} {expiry}")

        logger.debug(f"Yahoo chain {symbol} {expiry}: {len(records)} contracts")
        return self._store(key, records)

    @staticmethod
    def _frame_records(frame: Optional[pd.DataFrame], option_type: str, expiry: str) -> List[Dict]:
        if frame is None or frame.empty:
            return []
        frame = frame.assign(type=option_type, expiration=expiry)
        return frame.to_dict("records")
