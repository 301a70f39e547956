"""Shared fixtures for the options suggestion tests."""

from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from utils.timezone import UTC


@pytest.fixture
def monday_morning():
    """Mon 2025-01-13 10:00 ET (15:00 UTC)."""
    return UTC.localize(datetime(2025, 1, 13, 15, 0))


@pytest.fixture
def spy_call_chain():
    """Two-strike call chain: 455 is liquid and on-target, 460 is thin and far OTM."""
    return [
        {"strike": 455, "type": "CALL", "bid": 1.0, "ask": 1.2, "delta": 0.35,
         "openInterest": 500, "vol": 300},
        {"strike": 460, "type": "CALL", "bid": 0.5, "ask": 0.9, "delta": 0.20,
         "openInterest": 50, "vol": 10},
    ]


@pytest.fixture
def spy_full_chain():
    """Calls and puts around a 450 spot for 2025-01-17, Yahoo-style column names."""
    rows = []
    for strike, delta, bid, ask, oi, vol in [
        (445, 0.62, 6.10, 6.30, 2200, 1500),
        (450, 0.50, 3.40, 3.55, 5000, 4200),
        (455, 0.36, 1.60, 1.70, 3800, 2900),
        (460, 0.21, 0.62, 0.70, 2100, 1700),
        (465, 0.10, 0.18, 0.24, 900, 400),
    ]:
        rows.append({
            "contractSymbol": f"SPY250117C00{strike}000",
            "strike": float(strike), "type": "CALL",
            "bid": bid, "ask": ask, "lastPrice": (bid + ask) / 2,
            "delta": delta, "openInterest": oi, "volume": vol,
            "expiration": "2025-01-17",
        })
    for strike, delta, bid, ask, oi, vol in [
        (440, -0.20, 0.55, 0.62, 1900, 1200),
        (445, -0.34, 1.40, 1.50, 3100, 2500),
        (450, -0.49, 3.00, 3.15, 4700, 3900),
    ]:
        rows.append({
            "contractSymbol": f"SPY250117P00{strike}000",
            "strike": float(strike), "type": "PUT",
            "bid": bid, "ask": ask, "lastPrice": (bid + ask) / 2,
            "delta": delta, "openInterest": oi, "volume": vol,
            "expiration": "2025-01-17",
        })
    return rows


def make_bars(closes, spread=0.001, volume=1000.0):
    """One-minute OHLCV bars from a close path, highs/lows spread around each close."""
    closes = np.asarray(closes, dtype=float)
    return pd.DataFrame(
        {
            "Open": closes,
            "High": closes * (1 + spread),
            "Low": closes * (1 - spread),
            "Close": closes,
            "Volume": np.full(len(closes), volume),
        },
        index=pd.date_range("2025-01-13 14:30", periods=len(closes), freq="min", tz="UTC"),
    )


@pytest.fixture
def rising_bars():
    """60 bars climbing 0.02% a minute from 449."""
    return make_bars(449 * 1.0002 ** np.arange(60))


@pytest.fixture
def falling_bars():
    """60 bars sliding 0.02% a minute from 451."""
    return make_bars(451 * 0.9998 ** np.arange(60))


@pytest.fixture
def bars_factory():
    return make_bars
