"""
Technical indicators over OHLCV bars
RSI (Wilder), MACD, Bollinger Bands, Stochastic, ATR and moving averages,
computed with pandas on the Yahoo-style columns Open/High/Low/Close/Volume.

Every indicator returns None when there are not enough bars for it.
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd


@dataclass
class MacdReading:
    macd: float
    signal: float
    histogram: float

    def to_dict(self) -> dict:
        return {"macd": self.macd, "signal": self.signal, "histogram": self.histogram}


@dataclass
class BollingerBands:
    upper: float
    middle: float
    lower: float

    def position(self, price: float) -> Optional[float]:
        """Where price sits inside the bands: 0 at lower, 1 at upper."""
        width = self.upper - self.lower
        if width <= 0:
            return None
        return (price - self.lower) / width

    def to_dict(self) -> dict:
        return {"upper": self.upper, "middle": self.middle, "lower": self.lower}


@dataclass
class Stochastic:
    k: float
    d: float

    def to_dict(self) -> dict:
        return {"k": self.k, "d": self.d}


@dataclass
class IndicatorSnapshot:
    """Latest value of each indicator for one bar series"""
    rsi: Optional[float] = None
    macd: Optional[MacdReading] = None
    bb: Optional[BollingerBands] = None
    stoch: Optional[Stochastic] = None
    atr: Optional[float] = None
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    ema20: Optional[float] = None
    volume: Optional[float] = None
    avg_volume: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "rsi": self.rsi,
            "macd": self.macd.to_dict() if self.macd else None,
            "bb": self.bb.to_dict() if self.bb else None,
            "stoch": self.stoch.to_dict() if self.stoch else None,
            "atr": self.atr,
            "sma20": self.sma20,
            "sma50": self.sma50,
            "ema20": self.ema20,
            "volume": self.volume,
            "avg_volume": self.avg_volume,
        }


def _last(series: pd.Series) -> Optional[float]:
    if series.empty or pd.isna(series.iloc[-1]):
        return None
    return float(series.iloc[-1])


def _seeded_ewm(values: pd.Series, period: int, alpha: float) -> pd.Series:
    """
    Exponential average seeded with the simple mean of the first `period` values.

    The result starts at position period-1 of the input.
    """
    seeded = values.iloc[period - 1:].astype(float)
    seeded.iloc[0] = values.iloc[:period].mean()
    return seeded.ewm(alpha=alpha, adjust=False).mean()


def sma(values: pd.Series, period: int) -> Optional[float]:
    """Simple Moving Average of the last `period` values"""
    if len(values) < period:
        return None
    return _last(values.rolling(window=period).mean())


def ema_series(values: pd.Series, period: int) -> pd.Series:
    return _seeded_ewm(values, period, alpha=2 / (period + 1))


def ema(values: pd.Series, period: int) -> Optional[float]:
    """Exponential Moving Average, k = 2 / (period + 1)"""
    if len(values) < period:
        return None
    return _last(ema_series(values, period))


def rsi(closes: pd.Series, period: int = 14) -> Optional[float]:
    """
    Calculate RSI (Relative Strength Index) with Wilder smoothing

    A series with no down moves reads 100.
    """
    if len(closes) < period + 1:
        return None
    delta = closes.diff().iloc[1:]
    gain = delta.where(delta > 0, 0.0)
    loss = -delta.where(delta < 0, 0.0)

    avg_gain = _last(_seeded_ewm(gain, period, alpha=1 / period))
    avg_loss = _last(_seeded_ewm(loss, period, alpha=1 / period))
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def macd(
    closes: pd.Series,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
    signal_mode: str = "ema",
) -> Optional[MacdReading]:
    """
    MACD line (fast EMA - slow EMA), signal line and histogram.

    signal_mode "ema" uses the signal_period EMA of the MACD line.
    signal_mode "approx" uses 0.8 x MACD, which always makes the histogram
    carry the sign of the MACD line.
    """
    if len(closes) < slow_period + signal_period:
        return None
    macd_line = (ema_series(closes, fast_period) - ema_series(closes, slow_period)).dropna()
    latest = float(macd_line.iloc[-1])

    if signal_mode == "approx":
        signal = latest * 0.8
    elif signal_mode == "ema":
        signal = _last(ema_series(macd_line, signal_period))
    else:
        raise ValueError(f"Unknown MACD signal mode: {signal_mode!r}")

    return MacdReading(macd=latest, signal=signal, histogram=latest - signal)


def bollinger_bands(closes: pd.Series, period: int = 20, std_dev: float = 2) -> Optional[BollingerBands]:
    """Bollinger Bands with population standard deviation"""
    if len(closes) < period:
        return None
    window = closes.iloc[-period:]
    middle = float(window.mean())
    std = float(window.std(ddof=0))
    return BollingerBands(upper=middle + std_dev * std, middle=middle, lower=middle - std_dev * std)


def stochastic(df: pd.DataFrame, period: int = 14, smooth_k: int = 3, smooth_d: int = 3) -> Optional[Stochastic]:
    """Slow stochastic: %K smoothed over smooth_k bars, %D over smooth_d values of %K"""
    if len(df) < period:
        return None
    highest = df["High"].rolling(window=period).max()
    lowest = df["Low"].rolling(window=period).min()
    # Avoid division by zero on flat windows
    high_low_range = (highest - lowest).replace(0, np.nan)

    raw_k = ((df["Close"] - lowest) / high_low_range * 100).dropna()
    if len(raw_k) < smooth_k + smooth_d - 1:
        return None
    k_line = raw_k.rolling(window=smooth_k).mean()
    k = _last(k_line)
    d = _last(k_line.rolling(window=smooth_d).mean())
    if k is None or d is None:
        return None
    return Stochastic(k=k, d=d)


def atr(df: pd.DataFrame, period: int = 14) -> Optional[float]:
    """Average True Range (simple average of the last `period` true ranges)"""
    if len(df) < period + 1:
        return None
    prev_close = df["Close"].shift(1)
    true_range = pd.concat([
        df["High"] - df["Low"],
        (df["High"] - prev_close).abs(),
        (df["Low"] - prev_close).abs(),
    ], axis=1).max(axis=1).iloc[1:]
    return sma(true_range, period)


def prepare_bars(bars: pd.DataFrame) -> pd.DataFrame:
    """
    Clean an OHLCV frame: rows without a close are dropped, missing highs
    and lows fall back to the close and missing volume counts as zero.
    """
    if bars is None or bars.empty or "Close" not in bars:
        return pd.DataFrame(columns=["High", "Low", "Close", "Volume"])
    df = bars.dropna(subset=["Close"])
    close = df["Close"].astype(float)
    high = df["High"].astype(float).fillna(close) if "High" in df else close
    low = df["Low"].astype(float).fillna(close) if "Low" in df else close
    volume = df["Volume"].astype(float).fillna(0.0) if "Volume" in df else pd.Series(0.0, index=df.index)
    return pd.DataFrame({"High": high, "Low": low, "Close": close, "Volume": volume}, index=df.index)


def calculate_indicators(bars: pd.DataFrame, macd_signal: str = "ema") -> IndicatorSnapshot:
    """Latest indicator values for a bar series (oldest bar first)"""
    df = prepare_bars(bars)
    if df.empty:
        return IndicatorSnapshot()

    closes = df["Close"]
    volumes = df["Volume"]
    return IndicatorSnapshot(
        rsi=rsi(closes),
        macd=macd(closes, signal_mode=macd_signal),
        bb=bollinger_bands(closes),
        stoch=stochastic(df),
        atr=atr(df),
        sma20=sma(closes, 20),
        sma50=sma(closes, 50),
        ema20=ema(closes, 20),
        volume=float(volumes.iloc[-1]),
        avg_volume=sma(volumes, 20),
    )
