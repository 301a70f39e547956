"""
Bar Signal Analyzer
Turns intraday OHLCV bars into a directional strength in [-1, 1]:
- Day trade: RSI extremes, MACD, Bollinger position, volume spikes,
  support/resistance proximity (needs 20+ bars)
- Swing trade: SMA20/SMA50 trend, EMA20, RSI, MACD sign (needs 50+ bars)

Positive strength favours calls, negative favours puts.
"""
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd
from loguru import logger

import config
from risk.risk_sizer import TradingStrategy
from signals.indicators import IndicatorSnapshot, calculate_indicators, prepare_bars


@dataclass
class SignalAnalysis:
    """Result of one bar analysis"""
    strategy: str
    strength: float
    signals: List[str] = field(default_factory=list)
    price: Optional[float] = None
    indicators: Optional[IndicatorSnapshot] = None

    @property
    def side(self) -> str:
        return "call" if self.strength > 0 else "put"

    def is_actionable(self, min_strength: float) -> bool:
        return abs(self.strength) >= min_strength

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy,
            "strength": self.strength,
            "side": self.side,
            "signals": list(self.signals),
            "price": self.price,
            "indicators": self.indicators.to_dict() if self.indicators else None,
        }


def _clamp(strength: float) -> float:
    return max(-1.0, min(1.0, strength))


class BarSignalAnalyzer:
    """
    Scores bar series for the day-trade and swing-trade playbooks.

    Each triggered condition adds its weight to the strength; the total is
    clamped to [-1, 1].
    """

    THRESHOLDS = {
        # Day trade
        "day_min_bars": 20,
        "rsi_overbought": 70,
        "rsi_oversold": 30,
        "bb_upper": 0.8,
        "bb_lower": 0.2,
        "volume_spike": 1.5,        # × 20-bar average volume
        "sr_lookback": 30,          # bars scanned for support/resistance
        "sr_min_bars": 5,
        "sr_proximity": 0.004,      # within 0.4% of the level

        # Swing trade
        "swing_min_bars": 50,
        "swing_rsi_overbought": 65,
        "swing_rsi_oversold": 35,
    }

    WEIGHTS = {
        "overbought": -0.3,
        "oversold": 0.3,
        "macd_bullish": 0.2,
        "macd_bearish": -0.2,
        "bb_upper_breakout": 0.2,
        "bb_lower_breakout": -0.2,
        "high_volume": 0.1,
        "near_support": 0.15,
        "support_bounce": 0.1,
        "near_resistance": -0.15,
        "resistance_reject": -0.1,
        "uptrend": 0.4,
        "downtrend": -0.4,
        "ema_support": 0.2,
        "ema_resistance": -0.2,
        "swing_overbought": -0.2,
        "swing_oversold": 0.2,
        "macd_positive": 0.3,
    }

    def __init__(self, thresholds: dict = None, macd_signal: Optional[str] = None):
        self.thresholds = {**self.THRESHOLDS, **(thresholds or {})}
        self.macd_signal = macd_signal or config.SIGNALS["macd_signal"]

    def _score(self, signals: List[str]) -> float:
        return _clamp(sum(self.WEIGHTS[name] for name in signals))

    def analyze_day_trade(self, bars: pd.DataFrame, indicators: IndicatorSnapshot, price: float) -> SignalAnalysis:
        """Momentum, band and level signals for intraday entries"""
        t = self.thresholds
        strategy = TradingStrategy.DAY_TRADE.value
        if indicators is None or bars is None or len(bars) < t["day_min_bars"]:
            return SignalAnalysis(strategy=strategy, strength=0.0, price=price, indicators=indicators)

        signals = []

        # Momentum
        if indicators.rsi is not None:
            if indicators.rsi > t["rsi_overbought"]:
                signals.append("overbought")
            elif indicators.rsi < t["rsi_oversold"]:
                signals.append("oversold")

        m = indicators.macd
        if m is not None:
            if m.histogram > 0 and m.macd > m.signal:
                signals.append("macd_bullish")
            elif m.histogram < 0 and m.macd < m.signal:
                signals.append("macd_bearish")

        if indicators.bb is not None:
            position = indicators.bb.position(price)
            if position is not None:
                if position > t["bb_upper"]:
                    signals.append("bb_upper_breakout")
                elif position < t["bb_lower"]:
                    signals.append("bb_lower_breakout")

        if indicators.avg_volume and indicators.volume > indicators.avg_volume * t["volume_spike"]:
            signals.append("high_volume")

        signals.extend(self._level_signals(bars, price))

        return SignalAnalysis(strategy=strategy, strength=self._score(signals), signals=signals,
                              price=price, indicators=indicators)

    def _level_signals(self, bars: pd.DataFrame, price: float) -> List[str]:
        """Support/resistance from the recent low/high"""
        t = self.thresholds
        recent = bars.tail(t["sr_lookback"])
        if len(recent) < t["sr_min_bars"]:
            return []

        signals = []
        closes = recent["Close"].dropna()
        prev_close = float(closes.iloc[-2]) if len(closes) >= 2 else None

        lows = recent["Low"].dropna()
        if not lows.empty:
            support = float(lows.min())
            diff = price - support
            if diff >= 0 and support > 0 and diff / support <= t["sr_proximity"]:
                signals.append("near_support")
                if prev_close is not None and price > prev_close:
                    signals.append("support_bounce")

        highs = recent["High"].dropna()
        if not highs.empty:
            resistance = float(highs.max())
            diff = resistance - price
            if diff >= 0 and resistance > 0 and diff / resistance <= t["sr_proximity"]:
                signals.append("near_resistance")
                if prev_close is not None and price < prev_close:
                    signals.append("resistance_reject")

        return signals

    def analyze_swing_trade(self, bars: pd.DataFrame, indicators: IndicatorSnapshot, price: float) -> SignalAnalysis:
        """Trend-following signals for multi-day holds"""
        t = self.thresholds
        strategy = TradingStrategy.SWING_TRADE.value
        if indicators is None or bars is None or len(bars) < t["swing_min_bars"]:
            return SignalAnalysis(strategy=strategy, strength=0.0, price=price, indicators=indicators)

        signals = []
        sma20, sma50 = indicators.sma20, indicators.sma50
        if sma20 is not None and sma50 is not None:
            if sma20 > sma50 and price > sma20:
                signals.append("uptrend")
            elif sma20 < sma50 and price < sma20:
                signals.append("downtrend")

        if indicators.ema20 is not None:
            if price > indicators.ema20:
                signals.append("ema_support")
            elif price < indicators.ema20:
                signals.append("ema_resistance")

        if indicators.rsi is not None:
            if indicators.rsi > t["swing_rsi_overbought"]:
                signals.append("swing_overbought")
            elif indicators.rsi < t["swing_rsi_oversold"]:
                signals.append("swing_oversold")

        if indicators.macd is not None and indicators.macd.macd > 0:
            signals.append("macd_positive")

        return SignalAnalysis(strategy=strategy, strength=self._score(signals), signals=signals,
                              price=price, indicators=indicators)

    def analyze(self, bars: pd.DataFrame, price: Optional[float] = None, strategy="day_trade") -> SignalAnalysis:
        """
        Analyze bars for a trading strategy.

        Swing trades use the swing playbook; every other strategy uses the
        day-trade one. price defaults to the last close.
        """
        df = prepare_bars(bars)
        if price is None:
            if df.empty:
                raise ValueError("No bars to analyze and no price given")
            price = float(df["Close"].iloc[-1])

        indicators = calculate_indicators(df, macd_signal=self.macd_signal)
        if TradingStrategy.parse(strategy) is TradingStrategy.SWING_TRADE:
            analysis = self.analyze_swing_trade(df, indicators, price)
        else:
            analysis = self.analyze_day_trade(df, indicators, price)

        logger.debug(
            f"Bar analysis [{analysis.strategy}] over {len(df)} bars: "
            f"strength {analysis.strength:+.2f} ({', '.join(analysis.signals) or 'none'})"
        )
        return analysis
