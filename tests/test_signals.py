"""Unit tests for bar indicators and day/swing signal scoring."""

import numpy as np
import pandas as pd
import pytest

from signals.indicators import (
    BollingerBands,
    IndicatorSnapshot,
    MacdReading,
    atr,
    bollinger_bands,
    calculate_indicators,
    ema,
    macd,
    prepare_bars,
    rsi,
    sma,
    stochastic,
)
from signals.signal_analyzer import BarSignalAnalyzer, SignalAnalysis


class TestIndicators:
    """Test suite for the indicator functions."""

    def test_sma(self):
        assert sma(pd.Series([1.0, 2, 3, 4, 5]), 3) == pytest.approx(4.0)
        assert sma(pd.Series([1.0, 2]), 3) is None

    def test_ema_seeded_with_sma(self):
        # seed mean(1, 2, 3) = 2, k = 0.5: 4 -> 3, 5 -> 4
        assert ema(pd.Series([1.0, 2, 3, 4, 5]), 3) == pytest.approx(4.0)
        assert ema(pd.Series([1.0]), 3) is None

    def test_rsi_wilder_smoothing(self):
        # changes +1, -1, +1 with period 2: avg gain 0.75, avg loss 0.25
        assert rsi(pd.Series([1.0, 2, 1, 2]), period=2) == pytest.approx(75.0)

    def test_rsi_extremes(self, rising_bars, falling_bars):
        assert rsi(rising_bars["Close"]) == 100.0
        assert rsi(falling_bars["Close"]) == pytest.approx(0.0)

    def test_rsi_needs_period_plus_one(self):
        assert rsi(pd.Series(np.arange(14, dtype=float))) is None

    def test_macd_needs_35_closes(self, rising_bars):
        assert macd(rising_bars["Close"].iloc[:34]) is None
        assert macd(rising_bars["Close"].iloc[:35]) is not None

    def test_macd_rising(self, rising_bars):
        reading = macd(rising_bars["Close"])
        assert reading.macd > 0
        assert reading.histogram > 0
        assert reading.histogram == pytest.approx(reading.macd - reading.signal)

    def test_macd_approx_signal(self, falling_bars):
        reading = macd(falling_bars["Close"], signal_mode="approx")
        assert reading.macd < 0
        assert reading.signal == pytest.approx(reading.macd * 0.8)
        assert reading.histogram < 0

    def test_macd_unknown_mode(self, rising_bars):
        with pytest.raises(ValueError):
            macd(rising_bars["Close"], signal_mode="sma")

    def test_bollinger_population_std(self):
        closes = pd.Series(np.arange(1, 21, dtype=float))
        bands = bollinger_bands(closes)
        std = np.std(np.arange(1, 21))
        assert bands.middle == pytest.approx(10.5)
        assert bands.upper == pytest.approx(10.5 + 2 * std)
        assert bands.lower == pytest.approx(10.5 - 2 * std)
        assert bands.position(20.0) > 0.8

    def test_flat_bands_have_no_position(self):
        bands = bollinger_bands(pd.Series([5.0] * 20))
        assert bands.upper == bands.lower
        assert bands.position(5.0) is None

    def test_atr_constant_range(self, bars_factory):
        bars = bars_factory([100.0] * 20, spread=0.01)
        assert atr(bars) == pytest.approx(2.0)
        assert atr(bars.iloc[:14]) is None

    def test_stochastic_rising_reads_high(self, rising_bars):
        reading = stochastic(rising_bars)
        assert 50 < reading.k <= 100
        assert 50 < reading.d <= 100
        assert stochastic(rising_bars.iloc[:10]) is None

    def test_calculate_indicators(self, rising_bars):
        snapshot = calculate_indicators(rising_bars)
        closes = rising_bars["Close"]
        assert snapshot.sma20 == pytest.approx(closes.iloc[-20:].mean())
        assert snapshot.sma50 == pytest.approx(closes.iloc[-50:].mean())
        assert snapshot.sma20 > snapshot.sma50
        assert snapshot.volume == 1000.0
        assert snapshot.avg_volume == pytest.approx(1000.0)
        assert snapshot.to_dict()["macd"]["macd"] == snapshot.macd.macd

    def test_calculate_indicators_empty(self):
        snapshot = calculate_indicators(pd.DataFrame())
        assert snapshot == IndicatorSnapshot()

    def test_prepare_bars_fills_missing_fields(self):
        bars = pd.DataFrame({"Close": [10.0, None, 11.0], "Volume": [5.0, 6.0, None]})
        df = prepare_bars(bars)
        assert list(df["Close"]) == [10.0, 11.0]
        assert list(df["High"]) == [10.0, 11.0]
        assert list(df["Volume"]) == [5.0, 0.0]


@pytest.fixture
def analyzer():
    return BarSignalAnalyzer(macd_signal="ema")


class TestDayTradeSignals:
    """Test suite for BarSignalAnalyzer.analyze_day_trade."""

    def test_momentum_and_volume(self, analyzer, bars_factory):
        snapshot = IndicatorSnapshot(
            rsi=25,
            macd=MacdReading(macd=0.5, signal=0.3, histogram=0.2),
            bb=BollingerBands(upper=110, middle=100, lower=90),
            volume=3000,
            avg_volume=1000,
        )
        bars = bars_factory([120.0] * 25, spread=0.01)
        analysis = analyzer.analyze_day_trade(bars, snapshot, price=100)
        assert analysis.signals == ["oversold", "macd_bullish", "high_volume"]
        assert analysis.strength == pytest.approx(0.6)
        assert analysis.side == "call"

    def test_bearish_momentum(self, analyzer, bars_factory):
        snapshot = IndicatorSnapshot(
            rsi=75,
            macd=MacdReading(macd=-0.5, signal=-0.3, histogram=-0.2),
            bb=BollingerBands(upper=110, middle=100, lower=90),
        )
        analysis = analyzer.analyze_day_trade(bars_factory([120.0] * 25), snapshot, price=91)
        assert analysis.signals == ["overbought", "macd_bearish", "bb_lower_breakout"]
        assert analysis.strength == pytest.approx(-0.7)
        assert analysis.side == "put"

    def test_support_bounce(self, analyzer, bars_factory):
        bars = bars_factory([105.0] * 28 + [100.0, 100.1], spread=0)
        analysis = analyzer.analyze_day_trade(bars, IndicatorSnapshot(), price=100.3)
        assert analysis.signals == ["near_support", "support_bounce"]
        assert analysis.strength == pytest.approx(0.25)

    def test_resistance_reject(self, analyzer, bars_factory):
        bars = bars_factory([100.0] * 28 + [110.0, 109.9], spread=0)
        analysis = analyzer.analyze_day_trade(bars, IndicatorSnapshot(), price=109.8)
        assert analysis.signals == ["near_resistance", "resistance_reject"]
        assert analysis.strength == pytest.approx(-0.25)

    def test_too_few_bars(self, analyzer, bars_factory):
        snapshot = IndicatorSnapshot(rsi=10)
        analysis = analyzer.analyze_day_trade(bars_factory([100.0] * 19), snapshot, price=100)
        assert analysis.strength == 0.0
        assert analysis.signals == []


class TestSwingTradeSignals:
    """Test suite for BarSignalAnalyzer.analyze_swing_trade."""

    def test_strength_is_clamped(self, analyzer, bars_factory):
        snapshot = IndicatorSnapshot(
            rsi=30, sma20=101, sma50=100, ema20=101,
            macd=MacdReading(macd=0.5, signal=0.4, histogram=0.1),
        )
        analysis = analyzer.analyze_swing_trade(bars_factory([100.0] * 50), snapshot, price=102)
        assert analysis.signals == ["uptrend", "ema_support", "swing_oversold", "macd_positive"]
        assert analysis.strength == 1.0

    def test_too_few_bars(self, analyzer, bars_factory):
        snapshot = IndicatorSnapshot(sma20=101, sma50=100, ema20=101)
        analysis = analyzer.analyze_swing_trade(bars_factory([100.0] * 49), snapshot, price=102)
        assert analysis.strength == 0.0


class TestAnalyze:
    """Test suite for BarSignalAnalyzer.analyze on synthetic bars."""

    def test_rising_swing_is_call(self, analyzer, rising_bars):
        analysis = analyzer.analyze(rising_bars, strategy="swing_trade")
        assert analysis.strategy == "swing_trade"
        assert analysis.signals == ["uptrend", "ema_support", "swing_overbought", "macd_positive"]
        assert analysis.strength == pytest.approx(0.7)
        assert analysis.side == "call"
        assert analysis.price == rising_bars["Close"].iloc[-1]

    def test_falling_swing_is_put(self, analyzer, falling_bars):
        analysis = analyzer.analyze(falling_bars, strategy="swing_trade")
        assert analysis.signals == ["downtrend", "ema_resistance", "swing_oversold"]
        assert analysis.strength == pytest.approx(-0.4)
        assert analysis.side == "put"

    def test_other_strategies_use_day_playbook(self, analyzer, rising_bars):
        assert analyzer.analyze(rising_bars, strategy="scalping").strategy == "day_trade"
        assert analyzer.analyze(rising_bars, strategy="default").strategy == "day_trade"

    def test_explicit_price(self, analyzer, rising_bars):
        # far below every average of a rising series
        analysis = analyzer.analyze(rising_bars, price=400.0, strategy="swing_trade")
        assert "ema_resistance" in analysis.signals
        assert "uptrend" not in analysis.signals

    def test_no_bars_without_price(self, analyzer):
        with pytest.raises(ValueError):
            analyzer.analyze(pd.DataFrame())

    def test_thresholds_override(self, rising_bars):
        custom = BarSignalAnalyzer(thresholds={"swing_rsi_overbought": 101})
        analysis = custom.analyze(rising_bars, strategy="swing_trade")
        assert "swing_overbought" not in analysis.signals
        assert BarSignalAnalyzer.THRESHOLDS["swing_rsi_overbought"] == 65


class TestSignalAnalysis:
    """Test suite for SignalAnalysis."""

    def test_actionable_boundary(self):
        assert SignalAnalysis(strategy="day_trade", strength=-0.2).is_actionable(0.2)
        assert not SignalAnalysis(strategy="day_trade", strength=0.19).is_actionable(0.2)

    def test_to_dict(self):
        data = SignalAnalysis(strategy="day_trade", strength=0.3, signals=["oversold"], price=450.0).to_dict()
        assert data == {
            "strategy": "day_trade",
            "strength": 0.3,
            "side": "call",
            "signals": ["oversold"],
            "price": 450.0,
            "indicators": None,
        }
