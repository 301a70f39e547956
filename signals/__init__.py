"""
Signal Module for intraday bars
Technical indicators and day/swing strength scoring
"""
from .indicators import (
    IndicatorSnapshot, MacdReading, BollingerBands, Stochastic,
    calculate_indicators, sma, ema, rsi, macd, bollinger_bands, stochastic, atr,
)
from .signal_analyzer import BarSignalAnalyzer, SignalAnalysis

__all__ = [
    "IndicatorSnapshot", "MacdReading", "BollingerBands", "Stochastic",
    "calculate_indicators", "sma", "ema", "rsi", "macd", "bollinger_bands", "stochastic", "atr",
    "BarSignalAnalyzer", "SignalAnalysis",
]
