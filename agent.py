"""
Options Suggestion Agent
Scans symbols and produces sized long-option suggestions:
bar signals (side + strength) -> theoretical baseline -> live chain enrichment -> risk sizing -> scale-out plan
"""
import sys
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

import pandas as pd
from loguru import logger

import config
from analysis.contract_selector import compute_target_delta, criteria_for_strategy
from collectors.chain_collector import ChainCollector
from collectors.fallback import ProviderError
from collectors.polygon_collector import PolygonCollector
from collectors.yahoo_collector import YahooCollector
from risk.risk_sizer import TradingStrategy, compute_qty, validate_risk_parameters
from risk.scaling_plan import build_scaling_plan
from signals.signal_analyzer import BarSignalAnalyzer, SignalAnalysis
from strategy.exceptions import SuggestionError
from strategy.suggestion_builder import PricingSource, apply_chain_selection, build_suggestion
from utils.ttl_cache import TTLCache


def configure_logging():
    logger.remove()
    logger.add(
        sys.stdout,
        level="INFO",
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
    )
    logger.add(
        "logs/options_agent_{time:YYYY-MM-DD}.log",
        level="DEBUG",
        rotation="1 day",
        retention="30 days"
    )


class OptionsAgent:
    """
    Builds option suggestions for a fixed account and trading strategy.

    Chain, price and bar lookups are optional collaborators; when the chain
    is unavailable the suggestion keeps its theoretical pricing. With a bar
    source, scan() picks each symbol's side from its signal strength.
    """

    def __init__(
        self,
        account_size: Optional[float] = None,
        risk_pct: Optional[float] = None,
        strategy: Optional[str] = None,
        chain_collector: Optional[ChainCollector] = None,
        price_source: Optional[Callable[[str], Dict]] = None,
        bar_source: Optional[Callable[[str], pd.DataFrame]] = None,
        analyzer: Optional[BarSignalAnalyzer] = None,
        min_strength: Optional[float] = None,
        max_contracts: Optional[int] = None,
        expiry_type: Optional[str] = None,
        expiry_override: Optional[str] = None,
        inter_request_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.account_size = account_size if account_size is not None else config.ACCOUNT["size"]
        self.risk_pct = risk_pct if risk_pct is not None else config.ACCOUNT["risk_pct"]
        self.strategy = TradingStrategy.parse(strategy or config.ACCOUNT["strategy"])
        self.max_contracts = max_contracts if max_contracts is not None else config.ACCOUNT["max_contracts"]
        self.expiry_type = expiry_type or config.SUGGESTION["expiry_type"]
        self.expiry_override = expiry_override if expiry_override is not None else config.SUGGESTION["expiry_override"]
        self.chain_collector = chain_collector
        self.price_source = price_source
        self.bar_source = bar_source
        self.analyzer = analyzer or BarSignalAnalyzer()
        self.min_strength = min_strength if min_strength is not None else config.SIGNALS["min_strength"]
        self.inter_request_delay = (
            inter_request_delay if inter_request_delay is not None
            else config.TIMING["inter_request_delay_seconds"]
        )
        self._sleep = sleep

    def _spot(self, symbol: str, spot: Optional[float]) -> float:
        if spot is not None:
            return spot
        if self.price_source is None:
            raise ValueError(f"No underlying price for {symbol} and no price source configured")
        quote = self.price_source(symbol)
        if not quote or quote.get("price") is None:
            raise ProviderError(f"No quote available for {symbol}")
        logger.info(f"📊 {symbol} current price: ${quote['price']:.2f} ({quote.get('source', '?')})")
        return float(quote["price"])

    def suggest(
        self,
        symbol: str,
        side: str,
        spot: Optional[float] = None,
        strength: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Dict:
        """
        Full suggestion for one symbol/side.

        Returns a JSON-serializable dict with suggestion, sizing, plan,
        validation warnings and chain provenance.
        """
        price = self._spot(symbol, spot)
        presets = config.STRATEGY_PRESETS.get(self.strategy.value, {})
        stop_loss_pct = presets.get("stop_loss_pct", config.SUGGESTION["stop_loss_pct"])
        take_profit_mult = presets.get("take_profit_mult", config.SUGGESTION["take_profit_mult"])

        suggestion = build_suggestion(
            symbol=symbol,
            side=side,
            spot=price,
            iv=config.PRICING["iv"],
            risk_free_rate=config.PRICING["risk_free_rate"],
            otm_pct=presets.get("otm_pct", config.SUGGESTION["otm_pct"]),
            min_business_days=config.SUGGESTION["min_business_days"],
            cadence=self.expiry_type,
            override_expiry=self.expiry_override,
            stop_loss_pct=stop_loss_pct,
            take_profit_mult=take_profit_mult,
            now=now,
        )

        chain_info = None
        if self.chain_collector is not None:
            target_delta = compute_target_delta(self.strategy, strength, side) if strength is not None else None
            criteria = criteria_for_strategy(self.strategy, target_delta)
            snapshot = self.chain_collector.fetch(suggestion.symbol, suggestion.expiry)
            chain_info = snapshot.to_dict()
            if snapshot.ok:
                suggestion = apply_chain_selection(suggestion, snapshot.quotes, criteria)
            else:
                logger.warning(f"⚠️  Option chain unavailable for {symbol}, using theoretical pricing")

        if suggestion.pricing_source is PricingSource.CHAIN_DERIVED:
            q = suggestion.quote
            logger.info(
                f"🟢 Selected {suggestion.side.upper()} {suggestion.strike} @ ~${suggestion.entry_price} "
                f"(Δ {q.delta if q.delta is not None else 'N/A'}, "
                f"OI {q.open_interest if q.open_interest is not None else 'N/A'})"
            )
        else:
            logger.info(
                f"🧮 Theoretical {suggestion.side.upper()} baseline -> "
                f"Strike {suggestion.strike} @ ~${suggestion.entry_price}"
            )
        logger.info(f"   Stop ~${suggestion.stop_price} | Target ~${suggestion.target_price} | {suggestion.contract}")

        sizing = compute_qty(
            account_size=self.account_size,
            risk_pct=self.risk_pct,
            entry=suggestion.entry_price,
            stop=suggestion.stop_price,
            multiplier=suggestion.multiplier,
            max_contracts=self.max_contracts,
            strategy=self.strategy,
        )
        plan = build_scaling_plan(
            quantity=sizing.quantity,
            entry=suggestion.entry_price,
            take_profit=suggestion.target_price,
            stop=suggestion.stop_price,
        )
        validation = validate_risk_parameters(
            account_size=self.account_size,
            risk_pct=self.risk_pct,
            entry=suggestion.entry_price,
            stop=suggestion.stop_price,
            strategy=self.strategy,
            multiplier=suggestion.multiplier,
        )
        for warning in validation.warnings:
            logger.warning(f"⚠️  {symbol}: {warning}")

        logger.info(
            f"   Qty {sizing.quantity} | Risk/ct ${sizing.per_contract_risk:,.2f} | "
            f"Risk total ${sizing.total_risk:,.2f} | {len(plan.iterations)} exit step(s)"
        )

        return {
            "suggestion": suggestion.to_dict(),
            "sizing": sizing.to_dict(),
            "plan": plan.to_dict(),
            "validation": validation.to_dict(),
            "chain": chain_info,
            "strategy": self.strategy.value,
        }

    def analyze(self, symbol: str, spot: Optional[float] = None) -> SignalAnalysis:
        """Signal strength and side for a symbol from its intraday bars."""
        if self.bar_source is None:
            raise ValueError(f"No bar source configured to analyze {symbol}")
        bars = self.bar_source(symbol)
        analysis = self.analyzer.analyze(bars, price=spot, strategy=self.strategy)
        logger.info(f"🎯 {analysis.strategy.upper()} Analysis: Strength {analysis.strength * 100:.0f}%")
        logger.info(f"📋 Signals: {', '.join(analysis.signals) or 'none'}")
        return analysis

    def _scan_symbol(self, symbol: str, side: Optional[str], spot: Optional[float], now: Optional[datetime]) -> Optional[Dict]:
        if side is not None:
            return self.suggest(symbol, side, spot=spot, now=now)

        price = self._spot(symbol, spot)
        analysis = self.analyze(symbol, price)
        if not analysis.is_actionable(self.min_strength):
            logger.info(f"⏭️  Skipping {symbol} - insufficient signal strength")
            return None
        result = self.suggest(symbol, analysis.side, spot=price, strength=analysis.strength, now=now)
        result["signals"] = analysis.to_dict()
        return result

    def scan(
        self,
        symbols: List[str],
        side: Optional[str] = None,
        spots: Optional[Dict[str, float]] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict]:
        """
        Suggest for each symbol in turn, pausing between symbols.

        With side=None each symbol's side and strength come from its bar
        signals, and symbols below min_strength are skipped. Failures are
        logged and the symbol is skipped.
        """
        if side is None and self.bar_source is None:
            raise ValueError("scan() needs a side or a bar source to derive one")

        results = []
        spots = spots or {}
        for i, symbol in enumerate(symbols):
            if i > 0 and self.inter_request_delay > 0:
                self._sleep(self.inter_request_delay)
            logger.info(f"\n🔍 Analyzing {symbol}...")
            try:
                result = self._scan_symbol(symbol, side, spots.get(symbol), now)
            except (ProviderError, SuggestionError, ValueError) as e:
                logger.error(f"❌ {symbol}: {e}")
                continue
            if result is not None:
                results.append(result)
        return results


def build_default_agent(**kwargs) -> OptionsAgent:
    """Agent wired to Polygon (when keyed) then Yahoo, sharing one short-lived cache."""
    cache = TTLCache(ttl_ms=config.CACHE["ttl_ms"])
    yahoo = YahooCollector(cache=cache)
    collectors = []
    if config.POLYGON_API_KEY:
        collectors.append(PolygonCollector(
            api_key=config.POLYGON_API_KEY,
            cache=cache,
            timeout=config.TIMING["http_timeout_seconds"],
        ))
    collectors.append(yahoo)
    chain = ChainCollector.from_collectors(collectors, cache=cache, min_contracts=config.CHAIN["min_contracts"])

    def bars(symbol):
        return yahoo.get_intraday_bars(symbol, period=config.SIGNALS["bars_period"],
                                       interval=config.SIGNALS["bars_interval"])

    return OptionsAgent(chain_collector=chain, price_source=yahoo.get_current_price, bar_source=bars, **kwargs)


def main():
    """Main entry point"""
    import argparse
    import json

    parser = argparse.ArgumentParser(description="Options Suggestion Agent")
    parser.add_argument(
        "--symbols",
        default=",".join(config.SCAN_SYMBOLS),
        help="Comma-separated symbols to scan (default: SCAN_SYMBOLS)"
    )
    parser.add_argument(
        "--side",
        choices=["auto", "call", "put"],
        default="auto",
        help="Option side to buy; auto picks it from bar signals (default: auto)"
    )
    parser.add_argument(
        "--account",
        type=float,
        default=None,
        help="Account size in USD (default: ACCOUNT_SIZE)"
    )

    args = parser.parse_args()
    configure_logging()

    agent = build_default_agent(account_size=args.account)
    symbols = [s.strip().upper() for s in args.symbols.split(",") if s.strip()]
    side = None if args.side == "auto" else args.side
    results = agent.scan(symbols, side=side)
    print(json.dumps({"suggestions": results}, indent=2))


if __name__ == "__main__":
    main()
