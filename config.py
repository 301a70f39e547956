"""
Configuration for the Options Suggestion Agent
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default=None):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


# =============================================================================
# SYMBOLS TO SCAN
# =============================================================================
SCAN_SYMBOLS = [
    s.strip().upper()
    for s in os.getenv("SCAN_SYMBOLS", "SPY,QQQ").split(",")
    if s.strip()
]

# =============================================================================
# API KEYS
# =============================================================================
POLYGON_API_KEY = os.getenv("POLYGON_API_KEY", "")

# =============================================================================
# ACCOUNT & RISK
# =============================================================================

ACCOUNT = {
    "size": _env_float("ACCOUNT_SIZE", 25000.0),
    "risk_pct": _env_float("RISK_PCT", 0.01),        # fraction of account per trade
    "strategy": os.getenv("TRADING_STRATEGY", "day_trade"),
    "max_contracts": 100,
}

# =============================================================================
# PRICING ASSUMPTIONS (theoretical fallback)
# =============================================================================

PRICING = {
    "iv": _env_float("DEFAULT_IV", 0.2),
    "risk_free_rate": _env_float("RISK_FREE", 0.01),
    "min_premium": 0.01,
}

# =============================================================================
# SUGGESTION DEFAULTS
# =============================================================================

SUGGESTION = {
    "otm_pct": _env_float("OTM_PCT"),                 # None -> symbol policy default
    "fallback_otm_pct": 0.02,
    "min_business_days": int(_env_float("MIN_BUSINESS_DAYS", 2)),
    "expiry_type": os.getenv("EXPIRY_TYPE", "weekly"),
    "expiry_override": os.getenv("OPTIONS_EXPIRY") or os.getenv("EXPIRY_OVERRIDE") or None,
    "stop_loss_pct": _env_float("STOP_LOSS_PCT", 0.5),
    "take_profit_mult": _env_float("TAKE_PROFIT_MULT", 2.0),
}

# =============================================================================
# SYMBOL OPTION POLICIES
# Unknown symbols are rejected; strikes cannot be rounded without an increment.
# =============================================================================

OPTION_POLICIES = {
    "SPY":   {"multiplier": 100, "strike_increment": 1.0, "supports_0dte": True,
              "default_otm_pct": 0.02, "fallback_cadence": "weekly"},
    "QQQ":   {"multiplier": 100, "strike_increment": 1.0, "supports_0dte": True,
              "default_otm_pct": 0.02, "fallback_cadence": "weekly"},
    "AAPL":  {"multiplier": 100, "strike_increment": 1.0, "supports_0dte": False,
              "default_otm_pct": None, "fallback_cadence": "weekly"},
    "TSLA":  {"multiplier": 100, "strike_increment": 1.0, "supports_0dte": False,
              "default_otm_pct": None, "fallback_cadence": "weekly"},
    "GOOGL": {"multiplier": 100, "strike_increment": 1.0, "supports_0dte": False,
              "default_otm_pct": None, "fallback_cadence": "weekly"},
    "NVDA":  {"multiplier": 100, "strike_increment": 1.0, "supports_0dte": False,
              "default_otm_pct": None, "fallback_cadence": "weekly"},
}

# =============================================================================
# STRATEGY RISK CAPS
# riskPct cap = min(input * risk_mult, risk_pct_max); contracts cap = min(input, max_contracts)
# =============================================================================

STRATEGY_CAPS = {
    "day_trade":   {"risk_mult": 1.0, "risk_pct_max": 0.01,  "max_contracts": 5},
    "swing_trade": {"risk_mult": 1.5, "risk_pct_max": 0.02,  "max_contracts": 10},
    "scalping":    {"risk_mult": 1.0, "risk_pct_max": 0.002, "max_contracts": 2},
}

RISK_PROFILES = {
    "day_trade": {
        "max_risk_per_trade": 0.005,     # 0.5%
        "max_contracts": 5,
        "recommended_stop_loss": 0.3,    # 30% of premium
        "recommended_take_profit": 1.5,  # 1.5x premium
        "holding_period": "intraday",
    },
    "swing_trade": {
        "max_risk_per_trade": 0.015,
        "max_contracts": 10,
        "recommended_stop_loss": 0.5,
        "recommended_take_profit": 2.0,
        "holding_period": "1-5 days",
    },
    "scalping": {
        "max_risk_per_trade": 0.002,
        "max_contracts": 2,
        "recommended_stop_loss": 0.2,
        "recommended_take_profit": 1.2,
        "holding_period": "minutes",
    },
    "default": {
        "max_risk_per_trade": 0.01,
        "max_contracts": 100,
        "recommended_stop_loss": 0.5,
        "recommended_take_profit": 2.0,
        "holding_period": "flexible",
    },
}

# Overrides applied by the agent before building a suggestion
STRATEGY_PRESETS = {
    "day_trade": {"otm_pct": 0.01, "stop_loss_pct": 0.2, "take_profit_mult": 1.5},
}

# =============================================================================
# CONTRACT SELECTION
# =============================================================================

SELECTION_WEIGHTS = {
    "delta": 0.45,
    "spread": 0.30,
    "open_interest": 0.15,
    "volume": 0.10,
}

SELECTION_CRITERIA = {
    "day_trade": {"target_delta": 0.35, "max_spread_pct": 0.30, "min_open_interest": 150},
    "default":   {"target_delta": 0.35, "max_spread_pct": 0.40, "min_open_interest": 75},
}

# =============================================================================
# SCALE-OUT PLAN
# =============================================================================

SCALING = {
    "first_fraction": 0.5,
    "extension_factor": 1.3,
    "runner_factor": 1.6,
}

# =============================================================================
# BAR SIGNALS (auto side selection)
# =============================================================================

SIGNALS = {
    "min_strength": _env_float("MIN_SIGNAL_STRENGTH", 0.2),  # |strength| below this skips the symbol
    "macd_signal": os.getenv("MACD_SIGNAL", "ema"),          # "ema" (9-period EMA of MACD) or "approx" (0.8 x MACD)
    "bars_period": "1d",
    "bars_interval": "1m",
}

# =============================================================================
# MARKET HOURS
# =============================================================================

MARKET = {
    "close_hour": 16,              # US/Eastern
    "close_minute": 0,
    "timezone": "US/Eastern",
    "expiry_settlement_utc_hour": 20,  # approx US close expressed in UTC
}

# =============================================================================
# PROVIDERS
# =============================================================================

CACHE = {
    "ttl_ms": 20_000,
}

TIMING = {
    "inter_request_delay_seconds": 1.0,
    "http_timeout_seconds": 10,
}

CHAIN = {
    "min_contracts": 4,
}
