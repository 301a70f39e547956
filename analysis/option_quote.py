"""
Option Quote model for chain data
Single normalization boundary for raw chain records from any provider.
Everything downstream works on clean floats/ints/None.
"""
import math
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from utils.dates import parse_expiry_value


class OptionType(Enum):
    CALL = "CALL"
    PUT = "PUT"

    @classmethod
    def from_side(cls, side) -> "OptionType":
        """Map 'call'/'put'/'c'/'p' (any case) or an OptionType to an OptionType."""
        if isinstance(side, cls):
            return side
        text = str(side).strip().upper() if side is not None else ""
        if text in ("CALL", "C", "CALLS"):
            return cls.CALL
        if text in ("PUT", "P", "PUTS"):
            return cls.PUT
        raise ValueError(f"Unknown option side: {side!r}")

    @property
    def side(self) -> str:
        return self.value.lower()


@dataclass(frozen=True)
class SelectionMetrics:
    mid: float
    spread: Optional[float]
    spread_pct: float
    delta_score: float
    spread_score: float
    oi_score: float
    vol_score: float
    total_score: float

    def to_dict(self) -> dict:
        return {
            "mid": self.mid,
            "spread": self.spread,
            "spread_pct": self.spread_pct,
            "delta_score": self.delta_score,
            "spread_score": self.spread_score,
            "oi_score": self.oi_score,
            "vol_score": self.vol_score,
            "total_score": self.total_score,
        }


@dataclass(frozen=True)
class OptionQuote:
    strike: float
    option_type: OptionType
    bid: Optional[float] = None
    ask: Optional[float] = None
    last: Optional[float] = None
    delta: Optional[float] = None
    open_interest: Optional[int] = None
    volume: Optional[int] = None
    expiry: Optional[date] = None
    contract_id: Optional[str] = None
    source: Optional[str] = None
    selection: Optional[SelectionMetrics] = None

    def __post_init__(self):
        if not isinstance(self.strike, (int, float)) or not math.isfinite(self.strike) or self.strike <= 0:
            raise ValueError(f"Option strike must be a positive number, got {self.strike!r}")
        if not isinstance(self.option_type, OptionType):
            raise ValueError(f"option_type must be an OptionType, got {self.option_type!r}")

    @property
    def mid(self) -> Optional[float]:
        """
        Fairest tradable price estimate.

        (bid + ask) / 2 when both are present and ask >= bid > 0,
        else last, else whichever of ask/bid is present, else None.
        """
        bid, ask, last = self.bid, self.ask, self.last
        if bid is not None and ask is not None and ask >= bid > 0:
            return (bid + ask) / 2
        if last is not None:
            return last
        if ask is not None:
            return ask
        if bid is not None:
            return bid
        return None

    @property
    def has_quote(self) -> bool:
        return any(v is not None for v in (self.bid, self.ask, self.last))

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]], source: Optional[str] = None) -> Optional["OptionQuote"]:
        """Build a quote from a provider record, or None if strike/type can't be determined."""
        if not raw:
            return None

        contract_id = _first_text(raw, _SYMBOL_KEYS)
        occ = parse_occ_symbol(contract_id)

        strike = _to_float(_first_present(raw, _STRIKE_KEYS))
        if strike is None and occ:
            strike = occ["strike"]
        if strike is None or strike <= 0:
            return None

        option_type = _parse_type(_first_present(raw, _TYPE_KEYS))
        if option_type is None and occ:
            option_type = occ["type"]
        if option_type is None:
            return None

        expiry = parse_expiry_value(_first_present(raw, _EXPIRY_KEYS))
        if expiry is None:
            expiry = _expiry_from_parts(raw)
        if expiry is None and occ:
            expiry = occ["expiry"]

        delta = _to_float(_first_present(raw, ("delta",)))
        if delta is None:
            delta = _to_float(_nested(raw, "greeks", "delta"))
        if delta is None:
            delta = _to_float(_nested(raw, "OptionGreeks", "delta"))
        if delta is not None and not -1.0 <= delta <= 1.0:
            delta = None

        return cls(
            strike=strike,
            option_type=option_type,
            bid=_to_price(_first_present(raw, ("bid", "Bid", "bidPrice", "bid_price"))),
            ask=_to_price(_first_present(raw, ("ask", "Ask", "askPrice", "ask_price"))),
            last=_to_price(_first_present(raw, ("last", "lastPrice", "Last", "last_price"))),
            delta=delta,
            open_interest=_to_count(_first_present(raw, ("oi", "openInterest", "open_interest", "openint"))),
            volume=_to_count(_first_present(raw, ("vol", "volume", "totalVolume"))),
            expiry=expiry,
            contract_id=contract_id,
            source=source,
        )

    def to_dict(self) -> dict:
        return {
            "strike": self.strike,
            "type": self.option_type.value,
            "bid": self.bid,
            "ask": self.ask,
            "last": self.last,
            "mid": self.mid,
            "delta": self.delta,
            "open_interest": self.open_interest,
            "volume": self.volume,
            "expiry": self.expiry.isoformat() if self.expiry else None,
            "contract_id": self.contract_id,
            "source": self.source,
            "selection": self.selection.to_dict() if self.selection else None,
        }


def normalize_chain(records: Optional[Iterable[Any]], source: Optional[str] = None) -> List[OptionQuote]:
    """Normalize raw records (or pass through OptionQuotes), dropping unusable ones, sorted by strike."""
    quotes = []
    for record in records or []:
        if isinstance(record, OptionQuote):
            quotes.append(record)
            continue
        quote = OptionQuote.from_raw(record, source=source)
        if quote is not None:
            quotes.append(quote)
    quotes.sort(key=lambda q: q.strike)
    return quotes


# ---------------------------------------------------------------------------
# OCC symbol parsing
# ---------------------------------------------------------------------------

_OCC_RE = re.compile(r"(\d{2})(\d{2})(\d{2})([CP])(\d{8})$", re.IGNORECASE)


def parse_occ_symbol(symbol: Optional[str]) -> Optional[Dict]:
    """
    Parse the tail of an OCC-style option symbol, e.g. 'SPY250117C00455000'
    -> {'expiry': date(2025, 1, 17), 'type': OptionType.CALL, 'strike': 455.0}.
    """
    if not symbol or not isinstance(symbol, str):
        return None
    m = _OCC_RE.search(symbol.strip())
    if not m:
        return None
    yy, mm, dd, cp, strike_raw = m.groups()
    try:
        expiry = date(2000 + int(yy), int(mm), int(dd))
    except ValueError:
        expiry = None
    strike = int(strike_raw) / 1000
    return {
        "expiry": expiry,
        "type": OptionType.CALL if cp.upper() == "C" else OptionType.PUT,
        "strike": strike if strike > 0 else None,
    }


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

_STRIKE_KEYS = ("strike", "strikePrice", "StrikePrice", "strike_price")
_TYPE_KEYS = ("type", "optionType", "callPut", "callOrPut", "contractType",
              "putCall", "contract_type", "option_type")
_EXPIRY_KEYS = ("expiryDate", "expirationDate", "expiration", "expiry", "expiration_date")
_SYMBOL_KEYS = ("contractSymbol", "optionSymbol", "symbol", "OptionSymbol", "osiKey",
                "displaySymbol", "ticker", "contract_id", "contractId")

_SENTINELS = {"", "N/A", "NA", "-", "--", "NULL", "NONE", "NAN"}


def _first_present(raw: Mapping, keys) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _first_text(raw: Mapping, keys) -> Optional[str]:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _nested(raw: Mapping, outer: str, inner: str) -> Any:
    block = raw.get(outer)
    if isinstance(block, Mapping):
        return block.get(inner)
    return None


def _to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.upper() in _SENTINELS:
            return None
        try:
            value = float(text.replace(",", ""))
        except ValueError:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_price(value) -> Optional[float]:
    number = _to_float(value)
    if number is None or number < 0:
        return None
    return number


def _to_count(value) -> Optional[int]:
    number = _to_float(value)
    if number is None or number < 0:
        return None
    return int(round(number))


def _parse_type(value) -> Optional[OptionType]:
    if value is None:
        return None
    try:
        return OptionType.from_side(value)
    except ValueError:
        return None


def _expiry_from_parts(raw: Mapping) -> Optional[date]:
    year = _to_float(raw.get("expiryYear"))
    month = _to_float(raw.get("expiryMonth"))
    day = _to_float(raw.get("expiryDay"))
    if year is None or month is None or day is None:
        return None
    year = int(year)
    if year < 100:
        year += 2000
    try:
        return date(year, int(month), int(day))
    except ValueError:
        return None
