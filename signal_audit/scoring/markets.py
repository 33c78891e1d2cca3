"""
Market profiles - per-market thresholds and component weight multipliers.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from signal_audit.models import ScoreMarket, ScoreMode

# High-confidence mode widens both thresholds and raises the confidence bar
HIGH_CONF_THRESHOLD_SHIFT = 4
HIGH_CONF_CONFIDENCE_BOOST = 0.08

# Soft override: a score this far past the threshold may fire at a reduced floor
SOFT_MARGIN = 12
SOFT_FLOOR_REDUCTION: dict[ScoreMode, float] = {
    ScoreMode.STANDARD: 0.08,
    ScoreMode.HIGH_CONF: 0.06,
}


@dataclass(frozen=True)
class MarketProfile:
    buy_threshold: int
    sell_threshold: int
    min_confidence: float
    weight_multipliers: Mapping[str, float] = field(default_factory=dict)
    # Tradeable band for the 20-day stdev of daily returns
    vol_low: float = 0.006
    vol_high: float = 0.035

    def multiplier(self, component: str) -> float:
        return float(self.weight_multipliers.get(component, 1.0))


@dataclass(frozen=True)
class EffectiveThresholds:
    buy_threshold: int
    sell_threshold: int
    min_confidence: float
    soft_floor: float
    soft_margin: int = SOFT_MARGIN


_INDEX_MULTIPLIERS = {"trend": 1.15, "consensus": 1.2, "volume": 0.75}

MARKET_PROFILES: dict[ScoreMarket, MarketProfile] = {
    ScoreMarket.DEFAULT: MarketProfile(buy_threshold=62, sell_threshold=38, min_confidence=0.55),
    ScoreMarket.CRYPTO: MarketProfile(
        buy_threshold=64,
        sell_threshold=36,
        min_confidence=0.57,
        weight_multipliers={"volume": 1.25, "volatility": 1.2, "trend": 0.95, "consensus": 0.9},
        vol_low=0.012,
        vol_high=0.07,
    ),
    ScoreMarket.AEX: MarketProfile(60, 40, 0.55, _INDEX_MULTIPLIERS),
    ScoreMarket.DAX: MarketProfile(60, 40, 0.55, _INDEX_MULTIPLIERS),
    ScoreMarket.DOWJONES: MarketProfile(
        59, 41, 0.54, {"trend": 1.2, "consensus": 1.25, "volume": 0.7}, vol_high=0.03
    ),
    ScoreMarket.ETFS: MarketProfile(
        58,
        42,
        0.53,
        {"trend": 1.2, "consensus": 1.15, "volume": 0.6, "volatility": 0.9},
        vol_low=0.004,
        vol_high=0.025,
    ),
    ScoreMarket.FTSE100: MarketProfile(60, 40, 0.55, _INDEX_MULTIPLIERS, vol_high=0.03),
    ScoreMarket.HANGSENG: MarketProfile(
        61, 39, 0.56, {"trend": 1.1, "consensus": 1.15, "volume": 0.85}, vol_high=0.04
    ),
    ScoreMarket.NASDAQ: MarketProfile(
        61, 39, 0.55, {"trend": 1.15, "consensus": 1.1, "volume": 0.8}, vol_high=0.04
    ),
    ScoreMarket.NIKKEI225: MarketProfile(60, 40, 0.55, _INDEX_MULTIPLIERS),
    ScoreMarket.SENSEX: MarketProfile(
        61, 39, 0.56, {"trend": 1.1, "consensus": 1.15, "volume": 0.85}, vol_high=0.04
    ),
    ScoreMarket.SP500: MarketProfile(60, 40, 0.55, _INDEX_MULTIPLIERS),
}

_MARKET_ALIASES: dict[str, ScoreMarket] = {
    "DEFAULT": ScoreMarket.DEFAULT,
    "CRYPTO": ScoreMarket.CRYPTO,
    "CRYPTOCURRENCY": ScoreMarket.CRYPTO,
    "COINS": ScoreMarket.CRYPTO,
    "AEX": ScoreMarket.AEX,
    "AEX25": ScoreMarket.AEX,
    "DAX": ScoreMarket.DAX,
    "DAX40": ScoreMarket.DAX,
    "DOWJONES": ScoreMarket.DOWJONES,
    "DOW": ScoreMarket.DOWJONES,
    "DJIA": ScoreMarket.DOWJONES,
    "DJI": ScoreMarket.DOWJONES,
    "ETFS": ScoreMarket.ETFS,
    "ETF": ScoreMarket.ETFS,
    "FTSE100": ScoreMarket.FTSE100,
    "FTSE": ScoreMarket.FTSE100,
    "HANGSENG": ScoreMarket.HANGSENG,
    "HSI": ScoreMarket.HANGSENG,
    "NASDAQ": ScoreMarket.NASDAQ,
    "NASDAQ100": ScoreMarket.NASDAQ,
    "NDX": ScoreMarket.NASDAQ,
    "NIKKEI225": ScoreMarket.NIKKEI225,
    "NIKKEI": ScoreMarket.NIKKEI225,
    "N225": ScoreMarket.NIKKEI225,
    "SENSEX": ScoreMarket.SENSEX,
    "BSESENSEX": ScoreMarket.SENSEX,
    "SP500": ScoreMarket.SP500,
    "SNP500": ScoreMarket.SP500,
    "SPX": ScoreMarket.SP500,
}

_MODE_ALIASES: dict[str, ScoreMode] = {
    "STANDARD": ScoreMode.STANDARD,
    "DEFAULT": ScoreMode.STANDARD,
    "HIGHCONF": ScoreMode.HIGH_CONF,
    "HIGHCONFIDENCE": ScoreMode.HIGH_CONF,
    "HC": ScoreMode.HIGH_CONF,
}

_SUFFIX_MARKETS: list[tuple[tuple[str, ...], ScoreMarket]] = [
    (("-USD", "USDT"), ScoreMarket.CRYPTO),
    ((".AS", ".BR"), ScoreMarket.AEX),
    ((".DE",), ScoreMarket.DAX),
    ((".HK",), ScoreMarket.HANGSENG),
    ((".L",), ScoreMarket.FTSE100),
    ((".NS", ".BO"), ScoreMarket.SENSEX),
    ((".T",), ScoreMarket.NIKKEI225),
]


def _alias_key(raw: Any) -> str:
    return re.sub(r"[^A-Z0-9]", "", str(raw or "").upper())


def normalize_score_market(raw: Any) -> Optional[ScoreMarket]:
    """Resolve a market name such as "S&P 500" or "s_p_500" to its key, or None."""
    if isinstance(raw, ScoreMarket):
        return raw
    return _MARKET_ALIASES.get(_alias_key(raw))


def normalize_score_mode(raw: Any) -> ScoreMode:
    if isinstance(raw, ScoreMode):
        return raw
    return _MODE_ALIASES.get(_alias_key(raw), ScoreMode.STANDARD)


def detect_market_for_symbol(symbol: Optional[str]) -> Optional[ScoreMarket]:
    sym = str(symbol or "").strip().upper()
    if not sym:
        return None
    for suffixes, market in _SUFFIX_MARKETS:
        if sym.endswith(suffixes):
            return market
    return None


def resolve_score_market(
    preferred: Any = None,
    symbol: Optional[str] = None,
    fallback: ScoreMarket = ScoreMarket.DEFAULT,
) -> ScoreMarket:
    return normalize_score_market(preferred) or detect_market_for_symbol(symbol) or fallback


def get_profile(market: Any) -> MarketProfile:
    resolved = normalize_score_market(market) or ScoreMarket.DEFAULT
    return MARKET_PROFILES[resolved]


def effective_thresholds(profile: MarketProfile, mode: ScoreMode) -> EffectiveThresholds:
    buy = profile.buy_threshold
    sell = profile.sell_threshold
    min_conf = profile.min_confidence
    if mode == ScoreMode.HIGH_CONF:
        buy += HIGH_CONF_THRESHOLD_SHIFT
        sell -= HIGH_CONF_THRESHOLD_SHIFT
        min_conf += HIGH_CONF_CONFIDENCE_BOOST
    return EffectiveThresholds(
        buy_threshold=buy,
        sell_threshold=sell,
        min_confidence=min(1.0, min_conf),
        soft_floor=max(0.0, min_conf - SOFT_FLOOR_REDUCTION[mode]),
    )
