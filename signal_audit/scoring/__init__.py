from signal_audit.scoring.markets import (
    MarketProfile,
    EffectiveThresholds,
    MARKET_PROFILES,
    normalize_score_market,
    normalize_score_mode,
    detect_market_for_symbol,
    resolve_score_market,
    get_profile,
    effective_thresholds,
)
from signal_audit.scoring.engine import (
    ScoreEngine,
    compute_score_status,
    compute_confidence,
    resolve_status,
    score_with_profile,
    score_series,
)
from signal_audit.scoring.entry import qualify_entry

__all__ = [
    "MarketProfile",
    "EffectiveThresholds",
    "MARKET_PROFILES",
    "normalize_score_market",
    "normalize_score_mode",
    "detect_market_for_symbol",
    "resolve_score_market",
    "get_profile",
    "effective_thresholds",
    "ScoreEngine",
    "compute_score_status",
    "compute_confidence",
    "resolve_status",
    "score_with_profile",
    "score_series",
    "qualify_entry",
]
