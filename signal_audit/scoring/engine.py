"""
Score Engine - fuses an indicator snapshot into a 0-100 score, status and confidence.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence

from loguru import logger

from signal_audit.indicators import compute_indicator_snapshot
from signal_audit.models import IndicatorSnapshot, ScoreMarket, ScoreMode, ScoreResult, Status
from signal_audit.scoring.components import BASE_WEIGHTS, WeightedParts, evaluate_components
from signal_audit.scoring.markets import (
    MARKET_PROFILES,
    MarketProfile,
    effective_thresholds,
    normalize_score_market,
    normalize_score_mode,
)
from signal_audit.utils.numeric import clamp, is_finite, round_half_up

CONFIDENCE_WEIGHTS = {"coverage": 0.45, "strength": 0.30, "alignment": 0.25}


def compute_confidence(parts: WeightedParts, max_weight: float) -> float:
    """
    Confidence in [0, 1] from coverage, strength and alignment of active components.

    Args:
        parts: Active components with their effective weights and 0-100 scores
        max_weight: Sum of effective weights if every component were present

    Returns:
        Weighted blend of the three sub-measures
    """
    if parts.empty or max_weight <= 0:
        return 0.0

    present = parts.total_weight
    coverage = clamp(present / max_weight, 0.0, 1.0)

    deviations = [(weight, value - 50.0) for _, weight, value in parts.parts]
    strength = sum(weight * abs(dev) / 50.0 for weight, dev in deviations) / present

    gross = sum(weight * abs(dev) for weight, dev in deviations)
    net = abs(sum(weight * dev for weight, dev in deviations))
    alignment = net / gross if gross > 0 else 0.0

    confidence = (
        CONFIDENCE_WEIGHTS["coverage"] * coverage
        + CONFIDENCE_WEIGHTS["strength"] * clamp(strength, 0.0, 1.0)
        + CONFIDENCE_WEIGHTS["alignment"] * alignment
    )
    return clamp(confidence, 0.0, 1.0)


def resolve_status(
    score: int,
    confidence: float,
    profile: MarketProfile,
    mode: ScoreMode = ScoreMode.STANDARD,
) -> Status:
    thresholds = effective_thresholds(profile, mode)

    if score >= thresholds.buy_threshold and confidence >= thresholds.min_confidence:
        return "BUY"
    if score <= thresholds.sell_threshold and confidence >= thresholds.min_confidence:
        return "SELL"

    # Wide-margin scores may still fire at a reduced confidence floor
    if (
        score >= thresholds.buy_threshold + thresholds.soft_margin
        and confidence >= thresholds.soft_floor
    ):
        return "BUY"
    if (
        score <= thresholds.sell_threshold - thresholds.soft_margin
        and confidence >= thresholds.soft_floor
    ):
        return "SELL"
    return "HOLD"


def score_with_profile(
    snapshot: IndicatorSnapshot,
    profile: MarketProfile,
    market: ScoreMarket = ScoreMarket.DEFAULT,
    mode: ScoreMode = ScoreMode.STANDARD,
) -> ScoreResult:
    values = evaluate_components(snapshot, profile)

    parts = WeightedParts()
    max_weight = 0.0
    for key, base_weight in BASE_WEIGHTS.items():
        weight = base_weight * profile.multiplier(key)
        max_weight += weight
        value = values[key]
        parts.add(key, weight, value if is_finite(value) else None)

    raw = parts.average()
    if raw is None:
        return ScoreResult(score=50, status="HOLD", confidence=0.0, market=market, mode=mode)

    score = round_half_up(clamp(raw, 0.0, 100.0))
    confidence = compute_confidence(parts, max_weight)

    return ScoreResult(
        score=score,
        status=resolve_status(score, confidence, profile, mode),
        confidence=confidence,
        market=market,
        mode=mode,
    )


def compute_score_status(
    snapshot: IndicatorSnapshot,
    market: Any = None,
    mode: Any = None,
) -> ScoreResult:
    """Score a snapshot; unknown markets and modes fall back to DEFAULT / STANDARD."""
    market_key = normalize_score_market(market) or ScoreMarket.DEFAULT
    mode_key = normalize_score_mode(mode)
    return score_with_profile(snapshot, MARKET_PROFILES[market_key], market_key, mode_key)


class ScoreEngine:
    """
    Scores assets for one market and mode.

    Wraps compute_score_status with a fixed market/mode context and adds
    live scoring straight from a price/volume history.
    """

    def __init__(self, market: Any = None, mode: Any = None):
        """
        Initialize the engine.

        Args:
            market: Market key or alias (falls back to DEFAULT)
            mode: Score mode or alias (falls back to STANDARD)
        """
        self.market = normalize_score_market(market) or ScoreMarket.DEFAULT
        self.mode = normalize_score_mode(mode)
        self.profile = MARKET_PROFILES[self.market]

    def score(self, snapshot: IndicatorSnapshot) -> ScoreResult:
        return score_with_profile(snapshot, self.profile, self.market, self.mode)

    def score_series(
        self,
        closes: Sequence[float],
        volumes: Optional[Sequence[float]] = None,
    ) -> ScoreResult:
        """
        Score the latest point of a full history.

        Days with a non-finite close are dropped together with their volume;
        a non-finite volume stays in place as NaN so the volume ratio of that
        day is absent. Short histories still score, with the components that
        cannot be computed left out.
        """
        volumes = list(volumes or [])
        clean_closes: list[float] = []
        clean_volumes: list[float] = []
        for i, close in enumerate(closes):
            if not is_finite(close):
                continue
            clean_closes.append(float(close))
            if volumes:
                volume = volumes[i] if i < len(volumes) else None
                clean_volumes.append(float(volume) if is_finite(volume) else float("nan"))

        snapshot = compute_indicator_snapshot(clean_closes, clean_volumes)
        result = self.score(snapshot)

        logger.debug(
            f"Live score ({self.market.value}/{self.mode.value}) over "
            f"{len(clean_closes)} closes: {result.score} {result.status} "
            f"confidence {result.confidence:.2f}"
        )
        return result


def score_series(
    closes: Sequence[float],
    volumes: Optional[Sequence[float]] = None,
    market: Any = None,
    mode: Any = None,
) -> ScoreResult:
    return ScoreEngine(market=market, mode=mode).score_series(closes, volumes)
