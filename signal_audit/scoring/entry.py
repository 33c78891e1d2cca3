"""
Entry Qualifier - second-opinion quality gate for BUY/SELL signals.

Points are earned in six categories. Missing inputs earn a fixed partial
credit so that absent data neither passes nor fails a signal on its own.
"""
from __future__ import annotations

from typing import Optional

from signal_audit.models import EntryQualification, IndicatorSnapshot, Status
from signal_audit.utils.numeric import clamp, round_half_up

ENTRY_THRESHOLDS = (70, 80)
MIN_QUALITY = {70: 55, 80: 63}


def _aligned(status: Status, value: float) -> bool:
    return (status == "BUY" and value > 0) or (status == "SELL" and value < 0)


def _returns_points(status: Status, ret20: Optional[float], ret60: Optional[float]) -> float:
    points = 0.0
    if ret20 is None:
        points += 5
    else:
        points += 10 if _aligned(status, ret20) else 2
    if ret60 is None:
        points += 4
    else:
        points += 8 if _aligned(status, ret60) else 2
    return points


def _structure_points(
    status: Status,
    range_pos20: Optional[float],
    efficiency14: Optional[float],
) -> float:
    points = 0.0
    if range_pos20 is None:
        points += 5
    elif status == "BUY":
        points += 10 if range_pos20 >= 0.58 else 6 if range_pos20 >= 0.48 else 2
    else:
        points += 10 if range_pos20 <= 0.42 else 6 if range_pos20 <= 0.52 else 2

    if efficiency14 is None:
        points += 3
    else:
        points += clamp(efficiency14, 0.0, 1.0) * 6
    return points


def _rsi_points(status: Status, rsi: Optional[float]) -> float:
    if rsi is None:
        return 6
    if status == "BUY":
        if 48 <= rsi <= 69:
            return 12
        if 69 < rsi <= 75:
            return 6
        if rsi >= 40:
            return 8
        return 2
    if 31 <= rsi <= 52:
        return 12
    if 25 <= rsi < 31:
        return 6
    if rsi <= 60:
        return 8
    return 2


def _volume_points(ratio: Optional[float]) -> float:
    if ratio is None:
        return 5
    if 0.95 <= ratio <= 2.2:
        return 10
    if ratio >= 0.75:
        return 6
    return 3


def _volatility_points(stdev: Optional[float]) -> float:
    if stdev is None:
        return 8
    if 0.008 <= stdev <= 0.09:
        return 16
    if stdev <= 0.12:
        return 10
    return 4


def qualify_entry(
    status: Status,
    strength: float,
    threshold: int,
    snapshot: IndicatorSnapshot,
) -> EntryQualification:
    """
    Score the quality of a thresholded signal and decide whether it counts as an entry.

    Args:
        status: Signal status; only BUY and SELL can qualify
        strength: Status-aligned score (BUY: score, SELL: 100 - score)
        threshold: Strength threshold the signal was filtered on (70 or 80)
        snapshot: Indicator snapshot the signal was computed from

    Returns:
        EntryQualification with a 0-100 quality score and the pass/fail decision
    """
    if threshold not in ENTRY_THRESHOLDS:
        raise ValueError(f"threshold must be one of {ENTRY_THRESHOLDS}, got {threshold}")
    if status not in ("BUY", "SELL"):
        return EntryQualification(quality_score=None, qualifies=False)

    trend = snapshot.trend
    room = max(1, 100 - threshold)

    max_score = 28 + 18 + 16 + 12 + 10 + 16
    score = clamp((strength - threshold) / room * 28, 0.0, 28.0)
    score += _returns_points(status, trend.ret20, trend.ret60)
    score += _structure_points(status, trend.range_pos20, trend.efficiency14)
    score += _rsi_points(status, snapshot.rsi)
    score += _volume_points(snapshot.volume.ratio)
    score += _volatility_points(snapshot.volatility.stdev20)

    quality = int(clamp(round_half_up(score / max_score * 100), 0, 100))
    return EntryQualification(quality_score=quality, qualifies=quality >= MIN_QUALITY[threshold])
