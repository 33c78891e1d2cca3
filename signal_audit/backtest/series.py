"""
Signal Series Builder - walk-forward replay of the score engine over a daily series.
"""
from datetime import datetime, timezone
from typing import Callable, Sequence

from loguru import logger

from signal_audit.indicators import compute_indicator_snapshot
from signal_audit.models import AssetAuditInput, DailySignalPoint, IndicatorSnapshot
from signal_audit.scoring.engine import compute_score_status
from signal_audit.scoring.entry import qualify_entry

WINDOW = 200

IndicatorComputer = Callable[[Sequence[float], Sequence[float]], IndicatorSnapshot]


def signal_strength(status: str, score: int):
    """Status-aligned conviction: the score for BUY, 100 - score for SELL, None for HOLD."""
    if status == "BUY":
        return score
    if status == "SELL":
        return 100 - score
    return None


def min_history(window: int = WINDOW) -> int:
    return window + 2


def utc_date(ts: datetime) -> str:
    """ISO calendar date of ``ts`` in UTC; naive values are taken as UTC."""
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.date().isoformat()


def build_daily_signal_series(
    asset: AssetAuditInput,
    compute_indicators: IndicatorComputer = compute_indicator_snapshot,
    window: int = WINDOW,
) -> list[DailySignalPoint]:
    """
    Score every day of an asset's history from its trailing window only.

    Args:
        asset: Ascending daily series for one asset
        compute_indicators: Snapshot provider applied to each trailing window
        window: Trailing window length

    Returns:
        One DailySignalPoint per day from index window-1 onwards, or an
        empty list when the history is shorter than window + 2
    """
    n = asset.length
    if n < min_history(window):
        logger.debug(f"{asset.symbol}: {n} observations, need {min_history(window)}")
        return []

    points: list[DailySignalPoint] = []
    for i in range(window - 1, n):
        start = i - window + 1
        snapshot = compute_indicators(asset.closes[start:i + 1], asset.volumes[start:i + 1])
        result = compute_score_status(snapshot, market=asset.market)

        strength = signal_strength(result.status, result.score)
        if strength is not None:
            q70 = qualify_entry(result.status, strength, 70, snapshot)
            q80 = qualify_entry(result.status, strength, 80, snapshot)
        else:
            q70 = q80 = None

        points.append(
            DailySignalPoint(
                index=i,
                date=utc_date(asset.times[i]),
                close=asset.closes[i],
                score=result.score,
                status=result.status,
                strength=strength,
                entry_score_70=q70.quality_score if q70 else None,
                entry_score_80=q80.quality_score if q80 else None,
                entry_qualifies_70=q70.qualifies if q70 else False,
                entry_qualifies_80=q80.qualifies if q80 else False,
            )
        )

    logger.debug(f"{asset.symbol}: built {len(points)} signal points")
    return points
