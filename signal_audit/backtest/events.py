"""
Event extraction - BUY/SELL transitions with their realized forward returns.

An event is a day whose status is BUY or SELL and differs from the previous
day's status. Returns are direction-aligned (a falling price after a SELL is
a positive return) and measured close to close:

- ``d7`` / ``d30``: 7 / 30 series days after the event, only when the signal
  lasted at least that long and the series reaches that far
- ``untilNext``: up to the first later day whose status differs from the
  event side, None while the signal is still running
"""
from typing import Optional, Sequence

from signal_audit.backtest.series import signal_strength
from signal_audit.models import DailySignalPoint, EventPoint, Horizon
from signal_audit.utils.numeric import is_finite, pct_change, signal_align

HORIZONS: tuple[Horizon, ...] = ("d7", "d30", "untilNext")
HORIZON_DAYS = {"d7": 7, "d30": 30}


def _next_change(points: Sequence[DailySignalPoint], start: int, side: str) -> Optional[int]:
    for j in range(start + 1, len(points)):
        if points[j].status != side:
            return j
    return None


def _aligned(side: str, start: float, end: float) -> Optional[float]:
    value = signal_align(side, pct_change(start, end))
    return value if is_finite(value) else None


def event_returns(
    points: Sequence[DailySignalPoint],
    i: int,
) -> dict[Horizon, Optional[float]]:
    event = points[i]
    side = event.status
    next_idx = _next_change(points, i, side)

    returns: dict[Horizon, Optional[float]] = {}
    for horizon, days in HORIZON_DAYS.items():
        lasted = next_idx is None or next_idx - i >= days
        if i + days < len(points) and lasted:
            returns[horizon] = _aligned(side, event.close, points[i + days].close)
        else:
            returns[horizon] = None

    returns["untilNext"] = (
        _aligned(side, event.close, points[next_idx].close) if next_idx is not None else None
    )
    return returns


def extract_events(
    points: Sequence[DailySignalPoint],
    symbol: str,
    name: str = "",
) -> list[EventPoint]:
    """
    Turn an asset's signal series into its BUY/SELL events.

    Args:
        points: Chronologically ascending signal series
        symbol: Asset symbol
        name: Asset display name (defaults to the symbol)

    Returns:
        EventPoints in chronological order
    """
    events: list[EventPoint] = []
    for i, point in enumerate(points):
        if point.status not in ("BUY", "SELL"):
            continue
        if i > 0 and points[i - 1].status == point.status:
            continue

        events.append(
            EventPoint(
                symbol=symbol,
                name=name or symbol,
                date=point.date,
                side=point.status,
                score=point.score,
                strength=signal_strength(point.status, point.score),
                returns=event_returns(points, i),
            )
        )
    return events
