"""
Indicator Snapshot Provider - computes the indicator values the score engine consumes.

All functions look only at the values they are given (the trailing window) and
read the most recent element as "now". Anything that cannot be computed from the
available history comes back as None rather than a fabricated default.
"""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from signal_audit.models import (
    IndicatorSnapshot,
    MacdValues,
    MovingAverages,
    TrendFeatures,
    VolatilityFeatures,
    VolumeValues,
)
from signal_audit.utils.numeric import to_float

_EPS = 1e-12


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def sma(values: Sequence[float], period: int) -> Optional[float]:
    arr = _as_array(values)
    if period <= 0 or arr.size < period:
        return None
    return to_float(arr[-period:].mean())


def ema_series(values: Sequence[float], period: int) -> np.ndarray:
    """EMA seeded with the SMA of the first ``period`` values; NaN before the seed."""
    arr = _as_array(values)
    out = np.full(arr.size, np.nan)
    if period <= 0 or arr.size < period:
        return out
    k = 2.0 / (period + 1)
    prev = arr[:period].mean()
    out[period - 1] = prev
    for i in range(period, arr.size):
        prev = arr[i] * k + prev * (1 - k)
        out[i] = prev
    return out


def rsi_wilder(values: Sequence[float], period: int = 14) -> Optional[float]:
    arr = _as_array(values)
    if arr.size < period + 1:
        return None
    diffs = np.diff(arr)
    gains = np.clip(diffs, 0, None)
    losses = np.clip(-diffs, 0, None)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss <= _EPS:
        return 50.0 if avg_gain <= _EPS else 100.0
    rs = avg_gain / avg_loss
    return to_float(100.0 - 100.0 / (1.0 + rs))


def macd_histogram(
    values: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> Optional[float]:
    arr = _as_array(values)
    if arr.size < slow + signal - 1:
        return None
    macd_line = ema_series(arr, fast) - ema_series(arr, slow)
    valid = macd_line[slow - 1:]
    signal_line = ema_series(valid, signal)
    return to_float(valid[-1] - signal_line[-1])


def volume_ratio(volumes: Sequence[Optional[float]], period: int = 20) -> Optional[float]:
    """Current volume over the mean of the finite volumes in the trailing window.

    Missing volumes arrive as None or NaN; a missing current bar has no ratio.
    """
    arr = _as_array(volumes)
    if arr.size < period or not np.isfinite(arr[-1]):
        return None
    window = arr[-period:]
    window = window[np.isfinite(window)]
    avg = window.mean()
    if not np.isfinite(avg) or avg <= 0:
        return None
    return to_float(arr[-1] / avg)


def lookback_return_pct(closes: Sequence[float], lookback: int) -> Optional[float]:
    arr = _as_array(closes)
    if arr.size < lookback + 1:
        return None
    start = arr[-lookback - 1]
    if not np.isfinite(start) or start <= 0:
        return None
    return to_float((arr[-1] / start - 1.0) * 100.0)


def range_position(closes: Sequence[float], lookback: int) -> Optional[float]:
    arr = _as_array(closes)
    if arr.size < lookback:
        return None
    window = arr[-lookback:]
    if not np.all(np.isfinite(window)):
        return None
    low, high = window.min(), window.max()
    if high - low <= _EPS:
        return 0.5
    return float(np.clip((window[-1] - low) / (high - low), 0.0, 1.0))


def breakout(closes: Sequence[float], lookback: int) -> Optional[float]:
    """+1 when the last close exceeds the prior ``lookback`` highs, -1 below the lows."""
    arr = _as_array(closes)
    if arr.size < lookback + 1:
        return None
    prior = arr[-lookback - 1:-1]
    last = arr[-1]
    if not np.isfinite(last) or not np.all(np.isfinite(prior)):
        return None
    if last > prior.max():
        return 1.0
    if last < prior.min():
        return -1.0
    return 0.0


def trend_efficiency(closes: Sequence[float], lookback: int = 14) -> Optional[float]:
    arr = _as_array(closes)
    if arr.size < lookback + 1:
        return None
    window = arr[-lookback - 1:]
    path = np.abs(np.diff(window)).sum()
    if not np.isfinite(path):
        return None
    if path <= _EPS:
        return 0.0
    return float(np.clip(abs(window[-1] - window[0]) / path, 0.0, 1.0))


def stretch_pct(closes: Sequence[float], period: int = 20) -> Optional[float]:
    average = sma(closes, period)
    arr = _as_array(closes)
    if average is None or average <= 0:
        return None
    return to_float((arr[-1] / average - 1.0) * 100.0)


def realized_volatility(closes: Sequence[float], lookback: int = 20) -> Optional[float]:
    arr = _as_array(closes)
    if arr.size < lookback + 1:
        return None
    window = arr[-lookback - 1:]
    prev, curr = window[:-1], window[1:]
    mask = np.isfinite(prev) & np.isfinite(curr) & (prev > 0)
    if not mask.any():
        return None
    returns = (curr[mask] - prev[mask]) / prev[mask]
    return to_float(returns.std())


def compute_indicator_snapshot(
    closes: Sequence[float],
    volumes: Sequence[Optional[float]],
) -> IndicatorSnapshot:
    """Build the full snapshot for the most recent element of ``closes``."""
    return IndicatorSnapshot(
        ma=MovingAverages(ma50=sma(closes, 50), ma200=sma(closes, 200)),
        rsi=rsi_wilder(closes, 14),
        macd=MacdValues(hist=macd_histogram(closes, 12, 26, 9)),
        volume=VolumeValues(ratio=volume_ratio(volumes, 20)),
        trend=TrendFeatures(
            ret5=lookback_return_pct(closes, 5),
            ret20=lookback_return_pct(closes, 20),
            ret60=lookback_return_pct(closes, 60),
            range_pos20=range_position(closes, 20),
            range_pos55=range_position(closes, 55),
            efficiency14=trend_efficiency(closes, 14),
            breakout20=breakout(closes, 20),
            breakout55=breakout(closes, 55),
            stretch20=stretch_pct(closes, 20),
        ),
        volatility=VolatilityFeatures(stdev20=realized_volatility(closes, 20)),
    )
