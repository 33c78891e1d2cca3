"""Small numeric helpers shared by the scoring and backtest modules.

Every helper treats ``None``, NaN and infinities as "absent" and returns
``None`` instead of propagating a poisoned value.
"""
from __future__ import annotations

import math
from typing import Any, Iterable, Literal, Optional


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def is_finite(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def to_float(value: Any) -> Optional[float]:
    """Return ``value`` as a float, or None when it is missing or non-finite."""
    return float(value) if is_finite(value) else None


def pct_change(start: Any, end: Any) -> Optional[float]:
    """Percentage change from ``start`` to ``end``; None for degenerate prices."""
    a = to_float(start)
    b = to_float(end)
    if a is None or b is None or a <= 0:
        return None
    result = (b / a - 1.0) * 100.0
    return result if math.isfinite(result) else None


def signal_align(side: Literal["BUY", "SELL"], raw: Optional[float]) -> Optional[float]:
    """Flip the sign of a raw return for SELL so that a profitable short is positive."""
    if raw is None:
        return None
    return raw if side == "BUY" else -raw


def mean(values: Iterable[float]) -> Optional[float]:
    items = list(values)
    if not items:
        return None
    return sum(items) / len(items)


def median(values: Iterable[float]) -> Optional[float]:
    ordered = sorted(values)
    if not ordered:
        return None
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def profit_factor(values: Iterable[float]) -> Optional[float]:
    """Gross gains over gross losses, None when there are no losses."""
    items = list(values)
    gains = sum(v for v in items if v > 0)
    losses = sum(abs(v) for v in items if v < 0)
    if losses <= 0:
        return None
    return gains / losses


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))
