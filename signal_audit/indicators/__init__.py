from signal_audit.indicators.snapshot import (
    compute_indicator_snapshot,
    sma,
    ema_series,
    rsi_wilder,
    macd_histogram,
    volume_ratio,
    lookback_return_pct,
    range_position,
    breakout,
    trend_efficiency,
    stretch_pct,
    realized_volatility,
)

__all__ = [
    "compute_indicator_snapshot",
    "sma",
    "ema_series",
    "rsi_wilder",
    "macd_histogram",
    "volume_ratio",
    "lookback_return_pct",
    "range_position",
    "breakout",
    "trend_efficiency",
    "stretch_pct",
    "realized_volatility",
]
