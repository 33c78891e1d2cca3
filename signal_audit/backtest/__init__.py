from signal_audit.backtest.series import WINDOW, build_daily_signal_series, signal_strength
from signal_audit.backtest.strategies import (
    STRATEGY_ORDER,
    STRATEGY_META,
    StrategyMeta,
    get_strategy_meta,
    is_eligible,
)
from signal_audit.backtest.simulator import Flat, Holding, step, simulate_strategy
from signal_audit.backtest.audit import (
    run_asset_audit,
    summarize_strategy,
    summarize_market_audit,
    compute_max_drawdown_pct,
    build_market_audit_report,
)
from signal_audit.backtest.events import HORIZONS, extract_events

__all__ = [
    "WINDOW",
    "build_daily_signal_series",
    "signal_strength",
    "STRATEGY_ORDER",
    "STRATEGY_META",
    "StrategyMeta",
    "get_strategy_meta",
    "is_eligible",
    "Flat",
    "Holding",
    "step",
    "simulate_strategy",
    "run_asset_audit",
    "summarize_strategy",
    "summarize_market_audit",
    "compute_max_drawdown_pct",
    "build_market_audit_report",
    "HORIZONS",
    "extract_events",
]
