"""
Audit Aggregator - per-strategy statistics across a market's assets.
"""
from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from loguru import logger

from signal_audit.backtest.series import (
    WINDOW,
    IndicatorComputer,
    build_daily_signal_series,
    min_history,
)
from signal_audit.backtest.simulator import simulate_strategy
from signal_audit.backtest.strategies import STRATEGY_ORDER, get_strategy_meta
from signal_audit.indicators import compute_indicator_snapshot
from signal_audit.models import (
    AssetAuditInput,
    AssetAuditState,
    BacktestTrade,
    MarketAuditReport,
    ScoreMarket,
    SkippedAsset,
    StrategyStats,
    TopAsset,
)
from signal_audit.utils.exceptions import InsufficientHistoryError
from signal_audit.utils.numeric import mean, median

TOP_ASSETS = 8
RECENT_TRADES = 5
NOT_ENOUGH_HISTORY = "Not enough history"


def run_asset_audit(
    asset: AssetAuditInput,
    compute_indicators: IndicatorComputer = compute_indicator_snapshot,
    window: int = WINDOW,
) -> AssetAuditState:
    """Build the signal series once and simulate every strategy over it."""
    if asset.length < min_history(window):
        raise InsufficientHistoryError(asset.symbol, min_history(window), asset.length)

    points = build_daily_signal_series(asset, compute_indicators, window=window)
    by_strategy = {
        strategy: simulate_strategy(points, strategy, asset.symbol, asset.name, asset.market)
        for strategy in STRATEGY_ORDER
    }
    return AssetAuditState(
        symbol=asset.symbol,
        name=asset.name,
        market=asset.market,
        points=points,
        by_strategy=by_strategy,
    )


def compound(returns: Iterable[float], start: float = 100.0) -> float:
    equity = start
    for ret in returns:
        equity *= 1 + ret / 100
    return equity


def compute_max_drawdown_pct(returns: Sequence[float]) -> Optional[float]:
    """
    Largest peak-to-trough decline of the compounded equity curve, in percent.

    The curve starts at 100 and applies each return in order. Returns None
    for an empty sequence.
    """
    if not returns:
        return None

    equity = 100.0
    peak = 100.0
    max_dd = 0.0
    for ret in returns:
        equity *= 1 + ret / 100
        peak = max(peak, equity)
        drawdown = (peak - equity) / peak * 100 if peak > 0 else 0.0
        max_dd = max(max_dd, drawdown)
    return min(max_dd, 100.0)


def _chronological(trades: Iterable[BacktestTrade]) -> list[BacktestTrade]:
    return sorted(trades, key=lambda t: (t.exit_date, t.entry_date, t.symbol))


def _winrate(returns: Sequence[float]) -> Optional[float]:
    if not returns:
        return None
    return sum(1 for r in returns if r > 0) / len(returns)


def _top_assets(trades: Sequence[BacktestTrade], limit: int) -> list[TopAsset]:
    per_asset: dict[tuple[str, str], list[float]] = defaultdict(list)
    for trade in trades:
        per_asset[(trade.symbol, trade.name)].append(trade.return_pct)

    rows = [
        TopAsset(
            symbol=symbol,
            name=name,
            closed_trades=len(returns),
            winrate=_winrate(returns),
            avg_return_pct=mean(returns),
            compounded_value_of_100=compound(returns),
        )
        for (symbol, name), returns in per_asset.items()
    ]
    rows.sort(key=lambda a: (-a.closed_trades, -a.avg_return_pct, a.symbol))
    return rows[:limit]


def summarize_strategy(
    strategy: str,
    asset_states: Sequence[AssetAuditState],
    top_assets: int = TOP_ASSETS,
    recent_trades: int = RECENT_TRADES,
) -> StrategyStats:
    """
    Aggregate one strategy's closed trades across all assets.

    Args:
        strategy: Strategy key
        asset_states: Per-asset audit results
        top_assets: Size of the ranked per-asset list
        recent_trades: Number of most recent trades to keep

    Returns:
        StrategyStats; open positions are counted but never enter the
        return statistics
    """
    meta = get_strategy_meta(strategy)

    trades = _chronological(
        trade
        for state in asset_states
        if strategy in state.by_strategy
        for trade in state.by_strategy[strategy].trades
    )
    open_positions = sum(
        1
        for state in asset_states
        if strategy in state.by_strategy and state.by_strategy[strategy].open is not None
    )

    returns = [trade.return_pct for trade in trades]
    wins = sum(1 for r in returns if r > 0)

    return StrategyStats(
        key=strategy,
        label=meta.label,
        closed_trades=len(trades),
        wins=wins,
        losses=len(returns) - wins,
        winrate=_winrate(returns),
        avg_return_pct=mean(returns),
        median_return_pct=median(returns),
        avg_days_held=mean(trade.days_held for trade in trades),
        flat_profit_on_100_each=sum(returns) if returns else None,
        compounded_value_of_100=compound(returns) if returns else None,
        max_drawdown_pct=compute_max_drawdown_pct(returns),
        open_positions=open_positions,
        recent_trades=list(reversed(trades[-recent_trades:])) if recent_trades > 0 else [],
        top_assets=_top_assets(trades, top_assets),
    )


def summarize_market_audit(
    asset_states: Sequence[AssetAuditState],
    top_assets: int = TOP_ASSETS,
    recent_trades: int = RECENT_TRADES,
) -> list[StrategyStats]:
    return [
        summarize_strategy(strategy, asset_states, top_assets, recent_trades)
        for strategy in STRATEGY_ORDER
    ]


def build_market_audit_report(
    market: ScoreMarket,
    assets: Sequence[AssetAuditInput],
    compute_indicators: IndicatorComputer = compute_indicator_snapshot,
    window: int = WINDOW,
    top_assets: int = TOP_ASSETS,
    recent_trades: int = RECENT_TRADES,
) -> MarketAuditReport:
    """
    Run the walk-forward audit for every asset of a market.

    Args:
        market: Market whose profile scores every asset
        assets: Ascending daily series, one per asset
        compute_indicators: Snapshot provider for each trailing window
        window: Trailing window length
        top_assets: Size of each strategy's ranked asset list
        recent_trades: Number of recent trades kept per strategy

    Returns:
        MarketAuditReport with the five strategy summaries in fixed order
    """
    states: list[AssetAuditState] = []
    skipped: list[SkippedAsset] = []

    with logger.contextualize(market=market.value):
        for asset in assets:
            scoped = asset if asset.market == market else asset.model_copy(update={"market": market})
            try:
                state = run_asset_audit(scoped, compute_indicators, window=window)
            except InsufficientHistoryError as e:
                logger.warning(f"Skipping {asset.symbol}: {e}")
                skipped.append(SkippedAsset(symbol=asset.symbol, reason=NOT_ENOUGH_HISTORY))
                continue

            logger.debug(
                f"{asset.symbol}: "
                + ", ".join(f"{k}={len(v.trades)}" for k, v in state.by_strategy.items())
            )
            states.append(state)

        strategies = summarize_market_audit(states, top_assets, recent_trades)
        logger.info(
            f"Audit {market.value}: {len(states)}/{len(assets)} assets processed, "
            f"{len(skipped)} skipped"
        )

    return MarketAuditReport(
        market=market,
        generated_at=datetime.now(timezone.utc),
        window=window,
        universe_size=len(assets),
        processed_assets=len(states),
        skipped_assets=len(skipped),
        strategies=strategies,
        assets=states,
        skipped=skipped,
    )
