"""
Strategy Simulator - replays a signal series through a flat/holding state machine.

The state is an immutable value threaded through ``step``; ``simulate_strategy``
is a plain fold over the series that collects the closed legs.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from signal_audit.backtest.strategies import get_strategy_meta, is_eligible
from signal_audit.models import (
    BacktestTrade,
    DailySignalPoint,
    OpenPosition,
    ScoreMarket,
    Side,
    StrategyResult,
)
from signal_audit.utils.numeric import is_finite, pct_change, signal_align


@dataclass(frozen=True)
class Flat:
    pass


@dataclass(frozen=True)
class Holding:
    side: Side
    entry_date: str
    entry_score: int
    entry_close: float
    entry_index: int

    def aligned_return(self, close: float) -> Optional[float]:
        """Direction-aligned percent return from the entry close to ``close``."""
        aligned = signal_align(self.side, pct_change(self.entry_close, close))
        return aligned if is_finite(aligned) else None


PositionState = Union[Flat, Holding]

FLAT = Flat()


def _must_exit(state: Holding, point: DailySignalPoint, strategy: str, eligible: bool) -> bool:
    if point.status != state.side:
        return True
    return strategy != "status_flip" and not eligible


def step(
    state: PositionState,
    point: DailySignalPoint,
    prev: Optional[DailySignalPoint],
    strategy: str,
) -> tuple[PositionState, Optional[Holding]]:
    """
    Advance the state machine by one day.

    Args:
        state: Current state (Flat or Holding)
        point: Today's signal point
        prev: Yesterday's signal point, None on the first day
        strategy: Strategy key

    Returns:
        (next state, position closed today or None). A position closed today
        exits at today's close; a new one may open on the same day.
    """
    eligible = is_eligible(point, strategy)
    closed: Optional[Holding] = None

    if isinstance(state, Holding) and _must_exit(state, point, strategy, eligible):
        closed = state
        state = FLAT

    if isinstance(state, Flat) and eligible:
        # Consecutive eligible days on the same side are one trade
        continuing = (
            prev is not None
            and prev.status == point.status
            and is_eligible(prev, strategy)
        )
        if not continuing:
            state = Holding(
                side=point.status,
                entry_date=point.date,
                entry_score=point.score,
                entry_close=point.close,
                entry_index=point.index,
            )

    return state, closed


def simulate_strategy(
    points: Sequence[DailySignalPoint],
    strategy: str,
    symbol: str = "",
    name: str = "",
    market: ScoreMarket = ScoreMarket.DEFAULT,
) -> StrategyResult:
    """
    Run one strategy over an asset's signal series.

    Args:
        points: Chronologically ascending signal series
        strategy: Strategy key
        symbol: Asset symbol stamped on every trade
        name: Asset display name
        market: Market the series was scored in

    Returns:
        StrategyResult with the closed trades and the position still open
        at the end of the series (marked to the last close)
    """
    get_strategy_meta(strategy)

    trades: list[BacktestTrade] = []
    state: PositionState = FLAT
    prev: Optional[DailySignalPoint] = None

    for point in points:
        state, closed = step(state, point, prev, strategy)
        if closed is not None:
            return_pct = closed.aligned_return(point.close)
            if return_pct is not None:
                trades.append(
                    BacktestTrade(
                        symbol=symbol,
                        name=name,
                        market=market,
                        strategy=strategy,
                        side=closed.side,
                        entry_date=closed.entry_date,
                        exit_date=point.date,
                        entry_score=closed.entry_score,
                        exit_score=point.score,
                        days_held=max(0, point.index - closed.entry_index),
                        return_pct=return_pct,
                    )
                )
        prev = point

    open_position: Optional[OpenPosition] = None
    if isinstance(state, Holding) and points:
        last = points[-1]
        return_pct = state.aligned_return(last.close)
        if return_pct is not None:
            open_position = OpenPosition(
                symbol=symbol,
                name=name,
                market=market,
                strategy=strategy,
                side=state.side,
                entry_date=state.entry_date,
                entry_score=state.entry_score,
                days_open=max(0, last.index - state.entry_index),
                return_pct_to_now=return_pct,
            )

    return StrategyResult(trades=trades, open=open_position)
