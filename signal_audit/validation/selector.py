"""
Recommendation selection - best (horizon, strength cutoff) pair for a set of events.
"""
import math
from typing import Optional, Sequence

from signal_audit.backtest.events import HORIZONS
from signal_audit.models import Candidate, EventPoint, Horizon, Recommendation
from signal_audit.utils.numeric import is_finite, mean, median, profit_factor

CUTOFFS: tuple[int, ...] = tuple(range(50, 91, 2))


def _horizon_returns(events: Sequence[EventPoint], horizon: Horizon) -> list[tuple[EventPoint, float]]:
    return [
        (event, float(event.return_for(horizon)))
        for event in events
        if is_finite(event.return_for(horizon))
    ]


def evaluate_cutoff(
    events: Sequence[EventPoint],
    horizon: Horizon,
    cutoff: int,
    target_winrate: float,
) -> Optional[Candidate]:
    """
    Statistics of the events at or above a strength cutoff for one horizon.

    Args:
        events: Event pool
        horizon: Return horizon to evaluate
        cutoff: Minimum event strength
        target_winrate: Winrate a candidate must reach to meet target

    Returns:
        Candidate, or None when no event with a finite return clears the cutoff
    """
    eligible = _horizon_returns(events, horizon)
    values = [ret for event, ret in eligible if event.strength >= cutoff]
    if not values:
        return None

    winrate = sum(1 for v in values if v > 0) / len(values)
    return Candidate(
        cutoff=cutoff,
        trades=len(values),
        coverage=len(values) / max(1, len(eligible)),
        winrate=winrate,
        avg_return_pct=mean(values),
        median_return_pct=median(values),
        profit_factor=profit_factor(values),
        meets_target=winrate >= target_winrate,
    )


def _rank_key(candidate: Candidate) -> tuple[float, float, float, int]:
    return (
        candidate.avg_return_pct,
        candidate.winrate,
        candidate.coverage,
        candidate.cutoff,
    )


def pick_best(candidates: Sequence[Candidate], min_trades: int) -> Optional[Candidate]:
    """
    Best candidate with at least ``min_trades`` trades.

    Candidates meeting the target winrate are preferred; the rest are only
    considered when none does. Ties break on average return, winrate,
    coverage, then the higher (more selective) cutoff.
    """
    pool = [c for c in candidates if c.trades >= min_trades]
    qualifying = [c for c in pool if c.meets_target]
    pool = qualifying or pool
    if not pool:
        return None
    return max(pool, key=_rank_key)


def min_trades_for(eligible: int, min_trades_base: int, min_coverage: float) -> int:
    return max(min_trades_base, math.ceil(eligible * min_coverage))


def pick_recommendation(
    events: Sequence[EventPoint],
    target_winrate: float,
    min_coverage: float,
    min_trades_base: int,
) -> Optional[Recommendation]:
    """
    Choose the horizon and cutoff to trade a market's signals on.

    Args:
        events: Event pool
        target_winrate: Winrate a candidate must reach to meet target
        min_coverage: Minimum fraction of a horizon's eligible events a candidate must capture
        min_trades_base: Absolute floor on a candidate's trade count

    Returns:
        Recommendation, or None when no horizon has a large enough candidate
    """
    best_per_horizon: list[tuple[Horizon, Candidate]] = []
    for horizon in HORIZONS:
        eligible = len(_horizon_returns(events, horizon))
        evaluated = [evaluate_cutoff(events, horizon, cutoff, target_winrate) for cutoff in CUTOFFS]
        candidates = [c for c in evaluated if c is not None]
        best = pick_best(candidates, min_trades_for(eligible, min_trades_base, min_coverage))
        if best is not None:
            best_per_horizon.append((horizon, best))

    if not best_per_horizon:
        return None

    horizon, chosen = max(
        best_per_horizon,
        key=lambda item: (
            item[1].meets_target,
            item[1].avg_return_pct,
            item[1].winrate,
            item[1].coverage,
        ),
    )
    return Recommendation(horizon=horizon, **chosen.model_dump())
