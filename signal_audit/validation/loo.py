"""
Leave-One-Out Validator - out-of-sample check of a market's recommendation.
"""
from typing import Optional, Sequence

from loguru import logger

from signal_audit.backtest.series import signal_strength
from signal_audit.models import (
    CurrentSignal,
    EventPoint,
    LiveSignal,
    Recommendation,
    ScoreMarket,
    Side,
    ValidationSummary,
    ValidatorReport,
)
from signal_audit.utils.numeric import clamp, is_finite, mean, median, profit_factor
from signal_audit.validation.selector import pick_recommendation


def summarize_validation(
    records: Sequence[tuple[float, Side]],
    target_winrate: float,
) -> ValidationSummary:
    """Aggregate held-out (return, side) outcomes."""
    if not records:
        return ValidationSummary()

    values = [ret for ret, _ in records]
    winrate = sum(1 for v in values if v > 0) / len(values)
    return ValidationSummary(
        trades=len(values),
        winrate=winrate,
        avg_return_pct=mean(values),
        median_return_pct=median(values),
        profit_factor=profit_factor(values),
        buy_count=sum(1 for _, side in records if side == "BUY"),
        sell_count=sum(1 for _, side in records if side == "SELL"),
        meets_target=winrate >= target_winrate,
    )


class LeaveOneOutValidator:
    """
    Validates a market's recommended (horizon, cutoff) out of sample.

    Each event is held out in turn, a recommendation is fitted on the rest,
    and the held-out event's return is recorded when that recommendation
    meets target and the event clears its cutoff. A market passes only when
    both the full-sample recommendation and the held-out aggregate hold up.
    """

    def __init__(
        self,
        target_winrate: float = 0.80,
        min_coverage: float = 0.12,
        min_trades: int = 8,
        min_validation_trades: int = 6,
        max_signals_per_market: int = 40,
    ):
        """
        Initialize validator with thresholds.

        Args:
            target_winrate: Winrate to reach (clamped to [0.6, 0.95])
            min_coverage: Minimum share of eligible events a candidate captures (clamped to [0.05, 0.5])
            min_trades: Minimum trades per candidate (at least 4)
            min_validation_trades: Minimum held-out outcomes to pass (at least 4)
            max_signals_per_market: Cap on listed live signals (clamped to [4, 80])
        """
        self.target_winrate = clamp(target_winrate, 0.6, 0.95)
        self.min_coverage = clamp(min_coverage, 0.05, 0.5)
        self.min_trades = max(4, int(min_trades))
        self.min_validation_trades = max(4, int(min_validation_trades))
        self.max_signals_per_market = int(round(clamp(max_signals_per_market, 4, 80)))

    def recommend(self, events: Sequence[EventPoint]) -> Optional[Recommendation]:
        return pick_recommendation(events, self.target_winrate, self.min_coverage, self.min_trades)

    def held_out_outcomes(self, events: Sequence[EventPoint]) -> list[tuple[float, Side]]:
        """
        Run the leave-one-out folds.

        Args:
            events: Full event pool

        Returns:
            One (return, side) record per event that survived its fold
        """
        records: list[tuple[float, Side]] = []
        for i, event in enumerate(events):
            train = [e for j, e in enumerate(events) if j != i]
            rec = self.recommend(train)
            if rec is None or not rec.meets_target:
                continue
            ret = event.return_for(rec.horizon)
            if not is_finite(ret):
                continue
            if event.strength < rec.cutoff:
                continue
            records.append((ret, event.side))
        return records

    def is_validated(
        self,
        recommendation: Optional[Recommendation],
        validation: ValidationSummary,
    ) -> bool:
        return bool(
            recommendation is not None
            and recommendation.meets_target
            and validation.trades >= self.min_validation_trades
            and validation.meets_target
            and validation.avg_return_pct > 0
        )

    def live_signals(
        self,
        market: ScoreMarket,
        current: Sequence[CurrentSignal],
        recommendation: Recommendation,
        validation: ValidationSummary,
    ) -> list[LiveSignal]:
        """Every current BUY/SELL at or above the recommended cutoff, BUY first then strongest."""
        signals: list[LiveSignal] = []
        for item in current:
            strength = signal_strength(item.status, item.score)
            if strength is None or strength < recommendation.cutoff:
                continue
            signals.append(
                LiveSignal(
                    market=market,
                    symbol=item.symbol,
                    name=item.name,
                    status=item.status,
                    score=item.score,
                    strength=strength,
                    cutoff=recommendation.cutoff,
                    horizon=recommendation.horizon,
                    action="BUY NOW" if item.status == "BUY" else "SELL / EXIT",
                    expected_coverage=recommendation.coverage,
                    validation_winrate=validation.winrate,
                    validation_return_pct=validation.avg_return_pct,
                    validation_trades=validation.trades,
                )
            )

        signals.sort(key=lambda s: (s.status != "BUY", -s.strength, -s.validation_return_pct))
        return signals

    def validate(
        self,
        market: ScoreMarket,
        events: Sequence[EventPoint],
        current: Sequence[CurrentSignal] = (),
    ) -> ValidatorReport:
        """
        Build the validator report for one market.

        Args:
            market: Market the events belong to
            events: All historical BUY/SELL events of the market
            current: Latest scored state per asset, used for live signals

        Returns:
            ValidatorReport with the recommendation, held-out summary and pass flag
        """
        recommendation = self.recommend(events)
        validation = summarize_validation(self.held_out_outcomes(events), self.target_winrate)
        passed = self.is_validated(recommendation, validation)

        signals: list[LiveSignal] = []
        if passed:
            signals = self.live_signals(market, current, recommendation, validation)

        logger.bind(market=market.value).info(
            f"Validation {market.value}: {len(events)} events, "
            f"{validation.trades} held-out trades, "
            f"winrate {validation.winrate:.0%}, passed={passed}"
        )

        return ValidatorReport(
            market=market,
            events=len(events),
            recommendation=recommendation,
            validation=validation,
            passed=passed,
            current_signals=len(signals),
            signals=signals[: self.max_signals_per_market],
        )
