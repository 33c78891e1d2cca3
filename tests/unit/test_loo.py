import pytest

from signal_audit.models import CurrentSignal, EventPoint, ScoreMarket, ValidationSummary
from signal_audit.validation.loo import LeaveOneOutValidator, summarize_validation


def event(i: int, strength: int, d7, side="BUY") -> EventPoint:
    return EventPoint(
        symbol=f"S{i}",
        name=f"Asset {i}",
        date=f"2024-01-{i + 1:02d}",
        side=side,
        score=strength if side == "BUY" else 100 - strength,
        strength=strength,
        returns={"d7": d7, "d30": None, "untilNext": None},
    )


@pytest.fixture
def validator():
    return LeaveOneOutValidator()


@pytest.fixture
def winning_events():
    """Twenty strong events that all paid off over seven days."""
    return [event(i, 80, 2.0, side="BUY" if i % 2 else "SELL") for i in range(20)]


def test_defaults_and_clamping() -> None:
    v = LeaveOneOutValidator()
    assert v.target_winrate == 0.80
    assert v.min_coverage == 0.12
    assert v.min_trades == 8
    assert v.min_validation_trades == 6
    assert v.max_signals_per_market == 40

    clamped = LeaveOneOutValidator(
        target_winrate=0.99,
        min_coverage=0.01,
        min_trades=1,
        min_validation_trades=2,
        max_signals_per_market=500,
    )
    assert clamped.target_winrate == 0.95
    assert clamped.min_coverage == 0.05
    assert clamped.min_trades == 4
    assert clamped.min_validation_trades == 4
    assert clamped.max_signals_per_market == 80


def test_summarize_validation_empty() -> None:
    summary = summarize_validation([], 0.8)
    assert summary == ValidationSummary()
    assert summary.profit_factor is None


def test_summarize_validation() -> None:
    summary = summarize_validation([(4.0, "BUY"), (-2.0, "SELL"), (1.0, "BUY")], 0.6)
    assert summary.trades == 3
    assert summary.winrate == pytest.approx(2 / 3)
    assert summary.avg_return_pct == pytest.approx(1.0)
    assert summary.median_return_pct == pytest.approx(1.0)
    assert summary.profit_factor == pytest.approx(2.5)
    assert summary.buy_count == 2
    assert summary.sell_count == 1
    assert summary.meets_target is True


def test_held_out_outcomes_never_exceed_events(validator, winning_events) -> None:
    records = validator.held_out_outcomes(winning_events)
    assert len(records) <= len(winning_events)
    assert len(records) == 20
    assert all(ret == 2.0 for ret, _ in records)


def test_validated_market(validator, winning_events) -> None:
    current = [
        CurrentSignal(symbol="AAA", name="Aaa", status="SELL", score=10),
        CurrentSignal(symbol="BBB", name="Bbb", status="BUY", score=85),
        CurrentSignal(symbol="CCC", name="Ccc", status="BUY", score=70),
        CurrentSignal(symbol="DDD", name="Ddd", status="HOLD", score=50),
        CurrentSignal(symbol="EEE", name="Eee", status="BUY", score=95),
    ]
    report = validator.validate(ScoreMarket.AEX, winning_events, current)

    assert report.market == ScoreMarket.AEX
    assert report.events == 20
    assert report.recommendation.horizon == "d7"
    assert report.recommendation.cutoff == 80
    assert report.validation.trades == 20
    assert report.validation.winrate == 1.0
    assert report.validation.buy_count == 10
    assert report.passed is True
    assert report.current_signals == 3
    assert [s.symbol for s in report.signals] == ["EEE", "BBB", "AAA"]
    assert [s.action for s in report.signals] == ["BUY NOW", "BUY NOW", "SELL / EXIT"]
    assert report.signals[2].strength == 90
    assert report.signals[0].validation_trades == 20
    assert report.signals[0].expected_coverage == pytest.approx(1.0)


def test_signals_capped_per_market(winning_events) -> None:
    validator = LeaveOneOutValidator(max_signals_per_market=4)
    current = [
        CurrentSignal(symbol=f"X{i}", name="X", status="BUY", score=90) for i in range(6)
    ]
    report = validator.validate(ScoreMarket.DEFAULT, winning_events, current)
    assert report.current_signals == 6
    assert len(report.signals) == 4


def test_coin_flip_market_fails(validator) -> None:
    events = [event(i, 80, 2.0 if i % 2 else -2.0) for i in range(20)]
    current = [CurrentSignal(symbol="AAA", name="Aaa", status="BUY", score=90)]
    report = validator.validate(ScoreMarket.DEFAULT, events, current)

    assert report.recommendation is not None
    assert report.recommendation.meets_target is False
    assert report.validation.trades == 0
    assert report.passed is False
    assert report.current_signals == 0
    assert report.signals == []


def test_too_few_events_fail(validator) -> None:
    report = validator.validate(ScoreMarket.DEFAULT, [event(i, 80, 2.0) for i in range(5)])
    assert report.recommendation is None
    assert report.validation.trades == 0
    assert report.passed is False


def test_is_validated_requires_positive_held_out_return(validator, winning_events) -> None:
    rec = validator.recommend(winning_events)
    good = ValidationSummary(trades=10, winrate=0.9, avg_return_pct=1.0, meets_target=True)
    flat = ValidationSummary(trades=10, winrate=0.9, avg_return_pct=0.0, meets_target=True)
    thin = ValidationSummary(trades=5, winrate=0.9, avg_return_pct=1.0, meets_target=True)
    missed = ValidationSummary(trades=10, winrate=0.7, avg_return_pct=1.0, meets_target=False)

    assert validator.is_validated(rec, good) is True
    assert validator.is_validated(rec, flat) is False
    assert validator.is_validated(rec, thin) is False
    assert validator.is_validated(rec, missed) is False
    assert validator.is_validated(None, good) is False
