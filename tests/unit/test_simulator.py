from datetime import date, timedelta

import pytest

from signal_audit.backtest.simulator import FLAT, Flat, Holding, simulate_strategy, step
from signal_audit.backtest.strategies import STRATEGY_ORDER
from signal_audit.models import DailySignalPoint, ScoreMarket
from signal_audit.utils.exceptions import UnknownStrategyError


def make_series(rows) -> list[DailySignalPoint]:
    """rows: (status, close) or (status, close, strength, q70, q80)."""
    points = []
    start = date(2024, 1, 1)
    for i, row in enumerate(rows):
        status, close = row[0], row[1]
        strength = row[2] if len(row) > 2 else (75 if status != "HOLD" else None)
        q70 = row[3] if len(row) > 3 else False
        q80 = row[4] if len(row) > 4 else False
        if status == "BUY":
            score = strength
        elif status == "SELL":
            score = 100 - strength
        else:
            score = 50
        points.append(
            DailySignalPoint(
                index=199 + i,
                date=(start + timedelta(days=i)).isoformat(),
                close=close,
                score=score,
                status=status,
                strength=strength,
                entry_qualifies_70=q70,
                entry_qualifies_80=q80,
            )
        )
    return points


def assert_no_overlap(trades) -> None:
    for earlier, later in zip(trades, trades[1:]):
        assert earlier.exit_date <= later.entry_date


def test_step_opens_from_flat() -> None:
    series = make_series([("BUY", 100.0)])
    state, closed = step(FLAT, series[0], None, "status_flip")
    assert isinstance(state, Holding)
    assert state.side == "BUY"
    assert state.entry_close == 100.0
    assert closed is None


def test_step_exits_and_reverses_on_flip() -> None:
    series = make_series([("BUY", 100.0), ("SELL", 105.0)])
    holding, _ = step(FLAT, series[0], None, "status_flip")
    state, closed = step(holding, series[1], series[0], "status_flip")
    assert closed == holding
    assert isinstance(state, Holding)
    assert state.side == "SELL"


def test_step_stays_flat_on_hold() -> None:
    series = make_series([("HOLD", 100.0)])
    state, closed = step(FLAT, series[0], None, "status_flip")
    assert isinstance(state, Flat)
    assert closed is None


def test_sell_return_is_direction_aligned() -> None:
    series = make_series([("SELL", 100.0), ("SELL", 95.0), ("HOLD", 90.0)])
    result = simulate_strategy(series, "status_flip", "ABC", "Abc Corp")
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.side == "SELL"
    assert trade.return_pct == pytest.approx(10.0)
    assert trade.days_held == 2
    assert trade.entry_date == "2024-01-01"
    assert trade.exit_date == "2024-01-03"
    assert result.open is None


def test_buy_trade_fields() -> None:
    series = make_series([("HOLD", 100.0), ("BUY", 100.0), ("BUY", 104.0), ("HOLD", 110.0)])
    result = simulate_strategy(series, "status_flip", "ABC", "Abc Corp", ScoreMarket.AEX)
    trade = result.trades[0]
    assert trade.symbol == "ABC"
    assert trade.name == "Abc Corp"
    assert trade.market == ScoreMarket.AEX
    assert trade.strategy == "status_flip"
    assert trade.entry_score == 75
    assert trade.exit_score == 50
    assert trade.return_pct == pytest.approx(10.0)
    assert trade.days_held == 2


def test_flip_closes_and_opens_same_day() -> None:
    series = make_series([("BUY", 100.0), ("BUY", 110.0), ("SELL", 120.0), ("SELL", 108.0)])
    result = simulate_strategy(series, "status_flip")
    assert [t.side for t in result.trades] == ["BUY"]
    assert result.trades[0].return_pct == pytest.approx(20.0)
    assert result.open is not None
    assert result.open.side == "SELL"
    assert result.open.entry_date == result.trades[0].exit_date
    assert result.open.return_pct_to_now == pytest.approx(10.0)
    assert result.open.days_open == 1


def test_strength_strategy_exits_when_strength_fades() -> None:
    series = make_series(
        [
            ("BUY", 100.0, 75),
            ("BUY", 102.0, 80),
            ("BUY", 104.0, 65),
            ("BUY", 106.0, 72),
            ("HOLD", 108.0),
        ]
    )
    flip = simulate_strategy(series, "status_flip")
    strength = simulate_strategy(series, "strength_70")

    assert len(flip.trades) == 1
    assert flip.trades[0].return_pct == pytest.approx(8.0)

    assert len(strength.trades) == 2
    assert strength.trades[0].return_pct == pytest.approx(4.0)
    assert strength.trades[1].entry_date == "2024-01-04"
    assert strength.trades[1].return_pct == pytest.approx((108.0 / 106.0 - 1) * 100)
    assert_no_overlap(strength.trades)


def test_entry_strategy_follows_qualification() -> None:
    series = make_series(
        [
            ("BUY", 100.0, 85, True, False),
            ("BUY", 101.0, 85, False, False),
            ("BUY", 102.0, 85, True, True),
            ("BUY", 103.0, 85, True, True),
        ]
    )
    entry_70 = simulate_strategy(series, "entry_70")
    entry_80 = simulate_strategy(series, "entry_80")

    assert len(entry_70.trades) == 1
    assert entry_70.trades[0].exit_date == "2024-01-02"
    assert entry_70.open.entry_date == "2024-01-03"

    assert entry_80.trades == []
    assert entry_80.open.entry_date == "2024-01-03"
    assert entry_80.open.return_pct_to_now == pytest.approx((103.0 / 102.0 - 1) * 100)


def test_no_reentry_while_signal_persists() -> None:
    series = make_series(
        [
            ("HOLD", 100.0),
            ("SELL", 100.0, 75),
            ("SELL", 98.0, 75),
            ("HOLD", 97.0),
            ("SELL", 96.0, 75),
            ("SELL", 95.0, 75),
        ]
    )
    result = simulate_strategy(series, "strength_70")
    assert len(result.trades) == 1
    assert result.trades[0].return_pct == pytest.approx(3.0)
    assert result.open.entry_date == "2024-01-05"


def test_degenerate_entry_price_is_dropped() -> None:
    series = make_series([("BUY", 0.0), ("HOLD", 10.0), ("BUY", 10.0), ("HOLD", 12.0)])
    result = simulate_strategy(series, "status_flip")
    assert len(result.trades) == 1
    assert result.trades[0].return_pct == pytest.approx(20.0)


def test_never_overlapping_positions() -> None:
    statuses = ["BUY", "BUY", "HOLD", "SELL", "SELL", "BUY", "HOLD", "HOLD", "SELL", "BUY"]
    strengths = [72, 85, None, 90, 65, 81, None, None, 74, 88]
    rows = [
        (s, 100.0 + i, st if st is not None else None, i % 2 == 0, i % 3 == 0)
        for i, (s, st) in enumerate(zip(statuses, strengths))
    ]
    series = make_series(rows)
    for strategy in STRATEGY_ORDER:
        result = simulate_strategy(series, strategy)
        assert_no_overlap(result.trades)
        if result.open is not None and result.trades:
            assert result.trades[-1].exit_date <= result.open.entry_date


def test_empty_series() -> None:
    result = simulate_strategy([], "status_flip")
    assert result.trades == []
    assert result.open is None


def test_unknown_strategy_raises() -> None:
    with pytest.raises(UnknownStrategyError):
        simulate_strategy([], "moonshot")
