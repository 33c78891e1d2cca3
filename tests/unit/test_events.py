from datetime import date, timedelta

import pytest

from signal_audit.backtest.events import HORIZONS, extract_events
from signal_audit.models import DailySignalPoint


def make_series(statuses: list[str], closes: list[float]) -> list[DailySignalPoint]:
    start = date(2024, 1, 1)
    points = []
    for i, (status, close) in enumerate(zip(statuses, closes)):
        score = {"BUY": 80, "SELL": 15, "HOLD": 50}[status]
        points.append(
            DailySignalPoint(
                index=199 + i,
                date=(start + timedelta(days=i)).isoformat(),
                close=close,
                score=score,
                status=status,
                strength=score if status == "BUY" else 100 - score if status == "SELL" else None,
            )
        )
    return points


def test_horizons() -> None:
    assert HORIZONS == ("d7", "d30", "untilNext")


def test_events_are_status_transitions() -> None:
    statuses = ["HOLD", "BUY", "BUY", "HOLD", "SELL", "SELL", "BUY"]
    events = extract_events(make_series(statuses, [100.0] * 7), "ABC", "Abc")
    assert [(e.date, e.side) for e in events] == [
        ("2024-01-02", "BUY"),
        ("2024-01-05", "SELL"),
        ("2024-01-07", "BUY"),
    ]
    assert events[0].symbol == "ABC"
    assert events[0].strength == 80
    assert events[1].strength == 85


def test_first_day_signal_is_an_event() -> None:
    events = extract_events(make_series(["SELL", "SELL"], [100.0, 99.0]), "ABC")
    assert len(events) == 1
    assert events[0].name == "ABC"


def test_long_signal_returns() -> None:
    statuses = ["HOLD"] + ["BUY"] * 35 + ["SELL"] * 4
    closes = [100.0 + i for i in range(40)]
    events = extract_events(make_series(statuses, closes), "ABC")

    buy = events[0]
    assert buy.return_for("d7") == pytest.approx((108.0 / 101.0 - 1) * 100)
    assert buy.return_for("d30") == pytest.approx((131.0 / 101.0 - 1) * 100)
    assert buy.return_for("untilNext") == pytest.approx((136.0 / 101.0 - 1) * 100)

    sell = events[1]
    assert sell.side == "SELL"
    assert sell.return_for("d7") is None
    assert sell.return_for("d30") is None
    assert sell.return_for("untilNext") is None


def test_short_lived_signal_has_no_fixed_horizon_returns() -> None:
    statuses = ["BUY", "BUY", "BUY", "HOLD"] + ["HOLD"] * 36
    closes = [100.0] * 3 + [90.0] * 37
    event = extract_events(make_series(statuses, closes), "ABC")[0]
    assert event.return_for("d7") is None
    assert event.return_for("d30") is None
    assert event.return_for("untilNext") == pytest.approx(-10.0)


def test_sell_returns_are_aligned() -> None:
    statuses = ["SELL"] * 8 + ["HOLD"]
    closes = [100.0] * 7 + [90.0, 80.0]
    event = extract_events(make_series(statuses, closes), "ABC")[0]
    assert event.return_for("d7") == pytest.approx(10.0)
    assert event.return_for("untilNext") == pytest.approx(20.0)


def test_no_events_without_signals() -> None:
    assert extract_events(make_series(["HOLD"] * 5, [1.0] * 5), "ABC") == []
