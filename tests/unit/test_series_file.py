import json
from datetime import datetime, timezone

import pytest

from signal_audit.data import load_series_file
from signal_audit.data.series_file import parse_timestamp
from signal_audit.indicators import compute_indicator_snapshot
from signal_audit.models import ScoreMarket
from signal_audit.utils.exceptions import DataLoadError


def write_json(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_parse_timestamp_variants() -> None:
    expected = datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert parse_timestamp("2024-01-02") == expected
    assert parse_timestamp("2024-01-02T00:00:00Z") == expected
    assert parse_timestamp(1704153600) == expected
    assert parse_timestamp(1704153600000) == expected
    assert parse_timestamp(datetime(2024, 1, 2)) == expected


def test_parse_timestamp_rejects_empty() -> None:
    with pytest.raises(ValueError):
        parse_timestamp("")


def test_load_json_arrays(tmp_path) -> None:
    path = tmp_path / "asml.json"
    write_json(path, {
        "symbol": "ASML.AS",
        "name": "ASML Holding",
        "times": ["2024-01-01", "2024-01-02", "2024-01-03"],
        "closes": [600.0, 605.5, 610.0],
        "volumes": [1000, 1200, 900],
    })

    asset = load_series_file(path)

    assert asset.symbol == "ASML.AS"
    assert asset.name == "ASML Holding"
    assert asset.market == ScoreMarket.AEX
    assert asset.closes == [600.0, 605.5, 610.0]
    assert asset.volumes == [1000.0, 1200.0, 900.0]
    assert asset.length == 3


def test_load_json_rows_sorted_and_cleaned(tmp_path) -> None:
    path = tmp_path / "BTC-USD.json"
    write_json(path, {"rows": [
        {"timestamp": 1704240000000, "close": 43000, "volume": 5},
        {"timestamp": 1704153600000, "close": 42000},
        {"timestamp": 1704326400000, "close": None, "volume": 7},
        {"timestamp": "not a date", "close": 44000},
    ]})

    asset = load_series_file(path)

    assert asset.symbol == "BTC-USD"
    assert asset.name == "BTC-USD"
    assert asset.market == ScoreMarket.CRYPTO
    assert asset.closes == [42000.0, 43000.0]
    assert asset.volumes == [None, 5.0]
    assert asset.times[0] < asset.times[1]


def test_load_json_list(tmp_path) -> None:
    path = tmp_path / "spy.json"
    write_json(path, [
        {"timestamp": "2024-01-02", "close": 470.0, "volume": 10},
        {"timestamp": "2024-01-03", "close": 468.0, "volume": 12},
    ])

    asset = load_series_file(path, market="s&p 500")

    assert asset.symbol == "spy"
    assert asset.market == ScoreMarket.SP500


def test_market_override_beats_header(tmp_path) -> None:
    path = tmp_path / "sap.json"
    write_json(path, {
        "symbol": "SAP.DE",
        "market": "DAX",
        "times": ["2024-01-02"],
        "closes": [150.0],
    })
    assert load_series_file(path).market == ScoreMarket.DAX
    assert load_series_file(path, market="nasdaq").market == ScoreMarket.NASDAQ


def test_load_csv(tmp_path) -> None:
    path = tmp_path / "aapl.csv"
    path.write_text(
        "Timestamp,Close,Volume\n"
        "2024-01-03,184.25,100\n"
        "2024-01-02,185.64,\n",
        encoding="utf-8",
    )

    asset = load_series_file(path)

    assert asset.symbol == "aapl"
    assert asset.market == ScoreMarket.DEFAULT
    assert asset.closes == [185.64, 184.25]
    assert asset.volumes == [None, 100.0]


def test_csv_missing_columns(tmp_path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("date,price\n2024-01-02,1\n", encoding="utf-8")
    with pytest.raises(DataLoadError, match="missing columns: close, timestamp"):
        load_series_file(path)


def test_missing_file(tmp_path) -> None:
    with pytest.raises(DataLoadError) as exc_info:
        load_series_file(tmp_path / "nope.json")
    assert exc_info.value.message == "file not found"


def test_invalid_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError):
        load_series_file(path)


def test_no_usable_rows(tmp_path) -> None:
    path = tmp_path / "empty.json"
    write_json(path, {"times": ["2024-01-02"], "closes": ["n/a"]})
    with pytest.raises(DataLoadError, match="no rows"):
        load_series_file(path)


def test_scalar_json_payload(tmp_path) -> None:
    path = tmp_path / "scalar.json"
    write_json(path, 42)
    with pytest.raises(DataLoadError, match="expected a JSON object or list"):
        load_series_file(path)


def test_missing_latest_volume_stays_absent(tmp_path) -> None:
    path = tmp_path / "gap.json"
    days = 30
    write_json(path, {"rows": [
        {
            "timestamp": f"2024-01-{i + 1:02d}",
            "close": 100.0 + i,
            "volume": "n/a" if i == days - 1 else 1000 + 10 * i,
        }
        for i in range(days)
    ]})

    asset = load_series_file(path)

    assert asset.length == days
    assert asset.volumes[-1] is None
    assert asset.volumes[-2] == 1280.0
    snapshot = compute_indicator_snapshot(asset.closes, asset.volumes)
    assert snapshot.volume.ratio is None


def test_offset_timestamps_are_normalized_to_utc() -> None:
    parsed = parse_timestamp("2024-01-02T23:30:00-05:00")
    assert parsed == datetime(2024, 1, 3, 4, 30, tzinfo=timezone.utc)
    assert parsed.tzinfo == timezone.utc
    assert parsed.date().isoformat() == "2024-01-03"
