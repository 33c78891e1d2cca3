import pytest

from signal_audit.models import ScoreMarket, ScoreMode
from signal_audit.scoring.markets import (
    MARKET_PROFILES,
    detect_market_for_symbol,
    effective_thresholds,
    get_profile,
    normalize_score_market,
    normalize_score_mode,
    resolve_score_market,
)


@pytest.mark.parametrize("raw", ["S&P 500", "SP500", "S_P_500", "sp-500", " spx "])
def test_sp500_aliases(raw) -> None:
    assert normalize_score_market(raw) == ScoreMarket.SP500


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("crypto", ScoreMarket.CRYPTO),
        ("Dow Jones", ScoreMarket.DOWJONES),
        ("FTSE 100", ScoreMarket.FTSE100),
        ("Hang Seng", ScoreMarket.HANGSENG),
        ("nikkei-225", ScoreMarket.NIKKEI225),
        (ScoreMarket.DAX, ScoreMarket.DAX),
    ],
)
def test_market_aliases(raw, expected) -> None:
    assert normalize_score_market(raw) == expected


def test_unknown_market_is_none() -> None:
    assert normalize_score_market("moon") is None
    assert normalize_score_market(None) is None


def test_normalize_score_mode() -> None:
    assert normalize_score_mode("high-conf") == ScoreMode.HIGH_CONF
    assert normalize_score_mode("HIGH_CONFIDENCE") == ScoreMode.HIGH_CONF
    assert normalize_score_mode("standard") == ScoreMode.STANDARD
    assert normalize_score_mode("bogus") == ScoreMode.STANDARD
    assert normalize_score_mode(None) == ScoreMode.STANDARD


@pytest.mark.parametrize(
    "symbol,expected",
    [
        ("BTC-USD", ScoreMarket.CRYPTO),
        ("ETHUSDT", ScoreMarket.CRYPTO),
        ("ASML.AS", ScoreMarket.AEX),
        ("SAP.DE", ScoreMarket.DAX),
        ("0700.HK", ScoreMarket.HANGSENG),
        ("VOD.L", ScoreMarket.FTSE100),
        ("RELIANCE.NS", ScoreMarket.SENSEX),
        ("7203.T", ScoreMarket.NIKKEI225),
        ("AAPL", None),
        ("", None),
    ],
)
def test_detect_market_for_symbol(symbol, expected) -> None:
    assert detect_market_for_symbol(symbol) == expected


def test_resolve_score_market_precedence() -> None:
    assert resolve_score_market("nasdaq", "SAP.DE") == ScoreMarket.NASDAQ
    assert resolve_score_market(None, "SAP.DE") == ScoreMarket.DAX
    assert resolve_score_market("junk", "AAPL") == ScoreMarket.DEFAULT
    assert resolve_score_market(None, "AAPL", fallback=ScoreMarket.SP500) == ScoreMarket.SP500


def test_every_market_has_a_profile() -> None:
    assert set(MARKET_PROFILES) == set(ScoreMarket)
    for profile in MARKET_PROFILES.values():
        assert profile.sell_threshold < 50 < profile.buy_threshold
        assert 0 < profile.min_confidence < 1
        assert profile.vol_low < profile.vol_high


def test_index_markets_lean_on_trend_over_volume() -> None:
    crypto = get_profile("crypto")
    index = get_profile("AEX")
    assert index.multiplier("trend") > crypto.multiplier("trend")
    assert index.multiplier("volume") < crypto.multiplier("volume")
    assert get_profile("DEFAULT").multiplier("trend") == 1.0


def test_get_profile_falls_back_to_default() -> None:
    assert get_profile("unknown") is MARKET_PROFILES[ScoreMarket.DEFAULT]


def test_effective_thresholds_standard() -> None:
    t = effective_thresholds(MARKET_PROFILES[ScoreMarket.DEFAULT], ScoreMode.STANDARD)
    assert t.buy_threshold == 62
    assert t.sell_threshold == 38
    assert t.min_confidence == pytest.approx(0.55)
    assert t.soft_floor == pytest.approx(0.47)
    assert t.soft_margin == 12


def test_effective_thresholds_high_conf_tightens() -> None:
    t = effective_thresholds(MARKET_PROFILES[ScoreMarket.DEFAULT], ScoreMode.HIGH_CONF)
    assert t.buy_threshold == 66
    assert t.sell_threshold == 34
    assert t.min_confidence == pytest.approx(0.63)
    assert t.soft_floor == pytest.approx(0.57)
