"""
Score components - each maps part of an indicator snapshot to a 0-100 sub-score.

50 is neutral, higher is bullish. A component whose inputs are missing returns
None and is left out of the weighted sum entirely.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from signal_audit.models import IndicatorSnapshot
from signal_audit.scoring.markets import MarketProfile
from signal_audit.utils.numeric import clamp

BASE_WEIGHTS: dict[str, float] = {
    "ma": 0.24,
    "rsi": 0.16,
    "macd": 0.16,
    "volume": 0.10,
    "trend": 0.18,
    "volatility": 0.08,
    "consensus": 0.08,
}

MA_SPREAD_CAP = 0.10
RSI_GAMMA = 1.25
MACD_NORM_FRACTION = 0.004
MACD_SIGN_SCORE = 12.0
VOLUME_SCALE = 40.0

STRETCH_SOFT_PCT = 8.0
STRETCH_SPAN_PCT = 20.0
STRETCH_MIN_DAMP = 0.4

VOL_UNRELIABLE_SCORE = 55.0
VOL_TRADEABLE_SCORE = 65.0
VOL_HIGH_SCORE = 45.0
VOL_HIGH_PENALTY = 25.0

CONSENSUS_MIN_SIGNALS = 2
RSI_BULL_BAND = 55.0
RSI_BEAR_BAND = 45.0


@dataclass
class WeightedParts:
    """Sparse weighted average: only present values count, weights renormalize."""

    parts: list[tuple[str, float, float]] = field(default_factory=list)

    def add(self, key: str, weight: float, value: Optional[float]) -> None:
        if value is None or weight <= 0:
            return
        self.parts.append((key, weight, value))

    @property
    def total_weight(self) -> float:
        return sum(weight for _, weight, _ in self.parts)

    @property
    def empty(self) -> bool:
        return not self.parts or self.total_weight <= 0

    def average(self) -> Optional[float]:
        if self.empty:
            return None
        total = self.total_weight
        return sum(weight * value for _, weight, value in self.parts) / total

    def keys(self) -> list[str]:
        return [key for key, _, _ in self.parts]


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def ma_component(snapshot: IndicatorSnapshot) -> Optional[float]:
    ma50, ma200 = snapshot.ma.ma50, snapshot.ma.ma200
    if ma50 is None or ma200 is None or ma50 <= 0 or ma200 <= 0:
        return None
    if ma50 > ma200:
        spread = clamp(ma50 / ma200 - 1.0, 0.0, MA_SPREAD_CAP)
        return 50.0 + (spread / MA_SPREAD_CAP) * 50.0
    if ma50 < ma200:
        spread = clamp(ma200 / ma50 - 1.0, 0.0, MA_SPREAD_CAP)
        return 50.0 - (spread / MA_SPREAD_CAP) * 50.0
    return 50.0


def rsi_component(snapshot: IndicatorSnapshot) -> Optional[float]:
    rsi = snapshot.rsi
    if rsi is None:
        return None
    base = clamp((rsi - 30.0) / 40.0, 0.0, 1.0) * 100.0
    return clamp(50.0 + (base - 50.0) * RSI_GAMMA, 0.0, 100.0)


def macd_component(snapshot: IndicatorSnapshot) -> Optional[float]:
    hist = snapshot.macd.hist
    if hist is None:
        return None
    reference = snapshot.ma.ma200 or snapshot.ma.ma50
    if reference is None or reference <= 0:
        return 50.0 + _sign(hist) * MACD_SIGN_SCORE
    normalized = clamp(hist / (MACD_NORM_FRACTION * reference), -1.0, 1.0)
    return 50.0 + normalized * 50.0


def volume_component(snapshot: IndicatorSnapshot) -> Optional[float]:
    ratio = snapshot.volume.ratio
    if ratio is None or ratio < 0:
        return None
    return clamp(50.0 + (ratio - 1.0) * VOLUME_SCALE, 0.0, 100.0)


def _trend_mix(snapshot: IndicatorSnapshot) -> Optional[float]:
    trend = snapshot.trend
    if trend.ret20 is None and trend.range_pos20 is None:
        return None

    mix = WeightedParts()
    if trend.ret5 is not None:
        mix.add("ret5", 0.10, clamp(trend.ret5 / 4.0, -1.0, 1.0))
    if trend.ret20 is not None:
        mix.add("ret20", 0.20, clamp(trend.ret20 / 10.0, -1.0, 1.0))
    if trend.ret60 is not None:
        mix.add("ret60", 0.14, clamp(trend.ret60 / 20.0, -1.0, 1.0))
    if trend.range_pos20 is not None:
        mix.add("range_pos20", 0.14, (clamp(trend.range_pos20, 0.0, 1.0) - 0.5) * 2.0)
    if trend.range_pos55 is not None:
        mix.add("range_pos55", 0.10, (clamp(trend.range_pos55, 0.0, 1.0) - 0.5) * 2.0)
    if trend.breakout20 is not None:
        mix.add("breakout20", 0.10, float(_sign(trend.breakout20)))
    if trend.breakout55 is not None:
        mix.add("breakout55", 0.08, float(_sign(trend.breakout55)))

    direction = trend.ret20 if trend.ret20 is not None else trend.ret5
    if trend.efficiency14 is not None and direction is not None:
        mix.add("efficiency14", 0.14, clamp(trend.efficiency14, 0.0, 1.0) * _sign(direction))

    return mix.average()


def trend_component(snapshot: IndicatorSnapshot) -> Optional[float]:
    mix = _trend_mix(snapshot)
    if mix is None:
        return None

    stretch = snapshot.trend.stretch20
    if stretch is not None and _sign(stretch) == _sign(mix) and abs(stretch) > STRETCH_SOFT_PCT:
        damp = 1.0 - (abs(stretch) - STRETCH_SOFT_PCT) / STRETCH_SPAN_PCT
        mix *= max(STRETCH_MIN_DAMP, damp)

    return clamp(50.0 + mix * 50.0, 0.0, 100.0)


def volatility_component(snapshot: IndicatorSnapshot, profile: MarketProfile) -> Optional[float]:
    stdev = snapshot.volatility.stdev20
    if stdev is None or stdev < 0:
        return None
    if stdev < profile.vol_low:
        return VOL_UNRELIABLE_SCORE
    if stdev <= profile.vol_high:
        return VOL_TRADEABLE_SCORE
    excess = clamp((stdev - profile.vol_high) / profile.vol_high, 0.0, 1.0)
    return VOL_HIGH_SCORE - excess * VOL_HIGH_PENALTY


def consensus_component(snapshot: IndicatorSnapshot) -> Optional[float]:
    signals: list[int] = []

    ma50, ma200 = snapshot.ma.ma50, snapshot.ma.ma200
    if ma50 is not None and ma200 is not None:
        signals.append(_sign(ma50 - ma200))

    if snapshot.rsi is not None:
        if snapshot.rsi > RSI_BULL_BAND:
            signals.append(1)
        elif snapshot.rsi < RSI_BEAR_BAND:
            signals.append(-1)
        else:
            signals.append(0)

    if snapshot.macd.hist is not None:
        signals.append(_sign(snapshot.macd.hist))

    breakout = snapshot.trend.breakout20
    if breakout is None:
        breakout = snapshot.trend.breakout55
    if breakout is not None:
        signals.append(_sign(breakout))

    directional = [s for s in signals if s != 0]
    if len(directional) < CONSENSUS_MIN_SIGNALS:
        return None
    return clamp(50.0 + 50.0 * sum(signals) / len(signals), 0.0, 100.0)


def evaluate_components(
    snapshot: IndicatorSnapshot,
    profile: MarketProfile,
) -> dict[str, Optional[float]]:
    return {
        "ma": ma_component(snapshot),
        "rsi": rsi_component(snapshot),
        "macd": macd_component(snapshot),
        "volume": volume_component(snapshot),
        "trend": trend_component(snapshot),
        "volatility": volatility_component(snapshot, profile),
        "consensus": consensus_component(snapshot),
    }
