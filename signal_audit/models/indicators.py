from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from signal_audit.utils.numeric import to_float


class _Values(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("*", mode="before")
    @classmethod
    def drop_non_finite(cls, v: Any) -> Any:
        # NaN, infinities and unparseable values mean "not computable"
        if isinstance(v, (BaseModel, dict)):
            return v
        return to_float(v)


class MovingAverages(_Values):
    ma50: Optional[float] = None
    ma200: Optional[float] = None


class MacdValues(_Values):
    hist: Optional[float] = None


class VolumeValues(_Values):
    ratio: Optional[float] = None


class TrendFeatures(_Values):
    ret5: Optional[float] = None
    ret20: Optional[float] = None
    ret60: Optional[float] = None
    range_pos20: Optional[float] = None
    range_pos55: Optional[float] = None
    efficiency14: Optional[float] = None
    breakout20: Optional[float] = None
    breakout55: Optional[float] = None
    stretch20: Optional[float] = None


class VolatilityFeatures(_Values):
    stdev20: Optional[float] = None


class IndicatorSnapshot(_Values):
    """Indicator values for one asset at one point in time.

    Returns (``ret*``) and ``stretch20`` are percentages, range positions and
    efficiency are in [0, 1], breakouts are -1/0/+1 and ``stdev20`` is the
    standard deviation of daily simple returns.
    """

    ma: MovingAverages = Field(default_factory=MovingAverages)
    rsi: Optional[float] = None
    macd: MacdValues = Field(default_factory=MacdValues)
    volume: VolumeValues = Field(default_factory=VolumeValues)
    trend: TrendFeatures = Field(default_factory=TrendFeatures)
    volatility: VolatilityFeatures = Field(default_factory=VolatilityFeatures)
