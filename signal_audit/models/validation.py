from typing import Literal, Optional

from pydantic import BaseModel, Field

from signal_audit.models.market import Horizon, ScoreMarket, Side, Status


class EventPoint(BaseModel):
    """One historical BUY/SELL transition with its realized forward returns."""

    model_config = {"from_attributes": True, "frozen": True}

    symbol: str
    name: str
    date: str
    side: Side
    score: int
    strength: int
    returns: dict[Horizon, Optional[float]] = Field(default_factory=dict)

    def return_for(self, horizon: Horizon) -> Optional[float]:
        return self.returns.get(horizon)


class CurrentSignal(BaseModel):
    """Latest scored state of one asset, as fed to live-signal selection."""

    model_config = {"from_attributes": True, "frozen": True}

    symbol: str
    name: str
    status: Status
    score: int


class Candidate(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    cutoff: int
    trades: int
    coverage: float = Field(ge=0.0, le=1.0)
    winrate: float = Field(ge=0.0, le=1.0)
    avg_return_pct: float
    median_return_pct: float
    profit_factor: Optional[float] = None
    meets_target: bool


class Recommendation(Candidate):
    horizon: Horizon


class ValidationSummary(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    trades: int = 0
    winrate: float = 0.0
    avg_return_pct: float = 0.0
    median_return_pct: float = 0.0
    profit_factor: Optional[float] = None
    buy_count: int = 0
    sell_count: int = 0
    meets_target: bool = False


class LiveSignal(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    market: ScoreMarket
    symbol: str
    name: str
    status: Side
    score: int
    strength: int
    cutoff: int
    horizon: Horizon
    action: Literal["BUY NOW", "SELL / EXIT"]
    expected_coverage: float
    validation_winrate: float
    validation_return_pct: float
    validation_trades: int


class ValidatorReport(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    market: ScoreMarket
    events: int
    recommendation: Optional[Recommendation] = None
    validation: ValidationSummary = Field(default_factory=ValidationSummary)
    passed: bool = False
    current_signals: int = 0
    signals: list[LiveSignal] = Field(default_factory=list)
