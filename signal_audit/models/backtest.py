from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from signal_audit.models.market import ScoreMarket, Side, Status, StrategyKey


class DailySignalPoint(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    index: int
    date: str
    close: float
    score: int = Field(ge=0, le=100)
    status: Status
    strength: Optional[int] = None
    entry_score_70: Optional[int] = None
    entry_score_80: Optional[int] = None
    entry_qualifies_70: bool = False
    entry_qualifies_80: bool = False


class BacktestTrade(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    symbol: str
    name: str
    market: ScoreMarket
    strategy: StrategyKey
    side: Side
    entry_date: str
    exit_date: str
    entry_score: int
    exit_score: int
    days_held: int = Field(ge=0)
    return_pct: float


class OpenPosition(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    symbol: str
    name: str
    market: ScoreMarket
    strategy: StrategyKey
    side: Side
    entry_date: str
    entry_score: int
    days_open: int = Field(ge=0)
    return_pct_to_now: float


class StrategyResult(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    trades: list[BacktestTrade] = Field(default_factory=list)
    open: Optional[OpenPosition] = None


class TopAsset(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    symbol: str
    name: str
    closed_trades: int
    winrate: Optional[float] = None
    avg_return_pct: Optional[float] = None
    compounded_value_of_100: Optional[float] = None


class StrategyStats(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    key: StrategyKey
    label: str
    closed_trades: int = 0
    wins: int = 0
    losses: int = 0
    winrate: Optional[float] = None
    avg_return_pct: Optional[float] = None
    median_return_pct: Optional[float] = None
    avg_days_held: Optional[float] = None
    flat_profit_on_100_each: Optional[float] = None
    compounded_value_of_100: Optional[float] = None
    max_drawdown_pct: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    open_positions: int = 0
    recent_trades: list[BacktestTrade] = Field(default_factory=list)
    top_assets: list[TopAsset] = Field(default_factory=list)


class AssetAuditInput(BaseModel):
    """Chronologically ascending daily series for one asset; a missing volume is None."""

    model_config = {"from_attributes": True, "frozen": True}

    symbol: str
    name: str
    market: ScoreMarket = ScoreMarket.DEFAULT
    times: list[datetime]
    closes: list[float]
    volumes: list[Optional[float]]

    @property
    def length(self) -> int:
        return min(len(self.times), len(self.closes), len(self.volumes))


class AssetAuditState(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    symbol: str
    name: str
    market: ScoreMarket
    points: list[DailySignalPoint] = Field(default_factory=list, exclude=True)
    by_strategy: dict[StrategyKey, StrategyResult] = Field(default_factory=dict)


class SkippedAsset(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    symbol: str
    reason: str


class MarketAuditReport(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    market: ScoreMarket
    generated_at: datetime
    window: int
    universe_size: int
    processed_assets: int
    skipped_assets: int
    strategies: list[StrategyStats] = Field(default_factory=list)
    assets: list[AssetAuditState] = Field(default_factory=list)
    skipped: list[SkippedAsset] = Field(default_factory=list)
