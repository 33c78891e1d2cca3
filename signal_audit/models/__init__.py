from signal_audit.models.market import (
    ScoreMarket,
    ScoreMode,
    Status,
    Side,
    StrategyKey,
    Horizon,
)
from signal_audit.models.indicators import (
    MovingAverages,
    MacdValues,
    VolumeValues,
    TrendFeatures,
    VolatilityFeatures,
    IndicatorSnapshot,
)
from signal_audit.models.score import ScoreResult, EntryQualification
from signal_audit.models.backtest import (
    DailySignalPoint,
    BacktestTrade,
    OpenPosition,
    StrategyResult,
    TopAsset,
    StrategyStats,
    AssetAuditInput,
    AssetAuditState,
    SkippedAsset,
    MarketAuditReport,
)
from signal_audit.models.validation import (
    EventPoint,
    CurrentSignal,
    Candidate,
    Recommendation,
    ValidationSummary,
    LiveSignal,
    ValidatorReport,
)

__all__ = [
    "ScoreMarket",
    "ScoreMode",
    "Status",
    "Side",
    "StrategyKey",
    "Horizon",
    "MovingAverages",
    "MacdValues",
    "VolumeValues",
    "TrendFeatures",
    "VolatilityFeatures",
    "IndicatorSnapshot",
    "ScoreResult",
    "EntryQualification",
    "DailySignalPoint",
    "BacktestTrade",
    "OpenPosition",
    "StrategyResult",
    "TopAsset",
    "StrategyStats",
    "AssetAuditInput",
    "AssetAuditState",
    "SkippedAsset",
    "MarketAuditReport",
    "EventPoint",
    "CurrentSignal",
    "Candidate",
    "Recommendation",
    "ValidationSummary",
    "LiveSignal",
    "ValidatorReport",
]
