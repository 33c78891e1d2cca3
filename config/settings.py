from pathlib import Path
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from signal_audit.models import ScoreMarket, ScoreMode
from signal_audit.scoring.markets import normalize_score_market, normalize_score_mode
from signal_audit.utils.numeric import clamp


class ScoringSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SCORE_")

    default_market: ScoreMarket = Field(default=ScoreMarket.DEFAULT, alias="SCORE_MARKET")
    default_mode: ScoreMode = Field(default=ScoreMode.STANDARD, alias="SCORE_MODE")

    @field_validator("default_market", mode="before")
    @classmethod
    def resolve_market(cls, v):
        return normalize_score_market(v) or ScoreMarket.DEFAULT

    @field_validator("default_mode", mode="before")
    @classmethod
    def resolve_mode(cls, v):
        return normalize_score_mode(v)


class AuditSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AUDIT_")

    window: int = Field(default=200, ge=30)
    top_assets: int = Field(default=8, ge=1)
    recent_trades: int = Field(default=5, ge=0)


class ValidationSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="")

    target_winrate: float = Field(default=0.80, alias="TARGET_WINRATE")
    min_coverage: float = Field(default=0.12, alias="MIN_COVERAGE")
    min_trades: int = Field(default=8, alias="MIN_TRADES")
    min_validation_trades: int = Field(default=6, alias="MIN_VALIDATION_TRADES")
    max_signals_per_market: int = Field(default=40, alias="MAX_SIGNALS_PER_MARKET")

    @field_validator("target_winrate")
    @classmethod
    def clamp_target_winrate(cls, v: float) -> float:
        return clamp(v, 0.6, 0.95)

    @field_validator("min_coverage")
    @classmethod
    def clamp_min_coverage(cls, v: float) -> float:
        return clamp(v, 0.05, 0.5)

    @field_validator("min_trades", "min_validation_trades")
    @classmethod
    def floor_trade_counts(cls, v: int) -> int:
        return max(4, v)

    @field_validator("max_signals_per_market")
    @classmethod
    def clamp_max_signals(cls, v: int) -> int:
        return int(clamp(v, 4, 80))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: Path = Field(default=Path("logs"), alias="LOG_DIR")

    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()
