from typing import Optional

from pydantic import BaseModel, Field

from signal_audit.models.market import ScoreMarket, ScoreMode, Status


class ScoreResult(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    score: int = Field(ge=0, le=100)
    status: Status
    confidence: float = Field(ge=0.0, le=1.0)
    market: ScoreMarket
    mode: ScoreMode


class EntryQualification(BaseModel):
    model_config = {"from_attributes": True, "frozen": True}

    quality_score: Optional[int] = Field(default=None, ge=0, le=100)
    qualifies: bool = False
