"""
Pydantic schemas for scores, leaderboards and promotion.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from schoolhub.models.performance import Level, PerformanceStatus
from schoolhub.core.config import get_settings


class ScoreCreate(BaseModel):
    event_id: int
    roll_number: str = Field(..., min_length=1, max_length=50)
    student_name: str = Field(..., min_length=1, max_length=255)
    class_name: str = Field(..., min_length=1, max_length=50)
    score: float = Field(..., allow_inf_nan=False)
    level: Level = Level.CLASS


class PerformanceResponse(BaseModel):
    id: int
    event_id: int
    student_name: str
    roll_number: str
    class_name: str
    level: Level
    score: float
    metric_type: str
    status: PerformanceStatus
    remarks: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class PromotionRequest(BaseModel):
    event_id: int
    current_level: Level
    next_level: Level
    limit: int = Field(default_factory=lambda: get_settings().DEFAULT_PROMOTION_LIMIT, ge=1, le=500)


class PromotionResult(BaseModel):
    message: str
    promoted: int
