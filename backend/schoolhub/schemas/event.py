"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from schoolhub.models.event import EventType, SortDirection

ISO_DATE = r"^\d{4}-\d{2}-\d{2}$"


class ParticipationConfig(BaseModel):
    min_players: int = Field(default=1, ge=0)
    max_players: int = Field(default=1, ge=0)
    max_substitutes: int = Field(default=0, ge=0)
    team_size: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def check_player_range(self):
        if self.min_players > self.max_players:
            raise ValueError("min_players cannot exceed max_players")
        return self


class ParticipationConfigUpdate(BaseModel):
    min_players: Optional[int] = Field(None, ge=0)
    max_players: Optional[int] = Field(None, ge=0)
    max_substitutes: Optional[int] = Field(None, ge=0)
    team_size: Optional[int] = Field(None, ge=0)


class MetricConfig(BaseModel):
    metric_label: str = "Score"
    sort_by: SortDirection = SortDirection.DESC
    unit: str = "pts"


class MetricConfigUpdate(BaseModel):
    metric_label: Optional[str] = None
    sort_by: Optional[SortDirection] = None
    unit: Optional[str] = None


class EventCreate(BaseModel):
    event_name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    start_date: str = Field(..., pattern=ISO_DATE)
    end_date: str = Field(..., pattern=ISO_DATE)
    date: Optional[str] = Field(None, max_length=50)
    time: str = Field(..., min_length=1, max_length=50)
    venue: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    sub_activities: list[str] = Field(default_factory=list)
    icon: str = "cal"
    image: str = ""
    event_type: EventType = EventType.INDIVIDUAL
    participation_config: ParticipationConfig = Field(default_factory=ParticipationConfig)
    metric_config: MetricConfig = Field(default_factory=MetricConfig)
    capacity: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class EventUpdate(BaseModel):
    event_name: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    start_date: Optional[str] = Field(None, pattern=ISO_DATE)
    end_date: Optional[str] = Field(None, pattern=ISO_DATE)
    date: Optional[str] = Field(None, max_length=50)
    time: Optional[str] = Field(None, max_length=50)
    venue: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    sub_activities: Optional[list[str]] = None
    icon: Optional[str] = None
    image: Optional[str] = None
    event_type: Optional[EventType] = None
    participation_config: Optional[ParticipationConfigUpdate] = None
    metric_config: Optional[MetricConfigUpdate] = None
    capacity: Optional[int] = Field(None, ge=0)


class EventResponse(BaseModel):
    id: int
    event_name: str
    category: str
    start_date: str
    end_date: str
    date: Optional[str]
    time: str
    venue: str
    description: Optional[str]
    sub_activities: list[str]
    icon: str
    image: str
    event_type: EventType
    participation_config: ParticipationConfig
    metric_config: MetricConfig
    capacity: Optional[int]
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def default_display_date(self):
        if not self.date:
            self.date = self.start_date
        return self


class EventListResponse(BaseModel):
    data: list[EventResponse]
    page: int
    pages: int
    total: int
    cached: bool = False


class EventCounts(BaseModel):
    present_count: int
    upcoming_count: int
    total_events: int


class EventAvailability(BaseModel):
    available: bool
    remaining: Optional[int]
    total: Optional[int]


class MessageResponse(BaseModel):
    message: str
