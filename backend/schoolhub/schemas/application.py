"""
Pydantic schemas for application-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from schoolhub.models.application import ApplicationStatus


class TeamMemberIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    roll_number: str = Field(..., min_length=1, max_length=50)
    is_substitute: bool = False


class TeamMemberOut(BaseModel):
    name: str
    roll_number: str
    is_substitute: bool

    model_config = {"from_attributes": True}


class ApplicationCreate(BaseModel):
    student_name: str = Field(..., min_length=1, max_length=255)
    class_name: str = Field(..., min_length=1, max_length=50)
    section: str = Field(..., min_length=1, max_length=20)
    roll_number: str = Field(..., min_length=1, max_length=50)
    phone: str = Field(..., pattern=r"^\d{10}$")
    event_id: Optional[int] = None
    activity: str = Field(..., min_length=1, max_length=255)
    team_name: Optional[str] = Field(None, max_length=255)
    team_members: list[TeamMemberIn] = Field(default_factory=list)


class ApplicationUpdate(BaseModel):
    """Every field is optional; empty values leave the stored value untouched."""

    status: Optional[ApplicationStatus] = None
    student_name: Optional[str] = Field(None, max_length=255)
    class_name: Optional[str] = Field(None, max_length=50)
    section: Optional[str] = Field(None, max_length=20)
    roll_number: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    activity: Optional[str] = Field(None, max_length=255)

    @field_validator("status", mode="before")
    @classmethod
    def blank_status_is_unset(cls, value):
        return value or None


class EventSummary(BaseModel):
    id: int
    category: str
    sub_activities: list[str]

    model_config = {"from_attributes": True}


class ApplicationResponse(BaseModel):
    id: int
    event_id: Optional[int]
    student_name: str
    class_name: str
    section: str
    roll_number: str
    phone: str
    activity: str
    team_name: Optional[str]
    team_members: list[TeamMemberOut]
    status: ApplicationStatus
    event: Optional[EventSummary] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
