"""
Response schemas for admin participation analytics.
"""

from pydantic import BaseModel


class ClassParticipation(BaseModel):
    class_name: str
    student_count: int
    activity_count: int
    unique_activities_count: int
    activities: list[str]


class ActivityParticipation(BaseModel):
    activity_name: str
    participant_count: int
    classes_involved: list[str]


class StudentParticipation(BaseModel):
    roll_number: str
    name: str
    class_name: str
    section: str
    activities: list[str]
    activity_count: int
