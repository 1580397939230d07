from schoolhub.models.event import Event, EventType, SortDirection
from schoolhub.models.application import Application, ApplicationStatus, TeamMember
from schoolhub.models.performance import Performance, PerformanceStatus, Level

__all__ = [
    "Event", "EventType", "SortDirection",
    "Application", "ApplicationStatus", "TeamMember",
    "Performance", "PerformanceStatus", "Level",
]
