from schoolhub.schemas.event import (
    EventCreate, EventUpdate, EventResponse, EventListResponse,
    EventCounts, EventAvailability, MessageResponse,
)
from schoolhub.schemas.application import (
    ApplicationCreate, ApplicationUpdate, ApplicationResponse, TeamMemberIn,
)
from schoolhub.schemas.performance import (
    ScoreCreate, PerformanceResponse, PromotionRequest, PromotionResult,
)
from schoolhub.schemas.analytics import (
    ClassParticipation, ActivityParticipation, StudentParticipation,
)

__all__ = [
    "EventCreate", "EventUpdate", "EventResponse", "EventListResponse",
    "EventCounts", "EventAvailability", "MessageResponse",
    "ApplicationCreate", "ApplicationUpdate", "ApplicationResponse", "TeamMemberIn",
    "ScoreCreate", "PerformanceResponse", "PromotionRequest", "PromotionResult",
    "ClassParticipation", "ActivityParticipation", "StudentParticipation",
]
