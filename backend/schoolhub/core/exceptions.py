"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; a single exception handler in
``schoolhub.main`` renders them as ``{"detail": message}``.
"""

from fastapi import status


class SchoolHubError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(SchoolHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationError(SchoolHubError):
    default_message = "Invalid data"


class DuplicateApplicationError(SchoolHubError):
    default_message = "You have already applied for this event."


class CapacityExceededError(SchoolHubError):
    default_message = "Event is full. No more applications accepted."


class TeamSizeError(SchoolHubError):
    default_message = "Team size is not allowed for this event."


class TeamMemberConflictError(SchoolHubError):
    default_message = "One or more team members have already applied for this event."


class UnsupportedPromotionError(SchoolHubError):
    default_message = "Use School->Zonal promotion for this endpoint currently."
