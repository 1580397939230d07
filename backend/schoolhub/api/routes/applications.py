"""
Application endpoints: public submission, admin review.
"""

from fastapi import APIRouter, Depends, status

from schoolhub.api.deps import get_application_service
from schoolhub.schemas.application import ApplicationCreate, ApplicationUpdate, ApplicationResponse
from schoolhub.schemas.event import MessageResponse
from schoolhub.services.application_service import ApplicationService
from schoolhub.core.security import require_admin

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("/", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    application_data: ApplicationCreate,
    service: ApplicationService = Depends(get_application_service),
):
    """
    Apply for an event as an individual or as a team captain.

    Rejected with 400 when the event is full, the team size is outside the
    event's limits, the student already applied, or a team member is
    already registered for the event.
    """
    return await service.submit(application_data)


@router.get("/", response_model=list[ApplicationResponse], dependencies=[Depends(require_admin)])
async def list_applications(service: ApplicationService = Depends(get_application_service)):
    """All applications, newest first, with event category and sub-activities."""
    return await service.list_all()


@router.put("/{application_id}", response_model=ApplicationResponse, dependencies=[Depends(require_admin)])
async def update_application(
    application_id: int,
    application_data: ApplicationUpdate,
    service: ApplicationService = Depends(get_application_service),
):
    return await service.update(application_id, application_data)


@router.delete("/{application_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_application(
    application_id: int,
    service: ApplicationService = Depends(get_application_service),
):
    await service.delete(application_id)
    return MessageResponse(message="Application removed")
