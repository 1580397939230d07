"""
Event endpoints with Redis caching on list operations.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.db.session import get_db
from schoolhub.schemas.event import (
    EventCreate, EventUpdate, EventResponse, EventListResponse,
    EventCounts, EventAvailability, MessageResponse,
)
from schoolhub.services.event_service import (
    create_event, get_event, list_events, count_events,
    update_event, delete_event, get_availability,
)
from schoolhub.services.cache_service import (
    get_cached, set_cached, invalidate_event_cache, make_event_list_key, EVENT_COUNTS_KEY,
)
from schoolhub.core.security import require_admin
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Literal["all", "present", "upcoming"] = Query("all"),
    db: AsyncSession = Depends(get_db),
):
    """
    List events nearest first with pagination.
    Results are cached in Redis for 5 minutes and invalidated on any event change.
    """
    key = make_event_list_key(page, limit, status)
    cached = await get_cached(key)
    if cached:
        logger.info("events_list_cache_hit", page=page, status=status)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total, pages = await list_events(db, page, limit, status)
    response_data = {
        "data": [EventResponse.model_validate(e).model_dump(mode="json") for e in events],
        "page": page,
        "pages": pages,
        "total": total,
        "cached": False,
    }
    await set_cached(key, response_data)
    return EventListResponse(**response_data)


@router.get("/counts", response_model=EventCounts)
async def event_counts_endpoint(db: AsyncSession = Depends(get_db)):
    """Number of present, upcoming and all events."""
    cached = await get_cached(EVENT_COUNTS_KEY)
    if cached:
        return EventCounts(**cached)

    counts = await count_events(db)
    await set_cached(EVENT_COUNTS_KEY, counts)
    return EventCounts(**counts)


@router.post(
    "/",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_event_endpoint(event_data: EventCreate, db: AsyncSession = Depends(get_db)):
    event = await create_event(db, event_data)
    await invalidate_event_cache()
    return event


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single event by ID. Not cached."""
    return await get_event(db, event_id)


@router.get("/{event_id}/availability", response_model=EventAvailability)
async def event_availability_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Remaining application slots, computed from the live application count."""
    return await get_availability(db, event_id)


@router.put("/{event_id}", response_model=EventResponse, dependencies=[Depends(require_admin)])
async def update_event_endpoint(event_id: int, event_data: EventUpdate, db: AsyncSession = Depends(get_db)):
    event = await update_event(db, event_id, event_data)
    await invalidate_event_cache()
    return event


@router.delete("/{event_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Delete an event and every application and score recorded for it."""
    await delete_event(db, event_id)
    await invalidate_event_cache()
    return MessageResponse(message="Event removed")
