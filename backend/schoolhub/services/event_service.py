"""
Event service handling CRUD, availability and date-derived status.
"""

import math
from datetime import date

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.models.event import Event
from schoolhub.models.application import Application, TeamMember
from schoolhub.models.performance import Performance
from schoolhub.schemas.event import EventCreate, EventUpdate
from schoolhub.core.exceptions import NotFoundError, ValidationError
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)

# Replaced only by a truthy value on update, so blank form fields never erase data
_SET_IF_PROVIDED = ("event_name", "category", "start_date", "end_date", "date", "time",
                    "venue", "description", "icon", "image")


def _today() -> str:
    return date.today().isoformat()


def _status_filter(status: str, today: str):
    if status == "present":
        return [Event.start_date <= today, Event.end_date >= today]
    if status == "upcoming":
        return [Event.start_date > today]
    return []


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    event = await db.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event


async def count_applications(db: AsyncSession, event_id: int) -> int:
    return await db.scalar(
        select(func.count()).select_from(Application).where(Application.event_id == event_id)
    )


async def list_events(
    db: AsyncSession,
    page: int = 1,
    limit: int = 20,
    status: str = "all",
    today: str | None = None,
) -> tuple[list[Event], int, int]:
    """
    List events nearest first, optionally restricted to present or upcoming ones.
    Returns (events, total, pages). Uses the ix_events_start_date index.
    """
    conditions = _status_filter(status, today or _today())

    total = await db.scalar(select(func.count()).select_from(Event).where(*conditions))

    result = await db.execute(
        select(Event)
        .where(*conditions)
        .order_by(Event.start_date.asc(), Event.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    events = list(result.scalars().all())
    return events, total, math.ceil(total / limit)


async def count_events(db: AsyncSession, today: str | None = None) -> dict:
    today = today or _today()
    present = await db.scalar(select(func.count()).select_from(Event).where(*_status_filter("present", today)))
    upcoming = await db.scalar(select(func.count()).select_from(Event).where(*_status_filter("upcoming", today)))
    total = await db.scalar(select(func.count()).select_from(Event))
    return {"present_count": present, "upcoming_count": upcoming, "total_events": total}


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    """Create a new event."""
    event = Event(**event_data.model_dump(mode="json"))
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, name=event.event_name, capacity=event.capacity)
    return event


async def update_event(db: AsyncSession, event_id: int, event_data: EventUpdate) -> Event:
    """
    Partially update an event.

    Text fields change only when a non-empty value is supplied; the nested
    configs are merged key by key; capacity is replaced whenever the payload
    names it, so sending ``null`` lifts the limit.
    """
    event = await get_event(db, event_id)

    changes = {field: getattr(event_data, field) for field in _SET_IF_PROVIDED if getattr(event_data, field)}
    if event_data.sub_activities is not None:
        changes["sub_activities"] = event_data.sub_activities
    if event_data.event_type:
        changes["event_type"] = event_data.event_type.value
    if event_data.participation_config is not None:
        changes["participation_config"] = {
            **event.participation_config,
            **event_data.participation_config.model_dump(exclude_none=True),
        }
    if event_data.metric_config is not None:
        changes["metric_config"] = {
            **event.metric_config,
            **event_data.metric_config.model_dump(mode="json", exclude_none=True),
        }
    if "capacity" in event_data.model_fields_set:
        changes["capacity"] = event_data.capacity

    # Validate the merged result before touching the instance
    participation = changes.get("participation_config", event.participation_config)
    if participation.get("min_players", 1) > participation.get("max_players", 1):
        raise ValidationError("min_players cannot exceed max_players")
    if changes.get("end_date", event.end_date) < changes.get("start_date", event.start_date):
        raise ValidationError("end_date cannot be before start_date")

    for field, value in changes.items():
        setattr(event, field, value)
    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, fields=sorted(event_data.model_fields_set))
    return event


async def delete_event(db: AsyncSession, event_id: int) -> None:
    """
    Delete an event together with its applications and performance records.
    Dependents are removed in the same transaction so no record is left
    pointing at a missing event.
    """
    event = await get_event(db, event_id)

    application_ids = select(Application.id).where(Application.event_id == event_id)
    await db.execute(
        delete(TeamMember)
        .where(TeamMember.application_id.in_(application_ids))
        .execution_options(synchronize_session=False)
    )
    applications = await db.execute(
        delete(Application).where(Application.event_id == event_id).execution_options(synchronize_session=False)
    )
    performances = await db.execute(
        delete(Performance).where(Performance.event_id == event_id).execution_options(synchronize_session=False)
    )
    await db.delete(event)
    await db.flush()

    logger.info(
        "event_deleted",
        event_id=event_id,
        applications_deleted=applications.rowcount,
        performances_deleted=performances.rowcount,
    )


async def get_availability(db: AsyncSession, event_id: int) -> dict:
    """Remaining application slots for an event."""
    event = await get_event(db, event_id)

    if event.capacity is None:
        return {"available": True, "remaining": None, "total": None}

    count = await count_applications(db, event_id)
    remaining = max(0, event.capacity - count)
    return {"available": remaining > 0, "remaining": remaining, "total": event.capacity}
