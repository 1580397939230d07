"""
Application workflow: validate a student or team submission against the
event's rules, persist it and announce it.

CONSISTENCY STRATEGY: check-then-act with constraint backstops
==============================================================

Submission runs a fixed sequence of read-only checks (event exists,
capacity, team size, duplicate, team member conflict) and then writes.
The checks are not transactional, so two concurrent submissions can both
pass them. The database closes each race window:

  - Duplicate (event_id, roll_number): the unique constraint rejects the
    second INSERT; the IntegrityError is mapped to the same
    DuplicateApplicationError the pre-check raises.

  - Capacity: the event's application_count is bumped with

        UPDATE events SET application_count = application_count + 1
        WHERE id = :event_id
          AND (capacity IS NULL OR application_count < capacity)

    in the same transaction as the INSERT. The row lock taken by the UPDATE
    serializes submissions for one event, and zero rows affected means the
    last slot went to someone else.

No retries: a rejected submission is reported to the caller as-is.
"""

from typing import Any

from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolhub.models.event import Event, EventType
from schoolhub.models.application import Application, ApplicationStatus, TeamMember
from schoolhub.schemas.application import ApplicationCreate, ApplicationUpdate, ApplicationResponse
from schoolhub.services.event_service import get_event, count_applications
from schoolhub.services.interfaces.notifier import NotificationRelay, NEW_APPLICATION, APPLICATION_UPDATED
from schoolhub.services.notification_service import notify_safely
from schoolhub.core.exceptions import (
    SchoolHubError,
    NotFoundError,
    CapacityExceededError,
    TeamSizeError,
    DuplicateApplicationError,
    TeamMemberConflictError,
)
from schoolhub.core.metrics import record_submission
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("student_name", "class_name", "section", "roll_number", "phone", "activity")


def serialize_application(application: Application) -> dict[str, Any]:
    return ApplicationResponse.model_validate(application).model_dump(mode="json")


class ApplicationService:
    def __init__(self, db: AsyncSession, notifier: NotificationRelay):
        self.db = db
        self.notifier = notifier

    async def submit(self, data: ApplicationCreate) -> Application:
        """
        Validate and store a new application. Checks run in order and the
        first failing one is raised:

        1. referenced event exists
        2. event capacity not reached
        3. team size within [min_players, max_players + max_substitutes]
        4. student has not applied to this event already
        5. no team member is already a captain or member for this event
        """
        event = None
        if data.event_id is not None:
            try:
                event = await get_event(self.db, data.event_id)
            except NotFoundError as e:
                raise self._reject("not_found", e, data)

            if event.capacity is not None:
                current = await count_applications(self.db, event.id)
                if current >= event.capacity:
                    raise self._reject("capacity", CapacityExceededError(), data)

            if event.event_type == EventType.TEAM.value:
                self._check_team_size(event, data)

            if await self._find_duplicate(event.id, data.roll_number) is not None:
                raise self._reject("duplicate", DuplicateApplicationError(), data)

            if data.team_members and await self._has_member_conflict(event.id, data.team_members):
                raise self._reject("conflict", TeamMemberConflictError(), data)

            if not await self._reserve_slot(event.id):
                raise self._reject("capacity", CapacityExceededError(), data)

        application = Application(
            event_id=data.event_id,
            student_name=data.student_name,
            class_name=data.class_name,
            section=data.section,
            roll_number=data.roll_number,
            phone=data.phone,
            activity=data.activity,
            team_name=data.team_name,
            status=ApplicationStatus.PENDING.value,
            team_members=[
                TeamMember(
                    event_id=data.event_id,
                    position=position,
                    name=member.name,
                    roll_number=member.roll_number,
                    is_substitute=member.is_substitute,
                )
                for position, member in enumerate(data.team_members)
            ],
        )
        self.db.add(application)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise self._reject("duplicate", DuplicateApplicationError(), data)

        application = await self._load(application.id)
        payload = serialize_application(application)
        # Committed before announcing so clients that re-fetch see the record
        await self.db.commit()

        record_submission("accepted")
        logger.info(
            "application_submitted",
            application_id=application.id,
            event_id=application.event_id,
            roll_number=application.roll_number,
            team_size=len(application.team_members),
        )
        await notify_safely(self.notifier, NEW_APPLICATION, payload)
        return application

    async def list_all(self) -> list[Application]:
        """All applications, newest first, with the event summary loaded."""
        result = await self.db.execute(
            select(Application)
            .options(selectinload(Application.event), selectinload(Application.team_members))
            .order_by(Application.created_at.desc(), Application.id.desc())
        )
        return list(result.scalars().all())

    async def update(self, application_id: int, data: ApplicationUpdate) -> Application:
        """
        Admin edit. A field keeps its stored value unless the new value is
        truthy, so an empty string cannot blank a field.
        """
        application = await self._get(application_id)

        if data.status:
            application.status = data.status.value
        for field in UPDATABLE_FIELDS:
            setattr(application, field, getattr(data, field) or getattr(application, field))

        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateApplicationError()

        application = await self._load(application_id)
        payload = serialize_application(application)
        await self.db.commit()

        logger.info("application_updated", application_id=application_id, status=application.status)
        await notify_safely(self.notifier, APPLICATION_UPDATED, payload)
        return application

    async def delete(self, application_id: int) -> None:
        application = await self._get(application_id)

        if application.event_id is not None:
            await self.db.execute(
                update(Event)
                .where(Event.id == application.event_id, Event.application_count > 0)
                .values(application_count=Event.application_count - 1)
                .execution_options(synchronize_session=False)
            )
        await self.db.delete(application)
        await self.db.flush()

        logger.info("application_deleted", application_id=application_id, event_id=application.event_id)

    # -- helpers -----------------------------------------------------------

    def _check_team_size(self, event: Event, data: ApplicationCreate) -> None:
        config = event.participation_config or {}
        min_players = config.get("min_players", 1)
        max_total = config.get("max_players", 1) + config.get("max_substitutes", 0)
        # Captain plus every listed member; substitutes count toward the total
        total_players = 1 + len(data.team_members)

        if total_players < min_players:
            raise self._reject(
                "team_size", TeamSizeError(f"Minimum {min_players} players required for this event."), data
            )
        if total_players > max_total:
            raise self._reject(
                "team_size", TeamSizeError(f"Maximum {max_total} players allowed (including substitutes)."), data
            )

    async def _find_duplicate(self, event_id: int, roll_number: str) -> int | None:
        return await self.db.scalar(
            select(Application.id).where(
                Application.event_id == event_id,
                Application.roll_number == roll_number,
            )
        )

    async def _has_member_conflict(self, event_id: int, members) -> bool:
        rolls = [member.roll_number for member in members]
        as_captain = select(Application.id).where(
            Application.event_id == event_id,
            Application.roll_number.in_(rolls),
        )
        as_member = select(TeamMember.id).where(
            TeamMember.event_id == event_id,
            TeamMember.roll_number.in_(rolls),
        )
        return bool(await self.db.scalar(select(or_(as_captain.exists(), as_member.exists()))))

    async def _reserve_slot(self, event_id: int) -> bool:
        result = await self.db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                or_(Event.capacity.is_(None), Event.application_count < Event.capacity),
            )
            .values(application_count=Event.application_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def _get(self, application_id: int) -> Application:
        application = await self.db.get(Application, application_id)
        if not application:
            raise NotFoundError("Application not found")
        return application

    async def _load(self, application_id: int) -> Application:
        result = await self.db.execute(
            select(Application)
            .where(Application.id == application_id)
            .options(selectinload(Application.event), selectinload(Application.team_members))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    def _reject(self, reason: str, error: SchoolHubError, data: ApplicationCreate) -> SchoolHubError:
        record_submission(reason)
        logger.warning(
            "application_rejected",
            reason=reason,
            event_id=data.event_id,
            roll_number=data.roll_number,
            detail=error.message,
        )
        return error
