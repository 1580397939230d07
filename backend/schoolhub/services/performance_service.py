"""
Performance / leaderboard engine.

Scores are recorded per (event, student, level) with a single
INSERT ... ON CONFLICT DO UPDATE, so repeated or concurrent writes for the
same key converge on one row (last write wins) without a read-then-write.

Promotion moves the top N of one level into the next:
  1. read the top N at the current level in the event's metric order
  2. drop candidates that already hold a record at the next level
  3. one bulk INSERT of fresh next-level rows (score 0, Qualified)
  4. one bulk UPDATE marking the source rows Promoted
Two statements per batch regardless of batch size. The bulk INSERT also
carries ON CONFLICT DO NOTHING, so a concurrent promotion of the same
student cannot produce a second next-level row.
"""

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.db.upsert import upsert_insert
from schoolhub.models.event import Event, SortDirection
from schoolhub.models.performance import Performance, PerformanceStatus, Level
from schoolhub.schemas.performance import ScoreCreate, PromotionRequest
from schoolhub.services.event_service import get_event
from schoolhub.services.interfaces.notifier import NotificationRelay, LEADERBOARD_UPDATE
from schoolhub.services.notification_service import notify_safely
from schoolhub.core.config import get_settings
from schoolhub.core.exceptions import UnsupportedPromotionError
from schoolhub.core.metrics import scores_recorded, students_promoted
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)

PERFORMANCE_KEY = ["event_id", "roll_number", "level"]


def _score_order(direction: SortDirection):
    if direction == SortDirection.ASC:
        return Performance.score.asc()
    return Performance.score.desc()


class PerformanceService:
    def __init__(self, db: AsyncSession, notifier: NotificationRelay):
        self.db = db
        self.notifier = notifier

    async def record_score(self, data: ScoreCreate) -> Performance:
        """Create or overwrite the score for (event, student, level); status resets to Participated."""
        event = await get_event(self.db, data.event_id)

        stmt = upsert_insert(self.db, Performance).values(
            event_id=data.event_id,
            roll_number=data.roll_number,
            level=data.level.value,
            student_name=data.student_name,
            class_name=data.class_name,
            score=data.score,
            metric_type=event.metric_label,
            status=PerformanceStatus.PARTICIPATED.value,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=PERFORMANCE_KEY,
            set_={
                "student_name": stmt.excluded.student_name,
                "class_name": stmt.excluded.class_name,
                "score": stmt.excluded.score,
                "metric_type": stmt.excluded.metric_type,
                "status": stmt.excluded.status,
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)

        result = await self.db.execute(
            select(Performance)
            .where(
                Performance.event_id == data.event_id,
                Performance.roll_number == data.roll_number,
                Performance.level == data.level.value,
            )
            .execution_options(populate_existing=True)
        )
        performance = result.scalar_one()
        await self.db.commit()

        scores_recorded.labels(level=data.level.value).inc()
        logger.info(
            "score_recorded",
            event_id=data.event_id,
            roll_number=data.roll_number,
            level=data.level.value,
            score=data.score,
        )
        await notify_safely(self.notifier, LEADERBOARD_UPDATE, {"event_id": data.event_id, "level": data.level.value})
        return performance

    async def leaderboard(
        self,
        event_id: int,
        level: Level = Level.CLASS,
        class_name: str | None = None,
    ) -> list[Performance]:
        """
        Ranked records for one event and level, best first per the event's
        metric direction. The class filter only narrows Class-level boards.
        """
        event = await self.db.get(Event, event_id)
        direction = event.sort_direction if event else SortDirection.DESC

        query = select(Performance).where(
            Performance.event_id == event_id,
            Performance.level == level.value,
        )
        if class_name and level == Level.CLASS:
            query = query.where(Performance.class_name == class_name)

        result = await self.db.execute(
            query.order_by(_score_order(direction), Performance.id.asc()).limit(get_settings().LEADERBOARD_LIMIT)
        )
        return list(result.scalars().all())

    async def promote(self, request: PromotionRequest) -> int:
        """Promote the top ``request.limit`` students; returns how many were promoted."""
        event = await get_event(self.db, request.event_id)

        # Class -> School needs a per-class top N, which this endpoint does not do
        if request.current_level == Level.CLASS:
            raise UnsupportedPromotionError()
        if request.next_level.rank <= request.current_level.rank:
            raise UnsupportedPromotionError(
                f"Cannot promote from {request.current_level.value} to {request.next_level.value}."
            )

        result = await self.db.execute(
            select(Performance)
            .where(
                Performance.event_id == event.id,
                Performance.level == request.current_level.value,
            )
            .order_by(_score_order(event.sort_direction), Performance.id.asc())
            .limit(request.limit)
        )
        candidates = list(result.scalars().all())
        if not candidates:
            logger.info("promotion_skipped", event_id=event.id, reason="no_candidates")
            return 0

        already_promoted = set(
            (
                await self.db.execute(
                    select(Performance.roll_number).where(
                        Performance.event_id == event.id,
                        Performance.roll_number.in_([c.roll_number for c in candidates]),
                        Performance.level == request.next_level.value,
                    )
                )
            ).scalars()
        )
        promoting = [c for c in candidates if c.roll_number not in already_promoted]
        if not promoting:
            return 0

        insert_stmt = upsert_insert(self.db, Performance).values([
            {
                "event_id": event.id,
                "student_name": candidate.student_name,
                "roll_number": candidate.roll_number,
                "class_name": candidate.class_name,
                "level": request.next_level.value,
                "score": 0,
                "metric_type": event.metric_label,
                "status": PerformanceStatus.QUALIFIED.value,
            }
            for candidate in promoting
        ])
        await self.db.execute(insert_stmt.on_conflict_do_nothing(index_elements=PERFORMANCE_KEY))
        await self.db.execute(
            update(Performance)
            .where(Performance.id.in_([c.id for c in promoting]))
            .values(status=PerformanceStatus.PROMOTED.value, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        promoted = len(promoting)
        students_promoted.labels(level=request.next_level.value).inc(promoted)
        logger.info(
            "students_promoted",
            event_id=event.id,
            from_level=request.current_level.value,
            to_level=request.next_level.value,
            promoted=promoted,
            skipped=len(candidates) - promoted,
        )
        await notify_safely(
            self.notifier, LEADERBOARD_UPDATE, {"event_id": event.id, "level": request.next_level.value}
        )
        return promoted
