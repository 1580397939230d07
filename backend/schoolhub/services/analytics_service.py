"""
Participation analytics over accepted applications.

Counts are grouped in SQL; the name lists (activities per class, classes per
activity, activities per student) come from a second DISTINCT query and are
folded in here, which keeps the SQL portable between PostgreSQL and SQLite.
"""

from collections import defaultdict

from sqlalchemy import select, func, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.models.application import Application, ApplicationStatus

_accepted = Application.status == ApplicationStatus.ACCEPTED.value


async def _distinct_pairs(db: AsyncSession, key, value) -> dict[str, list[str]]:
    result = await db.execute(select(key, value).where(_accepted).distinct())
    grouped: dict[str, list[str]] = defaultdict(list)
    for group, item in result.all():
        grouped[group].append(item)
    return {group: sorted(items) for group, items in grouped.items()}


async def class_participation(db: AsyncSession) -> list[dict]:
    activities = await _distinct_pairs(db, Application.class_name, Application.activity)
    result = await db.execute(
        select(
            Application.class_name,
            func.count(distinct(Application.roll_number)),
            func.count(Application.id),
            func.count(distinct(Application.activity)),
        )
        .where(_accepted)
        .group_by(Application.class_name)
        .order_by(Application.class_name)
    )
    return [
        {
            "class_name": class_name,
            "student_count": students,
            "activity_count": total,
            "unique_activities_count": unique,
            "activities": activities.get(class_name, []),
        }
        for class_name, students, total, unique in result.all()
    ]


async def activity_participation(db: AsyncSession) -> list[dict]:
    classes = await _distinct_pairs(db, Application.activity, Application.class_name)
    participants = func.count(Application.id)
    result = await db.execute(
        select(Application.activity, participants)
        .where(_accepted)
        .group_by(Application.activity)
        .order_by(participants.desc(), Application.activity)
    )
    return [
        {
            "activity_name": activity,
            "participant_count": count,
            "classes_involved": classes.get(activity, []),
        }
        for activity, count in result.all()
    ]


async def student_participation(db: AsyncSession) -> list[dict]:
    """One row per roll number, ordered by class then roll number."""
    activity_rows = await db.execute(
        select(Application.roll_number, Application.activity)
        .where(_accepted)
        .order_by(Application.created_at, Application.id)
    )
    activities: dict[str, list[str]] = defaultdict(list)
    for roll_number, activity in activity_rows.all():
        activities[roll_number].append(activity)

    class_name = func.min(Application.class_name)
    result = await db.execute(
        select(
            Application.roll_number,
            func.min(Application.student_name),
            class_name,
            func.min(Application.section),
            func.count(Application.id),
        )
        .where(_accepted)
        .group_by(Application.roll_number)
        .order_by(class_name, Application.roll_number)
    )
    return [
        {
            "roll_number": roll_number,
            "name": name,
            "class_name": student_class,
            "section": section,
            "activities": activities[roll_number],
            "activity_count": count,
        }
        for roll_number, name, student_class, section, count in result.all()
    ]
