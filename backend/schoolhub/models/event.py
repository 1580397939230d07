"""
Event model: an administrator-defined activity or competition.

Key design decisions:
- start_date / end_date are ISO ``YYYY-MM-DD`` strings; fixed width means
  lexicographic comparison is calendar comparison, so range filters run in SQL
- status (past / present / upcoming) is derived at read time, never stored
- participation_config / metric_config are small JSON documents merged on update
- application_count is denormalized and only ever moved by a conditional UPDATE,
  which is what holds the capacity ceiling under concurrent submissions
"""

import enum
from datetime import date

from sqlalchemy import Column, Integer, String, JSON, Index, CheckConstraint

from schoolhub.db.base import Base, TimestampMixin


class EventType(str, enum.Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"


class SortDirection(str, enum.Enum):
    ASC = "asc"    # lower is better, e.g. elapsed time
    DESC = "desc"  # higher is better, e.g. points


DEFAULT_PARTICIPATION_CONFIG = {
    "min_players": 1,
    "max_players": 1,
    "max_substitutes": 0,
    "team_size": 1,
}

DEFAULT_METRIC_CONFIG = {
    "metric_label": "Score",
    "sort_by": SortDirection.DESC.value,
    "unit": "pts",
}


def derive_status(start_date: str, end_date: str, today: str | None = None) -> str:
    today = today or date.today().isoformat()
    if start_date <= today <= end_date:
        return "present"
    if end_date < today:
        return "past"
    return "upcoming"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    event_name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    start_date = Column(String(10), nullable=False, index=True)
    end_date = Column(String(10), nullable=False)
    date = Column(String(50), nullable=True)  # free-form display date
    time = Column(String(50), nullable=False)
    venue = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    sub_activities = Column(JSON, nullable=False, default=list)
    icon = Column(String(50), nullable=False, default="cal")
    image = Column(String(500), nullable=False, default="")
    event_type = Column(String(20), nullable=False, default=EventType.INDIVIDUAL.value)
    participation_config = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_PARTICIPATION_CONFIG))
    metric_config = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_METRIC_CONFIG))
    capacity = Column(Integer, nullable=True)  # NULL = unlimited
    application_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="check_event_capacity_non_negative"),
        CheckConstraint("application_count >= 0", name="check_event_application_count_non_negative"),
        CheckConstraint("event_type IN ('individual', 'team')", name="check_event_type"),
        # Events listed by category, nearest first
        Index("ix_events_category_start_date", "category", "start_date"),
    )

    @property
    def status(self) -> str:
        return derive_status(self.start_date, self.end_date)

    @property
    def sort_direction(self) -> SortDirection:
        sort_by = (self.metric_config or {}).get("sort_by")
        return SortDirection.ASC if sort_by == SortDirection.ASC.value else SortDirection.DESC

    @property
    def metric_label(self) -> str:
        return (self.metric_config or {}).get("metric_label") or DEFAULT_METRIC_CONFIG["metric_label"]

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.event_name}, type={self.event_type})>"
