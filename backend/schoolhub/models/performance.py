"""
Performance model: one recorded score per student, event and competition level.

Key design decisions:
- Unique constraint on (event_id, roll_number, level) backs the atomic upsert
  used when scores are recorded and the duplicate guard used by promotion
- Student identity is snapshotted so leaderboards need no join
- Composite index (event_id, level, score) serves leaderboard reads in either
  sort direction
"""

import enum

from sqlalchemy import Column, Integer, String, Float, ForeignKey, UniqueConstraint, CheckConstraint, Index

from schoolhub.db.base import Base, TimestampMixin


class Level(str, enum.Enum):
    CLASS = "Class"
    SCHOOL = "School"
    ZONAL = "Zonal"

    @property
    def rank(self) -> int:
        return list(Level).index(self)


class PerformanceStatus(str, enum.Enum):
    PARTICIPATED = "Participated"
    QUALIFIED = "Qualified"
    PROMOTED = "Promoted"
    DISQUALIFIED = "Disqualified"


class Performance(Base, TimestampMixin):
    __tablename__ = "performances"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    student_name = Column(String(255), nullable=False)
    roll_number = Column(String(50), nullable=False)
    class_name = Column(String(50), nullable=False)
    level = Column(String(20), nullable=False, default=Level.CLASS.value)
    score = Column(Float, nullable=False)
    metric_type = Column(String(100), nullable=False, default="Score")
    status = Column(String(20), nullable=False, default=PerformanceStatus.PARTICIPATED.value)
    remarks = Column(String(1000), nullable=True)

    __table_args__ = (
        UniqueConstraint("event_id", "roll_number", "level", name="uq_performance_event_roll_level"),
        CheckConstraint("level IN ('Class', 'School', 'Zonal')", name="check_performance_level"),
        CheckConstraint(
            "status IN ('Participated', 'Qualified', 'Promoted', 'Disqualified')",
            name="check_performance_status",
        ),
        Index("ix_performances_event_level_score", "event_id", "level", "score"),
        Index("ix_performances_event_class_level", "event_id", "class_name", "level"),
    )

    def __repr__(self) -> str:
        return f"<Performance(id={self.id}, event={self.event_id}, roll={self.roll_number}, level={self.level})>"
