"""
Application model: a student's (or team captain's) request to take part in an event.

Key design decisions:
- Unique constraint on (event_id, roll_number) is the source of truth for
  "one application per student per event"; the service pre-check only gives a
  friendlier failure path
- event_id is nullable: an application may name a free-text activity only
- Team members live in their own table so conflict checks are plain SQL
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from schoolhub.db.base import Base, TimestampMixin


class ApplicationStatus(str, enum.Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class Application(Base, TimestampMixin):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True)
    student_name = Column(String(255), nullable=False)
    class_name = Column(String(50), nullable=False)
    section = Column(String(20), nullable=False)
    roll_number = Column(String(50), nullable=False)
    phone = Column(String(20), nullable=False)
    activity = Column(String(255), nullable=False)
    team_name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=ApplicationStatus.PENDING.value, index=True)

    event = relationship("Event", lazy="selectin")
    team_members = relationship(
        "TeamMember",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="TeamMember.position",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("event_id", "roll_number", name="uq_application_event_roll"),
        CheckConstraint("status IN ('Pending', 'Accepted', 'Rejected')", name="check_application_status"),
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, event={self.event_id}, roll={self.roll_number}, status={self.status})>"


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Denormalized so member conflict checks for an event need no join
    event_id = Column(Integer, nullable=True, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(255), nullable=False)
    roll_number = Column(String(50), nullable=False)
    is_substitute = Column(Boolean, nullable=False, default=False)

    application = relationship("Application", back_populates="team_members")
