"""Initial schema: events, applications, team members, performances.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Events table
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("start_date", sa.String(10), nullable=False),
        sa.Column("end_date", sa.String(10), nullable=False),
        sa.Column("date", sa.String(50), nullable=True),
        sa.Column("time", sa.String(50), nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("sub_activities", sa.JSON(), nullable=False),
        sa.Column("icon", sa.String(50), nullable=False, server_default="cal"),
        sa.Column("image", sa.String(500), nullable=False, server_default=""),
        sa.Column("event_type", sa.String(20), nullable=False, server_default="individual"),
        sa.Column("participation_config", sa.JSON(), nullable=False),
        sa.Column("metric_config", sa.JSON(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("application_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint("capacity IS NULL OR capacity >= 0", name="check_event_capacity_non_negative"),
        sa.CheckConstraint("application_count >= 0", name="check_event_application_count_non_negative"),
        sa.CheckConstraint("event_type IN ('individual', 'team')", name="check_event_type"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    # ISO dates compare lexicographically, so present/upcoming filters are index range scans
    op.create_index("ix_events_start_date", "events", ["start_date"])
    op.create_index("ix_events_category", "events", ["category"])
    op.create_index("ix_events_category_start_date", "events", ["category", "start_date"])

    # Applications table
    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=True),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("class_name", sa.String(50), nullable=False),
        sa.Column("section", sa.String(20), nullable=False),
        sa.Column("roll_number", sa.String(50), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("activity", sa.String(255), nullable=False),
        sa.Column("team_name", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pending"),
        *_timestamps(),
        # One application per student per event; backs the duplicate pre-check
        sa.UniqueConstraint("event_id", "roll_number", name="uq_application_event_roll"),
        sa.CheckConstraint("status IN ('Pending', 'Accepted', 'Rejected')", name="check_application_status"),
    )
    op.create_index("ix_applications_id", "applications", ["id"])
    op.create_index("ix_applications_event_id", "applications", ["event_id"])
    op.create_index("ix_applications_status", "applications", ["status"])

    # Team members table
    op.create_table(
        "team_members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "application_id",
            sa.Integer(),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("event_id", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("roll_number", sa.String(50), nullable=False),
        sa.Column("is_substitute", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_team_members_application_id", "team_members", ["application_id"])
    op.create_index("ix_team_members_event_id", "team_members", ["event_id"])

    # Performances table
    op.create_table(
        "performances",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("roll_number", sa.String(50), nullable=False),
        sa.Column("class_name", sa.String(50), nullable=False),
        sa.Column("level", sa.String(20), nullable=False, server_default="Class"),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("metric_type", sa.String(100), nullable=False, server_default="Score"),
        sa.Column("status", sa.String(20), nullable=False, server_default="Participated"),
        sa.Column("remarks", sa.String(1000), nullable=True),
        *_timestamps(),
        # Conflict target of the score upsert and the promotion insert
        sa.UniqueConstraint("event_id", "roll_number", "level", name="uq_performance_event_roll_level"),
        sa.CheckConstraint("level IN ('Class', 'School', 'Zonal')", name="check_performance_level"),
        sa.CheckConstraint(
            "status IN ('Participated', 'Qualified', 'Promoted', 'Disqualified')",
            name="check_performance_status",
        ),
    )
    op.create_index("ix_performances_id", "performances", ["id"])
    op.create_index("ix_performances_event_level_score", "performances", ["event_id", "level", "score"])
    op.create_index("ix_performances_event_class_level", "performances", ["event_id", "class_name", "level"])


def downgrade() -> None:
    op.drop_table("performances")
    op.drop_table("team_members")
    op.drop_table("applications")
    op.drop_table("events")
