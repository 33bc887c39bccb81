"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

from .enums import invite_dispatch_status_enum, next_action_status_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. NEXT_ACTIONS
# =====================================================
next_actions = Table(
    "next_actions",
    metadata,
    Column("action_id", Text, primary_key=True),
    Column("user_id", Text, nullable=False),  # Identity provider uid
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("notes", Text),
    Column(
        "status",
        next_action_status_enum,
        nullable=False,
        server_default="queued",
    ),
    Column("context", Text),  # @calls, @computer, @errands, ...
    Column("estimated_duration", Integer),  # minutes
    Column("scheduled_date", TIMESTAMP(timezone=True)),
    Column("completed_date", TIMESTAMP(timezone=True)),
    Column("project_id", Text),
    Column("calendar_invite_sent", Boolean, server_default="false"),
    # Comma-joined recipients of the last invite
    Column("user_email", Text),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_next_actions_user_id", "user_id"),
    Index("idx_next_actions_user_created", "user_id", "created_at"),
)


# =====================================================
# 2. CALENDAR_INVITE_DISPATCHES
# =====================================================
calendar_invite_dispatches = Table(
    "calendar_invite_dispatches",
    metadata,
    Column("dispatch_id", Integer, primary_key=True, autoincrement=True),
    Column("idempotency_key", Text, nullable=False, unique=True),
    Column(
        "action_id",
        Text,
        ForeignKey("next_actions.action_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("user_id", Text, nullable=False),
    Column("recipients", Text, nullable=False),  # Comma-joined
    Column("status", invite_dispatch_status_enum, nullable=False),
    Column("provider_message_id", Text),
    Column("error_message", Text),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("completed_at", TIMESTAMP(timezone=True)),
    Index("idx_calendar_invite_dispatches_action_id", "action_id"),
    Index("idx_calendar_invite_dispatches_status", "status", "created_at"),
)
