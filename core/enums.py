"""SQLAlchemy enum definitions for the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class NextActionStatus(str, enum.Enum):
    queued = "queued"
    scheduled = "scheduled"
    done = "done"


class InviteDispatchStatus(str, enum.Enum):
    pending = "pending"
    sent = "sent"
    failed = "failed"


# =====================================================
# SQLAlchemy Enum Types (for use in table definitions)
# =====================================================

next_action_status_enum = SQLEnum(
    NextActionStatus, name="next_action_status", create_type=False, native_enum=True
)
invite_dispatch_status_enum = SQLEnum(
    InviteDispatchStatus,
    name="invite_dispatch_status",
    create_type=False,
    native_enum=True,
)
