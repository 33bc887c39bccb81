"""Query layer for database operations using SQLAlchemy Core."""

from .invite_dispatches import (
    claim_dispatch,
    get_dispatch_by_key,
    get_stale_pending_dispatches,
    mark_dispatch_failed,
    mark_dispatch_sent,
    reopen_failed_dispatch,
)
from .next_actions import (
    create_next_action,
    delete_next_action,
    get_next_action,
    get_next_actions_for_user,
    mark_calendar_invite_sent,
    update_next_action,
)

__all__ = [
    # Next actions
    "get_next_actions_for_user",
    "get_next_action",
    "create_next_action",
    "update_next_action",
    "delete_next_action",
    "mark_calendar_invite_sent",
    # Invite dispatch log
    "claim_dispatch",
    "get_dispatch_by_key",
    "reopen_failed_dispatch",
    "mark_dispatch_sent",
    "mark_dispatch_failed",
    "get_stale_pending_dispatches",
]
