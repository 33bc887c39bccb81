"""
Core business logic - framework-agnostic.
Used by the web API and the operator scripts.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine, is_configured

# Next actions (async functions - must be awaited)
from .next_actions import (
    get_next_actions, get_next_action, add_next_action,
    update_next_action, delete_next_action,
)

# Calendar invites
from .calendar_invites import (
    CalendarInviteError, InviteRequestError, NextActionNotFoundError,
    NextActionNotScheduledError, InviteInProgressError, InviteDeliveryError,
    InviteResult, normalize_recipients, send_calendar_invite,
)
