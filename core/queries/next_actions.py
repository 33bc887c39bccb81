"""Next-action database queries using SQLAlchemy Core."""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import NextActionStatus
from ..tables import next_actions


async def get_next_actions_for_user(
    conn: AsyncConnection,
    user_id: str,
) -> list[dict[str, Any]]:
    """Get all next actions for a user, newest first."""
    result = await conn.execute(
        select(next_actions)
        .where(next_actions.c.user_id == user_id)
        .order_by(next_actions.c.created_at.desc())
    )
    return [dict(row) for row in result.mappings()]


async def get_next_action(
    conn: AsyncConnection,
    user_id: str,
    action_id: str,
) -> dict[str, Any] | None:
    """Get a single next action, scoped to its owner."""
    result = await conn.execute(
        select(next_actions).where(
            next_actions.c.user_id == user_id,
            next_actions.c.action_id == action_id,
        )
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def create_next_action(
    conn: AsyncConnection,
    user_id: str,
    title: str,
    **fields: Any,
) -> dict[str, Any]:
    """Create a next action and return the created record."""
    now = datetime.now(timezone.utc)
    values = {
        "action_id": uuid4().hex,
        "user_id": user_id,
        "title": title,
        "status": fields.pop("status", None) or NextActionStatus.queued,
        "created_at": now,
        "updated_at": now,
        **fields,
    }
    result = await conn.execute(
        insert(next_actions).values(**values).returning(next_actions)
    )
    row = result.mappings().first()
    return dict(row)


async def update_next_action(
    conn: AsyncConnection,
    user_id: str,
    action_id: str,
    **updates: Any,
) -> dict[str, Any] | None:
    """Apply a partial update and return the updated record (None if missing)."""
    updates["updated_at"] = datetime.now(timezone.utc)
    result = await conn.execute(
        update(next_actions)
        .where(
            next_actions.c.user_id == user_id,
            next_actions.c.action_id == action_id,
        )
        .values(**updates)
        .returning(next_actions)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def delete_next_action(
    conn: AsyncConnection,
    user_id: str,
    action_id: str,
) -> bool:
    """Delete a next action. Returns True if a row was removed."""
    result = await conn.execute(
        delete(next_actions).where(
            next_actions.c.user_id == user_id,
            next_actions.c.action_id == action_id,
        )
    )
    return result.rowcount > 0


async def mark_calendar_invite_sent(
    conn: AsyncConnection,
    user_id: str,
    action_id: str,
    recipients: list[str],
) -> dict[str, Any] | None:
    """
    Record that a calendar invite went out for this action.

    Overwrites user_email with the comma-joined recipient list.
    """
    return await update_next_action(
        conn,
        user_id,
        action_id,
        calendar_invite_sent=True,
        user_email=", ".join(recipients),
    )
