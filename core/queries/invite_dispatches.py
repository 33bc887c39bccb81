"""Calendar invite dispatch log queries using SQLAlchemy Core."""

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import InviteDispatchStatus
from ..tables import calendar_invite_dispatches


async def get_dispatch_by_key(
    conn: AsyncConnection,
    idempotency_key: str,
) -> dict[str, Any] | None:
    result = await conn.execute(
        select(calendar_invite_dispatches).where(
            calendar_invite_dispatches.c.idempotency_key == idempotency_key
        )
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def claim_dispatch(
    conn: AsyncConnection,
    idempotency_key: str,
    action_id: str,
    user_id: str,
    recipients: list[str],
) -> tuple[dict[str, Any], bool]:
    """
    Record a pending dispatch before the email is handed to the transport.

    Returns:
        (row, created): created is False when the key already existed,
        in which case row is the existing record, untouched.
    """
    result = await conn.execute(
        insert(calendar_invite_dispatches)
        .values(
            idempotency_key=idempotency_key,
            action_id=action_id,
            user_id=user_id,
            recipients=", ".join(recipients),
            status=InviteDispatchStatus.pending,
        )
        .on_conflict_do_nothing(index_elements=["idempotency_key"])
        .returning(calendar_invite_dispatches)
    )
    row = result.mappings().first()
    if row:
        return dict(row), True

    existing = await get_dispatch_by_key(conn, idempotency_key)
    return existing, False


async def reopen_failed_dispatch(
    conn: AsyncConnection,
    dispatch_id: int,
    recipients: list[str],
) -> dict[str, Any] | None:
    """Move a failed dispatch back to pending so it can be retried."""
    result = await conn.execute(
        update(calendar_invite_dispatches)
        .where(
            calendar_invite_dispatches.c.dispatch_id == dispatch_id,
            calendar_invite_dispatches.c.status == InviteDispatchStatus.failed,
        )
        .values(
            status=InviteDispatchStatus.pending,
            recipients=", ".join(recipients),
            error_message=None,
            completed_at=None,
        )
        .returning(calendar_invite_dispatches)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def mark_dispatch_sent(
    conn: AsyncConnection,
    dispatch_id: int,
    provider_message_id: str | None,
) -> None:
    await conn.execute(
        update(calendar_invite_dispatches)
        .where(calendar_invite_dispatches.c.dispatch_id == dispatch_id)
        .values(
            status=InviteDispatchStatus.sent,
            provider_message_id=provider_message_id,
            completed_at=datetime.now(timezone.utc),
        )
    )


async def mark_dispatch_failed(
    conn: AsyncConnection,
    dispatch_id: int,
    error_message: str | None,
) -> None:
    await conn.execute(
        update(calendar_invite_dispatches)
        .where(calendar_invite_dispatches.c.dispatch_id == dispatch_id)
        .values(
            status=InviteDispatchStatus.failed,
            error_message=error_message,
            completed_at=datetime.now(timezone.utc),
        )
    )


async def get_stale_pending_dispatches(
    conn: AsyncConnection,
    older_than: timedelta = timedelta(minutes=10),
) -> list[dict[str, Any]]:
    """
    Get dispatches still pending after older_than.

    These crashed (or failed to record) between the send and the
    state update, so the email may or may not have gone out.
    """
    cutoff = datetime.now(timezone.utc) - older_than
    result = await conn.execute(
        select(calendar_invite_dispatches)
        .where(
            calendar_invite_dispatches.c.status == InviteDispatchStatus.pending,
            calendar_invite_dispatches.c.created_at < cutoff,
        )
        .order_by(calendar_invite_dispatches.c.created_at)
    )
    return [dict(row) for row in result.mappings()]
