"""
Next-action management.

All functions are async and use the database.
"""

from typing import Any

from .database import get_connection, get_transaction
from .queries import next_actions as action_queries


async def get_next_actions(user_id: str) -> list[dict[str, Any]]:
    """Get all next actions for a user, newest first."""
    async with get_connection() as conn:
        return await action_queries.get_next_actions_for_user(conn, user_id)


async def get_next_action(user_id: str, action_id: str) -> dict[str, Any] | None:
    """
    Resolve a next action within the user's scope.

    Args:
        user_id: Owner of the action
        action_id: Opaque action identifier

    Returns:
        The action dict, or None if the user has no such action
    """
    async with get_connection() as conn:
        return await action_queries.get_next_action(conn, user_id, action_id)


async def add_next_action(user_id: str, title: str, **fields: Any) -> dict[str, Any]:
    async with get_transaction() as conn:
        return await action_queries.create_next_action(conn, user_id, title, **fields)


async def update_next_action(
    user_id: str,
    action_id: str,
    **updates: Any,
) -> dict[str, Any] | None:
    """
    Partially update a next action.

    Returns:
        Updated action dict or None if not found
    """
    async with get_transaction() as conn:
        return await action_queries.update_next_action(
            conn, user_id, action_id, **updates
        )


async def delete_next_action(user_id: str, action_id: str) -> bool:
    async with get_transaction() as conn:
        return await action_queries.delete_next_action(conn, user_id, action_id)
