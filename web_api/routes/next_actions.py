"""
Next action routes.

Endpoints:
- GET /api/users/{user_id}/next-actions - List a user's next actions
- POST /api/users/{user_id}/next-actions - Create a next action
- GET /api/users/{user_id}/next-actions/{action_id} - Get one next action
- PATCH /api/users/{user_id}/next-actions/{action_id} - Update a next action
- DELETE /api/users/{user_id}/next-actions/{action_id} - Delete a next action
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, Field

from core.enums import NextActionStatus
from core.next_actions import (
    add_next_action,
    delete_next_action,
    get_next_action,
    get_next_actions,
    update_next_action,
)

router = APIRouter(prefix="/api/users/{user_id}/next-actions", tags=["next-actions"])

# Columns that are NOT NULL in next_actions
REQUIRED_FIELDS = ("title", "status")


class NextActionCreate(BaseModel):
    """Schema for creating a next action."""

    title: str = Field(min_length=1)
    description: str | None = None
    notes: str | None = None
    status: NextActionStatus | None = None
    context: str | None = None
    estimated_duration: int | None = Field(default=None, ge=0)
    scheduled_date: datetime | None = None
    project_id: str | None = None


class NextActionUpdate(BaseModel):
    """Schema for updating a next action. Only fields sent are changed."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    notes: str | None = None
    status: NextActionStatus | None = None
    context: str | None = None
    estimated_duration: int | None = Field(default=None, ge=0)
    scheduled_date: datetime | None = None
    completed_date: datetime | None = None
    project_id: str | None = None


@router.get("")
async def list_next_actions(user_id: str) -> dict[str, Any]:
    """List a user's next actions, newest first."""
    return {"next_actions": await get_next_actions(user_id)}


@router.post("", status_code=201)
async def create_next_action(user_id: str, body: NextActionCreate) -> dict[str, Any]:
    fields = body.model_dump(exclude_none=True)
    title = fields.pop("title")
    return await add_next_action(user_id, title, **fields)


@router.get("/{action_id}")
async def read_next_action(user_id: str, action_id: str) -> dict[str, Any]:
    action = await get_next_action(user_id, action_id)
    if not action:
        raise HTTPException(404, "Next action not found")
    return action


@router.patch("/{action_id}")
async def patch_next_action(
    user_id: str,
    action_id: str,
    updates: NextActionUpdate,
) -> dict[str, Any]:
    """
    Update a next action.

    Fields explicitly set to null are cleared (e.g. unscheduling), except
    the NOT NULL columns in REQUIRED_FIELDS.
    """
    fields = updates.model_dump(exclude_unset=True)
    for name in REQUIRED_FIELDS:
        if name in fields and fields[name] is None:
            raise HTTPException(400, f"{name} cannot be cleared")

    action = await update_next_action(user_id, action_id, **fields)
    if not action:
        raise HTTPException(404, "Next action not found")
    return action


@router.delete("/{action_id}", status_code=204)
async def remove_next_action(user_id: str, action_id: str) -> Response:
    if not await delete_next_action(user_id, action_id):
        raise HTTPException(404, "Next action not found")
    return Response(status_code=204)
