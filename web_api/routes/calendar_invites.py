"""
Calendar invite routes.

Endpoints:
- POST /api/send-calendar-invite - Email an .ics invite for a scheduled next action
"""

import logging

import sentry_sdk
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core import config
from core.calendar_invites import (
    CalendarInviteError,
    normalize_recipients,
    send_calendar_invite,
)
from core.notifications.channels.email import Mailer, create_mailer
from web_api.rate_limit import calendar_invite_limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["calendar-invites"])


class SendCalendarInviteRequest(BaseModel):
    """Request body for sending a calendar invite.

    Fields are optional here so missing ones produce the 400 error body
    rather than a validation error.
    """

    actionId: str | None = None
    userId: str | None = None
    userEmails: list[str] | None = None
    userEmail: str | None = None  # Legacy single-recipient field
    idempotencyKey: str | None = None


def get_mailer(request: Request) -> Mailer:
    """Mailer built at startup (see main.lifespan), created lazily if missing."""
    mailer = getattr(request.app.state, "mailer", None)
    if mailer is None:
        mailer = create_mailer(
            api_key=config.get_sendgrid_api_key(),
            from_email=config.get_from_email(),
            from_name=config.get_from_name(),
        )
        request.app.state.mailer = mailer
    return mailer


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.post("/send-calendar-invite")
async def send_calendar_invite_route(
    payload: SendCalendarInviteRequest,
    request: Request,
    mailer: Mailer = Depends(get_mailer),
):
    """
    Send a calendar invite for a next action to one or more addresses.

    Request body:
    - actionId: Next action to invite for
    - userId: Owner of the action
    - userEmails: Recipient addresses (or userEmail for a single address)
    - idempotencyKey: Optional; repeating a sent key does not email again

    Returns:
    - success, message, emailId, recipientCount, recipients
    """
    if not calendar_invite_limiter.allow(request):
        response = _error("Too many requests", 429)
        response.headers["Retry-After"] = str(calendar_invite_limiter.retry_after(request))
        return response

    try:
        recipients = normalize_recipients(payload.userEmails, payload.userEmail)
        result = await send_calendar_invite(
            action_id=payload.actionId,
            user_id=payload.userId,
            recipients=recipients,
            mailer=mailer,
            idempotency_key=payload.idempotencyKey,
        )
    except CalendarInviteError as e:
        return _error(e.message, e.status_code)
    except Exception as e:
        logger.exception("Error sending calendar invite")
        sentry_sdk.capture_exception(e)
        return _error("Internal server error", 500)

    return {
        "success": True,
        "message": result.message,
        "emailId": result.email_id,
        "recipientCount": len(result.recipients),
        "recipients": result.recipients,
    }
