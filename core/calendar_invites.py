"""
Send-calendar-invite flow.

validate -> look up next action -> schedule check -> encode ICS + compose
email -> dispatch -> record sent state.

Every send is logged in calendar_invite_dispatches under an idempotency key.
The row is written as pending before the email is handed to SendGrid and
flipped to sent in the same transaction that marks the action, so a crash
between the two leaves a pending row to reconcile. Callers that pass the
same idempotency key again get the stored result instead of a second email.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

import sentry_sdk

from core.database import get_transaction
from core.enums import InviteDispatchStatus
from core.next_actions import get_next_action
from core.notifications.channels.calendar import (
    ICS_CONTENT_TYPE,
    calendar_invite_filename,
    create_calendar_invite,
)
from core.notifications.channels.email import EmailAttachment, Mailer, send_email
from core.notifications.compose import compose_calendar_invite
from core.queries.invite_dispatches import (
    claim_dispatch,
    mark_dispatch_failed,
    mark_dispatch_sent,
    reopen_failed_dispatch,
)
from core.queries.next_actions import mark_calendar_invite_sent

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s,;]+@[^@\s,;]+\.[^@\s,;]+$")


class CalendarInviteError(Exception):
    """Base for errors that end a send-calendar-invite request."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InviteRequestError(CalendarInviteError):
    status_code = 400
    default_message = (
        "Missing required fields: actionId, userEmails (or userEmail), userId"
    )


class NextActionNotFoundError(CalendarInviteError):
    status_code = 404
    default_message = "Next action not found"


class NextActionNotScheduledError(CalendarInviteError):
    status_code = 400
    default_message = "Next action must be scheduled to send calendar invite"


class InviteInProgressError(CalendarInviteError):
    status_code = 409
    default_message = "A calendar invite with this idempotency key is already in progress"


class InviteDeliveryError(CalendarInviteError):
    status_code = 500
    default_message = "Failed to send calendar invite"


@dataclass
class InviteResult:
    email_id: str | None
    recipients: list[str]
    replayed: bool = False

    @property
    def message(self) -> str:
        count = len(self.recipients)
        plural = "" if count == 1 else "s"
        return f"Calendar invite sent successfully to {count} recipient{plural}"


def normalize_recipients(
    user_emails: list[str] | None,
    user_email: str | None = None,
) -> list[str]:
    """
    Collapse the list and legacy single-address inputs into one list.

    userEmails wins whenever it is sent, even empty; userEmail is only read
    when the list is absent. Blank entries are dropped and order is kept.

    Raises:
        InviteRequestError: If an address is malformed
    """
    if user_emails is not None:
        raw = user_emails
    else:
        raw = [user_email] if user_email else []
    recipients = [email.strip() for email in raw if email and email.strip()]

    invalid = [email for email in recipients if not EMAIL_PATTERN.match(email)]
    if invalid:
        raise InviteRequestError(f"Invalid email address: {', '.join(invalid)}")

    return recipients


def _split_recipients(value: str | None) -> list[str]:
    return [email for email in (value or "").split(", ") if email]


async def _open_dispatch(
    idempotency_key: str,
    action_id: str,
    user_id: str,
    recipients: list[str],
) -> tuple[dict, bool]:
    """
    Claim the idempotency key.

    Returns:
        (dispatch, should_send): should_send is False when the key was
        already sent and the stored dispatch should be replayed.
    """
    async with get_transaction() as conn:
        dispatch, created = await claim_dispatch(
            conn, idempotency_key, action_id, user_id, recipients
        )
        if created:
            return dispatch, True

        if dispatch["status"] == InviteDispatchStatus.sent:
            return dispatch, False

        if dispatch["status"] == InviteDispatchStatus.failed:
            reopened = await reopen_failed_dispatch(
                conn, dispatch["dispatch_id"], recipients
            )
            if reopened:
                return reopened, True

    raise InviteInProgressError()


async def _record_failure(dispatch_id: int, error: str | None) -> None:
    try:
        async with get_transaction() as conn:
            await mark_dispatch_failed(conn, dispatch_id, error)
    except Exception as e:
        # The send already failed; don't let the log write mask that
        logger.warning(f"Failed to record failed dispatch {dispatch_id}: {e}")
        sentry_sdk.capture_exception(e)


async def send_calendar_invite(
    action_id: str | None,
    user_id: str | None,
    recipients: list[str],
    mailer: Mailer,
    idempotency_key: str | None = None,
    now: datetime | None = None,
) -> InviteResult:
    """
    Email a calendar invite for a scheduled next action.

    Args:
        action_id: Next action to invite for
        user_id: Owner of the action
        recipients: Normalized recipient list (see normalize_recipients)
        mailer: Mail transport handle and sender identity
        idempotency_key: Optional client key; a repeat of a sent key
            returns the original result without emailing again
        now: Current time (for tests)

    Returns:
        InviteResult with the provider message id and recipients

    Raises:
        InviteRequestError: Missing action id, user id, or recipients
        NextActionNotFoundError: The user has no such action
        NextActionNotScheduledError: The action has no scheduled_date
        InviteInProgressError: The idempotency key is pending elsewhere
        InviteDeliveryError: SendGrid rejected or errored
    """
    if not action_id or not user_id or not recipients:
        raise InviteRequestError()

    action = await get_next_action(user_id, action_id)
    if not action:
        raise NextActionNotFoundError()

    if not action.get("scheduled_date"):
        raise NextActionNotScheduledError()

    now = now or datetime.now(timezone.utc)
    ics_content = create_calendar_invite(action, now=now)
    composed = compose_calendar_invite(action)

    key = f"{action_id}:{idempotency_key or uuid4().hex}"
    dispatch, should_send = await _open_dispatch(key, action_id, user_id, recipients)
    if not should_send:
        logger.info(f"Replaying sent calendar invite for {key}")
        return InviteResult(
            email_id=dispatch["provider_message_id"],
            recipients=_split_recipients(dispatch["recipients"]),
            replayed=True,
        )

    result = await asyncio.to_thread(
        send_email,
        mailer,
        recipients,
        composed.subject,
        composed.html_body,
        composed.plain_body,
        EmailAttachment(
            filename=calendar_invite_filename(action["title"]),
            content=ics_content,
            content_type=ICS_CONTENT_TYPE,
        ),
    )

    if not result.success:
        logger.error(f"Calendar invite for {action_id} not sent: {result.error}")
        await _record_failure(dispatch["dispatch_id"], result.error)
        raise InviteDeliveryError()

    # The email is out; a failure past this point leaves the dispatch pending
    async with get_transaction() as conn:
        updated = await mark_calendar_invite_sent(
            conn, user_id, action_id, result.recipients
        )
        await mark_dispatch_sent(conn, dispatch["dispatch_id"], result.message_id)

    if updated is None:
        logger.warning(f"Next action {action_id} disappeared before invite was recorded")

    logger.info(
        f"Sent calendar invite for {action_id} to {len(result.recipients)} recipient(s)"
    )
    return InviteResult(email_id=result.message_id, recipients=result.recipients)
