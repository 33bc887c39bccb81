"""
Outgoing notifications: calendar invite documents and the emails that carry them.

Public API:
    create_calendar_invite(action) - Encode a next action as an iCalendar invite
    compose_calendar_invite(action) - Subject and bodies for the invite email
    send_email(mailer, to_emails, ...) - Deliver one email via SendGrid
"""

from .channels.calendar import calendar_invite_filename, create_calendar_invite
from .channels.email import (
    DeliveryResult,
    EmailAttachment,
    Mailer,
    create_mailer,
    send_email,
)
from .compose import ComposedMessage, compose_calendar_invite

__all__ = [
    "create_calendar_invite",
    "calendar_invite_filename",
    "compose_calendar_invite",
    "ComposedMessage",
    "send_email",
    "create_mailer",
    "Mailer",
    "EmailAttachment",
    "DeliveryResult",
]
