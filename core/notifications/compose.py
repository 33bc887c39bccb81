"""
Composes the human-readable email that accompanies a calendar invite.

Dates and times are rendered in UTC.
"""

from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Any

from core.notifications.channels.calendar import to_utc
from core.notifications.templates import get_message

MESSAGE_TYPE = "calendar_invite"


@dataclass
class ComposedMessage:
    subject: str
    html_body: str
    plain_body: str


def format_long_date(dt: datetime) -> str:
    """Format like "Monday, June 3, 2024"."""
    return to_utc(dt).strftime("%A, %B %d, %Y").replace(" 0", " ")


def format_clock_time(dt: datetime) -> str:
    """Format like "3:00 PM UTC"."""
    return to_utc(dt).strftime("%I:%M %p").lstrip("0") + " UTC"


def _optional_line(part: str, key: str, value: Any, html: bool) -> str:
    if not value:
        return ""
    if html:
        return get_message(MESSAGE_TYPE, part, {key: escape(str(value))})
    return get_message(MESSAGE_TYPE, f"text_{part}", {key: value})


def _render_body(action: dict[str, Any], html: bool) -> str:
    title = action["title"]
    scheduled = action["scheduled_date"]
    context = {
        "title": escape(title) if html else title,
        "scheduled_date": format_long_date(scheduled),
        "scheduled_time": format_clock_time(scheduled),
        "description_line": _optional_line(
            "description_line", "description", action.get("description"), html
        ),
        "duration_line": _optional_line(
            "duration_line", "duration", action.get("estimated_duration"), html
        ),
        "context_line": _optional_line(
            "context_line", "context", action.get("context"), html
        ),
    }
    part = "email_body" if html else "email_text"
    return get_message(MESSAGE_TYPE, part, context)


def compose_calendar_invite(action: dict[str, Any]) -> ComposedMessage:
    """
    Build the subject and bodies for a calendar invite email.

    The action must have a scheduled_date; duration and context lines are
    only included when those fields are set. User text is HTML-escaped in
    the HTML body.
    """
    return ComposedMessage(
        subject=get_message(MESSAGE_TYPE, "email_subject", {"title": action["title"]}),
        html_body=_render_body(action, html=True),
        plain_body=_render_body(action, html=False),
    )
