"""Calendar invite generation using iCalendar format."""

import re
from datetime import datetime, timedelta, timezone
from typing import Any

from icalendar import Alarm, Calendar, Event

PRODID = "-//EffectivO//EffectivO App//EN"
UID_DOMAIN = "effectivo.app"
DEFAULT_DURATION_MINUTES = 30
DEFAULT_DESCRIPTION = "Scheduled next action from EffectivO"
REMINDER_BEFORE = timedelta(minutes=15)
ICS_CONTENT_TYPE = "text/calendar"

_FILENAME_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def to_utc(dt: datetime) -> datetime:
    """Convert to UTC (naive datetimes treated as UTC), dropping fractional seconds."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)


def get_event_window(
    action: dict[str, Any],
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """
    Get (start, end) in UTC for a next action.

    Falls back to now when the action has no scheduled_date, and to a
    30 minute duration when estimated_duration is missing or zero.
    """
    start = to_utc(action.get("scheduled_date") or now or datetime.now(timezone.utc))
    minutes = action.get("estimated_duration") or DEFAULT_DURATION_MINUTES
    return start, start + timedelta(minutes=minutes)


def build_invite_uid(action_id: str, now: datetime) -> str:
    """UID unique per send: action id + epoch milliseconds."""
    return f"{action_id}-{int(now.timestamp() * 1000)}@{UID_DOMAIN}"


def calendar_invite_filename(title: str) -> str:
    """Attachment filename: non-alphanumerics replaced by underscores."""
    return f"{_FILENAME_UNSAFE.sub('_', title)}.ics"


def create_calendar_invite(
    action: dict[str, Any],
    now: datetime | None = None,
) -> bytes:
    """
    Create an iCalendar invite (iTIP REQUEST) for a scheduled next action.

    Text values (summary, description, location) are escaped and long
    lines folded by icalendar, so reserved characters survive a parse.

    Args:
        action: Next action dict (action_id, title, description, context,
            scheduled_date, estimated_duration)
        now: Current time, used for DTSTAMP and the UID (defaults to utcnow)

    Returns:
        CRLF-delimited iCalendar document as UTF-8 bytes
    """
    now = now or datetime.now(timezone.utc)
    start, end = get_event_window(action, now)

    cal = Calendar()
    cal.add("version", "2.0")
    cal.add("prodid", PRODID)
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "REQUEST")  # This makes it an invite, not just an event

    event = Event()
    event.add("uid", build_invite_uid(action["action_id"], now))
    event.add("dtstamp", to_utc(now))
    event.add("dtstart", start)
    event.add("dtend", end)
    event.add("summary", action["title"])
    event.add("description", action.get("description") or DEFAULT_DESCRIPTION)
    event.add("location", action.get("context") or "")
    event.add("status", "CONFIRMED")
    event.add("sequence", 0)
    event.add("priority", 5)

    alarm = Alarm()
    alarm.add("trigger", -REMINDER_BEFORE)
    alarm.add("action", "DISPLAY")
    alarm.add("description", "Reminder")
    event.add_component(alarm)

    cal.add_component(event)
    return cal.to_ical()
