#!/usr/bin/env python3
"""
Send a sample calendar invite using the real encoder, composer and mailer.

Does not touch the database.

Usage:
    python scripts/send_test_invite.py <email_address> [more addresses...]

Examples:
    python scripts/send_test_invite.py test@example.com
    python scripts/send_test_invite.py a@example.com b@example.com
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv(".env.local")
load_dotenv()

from core import config
from core.notifications.channels.calendar import (
    ICS_CONTENT_TYPE,
    calendar_invite_filename,
    create_calendar_invite,
)
from core.notifications.channels.email import EmailAttachment, create_mailer, send_email
from core.notifications.compose import compose_calendar_invite


def build_sample_action() -> dict:
    """A next action scheduled for tomorrow at 15:00 UTC."""
    tomorrow = datetime.now(timezone.utc) + timedelta(days=1)
    return {
        "action_id": "test-invite",
        "title": "Test invite: review weekly plan",
        "description": "Sample next action sent by scripts/send_test_invite.py",
        "context": "@computer",
        "estimated_duration": 45,
        "scheduled_date": tomorrow.replace(hour=15, minute=0, second=0, microsecond=0),
    }


def main() -> int:
    if len(sys.argv) < 2:
        print(__doc__)
        return 1

    recipients = sys.argv[1:]
    mailer = create_mailer(
        api_key=config.get_sendgrid_api_key(),
        from_email=config.get_from_email(),
        from_name=config.get_from_name(),
    )
    if mailer.client is None:
        print("ERROR: SENDGRID_API_KEY not set")
        return 1

    action = build_sample_action()
    composed = compose_calendar_invite(action)
    result = send_email(
        mailer,
        recipients,
        composed.subject,
        composed.html_body,
        composed.plain_body,
        EmailAttachment(
            filename=calendar_invite_filename(action["title"]),
            content=create_calendar_invite(action),
            content_type=ICS_CONTENT_TYPE,
        ),
    )

    if not result.success:
        print(f"FAILED: {result.error}")
        return 1

    print(f"Sent to {', '.join(recipients)} (message id: {result.message_id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
