# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

Requests go through the real app with the mail transport and every
database touchpoint of the invite flow replaced by mocks, so no SendGrid
key or Postgres is needed.
"""

import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Ensure we import from root main.py
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from core.enums import InviteDispatchStatus
from core.notifications.channels.email import DeliveryResult, Mailer
from main import app
from web_api.rate_limit import calendar_invite_limiter
from web_api.routes.calendar_invites import get_mailer


@pytest.fixture(autouse=True)
def _reset_rate_limit():
    calendar_invite_limiter.reset()
    yield
    calendar_invite_limiter.reset()


@pytest.fixture
def mailer():
    return Mailer(
        client=MagicMock(),
        from_email="noreply@effectivo.app",
        from_name="EffectivO Calendar",
    )


@pytest.fixture
def client(mailer):
    """Test client with the mail transport overridden."""
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture
def scheduled_action():
    return {
        "action_id": "t1",
        "user_id": "u1",
        "title": "Write report",
        "description": None,
        "notes": None,
        "status": "scheduled",
        "context": "@computer",
        "estimated_duration": 45,
        "scheduled_date": datetime(2024, 6, 3, 15, 0, tzinfo=timezone.utc),
        "calendar_invite_sent": False,
        "user_email": None,
    }


def _deliver_to_all(mailer, to_emails, *args):
    return DeliveryResult(success=True, message_id="sg-msg-1", recipients=list(to_emails))


@pytest.fixture
def invite_flow(scheduled_action):
    """Patch the storage and transport calls of the invite flow."""
    conn = AsyncMock()

    @asynccontextmanager
    async def fake_transaction():
        yield conn

    mocks = {
        "get_next_action": AsyncMock(return_value=scheduled_action),
        "claim_dispatch": AsyncMock(
            return_value=(
                {"dispatch_id": 1, "status": InviteDispatchStatus.pending},
                True,
            )
        ),
        "mark_dispatch_sent": AsyncMock(),
        "mark_dispatch_failed": AsyncMock(),
        "mark_calendar_invite_sent": AsyncMock(),
        "send_email": MagicMock(side_effect=_deliver_to_all),
    }
    with (
        patch("core.calendar_invites.get_transaction", fake_transaction),
        patch("core.calendar_invites.get_next_action", mocks["get_next_action"]),
        patch("core.calendar_invites.claim_dispatch", mocks["claim_dispatch"]),
        patch("core.calendar_invites.mark_dispatch_sent", mocks["mark_dispatch_sent"]),
        patch(
            "core.calendar_invites.mark_dispatch_failed", mocks["mark_dispatch_failed"]
        ),
        patch(
            "core.calendar_invites.mark_calendar_invite_sent",
            mocks["mark_calendar_invite_sent"],
        ),
        patch("core.calendar_invites.send_email", mocks["send_email"]),
    ):
        yield mocks
