"""Tests for email channel."""

import base64
from unittest.mock import MagicMock, patch

import pytest

from core.notifications.channels.email import (
    DeliveryResult,
    EmailAttachment,
    Mailer,
    create_mailer,
    send_email,
)


@pytest.fixture
def mock_client():
    client = MagicMock()
    response = MagicMock()
    response.status_code = 202
    response.headers = {"X-Message-Id": "msg-123"}
    client.send.return_value = response
    return client


@pytest.fixture
def mailer(mock_client):
    return Mailer(
        client=mock_client,
        from_email="noreply@effectivo.app",
        from_name="EffectivO Calendar",
    )


@pytest.fixture
def attachment():
    return EmailAttachment(
        filename="Write_report.ics",
        content=b"BEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n",
        content_type="text/calendar",
    )


class TestSendEmail:
    def test_sends_one_message_to_all_recipients(self, mailer, mock_client, attachment):
        result = send_email(
            mailer,
            ["a@x.com", "b@x.com"],
            "Calendar Invite: Write report",
            "<p>Hi</p>",
            "Hi",
            attachment,
        )

        assert result == DeliveryResult(
            success=True, message_id="msg-123", recipients=["a@x.com", "b@x.com"]
        )
        mock_client.send.assert_called_once()

        sent = mock_client.send.call_args[0][0].get()
        assert sent["from"] == {
            "email": "noreply@effectivo.app",
            "name": "EffectivO Calendar",
        }
        assert sent["subject"] == "Calendar Invite: Write report"
        to = [p["email"] for p in sent["personalizations"][0]["to"]]
        assert to == ["a@x.com", "b@x.com"]

    def test_attaches_calendar_file(self, mailer, mock_client, attachment):
        send_email(mailer, ["a@x.com"], "Subject", "<p>Body</p>", attachment=attachment)

        sent = mock_client.send.call_args[0][0].get()
        (attached,) = sent["attachments"]
        assert attached["filename"] == "Write_report.ics"
        assert attached["type"] == "text/calendar"
        assert attached["disposition"] == "attachment"
        assert base64.b64decode(attached["content"]) == attachment.content

    def test_sends_plain_and_html_bodies(self, mailer, mock_client):
        send_email(mailer, ["a@x.com"], "Subject", "<p>Body</p>", "Body")

        sent = mock_client.send.call_args[0][0].get()
        types = {c["type"]: c["value"] for c in sent["content"]}
        assert types["text/plain"] == "Body"
        assert types["text/html"] == "<p>Body</p>"

    def test_returns_failure_on_exception(self, mailer, mock_client):
        mock_client.send.side_effect = Exception("API error")

        result = send_email(mailer, ["a@x.com"], "Subject", "<p>Body</p>")

        assert result.success is False
        assert result.error == "API error"
        assert result.message_id is None

    def test_returns_failure_on_error_status(self, mailer, mock_client):
        mock_client.send.return_value.status_code = 400

        result = send_email(mailer, ["a@x.com"], "Subject", "<p>Body</p>")

        assert result.success is False
        assert "400" in result.error

    def test_returns_failure_when_not_configured(self):
        mailer = Mailer(client=None, from_email="x@y.com", from_name="X")

        result = send_email(mailer, ["a@x.com"], "Subject", "<p>Body</p>")

        assert result.success is False
        assert result.recipients == ["a@x.com"]

    def test_missing_message_id_header(self, mailer, mock_client):
        mock_client.send.return_value.headers = {}

        result = send_email(mailer, ["a@x.com"], "Subject", "<p>Body</p>")

        assert result.success is True
        assert result.message_id is None


class TestCreateMailer:
    def test_no_api_key_means_no_client(self):
        mailer = create_mailer(None, "x@y.com", "X")
        assert mailer.client is None
        assert mailer.from_email == "x@y.com"

    @patch("core.notifications.channels.email.SendGridAPIClient")
    def test_builds_client_from_api_key(self, mock_client_cls):
        mailer = create_mailer("SG.key", "x@y.com", "X")

        mock_client_cls.assert_called_once_with("SG.key")
        assert mailer.client is mock_client_cls.return_value
