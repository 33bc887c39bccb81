"""SendGrid email delivery channel."""

import base64
import logging
from dataclasses import dataclass, field

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import (
    Attachment,
    Disposition,
    FileContent,
    FileName,
    FileType,
    Mail,
)

logger = logging.getLogger(__name__)


@dataclass
class EmailAttachment:
    """File attached to an outgoing email."""

    filename: str
    content: bytes
    content_type: str


@dataclass
class Mailer:
    """Mail transport handle plus sender identity, built once at startup."""

    client: SendGridAPIClient | None
    from_email: str
    from_name: str


@dataclass
class DeliveryResult:
    """Outcome of handing a message to the mail transport."""

    success: bool
    message_id: str | None = None
    error: str | None = None
    recipients: list[str] = field(default_factory=list)


def create_mailer(api_key: str | None, from_email: str, from_name: str) -> Mailer:
    """Build the mailer; the client is None when no API key is configured."""
    client = SendGridAPIClient(api_key) if api_key else None
    return Mailer(client=client, from_email=from_email, from_name=from_name)


def _build_attachment(attachment: EmailAttachment) -> Attachment:
    return Attachment(
        FileContent(base64.b64encode(attachment.content).decode("ascii")),
        FileName(attachment.filename),
        FileType(attachment.content_type),
        Disposition("attachment"),
    )


def send_email(
    mailer: Mailer,
    to_emails: list[str],
    subject: str,
    html_body: str,
    plain_body: str | None = None,
    attachment: EmailAttachment | None = None,
) -> DeliveryResult:
    """
    Send one email to all recipients via SendGrid.

    Args:
        mailer: Transport client and sender (client is None if unconfigured)
        to_emails: Recipient addresses (one message, all on the To line)
        subject: Email subject line
        html_body: HTML body
        plain_body: Optional plain-text alternative
        attachment: Optional file attachment

    Returns:
        DeliveryResult with the provider message id on success, or the
        error detail on failure. Never raises.
    """
    if mailer.client is None:
        logger.warning("SendGrid not configured (SENDGRID_API_KEY not set)")
        return DeliveryResult(
            success=False,
            error="SendGrid not configured",
            recipients=list(to_emails),
        )

    try:
        message = Mail(
            from_email=(mailer.from_email, mailer.from_name),
            to_emails=list(to_emails),
            subject=subject,
            plain_text_content=plain_body,
            html_content=html_body,
        )
        if attachment is not None:
            message.attachment = _build_attachment(attachment)

        response = mailer.client.send(message)
    except Exception as e:
        logger.error(f"Failed to send email to {', '.join(to_emails)}: {e}")
        return DeliveryResult(success=False, error=str(e), recipients=list(to_emails))

    if response.status_code not in (200, 201, 202):
        return DeliveryResult(
            success=False,
            error=f"SendGrid responded with status {response.status_code}",
            recipients=list(to_emails),
        )

    headers = response.headers or {}
    return DeliveryResult(
        success=True,
        message_id=headers.get("X-Message-Id"),
        recipients=list(to_emails),
    )
