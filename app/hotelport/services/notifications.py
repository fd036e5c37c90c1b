import json
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import requests

from app.hotelport.core.config import settings

logger = logging.getLogger(__name__)


PROPERTY_TRANSFER_APPROVED = "property_transfer_approved"
PENDING_ACTION_APPROVED = "pending_action_approved"
PENDING_ACTION_REJECTED = "pending_action_rejected"

_SUBJECTS = {
    PROPERTY_TRANSFER_APPROVED: "Property transfer approved",
    PENDING_ACTION_APPROVED: "Pending action approved",
    PENDING_ACTION_REJECTED: "Pending action rejected",
}


class Notifier:
    """Delivers stakeholder notifications over a webhook and SMTP.

    Errors propagate to the caller, which decides whether they are fatal.
    """

    def __init__(self, *, session: requests.Session | None = None):
        self.session = session or requests.Session()

    def notify(self, kind: str, recipients: list[str], payload: dict) -> None:
        if not settings.NOTIFICATIONS_ENABLED:
            logger.debug("Notifications disabled, skipping %s", kind)
            return
        self.send_webhook(kind, recipients, payload)
        self.send_email(kind, recipients, payload)

    def send_webhook(self, kind: str, recipients: list[str], payload: dict) -> None:
        if not settings.NOTIFICATION_WEBHOOK_URL:
            logger.debug("Webhook URL not configured, skipping")
            return
        response = self.session.post(
            settings.NOTIFICATION_WEBHOOK_URL,
            json={"kind": kind, "recipients": recipients, "payload": payload},
            timeout=settings.NOTIFICATION_WEBHOOK_TIMEOUT_SEC,
        )
        response.raise_for_status()
        logger.info("Webhook sent (status %s)", response.status_code)

    def send_email(self, kind: str, recipients: list[str], payload: dict) -> None:
        if not recipients:
            return
        if not all([settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER, settings.SMTP_PASS]):
            logger.debug("Email credentials missing, skipping email")
            return

        msg = MIMEMultipart("alternative")
        msg["From"] = settings.SMTP_FROM or settings.SMTP_USER
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = _SUBJECTS.get(kind, kind)
        msg.attach(MIMEText(json.dumps(payload, indent=2, default=str), "plain"))

        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.login(settings.SMTP_USER, settings.SMTP_PASS)
            server.send_message(msg)
        logger.info("Email sent to %s", ", ".join(recipients))
