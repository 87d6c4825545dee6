from __future__ import annotations

import base64
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol
from zoneinfo import ZoneInfo

import requests

from ..core.enums import ActionType
from .model import DeliveryMessage, DeliveryOutcome
from .qr import render_qr_png

logger = logging.getLogger(__name__)


class DeliverySink(Protocol):
    """Outbound transport for a token; reports sent/failed, never raises for send errors."""

    def send(self, message: DeliveryMessage) -> DeliveryOutcome:
        raise NotImplementedError


def _label(action: ActionType) -> str:
    return "Check-In" if action == ActionType.ARRIVAL else "Check-Out"


def render_subject(message: DeliveryMessage) -> str:
    return f"Your {_label(message.action)} QR Code for {message.work_date.isoformat()}"


def render_html(message: DeliveryMessage, tz: ZoneInfo) -> str:
    valid_from = message.valid_from.astimezone(tz).strftime("%H:%M")
    valid_until = message.valid_until.astimezone(tz).strftime("%H:%M")
    return f"""
<html>
  <body style="font-family: Arial, sans-serif;">
    <p>Hello <strong>{message.worker_name}</strong>,</p>
    <p>Here is your {_label(message.action).lower()} QR code for <strong>{message.work_date.isoformat()}</strong>.</p>
    <p><img src="cid:qr-code" alt="QR code" width="200" height="200" /></p>
    <p><a href="{message.scan_url}">Open scan link</a></p>
    <p>Valid time: {valid_from} - {valid_until} ({tz.key})</p>
    <p style="color: #888; font-size: 12px;">This QR code can only be used once. Do not share it.</p>
  </body>
</html>
"""


class LoggingDeliverySink(DeliverySink):
    """Development sink: logs the delivery instead of sending anything."""

    def send(self, message: DeliveryMessage) -> DeliveryOutcome:
        logger.info(
            "Token delivery (log backend)",
            extra={"recipient": message.recipient, "action": message.action.value, "work_date": message.work_date.isoformat()},
        )
        return DeliveryOutcome(sent=True)


class SmtpDeliverySink(DeliverySink):
    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        tz: ZoneInfo,
        timeout: int = 20,
    ):
        self.host = host
        self.port = int(port)
        self.username = username
        self.password = password
        self.sender = sender
        self.tz = tz
        self.timeout = timeout

    def _build(self, message: DeliveryMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.recipient
        email["Subject"] = render_subject(message)
        email.set_content("Please view this email in an HTML-compatible email client.\n" + message.scan_url)
        email.add_alternative(render_html(message, self.tz), subtype="html")
        email.get_payload()[1].add_related(render_qr_png(message.scan_url), "image", "png", cid="<qr-code>")
        return email

    def send(self, message: DeliveryMessage) -> DeliveryOutcome:
        email = self._build(message)
        try:
            # 465 is implicit TLS; anything else upgrades with STARTTLS.
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as client:
                    client.login(self.username, self.password)
                    client.send_message(email)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as client:
                    client.starttls()
                    client.login(self.username, self.password)
                    client.send_message(email)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP delivery failed", extra={"recipient": message.recipient, "error": str(e)})
            return DeliveryOutcome(sent=False, error=str(e) or e.__class__.__name__)

        return DeliveryOutcome(sent=True)


class HttpDeliverySink(DeliverySink):
    """Posts the email to a transactional email HTTP API (Resend-style JSON)."""

    def __init__(self, *, api_url: str, api_key: str, sender: str, tz: ZoneInfo, timeout: int = 20):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.tz = tz
        self.timeout = timeout

    def _payload(self, message: DeliveryMessage) -> dict:
        png = render_qr_png(message.scan_url)
        return {
            "from": self.sender,
            "to": [message.recipient],
            "subject": render_subject(message),
            "html": render_html(message, self.tz),
            "attachments": [
                {
                    "filename": "qr-code.png",
                    "content": base64.b64encode(png).decode("ascii"),
                    "content_id": "qr-code",
                }
            ],
        }

    def send(self, message: DeliveryMessage) -> DeliveryOutcome:
        try:
            response = requests.post(
                self.api_url,
                json=self._payload(message),
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("HTTP delivery failed", extra={"recipient": message.recipient, "error": str(e)})
            return DeliveryOutcome(sent=False, error=str(e) or e.__class__.__name__)

        return DeliveryOutcome(sent=True)
