from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape

from settings import Settings

logger = logging.getLogger(__name__)


class MailDeliveryError(RuntimeError):
    pass


@dataclass(frozen=True)
class MailMessage:
    recipient: str
    subject: str
    text_body: str
    html_body: str


def build_reset_message(recipient: str, reset_url: str) -> MailMessage:
    link = escape(reset_url, quote=True)
    return MailMessage(
        recipient=recipient,
        subject="Reset your dygo password",
        text_body=(
            "We received a request to reset your password.\n\n"
            f"Open this link to choose a new one:\n{reset_url}\n\n"
            "If you did not ask for this, you can ignore this email."
        ),
        html_body=(
            "<p>We received a request to reset your password.</p>"
            f'<p><a href="{link}">Choose a new password</a></p>'
            "<p>If you did not ask for this, you can ignore this email.</p>"
        ),
    )


class Mailer:
    """SMTP delivery for transactional mail."""

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.smtp_host)

    def send(self, message: MailMessage) -> None:
        s = self._settings
        if not self.is_configured:
            raise MailDeliveryError("SMTP host not configured")

        email = EmailMessage()
        email["Subject"] = message.subject
        email["From"] = s.mail_from
        email["To"] = message.recipient
        email.set_content(message.text_body)
        email.add_alternative(message.html_body, subtype="html")

        logger.info(
            "MAIL: sending to %s via %s:%s (TLS=%s, user=%s)",
            message.recipient,
            s.smtp_host,
            s.smtp_port,
            s.smtp_use_tls,
            s.smtp_username or None,
        )
        try:
            with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=15) as server:
                server.ehlo()
                if s.smtp_use_tls:
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()
                if s.smtp_username and s.smtp_password:
                    server.login(s.smtp_username, s.smtp_password)
                server.send_message(email)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("MAIL: failed to send to %s: %r", message.recipient, e)
            raise MailDeliveryError(str(e)) from e
