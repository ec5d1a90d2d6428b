"""Outgoing email transport."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from flask import Flask

from utils.errors import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer:
    """Send HTML mail over SMTP using the application's ``MAIL_*`` settings.

    With ``MAIL_SUPPRESS_SEND`` enabled, messages are kept in ``outbox``
    instead of being delivered.
    """

    def __init__(self, app: Flask | None = None):
        self.outbox: list[EmailMessage] = []
        self.config: dict = {}
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        self.config = {
            key: app.config.get(key)
            for key in (
                "MAIL_HOST",
                "MAIL_PORT",
                "MAIL_USERNAME",
                "MAIL_PASSWORD",
                "MAIL_USE_TLS",
                "MAIL_SENDER",
                "MAIL_SUPPRESS_SEND",
            )
        }
        app.extensions["mailer"] = self

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.config.get("MAIL_SENDER") or "no-reply@localhost"
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")
        return message

    def send(self, to: str, subject: str, html: str) -> None:
        message = self.build_message(to, subject, html)
        if self.config.get("MAIL_SUPPRESS_SEND"):
            self.outbox.append(message)
            logger.debug("Suppressed mail to %s: %s", to, subject)
            return

        try:
            with smtplib.SMTP(self.config["MAIL_HOST"], self.config["MAIL_PORT"], timeout=10) as smtp:
                if self.config.get("MAIL_USE_TLS"):
                    smtp.starttls()
                if self.config.get("MAIL_USERNAME"):
                    smtp.login(self.config["MAIL_USERNAME"], self.config.get("MAIL_PASSWORD") or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception("Failed to send mail to %s", to)
            raise MailDeliveryError() from exc
