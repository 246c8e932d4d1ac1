"""Outbound email capability."""

from __future__ import annotations

import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage

from flask import Flask, current_app


class Mailer(ABC):
    """Interface for email delivery backends."""

    @abstractmethod
    def send(self, to: str, subject: str, html: str) -> None:
        """Deliver an HTML message or raise on failure."""


class SmtpMailer(Mailer):
    """Send mail through an SMTP relay."""

    def __init__(
        self,
        server: str,
        port: int,
        username: str | None,
        password: str | None,
        sender: str,
        use_ssl: bool = True,
        timeout: float = 10.0,
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_ssl = use_ssl
        self.timeout = timeout

    def _build(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, to: str, subject: str, html: str) -> None:
        msg = self._build(to, subject, html)
        if self.use_ssl:
            with smtplib.SMTP_SSL(self.server, self.port, timeout=self.timeout) as smtp:
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(msg)
            return

        with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(msg)


class LogMailer(Mailer):
    """Development backend that only records the message in the log."""

    def send(self, to: str, subject: str, html: str) -> None:
        current_app.logger.info("Email to %s: %s (%d bytes)", to, subject, len(html))


def init_mailer(app: Flask) -> Mailer:
    """Attach the configured mailer to ``app.extensions``."""

    server = app.config.get("MAIL_SERVER")
    if server:
        mailer: Mailer = SmtpMailer(
            server=server,
            port=int(app.config.get("MAIL_PORT", 465)),
            username=app.config.get("MAIL_USERNAME"),
            password=app.config.get("MAIL_PASSWORD"),
            sender=app.config.get("MAIL_SENDER") or "no-reply@localhost",
            use_ssl=bool(app.config.get("MAIL_USE_SSL", True)),
        )
    else:
        mailer = LogMailer()
    app.extensions["mailer"] = mailer
    return mailer


def send_email(to: str, subject: str, html: str) -> bool:
    """Send an email, returning ``False`` instead of raising when delivery fails."""

    mailer: Mailer = current_app.extensions["mailer"]
    try:
        mailer.send(to, subject, html)
    except (smtplib.SMTPException, OSError) as exc:
        current_app.logger.error("Email delivery to %s failed: %s", to, exc)
        return False
    return True
