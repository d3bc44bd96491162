from __future__ import annotations

import html
import smtplib
import ssl
from datetime import date
from email.message import EmailMessage

from .notifier import NotificationError


class EmailChannel:
    """Notification channel mailing the report as plain text with an HTML copy.

    Connects with implicit SSL by default; ``use_tls=True`` switches to a plain
    connection upgraded with STARTTLS (usually on port 587). Login is skipped
    when no ``smtp_user`` is given, and the sender defaults to that user.
    """

    name = "email"

    def __init__(
        self,
        smtp_host: str,
        smtp_user: str = "",
        smtp_pass: str = "",
        *,
        port: int = 465,
        use_tls: bool = False,
        sender: str | None = None,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.port = port
        self.use_tls = use_tls
        self.sender = sender or smtp_user

    def build(self, recipient: str, message: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = f"✈ TripAlert – best trips changed – {date.today():%Y-%m-%d}"
        msg["From"] = self.sender
        msg["To"] = recipient
        msg.set_content(message)
        msg.add_alternative(
            f"<html><body><pre>{html.escape(message)}</pre></body></html>",
            subtype="html",
        )
        return msg

    def send(self, recipient: str, message: str) -> None:
        msg = self.build(recipient, message)
        try:
            if self.use_tls:
                with smtplib.SMTP(self.smtp_host, self.port) as smtp:
                    smtp.starttls(context=ssl.create_default_context())
                    if self.smtp_user:
                        smtp.login(self.smtp_user, self.smtp_pass)
                    smtp.send_message(msg)
            else:
                ctx = ssl.create_default_context()
                with smtplib.SMTP_SSL(self.smtp_host, self.port, context=ctx) as smtp:
                    if self.smtp_user:
                        smtp.login(self.smtp_user, self.smtp_pass)
                    smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"SMTP error: {exc}") from exc


__all__ = ["EmailChannel"]
