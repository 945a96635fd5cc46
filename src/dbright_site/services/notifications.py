"""Email notifications for new contact submissions."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from dbright_site.core.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionSummary:
    """Fields included in notification mail."""

    name: str
    email: str
    phone: str | None = None
    company: str | None = None
    service: str | None = None
    preferred_date: str | None = None
    preferred_time: str | None = None
    message: str | None = None


def _header_text(value: str) -> str:
    # Header values must stay on one line.
    return " ".join(value.splitlines()).strip()


def _single_line(value: str) -> bool:
    return "\r" not in value and "\n" not in value


def _staff_body(summary: SubmissionSummary) -> str:
    lines = [
        "New contact form submission from the Dbright Services website:",
        "",
        f"Name: {summary.name}",
        f"Email: {summary.email}",
    ]
    optional = [
        ("Phone", summary.phone),
        ("Company", summary.company),
        ("Service", summary.service),
        ("Preferred date", summary.preferred_date),
        ("Preferred time", summary.preferred_time),
    ]
    lines.extend(f"{label}: {value}" for label, value in optional if value)
    lines.extend(["", "Message:", summary.message or "(none)", "", "---"])
    lines.append(f"Reply directly to this email to respond to {summary.name} ({summary.email}).")
    return "\n".join(lines)


def _confirmation_body(summary: SubmissionSummary) -> str:
    return "\n".join(
        [
            f"Dear {summary.name},",
            "",
            "Thank you for reaching out to Dbright Services. We have received your "
            "message and will get back to you as soon as possible.",
            "",
            "Your message:",
            summary.message or "",
            "",
            "Best regards,",
            "Dbright Services Team",
        ]
    )


class ContactNotifier:
    """Sends staff notification and optional confirmation mail via SMTP."""

    def __init__(self, config: Settings) -> None:
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.notify_enabled and bool(self.config.mail_sender)

    def _build(self, to: str, subject: str, body: str, reply_to: str | None = None) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = self.config.mail_sender or ""
        msg["To"] = to
        msg["Subject"] = _header_text(subject)
        if reply_to:
            msg["Reply-To"] = reply_to
        msg.attach(MIMEText(body, "plain", "utf-8"))
        return msg

    def _send(self, messages: list[MIMEMultipart]) -> None:
        cfg = self.config
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=10) as server:
            if cfg.smtp_starttls:
                server.starttls()
            if cfg.smtp_user and cfg.smtp_password:
                server.login(cfg.smtp_user, cfg.smtp_password)
            for msg in messages:
                server.send_message(msg)

    def _compose(self, summary: SubmissionSummary) -> list[MIMEMultipart]:
        recipient = self.config.contact_email or self.config.mail_sender or ""
        # An address with a line break is never used as a header value.
        reply_ok = _single_line(summary.email)
        if not reply_ok:
            logger.warning("Submitter address contains a line break; skipping Reply-To and confirmation")
        messages = [
            self._build(
                recipient,
                f"New Contact Form Submission from {summary.name}",
                _staff_body(summary),
                reply_to=summary.email if reply_ok else None,
            )
        ]
        if self.config.send_user_confirmation and reply_ok:
            messages.append(
                self._build(
                    summary.email,
                    "Thank you for contacting Dbright Services",
                    _confirmation_body(summary),
                )
            )
        return messages

    def notify(self, summary: SubmissionSummary) -> bool:
        """Send mail about a stored submission.

        Runs after the response is sent; failures are logged and reported as
        False, never raised.
        """
        if not self.enabled:
            return False

        try:
            messages = self._compose(summary)
            self._send(messages)
        except (smtplib.SMTPException, MessageError, OSError):
            logger.exception("Failed to send contact notification mail")
            return False
        logger.info("Contact notification mail sent (%d message(s))", len(messages))
        return True
