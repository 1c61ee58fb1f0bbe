"""
Admin notifications for new model applications.
"""

from __future__ import annotations

import html
import logging
import smtplib
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def application_received(self, application: dict) -> None:
        ...


@dataclass
class InMemoryNotifier:
    """Records notifications instead of sending them."""

    sent: list = field(default_factory=list)
    fail: bool = False

    def application_received(self, application: dict) -> None:
        if self.fail:
            raise RuntimeError("notification failed")
        self.sent.append(application)


def _application_message(application: dict, sender: str, recipient: str) -> MIMEMultipart:
    name = f"{application.get('firstName', '')} {application.get('lastName', '')}".strip()
    msg = MIMEMultipart("alternative")
    msg["Subject"] = f"New model application: {name}"
    msg["From"] = sender
    msg["To"] = recipient

    rows = [
        ("Name", name),
        ("Email", application.get("email", "")),
        ("Location", application.get("location", "")),
        ("Height", application.get("height", "")),
        ("Measurements", f"{application.get('bust', '')} / {application.get('waist', '')} / {application.get('hips', '')}"),
        ("Agency", application.get("justCo", "")),
        ("Start date", application.get("startDate", "")),
        ("Alternative contact", application.get("altContact", "")),
        ("Photos", str(len(application.get("photos") or []))),
    ]
    text = "\n".join(f"{label}: {value}" for label, value in rows)
    body = "".join(
        f"<tr><td><strong>{html.escape(label)}</strong></td><td>{html.escape(str(value))}</td></tr>"
        for label, value in rows
    )
    msg.attach(MIMEText(text, "plain"))
    msg.attach(
        MIMEText(
            f'<div style="font-family: Arial, sans-serif;"><h2>New application</h2><table>{body}</table></div>',
            "html",
        )
    )
    return msg


@dataclass
class SmtpNotifier:
    """Sends notifications over SMTP with STARTTLS."""

    host: str
    port: int
    username: str
    password: str
    admin_address: str
    timeout: float = 10.0

    def application_received(self, application: dict) -> None:
        msg = _application_message(application, self.username, self.admin_address)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            server.starttls()
            server.login(self.username, self.password)
            server.sendmail(self.username, self.admin_address, msg.as_string())
        finally:
            server.quit()


def notify_quietly(notifier: Notifier | None, application: dict) -> bool:
    """Send an application notification; failures are logged, never raised."""
    if notifier is None:
        return False
    try:
        notifier.application_received(application)
    except Exception as exc:
        logger.warning(
            "Failed to send notification for application %s: %s",
            application.get("id"),
            exc,
        )
        return False
    return True
