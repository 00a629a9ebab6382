# eventhub/services/tagging/notifier.py
from __future__ import annotations

import ssl
from email.mime.text import MIMEText

import aiosmtplib

from eventhub.common.logging import get_logger
from eventhub.common.settings import NotifierConfig, get_settings
from eventhub.domain.errors import NotificationDeliveryError
from eventhub.domain.ports.notifier import NotifierPort

logger = get_logger(__name__)


class LoggingNotifier:
    """Records the notice in the log only. Default backend."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def deliver(self, address: str, subject: str, body: str) -> None:
        self.sent.append((address, subject))
        logger.info("Notification sent to %s: %s", address, subject)


class SmtpNotifier:
    """Plain-text mail over SMTP with aiosmtplib (STARTTLS and login when configured)."""

    def __init__(self, cfg: NotifierConfig) -> None:
        self.cfg = cfg

    def _message(self, address: str, subject: str, body: str) -> MIMEText:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.cfg.from_address
        msg["To"] = address
        return msg

    async def deliver(self, address: str, subject: str, body: str) -> None:
        smtp = aiosmtplib.SMTP(
            hostname=self.cfg.smtp_host,
            port=self.cfg.smtp_port,
            start_tls=self.cfg.smtp_starttls,
            tls_context=ssl.create_default_context() if self.cfg.smtp_starttls else None,
            timeout=self.cfg.smtp_timeout_sec,
        )
        try:
            async with smtp:
                if self.cfg.smtp_user:
                    await smtp.login(self.cfg.smtp_user, self.cfg.smtp_password or "")
                errors, _response = await smtp.send_message(self._message(address, subject, body))
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise NotificationDeliveryError(f"SMTP delivery to {address} failed: {exc}") from exc
        if address in errors:
            raise NotificationDeliveryError(f"SMTP server rejected {address}: {errors[address]}")
        logger.info("Notification mailed to %s: %s", address, subject)


def build_notifier(cfg: NotifierConfig | None = None) -> NotifierPort:
    cfg = cfg or get_settings().notifier
    if cfg.backend == "smtp":
        return SmtpNotifier(cfg)
    return LoggingNotifier()
