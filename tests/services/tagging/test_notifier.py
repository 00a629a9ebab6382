from __future__ import annotations

import aiosmtplib
import pytest

from eventhub.common.settings import NotifierConfig
from eventhub.domain.errors import NotificationDeliveryError
from eventhub.services.tagging.notifier import LoggingNotifier, SmtpNotifier, build_notifier


class FakeSMTP:
    """Stands in for aiosmtplib.SMTP; records what the notifier asked for."""

    instances: list["FakeSMTP"] = []
    fail_with: Exception | None = None
    refused: dict = {}

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.logins = []
        self.messages = []
        FakeSMTP.instances.append(self)

    async def __aenter__(self):
        if FakeSMTP.fail_with is not None:
            raise FakeSMTP.fail_with
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def login(self, user, password):
        self.logins.append((user, password))

    async def send_message(self, message):
        self.messages.append(message)
        return dict(FakeSMTP.refused), "250 OK"


@pytest.fixture()
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    FakeSMTP.refused = {}
    monkeypatch.setattr(aiosmtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def _cfg(**over) -> NotifierConfig:
    base = dict(backend="smtp", smtp_host="mail.example.com", smtp_port=587, smtp_user="bot", smtp_password="pw")
    base.update(over)
    return NotifierConfig(**base)


async def test_smtp_notifier_sends_plain_text_with_starttls_and_login(fake_smtp):
    await SmtpNotifier(_cfg()).deliver("harbor@example.com", "You have been tagged in an event", "Hello")

    (client,) = fake_smtp.instances
    assert client.kwargs["hostname"] == "mail.example.com"
    assert client.kwargs["port"] == 587
    assert client.kwargs["start_tls"] is True
    assert client.logins == [("bot", "pw")]
    (msg,) = client.messages
    assert msg["To"] == "harbor@example.com"
    assert msg["Subject"] == "You have been tagged in an event"
    assert msg.get_payload(decode=True).decode() == "Hello"


async def test_smtp_notifier_skips_login_without_user(fake_smtp):
    await SmtpNotifier(_cfg(smtp_user=None)).deliver("a@example.com", "s", "b")
    assert fake_smtp.instances[0].logins == []


async def test_smtp_errors_become_delivery_errors(fake_smtp):
    fake_smtp.fail_with = aiosmtplib.SMTPConnectError("connection refused")
    with pytest.raises(NotificationDeliveryError):
        await SmtpNotifier(_cfg()).deliver("a@example.com", "s", "b")


async def test_refused_recipient_is_a_delivery_error(fake_smtp):
    fake_smtp.refused = {"a@example.com": (550, "no such user")}
    with pytest.raises(NotificationDeliveryError):
        await SmtpNotifier(_cfg()).deliver("a@example.com", "s", "b")


def test_build_notifier_picks_backend():
    assert isinstance(build_notifier(_cfg()), SmtpNotifier)
    assert isinstance(build_notifier(_cfg(backend="log")), LoggingNotifier)
