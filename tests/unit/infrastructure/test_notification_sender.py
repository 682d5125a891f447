from __future__ import annotations

from uuid import uuid4

import pytest

from agrimandi.application.notifications.types import NotificationKind
from agrimandi.config.settings import Settings
from agrimandi.domain.models.account import Account
from agrimandi.domain.value_objects.role import Role
from agrimandi.infrastructure.email.models import EmailMessage, EmailService
from agrimandi.infrastructure.email.renderer.engine import EmailTemplateRenderer
from agrimandi.infrastructure.services.notification_service import EmailNotificationSender


class CapturingEmailService(EmailService):
    def __init__(self, fail_for: str | None = None) -> None:
        self.sent: list[EmailMessage] = []
        self.fail_for = fail_for

    async def send(self, message: EmailMessage) -> None:
        if self.fail_for and self.fail_for in message.to:
            raise ConnectionError("smtp down")
        self.sent.append(message)


def make_sender(accounts: dict, email_service: EmailService) -> EmailNotificationSender:
    async def load(account_id):
        return accounts.get(account_id)

    return EmailNotificationSender(
        load_account=load,
        email_service=email_service,
        renderer=EmailTemplateRenderer.create_default(),
        settings=Settings(database_url="sqlite+aiosqlite:///:memory:", jwt_secret_key="x"),
    )


def farmer(email: str = "ravi@example.com") -> Account:
    return Account.create(name="Ravi", email=email, hashed_password="x", role=Role.FARMER)


CONTEXT = {
    "request_id": "r-1",
    "crop": "Onion",
    "quantity": "4",
    "actor_role": "buyer",
    "reason": None,
}


@pytest.mark.asyncio
async def test_notifications_are_delivered_in_background():
    account = farmer()
    email = CapturingEmailService()
    sender = make_sender({account.id: account}, email)

    sender.notify(account.id, NotificationKind.REQUEST_CONFIRMED, CONTEXT)
    await sender.drain()
    await sender.aclose()

    (message,) = email.sent
    assert message.to == ["ravi@example.com"]
    assert "Onion" in message.subject


@pytest.mark.asyncio
async def test_delivery_failures_do_not_stop_the_worker():
    broken, healthy = farmer("broken@example.com"), farmer("ok@example.com")
    email = CapturingEmailService(fail_for="broken@example.com")
    sender = make_sender({broken.id: broken, healthy.id: healthy}, email)

    sender.notify(broken.id, NotificationKind.REQUEST_CONFIRMED, CONTEXT)
    sender.notify(uuid4(), NotificationKind.REQUEST_CONFIRMED, CONTEXT)
    sender.notify(healthy.id, NotificationKind.REQUEST_CONFIRMED, CONTEXT)
    await sender.drain()
    await sender.aclose()

    assert [m.to for m in email.sent] == [["ok@example.com"]]


@pytest.mark.asyncio
async def test_unknown_kinds_are_ignored():
    account = farmer()
    email = CapturingEmailService()
    sender = make_sender({account.id: account}, email)

    sender.notify(account.id, "carrier_pigeon", {})
    await sender.drain()
    await sender.aclose()

    assert email.sent == []
