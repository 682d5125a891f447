from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agrimandi.application.notifications.types import ALL_KINDS, NotificationSender
from agrimandi.config.settings import Settings
from agrimandi.domain.models.account import Account
from agrimandi.infrastructure.email.models import EmailService
from agrimandi.infrastructure.email.renderer.engine import EmailTemplateRenderer
from agrimandi.infrastructure.repos.accounts_sqlalchemy import AccountsSQLAlchemyRepository

logger = logging.getLogger(__name__)

AccountLoader = Callable[[UUID], Awaitable[Account | None]]


@dataclass(slots=True)
class QueuedNotification:
    account_id: UUID
    kind: str
    context: dict[str, Any] = field(default_factory=dict)


def session_account_loader(session_factory: async_sessionmaker[AsyncSession]) -> AccountLoader:
    async def load(account_id: UUID) -> Account | None:
        async with session_factory() as session:
            return await AccountsSQLAlchemyRepository(session).get(account_id)

    return load


class EmailNotificationSender(NotificationSender):
    """Queue notifications in memory and deliver them by email on a worker task.

    ``notify`` never blocks the caller. The worker starts on first use and
    logs delivery failures instead of raising them.
    """

    def __init__(
        self,
        *,
        load_account: AccountLoader,
        email_service: EmailService,
        renderer: EmailTemplateRenderer,
        settings: Settings,
        max_queue_size: int = 1000,
    ) -> None:
        self._load_account = load_account
        self._email_service = email_service
        self._renderer = renderer
        self._settings = settings
        self._max_queue_size = max_queue_size
        self._queue: asyncio.Queue[QueuedNotification] | None = None
        self._worker: asyncio.Task | None = None

    def notify(
        self, account_id: UUID, kind: str, context: dict[str, Any] | None = None
    ) -> None:
        if kind not in ALL_KINDS:
            logger.warning("Ignoring unknown notification kind %s", kind)
            return
        self._ensure_worker()
        try:
            self._queue.put_nowait(QueuedNotification(account_id, kind, dict(context or {})))
        except asyncio.QueueFull:
            logger.error("Notification queue full; dropping %s for account %s", kind, account_id)

    def _ensure_worker(self) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self._max_queue_size)
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(
                self._run(), name="email-notifications"
            )

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                await self._deliver(item)
            except Exception as e:
                logger.error(
                    "Failed to deliver %s to account %s: %s",
                    item.kind,
                    item.account_id,
                    e,
                    exc_info=True,
                )
            finally:
                self._queue.task_done()

    async def _deliver(self, item: QueuedNotification) -> None:
        account = await self._load_account(item.account_id)
        if account is None:
            logger.warning("Skipping %s: account %s not found", item.kind, item.account_id)
            return
        message = self._renderer.render(
            kind=item.kind,
            settings=self._settings,
            context={**item.context, "recipient": {"name": account.name, "email": account.email}},
        )
        await self._email_service.send(message.addressed_to(account.email))
        logger.info("Sent %s email to account %s", item.kind, account.id)

    async def drain(self) -> None:
        """Wait until everything queued so far has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def aclose(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
