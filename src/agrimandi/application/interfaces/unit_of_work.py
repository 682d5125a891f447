from __future__ import annotations

from typing import Protocol

from agrimandi.application.interfaces.repositories.accounts import AccountRepository
from agrimandi.application.interfaces.repositories.commodities import CommodityRepository
from agrimandi.application.interfaces.repositories.connection_requests import (
    ConnectionRequestRepository,
)
from agrimandi.application.interfaces.repositories.mandi_prices import MandiPriceRepository
from agrimandi.application.interfaces.repositories.one_time_tokens import OneTimeTokenRepository


class UnitOfWork(Protocol):
    accounts: AccountRepository
    connection_requests: ConnectionRequestRepository
    commodities: CommodityRepository
    mandi_prices: MandiPriceRepository
    one_time_tokens: OneTimeTokenRepository
    # Domain events collected during the transaction
    events: list

    async def __aenter__(self) -> UnitOfWork: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    # Record a domain event during the transaction
    def add_event(self, event: object) -> None: ...

    # Drain collected events (used for post-commit dispatch)
    def drain_events(self) -> list: ...
