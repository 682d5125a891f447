from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from agrimandi.application.interfaces.unit_of_work import UnitOfWork


def create_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, echo=False, future=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


class SQLAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None
        self.accounts = None
        self.connection_requests = None
        self.commodities = None
        self.mandi_prices = None
        self.one_time_tokens = None
        self.events: list[object] = []

    async def __aenter__(self) -> UnitOfWork:
        self.session = self._session_factory()
        from agrimandi.infrastructure.repos.accounts_sqlalchemy import AccountsSQLAlchemyRepository
        from agrimandi.infrastructure.repos.commodities_sqlalchemy import (
            CommoditiesSQLAlchemyRepository,
        )
        from agrimandi.infrastructure.repos.connection_requests_sqlalchemy import (
            ConnectionRequestsSQLAlchemyRepository,
        )
        from agrimandi.infrastructure.repos.mandi_prices_sqlalchemy import (
            MandiPricesSQLAlchemyRepository,
        )
        from agrimandi.infrastructure.repos.one_time_tokens_sqlalchemy import (
            OneTimeTokensSQLAlchemyRepository,
        )

        self.accounts = AccountsSQLAlchemyRepository(self.session)
        self.connection_requests = ConnectionRequestsSQLAlchemyRepository(self.session)
        self.commodities = CommoditiesSQLAlchemyRepository(self.session)
        self.mandi_prices = MandiPricesSQLAlchemyRepository(self.session)
        self.one_time_tokens = OneTimeTokensSQLAlchemyRepository(self.session)
        self.events = []
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self.session:
            return
        try:
            if exc:
                await self.session.rollback()
                # Events describe work that never landed.
                self.events.clear()
        finally:
            await self.session.close()
            self.session = None
            self.accounts = None
            self.connection_requests = None
            self.commodities = None
            self.mandi_prices = None
            self.one_time_tokens = None

    async def commit(self) -> None:
        if not self.session:
            return
        await self.session.commit()

    async def rollback(self) -> None:
        if not self.session:
            return
        await self.session.rollback()
        self.events.clear()

    def add_event(self, event: object) -> None:
        self.events.append(event)

    def drain_events(self) -> list[object]:
        drained, self.events = self.events, []
        return drained
