from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///default.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

# ruff: noqa: E402
from agrimandi.config.settings import Settings
from agrimandi.domain.models.account import Account
from agrimandi.domain.value_objects.role import Role
from agrimandi.infrastructure.auth.password import PasswordHasher
from agrimandi.infrastructure.db.base import Base
from agrimandi.infrastructure.db.orm import registry  # noqa: F401
from agrimandi.infrastructure.repos.accounts_sqlalchemy import AccountsSQLAlchemyRepository
from agrimandi.interfaces.http.main import create_app

TEST_PASSWORD = "secret123"
ADMIN_CODE = "let-me-in"


class RecordingSender:
    """Notification sender that keeps every hand-off in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[UUID, str, dict[str, Any]]] = []

    def notify(self, account_id: UUID, kind: str, context: dict[str, Any] | None = None) -> None:
        self.sent.append((account_id, kind, dict(context or {})))

    def kinds_for(self, account_id: UUID) -> list[str]:
        return [kind for recipient, kind, _ in self.sent if recipient == account_id]

    def last_context(self, kind: str) -> dict[str, Any]:
        for _, sent_kind, context in reversed(self.sent):
            if sent_kind == kind:
                return context
        raise AssertionError(f"no {kind} notification recorded")


@dataclass
class AccountHandle:
    account: Account
    token: str

    @property
    def id(self) -> UUID:
        return self.account.id

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture(scope="session")
def password_hasher() -> PasswordHasher:
    return PasswordHasher()


@pytest.fixture(scope="session")
def password_hash(password_hasher: PasswordHasher) -> str:
    # bcrypt is slow on purpose; hash the shared test password once.
    return password_hasher.hash(TEST_PASSWORD)


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    db_path = tmp_path / "test.db"
    return Settings(
        database_url=f"sqlite+aiosqlite:///{db_path}",
        jwt_secret_key="test-secret",
        log_level="INFO",
        environment="test",
        admin_registration_code=ADMIN_CODE,
        weather_api_key=None,
    )


@pytest.fixture()
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture()
def app(test_settings: Settings, password_hasher: PasswordHasher, sender: RecordingSender):
    application = create_app(settings=test_settings, password_hasher=password_hasher)
    application.state.notification_sender = sender
    return application


@pytest.fixture()
async def client(app) -> AsyncIterator[AsyncClient]:
    engine = app.state.engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
    await engine.dispose()


@pytest.fixture()
def make_account(app, client, password_hash) -> Callable[..., Awaitable[AccountHandle]]:
    async def _make(
        role: Role = Role.BUYER,
        *,
        name: str | None = None,
        email: str | None = None,
        contact: str | None = None,
        verified: bool = True,
    ) -> AccountHandle:
        name = name or f"{role.value.title()} User"
        account = Account.create(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}.{os.urandom(3).hex()}@example.com",
            hashed_password=password_hash,
            role=role,
            contact=contact,
            is_verified=verified,
        )
        async with app.state.session_factory() as session:
            await AccountsSQLAlchemyRepository(session).add(account)
            await session.commit()
        token = app.state.jwt_service.issue_for(account)
        return AccountHandle(account=account, token=token)

    return _make
