from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from agrimandi.domain.models.account import Account
from agrimandi.domain.value_objects.role import Role


class AccountRepository(Protocol):
    async def add(self, account: Account) -> Account: ...

    async def get(self, account_id: UUID) -> Account | None: ...

    async def get_many(self, account_ids: Sequence[UUID]) -> list[Account]: ...

    async def get_by_email(self, email: str) -> Account | None: ...

    async def list(self, *, role: Role | None = None) -> list[Account]: ...

    async def mark_verified(self, account_id: UUID) -> bool: ...

    async def update_password(self, account_id: UUID, hashed_password: str) -> None: ...
