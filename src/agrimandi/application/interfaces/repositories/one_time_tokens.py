from __future__ import annotations

from typing import Protocol
from uuid import UUID

from agrimandi.domain.models.one_time_token import OneTimeToken


class OneTimeTokenRepository(Protocol):
    async def add(self, token: OneTimeToken) -> OneTimeToken: ...

    async def get_by_token(self, token: str, purpose: str) -> OneTimeToken | None: ...

    async def mark_as_used(self, token_id: UUID) -> bool: ...

    async def invalidate_all_for_purpose(self, account_id: UUID, purpose: str) -> None: ...
