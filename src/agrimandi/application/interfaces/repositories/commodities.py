from __future__ import annotations

from typing import Protocol
from uuid import UUID

from agrimandi.domain.models.commodity import Commodity


class CommodityRepository(Protocol):
    async def add(self, commodity: Commodity) -> Commodity: ...

    async def get(self, commodity_id: UUID) -> Commodity | None: ...

    async def list(self) -> list[Commodity]: ...

    async def count(self) -> int: ...

    async def save_price(self, commodity: Commodity) -> Commodity | None: ...
