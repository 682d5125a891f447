from __future__ import annotations

from typing import Protocol

from agrimandi.domain.models.mandi_price import MandiPrice


class MandiPriceRepository(Protocol):
    async def add(self, price: MandiPrice) -> MandiPrice: ...

    async def list(self, *, state: str | None = None, crop: str | None = None) -> list[MandiPrice]: ...

    async def count(self) -> int: ...
