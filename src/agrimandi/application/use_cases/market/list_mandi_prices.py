from __future__ import annotations

from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.domain.models.mandi_price import MandiPrice


async def execute(
    uow: UnitOfWork, *, state: str | None = None, crop: str | None = None
) -> list[MandiPrice]:
    state = state.strip() if state else None
    crop = crop.strip() if crop else None
    return await uow.mandi_prices.list(state=state or None, crop=crop or None)
