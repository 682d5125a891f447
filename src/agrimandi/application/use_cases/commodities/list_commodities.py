from __future__ import annotations

from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.domain.models.commodity import Commodity


async def execute(uow: UnitOfWork) -> list[Commodity]:
    return await uow.commodities.list()
