from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from agrimandi.application.errors import ConflictError, NotFound, ValidationError
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Operation, Principal, ensure_allowed
from agrimandi.domain.models.commodity import Commodity
from agrimandi.utils.datetime_tz import utcnow


@dataclass(slots=True)
class UpdatePriceInput:
    price: Decimal


async def execute(
    uow: UnitOfWork,
    principal: Principal | None,
    commodity_id: UUID,
    payload: UpdatePriceInput,
    *,
    now: datetime | None = None,
) -> Commodity:
    """Persist a new price; runs inside ``CommodityChannel.publish`` in the API."""
    ensure_allowed(principal, Operation.UPDATE_COMMODITY_PRICE)
    if payload.price is None or payload.price < 0:
        raise ValidationError("price cannot be negative")
    commodity = await uow.commodities.get(commodity_id)
    if not commodity:
        raise NotFound("Commodity not found")
    updated = await uow.commodities.save_price(commodity.repriced(payload.price, at=now or utcnow()))
    if updated is None:
        raise ConflictError("Commodity was modified by another user")
    await uow.commit()
    return updated
