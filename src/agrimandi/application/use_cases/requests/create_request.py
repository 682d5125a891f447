from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from agrimandi.application.errors import ValidationError
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Operation, Principal, ensure_allowed
from agrimandi.domain.models.connection_request import ConnectionRequest


@dataclass(slots=True)
class CreateRequestInput:
    crop: str
    quantity: Decimal
    price: Decimal | None = None
    contact: str | None = None


async def execute(
    uow: UnitOfWork, principal: Principal | None, payload: CreateRequestInput
) -> ConnectionRequest:
    ensure_allowed(principal, Operation.CREATE_REQUEST)
    crop = (payload.crop or "").strip()
    if not crop:
        raise ValidationError("crop is required")
    if payload.quantity is None or payload.quantity <= 0:
        raise ValidationError("quantity must be greater than zero")
    if payload.price is not None and payload.price < 0:
        raise ValidationError("price cannot be negative")
    request = ConnectionRequest.create(
        buyer_id=principal.id,
        crop=crop,
        quantity=payload.quantity,
        price=payload.price,
        contact=payload.contact,
    )
    created = await uow.connection_requests.add(request)
    await uow.commit()
    return created
