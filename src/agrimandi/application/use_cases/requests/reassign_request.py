from __future__ import annotations

from datetime import datetime
from uuid import UUID

from agrimandi.application.errors import NotFound, ValidationError
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Operation, Principal, ensure_allowed
from agrimandi.application.use_cases.requests import transition_request
from agrimandi.domain.models.connection_request import ConnectionRequest
from agrimandi.domain.value_objects.request_status import RequestAction
from agrimandi.domain.value_objects.role import Role


async def execute(
    uow: UnitOfWork,
    principal: Principal | None,
    request_id: UUID,
    farmer_id: UUID,
    *,
    now: datetime | None = None,
) -> ConnectionRequest:
    ensure_allowed(principal, Operation.REASSIGN)
    farmer = await uow.accounts.get(farmer_id)
    if not farmer:
        raise NotFound("Farmer not found")
    if farmer.role is not Role.FARMER:
        raise ValidationError(
            "Requests can only be assigned to farmers",
            details={"farmer_id": str(farmer_id), "role": farmer.role.value},
        )
    return await transition_request.execute(
        uow,
        principal,
        request_id,
        transition_request.TransitionInput(
            action=RequestAction.REASSIGN, target_farmer_id=farmer.id
        ),
        now=now,
    )
