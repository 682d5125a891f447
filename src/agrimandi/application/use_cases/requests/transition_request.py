"""Apply one lifecycle action to a stored request.

Read, plan, then write conditioned on the version that was read. A request
that moved in between fails the write and surfaces as a conflict; nothing is
retried here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from agrimandi.application.errors import ConflictError, NotFound, ValidationError
from agrimandi.application.events.models import RequestTransitionedEvent
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Operation, Principal, ensure_allowed
from agrimandi.domain.models.connection_request import ConnectionRequest
from agrimandi.domain.services.request_lifecycle import (
    InvalidTransition,
    InvariantViolation,
    TransitionContext,
    plan_transition,
    transition_values,
)
from agrimandi.domain.value_objects.request_status import RequestAction
from agrimandi.utils.datetime_tz import utcnow

logger = logging.getLogger(__name__)

_LOST_RACE_MESSAGES = {
    RequestAction.ACCEPT: "Request is no longer available",
}


@dataclass(slots=True)
class TransitionInput:
    action: RequestAction
    reason: str | None = None
    target_farmer_id: UUID | None = None


async def execute(
    uow: UnitOfWork,
    principal: Principal | None,
    request_id: UUID,
    payload: TransitionInput,
    *,
    now: datetime | None = None,
) -> ConnectionRequest:
    action = payload.action
    operation = Operation.for_action(action)
    ensure_allowed(principal, operation)

    request = await uow.connection_requests.get(request_id)
    if not request:
        raise NotFound("Request not found")
    ensure_allowed(principal, operation, request)

    ctx = TransitionContext(
        actor_id=principal.id,
        actor_role=principal.role,
        now=now or utcnow(),
        reason=payload.reason,
        target_farmer_id=payload.target_farmer_id,
    )
    try:
        planned = plan_transition(request, action, ctx)
    except InvalidTransition as exc:
        raise ConflictError(
            str(exc),
            details={"status": request.status.value, "action": action.value},
        ) from exc
    except InvariantViolation as exc:
        raise ValidationError(str(exc)) from exc

    updated = await uow.connection_requests.apply_transition(
        request.id,
        expected_version=request.version,
        values=transition_values(planned),
    )
    if updated is None:
        logger.info(
            "Lost race on %s for request %s at version %s",
            action.value,
            request.id,
            request.version,
        )
        raise ConflictError(
            _LOST_RACE_MESSAGES.get(action, "Request was modified by another user"),
            details={"action": action.value},
        )

    uow.add_event(
        RequestTransitionedEvent(
            request_id=updated.id,
            action=action,
            actor_id=principal.id,
            actor_role=principal.role,
            buyer_id=updated.buyer_id,
            crop=updated.crop,
            quantity=updated.quantity,
            farmer_id=updated.farmer_id or request.farmer_id,
            previous_farmer_id=request.farmer_id,
            reason=updated.dispute_reason,
        )
    )
    await uow.commit()
    return updated
