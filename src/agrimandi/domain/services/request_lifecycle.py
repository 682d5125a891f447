"""Connection request state machine.

Every transition is a row in ``TRANSITIONS``: the roles allowed to fire it,
the source states each role may fire it from, the target state and an effect
function computing the remaining field changes. Planning a transition never
touches storage; callers persist the planned state with a conditional write
on ``version``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from agrimandi.domain.models.connection_request import (
    TIMESTAMP_FIELDS,
    TRANSITION_FIELDS,
    ConnectionRequest,
)
from agrimandi.domain.value_objects.request_status import (
    ASSIGNED_STATUSES,
    NON_TERMINAL_STATUSES,
    CancelledBy,
    RequestAction,
    RequestStatus,
)
from agrimandi.domain.value_objects.role import Role
from agrimandi.utils.datetime_tz import ensure_utc


class InvalidTransition(Exception):
    def __init__(self, action: RequestAction, status: RequestStatus, role: Role) -> None:
        super().__init__(f"Cannot {action.value} a request in status '{status.value}' as {role.value}")
        self.action = action
        self.status = status
        self.role = role


class InvariantViolation(Exception):
    pass


@dataclass(frozen=True, slots=True)
class TransitionContext:
    actor_id: UUID
    actor_role: Role
    now: datetime
    reason: str | None = None
    target_farmer_id: UUID | None = None


Effect = Callable[[ConnectionRequest, TransitionContext], dict[str, Any]]


@dataclass(frozen=True, slots=True)
class Transition:
    target: RequestStatus
    sources: Mapping[Role, frozenset[RequestStatus]]
    effect: Effect

    def allows(self, role: Role, status: RequestStatus) -> bool:
        return status in self.sources.get(role, frozenset())


def _accept(request: ConnectionRequest, ctx: TransitionContext) -> dict[str, Any]:
    # An admin re-accepting keeps the current assignee.
    if ctx.actor_role is Role.ADMIN and request.status is RequestStatus.ACCEPTED:
        farmer_id = request.farmer_id
    else:
        farmer_id = ctx.actor_id
    return {
        "farmer_id": farmer_id,
        "accepted_at": ctx.now,
        "cancelled_at": None,
        "cancelled_by": None,
    }


def _complete(request: ConnectionRequest, ctx: TransitionContext) -> dict[str, Any]:
    return {"completed_at": ctx.now}


def _confirm(request: ConnectionRequest, ctx: TransitionContext) -> dict[str, Any]:
    return {"buyer_confirmed_at": ctx.now}


def _deny(request: ConnectionRequest, ctx: TransitionContext) -> dict[str, Any]:
    return {"disputed_at": ctx.now, "dispute_reason": ctx.reason}


def _cancel(request: ConnectionRequest, ctx: TransitionContext) -> dict[str, Any]:
    return {"cancelled_at": ctx.now, "cancelled_by": CancelledBy(ctx.actor_role.value)}


def _reactivate(request: ConnectionRequest, ctx: TransitionContext) -> dict[str, Any]:
    cleared: dict[str, Any] = {name: None for name in TIMESTAMP_FIELDS}
    cleared.update(farmer_id=None, cancelled_by=None, dispute_reason=None)
    return cleared


def _reassign(request: ConnectionRequest, ctx: TransitionContext) -> dict[str, Any]:
    if ctx.target_farmer_id is None:
        raise InvariantViolation("reassign requires a target farmer")
    # The new assignee starts a fresh delivery; the previous one's outcome is dropped.
    return {
        "farmer_id": ctx.target_farmer_id,
        "accepted_at": ctx.now,
        "completed_at": None,
        "disputed_at": None,
        "dispute_reason": None,
    }


_PENDING = frozenset({RequestStatus.PENDING})
_ACCEPTED = frozenset({RequestStatus.ACCEPTED})
_AWAITING_BUYER = frozenset({RequestStatus.COMPLETED_PENDING_CONFIRMATION})

TRANSITIONS: dict[RequestAction, Transition] = {
    RequestAction.ACCEPT: Transition(
        target=RequestStatus.ACCEPTED,
        sources={
            Role.FARMER: _PENDING,
            Role.ADMIN: _PENDING | _ACCEPTED,
        },
        effect=_accept,
    ),
    RequestAction.COMPLETE: Transition(
        target=RequestStatus.COMPLETED_PENDING_CONFIRMATION,
        sources={Role.FARMER: _ACCEPTED, Role.ADMIN: _ACCEPTED},
        effect=_complete,
    ),
    RequestAction.CONFIRM: Transition(
        target=RequestStatus.COMPLETED,
        sources={Role.BUYER: _AWAITING_BUYER | {RequestStatus.DISPUTED}},
        effect=_confirm,
    ),
    RequestAction.DENY: Transition(
        target=RequestStatus.DISPUTED,
        sources={Role.BUYER: _AWAITING_BUYER},
        effect=_deny,
    ),
    RequestAction.CANCEL: Transition(
        target=RequestStatus.CANCELLED,
        sources={
            Role.BUYER: _PENDING,
            Role.FARMER: NON_TERMINAL_STATUSES,
            Role.ADMIN: frozenset(set(RequestStatus) - {RequestStatus.CANCELLED}),
        },
        effect=_cancel,
    ),
    RequestAction.REACTIVATE: Transition(
        target=RequestStatus.PENDING,
        sources={Role.BUYER: frozenset({RequestStatus.CANCELLED})},
        effect=_reactivate,
    ),
    RequestAction.REASSIGN: Transition(
        target=RequestStatus.ACCEPTED,
        sources={Role.ADMIN: NON_TERMINAL_STATUSES},
        effect=_reassign,
    ),
}

_unmapped = set(RequestAction) - set(TRANSITIONS)
if _unmapped:  # pragma: no cover - import-time guard
    raise RuntimeError(f"Actions without a transition: {sorted(a.value for a in _unmapped)}")


def can_apply(action: RequestAction, request: ConnectionRequest, role: Role) -> bool:
    return TRANSITIONS[action].allows(role, request.status)


def _next_timestamp(request: ConnectionRequest, now: datetime) -> datetime:
    """Keep transition timestamps strictly increasing across a request's history."""
    now = ensure_utc(now)
    latest = max(ensure_utc(ts) for ts in [request.created_at, *request.timestamps()])
    if now <= latest:
        return latest + timedelta(microseconds=1)
    return now


def check_invariants(
    request: ConnectionRequest, *, previous: ConnectionRequest | None = None
) -> None:
    if request.status in ASSIGNED_STATUSES and request.farmer_id is None:
        raise InvariantViolation(f"status '{request.status.value}' requires an assigned farmer")
    if request.status is RequestStatus.PENDING and request.farmer_id is not None:
        raise InvariantViolation("pending requests cannot have an assigned farmer")
    created_at = ensure_utc(request.created_at)
    for value in request.timestamps():
        if ensure_utc(value) < created_at:
            raise InvariantViolation("transition timestamp precedes creation")
    if previous is not None and previous.buyer_id != request.buyer_id:
        raise InvariantViolation("buyer_id is immutable")


def plan_transition(
    request: ConnectionRequest, action: RequestAction, ctx: TransitionContext
) -> ConnectionRequest:
    """Return the request as it would look after ``action``; raises InvalidTransition."""
    transition = TRANSITIONS[action]
    if not transition.allows(ctx.actor_role, request.status):
        raise InvalidTransition(action, request.status, ctx.actor_role)
    ctx = replace(ctx, now=_next_timestamp(request, ctx.now))
    changes = transition.effect(request, ctx)
    changes["status"] = transition.target
    updated = replace(request, **changes)
    check_invariants(updated, previous=request)
    return updated


def transition_values(request: ConnectionRequest) -> dict[str, Any]:
    """Columns a conditional write must persist for a planned request."""
    return {name: getattr(request, name) for name in TRANSITION_FIELDS}
