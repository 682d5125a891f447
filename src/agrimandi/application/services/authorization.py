from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from agrimandi.application.errors import AuthError, PermissionDenied
from agrimandi.domain.models.connection_request import ConnectionRequest
from agrimandi.domain.value_objects.request_status import RequestAction
from agrimandi.domain.value_objects.role import Role


@dataclass(frozen=True, slots=True)
class Principal:
    id: UUID
    role: Role
    email: str | None = None


class Operation(str, Enum):
    LIST_ACCOUNTS = "list_accounts"
    CREATE_REQUEST = "create_request"
    LIST_MY_REQUESTS = "list_my_requests"
    LIST_ALL_REQUESTS = "list_all_requests"
    VIEW_REQUEST = "view_request"
    ACCEPT = "accept"
    COMPLETE = "complete"
    CONFIRM = "confirm"
    DENY = "deny"
    CANCEL = "cancel"
    REACTIVATE = "reactivate"
    REASSIGN = "reassign"
    UPDATE_COMMODITY_PRICE = "update_commodity_price"

    @classmethod
    def for_action(cls, action: RequestAction) -> Operation:
        return cls(action.value)


class DenialReason(str, Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    WRONG_ROLE = "wrong_role"
    NOT_OWNER = "not_owner"
    NOT_ASSIGNED = "not_assigned"


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: DenialReason | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)

_ANY = frozenset(Role)

# Role gates: which roles may attempt each operation at all.
ROLE_GATES: dict[Operation, frozenset[Role]] = {
    Operation.LIST_ACCOUNTS: frozenset({Role.ADMIN}),
    Operation.CREATE_REQUEST: frozenset({Role.BUYER}),
    Operation.LIST_MY_REQUESTS: frozenset({Role.BUYER}),
    Operation.LIST_ALL_REQUESTS: frozenset({Role.FARMER, Role.ADMIN}),
    Operation.VIEW_REQUEST: _ANY,
    Operation.ACCEPT: frozenset({Role.FARMER, Role.ADMIN}),
    Operation.COMPLETE: frozenset({Role.FARMER, Role.ADMIN}),
    Operation.CONFIRM: frozenset({Role.BUYER}),
    Operation.DENY: frozenset({Role.BUYER}),
    Operation.CANCEL: _ANY,
    Operation.REACTIVATE: frozenset({Role.BUYER}),
    Operation.REASSIGN: frozenset({Role.ADMIN}),
    Operation.UPDATE_COMMODITY_PRICE: frozenset({Role.ADMIN}),
}

# Relationship gates, applied once the target request is known.
OWNER_GATED: dict[Role, frozenset[Operation]] = {
    Role.BUYER: frozenset(
        {
            Operation.VIEW_REQUEST,
            Operation.CONFIRM,
            Operation.DENY,
            Operation.CANCEL,
            Operation.REACTIVATE,
        }
    ),
}
ASSIGNMENT_GATED: dict[Role, frozenset[Operation]] = {
    Role.FARMER: frozenset({Operation.COMPLETE, Operation.CANCEL}),
}


def authorize(
    principal: Principal | None,
    operation: Operation,
    request: ConnectionRequest | None = None,
) -> Decision:
    """Decide whether ``principal`` may perform ``operation``.

    Without ``request`` only the role gate is evaluated, which lets callers
    reject a caller before loading anything.
    """
    if principal is None:
        return Decision(False, DenialReason.NOT_AUTHENTICATED)
    if principal.role not in ROLE_GATES[operation]:
        return Decision(False, DenialReason.WRONG_ROLE)
    if request is None:
        return ALLOW
    if operation in OWNER_GATED.get(principal.role, frozenset()):
        if not request.is_owned_by(principal.id):
            return Decision(False, DenialReason.NOT_OWNER)
    if operation in ASSIGNMENT_GATED.get(principal.role, frozenset()):
        if not request.is_assigned_to(principal.id):
            return Decision(False, DenialReason.NOT_ASSIGNED)
    return ALLOW


_MESSAGES = {
    DenialReason.NOT_AUTHENTICATED: "Authentication required",
    DenialReason.WRONG_ROLE: "Role not allowed for this action",
    DenialReason.NOT_OWNER: "Request belongs to another buyer",
    DenialReason.NOT_ASSIGNED: "You are not the assigned farmer for this request",
}


def ensure_allowed(
    principal: Principal | None,
    operation: Operation,
    request: ConnectionRequest | None = None,
) -> None:
    decision = authorize(principal, operation, request)
    if decision.allowed:
        return
    reason = decision.reason or DenialReason.WRONG_ROLE
    if reason is DenialReason.NOT_AUTHENTICATED:
        raise AuthError(_MESSAGES[reason])
    raise PermissionDenied(
        _MESSAGES[reason],
        reason=reason.value,
        details={"operation": operation.value},
    )
