from __future__ import annotations

from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    COMPLETED_PENDING_CONFIRMATION = "completed_pending_confirmation"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED})

NON_TERMINAL_STATUSES = frozenset(set(RequestStatus) - TERMINAL_STATUSES)

# farmer_id must be set in these states and unset in PENDING
ASSIGNED_STATUSES = frozenset(
    {
        RequestStatus.ACCEPTED,
        RequestStatus.COMPLETED_PENDING_CONFIRMATION,
        RequestStatus.COMPLETED,
        RequestStatus.DISPUTED,
    }
)


class RequestAction(str, Enum):
    ACCEPT = "accept"
    COMPLETE = "complete"
    CONFIRM = "confirm"
    DENY = "deny"
    CANCEL = "cancel"
    REACTIVATE = "reactivate"
    REASSIGN = "reassign"


class CancelledBy(str, Enum):
    BUYER = "buyer"
    FARMER = "farmer"
    ADMIN = "admin"
