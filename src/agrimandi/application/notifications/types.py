from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID


class NotificationKind:
    """Canonical notification kinds; each maps to an email template directory."""

    VERIFY_EMAIL = "verify_email"
    RESET_PASSWORD = "reset_password"
    REQUEST_ACCEPTED = "request_accepted"
    REQUEST_COMPLETED = "request_completed"
    REQUEST_CONFIRMED = "request_confirmed"
    REQUEST_DISPUTED = "request_disputed"
    REQUEST_CANCELLED = "request_cancelled"
    REQUEST_ASSIGNED = "request_assigned"


ALL_KINDS = {
    NotificationKind.VERIFY_EMAIL,
    NotificationKind.RESET_PASSWORD,
    NotificationKind.REQUEST_ACCEPTED,
    NotificationKind.REQUEST_COMPLETED,
    NotificationKind.REQUEST_CONFIRMED,
    NotificationKind.REQUEST_DISPUTED,
    NotificationKind.REQUEST_CANCELLED,
    NotificationKind.REQUEST_ASSIGNED,
}


class NotificationSender(Protocol):
    def notify(
        self, account_id: UUID, kind: str, context: dict[str, Any] | None = None
    ) -> None:
        """Hand a notification off for delivery; never blocks, never raises on delivery."""
        ...
