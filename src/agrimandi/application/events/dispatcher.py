from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable
from uuid import UUID

from agrimandi.application.events.models import (
    AccountRegisteredEvent,
    PasswordResetRequestedEvent,
    RequestTransitionedEvent,
)
from agrimandi.application.notifications.types import NotificationKind, NotificationSender
from agrimandi.domain.value_objects.request_status import RequestAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedNotification:
    account_id: UUID
    kind: str
    context: dict[str, Any] = field(default_factory=dict)


def _request_context(e: RequestTransitionedEvent) -> dict[str, Any]:
    return {
        "request_id": str(e.request_id),
        "crop": e.crop,
        "quantity": str(e.quantity),
        "actor_role": e.actor_role.value,
        "reason": e.reason,
    }


def _for_transition(e: RequestTransitionedEvent) -> list[PlannedNotification]:
    ctx = _request_context(e)
    if e.action is RequestAction.ACCEPT:
        return [PlannedNotification(e.buyer_id, NotificationKind.REQUEST_ACCEPTED, ctx)]
    if e.action is RequestAction.COMPLETE:
        return [PlannedNotification(e.buyer_id, NotificationKind.REQUEST_COMPLETED, ctx)]
    if e.action is RequestAction.CONFIRM and e.farmer_id:
        return [PlannedNotification(e.farmer_id, NotificationKind.REQUEST_CONFIRMED, ctx)]
    if e.action is RequestAction.DENY and e.farmer_id:
        return [PlannedNotification(e.farmer_id, NotificationKind.REQUEST_DISPUTED, ctx)]
    if e.action is RequestAction.CANCEL:
        recipients = {e.buyer_id, e.farmer_id} - {e.actor_id, None}
        return [
            PlannedNotification(account_id, NotificationKind.REQUEST_CANCELLED, ctx)
            for account_id in sorted(recipients, key=str)
        ]
    if e.action is RequestAction.REASSIGN and e.farmer_id:
        planned = [PlannedNotification(e.farmer_id, NotificationKind.REQUEST_ASSIGNED, ctx)]
        planned.append(PlannedNotification(e.buyer_id, NotificationKind.REQUEST_ACCEPTED, ctx))
        return planned
    # Reactivation goes back to the open pool; nobody is told.
    return []


def build_notifications(event: object) -> list[PlannedNotification]:
    if isinstance(event, RequestTransitionedEvent):
        return _for_transition(event)
    if isinstance(event, AccountRegisteredEvent):
        return [
            PlannedNotification(
                event.account_id, NotificationKind.VERIFY_EMAIL, {"token": event.token}
            )
        ]
    if isinstance(event, PasswordResetRequestedEvent):
        return [
            PlannedNotification(
                event.account_id, NotificationKind.RESET_PASSWORD, {"token": event.token}
            )
        ]
    logger.debug("No notifications for event %s", type(event).__name__)
    return []


def dispatch_events(sender: NotificationSender | None, events: Iterable[object]) -> None:
    """
    Hand post-commit events to the notification sender.
    Only enqueues; delivery happens on the sender's worker.
    """
    events = list(events)
    if not events or sender is None:
        return
    for event in events:
        try:
            for planned in build_notifications(event):
                sender.notify(planned.account_id, planned.kind, planned.context)
        except Exception as e:
            logger.error(
                "Error dispatching event %s: %s", type(event).__name__, e, exc_info=True
            )
