from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from agrimandi.domain.value_objects.request_status import RequestAction
from agrimandi.domain.value_objects.role import Role


@dataclass(frozen=True)
class RequestTransitionedEvent:
    request_id: UUID
    action: RequestAction
    actor_id: UUID
    actor_role: Role
    buyer_id: UUID
    crop: str
    quantity: Decimal | str
    farmer_id: UUID | None = None
    previous_farmer_id: UUID | None = None
    reason: str | None = None


@dataclass(frozen=True)
class AccountRegisteredEvent:
    account_id: UUID
    token: str


@dataclass(frozen=True)
class PasswordResetRequestedEvent:
    account_id: UUID
    token: str
