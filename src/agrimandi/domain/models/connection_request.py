from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from agrimandi.domain.value_objects.request_status import CancelledBy, RequestStatus

# Fields written by lifecycle transitions; everything else is fixed at creation.
TRANSITION_FIELDS = (
    "status",
    "farmer_id",
    "accepted_at",
    "completed_at",
    "buyer_confirmed_at",
    "cancelled_at",
    "disputed_at",
    "cancelled_by",
    "dispute_reason",
)

TIMESTAMP_FIELDS = (
    "accepted_at",
    "completed_at",
    "buyer_confirmed_at",
    "cancelled_at",
    "disputed_at",
)


@dataclass(slots=True)
class ConnectionRequest:
    id: UUID
    buyer_id: UUID
    crop: str
    quantity: Decimal
    status: RequestStatus = RequestStatus.PENDING
    farmer_id: UUID | None = None
    price: Decimal | None = None
    contact: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    accepted_at: datetime | None = None
    completed_at: datetime | None = None
    buyer_confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    disputed_at: datetime | None = None
    cancelled_by: CancelledBy | None = None
    dispute_reason: str | None = None
    version: int = 1

    @classmethod
    def create(
        cls,
        *,
        buyer_id: UUID,
        crop: str,
        quantity: Decimal,
        price: Decimal | None = None,
        contact: str | None = None,
    ) -> ConnectionRequest:
        return cls(
            id=uuid4(),
            buyer_id=buyer_id,
            crop=crop,
            quantity=quantity,
            price=price,
            contact=contact,
            status=RequestStatus.PENDING,
            farmer_id=None,
            created_at=datetime.now(timezone.utc),
            version=1,
        )

    def timestamps(self) -> list[datetime]:
        return [value for name in TIMESTAMP_FIELDS if (value := getattr(self, name)) is not None]

    def is_owned_by(self, account_id: UUID) -> bool:
        return self.buyer_id == account_id

    def is_assigned_to(self, account_id: UUID) -> bool:
        return self.farmer_id is not None and self.farmer_id == account_id
