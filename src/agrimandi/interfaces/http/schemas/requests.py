from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from agrimandi.application.services.enrichment import AccountProfile, EnrichedRequest
from agrimandi.domain.value_objects.request_status import (
    CancelledBy,
    RequestAction,
    RequestStatus,
)


class RequestCreate(BaseModel):
    crop: str = Field(min_length=1, max_length=120)
    quantity: Decimal = Field(gt=0)
    price: Decimal | None = Field(default=None, ge=0)
    contact: str | None = Field(default=None, max_length=64)


class RequestCreated(BaseModel):
    id: UUID


class RequestActionPayload(BaseModel):
    action: Literal["accept", "complete", "cancel"]


class DenyPayload(BaseModel):
    reason: str | None = Field(default=None, max_length=2000)


class ReassignPayload(BaseModel):
    farmer_id: UUID


class ProfileSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str
    contact: str | None = None


class RequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    buyer_id: UUID
    farmer_id: UUID | None
    crop: str
    quantity: Decimal
    price: Decimal | None
    contact: str | None
    status: RequestStatus
    created_at: datetime
    accepted_at: datetime | None
    completed_at: datetime | None
    buyer_confirmed_at: datetime | None
    cancelled_at: datetime | None
    disputed_at: datetime | None
    cancelled_by: CancelledBy | None
    dispute_reason: str | None
    version: int


class EnrichedRequestResponse(RequestResponse):
    buyer: ProfileSchema | None = None
    farmer: ProfileSchema | None = None
    allowed_actions: list[RequestAction] = Field(default_factory=list)

    @classmethod
    def from_enriched(cls, item: EnrichedRequest) -> EnrichedRequestResponse:
        base = RequestResponse.model_validate(item.request).model_dump()
        return cls(
            **base,
            buyer=_profile(item.buyer),
            farmer=_profile(item.farmer),
            allowed_actions=list(item.allowed_actions),
        )


def _profile(profile: AccountProfile | None) -> ProfileSchema | None:
    return ProfileSchema.model_validate(profile) if profile is not None else None
