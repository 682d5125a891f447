from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from agrimandi.domain.models.commodity import Commodity


class CommodityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str
    price: Decimal
    change: Decimal
    last_updated: datetime


class PriceUpdate(BaseModel):
    price: Decimal = Field(ge=0)


def serialize_commodity(commodity: Commodity) -> dict[str, Any]:
    """JSON-ready shape shared by the REST list and the socket messages."""
    return CommodityResponse.model_validate(commodity).model_dump(mode="json")
