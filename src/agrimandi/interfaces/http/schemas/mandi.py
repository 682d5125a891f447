from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class MandiPriceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    state: str
    district: str
    crop: str
    today_price: Decimal
    yesterday_price: Decimal | None = None
