from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4


@dataclass(slots=True)
class MandiPrice:
    id: UUID
    state: str
    district: str
    crop: str
    today_price: Decimal
    yesterday_price: Decimal | None = None

    @classmethod
    def create(
        cls,
        *,
        state: str,
        district: str,
        crop: str,
        today_price: Decimal,
        yesterday_price: Decimal | None = None,
    ) -> MandiPrice:
        return cls(
            id=uuid4(),
            state=state,
            district=district,
            crop=crop,
            today_price=today_price,
            yesterday_price=yesterday_price,
        )
