from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4


@dataclass(slots=True)
class Commodity:
    id: UUID
    name: str
    price: Decimal
    change: Decimal = Decimal("0")
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(cls, *, name: str, price: Decimal) -> Commodity:
        return cls(
            id=uuid4(),
            name=name,
            price=price,
            change=Decimal("0"),
            last_updated=datetime.now(timezone.utc),
        )

    def repriced(self, new_price: Decimal, *, at: datetime) -> Commodity:
        """Return a copy carrying the new price and the delta from the old one."""
        return Commodity(
            id=self.id,
            name=self.name,
            price=new_price,
            change=new_price - self.price,
            last_updated=at,
        )
