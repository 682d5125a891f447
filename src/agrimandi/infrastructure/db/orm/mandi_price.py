from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import DECIMAL, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from agrimandi.infrastructure.db.base import Base


class MandiPriceORM(Base):
    __tablename__ = "mandi_prices"
    __table_args__ = (Index("ix_mandi_prices_state_crop", "state", "crop"),)

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    state: Mapped[str] = mapped_column(String(120), nullable=False)
    district: Mapped[str] = mapped_column(String(120), nullable=False)
    crop: Mapped[str] = mapped_column(String(120), nullable=False)
    today_price: Mapped[Decimal] = mapped_column(DECIMAL(14, 2), nullable=False)
    yesterday_price: Mapped[Decimal | None] = mapped_column(DECIMAL(14, 2), nullable=True)
