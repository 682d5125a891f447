from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DECIMAL, DateTime, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from agrimandi.infrastructure.db.base import Base


class CommodityORM(Base):
    __tablename__ = "commodities"
    __table_args__ = (UniqueConstraint("name", name="ux_commodities_name"),)

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[Decimal] = mapped_column(DECIMAL(14, 2), nullable=False)
    change: Mapped[Decimal] = mapped_column(DECIMAL(14, 2), nullable=False, default=0)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
