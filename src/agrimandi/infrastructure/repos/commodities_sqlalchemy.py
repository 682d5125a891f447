from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agrimandi.application.errors import ConflictError
from agrimandi.application.interfaces.repositories.commodities import CommodityRepository
from agrimandi.domain.models.commodity import Commodity
from agrimandi.infrastructure.db.orm.commodity import CommodityORM
from agrimandi.utils.datetime_tz import ensure_utc


class CommoditiesSQLAlchemyRepository(CommodityRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: CommodityORM) -> Commodity:
        return Commodity(
            id=orm.id,
            name=orm.name,
            price=orm.price,
            change=orm.change,
            last_updated=ensure_utc(orm.last_updated),
        )

    async def add(self, commodity: Commodity) -> Commodity:
        orm = CommodityORM(
            id=commodity.id,
            name=commodity.name,
            price=commodity.price,
            change=commodity.change,
            last_updated=commodity.last_updated,
        )
        self.session.add(orm)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Commodity already exists") from exc
        return self._to_domain(orm)

    async def get(self, commodity_id: UUID) -> Commodity | None:
        orm = await self.session.get(CommodityORM, commodity_id)
        return self._to_domain(orm) if orm else None

    async def list(self) -> list[Commodity]:
        result = await self.session.execute(select(CommodityORM).order_by(CommodityORM.name))
        return [self._to_domain(orm) for orm in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(CommodityORM))
        return result.scalar() or 0

    async def save_price(self, commodity: Commodity) -> Commodity | None:
        stmt = (
            update(CommodityORM)
            .where(CommodityORM.id == commodity.id)
            .values(
                price=commodity.price,
                change=commodity.change,
                last_updated=commodity.last_updated,
            )
            .returning(CommodityORM)
        )
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None
