from __future__ import annotations

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agrimandi.application.interfaces.repositories.mandi_prices import MandiPriceRepository
from agrimandi.domain.models.mandi_price import MandiPrice
from agrimandi.infrastructure.db.orm.mandi_price import MandiPriceORM


class MandiPricesSQLAlchemyRepository(MandiPriceRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: MandiPriceORM) -> MandiPrice:
        return MandiPrice(
            id=orm.id,
            state=orm.state,
            district=orm.district,
            crop=orm.crop,
            today_price=orm.today_price,
            yesterday_price=orm.yesterday_price,
        )

    async def add(self, price: MandiPrice) -> MandiPrice:
        orm = MandiPriceORM(
            id=price.id,
            state=price.state,
            district=price.district,
            crop=price.crop,
            today_price=price.today_price,
            yesterday_price=price.yesterday_price,
        )
        self.session.add(orm)
        await self.session.flush()
        return self._to_domain(orm)

    async def list(self, *, state: str | None = None, crop: str | None = None) -> list[MandiPrice]:
        conds = []
        if state:
            conds.append(func.lower(MandiPriceORM.state) == state.lower())
        if crop:
            conds.append(func.lower(MandiPriceORM.crop) == crop.lower())
        stmt = select(MandiPriceORM).order_by(
            MandiPriceORM.state, MandiPriceORM.district, MandiPriceORM.crop
        )
        if conds:
            stmt = stmt.where(and_(*conds))
        result = await self.session.execute(stmt)
        return [self._to_domain(orm) for orm in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(MandiPriceORM))
        return result.scalar() or 0
