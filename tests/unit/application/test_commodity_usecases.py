from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from agrimandi.application.errors import NotFound, PermissionDenied, ValidationError
from agrimandi.application.services.authorization import Principal
from agrimandi.application.use_cases.commodities import list_commodities, update_price
from agrimandi.application.use_cases.market import list_mandi_prices
from agrimandi.domain.models.commodity import Commodity
from agrimandi.domain.value_objects.role import Role


class StubCommodities:
    def __init__(self, *items: Commodity) -> None:
        self.rows = {c.id: c for c in items}
        self.saved: list[Commodity] = []

    async def get(self, commodity_id):
        return self.rows.get(commodity_id)

    async def list(self):
        return sorted(self.rows.values(), key=lambda c: c.name)

    async def save_price(self, commodity):
        self.saved.append(commodity)
        self.rows[commodity.id] = commodity
        return commodity


class StubMandiPrices:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    async def list(self, *, state=None, crop=None):
        self.calls.append({"state": state, "crop": crop})
        return []


def make_uow(commodities=None, mandi_prices=None):
    async def commit():
        return None

    return SimpleNamespace(
        commodities=commodities or StubCommodities(),
        mandi_prices=mandi_prices or StubMandiPrices(),
        commit=commit,
    )


ADMIN = Principal(id=uuid4(), role=Role.ADMIN)


@pytest.mark.asyncio
async def test_update_price_records_change():
    wheat = Commodity.create(name="Wheat", price=Decimal("2100"))
    uow = make_uow(StubCommodities(wheat))
    at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

    updated = await update_price.execute(
        uow, ADMIN, wheat.id, update_price.UpdatePriceInput(price=Decimal("2050")), now=at
    )

    assert updated.price == Decimal("2050")
    assert updated.change == Decimal("-50")
    assert updated.last_updated == at
    assert (await list_commodities.execute(uow))[0].price == Decimal("2050")


@pytest.mark.asyncio
async def test_update_price_is_admin_only():
    wheat = Commodity.create(name="Wheat", price=Decimal("2100"))
    commodities = StubCommodities(wheat)
    with pytest.raises(PermissionDenied):
        await update_price.execute(
            make_uow(commodities),
            Principal(id=uuid4(), role=Role.FARMER),
            wheat.id,
            update_price.UpdatePriceInput(price=Decimal("1")),
        )
    assert commodities.saved == []


@pytest.mark.asyncio
async def test_update_price_validates():
    with pytest.raises(ValidationError):
        await update_price.execute(
            make_uow(), ADMIN, uuid4(), update_price.UpdatePriceInput(price=Decimal("-1"))
        )
    with pytest.raises(NotFound):
        await update_price.execute(
            make_uow(), ADMIN, uuid4(), update_price.UpdatePriceInput(price=Decimal("10"))
        )


@pytest.mark.asyncio
async def test_mandi_filters_are_trimmed():
    prices = StubMandiPrices()
    uow = make_uow(mandi_prices=prices)
    await list_mandi_prices.execute(uow, state=" Punjab ", crop="  ")
    assert prices.calls == [{"state": "Punjab", "crop": None}]
