from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from agrimandi.application.use_cases.market import list_mandi_prices
from agrimandi.interfaces.http.deps import get_uow
from agrimandi.interfaces.http.schemas.mandi import MandiPriceResponse

router = APIRouter(prefix="/mandi", tags=["mandi"])


@router.get("/prices", response_model=list[MandiPriceResponse])
async def list_prices(
    state: str | None = Query(None),
    crop: str | None = Query(None),
    uow=Depends(get_uow),
) -> list[MandiPriceResponse]:
    items = await list_mandi_prices.execute(uow, state=state, crop=crop)
    return [MandiPriceResponse.model_validate(item) for item in items]


@router.get("/prices/{state}", response_model=list[MandiPriceResponse])
async def list_prices_for_state(
    state: str, crop: str | None = Query(None), uow=Depends(get_uow)
) -> list[MandiPriceResponse]:
    items = await list_mandi_prices.execute(uow, state=state, crop=crop)
    return [MandiPriceResponse.model_validate(item) for item in items]
