from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from agrimandi.application.services.authorization import Principal
from agrimandi.application.use_cases.commodities import list_commodities, update_price
from agrimandi.infrastructure.broadcast.commodity_channel import CommodityChannel
from agrimandi.infrastructure.db.session import SQLAlchemyUnitOfWork
from agrimandi.interfaces.http.deps import get_commodity_channel, get_principal, get_uow
from agrimandi.interfaces.http.schemas.commodities import CommodityResponse, PriceUpdate

router = APIRouter(prefix="/commodities", tags=["commodities"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[CommodityResponse])
async def list_all(uow=Depends(get_uow)) -> list[CommodityResponse]:
    items = await list_commodities.execute(uow)
    return [CommodityResponse.model_validate(item) for item in items]


@router.put("/{commodity_id}/price", response_model=CommodityResponse)
async def set_price(
    commodity_id: UUID,
    payload: PriceUpdate,
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
    channel: CommodityChannel = Depends(get_commodity_channel),
) -> CommodityResponse:
    async def apply_update():
        return await update_price.execute(
            uow, principal, commodity_id, update_price.UpdatePriceInput(price=payload.price)
        )

    updated = await channel.publish(apply_update)
    logger.info("Commodity %s repriced by %s", updated.name, principal.id)
    return CommodityResponse.model_validate(updated)


@router.websocket("/ws")
async def stream_prices(websocket: WebSocket) -> None:
    """Initial snapshot on connect, then one message per price change."""
    channel: CommodityChannel = websocket.app.state.commodity_channel
    session_factory = websocket.app.state.session_factory

    async def load_snapshot():
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            return await list_commodities.execute(uow)

    await websocket.accept()
    try:
        await channel.subscribe(websocket, load_snapshot)
        while True:
            # Inbound frames are ignored; receiving only detects disconnects.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await channel.unsubscribe(websocket)
