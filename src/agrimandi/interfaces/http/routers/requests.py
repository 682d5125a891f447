from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from agrimandi.application.events.dispatcher import dispatch_events
from agrimandi.application.services.authorization import Principal
from agrimandi.application.services.enrichment import enrich_request
from agrimandi.application.use_cases.requests import (
    create_request,
    get_request,
    list_all_requests,
    list_my_requests,
    reassign_request,
    transition_request,
)
from agrimandi.domain.models.connection_request import ConnectionRequest
from agrimandi.domain.value_objects.request_status import RequestAction, RequestStatus
from agrimandi.interfaces.http.deps import get_notification_sender, get_principal, get_uow
from agrimandi.interfaces.http.schemas.requests import (
    DenyPayload,
    EnrichedRequestResponse,
    ReassignPayload,
    RequestActionPayload,
    RequestCreate,
    RequestCreated,
)

router = APIRouter(prefix="/requests", tags=["requests"])


async def _respond(uow, principal: Principal, request: ConnectionRequest, sender) -> EnrichedRequestResponse:
    # Events are only handed off once the transition is committed.
    dispatch_events(sender, uow.drain_events())
    enriched = await enrich_request(uow.accounts, request, viewer=principal)
    return EnrichedRequestResponse.from_enriched(enriched)


async def _transition(
    uow, principal: Principal, request_id: UUID, payload: transition_request.TransitionInput, sender
) -> EnrichedRequestResponse:
    updated = await transition_request.execute(uow, principal, request_id, payload)
    return await _respond(uow, principal, updated, sender)


@router.post("", response_model=RequestCreated, status_code=status.HTTP_201_CREATED)
async def create(
    payload: RequestCreate,
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
) -> RequestCreated:
    created = await create_request.execute(
        uow,
        principal,
        create_request.CreateRequestInput(
            crop=payload.crop,
            quantity=payload.quantity,
            price=payload.price,
            contact=payload.contact,
        ),
    )
    return RequestCreated(id=created.id)


@router.get("/mine", response_model=list[EnrichedRequestResponse])
async def list_mine(
    principal: Principal = Depends(get_principal), uow=Depends(get_uow)
) -> list[EnrichedRequestResponse]:
    items = await list_my_requests.execute(uow, principal)
    return [EnrichedRequestResponse.from_enriched(item) for item in items]


@router.get("", response_model=list[EnrichedRequestResponse])
async def list_all(
    status_filter: RequestStatus | None = Query(None, alias="status"),
    crop: str | None = Query(None),
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
) -> list[EnrichedRequestResponse]:
    items = await list_all_requests.execute(uow, principal, status=status_filter, crop=crop)
    return [EnrichedRequestResponse.from_enriched(item) for item in items]


@router.get("/{request_id}", response_model=EnrichedRequestResponse)
async def get_one(
    request_id: UUID, principal: Principal = Depends(get_principal), uow=Depends(get_uow)
) -> EnrichedRequestResponse:
    item = await get_request.execute(uow, principal, request_id)
    return EnrichedRequestResponse.from_enriched(item)


@router.patch("/{request_id}", response_model=EnrichedRequestResponse)
async def update_status(
    request_id: UUID,
    payload: RequestActionPayload,
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
    sender=Depends(get_notification_sender),
) -> EnrichedRequestResponse:
    return await _transition(
        uow,
        principal,
        request_id,
        transition_request.TransitionInput(action=RequestAction(payload.action)),
        sender,
    )


@router.post("/{request_id}/confirm", response_model=EnrichedRequestResponse)
async def confirm(
    request_id: UUID,
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
    sender=Depends(get_notification_sender),
) -> EnrichedRequestResponse:
    return await _transition(
        uow,
        principal,
        request_id,
        transition_request.TransitionInput(action=RequestAction.CONFIRM),
        sender,
    )


@router.post("/{request_id}/deny", response_model=EnrichedRequestResponse)
async def deny(
    request_id: UUID,
    payload: DenyPayload | None = None,
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
    sender=Depends(get_notification_sender),
) -> EnrichedRequestResponse:
    reason = payload.reason.strip() if payload and payload.reason else None
    return await _transition(
        uow,
        principal,
        request_id,
        transition_request.TransitionInput(action=RequestAction.DENY, reason=reason or None),
        sender,
    )


@router.post("/{request_id}/reactivate", response_model=EnrichedRequestResponse)
async def reactivate(
    request_id: UUID,
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
    sender=Depends(get_notification_sender),
) -> EnrichedRequestResponse:
    return await _transition(
        uow,
        principal,
        request_id,
        transition_request.TransitionInput(action=RequestAction.REACTIVATE),
        sender,
    )


@router.post("/{request_id}/reassign", response_model=EnrichedRequestResponse)
async def reassign(
    request_id: UUID,
    payload: ReassignPayload,
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
    sender=Depends(get_notification_sender),
) -> EnrichedRequestResponse:
    updated = await reassign_request.execute(uow, principal, request_id, payload.farmer_id)
    return await _respond(uow, principal, updated, sender)
