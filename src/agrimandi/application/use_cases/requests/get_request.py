from __future__ import annotations

from uuid import UUID

from agrimandi.application.errors import NotFound
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Operation, Principal, ensure_allowed
from agrimandi.application.services.enrichment import EnrichedRequest, enrich_request


async def execute(
    uow: UnitOfWork, principal: Principal | None, request_id: UUID
) -> EnrichedRequest:
    ensure_allowed(principal, Operation.VIEW_REQUEST)
    request = await uow.connection_requests.get(request_id)
    if not request:
        raise NotFound("Request not found")
    ensure_allowed(principal, Operation.VIEW_REQUEST, request)
    return await enrich_request(uow.accounts, request, viewer=principal)
