from __future__ import annotations

from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Operation, Principal, ensure_allowed
from agrimandi.application.services.enrichment import EnrichedRequest, enrich_requests


async def execute(uow: UnitOfWork, principal: Principal | None) -> list[EnrichedRequest]:
    ensure_allowed(principal, Operation.LIST_MY_REQUESTS)
    requests = await uow.connection_requests.list_for_buyer(principal.id)
    return await enrich_requests(uow.accounts, requests, viewer=principal)
