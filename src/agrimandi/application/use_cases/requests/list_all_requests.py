from __future__ import annotations

from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Operation, Principal, ensure_allowed
from agrimandi.application.services.enrichment import EnrichedRequest, enrich_requests
from agrimandi.domain.value_objects.request_status import RequestStatus


async def execute(
    uow: UnitOfWork,
    principal: Principal | None,
    *,
    status: RequestStatus | None = None,
    crop: str | None = None,
) -> list[EnrichedRequest]:
    ensure_allowed(principal, Operation.LIST_ALL_REQUESTS)
    crop = crop.strip() if crop else None
    requests = await uow.connection_requests.list(status=status, crop=crop or None)
    return await enrich_requests(uow.accounts, requests, viewer=principal)
