from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from uuid import UUID

from agrimandi.application.interfaces.repositories.accounts import AccountRepository
from agrimandi.application.services.authorization import Operation, Principal, authorize
from agrimandi.domain.models.account import Account
from agrimandi.domain.models.connection_request import ConnectionRequest
from agrimandi.domain.services.request_lifecycle import can_apply
from agrimandi.domain.value_objects.request_status import RequestAction


@dataclass(frozen=True, slots=True)
class AccountProfile:
    id: UUID
    name: str
    contact: str | None = None

    @classmethod
    def from_account(cls, account: Account) -> AccountProfile:
        return cls(id=account.id, name=account.name, contact=account.contact)


@dataclass(slots=True)
class EnrichedRequest:
    request: ConnectionRequest
    buyer: AccountProfile | None = None
    farmer: AccountProfile | None = None
    allowed_actions: list[RequestAction] = field(default_factory=list)


def allowed_actions(principal: Principal | None, request: ConnectionRequest) -> list[RequestAction]:
    """Actions the viewer could fire right now, per the transition table and the guard."""
    if principal is None:
        return []
    return [
        action
        for action in RequestAction
        if can_apply(action, request, principal.role)
        and authorize(principal, Operation.for_action(action), request).allowed
    ]


async def enrich_requests(
    accounts: AccountRepository,
    requests: Sequence[ConnectionRequest],
    *,
    viewer: Principal | None = None,
) -> list[EnrichedRequest]:
    ids: set[UUID] = set()
    for item in requests:
        ids.add(item.buyer_id)
        if item.farmer_id is not None:
            ids.add(item.farmer_id)
    profiles = await _load_profiles(accounts, ids)
    return [
        EnrichedRequest(
            request=item,
            buyer=profiles.get(item.buyer_id),
            farmer=profiles.get(item.farmer_id) if item.farmer_id is not None else None,
            allowed_actions=allowed_actions(viewer, item),
        )
        for item in requests
    ]


async def enrich_request(
    accounts: AccountRepository,
    request: ConnectionRequest,
    *,
    viewer: Principal | None = None,
) -> EnrichedRequest:
    enriched = await enrich_requests(accounts, [request], viewer=viewer)
    return enriched[0]


async def _load_profiles(
    accounts: AccountRepository, ids: Iterable[UUID]
) -> dict[UUID, AccountProfile]:
    ids = list(ids)
    if not ids:
        return {}
    # Accounts that no longer exist are simply absent from the result.
    found = await accounts.get_many(ids)
    return {account.id: AccountProfile.from_account(account) for account in found}
