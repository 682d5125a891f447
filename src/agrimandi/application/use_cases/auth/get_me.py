from __future__ import annotations

from agrimandi.application.errors import AuthError, NotFound
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Principal
from agrimandi.domain.models.account import Account


async def execute(*, uow: UnitOfWork, principal: Principal | None) -> Account:
    if principal is None:
        raise AuthError("Authentication required")
    account = await uow.accounts.get(principal.id)
    if not account:
        raise NotFound("Account not found")
    return account
