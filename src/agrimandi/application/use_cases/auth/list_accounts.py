from __future__ import annotations

from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.services.authorization import Operation, Principal, ensure_allowed
from agrimandi.domain.models.account import Account
from agrimandi.domain.value_objects.role import Role


async def execute(
    *, uow: UnitOfWork, principal: Principal | None, role: Role | None = None
) -> list[Account]:
    ensure_allowed(principal, Operation.LIST_ACCOUNTS)
    return await uow.accounts.list(role=role)
