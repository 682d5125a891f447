from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from agrimandi.application.errors import ValidationError
from agrimandi.application.services.authorization import Principal
from agrimandi.application.use_cases.auth import list_accounts
from agrimandi.domain.value_objects.role import Role
from agrimandi.interfaces.http.deps import get_principal, get_uow
from agrimandi.interfaces.http.schemas.auth import AccountResponse

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=list[AccountResponse])
async def list_all(
    role: str | None = Query(None),
    principal: Principal = Depends(get_principal),
    uow=Depends(get_uow),
) -> list[AccountResponse]:
    role_filter = Role.parse(role) if role else None
    if role and role_filter is None:
        raise ValidationError("Unknown role", details={"role": role})
    accounts = await list_accounts.execute(uow=uow, principal=principal, role=role_filter)
    return [AccountResponse.model_validate(account) for account in accounts]
