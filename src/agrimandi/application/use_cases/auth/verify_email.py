from __future__ import annotations

from agrimandi.application.errors import ValidationError
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.domain.models.account import Account
from agrimandi.domain.models.one_time_token import TokenPurpose


async def execute(*, uow: UnitOfWork, token: str) -> Account:
    if not token:
        raise ValidationError("Verification token is required")
    record = await uow.one_time_tokens.get_by_token(token, TokenPurpose.VERIFY_EMAIL)
    if not record or not record.is_valid():
        raise ValidationError("Invalid or expired verification token")
    # Consuming the token is conditional, so a replayed link verifies once.
    if not await uow.one_time_tokens.mark_as_used(record.id):
        raise ValidationError("Invalid or expired verification token")
    await uow.accounts.mark_verified(record.account_id)
    account = await uow.accounts.get(record.account_id)
    if not account:
        raise ValidationError("Invalid or expired verification token")
    await uow.commit()
    return account
