from __future__ import annotations

from dataclasses import dataclass

from agrimandi.application.errors import ValidationError
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.application.use_cases.auth.register_account import MIN_PASSWORD_LENGTH
from agrimandi.domain.models.one_time_token import TokenPurpose
from agrimandi.infrastructure.auth.password import PasswordHasher


@dataclass(slots=True)
class ResetPasswordInput:
    token: str
    password: str


async def execute(
    *, uow: UnitOfWork, payload: ResetPasswordInput, password_hasher: PasswordHasher
) -> None:
    if len(payload.password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    record = await uow.one_time_tokens.get_by_token(payload.token, TokenPurpose.RESET_PASSWORD)
    if not record or not record.is_valid():
        raise ValidationError("Invalid or expired reset token")
    if not await uow.one_time_tokens.mark_as_used(record.id):
        raise ValidationError("Invalid or expired reset token")
    await uow.accounts.update_password(record.account_id, password_hasher.hash(payload.password))
    await uow.commit()
