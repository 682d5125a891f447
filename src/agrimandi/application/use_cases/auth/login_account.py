from __future__ import annotations

from dataclasses import dataclass

from agrimandi.application.errors import AuthError, PermissionDenied
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.domain.models.account import Account
from agrimandi.infrastructure.auth.jwt_service import JWTService
from agrimandi.infrastructure.auth.password import PasswordHasher


@dataclass(slots=True)
class LoginInput:
    email: str
    password: str


@dataclass(slots=True)
class LoginResult:
    access_token: str
    token_type: str
    account: Account


async def execute(
    *,
    uow: UnitOfWork,
    payload: LoginInput,
    password_hasher: PasswordHasher,
    jwt_service: JWTService,
) -> LoginResult:
    account = await uow.accounts.get_by_email(payload.email.strip().lower())
    if not account:
        raise AuthError("Invalid credentials")
    if not password_hasher.verify(payload.password, account.hashed_password):
        raise AuthError("Invalid credentials")
    if not account.is_verified:
        raise PermissionDenied("Please verify your email first", reason="unverified")

    token = jwt_service.issue_for(account)
    return LoginResult(access_token=token, token_type="bearer", account=account)
