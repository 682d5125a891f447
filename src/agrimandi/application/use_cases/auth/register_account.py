from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from secrets import token_urlsafe

from agrimandi.application.errors import ConflictError, PermissionDenied, ValidationError
from agrimandi.application.events.models import AccountRegisteredEvent
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.domain.models.account import Account
from agrimandi.domain.models.one_time_token import OneTimeToken, TokenPurpose
from agrimandi.domain.value_objects.role import Role
from agrimandi.infrastructure.auth.password import PasswordHasher

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass(slots=True)
class RegisterInput:
    name: str
    email: str
    password: str
    role: str | None = None
    contact: str | None = None
    admin_code: str | None = None


@dataclass(slots=True)
class RegisterResult:
    account: Account
    verification_token: str


def resolve_role(requested: str | None, admin_code: str | None, expected_code: str | None) -> Role:
    # Unknown roles fall back to buyer rather than failing registration.
    role = Role.parse(requested, default=Role.BUYER)
    if role is Role.ADMIN:
        if not expected_code:
            raise PermissionDenied("Admin registration is disabled", reason="wrong_role")
        if not admin_code or not hmac.compare_digest(admin_code, expected_code):
            raise PermissionDenied("Invalid admin registration code", reason="wrong_role")
    return role


async def execute(
    *,
    uow: UnitOfWork,
    payload: RegisterInput,
    password_hasher: PasswordHasher,
    admin_registration_code: str | None = None,
    token_ttl_minutes: int = 24 * 60,
) -> RegisterResult:
    name = (payload.name or "").strip()
    email = (payload.email or "").strip().lower()
    if not name or not email:
        raise ValidationError("name and email are required")
    if len(payload.password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    role = resolve_role(payload.role, payload.admin_code, admin_registration_code)

    if await uow.accounts.get_by_email(email):
        raise ConflictError("Email already registered")

    account = Account.create(
        name=name,
        email=email,
        hashed_password=password_hasher.hash(payload.password),
        role=role,
        contact=payload.contact,
        is_verified=False,
    )
    created = await uow.accounts.add(account)
    token = OneTimeToken.create(
        token=token_urlsafe(32),
        account_id=created.id,
        purpose=TokenPurpose.VERIFY_EMAIL,
        expires_in_minutes=token_ttl_minutes,
    )
    await uow.one_time_tokens.add(token)
    uow.add_event(AccountRegisteredEvent(account_id=created.id, token=token.token))
    await uow.commit()
    logger.info("Registered %s account %s", role.value, created.id)
    return RegisterResult(account=created, verification_token=token.token)
