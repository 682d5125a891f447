from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from agrimandi.application.events.dispatcher import dispatch_events
from agrimandi.application.use_cases.auth import (
    forgot_password,
    get_me,
    login_account,
    register_account,
    reset_password,
    verify_email,
)
from agrimandi.application.services.authorization import Principal
from agrimandi.config.settings import Settings
from agrimandi.infrastructure.auth.jwt_service import JWTService
from agrimandi.infrastructure.auth.password import PasswordHasher
from agrimandi.interfaces.http.deps import (
    get_app_settings,
    get_jwt_service,
    get_notification_sender,
    get_password_hasher,
    get_principal,
    get_uow,
)
from agrimandi.interfaces.http.schemas.auth import (
    AccountResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    VerifyEmailResponse,
)

router = APIRouter(prefix="", tags=["auth"])
logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If that email is registered, a reset link has been sent."


@router.post("/auth/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    uow=Depends(get_uow),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    settings: Settings = Depends(get_app_settings),
    sender=Depends(get_notification_sender),
) -> RegisterResponse:
    admin_code = settings.admin_registration_code
    result = await register_account.execute(
        uow=uow,
        payload=register_account.RegisterInput(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            role=payload.role,
            contact=payload.contact,
            admin_code=payload.admin_code,
        ),
        password_hasher=password_hasher,
        admin_registration_code=admin_code.get_secret_value() if admin_code else None,
        token_ttl_minutes=settings.verification_token_ttl_minutes,
    )
    dispatch_events(sender, uow.drain_events())
    return RegisterResponse(account=AccountResponse.model_validate(result.account))


@router.get("/auth/verify-email", response_model=VerifyEmailResponse)
async def verify(token: str = Query(..., min_length=1), uow=Depends(get_uow)) -> VerifyEmailResponse:
    account = await verify_email.execute(uow=uow, token=token)
    return VerifyEmailResponse(account=AccountResponse.model_validate(account))


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    uow=Depends(get_uow),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> LoginResponse:
    result = await login_account.execute(
        uow=uow,
        payload=login_account.LoginInput(email=payload.email, password=payload.password),
        password_hasher=password_hasher,
        jwt_service=jwt_service,
    )
    return LoginResponse(
        access_token=result.access_token,
        token_type=result.token_type,
        account=AccountResponse.model_validate(result.account),
    )


@router.post("/auth/forgot-password", response_model=MessageResponse)
async def request_password_reset(
    payload: ForgotPasswordRequest,
    uow=Depends(get_uow),
    settings: Settings = Depends(get_app_settings),
    sender=Depends(get_notification_sender),
) -> MessageResponse:
    await forgot_password.execute(
        uow=uow, email=payload.email, token_ttl_minutes=settings.verification_token_ttl_minutes
    )
    dispatch_events(sender, uow.drain_events())
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/auth/reset-password", response_model=MessageResponse)
async def reset(
    payload: ResetPasswordRequest,
    uow=Depends(get_uow),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> MessageResponse:
    await reset_password.execute(
        uow=uow,
        payload=reset_password.ResetPasswordInput(token=payload.token, password=payload.password),
        password_hasher=password_hasher,
    )
    return MessageResponse(message="Password updated. You can now log in.")


@router.get("/me", response_model=AccountResponse)
async def read_me(
    principal: Principal = Depends(get_principal), uow=Depends(get_uow)
) -> AccountResponse:
    account = await get_me.execute(uow=uow, principal=principal)
    return AccountResponse.model_validate(account)
