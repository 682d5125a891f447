from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from agrimandi.domain.value_objects.role import Role


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str
    email: EmailStr
    role: Role
    contact: str | None = None
    is_verified: bool
    created_at: datetime


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    # Unknown roles fall back to buyer, so this stays a plain string.
    role: str | None = None
    contact: str | None = Field(default=None, max_length=64)
    admin_code: str | None = None


class RegisterResponse(BaseModel):
    account: AccountResponse
    message: str = "Registered. Check your email to verify your account."


class VerifyEmailResponse(BaseModel):
    account: AccountResponse
    message: str = "Email verified. You can now log in."


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str
    account: AccountResponse


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=6)


class MessageResponse(BaseModel):
    message: str
