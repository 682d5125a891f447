from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import jwt
from jose.exceptions import JWTError

from agrimandi.application.errors import AuthError
from agrimandi.domain.models.account import Account

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """Decoded bearer token. ``role`` is informational; the stored account wins."""

    account_id: UUID
    email: str | None
    role: str | None
    expires_at: datetime
    raw: dict[str, Any]


class JWTService:
    """Signs and checks the bearer tokens handed out at login."""

    def __init__(
        self,
        *,
        secret_key: str,
        algorithm: str,
        access_token_expires_minutes: int,
        issuer: str | None = None,
        audience: str | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expires_minutes = access_token_expires_minutes
        self.issuer = issuer
        self.audience = audience

    def issue_for(self, account: Account, *, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(minutes=self.access_token_expires_minutes)
        claims: dict[str, Any] = {
            "sub": str(account.id),
            "email": account.email,
            "role": account.role.value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "typ": ACCESS_TOKEN_TYPE,
        }
        if self.issuer:
            claims["iss"] = self.issuer
        if self.audience:
            claims["aud"] = self.audience
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> AccessClaims:
        try:
            raw = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
            )
        except JWTError as exc:
            raise AuthError("Token validation failed") from exc
        if raw.get("typ") != ACCESS_TOKEN_TYPE:
            raise AuthError("Invalid access token")
        if raw.get("exp") is None:
            raise AuthError("Token missing expiry")
        subject = raw.get("sub")
        if not subject:
            raise AuthError("Token missing subject")
        try:
            account_id = UUID(str(subject))
        except ValueError as exc:
            raise AuthError("Token subject is not a valid UUID") from exc
        return AccessClaims(
            account_id=account_id,
            email=raw.get("email"),
            role=raw.get("role"),
            expires_at=datetime.fromtimestamp(raw["exp"], tz=timezone.utc),
            raw=raw,
        )
