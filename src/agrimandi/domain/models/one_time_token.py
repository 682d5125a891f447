from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from agrimandi.utils.datetime_tz import ensure_utc


class TokenPurpose:
    VERIFY_EMAIL = "verify_email"
    RESET_PASSWORD = "reset_password"


@dataclass(slots=True)
class OneTimeToken:
    """
    One-time use token for account verification and password reset.
    Invalidated after first use or once expires_at has passed.
    """

    id: UUID
    token: str
    account_id: UUID
    purpose: str
    is_used: bool = False
    used_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime | None = None  # None = no expiration

    @classmethod
    def create(
        cls,
        *,
        token: str,
        account_id: UUID,
        purpose: str,
        expires_in_minutes: int | None = None,
    ) -> OneTimeToken:
        now = datetime.now(timezone.utc)
        expires_at = None
        if expires_in_minutes is not None:
            expires_at = now + timedelta(minutes=expires_in_minutes)
        return cls(
            id=uuid4(),
            token=token,
            account_id=account_id,
            purpose=purpose,
            is_used=False,
            used_at=None,
            created_at=now,
            expires_at=expires_at,
        )

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) > ensure_utc(self.expires_at)

    def is_valid(self) -> bool:
        """Check if the token is valid for use (not used and not expired)"""
        return not self.is_used and not self.is_expired()
