from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from agrimandi.domain.value_objects.role import Role


@dataclass(slots=True)
class Account:
    id: UUID
    name: str
    email: str
    hashed_password: str
    role: Role = Role.BUYER
    contact: str | None = None
    is_verified: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        *,
        name: str,
        email: str,
        hashed_password: str,
        role: Role = Role.BUYER,
        contact: str | None = None,
        is_verified: bool = False,
    ) -> Account:
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid4(),
            name=name,
            email=email.lower(),
            hashed_password=hashed_password,
            role=role,
            contact=contact,
            is_verified=is_verified,
            created_at=now,
            updated_at=now,
        )
