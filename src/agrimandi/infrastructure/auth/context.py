from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from agrimandi.application.services.authorization import Principal
from agrimandi.domain.value_objects.role import Role
from agrimandi.infrastructure.auth.jwt_service import AccessClaims


@dataclass(slots=True)
class AuthContext:
    account_id: UUID
    role: Role
    email: str | None
    claims: AccessClaims

    @property
    def principal(self) -> Principal:
        return Principal(id=self.account_id, role=self.role, email=self.email)
