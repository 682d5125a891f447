from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agrimandi.application.errors import ConflictError
from agrimandi.application.interfaces.repositories.one_time_tokens import OneTimeTokenRepository
from agrimandi.domain.models.one_time_token import OneTimeToken
from agrimandi.infrastructure.db.orm.one_time_token import OneTimeTokenORM
from agrimandi.utils.datetime_tz import ensure_utc, utcnow


class OneTimeTokensSQLAlchemyRepository(OneTimeTokenRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: OneTimeTokenORM) -> OneTimeToken:
        return OneTimeToken(
            id=orm.id,
            token=orm.token,
            account_id=orm.account_id,
            purpose=orm.purpose,
            is_used=orm.is_used,
            used_at=ensure_utc(orm.used_at),
            created_at=ensure_utc(orm.created_at),
            expires_at=ensure_utc(orm.expires_at),
        )

    async def add(self, token: OneTimeToken) -> OneTimeToken:
        orm = OneTimeTokenORM(
            id=token.id,
            token=token.token,
            account_id=token.account_id,
            purpose=token.purpose,
            is_used=token.is_used,
            used_at=token.used_at,
            created_at=token.created_at,
            expires_at=token.expires_at,
        )
        self.session.add(orm)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Token already exists") from exc
        return self._to_domain(orm)

    async def get_by_token(self, token: str, purpose: str) -> OneTimeToken | None:
        stmt = select(OneTimeTokenORM).where(
            OneTimeTokenORM.token == token, OneTimeTokenORM.purpose == purpose
        )
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None

    async def mark_as_used(self, token_id: UUID) -> bool:
        """Consume a token; False when it was already used."""
        stmt = (
            update(OneTimeTokenORM)
            .where(OneTimeTokenORM.id == token_id)
            .where(OneTimeTokenORM.is_used == False)  # noqa: E712
            .values(is_used=True, used_at=utcnow())
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def invalidate_all_for_purpose(self, account_id: UUID, purpose: str) -> None:
        stmt = (
            update(OneTimeTokenORM)
            .where(
                OneTimeTokenORM.account_id == account_id,
                OneTimeTokenORM.purpose == purpose,
                OneTimeTokenORM.is_used == False,  # noqa: E712
            )
            .values(is_used=True, used_at=utcnow())
        )
        await self.session.execute(stmt)
