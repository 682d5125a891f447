from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agrimandi.application.errors import ConflictError
from agrimandi.application.interfaces.repositories.accounts import AccountRepository
from agrimandi.domain.models.account import Account
from agrimandi.domain.value_objects.role import Role
from agrimandi.infrastructure.db.orm.account import AccountORM
from agrimandi.utils.datetime_tz import ensure_utc


class AccountsSQLAlchemyRepository(AccountRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: AccountORM) -> Account:
        return Account(
            id=orm.id,
            name=orm.name,
            email=orm.email,
            hashed_password=orm.hashed_password,
            role=Role(orm.role),
            contact=orm.contact,
            is_verified=orm.is_verified,
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def add(self, account: Account) -> Account:
        orm = AccountORM(
            id=account.id,
            name=account.name,
            email=account.email.lower(),
            hashed_password=account.hashed_password,
            role=account.role.value,
            contact=account.contact,
            is_verified=account.is_verified,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )
        self.session.add(orm)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Email already registered") from exc
        return self._to_domain(orm)

    async def get(self, account_id: UUID) -> Account | None:
        orm = await self.session.get(AccountORM, account_id)
        return self._to_domain(orm) if orm else None

    async def get_many(self, account_ids: Sequence[UUID]) -> list[Account]:
        if not account_ids:
            return []
        stmt = select(AccountORM).where(AccountORM.id.in_(set(account_ids)))
        result = await self.session.execute(stmt)
        return [self._to_domain(orm) for orm in result.scalars().all()]

    async def get_by_email(self, email: str) -> Account | None:
        stmt = select(AccountORM).where(func.lower(AccountORM.email) == email.lower())
        result = await self.session.execute(stmt)
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm else None

    async def list(self, *, role: Role | None = None) -> list[Account]:
        stmt = select(AccountORM).order_by(AccountORM.created_at.asc())
        if role is not None:
            stmt = stmt.where(AccountORM.role == role.value)
        result = await self.session.execute(stmt)
        return [self._to_domain(orm) for orm in result.scalars().all()]

    async def mark_verified(self, account_id: UUID) -> bool:
        stmt = (
            update(AccountORM)
            .where(AccountORM.id == account_id)
            .values(is_verified=True, updated_at=func.now())
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def update_password(self, account_id: UUID, hashed_password: str) -> None:
        stmt = (
            update(AccountORM)
            .where(AccountORM.id == account_id)
            .values(hashed_password=hashed_password, updated_at=func.now())
        )
        await self.session.execute(stmt)
