from __future__ import annotations

from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agrimandi.application.errors import ConflictError, InfrastructureError
from agrimandi.application.interfaces.repositories.connection_requests import (
    ConnectionRequestRepository,
)
from agrimandi.domain.models.connection_request import TRANSITION_FIELDS, ConnectionRequest
from agrimandi.domain.value_objects.request_status import CancelledBy, RequestStatus
from agrimandi.infrastructure.db.orm.connection_request import ConnectionRequestORM
from agrimandi.utils.datetime_tz import ensure_utc


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class ConnectionRequestsSQLAlchemyRepository(ConnectionRequestRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: ConnectionRequestORM) -> ConnectionRequest:
        return ConnectionRequest(
            id=orm.id,
            buyer_id=orm.buyer_id,
            crop=orm.crop,
            quantity=orm.quantity,
            status=RequestStatus(orm.status),
            farmer_id=orm.farmer_id,
            price=orm.price,
            contact=orm.contact,
            created_at=ensure_utc(orm.created_at),
            accepted_at=ensure_utc(orm.accepted_at),
            completed_at=ensure_utc(orm.completed_at),
            buyer_confirmed_at=ensure_utc(orm.buyer_confirmed_at),
            cancelled_at=ensure_utc(orm.cancelled_at),
            disputed_at=ensure_utc(orm.disputed_at),
            cancelled_by=CancelledBy(orm.cancelled_by) if orm.cancelled_by else None,
            dispute_reason=orm.dispute_reason,
            version=orm.version,
        )

    async def add(self, request: ConnectionRequest) -> ConnectionRequest:
        orm = ConnectionRequestORM(
            id=request.id,
            buyer_id=request.buyer_id,
            farmer_id=request.farmer_id,
            crop=request.crop,
            quantity=request.quantity,
            price=request.price,
            contact=request.contact,
            status=request.status.value,
            created_at=request.created_at,
            version=request.version,
        )
        self.session.add(orm)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Request already exists") from exc
        return self._to_domain(orm)

    async def get(self, request_id: UUID) -> ConnectionRequest | None:
        orm = await self.session.get(ConnectionRequestORM, request_id)
        return self._to_domain(orm) if orm else None

    async def list_for_buyer(self, buyer_id: UUID) -> list[ConnectionRequest]:
        stmt = (
            select(ConnectionRequestORM)
            .where(ConnectionRequestORM.buyer_id == buyer_id)
            .order_by(ConnectionRequestORM.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(orm) for orm in result.scalars().all()]

    async def list(
        self, *, status: RequestStatus | None = None, crop: str | None = None
    ) -> list[ConnectionRequest]:
        stmt = select(ConnectionRequestORM).order_by(ConnectionRequestORM.created_at.desc())
        if status is not None:
            stmt = stmt.where(ConnectionRequestORM.status == status.value)
        if crop:
            stmt = stmt.where(func.lower(ConnectionRequestORM.crop) == crop.lower())
        result = await self.session.execute(stmt)
        return [self._to_domain(orm) for orm in result.scalars().all()]

    async def apply_transition(
        self, request_id: UUID, *, expected_version: int, values: dict[str, Any]
    ) -> ConnectionRequest | None:
        unknown = set(values) - set(TRANSITION_FIELDS)
        if unknown:
            raise InfrastructureError(
                "Refusing to write non-transition fields", details={"fields": sorted(unknown)}
            )
        data = {name: _column_value(value) for name, value in values.items()}
        data["version"] = expected_version + 1
        stmt = (
            update(ConnectionRequestORM)
            .where(ConnectionRequestORM.id == request_id)
            .where(ConnectionRequestORM.version == expected_version)
            .values(**data)
            .returning(ConnectionRequestORM)
        )
        try:
            result = await self.session.execute(stmt)
        except IntegrityError as exc:
            raise ConflictError("Request update violates a constraint") from exc
        orm = result.scalar_one_or_none()
        if not orm:
            return None
        return self._to_domain(orm)
