from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

from agrimandi.domain.models.connection_request import ConnectionRequest
from agrimandi.domain.value_objects.request_status import RequestStatus


class ConnectionRequestRepository(Protocol):
    async def add(self, request: ConnectionRequest) -> ConnectionRequest: ...

    async def get(self, request_id: UUID) -> ConnectionRequest | None: ...

    async def list_for_buyer(self, buyer_id: UUID) -> list[ConnectionRequest]: ...

    async def list(
        self, *, status: RequestStatus | None = None, crop: str | None = None
    ) -> list[ConnectionRequest]: ...

    async def apply_transition(
        self, request_id: UUID, *, expected_version: int, values: dict[str, Any]
    ) -> ConnectionRequest | None:
        """Write ``values`` only if the stored version still equals ``expected_version``.

        Returns the updated request, or None when another writer got there first.
        """
        ...
