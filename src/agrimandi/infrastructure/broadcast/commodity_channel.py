from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from agrimandi.domain.models.commodity import Commodity

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    async def send_text(self, data: str) -> None: ...


Serializer = Callable[[Commodity], dict[str, Any]]
SnapshotLoader = Callable[[], Awaitable[Sequence[Commodity]]]
ApplyUpdate = Callable[[], Awaitable[Commodity]]


def default_serializer(commodity: Commodity) -> dict[str, Any]:
    return {
        "id": str(commodity.id),
        "name": commodity.name,
        "price": str(commodity.price),
        "change": str(commodity.change),
        "last_updated": commodity.last_updated.isoformat(),
    }


@dataclass(eq=False)
class _Subscription:
    subscriber: Subscriber
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class CommodityChannel:
    """Fan-out of commodity price changes to live subscribers.

    A new subscriber gets the full list once, then one ``update`` message per
    price change. Price writes and snapshot loads are serialized on the
    channel lock, so every change reaches a subscriber exactly once: either
    inside its snapshot or as an update after it. Delivery is otherwise
    at-most-once; nothing is replayed and a subscriber whose send fails or
    exceeds ``send_timeout`` is dropped.
    """

    def __init__(
        self, serializer: Serializer = default_serializer, *, send_timeout: float = 5.0
    ) -> None:
        self._serialize = serializer
        self._send_timeout = send_timeout
        self._subscriptions: list[_Subscription] = []
        self._lock = asyncio.Lock()

    async def subscribe(self, subscriber: Subscriber, load_snapshot: SnapshotLoader) -> None:
        subscription = _Subscription(subscriber)
        async with self._lock:
            snapshot = await load_snapshot()
            # Taken before registering so no update can overtake the snapshot.
            await subscription.send_lock.acquire()
            self._subscriptions.append(subscription)
            logger.info("Commodity subscriber connected total=%s", len(self._subscriptions))

        message = json.dumps({"type": "initial", "data": [self._serialize(c) for c in snapshot]})
        try:
            try:
                await asyncio.wait_for(subscriber.send_text(message), self._send_timeout)
            finally:
                subscription.send_lock.release()
        except Exception:
            await self.unsubscribe(subscriber)
            raise

    async def unsubscribe(self, subscriber: Subscriber) -> None:
        async with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s.subscriber is not subscriber]
            logger.info("Commodity subscriber disconnected remaining=%s", len(self._subscriptions))

    async def publish(self, apply_update: ApplyUpdate) -> Commodity:
        """Persist a change with ``apply_update`` and push it to every subscriber.

        ``apply_update`` must commit before returning. Errors it raises
        propagate and nothing is sent.
        """
        async with self._lock:
            commodity = await apply_update()
            message = json.dumps({"type": "update", "data": self._serialize(commodity)})
            targets = list(self._subscriptions)
            results = await asyncio.gather(*(self._deliver(s, message) for s in targets))
            failed = {id(s) for s, ok in zip(targets, results) if not ok}
            if failed:
                self._subscriptions = [s for s in self._subscriptions if id(s) not in failed]

        logger.info(
            "Commodity %s update delivered to %s of %s subscribers",
            commodity.name,
            len(targets) - len(failed),
            len(targets),
        )
        return commodity

    async def _deliver(self, subscription: _Subscription, message: str) -> bool:
        try:
            async with subscription.send_lock:
                await asyncio.wait_for(
                    subscription.subscriber.send_text(message), self._send_timeout
                )
        except Exception as e:
            logger.warning("Dropping commodity subscriber after failed send: %r", e)
            return False
        return True

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)
