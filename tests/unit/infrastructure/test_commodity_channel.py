from __future__ import annotations

import asyncio
import json
from decimal import Decimal

import pytest

from agrimandi.domain.models.commodity import Commodity
from agrimandi.infrastructure.broadcast.commodity_channel import CommodityChannel


class FakeSocket:
    def __init__(self, fail: bool = False) -> None:
        self.messages: list[dict] = []
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.messages.append(json.loads(data))

    @property
    def types(self) -> list[str]:
        return [m["type"] for m in self.messages]


class StalledSocket:
    """Accepts ``stall_after`` frames, then never finishes a send."""

    def __init__(self, stall_after: int = 0) -> None:
        self.stall_after = stall_after
        self.sent = 0

    async def send_text(self, data: str) -> None:
        if self.sent >= self.stall_after:
            await asyncio.Event().wait()
        self.sent += 1


def commodities():
    return [
        Commodity.create(name="Wheat", price=Decimal("2100")),
        Commodity.create(name="Rice", price=Decimal("3200")),
    ]


def returning(commodity):
    async def apply_update():
        return commodity

    return apply_update


async def empty():
    return []


@pytest.mark.asyncio
async def test_subscriber_gets_snapshot_then_updates():
    items = commodities()
    channel = CommodityChannel()
    socket = FakeSocket()

    async def load():
        return items

    await channel.subscribe(socket, load)
    repriced = items[0].repriced(Decimal("2150"), at=items[0].last_updated)
    published = await channel.publish(returning(repriced))

    assert published is repriced
    initial, update = socket.messages
    assert initial["type"] == "initial"
    assert [c["name"] for c in initial["data"]] == ["Wheat", "Rice"]
    assert update["type"] == "update"
    assert update["data"]["price"] == "2150"
    assert update["data"]["change"] == "50"


@pytest.mark.asyncio
async def test_subscriber_joining_right_after_commit_gets_snapshot_only():
    store = {"wheat": commodities()[0]}
    channel = CommodityChannel()
    early, late = FakeSocket(), FakeSocket()
    joining: list[asyncio.Task] = []

    async def load():
        return [store["wheat"]]

    async def apply_update():
        store["wheat"] = store["wheat"].repriced(Decimal("2150"), at=store["wheat"].last_updated)
        # A client connects between the commit and the fan-out.
        joining.append(asyncio.create_task(channel.subscribe(late, load)))
        await asyncio.sleep(0)
        return store["wheat"]

    await channel.subscribe(early, load)
    await channel.publish(apply_update)
    await joining[0]

    assert early.types == ["initial", "update"]
    assert late.types == ["initial"]
    assert late.messages[0]["data"][0]["price"] == "2150"
    assert channel.subscriber_count == 2


@pytest.mark.asyncio
async def test_failed_update_is_not_sent():
    channel = CommodityChannel()
    socket = FakeSocket()
    await channel.subscribe(socket, empty)

    async def apply_update():
        raise RuntimeError("commit failed")

    with pytest.raises(RuntimeError):
        await channel.publish(apply_update)
    assert socket.types == ["initial"]


@pytest.mark.asyncio
async def test_failed_subscribers_are_pruned():
    channel = CommodityChannel()
    healthy, broken = FakeSocket(), FakeSocket()
    await channel.subscribe(healthy, empty)
    await channel.subscribe(broken, empty)
    broken.fail = True

    await channel.publish(returning(commodities()[0]))

    assert channel.subscriber_count == 1
    assert healthy.types == ["initial", "update"]


@pytest.mark.asyncio
async def test_stalled_subscriber_is_dropped_without_blocking_others():
    channel = CommodityChannel(send_timeout=0.05)
    healthy, stalled = FakeSocket(), StalledSocket(stall_after=1)
    await channel.subscribe(healthy, empty)
    await channel.subscribe(stalled, empty)

    await asyncio.wait_for(channel.publish(returning(commodities()[0])), timeout=1)

    assert channel.subscriber_count == 1
    assert healthy.types == ["initial", "update"]


@pytest.mark.asyncio
async def test_stalled_initial_send_does_not_hold_the_channel():
    channel = CommodityChannel(send_timeout=0.3)
    stalled, healthy = StalledSocket(), FakeSocket()

    pending = asyncio.create_task(channel.subscribe(stalled, empty))
    await asyncio.sleep(0)

    await asyncio.wait_for(channel.subscribe(healthy, empty), timeout=0.1)
    assert healthy.types == ["initial"]

    with pytest.raises(asyncio.TimeoutError):
        await pending
    assert channel.subscriber_count == 1


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    channel = CommodityChannel()
    socket = FakeSocket()

    await channel.subscribe(socket, empty)
    await channel.unsubscribe(socket)
    await channel.publish(returning(commodities()[0]))

    assert channel.subscriber_count == 0
    assert socket.types == ["initial"]


@pytest.mark.asyncio
async def test_custom_serializer_is_used():
    channel = CommodityChannel(serializer=lambda c: {"n": c.name})
    socket = FakeSocket()

    async def load():
        return commodities()

    await channel.subscribe(socket, load)
    assert socket.messages[0]["data"] == [{"n": "Wheat"}, {"n": "Rice"}]
