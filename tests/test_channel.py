from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from socketio.exceptions import BadNamespaceError
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from pybustrack._channel import UpdateChannel
from pybustrack.config import TrackerConfig
from pybustrack.exceptions import BusTrackChannelUnavailableError
from pybustrack.models.coordinate import Coordinate
from pybustrack.models.position import VehiclePosition
from pybustrack.state.events import FleetUpdate, IngestionSource


class _FakeSocket:
    """Records emits and exposes registered handlers like socketio.AsyncClient."""

    def __init__(self) -> None:
        self.connected = False
        self.handlers: dict[str, Callable[..., Awaitable[None]]] = {}
        self.emitted: list[tuple[str, Any]] = []
        self.connect_error: Exception | None = None
        self.emit_error: Exception | None = None

    def on(self, event: str, handler: Callable[..., Awaitable[None]]) -> None:
        self.handlers[event] = handler

    async def connect(self, url: str, **kwargs: Any) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        await self.handlers["connect"]()
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False
        await self.handlers["disconnect"]()

    async def emit(self, event: str, data: Any) -> None:
        if self.emit_error is not None:
            raise self.emit_error
        self.emitted.append((event, data))

    async def drop(self) -> None:
        self.connected = False
        await self.handlers["disconnect"]("transport close")

    async def reconnect(self) -> None:
        await self.handlers["connect"]()
        self.connected = True

    async def push(self, payload: Any) -> None:
        await self.handlers["buses-updated"](payload)


def _channel(**config: Any) -> tuple[UpdateChannel, _FakeSocket]:
    sio = _FakeSocket()
    return UpdateChannel(TrackerConfig(**config), sio=sio), sio  # type: ignore[arg-type]


def _position() -> VehiclePosition:
    return VehiclePosition(
        vehicle_id="DL-101",
        coordinates=Coordinate(lat=28.61, lng=77.21),
        timestamp=datetime(2026, 1, 1, tzinfo=UTC),
    )


@pytest.mark.asyncio
async def test_connect_failure_is_wrapped() -> None:
    channel, sio = _channel()
    sio.connect_error = SocketIOConnectionError("refused")

    with pytest.raises(BusTrackChannelUnavailableError):
        await channel.connect()


@pytest.mark.asyncio
async def test_subscribe_emits_track_route_once() -> None:
    channel, sio = _channel()
    await channel.connect()

    await channel.subscribe("R1")
    await channel.subscribe("R1")
    await channel.subscribe("R2")

    assert sio.emitted == [("track-route", "R1"), ("track-route", "R2")]
    assert channel.subscribed_route_id == "R2"


@pytest.mark.asyncio
async def test_outbound_events_dropped_while_disconnected() -> None:
    channel, sio = _channel()

    assert await channel.publish_position(_position()) is False
    await channel.subscribe("R1")

    assert sio.emitted == []
    assert channel.subscribed_route_id == "R1"


@pytest.mark.asyncio
async def test_emit_failure_is_dropped() -> None:
    channel, sio = _channel()
    await channel.connect()
    sio.emit_error = BadNamespaceError("/ is not a connected namespace.")

    assert await channel.publish_position(_position()) is False


@pytest.mark.asyncio
async def test_publish_position_payload() -> None:
    channel, sio = _channel()
    await channel.connect()

    assert await channel.publish_position(_position()) is True
    assert sio.emitted == [
        (
            "bus-location-update",
            {
                "busNumber": "DL-101",
                "lat": 28.61,
                "lng": 77.21,
                "speed": 0.0,
                "occupancy": 0,
                "timestamp": "2026-01-01T00:00:00Z",
            },
        )
    ]


@pytest.mark.asyncio
async def test_subscription_reissued_after_reconnect() -> None:
    channel, sio = _channel()
    await channel.subscribe("R1")
    await channel.connect()
    await sio.drop()
    await sio.reconnect()

    assert sio.emitted == [("track-route", "R1"), ("track-route", "R1")]


@pytest.mark.asyncio
async def test_resubscribe_can_be_disabled() -> None:
    channel, sio = _channel(resubscribe_on_reconnect=False)
    await channel.connect()
    await channel.subscribe("R1")
    await sio.drop()
    await sio.reconnect()

    assert sio.emitted == [("track-route", "R1")]


@pytest.mark.asyncio
async def test_single_handler_slot_detaches_previous() -> None:
    channel, sio = _channel()
    first: list[FleetUpdate] = []
    second: list[FleetUpdate] = []

    old = channel.on_fleet_update(first.append)
    new = channel.on_fleet_update(second.append)
    await sio.push({"routeId": "R1", "buses": [{"busNumber": "A"}]})

    assert not old.active
    assert new.active
    assert first == []
    assert len(second) == 1
    assert second[0].route_id == "R1"
    assert second[0].source == IngestionSource.CHANNEL
    assert [bus.vehicle_id for bus in second[0].buses] == ["A"]


@pytest.mark.asyncio
async def test_stale_detach_does_not_remove_current_handler() -> None:
    channel, sio = _channel()
    received: list[FleetUpdate] = []

    old = channel.on_fleet_update(lambda _update: None)
    channel.on_fleet_update(received.append)
    old.detach()
    await sio.push({"routeId": "R1", "buses": []})

    assert len(received) == 1


@pytest.mark.asyncio
async def test_async_handler_is_awaited() -> None:
    channel, sio = _channel()
    received: list[str] = []

    async def handler(update: FleetUpdate) -> None:
        received.append(update.route_id)

    channel.on_fleet_update(handler)
    await sio.push({"routeId": "R9", "buses": []})

    assert received == ["R9"]


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [None, "R1", {"buses": []}, {"routeId": "  ", "buses": []}])
async def test_malformed_push_is_ignored(payload: Any) -> None:
    channel, sio = _channel()
    received: list[FleetUpdate] = []
    channel.on_fleet_update(received.append)

    await sio.push(payload)

    assert received == []


@pytest.mark.asyncio
async def test_malformed_vehicles_are_skipped() -> None:
    channel, sio = _channel()
    received: list[FleetUpdate] = []
    channel.on_fleet_update(received.append)

    await sio.push({"routeId": "R1", "buses": [{"busNumber": ""}, "junk", {"busNumber": "B"}]})

    assert [bus.vehicle_id for bus in received[0].buses] == ["B"]


@pytest.mark.asyncio
async def test_handler_failure_is_contained() -> None:
    channel, sio = _channel()

    def boom(_update: FleetUpdate) -> None:
        raise RuntimeError("handler bug")

    channel.on_fleet_update(boom)
    await sio.push({"routeId": "R1", "buses": []})


@pytest.mark.asyncio
async def test_disconnect_clears_handler() -> None:
    channel, sio = _channel()
    await channel.connect()
    subscription = channel.on_fleet_update(lambda _update: None)

    await channel.disconnect()

    assert not subscription.active
    assert not channel.connected
