from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pybustrack._channel import FleetHandler, FleetSubscription, _HandlerSlot
from pybustrack.exceptions import BusTrackTransportError
from pybustrack.ingestion.fleet import build_update_from_push
from pybustrack.models.position import VehiclePosition


class FakeChannel:
    """In-memory stand-in for UpdateChannel."""

    def __init__(self) -> None:
        self.connected = True
        self.subscribed_route_id: str | None = None
        self.subscribe_calls: list[str] = []
        self.published: list[VehiclePosition] = []
        self._slot = _HandlerSlot()

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def subscribe(self, route_id: str) -> None:
        self.subscribed_route_id = route_id
        self.subscribe_calls.append(route_id)

    async def publish_position(self, position: VehiclePosition) -> bool:
        if not self.connected:
            return False
        self.published.append(position)
        return True

    def on_fleet_update(self, handler: FleetHandler) -> FleetSubscription:
        return self._slot.attach(handler)

    @property
    def handler_attached(self) -> bool:
        return self._slot.current is not None

    async def push(self, payload: dict[str, Any]) -> None:
        update = build_update_from_push(payload)
        assert update is not None
        await self._slot.dispatch(update)


class FakeTransport:
    """Serves canned JSON per endpoint; exceptions are raised."""

    def __init__(self, responses: Mapping[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, str, Any]] = []

    def _respond(self, endpoint: str) -> Any:
        if endpoint not in self.responses:
            raise BusTrackTransportError(f"HTTP 404 from {endpoint}", status_code=404, endpoint=endpoint)
        value = self.responses[endpoint]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_json(self, endpoint: str) -> Any:
        self.calls.append(("GET", endpoint, None))
        return self._respond(endpoint)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        self.calls.append(("POST", endpoint, dict(payload)))
        return self._respond(endpoint)


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def delhi_route_payload() -> dict[str, Any]:
    return {
        "routeId": "R1",
        "routeName": "Connaught Place Loop",
        "stops": [
            {"stopId": "S2", "stopName": "Janpath", "coordinates": {"lat": 28.6250, "lng": 77.2190}, "order": 2},
            {"stopId": "S1", "stopName": "Rajiv Chowk", "coordinates": {"lat": 28.6328, "lng": 77.2197}, "order": 1},
        ],
        "operatingHours": {"start": "06:00", "end": "23:00"},
        "frequency": 15,
    }
