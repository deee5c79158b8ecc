"""Realtime update channel over Socket.IO.

Owns:
- the auto-reconnecting Socket.IO connection to the tracking server
- the single active route subscription (``track-route``)
- fire-and-forget driver position publishing (``bus-location-update``)
- the single-slot handler for inbound ``buses-updated`` batches
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError
from socketio.exceptions import SocketIOError

from pybustrack._constants import EVENT_BUSES_UPDATED, EVENT_LOCATION_UPDATE, EVENT_TRACK_ROUTE
from pybustrack._redact import redact_for_log
from pybustrack.config import TrackerConfig
from pybustrack.exceptions import BusTrackChannelUnavailableError
from pybustrack.ingestion.fleet import build_update_from_push
from pybustrack.models.position import VehiclePosition
from pybustrack.state.events import FleetUpdate

_logger = logging.getLogger(__name__)

FleetHandler = Callable[[FleetUpdate], Awaitable[None] | None]


class FleetSubscription:
    """Handle for the registered ``buses-updated`` handler.

    ``detach`` is idempotent and only clears the channel's slot while this
    handle still owns it.
    """

    def __init__(self, owner: _HandlerSlot, handler: FleetHandler) -> None:
        self._owner = owner
        self.handler = handler

    @property
    def active(self) -> bool:
        return self._owner.current is self

    def detach(self) -> None:
        if self._owner.current is self:
            self._owner.current = None
            _logger.debug("Fleet handler detached")


class _HandlerSlot:
    def __init__(self) -> None:
        self.current: FleetSubscription | None = None

    def attach(self, handler: FleetHandler) -> FleetSubscription:
        previous = self.current
        if previous is not None:
            previous.detach()
        subscription = FleetSubscription(self, handler)
        self.current = subscription
        return subscription

    async def dispatch(self, update: FleetUpdate) -> None:
        subscription = self.current
        if subscription is None:
            _logger.debug("No fleet handler attached; dropping batch route=%s", update.route_id)
            return
        try:
            outcome = subscription.handler(update)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            _logger.debug("Fleet handler failed route=%s", update.route_id, exc_info=True)


class ChannelProtocol(Protocol):
    """Structural channel interface used by the client (and test doubles)."""

    @property
    def connected(self) -> bool: ...

    @property
    def subscribed_route_id(self) -> str | None: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def subscribe(self, route_id: str) -> None: ...

    async def publish_position(self, position: VehiclePosition) -> bool: ...

    def on_fleet_update(self, handler: FleetHandler) -> FleetSubscription: ...


class UpdateChannel:
    """Socket.IO transport to the tracking server.

    Reconnection is handled by python-socketio. Every time the connection
    is (re)established the current route subscription is re-issued, unless
    ``config.resubscribe_on_reconnect`` is disabled.
    """

    def __init__(self, config: TrackerConfig, *, sio: socketio.AsyncClient | None = None) -> None:
        self._config = config
        self._sio = sio or socketio.AsyncClient(
            reconnection=True,
            reconnection_delay=config.reconnection_delay,
            logger=False,
        )
        self._slot = _HandlerSlot()
        self._route_id: str | None = None
        self._subscription_sent = False

        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        self._sio.on(EVENT_BUSES_UPDATED, self._on_buses_updated)

    @property
    def connected(self) -> bool:
        return bool(self._sio.connected)

    @property
    def subscribed_route_id(self) -> str | None:
        return self._route_id

    async def connect(self) -> None:
        if self.connected:
            return
        _logger.debug("Channel connecting url=%s path=%s", self._config.base_url, self._config.socketio_path)
        try:
            await self._sio.connect(
                self._config.base_url,
                socketio_path=self._config.socketio_path,
                wait_timeout=self._config.http_timeout,
            )
        except SocketIOConnectionError as exc:
            raise BusTrackChannelUnavailableError(f"Could not connect to {self._config.base_url}: {exc}") from exc

    async def disconnect(self) -> None:
        self._slot.current = None
        if self._sio.connected:
            _logger.debug("Channel disconnect requested")
            await self._sio.disconnect()

    async def _emit(self, event: str, data: Any, *, require_connected: bool = True) -> bool:
        # Inside the connect handler python-socketio has joined the namespace
        # but not yet flipped `connected`.
        if require_connected and not self.connected:
            _logger.debug("Channel disconnected; dropping %s", event)
            return False
        try:
            await self._sio.emit(event, data)
        except SocketIOError:
            _logger.debug("Emit %s failed; dropping", event, exc_info=True)
            return False
        return True

    async def subscribe(self, route_id: str) -> None:
        """Track ``route_id``, replacing any previous subscription.

        Calling again with the current route is a no-op once the intent has
        reached the server.
        """
        if route_id == self._route_id and self._subscription_sent and self.connected:
            return
        self._route_id = route_id
        self._subscription_sent = await self._emit(EVENT_TRACK_ROUTE, route_id)
        _logger.debug("Subscribed route=%s sent=%s", route_id, self._subscription_sent)

    async def publish_position(self, position: VehiclePosition) -> bool:
        """Fire-and-forget position publish; returns ``False`` if dropped."""
        return await self._emit(EVENT_LOCATION_UPDATE, position.to_payload())

    def on_fleet_update(self, handler: FleetHandler) -> FleetSubscription:
        """Register the sole ``buses-updated`` handler, detaching the previous one."""
        return self._slot.attach(handler)

    async def _on_connect(self) -> None:
        _logger.debug("Channel connected")
        if self._route_id is not None and self._config.resubscribe_on_reconnect:
            self._subscription_sent = await self._emit(EVENT_TRACK_ROUTE, self._route_id, require_connected=False)
            _logger.debug("Re-subscribed route=%s after connect", self._route_id)

    async def _on_disconnect(self, *_args: Any) -> None:
        self._subscription_sent = False
        _logger.debug("Channel disconnected")

    async def _on_buses_updated(self, payload: Any) -> None:
        update = build_update_from_push(payload)
        if update is None:
            _logger.debug("Ignoring malformed %s payload %s", EVENT_BUSES_UPDATED, redact_for_log(payload))
            return
        await self._slot.dispatch(update)
