"""High-level async client for the live bus-tracking service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import aiohttp

from pybustrack._api.eta import fetch_route_geometry
from pybustrack._api.routes import fetch_route_roster, fetch_routes
from pybustrack._channel import ChannelProtocol, FleetSubscription, UpdateChannel
from pybustrack._transport import JsonTransport, Transport
from pybustrack.config import TrackerConfig
from pybustrack.exceptions import (
    BusTrackChannelUnavailableError,
    BusTrackError,
    BusTrackTransportError,
    BusTrackValidationError,
)
from pybustrack.geo import display_distance_km
from pybustrack.models.coordinate import Coordinate
from pybustrack.models.geometry import RouteGeometry
from pybustrack.models.position import VehiclePosition
from pybustrack.models.route import Route
from pybustrack.models.vehicle import VehicleRecord
from pybustrack.sampler import (
    GeolocationProvider,
    GeolocationSampler,
    PositionError,
    PositionErrorKind,
    SampleResult,
)
from pybustrack.session import Role, Session, SessionMachine
from pybustrack.state.events import FleetUpdate
from pybustrack.state.store import FleetStore
from pybustrack.view import FocusView, derive_focus

_logger = logging.getLogger(__name__)


class NoticeKind(StrEnum):
    LOCATION_PERMISSION_DENIED = "location_permission_denied"
    LOCATION_UNAVAILABLE = "location_unavailable"
    GEOLOCATION_UNSUPPORTED = "geolocation_unsupported"
    CHANNEL_UNAVAILABLE = "channel_unavailable"


@dataclass(frozen=True)
class Notice:
    """A user-visible, non-fatal problem."""

    kind: NoticeKind
    message: str


@dataclass
class ClientState:
    """Everything a running client owns. Mutated only by client operations."""

    session: SessionMachine = field(default_factory=SessionMachine)
    fleet: FleetStore = field(default_factory=FleetStore)
    routes: list[Route] = field(default_factory=list)
    selected_route: Route | None = None
    selected_vehicle_id: str | None = None
    self_position: Coordinate | None = None
    occupancy: int = 0


class BusTrackerClient:
    """Async client for the bus-tracking server.

    Usage::

        async with BusTrackerClient(config, geolocation=provider) as client:
            routes = await client.list_routes()
            await client.choose_role("commuter")
            await client.select_route(routes[0])
            view = client.focus()
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        channel: ChannelProtocol | None = None,
        geolocation: GeolocationProvider | None = None,
        on_notice: Callable[[Notice], None] | None = None,
        on_fleet_update: Callable[[FleetUpdate, Mapping[str, VehicleRecord]], None] | None = None,
    ) -> None:
        self._config = config or TrackerConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._channel = channel
        self._geolocation = geolocation
        self._sampler = GeolocationSampler(geolocation, self._config) if geolocation is not None else None
        self._on_notice = on_notice
        self._on_fleet_update = on_fleet_update
        self._state = ClientState()
        self._subscription: FleetSubscription | None = None
        self._sampler_generation = 0

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> BusTrackerClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = JsonTransport(self._config, self._http_session)
        if self._channel is None:
            self._channel = UpdateChannel(self._config)
        await self.connect()
        await self._restart_sampler()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self._stop_sampler()
        self._detach_fleet_handler()
        if self._channel is not None:
            await self._channel.disconnect()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    async def connect(self) -> bool:
        """Connect the realtime channel; failures surface as a notice."""
        channel = self._require_channel()
        try:
            await channel.connect()
        except BusTrackChannelUnavailableError as exc:
            _logger.warning("Realtime channel unavailable: %s", exc)
            self._notify(NoticeKind.CHANNEL_UNAVAILABLE, str(exc))
            return False
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise BusTrackError("Client not initialized. Use 'async with BusTrackerClient(...) as client:'")
        return self._transport

    def _require_channel(self) -> ChannelProtocol:
        if self._channel is None:
            raise BusTrackError("Client not initialized. Use 'async with BusTrackerClient(...) as client:'")
        return self._channel

    def _notify(self, kind: NoticeKind, message: str) -> None:
        if self._on_notice is None:
            return
        try:
            self._on_notice(Notice(kind=kind, message=message))
        except Exception:
            _logger.debug("on_notice callback failed", exc_info=True)

    def _detach_fleet_handler(self) -> None:
        subscription = self._subscription
        self._subscription = None
        if subscription is not None:
            subscription.detach()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._state.session.session

    @property
    def routes(self) -> list[Route]:
        return list(self._state.routes)

    @property
    def selected_route(self) -> Route | None:
        return self._state.selected_route

    @property
    def selected_vehicle(self) -> VehicleRecord | None:
        """Live record of the selected vehicle (tracks merges)."""
        vehicle_id = self._state.selected_vehicle_id
        return self._state.fleet.get(vehicle_id) if vehicle_id is not None else None

    @property
    def vehicles(self) -> Mapping[str, VehicleRecord]:
        return self._state.fleet.vehicles

    @property
    def self_position(self) -> Coordinate | None:
        return self._state.self_position

    @property
    def sampling_interval(self) -> float | None:
        return self._sampler.interval if self._sampler is not None else None

    # ------------------------------------------------------------------
    # Session transitions
    # ------------------------------------------------------------------

    async def choose_role(self, role: Role | str) -> Session:
        try:
            chosen = Role(role)
        except ValueError as exc:
            raise BusTrackValidationError(f"Unknown role {role!r}") from exc
        return await self._transition(lambda: self._state.session.choose_role(chosen))

    async def login(self, vehicle_id: str) -> Session:
        """Log in as the driver of ``vehicle_id``; enables position publishing."""
        return await self._transition(lambda: self._state.session.login(vehicle_id))

    async def back_to_role_select(self) -> Session:
        return await self._transition(self._state.session.back_to_role_select)

    async def logout(self) -> Session:
        """Return to role selection, dropping the route context."""
        session = self._state.session.logout()
        await self._stop_sampler()
        self._detach_fleet_handler()
        self._state.fleet.reset(None)
        self._state.selected_route = None
        self._state.selected_vehicle_id = None
        await self._restart_sampler()
        return session

    async def _transition(self, action: Callable[[], Session]) -> Session:
        previous_key = self.session.sampling_key
        session = action()
        if session.sampling_key != previous_key:
            await self._restart_sampler()
        return session

    def set_occupancy(self, occupancy: int) -> None:
        """Passenger count reported with each driver position."""
        if isinstance(occupancy, bool) or not isinstance(occupancy, int) or occupancy < 0:
            raise BusTrackValidationError("Occupancy must be a non-negative integer")
        self._state.occupancy = occupancy

    # ------------------------------------------------------------------
    # Geolocation sampling
    # ------------------------------------------------------------------

    async def _stop_sampler(self) -> None:
        self._sampler_generation += 1
        if self._sampler is not None:
            await self._sampler.stop()

    async def _restart_sampler(self) -> None:
        await self._stop_sampler()
        if self._sampler is None:
            self._notify(NoticeKind.GEOLOCATION_UNSUPPORTED, "Geolocation is not supported on this platform.")
            return
        generation = self._sampler_generation

        async def handle(result: SampleResult) -> None:
            if generation != self._sampler_generation:
                return
            await self._handle_sample(result)

        await self._sampler.start(self.session.sampling_role, handle)

    async def _handle_sample(self, result: SampleResult) -> None:
        if isinstance(result, PositionError):
            if result.kind == PositionErrorKind.PERMISSION_DENIED:
                _logger.warning("Location permission denied: %s", result.message)
                self._notify(
                    NoticeKind.LOCATION_PERMISSION_DENIED,
                    "Location permission denied. Please allow location access.",
                )
            elif result.kind == PositionErrorKind.UNAVAILABLE:
                _logger.warning("Location unavailable: %s", result.message)
                self._notify(NoticeKind.LOCATION_UNAVAILABLE, result.message or "Location unavailable.")
            return

        fix = result.fix
        self._state.self_position = fix.coordinates

        session = self.session
        if not session.emission_enabled or session.driver_vehicle_id is None:
            return
        position = VehiclePosition(
            vehicle_id=session.driver_vehicle_id,
            coordinates=fix.coordinates,
            speed=max(0.0, fix.speed or 0.0),
            occupancy=self._state.occupancy,
            timestamp=fix.timestamp,
        )
        sent = await self._require_channel().publish_position(position)
        _logger.debug("Position for %s %s", position.vehicle_id, "sent" if sent else "dropped")

    # ------------------------------------------------------------------
    # Routes and fleet
    # ------------------------------------------------------------------

    async def list_routes(self) -> list[Route]:
        """Fetch the route catalogue; keeps the previous list on failure."""
        try:
            self._state.routes = await fetch_routes(self._require_transport())
        except BusTrackTransportError as exc:
            _logger.warning("Error fetching routes: %s", exc)
        return list(self._state.routes)

    def _resolve_route(self, route: Route | str) -> Route:
        if isinstance(route, Route):
            return route
        for candidate in self._state.routes:
            if candidate.route_id == route:
                return candidate
        raise BusTrackValidationError(f"Unknown route {route!r}")

    async def select_route(self, route: Route | str) -> None:
        """Track ``route``: clear the fleet, subscribe, then seed from the roster.

        The previous fleet handler is detached before anything else so no
        batch for the old route can land in the new context. The new handler
        is attached before subscribing so the first push is not dropped.
        """
        selected = self._resolve_route(route)
        channel = self._require_channel()

        self._detach_fleet_handler()
        self._state.fleet.reset(selected.route_id)
        self._state.selected_route = selected
        self._state.selected_vehicle_id = None

        self._subscription = channel.on_fleet_update(self._handle_fleet_update)
        await channel.subscribe(selected.route_id)

        try:
            roster = await fetch_route_roster(self._require_transport(), selected.route_id)
        except BusTrackTransportError as exc:
            _logger.warning("Error fetching buses for route %s: %s", selected.route_id, exc)
            return
        self._apply_update(roster)

    def _handle_fleet_update(self, update: FleetUpdate) -> None:
        self._apply_update(update)

    def _apply_update(self, update: FleetUpdate) -> None:
        if not self._state.fleet.apply(update):
            return
        if self._on_fleet_update is not None:
            try:
                self._on_fleet_update(update, self._state.fleet.vehicles)
            except Exception:
                _logger.debug("on_fleet_update callback failed", exc_info=True)

    def select_vehicle(self, vehicle_id: str | None) -> VehicleRecord | None:
        """Select a vehicle of the current route, or clear with ``None``."""
        if vehicle_id is None:
            self._state.selected_vehicle_id = None
            return None
        record = self._state.fleet.get(vehicle_id)
        if record is None:
            raise BusTrackValidationError(f"Vehicle {vehicle_id!r} is not on the tracked route")
        self._state.selected_vehicle_id = vehicle_id
        return record

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def focus(self) -> FocusView:
        return derive_focus(
            self_position=self._state.self_position,
            selected_vehicle=self.selected_vehicle,
            route=self._state.selected_route,
            vehicles=self._state.fleet,
        )

    def distance_to(self, vehicle_id: str) -> float | None:
        """Display distance (km, one decimal) from self to a vehicle."""
        record = self._state.fleet.get(vehicle_id)
        if record is None:
            return None
        return display_distance_km(self._state.self_position, record.coordinates)

    def vehicle_distances(self) -> dict[str, float | None]:
        return {
            record.vehicle_id: display_distance_km(self._state.self_position, record.coordinates)
            for record in self._state.fleet
        }

    async def route_to_selected(self) -> RouteGeometry | None:
        """Path from self to the selected vehicle, ``None`` when unavailable."""
        vehicle = self.selected_vehicle
        start = self._state.self_position
        if vehicle is None or vehicle.coordinates is None or start is None:
            return None
        return await fetch_route_geometry(self._require_transport(), self._config.eta_path, start, vehicle.coordinates)
