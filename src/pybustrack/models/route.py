"""Route and stop models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pybustrack.ingestion.normalize import safe_int, safe_str
from pybustrack.models._base import BusTrackBaseModel
from pybustrack.models.coordinate import Coordinate


class Stop(BusTrackBaseModel):
    """A stop on a route. ``order`` gives its position along the route."""

    stop_id: str = Field(validation_alias=AliasChoices("stopId", "stop_id", "_id"))
    stop_name: str = ""
    coordinates: Coordinate | None = None
    order: int = 0

    @field_validator("stop_id", mode="before")
    @classmethod
    def _coerce_stop_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("stop_id must be non-empty")
        return text

    @field_validator("coordinates", mode="before")
    @classmethod
    def _coerce_coordinates(cls, value: Any) -> Coordinate | None:
        return Coordinate.parse(value)

    @field_validator("order", mode="before")
    @classmethod
    def _coerce_order(cls, value: Any) -> int:
        parsed = safe_int(value)
        return parsed if parsed is not None else 0


class OperatingHours(BusTrackBaseModel):
    """Daily service window as ``"HH:MM"`` strings."""

    start: str | None = None
    end: str | None = None


class Route(BusTrackBaseModel):
    """A fixed path with an ordered sequence of stops.

    ``route_id`` is the subscription key for the realtime channel.
    """

    route_id: str = Field(validation_alias=AliasChoices("routeId", "route_id"))
    route_name: str = ""
    stops: list[Stop] = Field(default_factory=list)
    """Stops sorted by ``order``."""
    operating_hours: OperatingHours | None = None
    frequency: int | None = None
    """Minutes between departures."""

    @field_validator("route_id", mode="before")
    @classmethod
    def _coerce_route_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("route_id must be non-empty")
        return text

    @field_validator("stops", mode="after")
    @classmethod
    def _sort_stops(cls, value: list[Stop]) -> list[Stop]:
        return sorted(value, key=lambda stop: stop.order)

    @field_validator("frequency", mode="before")
    @classmethod
    def _coerce_frequency(cls, value: Any) -> int | None:
        return safe_int(value)

    def stop_coordinates(self) -> list[Coordinate]:
        """Positions of all stops with a valid fix, in route order."""
        return [stop.coordinates for stop in self.stops if stop.coordinates is not None]
