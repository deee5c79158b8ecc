"""Vehicle models: the commuter-observed record and its derived metrics."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pybustrack.ingestion.normalize import non_negative_float_or_zero, non_negative_or_zero, safe_str
from pybustrack.models._base import BusTrackBaseModel, BusTrackEnum, Instant
from pybustrack.models.coordinate import Coordinate


class VehicleStatus(BusTrackEnum):
    """Operational status reported by the server."""

    ACTIVE = "active"
    DELAYED = "delayed"
    IDLE = "idle"
    OFFLINE = "offline"
    MAINTENANCE = "maintenance"
    UNKNOWN = "unknown"


class OccupancyLevel(BusTrackEnum):
    """Coarse crowding bucket derived from ``current_occupancy / capacity``."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    FULL = "full"
    UNKNOWN = "unknown"


class VehicleRecord(BusTrackBaseModel):
    """A vehicle as seen by commuters, keyed by ``vehicle_id``.

    Records arrive both from the roster endpoint and from ``buses-updated``
    pushes; the server calls the key ``busNumber``.
    """

    vehicle_id: str = Field(validation_alias=AliasChoices("busNumber", "vehicleId", "vehicle_id"))
    """Unique vehicle key (the bus number)."""
    coordinates: Coordinate | None = None
    """Last reported position, ``None`` when the vehicle has no fix."""
    status: VehicleStatus = VehicleStatus.UNKNOWN
    current_occupancy: int = 0
    capacity: int = 0
    speed: float = 0.0
    """Speed in km/h."""
    driver_name: str | None = None
    last_updated: Instant = None
    """Server-side time of the last position report."""

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def _coerce_vehicle_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("vehicle_id must be non-empty")
        return text

    @field_validator("coordinates", mode="before")
    @classmethod
    def _coerce_coordinates(cls, value: Any) -> Coordinate | None:
        return Coordinate.parse(value)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> VehicleStatus:
        return VehicleStatus(value) if isinstance(value, str) else VehicleStatus.UNKNOWN

    @field_validator("current_occupancy", "capacity", mode="before")
    @classmethod
    def _coerce_counts(cls, value: Any) -> int:
        return non_negative_or_zero(value)

    @field_validator("speed", mode="before")
    @classmethod
    def _coerce_speed(cls, value: Any) -> float:
        return non_negative_float_or_zero(value)

    @field_validator("driver_name", mode="before")
    @classmethod
    def _coerce_driver_name(cls, value: Any) -> str | None:
        return safe_str(value)

    @property
    def has_fix(self) -> bool:
        return self.coordinates is not None

    @property
    def occupancy_ratio(self) -> float | None:
        """Occupied fraction of capacity, ``None`` when capacity is unknown."""
        if self.capacity <= 0:
            return None
        return self.current_occupancy / self.capacity

    @property
    def occupancy_level(self) -> OccupancyLevel:
        ratio = self.occupancy_ratio
        if ratio is None:
            return OccupancyLevel.UNKNOWN
        if ratio >= 0.9:
            return OccupancyLevel.FULL
        if ratio >= 0.7:
            return OccupancyLevel.HIGH
        if ratio >= 0.5:
            return OccupancyLevel.MODERATE
        return OccupancyLevel.LOW

    def age_seconds(self, now: datetime | None = None) -> float | None:
        """Seconds since ``last_updated``; ``None`` if never updated."""
        if self.last_updated is None:
            return None
        current = now or datetime.now(UTC)
        return (current - self.last_updated).total_seconds()

    def format_last_update(self, now: datetime | None = None) -> str:
        """Human-readable age such as ``"Just now"`` or ``"3 mins ago"``."""
        age = self.age_seconds(now)
        if age is None:
            return "Unknown"
        minutes = int(age // 60)
        if minutes < 1:
            return "Just now"
        if minutes == 1:
            return "1 min ago"
        if minutes < 60:
            return f"{minutes} mins ago"
        hours = minutes // 60
        if hours == 1:
            return "1 hour ago"
        return f"{hours} hours ago"
