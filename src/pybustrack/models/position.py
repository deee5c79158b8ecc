"""Driver-originated position report."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pybustrack.models.coordinate import Coordinate


class VehiclePosition(BaseModel):
    """One position sample published by a logged-in driver.

    Transient: built on a sampler tick, sent, and dropped.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    vehicle_id: str = Field(min_length=1)
    coordinates: Coordinate
    speed: float = Field(default=0.0, ge=0.0)
    """Speed in km/h."""
    occupancy: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("timestamp")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def to_payload(self) -> dict[str, Any]:
        """Serialize as the ``bus-location-update`` event body."""
        return {
            "busNumber": self.vehicle_id,
            "lat": self.coordinates.lat,
            "lng": self.coordinates.lng,
            "speed": self.speed,
            "occupancy": self.occupancy,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }
