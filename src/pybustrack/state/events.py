"""Normalized fleet update events.

Both ingestion paths (the roster fetch and ``buses-updated`` pushes) convert
their inputs into :class:`FleetUpdate`. Only the store merges them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pybustrack.models.vehicle import VehicleRecord


class IngestionSource(StrEnum):
    HTTP = "http"
    CHANNEL = "channel"


class FleetUpdate(BaseModel):
    """One snapshot batch of vehicle records for a single route."""

    model_config = ConfigDict(frozen=True)

    route_id: str = Field(..., description="Route the batch belongs to")
    buses: tuple[VehicleRecord, ...] = ()
    source: IngestionSource = IngestionSource.CHANNEL
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("route_id")
    @classmethod
    def _normalize_route_id(cls, value: str) -> str:
        route_id = value.strip()
        if not route_id:
            raise ValueError("route_id must be non-empty")
        return route_id

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
