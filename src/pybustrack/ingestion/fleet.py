"""Fleet payload ingestion: raw JSON to :class:`FleetUpdate` events."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pybustrack._redact import redact_for_log
from pybustrack.ingestion.normalize import safe_str
from pybustrack.models.vehicle import VehicleRecord
from pybustrack.state.events import FleetUpdate, IngestionSource

_logger = logging.getLogger(__name__)


def parse_vehicle_records(items: Any) -> list[VehicleRecord]:
    """Validate a list of vehicle dicts, skipping malformed entries."""
    if not isinstance(items, list):
        return []
    records: list[VehicleRecord] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            records.append(VehicleRecord.model_validate(item))
        except ValidationError:
            _logger.debug("Skipping malformed vehicle record %s", redact_for_log(item), exc_info=True)
    return records


def build_update_from_push(payload: Any) -> FleetUpdate | None:
    """Convert a ``buses-updated`` body ``{routeId, buses}``.

    Returns ``None`` when the payload carries no route id.
    """
    if not isinstance(payload, dict):
        return None
    route_id = safe_str(payload.get("routeId") or payload.get("route_id"))
    if route_id is None:
        return None
    return FleetUpdate(
        route_id=route_id,
        buses=tuple(parse_vehicle_records(payload.get("buses"))),
        source=IngestionSource.CHANNEL,
    )


def build_update_from_roster(route_id: str, payload: Any) -> FleetUpdate:
    """Convert the initial roster list fetched for ``route_id``."""
    return FleetUpdate(
        route_id=route_id,
        buses=tuple(parse_vehicle_records(payload)),
        source=IngestionSource.HTTP,
    )
