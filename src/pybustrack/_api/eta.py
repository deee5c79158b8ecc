"""Optional route-geometry (ETA path) endpoint.

The server does not ship this endpoint yet. Every failure mode (disabled,
404, transport error, unusable body) resolves to ``None`` so a missing
path never disturbs the session.
"""

from __future__ import annotations

import logging

from pybustrack._transport import Transport
from pybustrack.exceptions import BusTrackTransportError
from pybustrack.models.coordinate import Coordinate
from pybustrack.models.geometry import RouteGeometry

_logger = logging.getLogger(__name__)


async def fetch_route_geometry(
    transport: Transport,
    eta_path: str | None,
    start: Coordinate,
    end: Coordinate,
) -> RouteGeometry | None:
    """Ask the server for a path from ``start`` to ``end``."""
    if not eta_path:
        return None
    payload = {
        "start": {"lat": start.lat, "lng": start.lng},
        "end": {"lat": end.lat, "lng": end.lng},
    }
    try:
        response = await transport.post_json(eta_path, payload)
    except BusTrackTransportError as exc:
        _logger.debug("Route geometry unavailable: %s", exc)
        return None
    return RouteGeometry.from_payload(response)
