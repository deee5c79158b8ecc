"""Route catalogue and roster endpoints.

Endpoints:
  - GET /api/routes
  - GET /api/routes/{routeId}/buses
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from pybustrack._constants import ROUTE_BUSES_ENDPOINT, ROUTES_ENDPOINT
from pybustrack._redact import redact_for_log
from pybustrack._transport import Transport
from pybustrack.ingestion.fleet import build_update_from_roster
from pybustrack.models.route import Route
from pybustrack.state.events import FleetUpdate

_logger = logging.getLogger(__name__)


def _parse_routes(payload: Any) -> list[Route]:
    if not isinstance(payload, list):
        _logger.debug("Routes payload is not a list: %s", redact_for_log(payload))
        return []
    routes: list[Route] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            routes.append(Route.model_validate(item))
        except ValidationError:
            _logger.debug("Skipping malformed route %s", redact_for_log(item), exc_info=True)
    return routes


async def fetch_routes(transport: Transport) -> list[Route]:
    """Fetch every route the server knows about."""
    payload = await transport.get_json(ROUTES_ENDPOINT)
    return _parse_routes(payload)


async def fetch_route_roster(transport: Transport, route_id: str) -> FleetUpdate:
    """Fetch the initial vehicle roster for ``route_id`` as an HTTP-sourced batch."""
    endpoint = ROUTE_BUSES_ENDPOINT.format(route_id=quote(route_id, safe=""))
    payload = await transport.get_json(endpoint)
    return build_update_from_roster(route_id, payload)
