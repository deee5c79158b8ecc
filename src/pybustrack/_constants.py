"""Internal constants shared across the library."""

BASE_URL = "http://localhost:4000"
USER_AGENT = "pybustrack/0.1"

# ------------------------------------------------------------------
# Realtime channel event names
# ------------------------------------------------------------------

EVENT_TRACK_ROUTE = "track-route"
EVENT_LOCATION_UPDATE = "bus-location-update"
EVENT_BUSES_UPDATED = "buses-updated"

# ------------------------------------------------------------------
# REST endpoints
# ------------------------------------------------------------------

ROUTES_ENDPOINT = "/api/routes"
ROUTE_BUSES_ENDPOINT = "/api/routes/{route_id}/buses"

# ------------------------------------------------------------------
# Viewport framing
# ------------------------------------------------------------------

DEFAULT_CENTER = (28.6139, 77.2090)  # New Delhi
DEFAULT_ZOOM = 13
SELF_ZOOM = 15
VEHICLE_FIT_PADDING_PX = 80
ROUTE_FIT_PADDING_PX = 50
