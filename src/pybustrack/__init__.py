"""pybustrack - Async Python client for live bus tracking."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybustrack")
except PackageNotFoundError:
    __version__ = "0+local"
from pybustrack.client import BusTrackerClient, ClientState, Notice, NoticeKind
from pybustrack.config import TrackerConfig
from pybustrack.exceptions import (
    BusTrackChannelUnavailableError,
    BusTrackConfigError,
    BusTrackError,
    BusTrackStateError,
    BusTrackTimeoutError,
    BusTrackTransportError,
    BusTrackValidationError,
    LocationError,
    LocationPermissionError,
    LocationTimeoutError,
    LocationUnavailableError,
)
from pybustrack.geo import Region, bounding_region, display_distance_km, distance_km
from pybustrack.models import (
    Coordinate,
    OccupancyLevel,
    OperatingHours,
    Route,
    RouteGeometry,
    Stop,
    VehiclePosition,
    VehicleRecord,
    VehicleStatus,
)
from pybustrack.sampler import (
    CallbackGeolocationProvider,
    GeolocationProvider,
    GeolocationSampler,
    PositionError,
    PositionErrorKind,
    PositionFix,
    PositionSample,
    StaticGeolocationProvider,
)
from pybustrack.session import Role, Session, SessionMachine, SessionPhase
from pybustrack.state import FleetStore, FleetUpdate, IngestionSource, merge_batch
from pybustrack.view import FocusMode, FocusView, derive_focus

__all__ = [
    "__version__",
    "BusTrackChannelUnavailableError",
    "BusTrackConfigError",
    "BusTrackError",
    "BusTrackStateError",
    "BusTrackTimeoutError",
    "BusTrackTransportError",
    "BusTrackValidationError",
    "BusTrackerClient",
    "CallbackGeolocationProvider",
    "ClientState",
    "Coordinate",
    "FleetStore",
    "FleetUpdate",
    "FocusMode",
    "FocusView",
    "GeolocationProvider",
    "GeolocationSampler",
    "IngestionSource",
    "LocationError",
    "LocationPermissionError",
    "LocationTimeoutError",
    "LocationUnavailableError",
    "Notice",
    "NoticeKind",
    "OccupancyLevel",
    "OperatingHours",
    "PositionError",
    "PositionErrorKind",
    "PositionFix",
    "PositionSample",
    "Region",
    "Role",
    "Route",
    "RouteGeometry",
    "Session",
    "SessionMachine",
    "SessionPhase",
    "StaticGeolocationProvider",
    "Stop",
    "TrackerConfig",
    "VehiclePosition",
    "VehicleRecord",
    "VehicleStatus",
    "bounding_region",
    "derive_focus",
    "display_distance_km",
    "distance_km",
    "merge_batch",
]
