"""Custom exception hierarchy for pybustrack."""

from __future__ import annotations


class BusTrackError(Exception):
    """Base exception for all pybustrack errors."""


class BusTrackConfigError(BusTrackError):
    """Invalid or missing configuration."""


class BusTrackValidationError(BusTrackError, ValueError):
    """User-supplied input rejected before any state change (e.g. empty driver id)."""


class BusTrackStateError(BusTrackError):
    """Operation not valid in the current session phase."""


class BusTrackTransportError(BusTrackError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class BusTrackTimeoutError(BusTrackTransportError, TimeoutError):
    """A REST fetch exceeded ``TrackerConfig.http_timeout``."""


class BusTrackChannelUnavailableError(BusTrackError):
    """The realtime channel is disconnected.

    Outbound events are dropped rather than queued; this is raised only by
    operations that cannot degrade silently, such as connecting.
    """


class LocationError(BusTrackError):
    """Base class for geolocation sampling failures."""


class LocationPermissionError(LocationError, PermissionError):
    """The platform denied access to the position sensor."""


class LocationTimeoutError(LocationError, TimeoutError):
    """No fix was obtained within ``TrackerConfig.fix_timeout``."""


class LocationUnavailableError(LocationError):
    """Position sensing is not supported or the fix was invalid."""
