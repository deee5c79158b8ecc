"""Client configuration for pybustrack."""

from __future__ import annotations

import dataclasses
import math
import os
from typing import Any

from pybustrack._constants import BASE_URL
from pybustrack.exceptions import BusTrackConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise BusTrackConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Tracking server base URL. Serves both the REST collaborators and the
        Socket.IO realtime channel.
    driver_interval : float
        Seconds between position fixes while the session role is driver.
    commuter_interval : float
        Seconds between position fixes while the session role is commuter.
    fix_timeout : float
        Upper bound in seconds for a single geolocation fix. Independent of
        the sampling interval.
    http_timeout : float
        Total timeout in seconds for one REST request.
    eta_path : str or None
        Path of the optional route-geometry endpoint (e.g.
        ``"/api/locations/route"``). ``None`` disables ETA lookups.
    resubscribe_on_reconnect : bool
        Re-issue the current ``track-route`` subscription whenever the
        channel (re)connects.
    reconnection_delay : float
        Initial delay in seconds between channel reconnection attempts.
    socketio_path : str
        Socket.IO endpoint path on the server.
    """

    base_url: str = BASE_URL
    driver_interval: float = 10.0
    commuter_interval: float = 30.0
    fix_timeout: float = 5.0
    http_timeout: float = 10.0
    eta_path: str | None = None
    resubscribe_on_reconnect: bool = True
    reconnection_delay: float = 1.0
    socketio_path: str = "socket.io"

    def __post_init__(self) -> None:
        if not self.base_url.strip():
            raise BusTrackConfigError("base_url must be non-empty")
        for name in ("driver_interval", "commuter_interval", "fix_timeout", "http_timeout"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise BusTrackConfigError(f"{name} must be a positive number")
        if not math.isfinite(self.reconnection_delay) or self.reconnection_delay < 0:
            raise BusTrackConfigError("reconnection_delay must be a non-negative number")
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads ``BUSTRACK_BASE_URL`` and the optional ``BUSTRACK_*`` tuning
        variables. Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TrackerConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("BUSTRACK_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url

        eta_path = env.get("BUSTRACK_ETA_PATH")
        if eta_path is not None:
            config_kwargs["eta_path"] = eta_path.strip() or None

        _ENV_FLOAT_MAP = {
            "BUSTRACK_DRIVER_INTERVAL": "driver_interval",
            "BUSTRACK_COMMUTER_INTERVAL": "commuter_interval",
            "BUSTRACK_FIX_TIMEOUT": "fix_timeout",
            "BUSTRACK_HTTP_TIMEOUT": "http_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "resubscribe_on_reconnect" not in overrides:
            config_kwargs["resubscribe_on_reconnect"] = _env_bool(env.get("BUSTRACK_RESUBSCRIBE"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

    def interval_for(self, role: str) -> float:
        """Sampling interval in seconds for a session role value."""
        return self.driver_interval if role == "driver" else self.commuter_interval
