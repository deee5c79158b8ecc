"""Geolocation sampling at a role-dependent cadence.

The sampler asks a :class:`GeolocationProvider` for a fresh high-accuracy
fix once immediately and then once per interval (10 s for drivers, 30 s
for commuters by default). Sensor failures are yielded as
:class:`PositionError` values; they never stop the sequence.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol

from pybustrack.config import TrackerConfig
from pybustrack.exceptions import (
    BusTrackStateError,
    LocationError,
    LocationPermissionError,
    LocationUnavailableError,
)
from pybustrack.models.coordinate import Coordinate
from pybustrack.session import Role

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _log_task_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        _logger.warning("Sampler stopped unexpectedly", exc_info=exc)


@dataclass(frozen=True)
class PositionFix:
    """A raw fix as reported by the platform."""

    coordinates: Coordinate
    speed: float | None = None
    """Speed in km/h, when the sensor reports one."""
    accuracy: float | None = None
    """Horizontal accuracy in metres."""
    timestamp: datetime = field(default_factory=_utcnow)


class PositionErrorKind(StrEnum):
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class PositionSample:
    fix: PositionFix
    out_of_band: bool = False
    """True for the immediate fix requested at start."""


@dataclass(frozen=True)
class PositionError:
    kind: PositionErrorKind
    message: str = ""
    out_of_band: bool = False


SampleResult = PositionSample | PositionError
SampleHandler = Callable[[SampleResult], Awaitable[None] | None]


class GeolocationProvider(Protocol):
    """Structural interface for the platform's position sensor.

    Implementations raise :class:`~pybustrack.exceptions.LocationPermissionError`,
    :class:`~pybustrack.exceptions.LocationTimeoutError` or
    :class:`~pybustrack.exceptions.LocationUnavailableError`.
    """

    async def get_position(self, *, high_accuracy: bool, timeout: float, maximum_age: float) -> PositionFix: ...


class StaticGeolocationProvider:
    """Reports a fixed position; useful for kiosks, replays and tests."""

    def __init__(self, coordinates: Coordinate | None, *, speed: float | None = None) -> None:
        self._coordinates = coordinates
        self._speed = speed

    def move_to(self, coordinates: Coordinate | None, *, speed: float | None = None) -> None:
        self._coordinates = coordinates
        self._speed = speed

    async def get_position(self, *, high_accuracy: bool, timeout: float, maximum_age: float) -> PositionFix:
        if self._coordinates is None:
            raise LocationUnavailableError("No position configured")
        return PositionFix(coordinates=self._coordinates, speed=self._speed)


class CallbackGeolocationProvider:
    """Adapts an async callable returning a coordinate (or a full fix)."""

    def __init__(self, fetch: Callable[[], Awaitable[PositionFix | Coordinate | None]]) -> None:
        self._fetch = fetch

    async def get_position(self, *, high_accuracy: bool, timeout: float, maximum_age: float) -> PositionFix:
        result = await self._fetch()
        if isinstance(result, PositionFix):
            return result
        coordinates = Coordinate.parse(result)
        if coordinates is None:
            raise LocationUnavailableError("Position source returned no valid fix")
        return PositionFix(coordinates=coordinates)


class GeolocationSampler:
    """Restartable, single-timer position sampler.

    ``start`` always cancels the previous timer task before creating a new
    one, so at most one sampling loop is alive per sampler.
    """

    def __init__(
        self,
        provider: GeolocationProvider,
        config: TrackerConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._config = config
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self._role: Role | None = None
        self._on_result: SampleHandler | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def role(self) -> Role | None:
        return self._role if self.is_running else None

    @property
    def interval(self) -> float | None:
        """Active sampling interval in seconds, ``None`` when stopped."""
        role = self.role
        return self._config.interval_for(role) if role is not None else None

    async def _request_fix(self, *, out_of_band: bool = False) -> SampleResult:
        timeout = self._config.fix_timeout
        try:
            fix = await asyncio.wait_for(
                self._provider.get_position(high_accuracy=True, timeout=timeout, maximum_age=0.0),
                timeout,
            )
        except LocationPermissionError as exc:
            return PositionError(PositionErrorKind.PERMISSION_DENIED, str(exc), out_of_band)
        except TimeoutError as exc:
            return PositionError(PositionErrorKind.TIMEOUT, str(exc) or "Position fix timed out", out_of_band)
        except LocationError as exc:
            return PositionError(PositionErrorKind.UNAVAILABLE, str(exc), out_of_band)
        except Exception as exc:
            _logger.debug("Geolocation provider failed", exc_info=True)
            return PositionError(PositionErrorKind.UNAVAILABLE, str(exc) or type(exc).__name__, out_of_band)
        return PositionSample(fix=fix, out_of_band=out_of_band)

    async def samples(self, role: Role | str) -> AsyncIterator[SampleResult]:
        """Lazy, infinite sequence of fixes for ``role``.

        The first item is the immediate out-of-band fix; later items are
        spaced ``interval_for(role)`` seconds apart, measured from the
        start of the previous request.
        """
        interval = self._config.interval_for(Role(role))
        yield await self._request_fix(out_of_band=True)
        next_tick = self._clock() + interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - self._clock()))
            next_tick += interval
            yield await self._request_fix()

    async def _run(self, role: Role, on_result: SampleHandler) -> None:
        async for result in self.samples(role):
            if isinstance(result, PositionError):
                _logger.debug("Position fix failed kind=%s message=%s", result.kind.value, result.message)
            try:
                outcome = on_result(result)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                _logger.warning("Sample handler failed", exc_info=True)

    async def start(self, role: Role | str, on_result: SampleHandler) -> None:
        """(Re)start sampling for ``role``; the old timer is fully cancelled first."""
        await self.stop()
        self._on_result = on_result
        self._role = Role(role)
        _logger.debug("Sampler start role=%s interval=%s", self._role.value, self._config.interval_for(self._role))
        self._task = asyncio.create_task(self._run(self._role, on_result), name="pybustrack-sampler")
        self._task.add_done_callback(_log_task_failure)

    async def restart(self, role: Role | str) -> None:
        """Restart with the handler given to the last ``start``."""
        if self._on_result is None:
            raise BusTrackStateError("Sampler was never started")
        await self.start(role, self._on_result)

    async def stop(self) -> None:
        task = self._task
        self._task = None
        self._role = None
        if task is None or task.done():
            return
        task.cancel()
        # A handler may stop its own sampler; it cannot await itself.
        if task is asyncio.current_task():
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.debug("Sampler stopped")
