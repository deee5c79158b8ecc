"""Session state: actor role and the client-side driver login gate."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from pybustrack.exceptions import BusTrackStateError, BusTrackValidationError

_logger = logging.getLogger(__name__)


class Role(StrEnum):
    COMMUTER = "commuter"
    DRIVER = "driver"


class SessionPhase(StrEnum):
    UNSELECTED = "unselected"
    COMMUTER_ACTIVE = "commuter_active"
    DRIVER_PENDING_LOGIN = "driver_pending_login"
    DRIVER_ACTIVE = "driver_active"


class Session(BaseModel):
    """Immutable snapshot of the session.

    Parameters
    ----------
    phase : SessionPhase
        Current state-machine phase.
    role : Role or None
        Chosen actor role; ``None`` until a role is selected.
    driver_vehicle_id : str or None
        Vehicle the driver logged in as. Set only in ``DRIVER_ACTIVE``.
    authenticated : bool
        Whether the driver login gate has been passed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    phase: SessionPhase = SessionPhase.UNSELECTED
    role: Role | None = None
    driver_vehicle_id: str | None = None
    authenticated: bool = False

    @property
    def emission_enabled(self) -> bool:
        """Whether sampled positions may be published to the channel."""
        return self.phase == SessionPhase.DRIVER_ACTIVE

    @property
    def sampling_role(self) -> Role:
        """Role that selects the sampling cadence."""
        return Role.DRIVER if self.role == Role.DRIVER else Role.COMMUTER

    @property
    def sampling_key(self) -> tuple[Role, bool, str | None]:
        """Any change to this tuple invalidates the running sampler."""
        return (self.sampling_role, self.authenticated, self.driver_vehicle_id)


SessionListener = Callable[[Session, Session], None]


class SessionMachine:
    """Owns the single :class:`Session` of a client and its transitions.

    ``UNSELECTED → COMMUTER_ACTIVE`` and
    ``UNSELECTED → DRIVER_PENDING_LOGIN → DRIVER_ACTIVE``; ``logout``
    returns either active phase to ``UNSELECTED``.
    """

    def __init__(self) -> None:
        self._session = Session()
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> Session:
        return self._session

    @property
    def phase(self) -> SessionPhase:
        return self._session.phase

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register a ``(previous, current)`` callback; returns a remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _require(self, *phases: SessionPhase, action: str) -> None:
        if self._session.phase not in phases:
            raise BusTrackStateError(f"Cannot {action} from phase {self._session.phase.value}")

    def _transition(self, new: Session) -> Session:
        previous = self._session
        self._session = new
        _logger.debug("Session %s -> %s", previous.phase.value, new.phase.value)
        for listener in list(self._listeners):
            listener(previous, new)
        return new

    def choose_role(self, role: Role | str) -> Session:
        self._require(SessionPhase.UNSELECTED, action="choose a role")
        chosen = Role(role)
        if chosen == Role.COMMUTER:
            return self._transition(Session(phase=SessionPhase.COMMUTER_ACTIVE, role=Role.COMMUTER))
        return self._transition(Session(phase=SessionPhase.DRIVER_PENDING_LOGIN, role=Role.DRIVER))

    def login(self, vehicle_id: str) -> Session:
        """Pass the driver gate as ``vehicle_id``.

        Raises
        ------
        BusTrackValidationError
            If the trimmed id is empty. The session is left unchanged.
        """
        self._require(SessionPhase.DRIVER_PENDING_LOGIN, action="log in")
        trimmed = (vehicle_id or "").strip()
        if not trimmed:
            raise BusTrackValidationError("Vehicle id must be non-empty")
        return self._transition(
            Session(
                phase=SessionPhase.DRIVER_ACTIVE,
                role=Role.DRIVER,
                driver_vehicle_id=trimmed,
                authenticated=True,
            )
        )

    def back_to_role_select(self) -> Session:
        self._require(SessionPhase.DRIVER_PENDING_LOGIN, action="go back to role selection")
        return self._transition(Session())

    def logout(self) -> Session:
        self._require(SessionPhase.DRIVER_ACTIVE, SessionPhase.COMMUTER_ACTIVE, action="log out")
        return self._transition(Session())
