"""In-memory fleet store for the tracked route.

This is the only component allowed to merge incoming fleet batches.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import UTC, datetime, timedelta
from types import MappingProxyType

from pybustrack.models.vehicle import VehicleRecord
from pybustrack.state.events import FleetUpdate
from pybustrack.state.policy import is_stale, should_accept_batch

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def merge_batch(
    current_route_id: str | None,
    records: Mapping[str, VehicleRecord],
    batch: Iterable[VehicleRecord],
    for_route_id: str,
) -> dict[str, VehicleRecord]:
    """Merge ``batch`` into ``records`` and return the resulting mapping.

    - A batch for another route leaves the mapping unchanged.
    - A record whose ``vehicle_id`` is already known replaces it wholesale.
    - Unknown ids are added. Nothing is ever removed.

    When a batch names the same vehicle twice the later record wins.
    """
    merged = dict(records)
    if not should_accept_batch(current_route_id=current_route_id, batch_route_id=for_route_id):
        return merged
    for record in batch:
        merged[record.vehicle_id] = record
    return merged


class FleetStore:
    """Keyed vehicle records for the single tracked route.

    Iteration order carries no meaning; consumers look records up by
    ``vehicle_id``.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._route_id: str | None = None
        self._records: dict[str, VehicleRecord] = {}

    @property
    def current_route_id(self) -> str | None:
        return self._route_id

    @property
    def vehicles(self) -> Mapping[str, VehicleRecord]:
        """Read-only snapshot of the current records."""
        return MappingProxyType(dict(self._records))

    def reset(self, route_id: str | None) -> None:
        """Drop every record and start tracking ``route_id``."""
        _logger.debug("Fleet store reset route=%s dropped=%d", route_id, len(self._records))
        self._route_id = route_id
        self._records = {}

    def apply(self, update: FleetUpdate) -> bool:
        """Merge a batch. Returns ``False`` when it was discarded as stale-route."""
        if not should_accept_batch(current_route_id=self._route_id, batch_route_id=update.route_id):
            _logger.debug(
                "Discarding %s batch for route=%s (tracking %s)",
                update.source.value,
                update.route_id,
                self._route_id,
            )
            return False
        self._records = merge_batch(self._route_id, self._records, update.buses, update.route_id)
        _logger.debug(
            "Applied %s batch route=%s size=%d total=%d",
            update.source.value,
            update.route_id,
            len(update.buses),
            len(self._records),
        )
        return True

    def get(self, vehicle_id: str) -> VehicleRecord | None:
        return self._records.get(vehicle_id)

    def stale_vehicle_ids(self, max_age: timedelta, *, now: datetime | None = None) -> list[str]:
        """Ids of records not refreshed within ``max_age``. Nothing is evicted."""
        current = now or self._clock()
        return [vid for vid, record in self._records.items() if is_stale(record, now=current, max_age=max_age)]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._records

    def __iter__(self) -> Iterator[VehicleRecord]:
        return iter(list(self._records.values()))
