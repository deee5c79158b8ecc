"""Fleet merge policy.

No payload parsing here; the ingestion boundary produces validated
:class:`~pybustrack.models.vehicle.VehicleRecord` objects.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pybustrack.models.vehicle import VehicleRecord


def should_accept_batch(*, current_route_id: str | None, batch_route_id: str) -> bool:
    """A batch is applied only when it targets the route currently tracked."""
    return current_route_id is not None and current_route_id == batch_route_id


def is_stale(record: VehicleRecord, *, now: datetime, max_age: timedelta) -> bool:
    """Whether a record has not been refreshed within ``max_age``.

    Records without ``last_updated`` count as stale. Staleness is reported
    only; the store never evicts on it.
    """
    if record.last_updated is None:
        return True
    return now - record.last_updated > max_age
