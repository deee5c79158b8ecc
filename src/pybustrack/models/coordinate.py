"""Coordinate model."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from pybustrack.ingestion.normalize import safe_float

_LAT_KEYS = ("lat", "latitude")
_LNG_KEYS = ("lng", "lon", "longitude")


def _first_present(values: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in values:
            return values[key]
    return None


class Coordinate(BaseModel):
    """A WGS84 position in decimal degrees.

    Constructing a ``Coordinate`` directly validates ranges strictly. Use
    :meth:`parse` for untrusted input: it returns ``None`` ("no fix") for
    anything missing, non-numeric or out of range instead of raising.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    lat: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("lng", "lon", "longitude"))

    @classmethod
    def parse(cls, value: Any) -> Coordinate | None:
        """Best-effort coercion of a mapping, pair or ``Coordinate``.

        Returns ``None`` for absent or invalid values. The exact ``(0, 0)``
        point is the server's placeholder for "never reported" and is also
        treated as no fix.
        """
        if value is None:
            return None
        if isinstance(value, Coordinate):
            return value
        if isinstance(value, Mapping):
            lat = safe_float(_first_present(value, _LAT_KEYS))
            lng = safe_float(_first_present(value, _LNG_KEYS))
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and len(value) == 2:
            lat = safe_float(value[0])
            lng = safe_float(value[1])
        else:
            return None

        if lat is None or lng is None:
            return None
        if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
            return None
        if lat == 0.0 and lng == 0.0:
            return None
        return cls(lat=lat, lng=lng)

    def as_pair(self) -> tuple[float, float]:
        """``(lat, lng)`` tuple, the order map renderers expect."""
        return (self.lat, self.lng)
