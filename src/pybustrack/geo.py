"""Geospatial helpers: great-circle distance and bounding regions.

All functions are pure. Points without a fix (``None``) are skipped rather
than treated as ``(0, 0)``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from pybustrack.models.coordinate import Coordinate

#: Mean Earth radius in kilometres used by the haversine formula.
EARTH_RADIUS_KM = 6371.0


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance between two coordinates, full precision."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def display_distance_km(a: Coordinate | None, b: Coordinate | None) -> float | None:
    """Distance rounded to one decimal place, ``None`` if either side has no fix."""
    if a is None or b is None:
        return None
    return round(distance_km(a, b), 1)


@dataclass(frozen=True)
class Region:
    """Axis-aligned lat/lng rectangle."""

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    @property
    def center(self) -> Coordinate:
        return Coordinate(lat=(self.min_lat + self.max_lat) / 2, lng=(self.min_lng + self.max_lng) / 2)

    @property
    def is_point(self) -> bool:
        return self.min_lat == self.max_lat and self.min_lng == self.max_lng

    def contains(self, point: Coordinate) -> bool:
        return self.min_lat <= point.lat <= self.max_lat and self.min_lng <= point.lng <= self.max_lng

    def padded(self, fraction: float) -> Region:
        """Grow each side by ``fraction`` of the span, clamped to valid ranges."""
        lat_pad = (self.max_lat - self.min_lat) * fraction
        lng_pad = (self.max_lng - self.min_lng) * fraction
        return Region(
            min_lat=max(-90.0, self.min_lat - lat_pad),
            min_lng=max(-180.0, self.min_lng - lng_pad),
            max_lat=min(90.0, self.max_lat + lat_pad),
            max_lng=min(180.0, self.max_lng + lng_pad),
        )


def bounding_region(points: Iterable[Coordinate | None]) -> Region | None:
    """Smallest region covering every point with a fix.

    Returns ``None`` when no point has a fix; callers fall back to a
    default view.
    """
    region: Region | None = None
    for point in points:
        if point is None:
            continue
        if region is None:
            region = Region(min_lat=point.lat, min_lng=point.lng, max_lat=point.lat, max_lng=point.lng)
            continue
        region = Region(
            min_lat=min(region.min_lat, point.lat),
            min_lng=min(region.min_lng, point.lng),
            max_lat=max(region.max_lat, point.lat),
            max_lng=max(region.max_lng, point.lng),
        )
    return region
