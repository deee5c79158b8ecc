from __future__ import annotations

import math

import pytest

from pybustrack.geo import EARTH_RADIUS_KM, Region, bounding_region, display_distance_km, distance_km
from pybustrack.models.coordinate import Coordinate

CONNAUGHT_PLACE = Coordinate(lat=28.6139, lng=77.2090)
MODEL_TOWN = Coordinate(lat=28.7041, lng=77.1025)


def _spherical_cosines_km(a: Coordinate, b: Coordinate) -> float:
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_lambda = math.radians(b.lng - a.lng)
    cos_c = math.sin(phi1) * math.sin(phi2) + math.cos(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return EARTH_RADIUS_KM * math.acos(min(1.0, max(-1.0, cos_c)))


# ------------------------------------------------------------------
# distance_km
# ------------------------------------------------------------------


def test_distance_is_symmetric() -> None:
    assert distance_km(CONNAUGHT_PLACE, MODEL_TOWN) == pytest.approx(distance_km(MODEL_TOWN, CONNAUGHT_PLACE))


def test_distance_to_self_is_zero() -> None:
    assert distance_km(CONNAUGHT_PLACE, CONNAUGHT_PLACE) == 0.0


def test_delhi_pair_matches_reference() -> None:
    d = distance_km(CONNAUGHT_PLACE, MODEL_TOWN)
    assert abs(d - _spherical_cosines_km(CONNAUGHT_PLACE, MODEL_TOWN)) < 0.01
    assert abs(d - 14.44) < 0.05


@pytest.mark.parametrize(
    ("a", "b"),
    [
        ((51.5007, -0.1246), (40.6892, -74.0445)),
        ((-33.8568, 151.2153), (35.6586, 139.7454)),
        ((10.0, 10.0), (10.0, 11.0)),
        ((89.9, 0.0), (-89.9, 180.0)),
    ],
)
def test_distance_matches_reference_worldwide(a: tuple[float, float], b: tuple[float, float]) -> None:
    ca = Coordinate(lat=a[0], lng=a[1])
    cb = Coordinate(lat=b[0], lng=b[1])
    assert abs(distance_km(ca, cb) - _spherical_cosines_km(ca, cb)) < 0.01


def test_antipodal_points_do_not_produce_nan() -> None:
    d = distance_km(Coordinate(lat=45.0, lng=0.0), Coordinate(lat=-45.0, lng=180.0))
    assert not math.isnan(d)
    assert d == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-9)


def test_display_distance_rounds_to_one_decimal() -> None:
    assert display_distance_km(CONNAUGHT_PLACE, MODEL_TOWN) == 14.4


def test_display_distance_without_fix_is_none() -> None:
    assert display_distance_km(None, MODEL_TOWN) is None
    assert display_distance_km(CONNAUGHT_PLACE, None) is None


# ------------------------------------------------------------------
# bounding_region
# ------------------------------------------------------------------


def test_empty_input_has_no_region() -> None:
    assert bounding_region([]) is None
    assert bounding_region([None, None]) is None


def test_single_point_region_is_degenerate_but_valid() -> None:
    region = bounding_region([CONNAUGHT_PLACE])
    assert region is not None
    assert region.is_point
    assert region.center == CONNAUGHT_PLACE
    assert region.padded(0.5) == region


def test_region_covers_all_points_and_skips_missing() -> None:
    points = [CONNAUGHT_PLACE, None, MODEL_TOWN, Coordinate(lat=28.65, lng=77.30)]
    region = bounding_region(points)
    assert region == Region(min_lat=28.6139, min_lng=77.1025, max_lat=28.7041, max_lng=77.30)
    for point in points:
        if point is not None:
            assert region.contains(point)


def test_padded_region_is_clamped() -> None:
    region = Region(min_lat=-80.0, min_lng=-170.0, max_lat=80.0, max_lng=170.0).padded(0.5)
    assert region.min_lat == -90.0
    assert region.max_lat == 90.0
    assert region.min_lng == -180.0
    assert region.max_lng == 180.0
