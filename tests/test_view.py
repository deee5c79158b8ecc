from __future__ import annotations

from typing import Any

from pybustrack.geo import Region
from pybustrack.models.coordinate import Coordinate
from pybustrack.models.route import Route
from pybustrack.models.vehicle import VehicleRecord
from pybustrack.view import FocusMode, derive_focus


def _bus(vehicle_id: str, lat: float | None, lng: float | None) -> VehicleRecord:
    payload: dict[str, Any] = {"busNumber": vehicle_id}
    if lat is not None and lng is not None:
        payload["coordinates"] = {"lat": lat, "lng": lng}
    return VehicleRecord.model_validate(payload)


def _route(*stops: tuple[float, float]) -> Route:
    return Route.model_validate(
        {
            "routeId": "R1",
            "stops": [
                {"stopId": f"S{i}", "coordinates": {"lat": lat, "lng": lng}, "order": i}
                for i, (lat, lng) in enumerate(stops)
            ],
        }
    )


def test_selected_vehicle_and_self_frame_exactly_two_points() -> None:
    view = derive_focus(
        self_position=Coordinate(lat=10, lng=11),
        selected_vehicle=_bus("A", 10, 10),
        route=None,
        vehicles=[],
    )
    assert view.mode == FocusMode.FIT
    assert set(view.points) == {Coordinate(lat=10, lng=10), Coordinate(lat=10, lng=11)}
    assert view.padding == 80
    assert view.region == Region(min_lat=10, min_lng=10, max_lat=10, max_lng=11)


def test_route_with_vehicles_frames_vehicles_and_stops() -> None:
    vehicles = [_bus("A", 1, 1), _bus("B", 2, 2)]
    view = derive_focus(self_position=None, selected_vehicle=None, route=_route((3, 3)), vehicles=vehicles)

    assert view.mode == FocusMode.FIT
    assert set(view.points) == {Coordinate(lat=1, lng=1), Coordinate(lat=2, lng=2), Coordinate(lat=3, lng=3)}
    assert len(view.points) == 3
    assert view.padding == 50


def test_route_framing_includes_self_and_skips_vehicles_without_fix() -> None:
    vehicles = [_bus("A", 1, 1), _bus("B", None, None)]
    me = Coordinate(lat=4, lng=4)
    view = derive_focus(self_position=me, selected_vehicle=None, route=_route((3, 3)), vehicles=vehicles)

    assert view.mode == FocusMode.FIT
    assert set(view.points) == {Coordinate(lat=1, lng=1), Coordinate(lat=3, lng=3), me}


def test_selected_vehicle_without_self_falls_through_to_route() -> None:
    vehicles = [_bus("A", 1, 1), _bus("B", 2, 2)]
    view = derive_focus(self_position=None, selected_vehicle=vehicles[0], route=_route((3, 3)), vehicles=vehicles)

    assert view.padding == 50
    assert len(view.points) == 3


def test_route_without_vehicles_is_ignored() -> None:
    me = Coordinate(lat=4, lng=4)
    view = derive_focus(self_position=me, selected_vehicle=None, route=_route((3, 3)), vehicles=[])

    assert view.mode == FocusMode.CENTER
    assert view.points == (me,)
    assert view.zoom == 15
    assert view.center == me


def test_nothing_known_gives_default_view() -> None:
    view = derive_focus(self_position=None, selected_vehicle=None, route=None, vehicles=[])

    assert view.mode == FocusMode.DEFAULT
    assert view.points == ()
    assert view.region is None
    assert view.zoom == 13
    assert view.center == Coordinate(lat=28.6139, lng=77.2090)


def test_route_whose_vehicles_and_stops_lack_fixes_falls_back() -> None:
    route = Route.model_validate({"routeId": "R1", "stops": [{"stopId": "S1"}]})
    view = derive_focus(self_position=None, selected_vehicle=None, route=route, vehicles=[_bus("A", None, None)])

    assert view.mode == FocusMode.DEFAULT
