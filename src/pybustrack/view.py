"""Viewport framing for the external map renderer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from pybustrack._constants import (
    DEFAULT_CENTER,
    DEFAULT_ZOOM,
    ROUTE_FIT_PADDING_PX,
    SELF_ZOOM,
    VEHICLE_FIT_PADDING_PX,
)
from pybustrack.geo import Region, bounding_region
from pybustrack.models.coordinate import Coordinate
from pybustrack.models.route import Route
from pybustrack.models.vehicle import VehicleRecord


class FocusMode(StrEnum):
    FIT = "fit"
    """Fit ``region`` with ``padding`` pixels."""
    CENTER = "center"
    """Center on the single point at ``zoom``."""
    DEFAULT = "default"
    """Nothing to frame; show ``center`` at ``zoom``."""


@dataclass(frozen=True)
class FocusView:
    mode: FocusMode
    points: tuple[Coordinate, ...] = ()
    padding: int = 0
    zoom: int | None = None

    @property
    def region(self) -> Region | None:
        return bounding_region(self.points)

    @property
    def center(self) -> Coordinate:
        if self.mode == FocusMode.CENTER and self.points:
            return self.points[0]
        region = self.region
        if region is not None:
            return region.center
        return Coordinate(lat=DEFAULT_CENTER[0], lng=DEFAULT_CENTER[1])


def derive_focus(
    *,
    self_position: Coordinate | None,
    selected_vehicle: VehicleRecord | None,
    route: Route | None,
    vehicles: Iterable[VehicleRecord],
) -> FocusView:
    """Pick what the map should frame.

    Strict precedence, first match wins:

    1. selected vehicle with a fix and a known self position
    2. a selected route with at least one vehicle: every vehicle and stop,
       plus self if known
    3. self position only, at a close-in zoom
    4. nothing: the default view
    """
    if selected_vehicle is not None and selected_vehicle.coordinates is not None and self_position is not None:
        return FocusView(
            mode=FocusMode.FIT,
            points=(self_position, selected_vehicle.coordinates),
            padding=VEHICLE_FIT_PADDING_PX,
        )

    fleet = list(vehicles)
    if route is not None and fleet:
        points = [record.coordinates for record in fleet if record.coordinates is not None]
        points.extend(route.stop_coordinates())
        if self_position is not None:
            points.append(self_position)
        if points:
            return FocusView(mode=FocusMode.FIT, points=tuple(points), padding=ROUTE_FIT_PADDING_PX)

    if self_position is not None:
        return FocusView(mode=FocusMode.CENTER, points=(self_position,), zoom=SELF_ZOOM)

    return FocusView(mode=FocusMode.DEFAULT, zoom=DEFAULT_ZOOM)
