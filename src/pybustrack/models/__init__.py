"""Data models for tracking-server payloads."""

from pybustrack.models._base import BusTrackBaseModel, BusTrackEnum, Instant
from pybustrack.models.coordinate import Coordinate
from pybustrack.models.geometry import RouteGeometry
from pybustrack.models.position import VehiclePosition
from pybustrack.models.route import OperatingHours, Route, Stop
from pybustrack.models.vehicle import OccupancyLevel, VehicleRecord, VehicleStatus

__all__ = [
    "BusTrackBaseModel",
    "BusTrackEnum",
    "Coordinate",
    "Instant",
    "OccupancyLevel",
    "OperatingHours",
    "Route",
    "RouteGeometry",
    "Stop",
    "VehiclePosition",
    "VehicleRecord",
    "VehicleStatus",
]
