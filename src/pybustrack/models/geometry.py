"""Route geometry returned by the optional path/ETA endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pybustrack.ingestion.normalize import safe_float
from pybustrack.models.coordinate import Coordinate


class RouteGeometry(BaseModel):
    """GeoJSON ``FeatureCollection`` describing a path between two points.

    Only the first feature is interpreted. Its coordinates are GeoJSON
    ``[lng, lat]`` pairs.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    features: list[dict[str, Any]] = Field(default_factory=list)
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)

    def _first_feature(self) -> dict[str, Any]:
        return self.features[0] if self.features else {}

    def polyline(self) -> list[Coordinate]:
        """Path vertices as ``Coordinate`` objects, invalid vertices skipped."""
        geometry = self._first_feature().get("geometry")
        if not isinstance(geometry, dict):
            return []
        points = geometry.get("coordinates")
        if not isinstance(points, list):
            return []
        result: list[Coordinate] = []
        for point in points:
            if isinstance(point, (list, tuple)) and len(point) >= 2:
                coordinate = Coordinate.parse((point[1], point[0]))
                if coordinate is not None:
                    result.append(coordinate)
        return result

    def _summary(self) -> dict[str, Any]:
        properties = self._first_feature().get("properties")
        if not isinstance(properties, dict):
            return {}
        summary = properties.get("summary")
        return summary if isinstance(summary, dict) else {}

    @property
    def distance_m(self) -> float | None:
        return safe_float(self._summary().get("distance"))

    @property
    def duration_s(self) -> float | None:
        return safe_float(self._summary().get("duration"))

    @classmethod
    def from_payload(cls, payload: Any) -> RouteGeometry | None:
        """Parse a response body; ``None`` when it carries no usable path."""
        if not isinstance(payload, dict):
            return None
        features = payload.get("features")
        if not isinstance(features, list) or not features:
            return None
        geometry = cls(features=[f for f in features if isinstance(f, dict)], raw=payload)
        if not geometry.polyline():
            return None
        return geometry
