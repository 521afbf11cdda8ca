"""GeoJSON line features for drawing routes and diagnostics."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .models import ClosestRoadPoint, Point

ROUTE_STYLE = {"stroke": "#ff0000", "stroke-width": 8, "stroke-opacity": 1}
CONNECTOR_STYLE = {"stroke": "#ff8c00", "stroke-width": 4, "stroke-opacity": 0.8}


def _line_feature(points: Sequence[Point], style: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "Feature",
        "properties": dict(style),
        "geometry": {
            "type": "LineString",
            "coordinates": [[p.x, p.y] for p in points],
        },
    }


def create_path_geojson(path: Sequence[Point]) -> dict[str, Any]:
    """A single-feature collection holding the full route."""
    return {
        "type": "FeatureCollection",
        "features": [_line_feature(path, ROUTE_STYLE)],
    }


def create_connector_geojson(
    centers: Sequence[Point],
    start: ClosestRoadPoint | None,
    end: ClosestRoadPoint | None,
) -> dict[str, Any] | None:
    """Lines from each building centre to its nearest road point.

    Drawn when routing fails, to show where the route broke down. Returns None
    when neither connector could be computed.
    """
    features = []
    for center, road_point in zip(centers, (start, end)):
        if road_point is not None:
            features.append(_line_feature([center, road_point.point], CONNECTOR_STYLE))

    if not features:
        return None
    return {"type": "FeatureCollection", "features": features}
