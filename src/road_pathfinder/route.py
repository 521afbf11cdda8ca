"""Routing between two buildings over the road network of a scene.

The reported distance covers the road portion only, from the first snapped
road point to the last. The two legs joining each building centre to its
road point are drawn as part of the route but not counted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .geojson import create_connector_geojson, create_path_geojson
from .geometry import (
    building_center,
    extract_road_segments,
    find_closest_road_point,
    footprint_from_triangles,
)
from .graph import build_road_graph
from .models import Footprint, Point, RoadSegment, RouteResult, SceneElement
from .pathfinding import find_shortest_path

logger = logging.getLogger(__name__)

NO_ROADS = "no roads found in the scene"
NO_BUILDING_GEOMETRY = "could not get building geometry"
NO_ROADS_NEAR_BUILDINGS = "could not find roads near buildings"


def calculate_route(centers: Sequence[Point], segments: Sequence[RoadSegment]) -> RouteResult:
    """Shortest road route between two query points.

    The drawn route runs ``center0 -> road point -> ... -> road point ->
    center1``. Failures carry connector lines in ``geojson`` when available.
    """
    if not segments:
        logger.info("Routing failed: %s", NO_ROADS)
        return RouteResult(success=False, error=NO_ROADS)

    if len(centers) != 2:
        logger.info("Routing failed: got %d query points", len(centers))
        return RouteResult(success=False, error=NO_BUILDING_GEOMETRY)

    start_road = find_closest_road_point(centers[0], segments)
    end_road = find_closest_road_point(centers[1], segments)

    if start_road is None or end_road is None:
        logger.info("Routing failed: %s", NO_ROADS_NEAR_BUILDINGS)
        return RouteResult(
            success=False,
            error=NO_ROADS_NEAR_BUILDINGS,
            geojson=create_connector_geojson(centers, start_road, end_road),
        )

    graph = build_road_graph(segments)
    result = find_shortest_path(start_road.point, end_road.point, graph, segments)

    if not result.success:
        logger.info("Routing failed: %s", result.error)
        return RouteResult(
            success=False,
            error=result.error or "no path found",
            geojson=create_connector_geojson(centers, start_road, end_road),
        )

    full_path = [centers[0], start_road.point, *result.path, end_road.point, centers[1]]
    logger.info("Route found: %.1f via %d points", result.distance, len(full_path))
    return RouteResult(
        success=True,
        distance=result.distance,
        geojson=create_path_geojson(full_path),
    )


def element_footprint(element: SceneElement) -> Footprint | None:
    """Footprint of a scene element, falling back to its mesh bounding box."""
    if element.coordinates:
        return Footprint(path=element.path, coordinates=element.coordinates)
    if element.triangles:
        return footprint_from_triangles(element.path, element.triangles)
    return None


def road_segments(roads: Iterable[Footprint]) -> list[RoadSegment]:
    """All segments of all road footprints, in input order."""
    segments: list[RoadSegment] = []
    for road in roads:
        segments.extend(extract_road_segments(road))
    return segments


def calculate_path(
    roads: Iterable[Footprint], buildings: Iterable[Footprint | None]
) -> RouteResult:
    """Route between the two given buildings over the given roads.

    Buildings without geometry are skipped; anything other than exactly two
    usable buildings is an error.
    """
    segments = road_segments(roads)
    if not segments:
        logger.info("Routing failed: %s", NO_ROADS)
        return RouteResult(success=False, error=NO_ROADS)

    centers = [building_center(b) for b in buildings if b is not None and b.coordinates]
    if len(centers) != 2:
        logger.info("Routing failed: %d buildings with geometry", len(centers))
        return RouteResult(success=False, error=NO_BUILDING_GEOMETRY)

    return calculate_route(centers, segments)


def filter_selected_buildings(
    selected_paths: Iterable[str], building_paths: Iterable[str]
) -> list[str]:
    """Keep the selected paths that are buildings, in selection order."""
    buildings = set(building_paths)
    return [path for path in selected_paths if path in buildings]


def selection_status(selected_count: int) -> str:
    if selected_count == 0:
        return "Select two buildings to find the shortest path"
    if selected_count == 1:
        return "Select one more building"
    if selected_count == 2:
        return "Ready to find path"
    return f"{selected_count} buildings selected (need exactly 2)"
