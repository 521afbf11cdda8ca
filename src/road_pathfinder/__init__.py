"""Shortest routes between buildings over a network of road segments."""

from .geojson import create_connector_geojson, create_path_geojson
from .geometry import (
    building_center,
    canonical_id,
    centroid,
    closest_point_on_segment,
    distance,
    extract_road_segments,
    find_closest_road_point,
    footprint_from_triangles,
    intersection_point,
    point_from_id,
    points_equal,
    segments_intersect,
)
from .graph import RoadGraph, build_road_graph
from .kml_reader import read_kmz_footprints
from .models import (
    ClosestRoadPoint,
    Footprint,
    FootprintMetadata,
    GraphEdge,
    GraphNode,
    PathResult,
    Point,
    RoadSegment,
    RouteResult,
    SceneElement,
)
from .pathfinding import add_point_to_graph, dijkstra, find_shortest_path
from .projection import calculate_projected_path, is_geographic, utm_crs_for
from .reader import detect_crs, read_footprints
from .route import (
    calculate_path,
    calculate_route,
    filter_selected_buildings,
    selection_status,
)

__all__ = [
    "ClosestRoadPoint",
    "Footprint",
    "FootprintMetadata",
    "GraphEdge",
    "GraphNode",
    "PathResult",
    "Point",
    "RoadGraph",
    "RoadSegment",
    "RouteResult",
    "SceneElement",
    "add_point_to_graph",
    "build_road_graph",
    "building_center",
    "calculate_path",
    "calculate_projected_path",
    "calculate_route",
    "canonical_id",
    "centroid",
    "closest_point_on_segment",
    "create_connector_geojson",
    "create_path_geojson",
    "detect_crs",
    "dijkstra",
    "distance",
    "extract_road_segments",
    "filter_selected_buildings",
    "find_closest_road_point",
    "find_shortest_path",
    "footprint_from_triangles",
    "intersection_point",
    "is_geographic",
    "point_from_id",
    "points_equal",
    "read_footprints",
    "read_kmz_footprints",
    "segments_intersect",
    "selection_status",
    "utm_crs_for",
]
