"""Planar geometry primitives used to build and query the road network.

Nothing here raises on degenerate input: zero-length segments, empty
footprints and parallel lines are all handled by returning a sensible value.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from .config import EPSILON, ID_PRECISION, POINT_TOLERANCE
from .models import ClosestRoadPoint, Footprint, Point, RoadSegment

ID_SEPARATOR = ","


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def closest_point_on_segment(point: Point, start: Point, end: Point) -> Point:
    """Project ``point`` onto the segment ``start``-``end``, clamped to its ends.

    A zero-length segment projects everything onto ``start``.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy

    if length_sq < EPSILON:
        return start

    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return Point(x=start.x + t * dx, y=start.y + t * dy)


def parameter_on_segment(point: Point, start: Point, end: Point) -> float | None:
    """Return ``t`` such that ``start + t * (end - start)`` is ``point``.

    Returns None when the point is off the segment's line by more than
    ``POINT_TOLERANCE`` on either axis. The caller decides whether ``t`` must
    also fall within [0, 1].
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy

    if length_sq < EPSILON:
        return 0.0 if points_equal(point, start) else None

    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    proj_x = start.x + t * dx
    proj_y = start.y + t * dy

    if abs(proj_x - point.x) < POINT_TOLERANCE and abs(proj_y - point.y) < POINT_TOLERANCE:
        return t
    return None


def _direction(p1: Point, p2: Point, p3: Point) -> float:
    return (p3.x - p1.x) * (p2.y - p1.y) - (p2.x - p1.x) * (p3.y - p1.y)


def _in_bounding_box(p1: Point, p2: Point, p: Point) -> bool:
    return (
        min(p1.x, p2.x) <= p.x <= max(p1.x, p2.x)
        and min(p1.y, p2.y) <= p.y <= max(p1.y, p2.y)
    )


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """True if segment p1-p2 crosses or touches segment p3-p4."""
    d1 = _direction(p3, p4, p1)
    d2 = _direction(p3, p4, p2)
    d3 = _direction(p1, p2, p3)
    d4 = _direction(p1, p2, p4)

    if ((d1 > 0 and d2 < 0) or (d1 < 0 and d2 > 0)) and (
        (d3 > 0 and d4 < 0) or (d3 < 0 and d4 > 0)
    ):
        return True

    # Collinear or touching: the point must sit inside the other segment's box.
    if abs(d1) < EPSILON and _in_bounding_box(p3, p4, p1):
        return True
    if abs(d2) < EPSILON and _in_bounding_box(p3, p4, p2):
        return True
    if abs(d3) < EPSILON and _in_bounding_box(p1, p2, p3):
        return True
    if abs(d4) < EPSILON and _in_bounding_box(p1, p2, p4):
        return True
    return False


def intersection_point(p1: Point, p2: Point, p3: Point, p4: Point) -> Point | None:
    """Crossing point of segments p1-p2 and p3-p4, or None.

    Parallel (including collinear) segments never yield a point.
    """
    d1x = p2.x - p1.x
    d1y = p2.y - p1.y
    d2x = p4.x - p3.x
    d2y = p4.y - p3.y

    cross = d1x * d2y - d1y * d2x
    if abs(cross) < EPSILON:
        return None

    dx = p3.x - p1.x
    dy = p3.y - p1.y
    t = (dx * d2y - dy * d2x) / cross
    u = (dx * d1y - dy * d1x) / cross

    if 0 <= t <= 1 and 0 <= u <= 1:
        return Point(x=p1.x + t * d1x, y=p1.y + t * d1y)
    return None


def centroid(coordinates: Sequence[Sequence[float]] | None) -> Point:
    """Mean of a closed ring's vertices, the closing vertex excluded.

    This is an approximation: it matches the area centroid for regular or
    roughly convex outlines only. An empty ring maps to the origin.
    """
    if not coordinates:
        return Point(x=0.0, y=0.0)
    if len(coordinates) == 1:
        return Point(x=coordinates[0][0], y=coordinates[0][1])

    n = len(coordinates) - 1
    sum_x = sum(c[0] for c in coordinates[:n])
    sum_y = sum(c[1] for c in coordinates[:n])
    return Point(x=sum_x / n, y=sum_y / n)


def building_center(footprint: Footprint | None) -> Point:
    """Centre of a building footprint (see :func:`centroid`)."""
    if footprint is None:
        return Point(x=0.0, y=0.0)
    return centroid(footprint.coordinates)


def canonical_id(point: Point) -> str:
    """Deduplication key: both coordinates rounded to ``ID_PRECISION`` digits."""
    # Values like -1e-16 round to -0.0; adding 0.0 turns that into 0.0.
    x = round(point.x, ID_PRECISION) + 0.0
    y = round(point.y, ID_PRECISION) + 0.0
    return f"{x:.{ID_PRECISION}f}{ID_SEPARATOR}{y:.{ID_PRECISION}f}"


def point_from_id(node_id: str) -> Point:
    """Inverse of :func:`canonical_id`, exact to ``ID_PRECISION`` digits."""
    x, y = node_id.split(ID_SEPARATOR)
    return Point(x=float(x), y=float(y))


def points_equal(p1: Point, p2: Point, tolerance: float = POINT_TOLERANCE) -> bool:
    """Per-axis comparison; not a Euclidean radius."""
    return abs(p1.x - p2.x) < tolerance and abs(p1.y - p2.y) < tolerance


def find_closest_road_point(
    query: Point, segments: Sequence[RoadSegment]
) -> ClosestRoadPoint | None:
    """Nearest point on any segment to ``query``; the first segment wins ties."""
    closest: ClosestRoadPoint | None = None
    min_distance = math.inf

    for i, segment in enumerate(segments):
        on_segment = closest_point_on_segment(query, segment.start, segment.end)
        d = distance(query, on_segment)
        if d < min_distance:
            min_distance = d
            closest = ClosestRoadPoint(
                point=on_segment,
                road_path=segment.road_path,
                distance=d,
                segment_index=i,
            )

    return closest


def extract_road_segments(footprint: Footprint) -> list[RoadSegment]:
    """Split a road outline into segments between consecutive vertices."""
    coords = footprint.coordinates
    if not coords or len(coords) < 2:
        return []

    return [
        RoadSegment(
            start=Point(x=coords[i][0], y=coords[i][1]),
            end=Point(x=coords[i + 1][0], y=coords[i + 1][1]),
            road_path=footprint.path,
        )
        for i in range(len(coords) - 1)
    ]


def footprint_from_triangles(path: str, triangles: Sequence[float]) -> Footprint | None:
    """Rectangular footprint from a flat ``[x, y, z, x, y, z, ...]`` mesh buffer.

    Used for composite buildings that only expose mesh geometry. Z is ignored
    and the result is the closed XY bounding box.
    """
    if len(triangles) < 9:
        return None

    xs = triangles[0::3]
    ys = triangles[1::3]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)

    if not all(math.isfinite(v) for v in (min_x, min_y, max_x, max_y)):
        return None

    return Footprint(
        path=path,
        coordinates=[
            (min_x, min_y),
            (max_x, min_y),
            (max_x, max_y),
            (min_x, max_y),
            (min_x, min_y),
        ],
    )
