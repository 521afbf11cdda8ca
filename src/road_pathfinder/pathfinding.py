"""Attaching trip endpoints to the road graph and searching it."""

from __future__ import annotations

import heapq
import itertools
import math
from collections.abc import Sequence

from .geometry import canonical_id, distance, parameter_on_segment
from .graph import RoadGraph
from .models import PathResult, Point, RoadSegment

START_NOT_ON_ROAD = "start point is not on any road"
END_NOT_ON_ROAD = "end point is not on any road"
NO_PATH_FOUND = "no path found between the two points"


def add_point_to_graph(
    graph: RoadGraph, point: Point, segments: Sequence[RoadSegment]
) -> str | None:
    """Attach ``point`` to the first segment it lies on and return its node id.

    The new node is linked only to that segment's two endpoints, not to the
    nodes between them, so a route through it can skip crossings that lie
    on the same segment. Returns None, leaving ``graph`` untouched, when the
    point is on no segment.
    """
    existing = canonical_id(point)
    if existing in graph:
        return existing

    for segment in segments:
        t = parameter_on_segment(point, segment.start, segment.end)
        if t is None or not 0 <= t <= 1:
            continue

        node_id = graph.add_node(point)
        for endpoint in (segment.start, segment.end):
            endpoint_id = canonical_id(endpoint)
            if endpoint_id in graph:
                weight = distance(point, endpoint)
                graph.adjacency[node_id].append((endpoint_id, weight))
                graph.adjacency[endpoint_id].append((node_id, weight))
        return node_id

    return None


def dijkstra(graph: RoadGraph, start_id: str, end_id: str) -> tuple[list[str], float] | None:
    """Shortest path between two node ids as ``(node_ids, total_distance)``.

    Ties are settled in discovery order. Returns None if either id is unknown
    or the end is unreachable.
    """
    if start_id not in graph or end_id not in graph:
        return None

    distances: dict[str, float] = {start_id: 0.0}
    previous: dict[str, str] = {}
    visited: set[str] = set()
    counter = itertools.count()
    queue = [(0.0, next(counter), start_id)]

    while queue:
        dist, _, node_id = heapq.heappop(queue)
        if node_id in visited:
            continue
        visited.add(node_id)

        if node_id == end_id:
            break

        for neighbor, weight in graph.neighbors(node_id):
            if neighbor in visited:
                continue
            candidate = dist + weight
            if candidate < distances.get(neighbor, math.inf):
                distances[neighbor] = candidate
                previous[neighbor] = node_id
                heapq.heappush(queue, (candidate, next(counter), neighbor))

    final = distances.get(end_id, math.inf)
    if math.isinf(final):
        return None

    path = [end_id]
    while path[-1] in previous:
        path.append(previous[path[-1]])
    path.reverse()
    return path, final


def find_shortest_path(
    start: Point,
    end: Point,
    graph: RoadGraph,
    segments: Sequence[RoadSegment],
) -> PathResult:
    """Route between two points lying on the road network.

    Both points are inserted into ``graph``, which is modified in place.
    """
    start_id = add_point_to_graph(graph, start, segments)
    if start_id is None:
        return PathResult(success=False, error=START_NOT_ON_ROAD)

    end_id = add_point_to_graph(graph, end, segments)
    if end_id is None:
        return PathResult(success=False, error=END_NOT_ON_ROAD)

    result = dijkstra(graph, start_id, end_id)
    if result is None:
        return PathResult(success=False, error=NO_PATH_FOUND)

    node_ids, total = result
    return PathResult(
        success=True,
        path=[graph.point(node_id) for node_id in node_ids],
        distance=total,
    )
