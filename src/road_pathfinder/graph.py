"""Road graph construction from straight road segments.

Nodes are segment endpoints plus every pairwise crossing, keyed by
:func:`~road_pathfinder.geometry.canonical_id`. Two points merge only when
their rounded ids are equal, so values straddling a rounding boundary
(``4.9999994`` vs ``5.0000004``) stay separate nodes.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence

from .config import MIN_EDGE_LENGTH
from .geometry import canonical_id, distance, intersection_point, parameter_on_segment
from .models import GraphEdge, GraphNode, Point, RoadSegment

logger = logging.getLogger(__name__)


class RoadGraph:
    """Weighted undirected graph over canonical node ids.

    ``adjacency`` maps every node id to its ``(neighbor_id, distance)`` pairs.
    Nodes are only ever added; point insertion mutates the graph in place, so
    callers that want to reuse a graph across routes should :meth:`clone` it.
    """

    def __init__(self):
        self.nodes: dict[str, GraphNode] = {}
        self.edges: list[GraphEdge] = []
        self.adjacency: dict[str, list[tuple[str, float]]] = {}

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, point: Point) -> str:
        """Add a node at ``point`` unless one with the same id exists."""
        node_id = canonical_id(point)
        if node_id not in self.nodes:
            self.nodes[node_id] = GraphNode(id=node_id, point=point)
            self.adjacency[node_id] = []
        return node_id

    def connect(self, u: str, v: str, weight: float) -> None:
        """Record an edge and link both ends in the adjacency map."""
        self.edges.append(GraphEdge(source=u, target=v, distance=weight))
        self.adjacency[u].append((v, weight))
        self.adjacency[v].append((u, weight))

    def neighbors(self, node_id: str) -> list[tuple[str, float]]:
        return self.adjacency.get(node_id, [])

    def point(self, node_id: str) -> Point:
        return self.nodes[node_id].point

    def clone(self) -> RoadGraph:
        return copy.deepcopy(self)


def build_road_graph(segments: Sequence[RoadSegment]) -> RoadGraph:
    """Build the road graph for ``segments``.

    Every segment is split at each node lying on it, and consecutive nodes
    along it are connected. Crossing detection is O(n^2) in the number of
    segments. Empty input gives an empty graph.
    """
    graph = RoadGraph()

    for segment in segments:
        graph.add_node(segment.start)
        graph.add_node(segment.end)

    crossings = 0
    for i in range(len(segments)):
        for j in range(i + 1, len(segments)):
            seg1, seg2 = segments[i], segments[j]
            crossing = intersection_point(seg1.start, seg1.end, seg2.start, seg2.end)
            if crossing is not None:
                graph.add_node(crossing)
                crossings += 1

    for segment in segments:
        on_segment: list[tuple[float, GraphNode]] = []
        for node in graph.nodes.values():
            t = parameter_on_segment(node.point, segment.start, segment.end)
            if t is not None and 0 <= t <= 1:
                on_segment.append((t, node))

        # Stable sort keeps node insertion order for equal parameters.
        on_segment.sort(key=lambda item: item[0])

        for (_, a), (_, b) in zip(on_segment, on_segment[1:]):
            weight = distance(a.point, b.point)
            if weight > MIN_EDGE_LENGTH:
                graph.connect(a.id, b.id, weight)

    logger.debug(
        "Road graph built: %d segments, %d crossings, %d nodes, %d edges",
        len(segments),
        crossings,
        len(graph.nodes),
        len(graph.edges),
    )
    return graph
