"""Pydantic data models for the road pathfinder."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class Point(BaseModel):
    """A location in the shared planar coordinate system."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class RoadSegment(BaseModel):
    """A straight piece of road between two points."""

    start: Point
    end: Point
    road_path: str


class GraphNode(BaseModel):
    """A graph vertex keyed by its canonical id."""

    id: str
    point: Point


class GraphEdge(BaseModel):
    """An undirected, weighted connection between two nodes."""

    source: str
    target: str
    distance: float


class ClosestRoadPoint(BaseModel):
    """Nearest point of the road network to some query point."""

    point: Point
    road_path: str
    distance: float
    segment_index: int


class PathResult(BaseModel):
    """Outcome of a shortest-path search over the road graph."""

    success: bool
    path: list[Point] = []
    distance: float = 0.0
    error: str | None = None


class Footprint(BaseModel):
    """A named outline (closed for buildings) of a scene element."""

    path: str
    coordinates: list[tuple[float, float]] | None = None


class SceneElement(BaseModel):
    """A road or building as supplied by the caller.

    ``triangles`` is a flat ``[x, y, z, ...]`` mesh buffer, used when the
    element has no outline of its own.
    """

    path: str
    coordinates: list[tuple[float, float]] | None = None
    triangles: list[float] | None = None


class FootprintMetadata(BaseModel):
    """Metadata about a parsed footprint file."""

    shape_type_name: str
    crs_epsg: int | None = None
    crs_name: str | None = None
    is_projected: bool | None = None
    num_footprints: int
    fields: list[str]


class RouteResult(BaseModel):
    """Complete result of routing between two buildings."""

    success: bool
    distance: float | None = None
    error: str | None = None
    geojson: dict[str, Any] | None = None

    def status_message(self) -> str:
        if self.success and self.distance is not None:
            return f"Path found: {self.distance:.1f}m via roads"
        return self.error or "No path found"


class RouteRequest(BaseModel):
    """Scene roads plus the two selected buildings to route between.

    Coordinates in a geographic ``crs_epsg`` are projected before routing.
    """

    roads: list[SceneElement]
    buildings: list[SceneElement]
    crs_epsg: int | None = None


class RouteResponse(RouteResult):
    status: str


class SelectionRequest(BaseModel):
    building_paths: list[str]
    selected_paths: list[str]


class SelectionResponse(BaseModel):
    buildings: list[str]
    status: str
    ready: bool


class FootprintCollection(BaseModel):
    """Footprints parsed from an uploaded file."""

    metadata: FootprintMetadata
    footprints: list[Footprint]
