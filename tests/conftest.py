import pytest
import shapefile

from road_pathfinder import Footprint, Point, RoadSegment


def seg(x1, y1, x2, y2, road_path="road"):
    return RoadSegment(start=Point(x=x1, y=y1), end=Point(x=x2, y=y2), road_path=road_path)


def square(path, x, y, size=2.0):
    """Closed square building footprint with its lower-left corner at (x, y)."""
    return Footprint(
        path=path,
        coordinates=[(x, y), (x + size, y), (x + size, y + size), (x, y + size), (x, y)],
    )


@pytest.fixture
def l_segments():
    return [seg(0, 0, 0, 10, "road/a"), seg(0, 10, 10, 10, "road/b")]


@pytest.fixture
def cross_segments():
    return [seg(0, 0, 10, 0, "road/h"), seg(5, -5, 5, 5, "road/v")]


@pytest.fixture
def disconnected_segments():
    return [seg(0, 0, 10, 0, "road/south"), seg(0, 20, 10, 20, "road/north")]


@pytest.fixture
def roads_shapefile(tmp_path):
    """Two named polylines forming an L, written with pyshp."""
    base = tmp_path / "roads"
    with shapefile.Writer(str(base), shapeType=shapefile.POLYLINE) as w:
        w.field("name", "C")
        w.line([[[0, 0], [0, 10]]])
        w.record("main")
        w.line([[[0, 10], [10, 10]], [[20, 20], [30, 20]]])
        w.record("side")
    return base


@pytest.fixture
def buildings_shapefile(tmp_path):
    base = tmp_path / "buildings"
    with shapefile.Writer(str(base), shapeType=shapefile.POLYGON) as w:
        w.field("name", "C")
        w.poly([[[-3, -1], [-3, 1], [-1, 1], [-1, -1], [-3, -1]]])
        w.record("home")
        w.poly([[[9, 11], [9, 13], [11, 13], [11, 11], [9, 11]]])
        w.record("work")
    return base
