"""Tests for the FastAPI server endpoints."""

import io
import zipfile
from pathlib import Path

import pytest
import shapefile
from httpx import ASGITransport, AsyncClient

from road_pathfinder.server import app

KML_ROAD = """\
<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <Placemark>
      <name>road/main</name>
      <LineString>
        <coordinates>0,0,0 0,10,0 10,10,0</coordinates>
      </LineString>
    </Placemark>
  </Document>
</kml>"""

SQUARE_HOME = [[-3, -1], [-1, -1], [-1, 1], [-3, 1], [-3, -1]]
SQUARE_WORK = [[11, 9], [13, 9], [13, 11], [11, 11], [11, 9]]


@pytest.fixture
def client():
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


def _upload(path: Path) -> tuple[str, bytes, str]:
    """Return a (filename, content, content_type) tuple for upload."""
    return (path.name, path.read_bytes(), "application/octet-stream")


@pytest.mark.asyncio
class TestRoute:
    async def test_route_found(self, client):
        body = {
            "roads": [{"path": "road/main", "coordinates": [[0, 0], [0, 10], [10, 10]]}],
            "buildings": [
                {"path": "bldg/home", "coordinates": SQUARE_HOME},
                {"path": "bldg/work", "coordinates": SQUARE_WORK},
            ],
        }
        resp = await client.post("/route", json=body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["distance"] == pytest.approx(20)
        assert data["status"] == "Path found: 20.0m via roads"
        coords = data["geojson"]["features"][0]["geometry"]["coordinates"]
        assert coords[0] == [-2, 0]
        assert coords[-1] == [12, 10]

    async def test_triangle_fallback_building(self, client):
        body = {
            "roads": [{"path": "road/main", "coordinates": [[0, 0], [0, 10], [10, 10]]}],
            "buildings": [
                {"path": "bldg/home", "coordinates": SQUARE_HOME},
                {"path": "bldg/mesh", "triangles": [11, 9, 0, 13, 9, 0, 13, 11, 5]},
            ],
        }
        resp = await client.post("/route", json=body)
        assert resp.json()["distance"] == pytest.approx(20)

    async def test_disconnected_roads_return_connectors(self, client):
        body = {
            "roads": [
                {"path": "road/south", "coordinates": [[0, 0], [10, 0]]},
                {"path": "road/north", "coordinates": [[0, 20], [10, 20]]},
            ],
            "buildings": [
                {"path": "a", "coordinates": [[4, -3], [6, -3], [6, -1], [4, -1], [4, -3]]},
                {"path": "b", "coordinates": [[4, 21], [6, 21], [6, 23], [4, 23], [4, 21]]},
            ],
        }
        resp = await client.post("/route", json=body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is False
        assert data["status"] == "no path found between the two points"
        assert len(data["geojson"]["features"]) == 2

    async def test_no_roads(self, client):
        body = {"roads": [], "buildings": [{"path": "a", "coordinates": SQUARE_HOME}]}
        data = (await client.post("/route", json=body)).json()
        assert data["success"] is False
        assert data["error"] == "no roads found in the scene"

    async def test_invalid_body(self, client):
        resp = await client.post("/route", json={"roads": "nope"})
        assert resp.status_code == 422

    async def test_geographic_crs_routes_in_metres(self, client):
        body = {
            "roads": [{"path": "road/main", "coordinates": [[10.0, 50.0], [10.0, 50.001], [10.001, 50.001]]}],
            "buildings": [
                {"path": "bldg/home", "coordinates": [[9.9997, 49.9999], [9.9999, 49.9999], [9.9999, 50.0001], [9.9997, 50.0001], [9.9997, 49.9999]]},
                {"path": "bldg/work", "coordinates": [[10.0009, 50.0012], [10.0011, 50.0012], [10.0011, 50.0014], [10.0009, 50.0014], [10.0009, 50.0012]]},
            ],
            "crs_epsg": 4326,
        }
        data = (await client.post("/route", json=body)).json()
        assert data["success"] is True
        assert 175 < data["distance"] < 190
        coords = data["geojson"]["features"][0]["geometry"]["coordinates"]
        assert coords[0] == pytest.approx([9.9998, 50.0], abs=1e-6)

    async def test_projected_crs_routes_as_given(self, client):
        body = {
            "roads": [{"path": "road/main", "coordinates": [[0, 0], [0, 10], [10, 10]]}],
            "buildings": [
                {"path": "bldg/home", "coordinates": SQUARE_HOME},
                {"path": "bldg/work", "coordinates": SQUARE_WORK},
            ],
            "crs_epsg": 32632,
        }
        data = (await client.post("/route", json=body)).json()
        assert data["distance"] == pytest.approx(20)

    async def test_unknown_crs_returns_400(self, client):
        body = {"roads": [], "buildings": [], "crs_epsg": 999999}
        resp = await client.post("/route", json=body)
        assert resp.status_code == 400


@pytest.mark.asyncio
class TestSelection:
    async def test_ready(self, client):
        body = {"building_paths": ["b/1", "b/2", "b/3"], "selected_paths": ["b/2", "road/1", "b/3"]}
        data = (await client.post("/selection", json=body)).json()
        assert data == {"buildings": ["b/2", "b/3"], "status": "Ready to find path", "ready": True}

    async def test_too_many(self, client):
        body = {"building_paths": ["b/1", "b/2", "b/3"], "selected_paths": ["b/1", "b/2", "b/3"]}
        data = (await client.post("/selection", json=body)).json()
        assert data["status"] == "3 buildings selected (need exactly 2)"
        assert data["ready"] is False


@pytest.mark.asyncio
class TestFootprintUpload:
    async def test_multi_file_json(self, client, roads_shapefile):
        files = [("files", _upload(roads_shapefile.with_suffix(ext))) for ext in (".shp", ".shx", ".dbf")]
        resp = await client.post("/footprints?path_field=name", files=files)
        assert resp.status_code == 200
        data = resp.json()
        assert data["metadata"]["shape_type_name"] == "POLYLINE"
        assert [fp["path"] for fp in data["footprints"]] == ["main", "side:0", "side:1"]

    async def test_multi_file_csv(self, client, roads_shapefile):
        files = [("files", _upload(roads_shapefile.with_suffix(ext))) for ext in (".shp", ".shx", ".dbf")]
        resp = await client.post("/footprints?format=csv&path_field=name", files=files)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "text/csv; charset=utf-8"
        lines = resp.text.strip().splitlines()
        assert lines[0] == "road_path,start_x,start_y,end_x,end_y,length"
        assert len(lines) == 4
        assert lines[1].startswith("main,")

    async def test_zip_upload(self, client, buildings_shapefile):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            for ext in (".shp", ".shx", ".dbf"):
                p = buildings_shapefile.with_suffix(ext)
                zf.writestr(p.name, p.read_bytes())
        files = [("files", ("buildings.zip", buf.getvalue(), "application/zip"))]
        resp = await client.post("/footprints?path_field=name", files=files)
        assert resp.status_code == 200
        assert {fp["path"] for fp in resp.json()["footprints"]} == {"home", "work"}

    async def test_zip_without_shp(self, client):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("readme.txt", "nothing")
        files = [("files", ("empty.zip", buf.getvalue(), "application/zip"))]
        resp = await client.post("/footprints", files=files)
        assert resp.status_code == 400

    async def test_missing_shp_returns_400(self, client, roads_shapefile):
        files = [("files", _upload(roads_shapefile.with_suffix(".dbf")))]
        resp = await client.post("/footprints", files=files)
        assert resp.status_code == 400

    async def test_point_shapefile_returns_400(self, client, tmp_path):
        base = tmp_path / "points"
        with shapefile.Writer(str(base), shapeType=shapefile.POINT) as w:
            w.field("name", "C")
            w.point(1, 2)
            w.record("p")
        files = [("files", _upload(base.with_suffix(ext))) for ext in (".shp", ".shx", ".dbf")]
        resp = await client.post("/footprints", files=files)
        assert resp.status_code == 400
        assert "Unsupported shape type" in resp.json()["detail"]

    async def test_kml_upload(self, client):
        files = [("files", ("roads.kml", KML_ROAD.encode(), "application/vnd.google-earth.kml+xml"))]
        resp = await client.post("/footprints", files=files)
        assert resp.status_code == 200
        data = resp.json()
        assert data["metadata"]["crs_epsg"] == 4326
        assert data["footprints"][0]["coordinates"] == [[0, 0], [0, 10], [10, 10]]

    async def test_kmz_upload_csv(self, client):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("doc.kml", KML_ROAD)
        files = [("files", ("roads.kmz", buf.getvalue(), "application/vnd.google-earth.kmz"))]
        resp = await client.post("/footprints?format=csv", files=files)
        assert resp.status_code == 200
        lines = resp.text.strip().splitlines()
        assert len(lines) == 3
        assert lines[1].startswith("road/main,")
