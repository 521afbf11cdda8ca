"""FastAPI server for road routing and footprint uploads."""

from __future__ import annotations

import csv
import io
import tempfile
import zipfile
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse
from pyproj.exceptions import CRSError

from .geometry import distance
from .kml_reader import read_kmz_footprints
from .models import (
    Footprint,
    FootprintCollection,
    FootprintMetadata,
    RouteRequest,
    RouteResponse,
    SelectionRequest,
    SelectionResponse,
)
from .projection import calculate_projected_path, is_geographic
from .reader import read_footprints
from .route import (
    calculate_path,
    element_footprint,
    filter_selected_buildings,
    road_segments,
    selection_status,
)

app = FastAPI(title="Road Pathfinder", version="0.1.0")

COMPANION_EXTS = {".shp", ".shx", ".dbf", ".prj"}


@app.post("/route", response_model=RouteResponse)
def route(request: RouteRequest) -> RouteResponse:
    """Shortest road route between the two buildings in the request.

    Routing failures are reported in the body with ``success=false``; an
    unusable ``crs_epsg`` is a 400.
    """
    roads = [fp for fp in (element_footprint(r) for r in request.roads) if fp is not None]
    buildings = [element_footprint(b) for b in request.buildings]

    try:
        if is_geographic(request.crs_epsg):
            result = calculate_projected_path(roads, buildings, request.crs_epsg)
        else:
            result = calculate_path(roads, buildings)
    except (CRSError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return RouteResponse(**result.model_dump(), status=result.status_message())


@app.post("/selection", response_model=SelectionResponse)
def selection(request: SelectionRequest) -> SelectionResponse:
    """Classify the current selection of scene paths."""
    buildings = filter_selected_buildings(request.selected_paths, request.building_paths)
    return SelectionResponse(
        buildings=buildings,
        status=selection_status(len(buildings)),
        ready=len(buildings) == 2,
    )


@app.post("/footprints")
async def upload_footprints(
    files: list[UploadFile],
    format: str = Query("json", pattern="^(csv|json)$"),
    path_field: str | None = None,
):
    """Parse uploaded footprints.

    Accepts:
    - A single .kmz or .kml file
    - A single .zip containing shapefile components
    - Multiple files (.shp, .shx, .dbf, and optionally .prj)

    ``format=csv`` streams the road segments extracted from the footprints.
    """
    filename = (files[0].filename or "").lower() if len(files) == 1 else ""

    try:
        if filename.endswith((".kmz", ".kml")):
            footprints, metadata = await _handle_kmz(files[0])
        elif filename.endswith(".zip"):
            footprints, metadata = await _handle_zip(files[0], path_field)
        else:
            footprints, metadata = await _handle_multi_file(files, path_field)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if format == "csv":
        return _segments_to_csv_response(footprints)

    return FootprintCollection(metadata=metadata, footprints=footprints)


async def _handle_zip(
    upload: UploadFile, path_field: str | None
) -> tuple[list[Footprint], FootprintMetadata]:
    """Extract a shapefile from a zip archive and read it."""
    content = await upload.read()

    with tempfile.TemporaryDirectory() as extract_dir:
        try:
            with zipfile.ZipFile(io.BytesIO(content)) as zf:
                zf.extractall(extract_dir)
        except zipfile.BadZipFile as exc:
            raise HTTPException(status_code=400, detail="Invalid zip archive") from exc

        shp_files = sorted(Path(extract_dir).rglob("*.shp"))
        if not shp_files:
            raise HTTPException(status_code=400, detail="No .shp file found in zip archive")

        return read_footprints(shp_files[0], path_field=path_field)


async def _handle_kmz(upload: UploadFile) -> tuple[list[Footprint], FootprintMetadata]:
    """Read a KMZ or KML file upload."""
    content = await upload.read()
    return read_kmz_footprints(io.BytesIO(content))


async def _handle_multi_file(
    files: list[UploadFile], path_field: str | None
) -> tuple[list[Footprint], FootprintMetadata]:
    """Read a shapefile from multiple uploaded component files."""
    file_map: dict[str, bytes] = {}
    for f in files:
        ext = Path(f.filename or "").suffix.lower()
        if ext in COMPANION_EXTS:
            file_map[ext] = await f.read()

    if ".shp" not in file_map:
        raise HTTPException(status_code=400, detail="Missing required .shp file")

    shp_file = io.BytesIO(file_map[".shp"])
    shx_file = io.BytesIO(file_map[".shx"]) if ".shx" in file_map else None
    dbf_file = io.BytesIO(file_map[".dbf"]) if ".dbf" in file_map else None

    prj_wkt = None
    if ".prj" in file_map:
        prj_wkt = file_map[".prj"].decode("utf-8", errors="replace")

    return read_footprints(
        shp_file=shp_file,
        shx_file=shx_file,
        dbf_file=dbf_file,
        prj_wkt=prj_wkt,
        path_field=path_field,
    )


def _segments_to_csv_response(footprints: list[Footprint]) -> StreamingResponse:
    """Stream the road segments of ``footprints`` as CSV."""
    fieldnames = ["road_path", "start_x", "start_y", "end_x", "end_y", "length"]
    segments = road_segments(footprints)

    def generate():
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=fieldnames)
        writer.writeheader()
        yield buf.getvalue()
        buf.seek(0)
        buf.truncate(0)

        for seg in segments:
            writer.writerow(
                {
                    "road_path": seg.road_path,
                    "start_x": seg.start.x,
                    "start_y": seg.start.y,
                    "end_x": seg.end.x,
                    "end_y": seg.end.y,
                    "length": distance(seg.start, seg.end),
                }
            )
            yield buf.getvalue()
            buf.seek(0)
            buf.truncate(0)

    return StreamingResponse(
        generate(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=road_segments.csv"},
    )
