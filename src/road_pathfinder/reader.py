"""Shapefile footprint reader with CRS auto-detection."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

import shapefile
from pyproj import CRS

from .models import Footprint, FootprintMetadata


def detect_crs(prj_source: str | Path | None) -> tuple[int | None, str | None, bool | None]:
    """Parse CRS from a .prj WKT string or file path.

    Returns (epsg_code, crs_name, is_projected) or (None, None, None) on failure.
    """
    if prj_source is None:
        return None, None, None

    wkt = prj_source if isinstance(prj_source, str) else ""
    if isinstance(prj_source, Path):
        if not prj_source.exists():
            return None, None, None
        wkt = prj_source.read_text()

    if not wkt.strip():
        return None, None, None

    try:
        crs = CRS.from_wkt(wkt)
    except Exception:
        return None, None, None

    return crs.to_epsg(), crs.name, crs.is_projected


def read_footprints(
    shp_path: str | Path | None = None,
    *,
    shp_file: BinaryIO | None = None,
    shx_file: BinaryIO | None = None,
    dbf_file: BinaryIO | None = None,
    prj_wkt: str | None = None,
    path_field: str | None = None,
) -> tuple[list[Footprint], FootprintMetadata]:
    """Read polygon or polyline footprints from a shapefile.

    Supports two modes:
    - File path: pass ``shp_path`` (the .prj is auto-discovered)
    - File objects: pass ``shp_file``, ``shx_file``, ``dbf_file``, and optionally ``prj_wkt``

    Each shape part becomes one footprint. Its ``path`` is taken from the
    ``path_field`` attribute when given, otherwise from the record number.
    Z and M values are dropped.
    """
    if shp_path is not None:
        shp_path = Path(shp_path)
        sf = shapefile.Reader(str(shp_path))
        prj_path = shp_path.with_suffix(".prj")
        if not prj_path.exists():
            # shp_path might already lack an extension (pyshp convention)
            prj_path = Path(str(shp_path) + ".prj")
        epsg, crs_name, is_projected = detect_crs(prj_path if prj_path.exists() else None)
    elif shp_file is not None:
        sf = shapefile.Reader(shp=shp_file, shx=shx_file, dbf=dbf_file)
        epsg, crs_name, is_projected = detect_crs(prj_wkt)
    else:
        raise ValueError("Provide either shp_path or shp_file")

    with sf:
        shape_type_name = sf.shapeTypeName
        upper = shape_type_name.upper()
        fields = [f[0] for f in sf.fields[1:]]  # skip DeletionFlag

        if "POLYGON" not in upper and "POLYLINE" not in upper and upper not in ("ARC", "ARCZ", "ARCM"):
            raise ValueError(
                f"Unsupported shape type: {shape_type_name}. Only POLYGON and POLYLINE shapes are supported."
            )

        if path_field is not None and path_field not in fields:
            raise ValueError(f"Field {path_field!r} not found; available fields: {fields}")

        footprints = _extract_footprints(sf, fields, path_field)

    metadata = FootprintMetadata(
        shape_type_name=shape_type_name,
        crs_epsg=epsg,
        crs_name=crs_name,
        is_projected=is_projected,
        num_footprints=len(footprints),
        fields=fields,
    )
    return footprints, metadata


def _extract_footprints(
    sf: shapefile.Reader, fields: list[str], path_field: str | None
) -> list[Footprint]:
    """One footprint per part of every non-empty shape."""
    footprints: list[Footprint] = []
    field_idx = fields.index(path_field) if path_field is not None else None

    for rec_idx, shape in enumerate(sf.iterShapes()):
        if not shape.points:
            continue

        name = str(sf.record(rec_idx)[field_idx]) if field_idx is not None else str(rec_idx)
        part_starts = list(shape.parts)
        for part_idx, start in enumerate(part_starts):
            end = part_starts[part_idx + 1] if part_idx + 1 < len(part_starts) else len(shape.points)
            coords = [(float(x), float(y)) for x, y in (pt[:2] for pt in shape.points[start:end])]
            path = name if len(part_starts) == 1 else f"{name}:{part_idx}"
            footprints.append(Footprint(path=path, coordinates=coords))

    return footprints
