"""KMZ/KML reader: extracts named footprints from KML placemarks.

KMZ is a ZIP archive containing KML. KML coordinates are always WGS84 (EPSG:4326)
in ``longitude,latitude,altitude`` format; altitude is dropped.
"""

from __future__ import annotations

import io
import zipfile
import xml.etree.ElementTree as ET
from typing import BinaryIO

from .models import Footprint, FootprintMetadata

KML_NS = "{http://www.opengis.net/kml/2.2}"


def read_kmz_footprints(
    file: str | BinaryIO,
) -> tuple[list[Footprint], FootprintMetadata]:
    """Read a KMZ (or plain KML) file and return one footprint per placemark geometry.

    Args:
        file: Path to a .kmz/.kml file, or a file-like object containing KMZ/KML bytes.
    """
    data = _read_bytes(file)

    # KMZ is a ZIP; plain KML is XML text
    if _is_zip(data):
        kml_text = _extract_kml_from_kmz(data)
    else:
        kml_text = data.decode("utf-8", errors="replace")

    try:
        root = ET.fromstring(kml_text)
    except ET.ParseError as exc:
        raise ValueError(f"Invalid KML: {exc}") from exc

    footprints, geometry_type = _extract_footprints(root)

    metadata = FootprintMetadata(
        shape_type_name=f"KML_{geometry_type}",
        crs_epsg=4326,
        crs_name="WGS 84",
        is_projected=False,
        num_footprints=len(footprints),
        fields=["name"],
    )
    return footprints, metadata


def _read_bytes(file: str | BinaryIO) -> bytes:
    if isinstance(file, (str, bytes)):
        if isinstance(file, str):
            with open(file, "rb") as f:
                return f.read()
        return file
    return file.read()


def _is_zip(data: bytes) -> bool:
    return data[:4] == b"PK\x03\x04"


def _extract_kml_from_kmz(data: bytes) -> str:
    """Extract the first .kml file from a KMZ (ZIP) archive."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        names = zf.namelist()
        # Prefer doc.kml, fall back to any .kml
        kml_name = next((n for n in names if n.lower() == "doc.kml"), None)
        if kml_name is None:
            kml_name = next((n for n in names if n.lower().endswith(".kml")), None)
        if kml_name is None:
            raise ValueError("No .kml file found in KMZ archive")
        return zf.read(kml_name).decode("utf-8", errors="replace")


def _extract_footprints(root: ET.Element) -> tuple[list[Footprint], str]:
    """Walk every Placemark and collect its line and polygon geometries."""
    footprints: list[Footprint] = []
    kinds: set[str] = set()

    for n, placemark in enumerate(root.iter(f"{KML_NS}Placemark"), start=1):
        name_elem = placemark.find(f"{KML_NS}name")
        name = name_elem.text.strip() if name_elem is not None and name_elem.text else f"placemark-{n}"

        rings: list[list[tuple[float, float]]] = []
        for line in placemark.iter(f"{KML_NS}LineString"):
            kinds.add("LINESTRING")
            rings.append(_coordinates_of(line))
        for polygon in placemark.iter(f"{KML_NS}Polygon"):
            kinds.add("POLYGON")
            outer = polygon.find(f"{KML_NS}outerBoundaryIs/{KML_NS}LinearRing")
            if outer is not None:
                rings.append(_coordinates_of(outer))

        rings = [r for r in rings if r]
        for i, coords in enumerate(rings):
            path = name if len(rings) == 1 else f"{name}:{i}"
            footprints.append(Footprint(path=path, coordinates=coords))

    if not kinds:
        geometry_type = "UNKNOWN"
    elif len(kinds) == 1:
        geometry_type = kinds.pop()
    else:
        geometry_type = "MIXED"

    return footprints, geometry_type


def _coordinates_of(elem: ET.Element) -> list[tuple[float, float]]:
    coords_elem = elem.find(f"{KML_NS}coordinates")
    if coords_elem is None or not coords_elem.text:
        return []
    return _parse_coordinates_text(coords_elem.text)


def _parse_coordinates_text(text: str) -> list[tuple[float, float]]:
    """Parse a KML ``<coordinates>`` text block.

    Format: ``lon,lat[,alt] lon,lat[,alt] ...`` (whitespace-separated tuples).
    """
    coords: list[tuple[float, float]] = []
    for token in text.strip().split():
        parts = token.split(",")
        if len(parts) < 2:
            continue
        coords.append((float(parts[0]), float(parts[1])))
    return coords
