"""Reprojection of geographic footprints onto a metric CRS for routing.

Routing distances are planar, so lon/lat input (KML, or shapefiles with a
geographic .prj) is moved into the UTM zone covering its centre first, and
the route is moved back so callers get coordinates in their own CRS.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from pyproj import CRS, Transformer
from pyproj.aoi import AreaOfInterest
from pyproj.database import query_utm_crs_info

from .models import Footprint, RouteResult
from .route import calculate_path

logger = logging.getLogger(__name__)

WGS84_EPSG = 4326


def is_geographic(epsg: int | None) -> bool:
    """True if ``epsg`` names a lon/lat CRS. Unknown codes count as projected."""
    if epsg is None:
        return False
    return CRS.from_epsg(epsg).is_geographic


def utm_crs_for(footprints: Iterable[Footprint | None], source_epsg: int = WGS84_EPSG) -> CRS:
    """UTM CRS of the zone containing the centre of the footprints' extent."""
    to_lonlat = Transformer.from_crs(f"EPSG:{source_epsg}", f"EPSG:{WGS84_EPSG}", always_xy=True)
    xs: list[float] = []
    ys: list[float] = []
    for fp in footprints:
        if fp is None or not fp.coordinates:
            continue
        for x, y in fp.coordinates:
            xs.append(x)
            ys.append(y)
    if not xs:
        raise ValueError("No coordinates to choose a projection from")

    lon, lat = to_lonlat.transform((min(xs) + max(xs)) / 2, (min(ys) + max(ys)) / 2)
    if not (-180 <= lon <= 180 and -90 <= lat <= 90):
        raise ValueError(f"Coordinates are not valid longitude/latitude: ({lon}, {lat})")

    infos = query_utm_crs_info(
        datum_name="WGS 84",
        area_of_interest=AreaOfInterest(
            west_lon_degree=lon,
            south_lat_degree=lat,
            east_lon_degree=lon,
            north_lat_degree=lat,
        ),
    )
    if not infos:
        raise ValueError(f"No UTM zone covers ({lon}, {lat})")
    return CRS.from_epsg(int(infos[0].code))


def project_footprint(footprint: Footprint | None, transformer: Transformer) -> Footprint | None:
    if footprint is None or not footprint.coordinates:
        return footprint
    xs, ys = zip(*footprint.coordinates)
    px, py = transformer.transform(xs, ys)
    return Footprint(path=footprint.path, coordinates=list(zip(px, py)))


def unproject_geojson(geojson: dict, transformer: Transformer) -> dict:
    """Copy of a route FeatureCollection with coordinates mapped back to the source CRS."""
    features = []
    for feature in geojson["features"]:
        coords = feature["geometry"]["coordinates"]
        xs = [c[0] for c in coords]
        ys = [c[1] for c in coords]
        sx, sy = transformer.transform(xs, ys, direction="INVERSE")
        features.append(
            {
                **feature,
                "geometry": {**feature["geometry"], "coordinates": [[x, y] for x, y in zip(sx, sy)]},
            }
        )
    return {**geojson, "features": features}


def calculate_projected_path(
    roads: Sequence[Footprint],
    buildings: Sequence[Footprint | None],
    source_epsg: int = WGS84_EPSG,
) -> RouteResult:
    """:func:`~road_pathfinder.route.calculate_path` for footprints in a geographic CRS.

    The distance is in metres of the chosen UTM zone; the GeoJSON is in
    ``source_epsg``. The zone is chosen from the roads alone.
    """
    if not any(r.coordinates for r in roads):
        return calculate_path(roads, buildings)

    target = utm_crs_for(roads, source_epsg)
    transformer = Transformer.from_crs(f"EPSG:{source_epsg}", target, always_xy=True)
    logger.info("Projecting EPSG:%d footprints to %s", source_epsg, target.name)

    result = calculate_path(
        [project_footprint(r, transformer) for r in roads],
        [project_footprint(b, transformer) for b in buildings],
    )
    if result.geojson:
        result = result.model_copy(update={"geojson": unproject_geojson(result.geojson, transformer)})
    return result
