"""Route between two buildings from footprint files, export GeoJSON, and plot the result.

Roads and buildings are read from shapefiles or KMZ/KML files using the
road_pathfinder library; buildings are matched by their footprint path.
"""

import argparse
import json
from pathlib import Path

import matplotlib.pyplot as plt

from road_pathfinder import (
    Footprint,
    FootprintMetadata,
    RouteResult,
    calculate_path,
    calculate_projected_path,
    is_geographic,
    read_footprints,
    read_kmz_footprints,
)

OUTPUT_GEOJSON = Path(__file__).parent / "route.geojson"
OUTPUT_PLOT = Path(__file__).parent / "route.png"


def load_footprints(path: Path, path_field: str | None = None) -> tuple[list[Footprint], FootprintMetadata]:
    """Read footprints from a .kmz/.kml file or a shapefile."""
    if path.suffix.lower() in (".kmz", ".kml"):
        return read_kmz_footprints(str(path))
    return read_footprints(path, path_field=path_field)


def export_geojson(result: RouteResult, path: Path) -> None:
    """Write the route (or connector diagnostics) to a GeoJSON file."""
    with open(path, "w") as f:
        json.dump(result.geojson, f, indent=2)
    print(f"GeoJSON exported: {path}")


def plot_route(
    roads: list[Footprint],
    buildings: list[Footprint],
    result: RouteResult,
    path: Path,
    title: str = "Shortest Road Route",
) -> None:
    """Plot roads, buildings and the computed route."""
    fig, ax = plt.subplots(figsize=(10, 10))

    for road in roads:
        if not road.coordinates:
            continue
        xs, ys = zip(*road.coordinates)
        ax.plot(xs, ys, color="grey", linewidth=1)

    for building in buildings:
        if not building.coordinates:
            continue
        xs, ys = zip(*building.coordinates)
        ax.fill(xs, ys, color="steelblue", alpha=0.4)

    if result.geojson:
        for feature in result.geojson["features"]:
            coords = feature["geometry"]["coordinates"]
            props = feature["properties"]
            xs = [c[0] for c in coords]
            ys = [c[1] for c in coords]
            ax.plot(xs, ys, color=props["stroke"], linewidth=props["stroke-width"] / 2, alpha=props["stroke-opacity"])

    ax.set_aspect("equal")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    print(f"Plot saved: {path}")


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("roads", type=Path, help="road footprints (.shp, .kmz or .kml)")
    parser.add_argument("buildings", type=Path, help="building footprints (.shp, .kmz or .kml)")
    parser.add_argument("start", help="path of the start building")
    parser.add_argument("end", help="path of the end building")
    parser.add_argument("--path-field", help="shapefile attribute holding footprint paths")
    args = parser.parse_args()

    print(f"Reading roads: {args.roads}")
    roads, road_meta = load_footprints(args.roads, args.path_field)
    print(f"Loaded {len(roads):,} road footprints ({road_meta.shape_type_name}, CRS: EPSG:{road_meta.crs_epsg})")

    print(f"Reading buildings: {args.buildings}")
    buildings, _ = load_footprints(args.buildings, args.path_field)
    by_path = {b.path: b for b in buildings}
    selected = [by_path.get(args.start), by_path.get(args.end)]
    print(f"Loaded {len(buildings):,} building footprints\n")

    if is_geographic(road_meta.crs_epsg):
        print(f"Projecting EPSG:{road_meta.crs_epsg} coordinates to metres for routing")
        result = calculate_projected_path(roads, selected, road_meta.crs_epsg)
    else:
        result = calculate_path(roads, selected)
    print(result.status_message())
    print()

    if result.geojson:
        export_geojson(result, OUTPUT_GEOJSON)

    plot_route(roads, [b for b in selected if b is not None], result, OUTPUT_PLOT, title=f"{args.start} to {args.end}")


if __name__ == "__main__":
    main()
