"""Visualization and export tools for regions and violations.

Generates:
- A standalone SVG overlay of region boundaries (assigned vs. restricted)
- GeoJSON of recorded violations
- CSV of recorded violations

No plotting dependency: boundaries are projected with the linear viewport
mapping and written as SVG paths.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable
from html import escape
from pathlib import Path

from fencegeo.coords import INDIA_BOUNDS, BoundingBox
from fencegeo.geometry import MIN_RING_POINTS, RegionGeometry
from fencegeo.projection import centroid, project_ring, to_pixel
from regionfence.catalog import RegionCatalog
from regionfence.violations import ViolationRecord

ASSIGNED_STYLE = 'fill="#bbf7d0" fill-opacity="0.4" stroke="#22c55e" stroke-width="2"'
RESTRICTED_STYLE = 'fill="#fee2e2" fill-opacity="0.3" stroke="#fca5a5" stroke-width="1"'

CSV_FIELDS = ["timestamp", "lat", "lng", "kind", "message", "user_id"]


def geometry_to_svg_path(
    geometry: RegionGeometry,
    width: float,
    height: float,
    bounds: BoundingBox = INDIA_BOUNDS,
) -> str:
    """SVG path data for every ring; degenerate rings are skipped."""
    parts = []
    for polygon in geometry.polygons:
        for ring in polygon:
            if len(ring) < MIN_RING_POINTS:
                continue
            pts = project_ring(ring, width, height, bounds)
            cmds = [f"M {pts[0, 0]:.2f},{pts[0, 1]:.2f}"]
            cmds.extend(f"L {x:.2f},{y:.2f}" for x, y in pts[1:])
            cmds.append("Z")
            parts.append(" ".join(cmds))
    return " ".join(parts)


def render_overlay_svg(
    catalog: RegionCatalog,
    assigned: Iterable[str],
    width: int,
    height: int,
    bounds: BoundingBox = INDIA_BOUNDS,
    show_labels: bool = True,
) -> str:
    """Render assigned regions green and the rest red, with name labels."""
    allowed, restricted = catalog.partition(assigned)

    body = []
    for features, style in ((restricted, RESTRICTED_STYLE), (allowed, ASSIGNED_STYLE)):
        for feature in features:
            path = geometry_to_svg_path(feature.geometry, width, height, bounds)
            if not path:
                continue
            body.append(
                f'<path d="{path}" {style} fill-rule="evenodd">'
                f"<title>{escape(feature.name)}</title></path>"
            )

    if show_labels:
        for feature in allowed:
            center = centroid(feature.geometry)
            if center is None:
                continue
            px = to_pixel(center.lat, center.lng, width, height, bounds)
            body.append(
                f'<text x="{px.x:.1f}" y="{px.y:.1f}" font-size="12" '
                f'text-anchor="middle" fill="#166534">{escape(feature.name)}</text>'
            )

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">\n'
        + "\n".join(body)
        + "\n</svg>\n"
    )


def violations_to_geojson(
    records: Iterable[ViolationRecord],
    output_path: Path | None = None,
) -> dict:
    """Violation points as a GeoJSON FeatureCollection."""
    features = []
    for record in records:
        props = record.to_dict()
        props.pop("lat")
        props.pop("lng")
        features.append({
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [record.coordinate.lng, record.coordinate.lat],
            },
            "properties": props,
        })

    geojson = {"type": "FeatureCollection", "features": features}

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(geojson, f, indent=2)

    return geojson


def write_violations_csv(records: Iterable[ViolationRecord], output_path: Path) -> int:
    """Write violations to CSV. Returns the number of rows written."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for record in records:
            row = record.to_dict()
            writer.writerow({k: "" if row[k] is None else row[k] for k in CSV_FIELDS})
            count += 1
    return count
