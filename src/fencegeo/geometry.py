"""Point-in-region tests for Polygon and MultiPolygon boundaries.

Membership uses the even-odd (ray casting) rule in lng/lat space: a ray is
cast from the point towards +x and every edge crossing toggles the result.

Hole semantics: by default a hit on *any* ring of a polygon counts as
containment, holes included. Pass ``exclude_holes=True`` to get
outer-minus-holes semantics.

The containment tests are pure and total: malformed or degenerate input yields
False, never an exception.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from fencegeo.coords import BoundingBox, Coordinate

POLYGON = "Polygon"
MULTI_POLYGON = "MultiPolygon"
SUPPORTED_KINDS = (POLYGON, MULTI_POLYGON)

MIN_RING_POINTS = 3

Position = Sequence[float]            # [lng, lat]
Ring = Sequence[Position]
PolygonCoords = Sequence[Ring]        # outer ring, then holes
MultiPolygonCoords = Sequence[PolygonCoords]


@dataclass(frozen=True, slots=True)
class RegionGeometry:
    """Normalised Polygon or MultiPolygon boundary."""
    kind: str
    coordinates: tuple
    bounds: BoundingBox | None = None

    @property
    def polygons(self) -> tuple:
        """Constituent polygons, one for Polygon geometry."""
        if self.kind == POLYGON:
            return (self.coordinates,)
        return self.coordinates

    @property
    def vertex_count(self) -> int:
        return sum(len(ring) for polygon in self.polygons for ring in polygon)


def point_in_ring(point: Coordinate, ring: Ring) -> bool:
    """Even-odd test of a point against one closed ring.

    The closing edge (last vertex back to first) is always included, so the
    ring may or may not repeat its first vertex. Rings with fewer than three
    vertices contain nothing.
    """
    try:
        n = len(ring)
        if n < MIN_RING_POINTS:
            return False

        x, y = point.lng, point.lat
        inside = False
        j = n - 1
        for i in range(n):
            xi, yi = float(ring[i][0]), float(ring[i][1])
            xj, yj = float(ring[j][0]), float(ring[j][1])
            # (yi > y) != (yj > y) guarantees yi != yj
            if (yi > y) != (yj > y) and x < xj + (xi - xj) * (y - yj) / (yi - yj):
                inside = not inside
            j = i
        return inside
    except (TypeError, ValueError, IndexError, OverflowError):
        return False


def point_in_polygon(
    point: Coordinate,
    polygon: PolygonCoords,
    exclude_holes: bool = False,
) -> bool:
    """Test a point against a polygon's rings.

    Default: True if any ring (outer or hole) contains the point.
    With exclude_holes: inside the outer ring and outside every hole.
    """
    try:
        rings = list(polygon)
    except TypeError:
        return False
    if not rings:
        return False

    if exclude_holes:
        if not point_in_ring(point, rings[0]):
            return False
        return not any(point_in_ring(point, hole) for hole in rings[1:])

    return any(point_in_ring(point, ring) for ring in rings)


def point_in_multipolygon(
    point: Coordinate,
    multipolygon: MultiPolygonCoords,
    exclude_holes: bool = False,
) -> bool:
    """True if any constituent polygon contains the point."""
    try:
        polygons = iter(multipolygon)
    except TypeError:
        return False
    for polygon in polygons:
        if point_in_polygon(point, polygon, exclude_holes=exclude_holes):
            return True
    return False


def point_in_geometry(
    point: Coordinate,
    geometry: RegionGeometry,
    exclude_holes: bool = False,
) -> bool:
    """Dispatch on geometry kind. Unknown kinds contain nothing."""
    if geometry.bounds is not None and not geometry.bounds.contains(point):
        # A point outside every ring's extent can't toggle an odd count
        return False
    if geometry.kind == POLYGON:
        return point_in_polygon(point, geometry.coordinates, exclude_holes)
    if geometry.kind == MULTI_POLYGON:
        return point_in_multipolygon(point, geometry.coordinates, exclude_holes)
    return False


def iter_vertices(geometry: RegionGeometry) -> Iterator[tuple[float, float]]:
    """Yield every (lng, lat) vertex of every ring."""
    for polygon in geometry.polygons:
        for ring in polygon:
            for position in ring:
                yield position[0], position[1]


def geometry_bounds(geometry: RegionGeometry) -> BoundingBox | None:
    """Bounding box over all vertices, or None if there are none."""
    lngs = []
    lats = []
    for lng, lat in iter_vertices(geometry):
        lngs.append(lng)
        lats.append(lat)
    if not lngs:
        return None
    return BoundingBox(north=max(lats), south=min(lats), east=max(lngs), west=min(lngs))


def _normalize_position(position) -> tuple[float, float]:
    if isinstance(position, (str, bytes)) or len(position) < 2:
        raise ValueError(f"Position needs at least two numbers: {position!r}")
    lng, lat = float(position[0]), float(position[1])
    if not (math.isfinite(lng) and math.isfinite(lat)):
        raise ValueError(f"Non-finite position: {position!r}")
    return lng, lat


def _normalize_polygon(polygon) -> tuple:
    if not isinstance(polygon, (list, tuple)):
        raise ValueError("Polygon must be a list of rings")
    rings = []
    for ring in polygon:
        if not isinstance(ring, (list, tuple)):
            raise ValueError("Ring must be a list of positions")
        rings.append(tuple(_normalize_position(p) for p in ring))
    return tuple(rings)


def make_geometry(kind: str, coordinates) -> RegionGeometry:
    """Build a normalised RegionGeometry from GeoJSON-style coordinates.

    Raises ValueError when the structure is not a Polygon / MultiPolygon
    coordinate array or contains no vertices at all. Individual degenerate
    rings are kept; they simply never contain a point.
    """
    if kind not in SUPPORTED_KINDS:
        raise ValueError(f"Unsupported geometry type: {kind!r}")
    if not isinstance(coordinates, (list, tuple)) or not coordinates:
        raise ValueError("Empty coordinate array")

    try:
        if kind == POLYGON:
            normalized = _normalize_polygon(coordinates)
        else:
            normalized = tuple(_normalize_polygon(p) for p in coordinates)
    except (TypeError, KeyError, OverflowError) as e:
        raise ValueError(f"Malformed coordinate array: {e}") from e

    geometry = RegionGeometry(kind=kind, coordinates=normalized)
    bounds = geometry_bounds(geometry)
    if bounds is None:
        raise ValueError("Geometry has no vertices")
    return RegionGeometry(kind=kind, coordinates=normalized, bounds=bounds)
