"""Linear lat/lng <-> display pixel mapping.

Maps a fixed geographic bounding box onto a pixel rectangle. Higher latitude
means smaller y (screen coordinates grow downward). Used for drawing region
boundaries and placing labels only; the membership test never goes through
pixel space.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from fencegeo.coords import INDIA_BOUNDS, BoundingBox, Coordinate
from fencegeo.geometry import RegionGeometry, Ring, iter_vertices


@dataclass(frozen=True, slots=True)
class PixelCoord:
    """Position in the display rectangle."""
    x: float  # 0..width
    y: float  # 0..height


def _check_viewport(width: float, height: float) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Viewport must be positive, got {width}x{height}")


def to_pixel(
    lat: float,
    lng: float,
    width: float,
    height: float,
    bounds: BoundingBox = INDIA_BOUNDS,
) -> PixelCoord:
    """Project a coordinate into a width x height viewport."""
    _check_viewport(width, height)
    x = (lng - bounds.west) / bounds.lng_span * width
    y = (bounds.north - lat) / bounds.lat_span * height
    return PixelCoord(x=x, y=y)


def to_lat_lng(
    x: float,
    y: float,
    width: float,
    height: float,
    bounds: BoundingBox = INDIA_BOUNDS,
) -> Coordinate:
    """Inverse of to_pixel."""
    _check_viewport(width, height)
    lat = bounds.north - (y / height) * bounds.lat_span
    lng = bounds.west + (x / width) * bounds.lng_span
    return Coordinate(lat=lat, lng=lng)


def project_ring(
    ring: Ring,
    width: float,
    height: float,
    bounds: BoundingBox = INDIA_BOUNDS,
) -> np.ndarray:
    """Project a ring of [lng, lat] positions to an (N, 2) pixel array."""
    _check_viewport(width, height)
    pts = np.asarray(ring, dtype=np.float64)
    if pts.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    pts = pts[:, :2]
    out = np.empty_like(pts)
    out[:, 0] = (pts[:, 0] - bounds.west) / bounds.lng_span * width
    out[:, 1] = (bounds.north - pts[:, 1]) / bounds.lat_span * height
    return out


def centroid(geometry: RegionGeometry) -> Coordinate | None:
    """Mean of all vertices across all rings.

    Not area-weighted; good enough for label placement. Returns None when
    the geometry has no vertices.
    """
    vertices = np.fromiter(
        (v for vertex in iter_vertices(geometry) for v in vertex),
        dtype=np.float64,
    )
    if vertices.size == 0:
        return None
    mean_lng, mean_lat = vertices.reshape(-1, 2).mean(axis=0)
    return Coordinate(lat=float(mean_lat), lng=float(mean_lng))
