"""Geographic coordinate primitives.

Conventions:
  - A Coordinate is (lat, lng) in WGS84 degrees
  - Boundary geometry stores positions as [lng, lat] (GeoJSON order)
  - Longitude is x, latitude is y for every planar computation
"""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True)
class Coordinate:
    """WGS84 coordinate."""
    lat: float  # degrees, [-90, 90]
    lng: float  # degrees, [-180, 180]

    @property
    def is_valid(self) -> bool:
        """True if both values are finite and within range."""
        return is_valid_coordinate(self.lat, self.lng)

    def as_position(self) -> tuple[float, float]:
        """GeoJSON position (lng, lat)."""
        return (self.lng, self.lat)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned lat/lng box."""
    north: float
    south: float
    east: float
    west: float

    def contains(self, point: Coordinate) -> bool:
        return (
            self.south <= point.lat <= self.north
            and self.west <= point.lng <= self.east
        )

    @property
    def lat_span(self) -> float:
        return self.north - self.south

    @property
    def lng_span(self) -> float:
        return self.east - self.west


# Continental India, used by the dashboard for its overview map
INDIA_BOUNDS = BoundingBox(north=37.6, south=6.4, east=97.25, west=68.1)


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Check that lat/lng are finite numbers inside WGS84 ranges."""
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError, OverflowError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometers."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def parse_lat_lng(text: str) -> Coordinate:
    """Parse a "LAT,LNG" string.

    Raises ValueError on malformed input.
    """
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        raise ValueError(f"Expected LAT,LNG but got: {text!r}")
    return Coordinate(lat=float(parts[0]), lng=float(parts[1]))
