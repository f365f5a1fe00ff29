"""Reference places used to suggest where a user may act instead."""

from __future__ import annotations

from dataclasses import dataclass

from fencegeo.coords import Coordinate, haversine_km


@dataclass(frozen=True, slots=True)
class Place:
    name: str
    state: str
    location: Coordinate


MAJOR_CITIES = (
    Place("New Delhi", "Delhi", Coordinate(28.6139, 77.2090)),
    Place("Mumbai", "Maharashtra", Coordinate(19.0760, 72.8777)),
    Place("Bangalore", "Karnataka", Coordinate(12.9716, 77.5946)),
    Place("Chennai", "Tamil Nadu", Coordinate(13.0827, 80.2707)),
    Place("Kolkata", "West Bengal", Coordinate(22.5726, 88.3639)),
    Place("Hyderabad", "Telangana", Coordinate(17.3850, 78.4867)),
    Place("Pune", "Maharashtra", Coordinate(18.5204, 73.8567)),
    Place("Ahmedabad", "Gujarat", Coordinate(23.0225, 72.5714)),
    Place("Jaipur", "Rajasthan", Coordinate(26.9124, 75.7873)),
    Place("Lucknow", "Uttar Pradesh", Coordinate(26.8467, 80.9462)),
)

INDIA_CENTER = Coordinate(20.5937, 78.9629)


def nearest_city(
    point: Coordinate,
    states: frozenset[str] | set[str] | None = None,
) -> tuple[Place, float] | None:
    """Closest major city and its distance in km.

    When states is given, only cities in those states are considered.
    Returns None if no city qualifies.
    """
    candidates = [p for p in MAJOR_CITIES if states is None or p.state in states]
    if not candidates:
        return None
    best = min(candidates, key=lambda p: haversine_km(point, p.location))
    return best, haversine_km(point, best.location)
