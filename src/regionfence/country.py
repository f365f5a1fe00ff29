"""National boundary layer checked ahead of assigned regions.

A quick bounding-box reject, then, when region geometries are available, a
precise test: a point is inside the country iff some region contains it.
"""

from __future__ import annotations

from dataclasses import dataclass

from fencegeo.coords import INDIA_BOUNDS, BoundingBox, Coordinate
from fencegeo.geometry import RegionGeometry, point_in_geometry
from regionfence.catalog import RegionCatalog


@dataclass(frozen=True, slots=True)
class CountryBoundary:
    """Country extent, optionally refined by its region geometries.

    Usage:
        country = CountryBoundary.from_catalog(catalog)
        validator = GeofenceValidator(config, catalog, country=country)
    """
    name: str = "India"
    bounds: BoundingBox = INDIA_BOUNDS
    regions: tuple[RegionGeometry, ...] = ()

    @classmethod
    def from_catalog(
        cls,
        catalog: RegionCatalog,
        name: str = "India",
        bounds: BoundingBox = INDIA_BOUNDS,
    ) -> CountryBoundary:
        return cls(name=name, bounds=bounds, regions=tuple(f.geometry for f in catalog))

    @property
    def is_precise(self) -> bool:
        return bool(self.regions)

    def within_bounds(self, point: Coordinate) -> bool:
        return self.bounds.contains(point)

    def contains(self, point: Coordinate) -> bool:
        if not self.within_bounds(point):
            return False
        if not self.regions:
            return True
        return any(point_in_geometry(point, g) for g in self.regions)
