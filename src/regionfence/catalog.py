"""Region catalog: named administrative boundaries, loaded once.

Loads a GeoJSON FeatureCollection of regions (one Polygon or MultiPolygon
per feature) and provides lookup by name. Malformed features are skipped so
that one bad boundary never takes the whole catalog down.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from fencegeo.geometry import RegionGeometry, make_geometry
from regionfence.errors import CatalogUnavailableError, MalformedGeometryError
from regionfence.sources import RegionSource

logger = logging.getLogger(__name__)

FALLBACK_NAME_PROPERTIES = ("name", "NAME")


@dataclass(frozen=True, slots=True)
class RegionFeature:
    """One named region."""
    name: str
    geometry: RegionGeometry


class RegionCatalog:
    """Immutable, ordered set of regions keyed by name.

    Usage:
        catalog = RegionCatalog(features)
        assigned = catalog.filter_by_names({"Maharashtra", "Goa"})
    """

    def __init__(self, features: Iterable[RegionFeature] = ()):
        self._by_name: dict[str, RegionFeature] = {}
        for feature in features:
            if feature.name in self._by_name:
                logger.warning("Duplicate region %r ignored", feature.name)
                continue
            self._by_name[feature.name] = feature
        self._features = tuple(self._by_name.values())

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[RegionFeature]:
        return iter(self._features)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def names(self) -> list[str]:
        return [f.name for f in self._features]

    def get(self, name: str) -> RegionFeature | None:
        return self._by_name.get(name)

    def filter_by_names(self, names: Iterable[str]) -> list[RegionFeature]:
        """Features whose name is in names, in catalog order."""
        wanted = set(names)
        return [f for f in self._features if f.name in wanted]

    def partition(self, names: Iterable[str]) -> tuple[list[RegionFeature], list[RegionFeature]]:
        """Split into (assigned, unassigned), both in catalog order."""
        wanted = set(names)
        assigned = []
        unassigned = []
        for f in self._features:
            (assigned if f.name in wanted else unassigned).append(f)
        return assigned, unassigned

    def unknown_names(self, names: Iterable[str]) -> list[str]:
        """Names not present in the catalog, sorted."""
        return sorted(n for n in set(names) if n not in self._by_name)


def _feature_name(feature: dict, name_property: str) -> str | None:
    props = feature.get("properties") or {}
    if not isinstance(props, dict):
        return None
    for key in (name_property, *FALLBACK_NAME_PROPERTIES):
        value = props.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def parse_feature(feature: Any, name_property: str = "st_nm", index: int | None = None) -> RegionFeature:
    """Parse one GeoJSON feature. Raises MalformedGeometryError."""
    if not isinstance(feature, dict):
        raise MalformedGeometryError("Feature is not an object", index=index)

    name = _feature_name(feature, name_property)
    if name is None:
        raise MalformedGeometryError(f"Feature has no {name_property!r} property", index=index)

    geometry = feature.get("geometry")
    if not isinstance(geometry, dict):
        raise MalformedGeometryError("Missing geometry", index=index, name=name)

    try:
        region_geometry = make_geometry(geometry.get("type"), geometry.get("coordinates"))
    except ValueError as e:
        raise MalformedGeometryError(str(e), index=index, name=name) from e

    return RegionFeature(name=name, geometry=region_geometry)


def parse_features(payload: Any, name_property: str = "st_nm") -> RegionCatalog:
    """Build a catalog from a FeatureCollection (or a bare feature list).

    Bad features are logged and skipped. Raises CatalogUnavailableError only
    when the payload is not a feature collection at all.
    """
    if isinstance(payload, dict) and payload.get("type") == "FeatureCollection":
        raw_features = payload.get("features")
    elif isinstance(payload, list):
        raw_features = payload
    else:
        raise CatalogUnavailableError("Region dataset is not a GeoJSON FeatureCollection")

    if not isinstance(raw_features, list):
        raise CatalogUnavailableError("FeatureCollection has no feature list")

    features = []
    skipped = 0
    for i, raw in enumerate(raw_features):
        try:
            features.append(parse_feature(raw, name_property, index=i))
        except MalformedGeometryError as e:
            skipped += 1
            logger.warning("Skipping region feature %d (%s): %s", i, e.name or "unnamed", e)

    catalog = RegionCatalog(features)
    logger.info(
        "Region catalog parsed: %d regions, %d skipped", len(catalog), skipped,
    )
    return catalog


class CatalogLoader:
    """Loads the catalog once and caches it.

    Concurrent callers of load() share the single in-flight fetch. A failed
    load leaves the loader empty so it can be retried.

    Usage:
        loader = CatalogLoader(FileRegionSource(Path("india.json")))
        catalog = await loader.load()
    """

    def __init__(self, source: RegionSource, name_property: str = "st_nm"):
        self._source = source
        self._name_property = name_property
        self._catalog: RegionCatalog | None = None
        self._lock: asyncio.Lock | None = None
        self._last_error: str | None = None

    @property
    def catalog(self) -> RegionCatalog | None:
        return self._catalog

    @property
    def is_loaded(self) -> bool:
        return self._catalog is not None

    @property
    def last_error(self) -> str | None:
        return self._last_error

    async def load(self) -> RegionCatalog:
        """Fetch and parse the dataset, or return the cached catalog."""
        if self._catalog is not None:
            return self._catalog

        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            if self._catalog is not None:
                return self._catalog

            logger.info("Loading region catalog from %s", self._source.description)
            try:
                payload = await self._source.fetch()
                catalog = parse_features(payload, self._name_property)
            except CatalogUnavailableError as e:
                self._last_error = str(e)
                logger.error("Region catalog unavailable: %s", e)
                raise

            self._catalog = catalog
            self._last_error = None
            return catalog
