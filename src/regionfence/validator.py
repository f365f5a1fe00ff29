"""Assigned-region geofence for map interactions.

Decides whether a coordinate lies inside one of the regions assigned to the
current user. Every map click, drag-drop or tool placement goes through
validate(); the UI blocks the action when the result is invalid.

Policy:
  - Disabled fence, or nothing assigned: always valid, no lookups
  - Catalog not loaded yet: fail closed (invalid, data_loaded=False)
  - With restrict_to_country: points outside the national boundary are
    rejected before any region lookup
  - Otherwise valid iff some assigned region contains the point

Invalid results are appended to the caller's ViolationLog and passed to the
optional on_violation hook.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from fencegeo.coords import Coordinate
from fencegeo.geometry import point_in_geometry
from regionfence.catalog import RegionCatalog
from regionfence.config import GeofenceConfig
from regionfence.country import CountryBoundary
from regionfence.places import nearest_city
from regionfence.violations import ViolationKind, ViolationLog, ViolationRecord

logger = logging.getLogger(__name__)

ViolationHook = Callable[[ViolationRecord], None]


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of one geofence check."""
    valid: bool
    coordinate: Coordinate
    kind: ViolationKind | None = None
    region: str | None = None      # matched region when valid and enforcing
    data_loaded: bool = True
    message: str = ""
    suggestion: str | None = None


@dataclass(slots=True)
class ValidatorStats:
    total_checks: int = 0
    total_violations: int = 0

    @property
    def violation_rate(self) -> float:
        if self.total_checks == 0:
            return 0.0
        return self.total_violations / self.total_checks


class GeofenceValidator:
    """Validates coordinates against a user's assigned regions.

    Usage:
        log = ViolationLog()
        validator = GeofenceValidator(config, log=log, on_violation=notify)
        validator.attach_catalog(await loader.load())
        if not validator.validate(Coordinate(19.07, 72.87)).valid:
            ...
    """

    def __init__(
        self,
        config: GeofenceConfig,
        catalog: RegionCatalog | None = None,
        log: ViolationLog | None = None,
        on_violation: ViolationHook | None = None,
        country: CountryBoundary | None = None,
    ):
        self._config = config
        self._catalog = catalog
        self._log = log if log is not None else ViolationLog()
        self._on_violation = on_violation
        self._country = country if country is not None else CountryBoundary()
        self._stats = ValidatorStats()
        self._stats_lock = threading.Lock()

    @property
    def config(self) -> GeofenceConfig:
        return self._config

    @property
    def catalog(self) -> RegionCatalog | None:
        return self._catalog

    @property
    def log(self) -> ViolationLog:
        return self._log

    @property
    def stats(self) -> ValidatorStats:
        """Snapshot of the counters."""
        with self._stats_lock:
            return ValidatorStats(self._stats.total_checks, self._stats.total_violations)

    @property
    def country(self) -> CountryBoundary:
        return self._country

    @property
    def is_active(self) -> bool:
        return self._config.is_enforcing

    @property
    def data_loaded(self) -> bool:
        return self._catalog is not None

    def update_config(self, config: GeofenceConfig) -> None:
        """Replace the assignment (e.g. after an admin reassigns regions)."""
        self._config = config
        if self._catalog is not None and config.is_enforcing:
            missing = self._catalog.unknown_names(config.assigned_regions)
            if missing:
                logger.warning("Assigned regions not in catalog: %s", ", ".join(missing))

    def attach_catalog(self, catalog: RegionCatalog) -> None:
        self._catalog = catalog
        logger.info("Geofence catalog attached: %d regions", len(catalog))

    def contains(self, point: Coordinate) -> str | None:
        """Name of the first assigned region containing point, if any."""
        if self._catalog is None:
            return None
        for feature in self._catalog.filter_by_names(self._config.assigned_regions):
            if point_in_geometry(point, feature.geometry, self._config.exclude_holes):
                return feature.name
        return None

    def validate(self, point: Coordinate) -> ValidationResult:
        """Check a single coordinate."""
        with self._stats_lock:
            self._stats.total_checks += 1

        if not self._config.is_enforcing:
            return ValidationResult(
                valid=True, coordinate=point, data_loaded=self.data_loaded,
                message="Geofencing inactive",
            )

        if self._catalog is None:
            return self._reject(
                point,
                ViolationKind.OUTSIDE_ASSIGNED_REGION,
                "Region boundaries not loaded; location cannot be verified",
                data_loaded=False,
            )

        if not point.is_valid:
            return self._reject(
                point,
                ViolationKind.INVALID_COORDINATES,
                f"Invalid coordinates ({point.lat}, {point.lng})",
                suggestion="Provide a latitude in [-90, 90] and longitude in [-180, 180]",
            )

        if self._config.restrict_to_country and not self._country.contains(point):
            return self._reject_outside_country(point)

        region = self.contains(point)
        if region is not None:
            logger.debug("(%.5f, %.5f) inside %s", point.lat, point.lng, region)
            return ValidationResult(
                valid=True, coordinate=point, region=region,
                message=f"Location within assigned region {region}",
            )

        return self._reject(
            point,
            ViolationKind.OUTSIDE_ASSIGNED_REGION,
            "Location is outside your assigned regions: "
            + ", ".join(sorted(self._config.assigned_regions)),
            suggestion=self._suggest(point),
        )

    def validate_many(self, points: Iterable[Coordinate]) -> ValidationResult | None:
        """Validate points in order, stopping at the first failure.

        Returns the first invalid result (message prefixed with its 1-based
        index), the last valid result if all pass, or None for no points.
        """
        result = None
        for i, point in enumerate(points, start=1):
            result = self.validate(point)
            if not result.valid:
                return ValidationResult(
                    valid=False,
                    coordinate=result.coordinate,
                    kind=result.kind,
                    data_loaded=result.data_loaded,
                    message=f"Point {i} validation failed: {result.message}",
                    suggestion=result.suggestion,
                )
        return result

    def is_valid(self, point: Coordinate) -> bool:
        return self.validate(point).valid

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats = ValidatorStats()

    def _reject_outside_country(self, point: Coordinate) -> ValidationResult:
        country = self._country
        where = "territory" if country.within_bounds(point) else "boundaries"
        message = f"Location is outside {country.name} {where}"
        suggestion = None
        found = nearest_city(point)
        if found is not None:
            place, dist = found
            message += f". Nearest city is {place.name}, {place.state} ({dist:.1f} km away)"
            suggestion = f"Select a location within {country.name}, such as near {place.name}"
        return self._reject(point, ViolationKind.OUTSIDE_COUNTRY, message, suggestion=suggestion)

    def _suggest(self, point: Coordinate) -> str | None:
        found = nearest_city(point, self._config.assigned_regions)
        if found is None:
            return None
        place, dist = found
        return f"Nearest allowed city is {place.name}, {place.state} ({dist:.1f} km away)"

    def _reject(
        self,
        point: Coordinate,
        kind: ViolationKind,
        message: str,
        data_loaded: bool = True,
        suggestion: str | None = None,
    ) -> ValidationResult:
        with self._stats_lock:
            self._stats.total_violations += 1
        record = ViolationRecord(
            coordinate=point,
            timestamp=self._log.clock(),
            kind=kind,
            message=message,
            user_id=self._config.user_id,
        )
        self._log.append(record)
        logger.info("Geofence violation %s at (%s, %s)", kind.value, point.lat, point.lng)

        if self._on_violation is not None:
            try:
                self._on_violation(record)
            except Exception:
                logger.exception("Violation hook failed")

        return ValidationResult(
            valid=False,
            coordinate=point,
            kind=kind,
            data_loaded=data_loaded,
            message=message,
            suggestion=suggestion,
        )
