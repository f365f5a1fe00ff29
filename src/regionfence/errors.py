"""Exceptions raised by the region geofence.

Only dataset loading raises to callers. Validation itself always resolves
to a result.
"""

from __future__ import annotations


class GeofenceError(Exception):
    """Base class for geofence errors."""


class MalformedGeometryError(GeofenceError):
    """A region feature has missing or unusable geometry.

    Raised while parsing a single feature; the catalog loader catches it and
    skips that feature.
    """

    def __init__(self, message: str, index: int | None = None, name: str | None = None):
        super().__init__(message)
        self.index = index
        self.name = name


class CatalogUnavailableError(GeofenceError):
    """The region boundary dataset could not be fetched or parsed."""
