"""Runtime configuration for the region geofence."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceConfig(BaseModel):
    """Where the region boundary dataset comes from."""
    path: Path | None = None     # local GeoJSON FeatureCollection
    url: str | None = None       # fetched over HTTP when path is unset
    name_property: str = "st_nm"  # feature property holding the region name
    timeout_s: float = 30.0


class GeofenceConfig(BaseModel):
    """Per-session assignment: which regions a user may act in."""
    model_config = ConfigDict(frozen=True)

    assigned_regions: frozenset[str] = frozenset()
    active: bool = True
    user_id: str | None = None
    exclude_holes: bool = False  # subtract polygon holes from containment
    restrict_to_country: bool = False  # reject points outside the national boundary first

    @field_validator("assigned_regions", mode="before")
    @classmethod
    def _strip_names(cls, value):
        if isinstance(value, str):
            value = [value]
        names = [n.strip() if isinstance(n, str) else n for n in value]
        return [n for n in names if n != ""]

    @property
    def is_enforcing(self) -> bool:
        """False when disabled or nothing is assigned (never blocks)."""
        return self.active and bool(self.assigned_regions)


class ViolationLogConfig(BaseModel):
    """Retention of violation history."""
    max_records: int = Field(default=1000, gt=0)
    max_age_s: float | None = None  # drop records older than this


class ViewportConfig(BaseModel):
    """Display rectangle for boundary rendering."""
    width: int = Field(default=800, gt=0)
    height: int = Field(default=900, gt=0)


class FenceSettings(BaseModel):
    """Top-level configuration."""
    source: SourceConfig = SourceConfig()
    geofence: GeofenceConfig = GeofenceConfig()
    violations: ViolationLogConfig = ViolationLogConfig()
    viewport: ViewportConfig = ViewportConfig()
    log_level: str = "INFO"


def load_settings(path: Path | None) -> FenceSettings:
    """Load settings from a JSON file, or defaults when path is None."""
    if path is None:
        return FenceSettings()
    return FenceSettings.model_validate_json(path.read_text())


def user_geofence(user_id: str, assigned_regions, active: bool = True) -> GeofenceConfig:
    """Geofence config for one user's region assignment."""
    return GeofenceConfig(
        assigned_regions=assigned_regions,
        active=active,
        user_id=user_id,
    )
