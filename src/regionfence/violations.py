"""Violation history for failed geofence checks.

The log is owned by the caller and handed to the validator, so every call
site (map clicks, tool placement, batch checks) writes to the same record.
Retention is explicit: a record cap plus an optional age limit.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from fencegeo.coords import Coordinate
from regionfence.config import ViolationLogConfig


class ViolationKind(str, Enum):
    OUTSIDE_ASSIGNED_REGION = "outside_assigned_region"
    INVALID_COORDINATES = "invalid_coordinates"
    OUTSIDE_COUNTRY = "outside_country"


@dataclass(frozen=True, slots=True)
class ViolationRecord:
    """One failed validation."""
    coordinate: Coordinate
    timestamp: datetime
    kind: ViolationKind
    message: str = ""
    user_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "lat": self.coordinate.lat,
            "lng": self.coordinate.lng,
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "message": self.message,
            "user_id": self.user_id,
        }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ViolationLog:
    """Append-only, thread-safe violation history.

    Usage:
        log = ViolationLog(max_records=500)
        validator = GeofenceValidator(config, catalog, log=log)
        ...
        for record in log.list():
            ...
        log.clear()
    """

    def __init__(
        self,
        max_records: int = 1000,
        max_age_s: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        if max_records <= 0:
            raise ValueError("max_records must be positive")
        self._records: deque[ViolationRecord] = deque()
        self._max_records = max_records
        self._max_age = timedelta(seconds=max_age_s) if max_age_s is not None else None
        self._clock = clock
        self._lock = threading.Lock()
        self._evicted = 0

    @classmethod
    def from_config(cls, config: ViolationLogConfig) -> ViolationLog:
        return cls(max_records=config.max_records, max_age_s=config.max_age_s)

    @property
    def clock(self) -> Callable[[], datetime]:
        return self._clock

    @property
    def max_records(self) -> int:
        return self._max_records

    @property
    def evicted(self) -> int:
        """Records dropped by retention since creation (clear() excluded)."""
        return self._evicted

    def __len__(self) -> int:
        with self._lock:
            self._expire()
            return len(self._records)

    def append(self, record: ViolationRecord) -> None:
        with self._lock:
            self._records.append(record)
            while len(self._records) > self._max_records:
                self._records.popleft()
                self._evicted += 1
            self._expire()

    def list(self) -> tuple[ViolationRecord, ...]:
        """Snapshot in insertion (chronological) order."""
        with self._lock:
            self._expire()
            return tuple(self._records)

    def recent(self, count: int = 10) -> tuple[ViolationRecord, ...]:
        """Last count records, oldest first."""
        if count <= 0:
            return ()
        with self._lock:
            self._expire()
            return tuple(self._records)[-count:]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _expire(self) -> None:
        # caller holds the lock
        if self._max_age is None:
            return
        cutoff = self._clock() - self._max_age
        while self._records and self._records[0].timestamp < cutoff:
            self._records.popleft()
            self._evicted += 1
