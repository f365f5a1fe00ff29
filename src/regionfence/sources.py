"""Region boundary data sources.

A source produces the raw GeoJSON FeatureCollection; parsing into a
RegionCatalog happens in one place (catalog.parse_features) no matter where
the bytes came from. Supports a local file, an HTTP endpoint (aiohttp) and an
in-memory payload (bundled asset or tests).
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import aiohttp

from regionfence.config import SourceConfig
from regionfence.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)


class RegionSource(ABC):
    @abstractmethod
    async def fetch(self) -> Any:
        """Return the decoded dataset. Raises CatalogUnavailableError."""
        ...

    @property
    @abstractmethod
    def description(self) -> str: ...


class StaticRegionSource(RegionSource):
    """Dataset already in memory."""

    def __init__(self, payload: Any, label: str = "memory"):
        self._payload = payload
        self._label = label

    async def fetch(self) -> Any:
        return self._payload

    @property
    def description(self) -> str:
        return self._label


class FileRegionSource(RegionSource):
    """GeoJSON file on local disk."""

    def __init__(self, path: Path):
        self._path = Path(path)

    async def fetch(self) -> Any:
        return await asyncio.to_thread(self._read)

    def _read(self) -> Any:
        if not self._path.is_file():
            raise CatalogUnavailableError(f"Region dataset not found: {self._path}")
        try:
            with open(self._path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CatalogUnavailableError(f"Invalid region dataset {self._path}: {e}") from e

    @property
    def description(self) -> str:
        return str(self._path)


class HttpRegionSource(RegionSource):
    """GeoJSON served over HTTP."""

    def __init__(self, url: str, timeout_s: float = 30.0):
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)

    async def fetch(self) -> Any:
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(self._url) as resp:
                    if resp.status != 200:
                        raise CatalogUnavailableError(
                            f"Failed to load region dataset {self._url}: HTTP {resp.status}"
                        )
                    body = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise CatalogUnavailableError(f"Error fetching {self._url}: {e}") from e

        try:
            return json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CatalogUnavailableError(f"Invalid JSON from {self._url}: {e}") from e

    @property
    def description(self) -> str:
        return self._url


def create_source(config: SourceConfig) -> RegionSource:
    """Factory: file source when a path is configured, else HTTP."""
    if config.path is not None:
        return FileRegionSource(config.path)
    if config.url:
        return HttpRegionSource(config.url, timeout_s=config.timeout_s)
    raise ValueError("Source config needs either path or url")
