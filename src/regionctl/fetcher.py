"""Async region dataset downloader.

Fetches a GeoJSON FeatureCollection of region boundaries and stores it as a
local file for the file-backed catalog source. The payload is parsed before
it is written so a broken download never replaces a good dataset.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from regionfence.catalog import parse_features
from regionfence.sources import HttpRegionSource

logger = logging.getLogger(__name__)


async def download_dataset(
    url: str,
    output: Path,
    timeout_s: float = 30.0,
    name_property: str = "st_nm",
) -> int:
    """Download a region dataset to output.

    Returns the number of usable regions. Raises CatalogUnavailableError
    when the download fails or the payload is not a FeatureCollection.
    """
    payload = await HttpRegionSource(url, timeout_s=timeout_s).fetch()
    catalog = parse_features(payload, name_property)

    output.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = output.with_suffix(output.suffix + ".part")
    tmp_path.write_text(json.dumps(payload), encoding="utf-8")
    tmp_path.replace(output)

    logger.info("Saved %d regions from %s to %s", len(catalog), url, output)
    return len(catalog)
