"""Tests for the async dataset downloader."""

import asyncio
import json

import pytest
from aiohttp import test_utils, web

from regionctl.fetcher import download_dataset
from regionfence.errors import CatalogUnavailableError

PAYLOAD = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"st_nm": "TestState"},
            "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [0, 10], [10, 10], [10, 0]]]},
        },
        {"type": "Feature", "properties": {"st_nm": "Broken"}, "geometry": None},
    ],
}


async def _download(handler, output):
    app = web.Application()
    app.router.add_get("/india.json", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        return await download_dataset(str(server.make_url("/india.json")), output)
    finally:
        await server.close()


class TestDownloadDataset:
    def test_saves_payload(self, tmp_path):
        async def handler(request):
            return web.json_response(PAYLOAD)

        output = tmp_path / "data" / "india.json"
        count = asyncio.run(_download(handler, output))
        assert count == 1
        assert json.loads(output.read_text()) == PAYLOAD
        assert not (tmp_path / "data" / "india.json.part").exists()

    def test_bad_payload_keeps_existing_file(self, tmp_path):
        async def handler(request):
            return web.json_response({"type": "Topology"})

        output = tmp_path / "india.json"
        output.write_text("previous")
        with pytest.raises(CatalogUnavailableError):
            asyncio.run(_download(handler, output))
        assert output.read_text() == "previous"

    def test_http_error(self, tmp_path):
        async def handler(request):
            return web.Response(status=404)

        output = tmp_path / "india.json"
        with pytest.raises(CatalogUnavailableError, match="HTTP 404"):
            asyncio.run(_download(handler, output))
        assert not output.exists()
