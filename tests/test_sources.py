"""Tests for region data sources."""

import asyncio
import json

import pytest
from aiohttp import web
from aiohttp import test_utils

from regionfence.catalog import CatalogLoader
from regionfence.config import SourceConfig
from regionfence.errors import CatalogUnavailableError
from regionfence.sources import (
    FileRegionSource, HttpRegionSource, StaticRegionSource, create_source,
)

PAYLOAD = {
    "type": "FeatureCollection",
    "features": [{
        "type": "Feature",
        "properties": {"st_nm": "TestState"},
        "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [0, 10], [10, 10], [10, 0]]]},
    }],
}


async def _with_server(handler, fn):
    app = web.Application()
    app.router.add_get("/india.json", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        return await fn(str(server.make_url("/india.json")))
    finally:
        await server.close()


class TestStaticSource:
    def test_returns_payload(self):
        src = StaticRegionSource(PAYLOAD, label="bundled")
        assert asyncio.run(src.fetch()) is PAYLOAD
        assert src.description == "bundled"


class TestFileSource:
    def test_reads_json(self, tmp_path):
        path = tmp_path / "india.json"
        path.write_text(json.dumps(PAYLOAD))
        assert asyncio.run(FileRegionSource(path).fetch()) == PAYLOAD

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogUnavailableError, match="not found"):
            asyncio.run(FileRegionSource(tmp_path / "nope.json").fetch())

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(CatalogUnavailableError, match="Invalid"):
            asyncio.run(FileRegionSource(path).fetch())


class TestHttpSource:
    def test_fetch_ok(self):
        async def handler(request):
            return web.json_response(PAYLOAD)

        async def fetch(url):
            return await HttpRegionSource(url).fetch()

        assert asyncio.run(_with_server(handler, fetch)) == PAYLOAD

    def test_http_error(self):
        async def handler(request):
            return web.Response(status=503)

        async def fetch(url):
            return await HttpRegionSource(url).fetch()

        with pytest.raises(CatalogUnavailableError, match="HTTP 503"):
            asyncio.run(_with_server(handler, fetch))

    def test_invalid_json(self):
        async def handler(request):
            return web.Response(text="<html>oops</html>")

        async def fetch(url):
            return await HttpRegionSource(url).fetch()

        with pytest.raises(CatalogUnavailableError, match="Invalid JSON"):
            asyncio.run(_with_server(handler, fetch))

    def test_non_utf8_body(self):
        async def handler(request):
            return web.Response(body=b'{"type": "\xff\xfe"}', content_type="application/json")

        async def load(url):
            return await CatalogLoader(HttpRegionSource(url)).load()

        with pytest.raises(CatalogUnavailableError, match="Invalid JSON"):
            asyncio.run(_with_server(handler, load))

    def test_connection_refused(self):
        src = HttpRegionSource("http://127.0.0.1:1/india.json", timeout_s=2.0)
        with pytest.raises(CatalogUnavailableError):
            asyncio.run(src.fetch())


class TestCreateSource:
    def test_path_preferred(self, tmp_path):
        src = create_source(SourceConfig(path=tmp_path / "a.json", url="http://x"))
        assert isinstance(src, FileRegionSource)

    def test_url(self):
        src = create_source(SourceConfig(url="http://example.org/india.json"))
        assert isinstance(src, HttpRegionSource)
        assert src.description == "http://example.org/india.json"

    def test_neither(self):
        with pytest.raises(ValueError):
            create_source(SourceConfig())
