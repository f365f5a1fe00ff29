"""Tests for the regionctl command line."""

import json

import pytest
from click.testing import CliRunner

from regionctl.cli import cli

DATASET = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"st_nm": "Maharashtra"},
            "geometry": {"type": "Polygon", "coordinates": [
                [[72.6, 15.6], [72.6, 22.0], [80.9, 22.0], [80.9, 15.6]],
            ]},
        },
        {
            "type": "Feature",
            "properties": {"st_nm": "Goa"},
            "geometry": {"type": "Polygon", "coordinates": [
                [[73.6, 14.9], [73.6, 15.8], [74.3, 15.8], [74.3, 14.9]],
            ]},
        },
    ],
}


@pytest.fixture
def dataset(tmp_path):
    path = tmp_path / "india.json"
    path.write_text(json.dumps(DATASET))
    return path


@pytest.fixture
def runner():
    return CliRunner()


class TestRegions:
    def test_lists_regions(self, runner, dataset):
        result = runner.invoke(cli, ["regions", "-d", str(dataset)])
        assert result.exit_code == 0, result.output
        assert "Maharashtra\tPolygon\t4 vertices" in result.output
        assert "2 regions" in result.output

    def test_no_source_configured(self, runner):
        result = runner.invoke(cli, ["regions"])
        assert result.exit_code != 0
        assert "--dataset" in result.output


class TestCheck:
    def test_allowed(self, runner, dataset):
        result = runner.invoke(cli, [
            "check", "-d", str(dataset), "-r", "Maharashtra", "-p", "19.076,72.8777",
        ])
        assert result.exit_code == 0, result.output
        assert "ALLOW 19.076000,72.877700" in result.output
        assert "1/1 allowed" in result.output

    def test_blocked_exits_nonzero(self, runner, dataset):
        result = runner.invoke(cli, [
            "check", "-d", str(dataset), "-r", "Goa",
            "-p", "15.4,74.0", "-p", "19.076,72.8777",
        ])
        assert result.exit_code == 1
        assert "BLOCK" in result.output
        assert "1/2 allowed" in result.output

    def test_inactive_allows_everything(self, runner, dataset):
        result = runner.invoke(cli, [
            "check", "-d", str(dataset), "-r", "Goa", "--inactive", "-p", "51.5,-0.12",
        ])
        assert result.exit_code == 0
        assert "Geofencing inactive" in result.output

    def test_bad_point(self, runner, dataset):
        result = runner.invoke(cli, ["check", "-d", str(dataset), "-r", "Goa", "-p", "nowhere"])
        assert result.exit_code == 2

    def test_unreadable_dataset_fails_closed(self, runner, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{")
        result = runner.invoke(cli, [
            "check", "-d", str(broken), "-r", "Goa", "-p", "15.4,74.0",
        ])
        assert result.exit_code == 1
        assert "BLOCK" in result.output

    def test_violations_csv(self, runner, dataset, tmp_path):
        out = tmp_path / "violations.csv"
        result = runner.invoke(cli, [
            "check", "-d", str(dataset), "-r", "Goa", "-p", "19.076,72.8777",
            "--violations-out", str(out),
        ])
        assert result.exit_code == 1
        lines = out.read_text().splitlines()
        assert lines[0] == "timestamp,lat,lng,kind,message,user_id"
        assert len(lines) == 2

    def test_violations_geojson(self, runner, dataset, tmp_path):
        out = tmp_path / "violations.geojson"
        runner.invoke(cli, [
            "check", "-d", str(dataset), "-r", "Goa", "-p", "19.076,72.8777",
            "--violations-out", str(out),
        ])
        data = json.loads(out.read_text())
        assert data["features"][0]["geometry"]["coordinates"] == [72.8777, 19.076]

    def test_country_layer(self, runner, dataset):
        result = runner.invoke(cli, [
            "check", "-d", str(dataset), "-r", "Maharashtra", "--country",
            "-p", "19.076,72.8777", "-p", "23.0225,72.5714", "-p", "51.5,-0.12",
        ])
        assert result.exit_code == 1
        assert "outside India territory" in result.output
        assert "outside India boundaries" in result.output
        assert "1/3 allowed" in result.output

    def test_assignment_from_config(self, runner, dataset, tmp_path):
        config = tmp_path / "fence.json"
        config.write_text(json.dumps({
            "source": {"path": str(dataset)},
            "geofence": {"assigned_regions": ["Maharashtra"]},
        }))
        result = runner.invoke(cli, ["--config", str(config), "check", "-p", "19.076,72.8777"])
        assert result.exit_code == 0, result.output


class TestRender:
    def test_writes_svg(self, runner, dataset, tmp_path):
        out = tmp_path / "overlay.svg"
        result = runner.invoke(cli, [
            "render", "-d", str(dataset), "-r", "Goa", "-o", str(out),
            "--width", "400", "--height", "450",
        ])
        assert result.exit_code == 0, result.output
        svg = out.read_text()
        assert 'width="400"' in svg
        assert ">Goa</text>" in svg
        assert "400x450" in result.output
