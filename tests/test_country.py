"""Tests for the national boundary layer."""

from fencegeo.coords import BoundingBox, Coordinate
from regionfence.catalog import parse_features
from regionfence.country import CountryBoundary

SQUARE = [[0, 0], [0, 10], [10, 10], [10, 0]]


def _catalog():
    return parse_features([{
        "type": "Feature",
        "properties": {"st_nm": "TestState"},
        "geometry": {"type": "Polygon", "coordinates": [SQUARE]},
    }])


class TestCountryBoundary:
    def test_default_is_india_box(self):
        country = CountryBoundary()
        assert country.name == "India"
        assert not country.is_precise
        assert country.contains(Coordinate(20.59, 78.96))
        assert not country.contains(Coordinate(51.5, -0.12))

    def test_precise_needs_a_region(self):
        box = BoundingBox(north=20, south=0, east=20, west=0)
        country = CountryBoundary.from_catalog(_catalog(), name="Testland", bounds=box)
        assert country.is_precise
        assert country.within_bounds(Coordinate(15, 15))
        assert not country.contains(Coordinate(15, 15))
        assert country.contains(Coordinate(5, 5))

    def test_bounds_reject_before_regions(self):
        box = BoundingBox(north=4, south=0, east=4, west=0)
        country = CountryBoundary.from_catalog(_catalog(), bounds=box)
        assert not country.contains(Coordinate(5, 5))
