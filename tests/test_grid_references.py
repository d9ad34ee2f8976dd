"""
Grid Reference Tests
====================

MGRS and Georef encoding and decoding: known references, the polar caps,
the Norway and Svalbard zone exceptions, malformed input and precision
bounds.

Run with:
    pytest tests/test_grid_references.py -v
"""

import numpy as np
import pytest

from common.exceptions import GridFormatError, UnknownMethodError
from common.types import GeoCoordinate
from geospatial.grid_references import (
    GeographicGridReference,
    MilitaryGridReferenceSystem,
    band_minimum_northing,
    create_grid_projection,
    latitude_band,
    mgrs_zone,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="module")
def mgrs():
    return MilitaryGridReferenceSystem()


@pytest.fixture(scope="module")
def georef():
    return GeographicGridReference()


def assert_inside_cell(decoded: GeoCoordinate, original: GeoCoordinate, cell_degrees: float):
    """The decoded corner lies within about one cell of the original point."""
    decoded_lat, decoded_lon = decoded.to_degrees()
    original_lat, original_lon = original.to_degrees()
    dlon = (decoded_lon - original_lon + 180.0) % 360.0 - 180.0
    assert abs(decoded_lat - original_lat) < 2 * cell_degrees
    assert abs(dlon) * np.cos(np.radians(original_lat)) < 2 * cell_degrees


# =============================================================================
# MGRS helpers
# =============================================================================

class TestMgrsHelpers:
    """Tests for bands, zones and band northings."""

    @pytest.mark.unit
    @pytest.mark.parametrize("latitude,band", [
        (-80.0, "C"), (-72.1, "C"), (-0.1, "M"), (0.0, "N"), (48.86, "U"), (72.0, "X"), (83.9, "X"),
    ])
    def test_latitude_band(self, latitude, band):
        assert latitude_band(latitude) == band

    @pytest.mark.unit
    @pytest.mark.parametrize("latitude,longitude,zone", [
        (48.86, 2.29, 31),
        (60.0, 5.0, 32),
        (60.0, 2.9, 31),
        (55.9, 5.0, 31),
        (78.0, 5.0, 31),
        (78.0, 10.0, 33),
        (78.0, 20.0, 33),
        (78.0, 25.0, 35),
        (78.0, 40.0, 37),
        (78.0, 45.0, 38),
        (-33.9, 18.4, 34),
        (0.0, 180.0, 1),
    ])
    def test_mgrs_zone_exceptions(self, latitude, longitude, zone):
        assert mgrs_zone(latitude, longitude) == zone

    @pytest.mark.unit
    def test_band_minimum_northing_is_monotone(self):
        northern = [band_minimum_northing(band) for band in "NPQRSTUVWX"]
        southern = [band_minimum_northing(band) for band in "CDEFGHJKLM"]
        assert northern == sorted(northern)
        assert southern == sorted(southern)
        assert band_minimum_northing("N") == 0.0


# =============================================================================
# MGRS
# =============================================================================

class TestMilitaryGridReferenceSystem:
    """Tests for MGRS encoding and decoding."""

    @pytest.mark.unit
    def test_eiffel_tower(self, mgrs):
        point = GeoCoordinate.from_degrees(48.8584, 2.2945)
        assert mgrs.forward(point, precision=3) == "31UDQ482119"

    @pytest.mark.unit
    def test_precision_controls_digits(self, mgrs):
        point = GeoCoordinate.from_degrees(48.8584, 2.2945)
        assert mgrs.forward(point, precision=0) == "31UDQ"
        assert mgrs.forward(point, precision=1) == "31UDQ41"
        assert len(mgrs.forward(point)) == 15

    @pytest.mark.unit
    def test_zone_written_with_two_digits(self, mgrs):
        reference = mgrs.forward(GeoCoordinate.from_degrees(-33.9, -175.0), precision=0)
        assert reference.startswith("01")

    @pytest.mark.unit
    def test_north_pole(self, mgrs):
        assert mgrs.forward(GeoCoordinate.from_degrees(90.0, 0.0)) == "ZAH0000000000"

    @pytest.mark.unit
    def test_south_pole(self, mgrs):
        assert mgrs.forward(GeoCoordinate.from_degrees(-90.0, 0.0)) == "BAN0000000000"

    @pytest.mark.unit
    def test_polar_halves(self, mgrs):
        assert mgrs.forward(GeoCoordinate.from_degrees(86.0, -90.0), precision=0)[0] == "Y"
        assert mgrs.forward(GeoCoordinate.from_degrees(86.0, 90.0), precision=0)[0] == "Z"
        assert mgrs.forward(GeoCoordinate.from_degrees(-85.0, -90.0), precision=0)[0] == "A"
        assert mgrs.forward(GeoCoordinate.from_degrees(-85.0, 90.0), precision=0)[0] == "B"

    @pytest.mark.unit
    def test_norway_exception_in_reference(self, mgrs):
        reference = mgrs.forward(GeoCoordinate.from_degrees(60.4, 5.3), precision=0)
        assert reference.startswith("32V")

    @pytest.mark.unit
    def test_svalbard_exception_in_reference(self, mgrs):
        reference = mgrs.forward(GeoCoordinate.from_degrees(78.2, 15.6), precision=0)
        assert reference.startswith("33X")

    @pytest.mark.unit
    def test_no_i_or_o(self, mgrs, rng):
        for _ in range(200):
            point = GeoCoordinate.from_degrees(rng.uniform(-90.0, 90.0), rng.uniform(-180.0, 180.0))
            reference = mgrs.forward(point)
            assert "I" not in reference
            assert "O" not in reference

    @pytest.mark.unit
    def test_decode_returns_south_west_corner(self, mgrs):
        decoded = mgrs.reverse("31UDQ482119")
        assert_inside_cell(decoded, GeoCoordinate.from_degrees(48.8584, 2.2945), 0.001)

    @pytest.mark.unit
    def test_decode_normalizes_input(self, mgrs):
        assert mgrs.reverse(" 31u dq 482 119 ") == mgrs.reverse("31UDQ482119")
        assert mgrs.reverse("4QFJ1234567890") == mgrs.reverse("04QFJ1234567890")

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [
        (48.8584, 2.2945), (-33.9, 18.4), (64.1, -21.9), (-54.8, -68.3), (1.3, 103.8),
        (60.4, 5.3), (78.2, 15.6), (0.0, 0.0), (-79.5, 166.7),
    ])
    def test_decode_lands_near_original(self, mgrs, lat, lon):
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_inside_cell(mgrs.reverse(mgrs.forward(point)), point, 1e-4)

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(86.0, 30.0), (89.5, -120.0), (-85.0, 45.0), (-88.0, -170.0)])
    def test_polar_decode_lands_near_original(self, mgrs, lat, lon):
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_inside_cell(mgrs.reverse(mgrs.forward(point)), point, 1e-4)

    @pytest.mark.unit
    def test_sampled_decode(self, mgrs, rng):
        for _ in range(100):
            point = GeoCoordinate.from_degrees(rng.uniform(-79.5, 83.5), rng.uniform(-180.0, 180.0))
            assert_inside_cell(mgrs.reverse(mgrs.forward(point, precision=4)), point, 1e-3)

    @pytest.mark.unit
    @pytest.mark.parametrize("reference", [
        "", "31", "31UDQ48211", "61UDQ", "00UDQ", "31IDQ", "31UDO", "31UJQ", "CAA", "ZZZ00", "31UDQ12AB",
    ])
    def test_malformed_references(self, mgrs, reference):
        with pytest.raises(GridFormatError):
            mgrs.reverse(reference)

    @pytest.mark.unit
    def test_non_string_reference(self, mgrs):
        with pytest.raises(GridFormatError):
            mgrs.reverse(12345)

    @pytest.mark.unit
    @pytest.mark.parametrize("precision", [-1, 6])
    def test_precision_out_of_range(self, mgrs, precision):
        with pytest.raises(ValueError):
            mgrs.forward(GeoCoordinate.from_degrees(0.0, 0.0), precision=precision)


# =============================================================================
# Georef
# =============================================================================

class TestGeographicGridReference:
    """Tests for Georef encoding and decoding."""

    @pytest.mark.unit
    def test_known_reference(self, georef):
        assert georef.forward(GeoCoordinate.from_degrees(38.2861, -76.4291)) == "GJPJ3417"

    @pytest.mark.unit
    @pytest.mark.parametrize("precision,expected", [
        (0, "GJ"), (1, "GJPJ"), (2, "GJPJ3417"), (3, "GJPJ342171"), (4, "GJPJ34251716"),
    ])
    def test_precision_levels(self, georef, precision, expected):
        assert georef.forward(GeoCoordinate.from_degrees(38.2861, -76.4291), precision=precision) == expected

    @pytest.mark.unit
    def test_corners_of_the_world(self, georef):
        assert georef.forward(GeoCoordinate.from_degrees(-90.0, -180.0), precision=1) == "AAAA"
        assert georef.forward(GeoCoordinate.from_degrees(90.0, 179.999), precision=1) == "ZMQQ"

    @pytest.mark.unit
    def test_decode_returns_south_west_corner(self, georef):
        decoded = georef.reverse("GJPJ3417")
        lat, lon = decoded.to_degrees()
        assert lat == pytest.approx(38.0 + 17.0 / 60.0)
        assert lon == pytest.approx(-77.0 + 34.0 / 60.0)

    @pytest.mark.unit
    def test_decode_quadrangle(self, georef):
        lat, lon = georef.reverse("gj").to_degrees()
        assert lat == pytest.approx(30.0)
        assert lon == pytest.approx(-90.0)

    @pytest.mark.unit
    def test_sampled_decode(self, georef, rng):
        for _ in range(100):
            point = GeoCoordinate.from_degrees(rng.uniform(-89.9, 89.9), rng.uniform(-180.0, 179.9))
            assert_inside_cell(georef.reverse(georef.forward(point, precision=4)), point, 1.0 / 6000.0)

    @pytest.mark.unit
    @pytest.mark.parametrize("reference", ["", "G", "GJP", "GJPJ341", "IJ", "GN", "GJPR", "GJPJ6017", "GJPJ3460"])
    def test_malformed_references(self, georef, reference):
        with pytest.raises(GridFormatError):
            georef.reverse(reference)

    @pytest.mark.unit
    def test_precision_out_of_range(self, georef):
        with pytest.raises(ValueError):
            georef.forward(GeoCoordinate.from_degrees(0.0, 0.0), precision=5)


# =============================================================================
# Grid registry
# =============================================================================

class TestGridRegistry:
    """Tests for `create_grid_projection`."""

    @pytest.mark.unit
    def test_lookup(self):
        assert isinstance(create_grid_projection("GRID::MGRS"), MilitaryGridReferenceSystem)
        assert isinstance(create_grid_projection("grid::georef"), GeographicGridReference)
        assert isinstance(create_grid_projection("Military Grid Reference System"), MilitaryGridReferenceSystem)

    @pytest.mark.unit
    def test_unknown(self):
        with pytest.raises(UnknownMethodError):
            create_grid_projection("GRID::OSGB")
