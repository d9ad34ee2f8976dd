"""
Transverse Projection Tests
===========================

Transverse Mercator (plain, zoned and UTM), Cassini-Soldner and the
hyperbolic Cassini-Soldner.

Run with:
    pytest tests/test_transverse.py -v
"""

import numpy as np
import pytest

from common.exceptions import (
    ConvergenceError,
    CoordinateOutOfRangeError,
    InvalidParameterError,
    ParameterUnitError,
)
from common.types import Coordinate, GeoCoordinate, Hemisphere
from common.units import Q_
from geospatial.coordinate_models import Ellipsoid, Ellipsoids
from geospatial.projections.factory import universal_transverse_mercator, utm_grid_system, utm_zone_number
from geospatial.projections.parameters import ParameterKind as P
from geospatial.projections.transverse import (
    CassiniSoldnerProjection,
    HyperbolicCassiniSoldnerProjection,
    TransverseMercatorProjection,
    TransverseMercatorZonedProjection,
)

from helpers import assert_geographic, assert_projected, degrees, dms, metres


# =============================================================================
# Fixtures
# =============================================================================

BRITISH_NATIONAL_GRID = {
    P.LATITUDE_OF_NATURAL_ORIGIN: degrees(49.0),
    P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(-2.0),
    P.SCALE_FACTOR_AT_NATURAL_ORIGIN: 0.9996012717,
    P.FALSE_EASTING: metres(400_000.0),
    P.FALSE_NORTHING: metres(-100_000.0),
}


@pytest.fixture
def british_national_grid():
    return TransverseMercatorProjection(BRITISH_NATIONAL_GRID, Ellipsoids.AIRY1830)


@pytest.fixture
def trinidad_cassini():
    """Trinidad 1903 / Trinidad Grid, in Clarke's links."""
    clarke_1858 = Ellipsoid("Clarke 1858", 31_706_587.88, 294.2606764, unit="clarke_link")
    return CassiniSoldnerProjection({
        P.LATITUDE_OF_NATURAL_ORIGIN: dms(10, 26, 30),
        P.LONGITUDE_OF_NATURAL_ORIGIN: dms(-61, 20, 0),
        P.FALSE_EASTING: Q_(430_000.0, "clarke_link"),
        P.FALSE_NORTHING: Q_(325_000.0, "clarke_link"),
    }, clarke_1858)


# =============================================================================
# Transverse Mercator
# =============================================================================

class TestTransverseMercator:
    """Tests for the Transverse Mercator projection."""

    @pytest.mark.unit
    def test_worked_example(self, british_national_grid):
        point = GeoCoordinate.from_sexagesimal((50, 30, 0), (0, 30, 0))
        result = british_national_grid.forward(point)
        assert_projected(result, 577_274.99, 69_740.50, tolerance=0.03)

    @pytest.mark.unit
    def test_worked_example_reverse(self, british_national_grid):
        result = british_national_grid.reverse(Coordinate(577_274.99, 69_740.50))
        expected = GeoCoordinate.from_sexagesimal((50, 30, 0), (0, 30, 0))
        assert_geographic(result, expected, tolerance_rad=1e-8)

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(49.0, -2.0), (50.5, 0.5), (58.0, -6.0), (52.0, 1.7)])
    def test_round_trip(self, british_national_grid, lat, lon):
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_geographic(british_national_grid.reverse(british_national_grid.forward(point)), point)

    @pytest.mark.unit
    def test_central_meridian_maps_to_false_easting(self, british_national_grid):
        result = british_national_grid.forward(GeoCoordinate.from_degrees(55.0, -2.0))
        assert result.x == pytest.approx(400_000.0, abs=1e-6)

    @pytest.mark.unit
    def test_origin_maps_to_false_origin(self, british_national_grid):
        result = british_national_grid.forward(GeoCoordinate.from_degrees(49.0, -2.0))
        assert_projected(result, 400_000.0, -100_000.0, tolerance=1e-6)

    @pytest.mark.unit
    def test_height_passes_through(self, british_national_grid):
        result = british_national_grid.forward(GeoCoordinate.from_degrees(51.0, -1.0, height=123.4))
        assert result.z == 123.4

    @pytest.mark.unit
    def test_non_convergence_raises(self):
        projection = TransverseMercatorProjection(
            BRITISH_NATIONAL_GRID, Ellipsoids.AIRY1830, tolerance=0.0, iteration_limit=1
        )
        with pytest.raises(ConvergenceError) as info:
            projection.reverse(Coordinate(577_274.99, 69_740.50))
        assert info.value.iterations == 1


# =============================================================================
# Zoned grid and UTM
# =============================================================================

class TestZonedTransverseMercator:
    """Tests for the zoned grid system and the UTM factory."""

    @pytest.fixture
    def zoned(self, wgs84):
        return TransverseMercatorZonedProjection({
            P.LATITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
            P.INITIAL_LONGITUDE: degrees(-180.0),
            P.ZONE_WIDTH: degrees(6.0),
            P.SCALE_FACTOR_AT_NATURAL_ORIGIN: 0.9996,
            P.FALSE_EASTING: metres(500_000.0),
            P.FALSE_NORTHING: metres(0.0),
        }, wgs84)

    @pytest.mark.unit
    @pytest.mark.parametrize("longitude,zone", [(-180.0, 1), (-177.5, 1), (2.29, 31), (9.0, 32), (179.9, 60)])
    def test_zone_of(self, zoned, longitude, zone):
        assert zoned.zone_of(np.radians(longitude)) == zone

    @pytest.mark.unit
    def test_easting_carries_zone_prefix(self, zoned):
        point = GeoCoordinate.from_degrees(48.0, 10.0)
        plain = universal_transverse_mercator(32).forward(point)
        result = zoned.forward(point)
        assert_projected(result, 32_000_000.0 + plain.x, plain.y, tolerance=1e-6)

    @pytest.mark.unit
    def test_zone_width_in_radians(self, zoned, wgs84):
        """The zone width is an angle and may be given in any angular unit."""
        in_radians = TransverseMercatorZonedProjection({
            P.LATITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
            P.INITIAL_LONGITUDE: degrees(-180.0),
            P.ZONE_WIDTH: Q_(np.pi / 30, "radian"),
            P.SCALE_FACTOR_AT_NATURAL_ORIGIN: 0.9996,
            P.FALSE_EASTING: metres(500_000.0),
            P.FALSE_NORTHING: metres(0.0),
        }, wgs84)
        point = GeoCoordinate.from_degrees(48.0, 10.0)
        expected = zoned.forward(point)
        assert in_radians.zone_of(point.longitude) == 32
        assert_projected(in_radians.forward(point), expected.x, expected.y, tolerance=1e-6)

    @pytest.mark.unit
    def test_zone_width_must_be_an_angle(self, wgs84):
        with pytest.raises(ParameterUnitError):
            TransverseMercatorZonedProjection({
                P.LATITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
                P.INITIAL_LONGITUDE: degrees(-180.0),
                P.ZONE_WIDTH: metres(6.0),
                P.SCALE_FACTOR_AT_NATURAL_ORIGIN: 0.9996,
                P.FALSE_EASTING: metres(500_000.0),
                P.FALSE_NORTHING: metres(0.0),
            }, wgs84)

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(48.0, 10.0), (-33.9, 18.4), (64.1, -21.9), (1.0, 179.0)])
    def test_round_trip(self, zoned, lat, lon):
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_geographic(zoned.reverse(zoned.forward(point)), point)

    @pytest.mark.unit
    def test_reverse_rejects_missing_prefix(self, zoned):
        with pytest.raises(CoordinateOutOfRangeError):
            zoned.reverse(Coordinate(500_000.0, 0.0))

    @pytest.mark.unit
    def test_utm_zone_number(self):
        assert utm_zone_number(np.radians(2.2945)) == 31
        assert utm_zone_number(np.radians(-180.0)) == 1
        assert utm_zone_number(np.radians(180.0)) == 1

    @pytest.mark.unit
    def test_utm_eiffel_tower(self):
        result = universal_transverse_mercator(31).forward(GeoCoordinate.from_degrees(48.8584, 2.2945))
        assert_projected(result, 448_252.001, 5_411_954.910, tolerance=0.005)

    @pytest.mark.unit
    def test_utm_south_false_northing(self):
        projection = universal_transverse_mercator(33, Hemisphere.SOUTH)
        result = projection.forward(GeoCoordinate.from_degrees(0.0, 15.0))
        assert_projected(result, 500_000.0, 10_000_000.0, tolerance=1e-6)
        assert projection.identifier == "UTM::33S"

    @pytest.mark.unit
    @pytest.mark.parametrize("zone", [0, 61])
    def test_utm_rejects_invalid_zone(self, zone):
        with pytest.raises(InvalidParameterError):
            universal_transverse_mercator(zone)

    @pytest.mark.unit
    def test_utm_grid_system_hemisphere(self):
        projection = utm_grid_system("S")
        result = projection.forward(GeoCoordinate.from_degrees(-30.0, 21.0))
        assert result.x // 1_000_000 == 34
        assert result.y > 6_000_000.0


# =============================================================================
# Cassini-Soldner
# =============================================================================

class TestCassiniSoldner:
    """Tests for Cassini-Soldner and the hyperbolic variant."""

    @pytest.mark.unit
    def test_worked_example_in_links(self, trinidad_cassini):
        result = trinidad_cassini.forward(GeoCoordinate.from_degrees(10.0, -62.0))
        assert_projected(result, 66_644.94, 82_536.22, tolerance=0.05)

    @pytest.mark.unit
    def test_worked_example_reverse(self, trinidad_cassini):
        result = trinidad_cassini.reverse(Coordinate(66_644.94, 82_536.22))
        assert_geographic(result, GeoCoordinate.from_degrees(10.0, -62.0), tolerance_rad=1e-7)

    @pytest.mark.unit
    def test_central_meridian_is_true_to_scale(self, wgs84):
        projection = CassiniSoldnerProjection({
            P.LATITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
            P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
            P.FALSE_EASTING: metres(0.0),
            P.FALSE_NORTHING: metres(0.0),
        }, wgs84)
        result = projection.forward(GeoCoordinate.from_degrees(1.0, 0.0))
        # Meridian arc from the equator to 1°N on WGS 84
        assert result.y == pytest.approx(110_574.4, abs=1.0)
        assert result.x == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.unit
    @pytest.mark.parametrize("lat_offset,lon_offset", [(0.0, 0.0), (0.2, 0.3), (-0.3, -0.4), (0.4, -0.1)])
    def test_hyperbolic_round_trip(self, lat_offset, lon_offset):
        origin_lat, origin_lon = -16.25, 179.3333333
        projection = HyperbolicCassiniSoldnerProjection({
            P.LATITUDE_OF_NATURAL_ORIGIN: degrees(origin_lat),
            P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(origin_lon),
            P.FALSE_EASTING: metres(251_727.9155424),
            P.FALSE_NORTHING: metres(334_519.953768),
        }, Ellipsoids.CLARKE1880_IGN)
        point = GeoCoordinate.from_degrees(origin_lat + lat_offset, origin_lon + lon_offset)
        assert_geographic(projection.reverse(projection.forward(point)), point, tolerance_rad=1e-7)

    @pytest.mark.unit
    def test_hyperbolic_reverse_in_links(self):
        """Grid units other than metres give the same geographic result."""
        parameters = {
            P.LATITUDE_OF_NATURAL_ORIGIN: dms(-16, 15, 0),
            P.LONGITUDE_OF_NATURAL_ORIGIN: dms(179, 20, 0),
            P.FALSE_EASTING: Q_(1_251_331.8, "clarke_link"),
            P.FALSE_NORTHING: Q_(1_662_888.5, "clarke_link"),
        }
        in_metres = HyperbolicCassiniSoldnerProjection(parameters, Ellipsoids.CLARKE1880_IGN)
        in_links = HyperbolicCassiniSoldnerProjection(parameters, Ellipsoids.CLARKE1880_IGN.to_unit("clarke_link"))
        point = GeoCoordinate.from_degrees(-16.841456, 179.994336)
        grid_metres = in_metres.forward(point)
        grid_links = in_links.forward(point)
        assert grid_links.x * 0.201166195164 == pytest.approx(grid_metres.x, abs=1e-4)
        assert grid_links.y * 0.201166195164 == pytest.approx(grid_metres.y, abs=1e-4)
        assert_geographic(in_links.reverse(grid_links), point, tolerance_rad=1e-7)

    @pytest.mark.unit
    def test_hyperbolic_matches_plain_on_central_meridian(self, wgs84):
        parameters = {
            P.LATITUDE_OF_NATURAL_ORIGIN: degrees(-16.0),
            P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(179.0),
            P.FALSE_EASTING: metres(0.0),
            P.FALSE_NORTHING: metres(0.0),
        }
        plain = CassiniSoldnerProjection(parameters, wgs84)
        hyperbolic = HyperbolicCassiniSoldnerProjection(parameters, wgs84)
        point = GeoCoordinate.from_degrees(-16.0, 179.0)
        assert_projected(hyperbolic.forward(point), plain.forward(point).x, plain.forward(point).y, tolerance=1e-9)
