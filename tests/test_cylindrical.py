"""
Cylindrical Projection Tests
============================

Worked examples from IOGP Guidance Note 7-2 for the Mercator variants and
Equidistant Cylindrical, plus round trips and the construction checks.

Run with:
    pytest tests/test_cylindrical.py -v
"""

import numpy as np
import pytest

from common.exceptions import ConstructionError, CoordinateOutOfRangeError, InvalidParameterError
from common.types import Coordinate, GeoCoordinate
from geospatial.coordinate_models import Ellipsoid, Ellipsoids
from geospatial.projections.cylindrical import (
    EquidistantCylindricalProjection,
    EquidistantCylindricalSphericalProjection,
    LambertCylindricalEqualAreaProjection,
    LambertCylindricalEqualAreaSphericalProjection,
    MercatorAProjection,
    MercatorBProjection,
    PseudoMercatorProjection,
    SinusoidalProjection,
)
from geospatial.projections.parameters import ParameterKind as P

from helpers import assert_geographic, assert_projected, degrees, dms, metres


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def mercator_a():
    """Batavia / NEIEZ."""
    return MercatorAProjection({
        P.LATITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
        P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(110.0),
        P.SCALE_FACTOR_AT_NATURAL_ORIGIN: 0.997,
        P.FALSE_EASTING: metres(3_900_000.0),
        P.FALSE_NORTHING: metres(900_000.0),
    }, Ellipsoids.BESSEL1841)


@pytest.fixture
def mercator_b():
    """Pulkovo 1942 / Caspian Sea Mercator."""
    return MercatorBProjection({
        P.LATITUDE_OF_1ST_STANDARD_PARALLEL: degrees(42.0),
        P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(51.0),
        P.FALSE_EASTING: metres(0.0),
        P.FALSE_NORTHING: metres(0.0),
    }, Ellipsoids.KRASSOWSKY1940)


@pytest.fixture
def pseudo_mercator():
    return PseudoMercatorProjection({
        P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
        P.FALSE_EASTING: metres(0.0),
        P.FALSE_NORTHING: metres(0.0),
    }, Ellipsoids.WGS84)


def _equatorial_parameters(standard_parallel: float = 0.0):
    return {
        P.LATITUDE_OF_1ST_STANDARD_PARALLEL: degrees(standard_parallel),
        P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
        P.FALSE_EASTING: metres(0.0),
        P.FALSE_NORTHING: metres(0.0),
    }


# =============================================================================
# Mercator
# =============================================================================

class TestMercator:
    """Tests for the Mercator variants."""

    @pytest.mark.unit
    def test_variant_a_worked_example(self, mercator_a):
        result = mercator_a.forward(GeoCoordinate.from_degrees(-3.0, 120.0))
        assert_projected(result, 5_009_726.58, 569_150.82)

    @pytest.mark.unit
    def test_variant_a_reverse(self, mercator_a):
        result = mercator_a.reverse(Coordinate(5_009_726.58, 569_150.82))
        assert_geographic(result, GeoCoordinate.from_degrees(-3.0, 120.0), tolerance_rad=1e-8)

    @pytest.mark.unit
    def test_variant_a_rejects_latitude_of_origin(self):
        with pytest.raises(InvalidParameterError):
            MercatorAProjection({
                P.LATITUDE_OF_NATURAL_ORIGIN: degrees(10.0),
                P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
                P.SCALE_FACTOR_AT_NATURAL_ORIGIN: 1.0,
                P.FALSE_EASTING: metres(0.0),
                P.FALSE_NORTHING: metres(0.0),
            }, Ellipsoids.WGS84)

    @pytest.mark.unit
    def test_construction_errors_share_a_base(self):
        assert issubclass(InvalidParameterError, ConstructionError)

    @pytest.mark.unit
    def test_variant_b_worked_example(self, mercator_b):
        result = mercator_b.forward(GeoCoordinate.from_degrees(53.0, 53.0))
        assert_projected(result, 165_704.29, 5_171_848.07)

    @pytest.mark.unit
    def test_variant_b_equator_quarter_turn(self, wgs84):
        """With the equator as standard parallel, 90° of longitude is a·π/2."""
        projection = MercatorBProjection(_equatorial_parameters(), wgs84)
        result = projection.forward(GeoCoordinate(0.0, np.pi / 2))
        assert result.x == pytest.approx(wgs84.semi_major_axis * np.pi / 2, abs=1e-6)
        assert result.y == pytest.approx(0.0, abs=1e-6)

    @pytest.mark.unit
    def test_pseudo_mercator_worked_example(self, pseudo_mercator):
        point = GeoCoordinate.from_sexagesimal((24, 22, 54.433), (-100, 20, 0))
        result = pseudo_mercator.forward(point)
        assert_projected(result, -11_169_055.58, 2_800_000.00)

    @pytest.mark.unit
    def test_pseudo_mercator_reverse(self, pseudo_mercator):
        point = GeoCoordinate.from_sexagesimal((24, 22, 54.433), (-100, 20, 0))
        assert_geographic(pseudo_mercator.reverse(pseudo_mercator.forward(point)), point, tolerance_rad=1e-12)

    @pytest.mark.unit
    @pytest.mark.parametrize("latitude", [89.0, -89.5, 90.0])
    def test_rejects_polar_latitudes(self, mercator_b, latitude):
        with pytest.raises(CoordinateOutOfRangeError):
            mercator_b.forward(GeoCoordinate.from_degrees(latitude, 51.0))

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(0.0, 51.0), (42.0, 60.0), (-70.0, 10.0), (85.0, -120.0)])
    def test_round_trip(self, mercator_b, lat, lon):
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_geographic(mercator_b.reverse(mercator_b.forward(point)), point)


# =============================================================================
# Equidistant Cylindrical
# =============================================================================

class TestEquidistantCylindrical:
    """Tests for Equidistant Cylindrical and its spherical form."""

    @pytest.mark.unit
    def test_worked_example(self, wgs84):
        projection = EquidistantCylindricalProjection(_equatorial_parameters(), wgs84)
        result = projection.forward(GeoCoordinate.from_degrees(55.0, 10.0))
        assert_projected(result, 1_113_194.91, 6_097_230.31)

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(55.0, 10.0), (-33.0, 151.0), (0.0, -179.0), (89.0, 45.0)])
    def test_round_trip(self, wgs84, lat, lon):
        projection = EquidistantCylindricalProjection(_equatorial_parameters(30.0), wgs84)
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_geographic(projection.reverse(projection.forward(point)), point, tolerance_rad=1e-8)

    @pytest.mark.unit
    def test_spherical_form_is_plate_carree(self, unit_sphere):
        projection = EquidistantCylindricalSphericalProjection(_equatorial_parameters(), unit_sphere)
        result = projection.forward(GeoCoordinate.from_degrees(45.0, 90.0))
        radius = unit_sphere.semi_major_axis
        assert_projected(result, radius * np.pi / 2, radius * np.pi / 4, tolerance=1e-6)

    @pytest.mark.unit
    def test_ellipsoidal_form_on_sphere_matches_spherical(self, unit_sphere):
        ellipsoidal = EquidistantCylindricalProjection(_equatorial_parameters(20.0), unit_sphere)
        spherical = EquidistantCylindricalSphericalProjection(_equatorial_parameters(20.0), unit_sphere)
        point = GeoCoordinate.from_degrees(40.0, -30.0)
        expected = spherical.forward(point)
        assert_projected(ellipsoidal.forward(point), expected.x, expected.y, tolerance=1e-3)


# =============================================================================
# Equal-area cylinders
# =============================================================================

class TestEqualAreaCylinders:
    """Tests for Lambert Cylindrical Equal Area and Sinusoidal."""

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(10.0, 5.0), (-45.0, 120.0), (80.0, -170.0)])
    def test_lambert_round_trip(self, wgs84, lat, lon):
        projection = LambertCylindricalEqualAreaProjection(_equatorial_parameters(30.0), wgs84)
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_geographic(projection.reverse(projection.forward(point)), point)

    @pytest.mark.unit
    def test_lambert_rejects_beyond_pole(self, wgs84):
        projection = LambertCylindricalEqualAreaProjection(_equatorial_parameters(), wgs84)
        with pytest.raises(CoordinateOutOfRangeError):
            projection.reverse(Coordinate(0.0, 2 * wgs84.semi_major_axis))

    @pytest.mark.unit
    def test_lambert_spherical_pole_height(self, unit_sphere):
        """On the sphere with the equator standard, the pole maps to y = R."""
        projection = LambertCylindricalEqualAreaSphericalProjection(_equatorial_parameters(), unit_sphere)
        result = projection.forward(GeoCoordinate.from_degrees(90.0, 0.0))
        assert result.y == pytest.approx(unit_sphere.semi_major_axis, abs=1e-6)

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(0.0, 0.0), (35.0, 60.0), (-60.0, -150.0)])
    def test_sinusoidal_round_trip(self, wgs84, lat, lon):
        projection = SinusoidalProjection({
            P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
            P.FALSE_EASTING: metres(0.0),
            P.FALSE_NORTHING: metres(0.0),
        }, wgs84)
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_geographic(projection.reverse(projection.forward(point)), point, tolerance_rad=1e-8)

    @pytest.mark.unit
    def test_sinusoidal_equator_on_sphere(self):
        sphere = Ellipsoid.sphere(1000.0)
        projection = SinusoidalProjection({
            P.LONGITUDE_OF_NATURAL_ORIGIN: dms(0),
            P.FALSE_EASTING: metres(0.0),
            P.FALSE_NORTHING: metres(0.0),
        }, sphere)
        result = projection.forward(GeoCoordinate(0.0, 1.0))
        assert_projected(result, 1000.0, 0.0, tolerance=1e-9)
