"""
Distortion Analysis Tests
=========================

Tissot's indicatrix computed numerically from the forward transforms:
conformal projections keep a circular indicatrix, equal-area projections
keep unit areal scale.

Run with:
    pytest tests/test_distortion.py -v
"""

import numpy as np
import pytest

from common.exceptions import CoordinateOutOfRangeError
from common.types import GeoCoordinate
from geospatial.distortion import (
    compute_tissot_indicatrix,
    distortion_grid,
    is_conformal,
    is_equal_area,
)
from geospatial.projections.azimuthal import LambertAzimuthalEqualAreaProjection
from geospatial.projections.conic import AlbersEqualAreaProjection, LambertConicConformal2SPProjection
from geospatial.projections.cylindrical import EquidistantCylindricalProjection, MercatorBProjection
from geospatial.projections.factory import universal_transverse_mercator
from geospatial.projections.parameters import ParameterKind as P

from helpers import degrees, metres


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def mercator(wgs84):
    return MercatorBProjection({
        P.LATITUDE_OF_1ST_STANDARD_PARALLEL: degrees(0.0),
        P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
        P.FALSE_EASTING: metres(0.0),
        P.FALSE_NORTHING: metres(0.0),
    }, wgs84)


@pytest.fixture
def lambert_conic(wgs84):
    return LambertConicConformal2SPProjection({
        P.LATITUDE_OF_FALSE_ORIGIN: degrees(46.5),
        P.LONGITUDE_OF_FALSE_ORIGIN: degrees(3.0),
        P.LATITUDE_OF_1ST_STANDARD_PARALLEL: degrees(49.0),
        P.LATITUDE_OF_2ND_STANDARD_PARALLEL: degrees(44.0),
        P.EASTING_AT_FALSE_ORIGIN: metres(700_000.0),
        P.NORTHING_AT_FALSE_ORIGIN: metres(6_600_000.0),
    }, wgs84)


@pytest.fixture
def albers(wgs84):
    return AlbersEqualAreaProjection({
        P.LATITUDE_OF_FALSE_ORIGIN: degrees(30.0),
        P.LONGITUDE_OF_FALSE_ORIGIN: degrees(10.0),
        P.LATITUDE_OF_1ST_STANDARD_PARALLEL: degrees(43.0),
        P.LATITUDE_OF_2ND_STANDARD_PARALLEL: degrees(62.0),
        P.EASTING_AT_FALSE_ORIGIN: metres(0.0),
        P.NORTHING_AT_FALSE_ORIGIN: metres(0.0),
    }, wgs84)


@pytest.fixture
def laea(wgs84):
    return LambertAzimuthalEqualAreaProjection({
        P.LATITUDE_OF_NATURAL_ORIGIN: degrees(52.0),
        P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(10.0),
        P.FALSE_EASTING: metres(4_321_000.0),
        P.FALSE_NORTHING: metres(3_210_000.0),
    }, wgs84)


# =============================================================================
# Tissot indicatrix
# =============================================================================

class TestTissotIndicatrix:
    """Tests for the numerically computed indicatrix."""

    @pytest.mark.unit
    def test_mercator_scale_is_secant_of_latitude(self, mercator):
        """On the ellipsoid, k = sqrt(1 - e² sin²φ)/cos φ for Mercator."""
        latitude = np.radians(60.0)
        indicatrix = compute_tissot_indicatrix(mercator, GeoCoordinate(latitude, 0.0))
        e2 = mercator.ellipsoid.eccentricity_squared
        expected = np.sqrt(1 - e2 * np.sin(latitude) ** 2) / np.cos(latitude)
        assert indicatrix.parallel_scale == pytest.approx(expected, rel=1e-7)
        assert indicatrix.meridian_scale == pytest.approx(expected, rel=1e-7)
        assert indicatrix.angular_distortion_rad == pytest.approx(0.0, abs=1e-5)

    @pytest.mark.unit
    def test_equidistant_cylindrical_meridian_is_true(self, wgs84):
        projection = EquidistantCylindricalProjection({
            P.LATITUDE_OF_1ST_STANDARD_PARALLEL: degrees(0.0),
            P.LONGITUDE_OF_NATURAL_ORIGIN: degrees(0.0),
            P.FALSE_EASTING: metres(0.0),
            P.FALSE_NORTHING: metres(0.0),
        }, wgs84)
        indicatrix = compute_tissot_indicatrix(projection, GeoCoordinate.from_degrees(45.0, 10.0))
        assert indicatrix.meridian_scale == pytest.approx(1.0, abs=1e-6)
        assert not indicatrix.is_conformal
        assert not indicatrix.is_equal_area

    @pytest.mark.unit
    def test_semi_axes_bound_scales(self, lambert_conic):
        indicatrix = compute_tissot_indicatrix(lambert_conic, GeoCoordinate.from_degrees(40.0, 8.0))
        assert indicatrix.semi_minor <= indicatrix.meridian_scale + 1e-9
        assert indicatrix.semi_major >= indicatrix.parallel_scale - 1e-9
        assert indicatrix.area_scale == pytest.approx(indicatrix.semi_major * indicatrix.semi_minor, rel=1e-9)

    @pytest.mark.unit
    def test_rejects_pole(self, laea):
        with pytest.raises(CoordinateOutOfRangeError):
            compute_tissot_indicatrix(laea, GeoCoordinate.from_degrees(90.0, 0.0))


# =============================================================================
# Projection properties
# =============================================================================

class TestProjectionProperties:
    """Conformal and equal-area properties over a sample."""

    @pytest.mark.unit
    def test_conformal_projections(self, mercator, lambert_conic, mid_latitude_sample):
        assert is_conformal(mercator, mid_latitude_sample)
        assert is_conformal(lambert_conic, mid_latitude_sample)
        assert not is_equal_area(mercator, mid_latitude_sample)

    @pytest.mark.unit
    def test_transverse_mercator_is_conformal_near_central_meridian(self):
        projection = universal_transverse_mercator(32)
        sample = [GeoCoordinate.from_degrees(lat, lon) for lat in (10.0, 45.0, 70.0) for lon in (7.0, 9.0, 11.5)]
        assert is_conformal(projection, sample)

    @pytest.mark.unit
    def test_equal_area_projections(self, albers, laea, mid_latitude_sample):
        assert is_equal_area(albers, mid_latitude_sample)
        assert is_equal_area(laea, mid_latitude_sample)
        assert not is_conformal(albers, mid_latitude_sample)

    @pytest.mark.unit
    def test_distortion_grid_shape(self, laea):
        grid = distortion_grid(laea, [40.0, 50.0], [0.0, 10.0, 20.0])
        assert len(grid) == 2
        assert all(len(row) == 3 for row in grid)
        assert all(cell.is_equal_area for row in grid for cell in row)
