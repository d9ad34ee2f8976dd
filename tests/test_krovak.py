"""
Krovak Projection Tests
=======================

Krovak and Krovak Modified in both axis orientations, against the S-JTSK
worked examples.

Run with:
    pytest tests/test_krovak.py -v
"""

import pytest

from common.exceptions import CoordinateOutOfRangeError
from common.types import Coordinate, GeoCoordinate
from geospatial.coordinate_models import Ellipsoids
from geospatial.projections.krovak import (
    KrovakModifiedNorthOrientatedProjection,
    KrovakModifiedProjection,
    KrovakNorthOrientatedProjection,
    KrovakProjection,
)
from geospatial.projections.parameters import ParameterKind as P

from helpers import assert_geographic, assert_projected, dms, metres


# =============================================================================
# Fixtures
# =============================================================================

def _sjtsk(false_easting: float = 0.0, false_northing: float = 0.0):
    return {
        P.LATITUDE_OF_PROJECTION_CENTRE: dms(49, 30, 0),
        P.LONGITUDE_OF_ORIGIN: dms(24, 50, 0),
        P.CO_LATITUDE_OF_CONE_AXIS: dms(30, 17, 17.3031),
        P.LATITUDE_OF_PSEUDO_STANDARD_PARALLEL: dms(78, 30, 0),
        P.SCALE_FACTOR_ON_PSEUDO_STANDARD_PARALLEL: 0.9999,
        P.FALSE_EASTING: metres(false_easting),
        P.FALSE_NORTHING: metres(false_northing),
    }


def _sjtsk05():
    """S-JTSK/05 Modified Krovak."""
    return {
        **_sjtsk(5_000_000.0, 5_000_000.0),
        P.ORDINATE_1_OF_EVALUATION_POINT: metres(1_089_000.0),
        P.ORDINATE_2_OF_EVALUATION_POINT: metres(654_000.0),
        P.C1: 2.946529277e-02,
        P.C2: 2.515965696e-02,
        P.C3: 1.193845912e-07,
        P.C4: -4.668270147e-07,
        P.C5: 9.233980362e-12,
        P.C6: 1.523735715e-12,
        P.C7: 1.696780024e-18,
        P.C8: 4.408314235e-18,
        P.C9: -8.331083518e-24,
        P.C10: -3.689471323e-24,
    }


POINT = GeoCoordinate.from_sexagesimal((50, 12, 32.442), (16, 50, 59.179))


# =============================================================================
# Krovak
# =============================================================================

class TestKrovak:
    """Tests for Krovak and its north orientated form."""

    @pytest.fixture
    def krovak(self):
        return KrovakProjection(_sjtsk(), Ellipsoids.BESSEL1841)

    @pytest.mark.unit
    def test_worked_example(self, krovak):
        assert_projected(krovak.forward(POINT), 568_991.00, 1_050_538.63)

    @pytest.mark.unit
    def test_worked_example_reverse(self, krovak):
        result = krovak.reverse(Coordinate(568_991.00, 1_050_538.63))
        assert_geographic(result, POINT, tolerance_rad=1e-8)

    @pytest.mark.unit
    def test_north_orientated_negates_axes(self, krovak):
        north = KrovakNorthOrientatedProjection(_sjtsk(), Ellipsoids.BESSEL1841)
        assert_projected(north.forward(POINT), -568_991.00, -1_050_538.63)
        assert_geographic(north.reverse(Coordinate(-568_991.00, -1_050_538.63)), POINT, tolerance_rad=1e-8)

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(48.6, 12.1), (51.0, 14.5), (49.0, 22.5), (49.5, 24.8333333)])
    def test_round_trip(self, krovak, lat, lon):
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_geographic(krovak.reverse(krovak.forward(point)), point, tolerance_rad=1e-8)

    @pytest.mark.unit
    def test_reverse_rejects_cone_apex(self, krovak):
        with pytest.raises(CoordinateOutOfRangeError):
            krovak.reverse(Coordinate(0.0, 0.0))


# =============================================================================
# Krovak Modified
# =============================================================================

class TestKrovakModified:
    """Tests for the polynomial-corrected Krovak grid."""

    @pytest.fixture
    def modified(self):
        return KrovakModifiedProjection(_sjtsk05(), Ellipsoids.BESSEL1841)

    @pytest.mark.unit
    def test_worked_example(self, modified):
        assert_projected(modified.forward(POINT), 5_568_990.91, 6_050_538.71, tolerance=0.03)

    @pytest.mark.unit
    def test_worked_example_reverse(self, modified):
        result = modified.reverse(Coordinate(5_568_990.91, 6_050_538.71))
        assert_geographic(result, POINT, tolerance_rad=1e-8)

    @pytest.mark.unit
    def test_correction_at_evaluation_point_is_constant_terms(self, modified):
        dX, dY = modified.correction(1_089_000.0, 654_000.0)
        assert dX == pytest.approx(2.946529277e-02)
        assert dY == pytest.approx(2.515965696e-02)

    @pytest.mark.unit
    def test_correction_is_small(self, modified):
        """Inside Czechia the correction stays below two metres."""
        plain = KrovakProjection(_sjtsk(5_000_000.0, 5_000_000.0), Ellipsoids.BESSEL1841)
        for lat, lon in [(50.0, 15.0), (49.2, 16.6), (50.7, 13.8), (49.6, 18.2)]:
            point = GeoCoordinate.from_degrees(lat, lon)
            difference = modified.forward(point).as_array() - plain.forward(point).as_array()
            assert abs(difference).max() < 2.0

    @pytest.mark.unit
    def test_outside_czechia_matches_proj(self, modified):
        """West of the grid the correction grows past three metres; PROJ EPSG:5516 agrees."""
        result = modified.forward(GeoCoordinate.from_degrees(48.6, 12.1))
        assert_projected(result, 5_934_680.6386, 6_181_010.1299, tolerance=0.001)

    @pytest.mark.unit
    def test_north_orientated_negates_axes(self, modified):
        north = KrovakModifiedNorthOrientatedProjection(_sjtsk05(), Ellipsoids.BESSEL1841)
        expected = modified.forward(POINT)
        assert_projected(north.forward(POINT), -expected.x, -expected.y, tolerance=1e-6)

    @pytest.mark.unit
    @pytest.mark.parametrize("lat,lon", [(48.6, 12.1), (51.0, 14.5), (49.0, 22.5)])
    def test_round_trip(self, modified, lat, lon):
        point = GeoCoordinate.from_degrees(lat, lon)
        assert_geographic(modified.reverse(modified.forward(point)), point, tolerance_rad=1e-8)
