"""
Shared helpers for the projection tests.

Parameters are given as pint quantities, as a caller would supply them;
bare numbers trigger a unit warning.
"""

import numpy as np
import pytest

from common.units import Q_


def degrees(value: float):
    """Angle quantity in degrees."""
    return Q_(value, "degree")


def dms(d: float, m: float = 0.0, s: float = 0.0):
    """Angle quantity from degrees, minutes and seconds; the sign of the
    first non-zero field applies to the whole angle."""
    sign = -1.0 if min(d, m, s) < 0 else 1.0
    return Q_(sign * (abs(d) + abs(m) / 60.0 + abs(s) / 3600.0), "degree")


def metres(value: float):
    """Length quantity in metres."""
    return Q_(value, "meter")


def assert_projected(actual, expected_x: float, expected_y: float, tolerance: float = 0.02) -> None:
    """Assert a projected coordinate is within `tolerance` of the expected values."""
    assert actual.x == pytest.approx(expected_x, abs=tolerance)
    assert actual.y == pytest.approx(expected_y, abs=tolerance)


def assert_geographic(actual, expected, tolerance_rad: float = 1e-9) -> None:
    """Assert two geographic coordinates agree within `tolerance_rad`."""
    d_lon = np.arctan2(np.sin(actual.longitude - expected.longitude), np.cos(actual.longitude - expected.longitude))
    assert abs(actual.latitude - expected.latitude) < tolerance_rad
    assert abs(d_lon) < tolerance_rad
