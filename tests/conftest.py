"""
Pytest Configuration and Fixtures
==================================

Shared fixtures for the projection engine test suite.
"""

import numpy as np
import pytest

from common.types import GeoCoordinate
from geospatial.coordinate_models import Ellipsoid, Ellipsoids


# =============================================================================
# Ellipsoids
# =============================================================================

@pytest.fixture
def wgs84() -> Ellipsoid:
    return Ellipsoids.WGS84


@pytest.fixture
def unit_sphere() -> Ellipsoid:
    """Sphere with the WGS 84 semi-major axis."""
    return Ellipsoid.sphere(6_378_137.0)


# =============================================================================
# Samples
# =============================================================================

@pytest.fixture
def mid_latitude_sample():
    """A small grid of points between 30°N and 60°N around 10°E."""
    return [
        GeoCoordinate.from_degrees(lat, lon)
        for lat in (30.0, 45.0, 60.0)
        for lon in (4.0, 10.0, 16.0)
    ]


@pytest.fixture
def rng():
    """Seeded generator for sampled property tests."""
    return np.random.default_rng(20240229)
