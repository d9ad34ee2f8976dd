"""
Distortion Analysis with Tissot's Indicatrix.

Every map projection distorts. This module quantifies the local
distortion of any `CoordinateProjection` at a point, by differentiating
its forward transform numerically.

Scientific Context
------------------
Domain: Cartography, mathematical geodesy

An infinitesimal circle on the ellipsoid maps to an ellipse (Tissot's
indicatrix). Its axes are the extreme scale factors at the point:

- Conformal projections map it to a circle (a = b, ω = 0).
- Equal-area projections keep its area (a·b = 1).

Method
------
With partial derivatives x_φ, y_φ, x_λ, y_λ of the forward transform
and the radii of curvature M (meridian) and N (prime vertical):

    h = sqrt(x_φ² + y_φ²) / M
    k = sqrt(x_λ² + y_λ²) / (N cos φ)
    s = |y_φ x_λ - x_φ y_λ| / (M N cos φ)          (areal scale)
    a' = sqrt(h² + k² + 2s),  b' = sqrt(h² + k² - 2s)
    a = (a' + b') / 2,  b = (a' - b') / 2
    ω = 2 asin(b' / a')                            (maximum angular distortion)

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395, pp. 20-26.
- Tissot, A. (1859). Mémoire sur la représentation des surfaces.
"""

from dataclasses import dataclass
from typing import List, Sequence
import numpy as np

from common.exceptions import CoordinateOutOfRangeError
from common.types import GeoCoordinate
from geospatial.numerics import HALF_PI
from geospatial.projections.base import CoordinateProjection

# Tolerance of the conformal and equal-area predicates
DISTORTION_TOLERANCE = 1e-6

# Angular step of the central differences (radians)
DIFFERENTIATION_STEP = 1e-6


@dataclass(frozen=True)
class TissotIndicatrix:
    """Tissot's indicatrix describing local distortion at a point.

    Attributes
    ----------
    meridian_scale : float
        h, scale factor along the meridian.
    parallel_scale : float
        k, scale factor along the parallel.
    semi_major : float
        Maximum scale factor at the point.
    semi_minor : float
        Minimum scale factor at the point.
    area_scale : float
        Areal scale factor, equal to semi_major * semi_minor.
    angular_distortion_rad : float
        Maximum angular distortion ω in radians.
    """
    meridian_scale: float
    parallel_scale: float
    semi_major: float
    semi_minor: float
    area_scale: float
    angular_distortion_rad: float

    @property
    def is_conformal(self) -> bool:
        """Check if projection is locally conformal (circle, no angular distortion)."""
        return bool(abs(self.semi_major - self.semi_minor) < DISTORTION_TOLERANCE)

    @property
    def is_equal_area(self) -> bool:
        """Check if projection is locally equal-area."""
        return bool(abs(self.area_scale - 1.0) < DISTORTION_TOLERANCE)


def compute_tissot_indicatrix(
    projection: CoordinateProjection,
    coordinate: GeoCoordinate,
    delta: float = DIFFERENTIATION_STEP
) -> TissotIndicatrix:
    """Compute Tissot's indicatrix numerically.

    Parameters
    ----------
    projection : CoordinateProjection
        The projection to analyze.
    coordinate : GeoCoordinate
        Location in geodetic coordinates (radians).
    delta : float
        Angular step of the central differences.

    Returns
    -------
    TissotIndicatrix
        Local distortion characteristics.

    Raises
    ------
    CoordinateOutOfRangeError
        If the point is within `delta` of a pole, or the projection
        rejects one of the differentiation points.
    """
    lat, lon = coordinate.latitude, coordinate.longitude
    if abs(lat) + delta >= HALF_PI:
        raise CoordinateOutOfRangeError(f"Cannot differentiate {projection.name} at {coordinate}: too close to a pole")

    def project(phi: float, lam: float) -> np.ndarray:
        return projection.forward(GeoCoordinate(phi, lam)).as_array()

    # Central differences: ∂(x, y)/∂φ and ∂(x, y)/∂λ
    d_phi = (project(lat + delta, lon) - project(lat - delta, lon)) / (2 * delta)
    d_lam = (project(lat, lon + delta) - project(lat, lon - delta)) / (2 * delta)

    ellipsoid = projection.ellipsoid
    M = ellipsoid.radius_of_meridian_curvature(lat)
    N = ellipsoid.radius_of_prime_vertical_curvature(lat)
    parallel_radius = N * np.cos(lat)

    h = float(np.hypot(*d_phi) / M)
    k = float(np.hypot(*d_lam) / parallel_radius)
    # South-orientated grids flip the Jacobian sign
    s = float(abs(d_phi[1] * d_lam[0] - d_phi[0] * d_lam[1]) / (M * parallel_radius))

    a_prime = np.sqrt(h * h + k * k + 2 * s)
    b_prime = np.sqrt(max(h * h + k * k - 2 * s, 0.0))

    return TissotIndicatrix(
        meridian_scale=h,
        parallel_scale=k,
        semi_major=float((a_prime + b_prime) / 2),
        semi_minor=float((a_prime - b_prime) / 2),
        area_scale=s,
        angular_distortion_rad=float(2 * np.arcsin(np.clip(b_prime / a_prime, 0.0, 1.0))),
    )


def is_conformal(
    projection: CoordinateProjection,
    sample: Sequence[GeoCoordinate]
) -> bool:
    """Whether the projection is conformal at every point of a sample."""
    return all(compute_tissot_indicatrix(projection, c).is_conformal for c in sample)


def is_equal_area(
    projection: CoordinateProjection,
    sample: Sequence[GeoCoordinate]
) -> bool:
    """Whether the projection preserves area at every point of a sample."""
    return all(compute_tissot_indicatrix(projection, c).is_equal_area for c in sample)


def distortion_grid(
    projection: CoordinateProjection,
    latitudes_deg: Sequence[float],
    longitudes_deg: Sequence[float]
) -> List[List[TissotIndicatrix]]:
    """Indicatrices on a latitude/longitude grid, one row per latitude."""
    return [
        [compute_tissot_indicatrix(projection, GeoCoordinate.from_degrees(lat, lon)) for lon in longitudes_deg]
        for lat in latitudes_deg
    ]
