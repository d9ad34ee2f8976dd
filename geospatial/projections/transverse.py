"""
Transverse Cylindrical Projections.

Transverse Mercator (JHS formulas, as used for UTM and most national
grids), its zoned grid system, and Cassini-Soldner with the hyperbolic
variant used for the Vanua Levu grid.

References
----------
- IOGP Publication 373-7-2, Sections 3.5.2 and 3.5.3
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 92-95.
"""

from typing import Tuple
import numpy as np

from common.types import Coordinate, GeoCoordinate
from geospatial.numerics import (
    HALF_PI,
    asinh,
    atanh,
    footpoint_latitude,
    iterate_until_converged,
    meridian_arc,
)
from geospatial.projections.base import CoordinateProjection, OperationMethod
from geospatial.projections.parameters import ParameterKind as P, ProjectionParameters

ZONE_EASTING_PREFIX = 1_000_000.0


# =============================================================================
# Transverse Mercator
# =============================================================================

class TransverseMercatorProjection(CoordinateProjection):
    """Transverse Mercator.

    Forward maps the conformal latitude onto the transverse sphere and
    corrects with a fourth-order series in the third flattening n. The
    reverse applies the inverse series and recovers the geodetic latitude
    from the isometric latitude by fixed-point iteration.

    Derived Constants
    -----------------
    _B : float
        Radius of the rectifying sphere, a/(1 + n)(1 + n²/4 + n⁴/64).
    _h, _h_inverse : tuple of float
        Forward and reverse series coefficients.
    _meridian_origin : float
        Scaled meridian arc at the latitude of natural origin.
    """

    method = OperationMethod("EPSG::9807", "Transverse Mercator")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_AT_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._initialize_series()

    def _initialize_series(self) -> None:
        f = self._ellipsoid.flattening
        n = f / (2 - f)
        n2, n3, n4 = n ** 2, n ** 3, n ** 4

        self._B = self._ellipsoid.semi_major_axis / (1 + n) * (1 + n2 / 4 + n4 / 64)
        self._h = (
            n / 2 - 2 * n2 / 3 + 5 * n3 / 16 + 41 * n4 / 180,
            13 * n2 / 48 - 3 * n3 / 5 + 557 * n4 / 1440,
            61 * n3 / 240 - 103 * n4 / 140,
            49561 * n4 / 161280,
        )
        self._h_inverse = (
            n / 2 - 2 * n2 / 3 + 37 * n3 / 96 - n4 / 360,
            n2 / 48 + n3 / 15 - 437 * n4 / 1440,
            17 * n3 / 480 - 37 * n4 / 840,
            4397 * n4 / 161280,
        )

        latitude = self._latitude_of_origin
        if latitude == 0:
            self._meridian_origin = 0.0
        elif abs(latitude) == HALF_PI:
            self._meridian_origin = float(np.copysign(self._B * HALF_PI, latitude))
        else:
            xi_origin = np.arcsin(np.sin(self._conformal_latitude(latitude)))
            self._meridian_origin = float(self._B * (xi_origin + sum(
                h * np.sin(2 * (i + 1) * xi_origin) for i, h in enumerate(self._h)
            )))

    def _conformal_latitude(self, latitude: float) -> float:
        e = self._ellipsoid.eccentricity
        q = asinh(np.tan(latitude)) - e * atanh(e * np.sin(latitude))
        return np.arctan(np.sinh(q))

    def _project(self, latitude: float, delta_longitude: float) -> Tuple[float, float]:
        """Unscaled (η, ξ) on the rectifying sphere."""
        beta = self._conformal_latitude(latitude)
        eta0 = atanh(np.cos(beta) * np.sin(delta_longitude))
        xi0 = np.arcsin(np.sin(beta) * np.cosh(eta0))

        eta, xi = eta0, xi0
        for i, h in enumerate(self._h):
            k = 2 * (i + 1)
            eta += h * np.cos(k * xi0) * np.sinh(k * eta0)
            xi += h * np.sin(k * xi0) * np.cosh(k * eta0)
        return eta, xi

    def _unproject(self, x: float, y: float) -> Tuple[float, float]:
        """Latitude and longitude offset from offsets to the false origin."""
        k0B = self._scale_factor * self._B
        eta = x / k0B
        xi = (y + self._scale_factor * self._meridian_origin) / k0B

        eta0, xi0 = eta, xi
        for i, h in enumerate(self._h_inverse):
            k = 2 * (i + 1)
            xi0 -= h * np.sin(k * xi) * np.cosh(k * eta)
            eta0 -= h * np.cos(k * xi) * np.sinh(k * eta)

        beta = np.arcsin(np.sin(xi0) / np.cosh(eta0))
        e = self._ellipsoid.eccentricity
        q_prime = asinh(np.tan(beta))
        q = iterate_until_converged(
            lambda q_estimate: q_prime + e * atanh(e * np.tanh(q_estimate)),
            q_prime, self._name, self._tolerance, self._iteration_limit
        )
        return np.arctan(np.sinh(q)), np.arcsin(np.tanh(eta0) / np.cos(beta))

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        eta, xi = self._project(coordinate.latitude, coordinate.longitude - self._longitude_of_origin)
        easting = self._false_easting + self._scale_factor * self._B * eta
        northing = self._false_northing + self._scale_factor * (self._B * xi - self._meridian_origin)
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        latitude, delta = self._unproject(coordinate.x - self._false_easting, coordinate.y - self._false_northing)
        return GeoCoordinate(latitude, self._longitude_of_origin + delta, coordinate.z)


class TransverseMercatorZonedProjection(TransverseMercatorProjection):
    """Transverse Mercator Zoned Grid System.

    One projection for every zone of a regular zoning: the zone is chosen
    from the longitude and written as a 1 000 000 prefix on the easting,
    so that coordinates from different zones stay distinct.

    Notes
    -----
    Z = floor((λ - λI) / W) + 1
    λ0 = λI + Z·W - W/2
    E = Z·10⁶ + FE + k0·B·η
    """

    method = OperationMethod("EPSG::9824", "Transverse Mercator Zoned Grid System")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        self._initial_longitude = parameters.angle(P.INITIAL_LONGITUDE)
        self._zone_width = parameters.angle(P.ZONE_WIDTH)
        self._zone_count = int(round(2 * np.pi / self._zone_width))
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_AT_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._initialize_series()

    def zone_of(self, longitude: float) -> int:
        """Zone number (1-based) containing a longitude in radians."""
        offset = np.mod(longitude - self._initial_longitude, 2 * np.pi)
        return min(int(np.floor(offset / self._zone_width)) + 1, self._zone_count)

    def central_meridian(self, zone: int) -> float:
        return self._initial_longitude + zone * self._zone_width - self._zone_width / 2

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        zone = self.zone_of(coordinate.longitude)
        delta = coordinate.longitude - self.central_meridian(zone)
        delta = np.arctan2(np.sin(delta), np.cos(delta))
        eta, xi = self._project(coordinate.latitude, delta)
        easting = zone * ZONE_EASTING_PREFIX + self._false_easting + self._scale_factor * self._B * eta
        northing = self._false_northing + self._scale_factor * (self._B * xi - self._meridian_origin)
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        zone = int(coordinate.x // ZONE_EASTING_PREFIX)
        if not 1 <= zone <= self._zone_count:
            self._reject(coordinate, f"has no valid zone prefix (zone {zone})")
        x = coordinate.x - zone * ZONE_EASTING_PREFIX - self._false_easting
        latitude, delta = self._unproject(x, coordinate.y - self._false_northing)
        longitude = self.central_meridian(zone) + delta
        return GeoCoordinate(latitude, np.arctan2(np.sin(longitude), np.cos(longitude)), coordinate.z)


# =============================================================================
# Cassini-Soldner
# =============================================================================

class CassiniSoldnerProjection(CoordinateProjection):
    """Cassini-Soldner.

    Transverse equidistant projection; the central meridian is true to
    scale. `_northing_offset` and `_footpoint_arc` are the two points
    where the hyperbolic variant differs.
    """

    method = OperationMethod("EPSG::9806", "Cassini-Soldner")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._meridian_origin = meridian_arc(
            self._latitude_of_origin, self._ellipsoid.semi_major_axis, self._ellipsoid.eccentricity_squared
        )

    def _northing_offset(self, x: float, latitude: float) -> float:
        return x

    def _footpoint_arc(self, northing_offset: float) -> float:
        return self._meridian_origin + northing_offset

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        lat = coordinate.latitude

        nu = self._ellipsoid.radius_of_prime_vertical_curvature(lat)
        A = (coordinate.longitude - self._longitude_of_origin) * np.cos(lat)
        T = np.tan(lat) ** 2
        C = e2 * np.cos(lat) ** 2 / (1 - e2)

        x = (meridian_arc(lat, a, e2) - self._meridian_origin
             + nu * np.tan(lat) * (A ** 2 / 2 + (5 - T + 6 * C) * A ** 4 / 24))
        easting = self._false_easting + nu * (A - T * A ** 3 / 6 - (8 - T + 8 * C) * T * A ** 5 / 120)
        northing = self._false_northing + self._northing_offset(x, lat)
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared

        arc = self._footpoint_arc(coordinate.y - self._false_northing)
        lat1 = footpoint_latitude(arc, a, e2)
        nu1 = self._ellipsoid.radius_of_prime_vertical_curvature(lat1)
        rho1 = self._ellipsoid.radius_of_meridian_curvature(lat1)
        T1 = np.tan(lat1) ** 2
        D = (coordinate.x - self._false_easting) / nu1

        latitude = lat1 - (nu1 * np.tan(lat1) / rho1) * (D ** 2 / 2 - (1 + 3 * T1) * D ** 4 / 24)
        longitude = self._longitude_of_origin + (
            D - T1 * D ** 3 / 3 + (1 + 3 * T1) * T1 * D ** 5 / 15
        ) / np.cos(lat1)
        return GeoCoordinate(latitude, longitude, coordinate.z)


class HyperbolicCassiniSoldnerProjection(CassiniSoldnerProjection):
    """Hyperbolic Cassini-Soldner.

    Subtracts X³/(6ρν) from the northing; the reverse estimates the
    footpoint latitude once from the meridian radius at the origin to
    restore that term before solving for the footpoint arc.

    Notes
    -----
    φ1' = φ0 + (N - FN) / ρ0. IOGP 373-7-2 writes the divisor as the
    constant 315320, which is ρ0 of the Vanua Levu grid expressed in
    chains; ρ0 gives the same estimate in any length unit.
    """

    method = OperationMethod("EPSG::9833", "Hyperbolic Cassini-Soldner")

    def _northing_offset(self, x: float, latitude: float) -> float:
        rho = self._ellipsoid.radius_of_meridian_curvature(latitude)
        nu = self._ellipsoid.radius_of_prime_vertical_curvature(latitude)
        return x - x ** 3 / (6 * rho * nu)

    def _footpoint_arc(self, northing_offset: float) -> float:
        rho0 = self._ellipsoid.radius_of_meridian_curvature(self._latitude_of_origin)
        lat1 = self._latitude_of_origin + northing_offset / rho0
        rho1 = self._ellipsoid.radius_of_meridian_curvature(lat1)
        nu1 = self._ellipsoid.radius_of_prime_vertical_curvature(lat1)
        q = northing_offset ** 3 / (6 * rho1 * nu1)
        return self._meridian_origin + northing_offset + q
