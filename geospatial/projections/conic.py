"""
Conic Projections.

Lambert Conic Conformal (1SP, West Orientated, 2SP, 2SP Belgium),
Lambert Conic Near-Conformal, Albers Equal Area, American Polyconic
and Bonne (with its South Orientated form).

The Lambert Conic Conformal variants share one set of cone constants
(n, F, r at the origin) and differ in where those constants come from and
in a `ConicOrientation`: the sign applied to the easting and a fixed
angular correction of the cone angle.

References
----------
- IOGP Publication 373-7-2, Sections 3.2 and 3.3
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 104-137.
"""

from dataclasses import dataclass
import numpy as np

from common.constants import GeodeticConstants
from common.exceptions import InvalidParameterError
from common.types import Coordinate, GeoCoordinate
from geospatial.numerics import (
    HALF_PI,
    authalic_latitude_inverse,
    authalic_q,
    conformal_latitude_inverse,
    conformal_t,
    footpoint_latitude,
    iterate_until_converged,
    meridian_arc,
    meridian_arc_derivative,
)
from geospatial.projections.base import CoordinateProjection, OperationMethod
from geospatial.projections.parameters import ParameterKind as P, ProjectionParameters


def _m(latitude: float, e2: float) -> float:
    """m = cosφ / sqrt(1 - e² sin²φ)"""
    return np.cos(latitude) / np.sqrt(1 - e2 * np.sin(latitude) ** 2)


# =============================================================================
# Lambert Conic Conformal
# =============================================================================

@dataclass(frozen=True)
class ConicOrientation:
    """Orientation of a conformal cone.

    Attributes
    ----------
    easting_sign : float
        +1 for easting increasing east, -1 for west orientated grids.
    angular_correction : float
        Angle subtracted from the cone angle θ, in radians.
    """
    easting_sign: float = 1.0
    angular_correction: float = 0.0


STANDARD_ORIENTATION = ConicOrientation()
WEST_ORIENTATION = ConicOrientation(easting_sign=-1.0)
BELGIUM_ORIENTATION = ConicOrientation(
    angular_correction=GeodeticConstants.in_radians(GeodeticConstants.BELGIUM_CORRECTION)
)


class LambertConicConformalProjection(CoordinateProjection):
    """Base of the Lambert Conic Conformal variants.

    Subclasses implement `_initialize` and set the cone constants:
    `_n`, `_radius_factor` (a·F·k0), `_origin_radius` (r at the origin
    latitude), `_longitude_of_origin`, `_false_easting`, `_false_northing`.
    """

    orientation = STANDARD_ORIENTATION

    def _radius(self, latitude: float) -> float:
        t = conformal_t(latitude, self._ellipsoid.eccentricity)
        return self._radius_factor * t ** self._n

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        if abs(coordinate.latitude) == HALF_PI and np.sign(coordinate.latitude) != np.sign(self._n):
            self._reject(coordinate, "is the pole opposite to the cone apex")
        r = self._radius(coordinate.latitude)
        theta = self._n * (coordinate.longitude - self._longitude_of_origin) - self.orientation.angular_correction
        easting = self._false_easting + self.orientation.easting_sign * r * np.sin(theta)
        northing = self._false_northing + self._origin_radius - r * np.cos(theta)
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        dx = self.orientation.easting_sign * (coordinate.x - self._false_easting)
        dy = self._origin_radius - (coordinate.y - self._false_northing)
        sign = np.sign(self._n)
        r = sign * np.hypot(dx, dy)
        theta = np.arctan2(sign * dx, sign * dy)

        if r == 0:
            latitude = float(np.copysign(HALF_PI, self._n))
        else:
            t = (r / self._radius_factor) ** (1 / self._n)
            latitude = conformal_latitude_inverse(HALF_PI - 2 * np.arctan(t), self._ellipsoid.eccentricity)
        longitude = (theta + self.orientation.angular_correction) / self._n + self._longitude_of_origin
        return GeoCoordinate(latitude, longitude, coordinate.z)


class LambertConicConformal1SPProjection(LambertConicConformalProjection):
    """Lambert Conic Conformal (1SP): one standard parallel at the natural
    origin, with a scale factor."""

    method = OperationMethod("EPSG::9801", "Lambert Conic Conformal (1SP)")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        if latitude_of_origin == 0:
            raise InvalidParameterError(f"{self._name}: latitude of natural origin must not be 0")
        self._latitude_of_origin = latitude_of_origin
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_AT_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        e = self._ellipsoid.eccentricity
        m0 = _m(latitude_of_origin, e * e)
        t0 = conformal_t(latitude_of_origin, e)
        self._n = float(np.sin(latitude_of_origin))
        F = m0 / (self._n * t0 ** self._n)
        self._radius_factor = self._ellipsoid.semi_major_axis * F * self._scale_factor
        self._origin_radius = self._radius_factor * t0 ** self._n


class LambertConicConformalWestOrientatedProjection(LambertConicConformal1SPProjection):
    """Lambert Conic Conformal (West Orientated): 1SP with the easting
    measured westward."""

    method = OperationMethod("EPSG::9826", "Lambert Conic Conformal (West Orientated)")
    orientation = WEST_ORIENTATION


class LambertConicConformal2SPProjection(LambertConicConformalProjection):
    """Lambert Conic Conformal (2SP): two standard parallels and a false
    origin.

    Derived Constants
    -----------------
    _n : float
        Cone constant (ln m1 - ln m2)/(ln t1 - ln t2).
    _radius_factor : float
        a·F with F = m1/(n t1^n).
    _origin_radius : float
        rF, the radius at the latitude of false origin.
    """

    method = OperationMethod("EPSG::9802", "Lambert Conic Conformal (2SP)")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_FALSE_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_FALSE_ORIGIN)
        parallel_1 = parameters.angle(P.LATITUDE_OF_1ST_STANDARD_PARALLEL)
        parallel_2 = parameters.angle(P.LATITUDE_OF_2ND_STANDARD_PARALLEL)
        self._false_easting = parameters.length(P.EASTING_AT_FALSE_ORIGIN)
        self._false_northing = parameters.length(P.NORTHING_AT_FALSE_ORIGIN)

        e = self._ellipsoid.eccentricity
        m1, m2 = _m(parallel_1, e * e), _m(parallel_2, e * e)
        t1, t2 = conformal_t(parallel_1, e), conformal_t(parallel_2, e)
        tF = conformal_t(latitude_of_origin, e)

        if parallel_1 == parallel_2:
            n = np.sin(parallel_1)
        else:
            n = (np.log(m1) - np.log(m2)) / (np.log(t1) - np.log(t2))
        if n == 0:
            raise InvalidParameterError(f"{self._name}: standard parallels define a cylinder, not a cone")
        self._n = float(n)
        F = m1 / (self._n * t1 ** self._n)
        self._radius_factor = self._ellipsoid.semi_major_axis * F
        self._origin_radius = self._radius_factor * tF ** self._n


class LambertConicConformal2SPBelgiumProjection(LambertConicConformal2SPProjection):
    """Lambert Conic Conformal (2SP Belgium): 2SP with the 29.2985″
    correction of the cone angle used by the Belgian 1972 grid."""

    method = OperationMethod("EPSG::9803", "Lambert Conic Conformal (2SP Belgium)")
    orientation = BELGIUM_ORIENTATION


# =============================================================================
# Lambert Conic Near-Conformal
# =============================================================================

class LambertConicNearConformalProjection(CoordinateProjection):
    """Lambert Conic Near-Conformal.

    Series form of the 1SP conic with the meridian distance truncated to
    its cubic term. The reverse solves the cubic and the meridian
    distance by Newton iteration, each to the tolerance.
    """

    method = OperationMethod("EPSG::9817", "Lambert Conic Near-Conformal")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        if latitude_of_origin == 0:
            raise InvalidParameterError(f"{self._name}: latitude of natural origin must not be 0")
        self._latitude_of_origin = latitude_of_origin
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_AT_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        a = self._ellipsoid.semi_major_axis
        f = self._ellipsoid.flattening
        n = f / (2 - f)
        rho0 = self._ellipsoid.radius_of_meridian_curvature(latitude_of_origin)
        nu0 = self._ellipsoid.radius_of_prime_vertical_curvature(latitude_of_origin)

        self._A = 1 / (6 * rho0 * nu0)
        self._arc_coefficients = (
            a * (1 - n + 5 * (n ** 2 - n ** 3) / 4 + 81 * (n ** 4 - n ** 5) / 64),
            3 * a * (n - n ** 2 + 7 * (n ** 3 - n ** 4) / 8 + 55 * n ** 5 / 64) / 2,
            15 * a * (n ** 2 - n ** 3 + 3 * (n ** 4 - n ** 5) / 4) / 16,
            35 * a * (n ** 3 - n ** 4 + 11 * n ** 5 / 16) / 48,
            315 * a * (n ** 4 - n ** 5) / 512,
        )
        self._origin_radius = self._scale_factor * nu0 / np.tan(latitude_of_origin)
        self._origin_arc = self._arc(latitude_of_origin)
        self._sin_origin = float(np.sin(latitude_of_origin))

    def _arc(self, latitude: float) -> float:
        A, B, C, D, E = self._arc_coefficients
        return (A * latitude - B * np.sin(2 * latitude) + C * np.sin(4 * latitude)
                - D * np.sin(6 * latitude) + E * np.sin(8 * latitude))

    def _arc_derivative(self, latitude: float) -> float:
        A, B, C, D, E = self._arc_coefficients
        return (A - 2 * B * np.cos(2 * latitude) + 4 * C * np.cos(4 * latitude)
                - 6 * D * np.cos(6 * latitude) + 8 * E * np.cos(8 * latitude))

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        m = self._arc(coordinate.latitude) - self._origin_arc
        M = self._scale_factor * (m + self._A * m ** 3)
        r = self._origin_radius - M
        theta = (coordinate.longitude - self._longitude_of_origin) * self._sin_origin
        easting = self._false_easting + r * np.sin(theta)
        northing = self._false_northing + M + r * np.sin(theta) * np.tan(theta / 2)
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        k0, A = self._scale_factor, self._A
        dx = coordinate.x - self._false_easting
        dy = self._origin_radius - (coordinate.y - self._false_northing)
        sign = np.sign(self._latitude_of_origin)
        theta = np.arctan2(sign * dx, sign * dy)
        r = sign * np.hypot(dx, dy)
        M = self._origin_radius - r

        m = iterate_until_converged(
            lambda estimate: estimate - (M - k0 * estimate - k0 * A * estimate ** 3)
            / (-k0 - 3 * k0 * A * estimate ** 2),
            M, self._name, self._tolerance, self._iteration_limit
        )
        latitude = iterate_until_converged(
            lambda estimate: estimate + (m + self._origin_arc - self._arc(estimate)) / self._arc_derivative(estimate),
            self._latitude_of_origin + m / self._arc_coefficients[0],
            self._name, self._tolerance, self._iteration_limit
        )
        longitude = self._longitude_of_origin + theta / self._sin_origin
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# Albers Equal Area
# =============================================================================

class AlbersEqualAreaProjection(CoordinateProjection):
    """Albers Equal Area.

    Notes
    -----
    n = (m1² - m2²)/(α2 - α1), C = m1² + nα1, ρ = a(C - nα)^½ / n.
    The reverse recovers the authalic latitude β' = asin(α'/αP), αP being
    α at the pole, then the geodetic latitude by series.
    """

    method = OperationMethod("EPSG::9822", "Albers Equal Area")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_FALSE_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_FALSE_ORIGIN)
        parallel_1 = parameters.angle(P.LATITUDE_OF_1ST_STANDARD_PARALLEL)
        parallel_2 = parameters.angle(P.LATITUDE_OF_2ND_STANDARD_PARALLEL)
        self._false_easting = parameters.length(P.EASTING_AT_FALSE_ORIGIN)
        self._false_northing = parameters.length(P.NORTHING_AT_FALSE_ORIGIN)

        e = self._ellipsoid.eccentricity
        m1, m2 = _m(parallel_1, e * e), _m(parallel_2, e * e)
        alpha1, alpha2 = authalic_q(parallel_1, e), authalic_q(parallel_2, e)
        if parallel_1 == parallel_2:
            n = np.sin(parallel_1)
        else:
            n = (m1 ** 2 - m2 ** 2) / (alpha2 - alpha1)
        if n == 0:
            raise InvalidParameterError(f"{self._name}: standard parallels define a cylinder, not a cone")

        self._n = float(n)
        self._C = m1 ** 2 + self._n * alpha1
        self._alpha_pole = authalic_q(HALF_PI, e)
        self._origin_radius = self._rho(authalic_q(latitude_of_origin, e))

    def _rho(self, alpha: float) -> float:
        return self._ellipsoid.semi_major_axis * np.sqrt(self._C - self._n * alpha) / self._n

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        rho = self._rho(authalic_q(coordinate.latitude, self._ellipsoid.eccentricity))
        theta = self._n * (coordinate.longitude - self._longitude_of_origin)
        easting = self._false_easting + rho * np.sin(theta)
        northing = self._false_northing + self._origin_radius - rho * np.cos(theta)
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        a = self._ellipsoid.semi_major_axis
        dx = coordinate.x - self._false_easting
        dy = self._origin_radius - (coordinate.y - self._false_northing)
        sign = np.sign(self._n)
        rho = np.hypot(dx, dy)
        theta = np.arctan2(sign * dx, sign * dy)

        alpha = (self._C - rho ** 2 * self._n ** 2 / a ** 2) / self._n
        ratio = alpha / self._alpha_pole
        if abs(ratio) > 1 + self._tolerance:
            self._reject(coordinate, "lies outside the projected area")
        beta = np.arcsin(np.clip(ratio, -1.0, 1.0))
        latitude = authalic_latitude_inverse(beta, self._ellipsoid.eccentricity)
        longitude = self._longitude_of_origin + theta / self._n
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# American Polyconic
# =============================================================================

class AmericanPolyconicProjection(CoordinateProjection):
    """American Polyconic.

    Every parallel is the arc of its own tangent cone. The reverse is
    Snyder's Newton-Raphson solution, run to the tolerance; exhausting the
    iteration ceiling raises `ConvergenceError`.
    """

    method = OperationMethod("EPSG::9818", "American Polyconic")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._meridian_origin = meridian_arc(
            self._latitude_of_origin, self._ellipsoid.semi_major_axis, self._ellipsoid.eccentricity_squared
        )

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        if abs(coordinate.latitude - self._latitude_of_origin) > HALF_PI:
            self._reject(coordinate, "is more than 90° from the latitude of origin")
        a = self._ellipsoid.semi_major_axis
        lat = coordinate.latitude
        delta = coordinate.longitude - self._longitude_of_origin

        if lat == 0:
            easting = self._false_easting + a * delta
            northing = self._false_northing - self._meridian_origin
        else:
            nu_cot = self._ellipsoid.radius_of_prime_vertical_curvature(lat) / np.tan(lat)
            L = delta * np.sin(lat)
            M = meridian_arc(lat, a, self._ellipsoid.eccentricity_squared)
            easting = self._false_easting + nu_cot * np.sin(L)
            northing = self._false_northing + M - self._meridian_origin + nu_cot * (1 - np.cos(L))
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        dx = coordinate.x - self._false_easting
        dy = coordinate.y - self._false_northing

        if self._meridian_origin + dy == 0:
            return GeoCoordinate(0.0, self._longitude_of_origin + dx / a, coordinate.z)

        A = (self._meridian_origin + dy) / a
        B = A ** 2 + dx ** 2 / a ** 2

        def c_term(phi: float) -> float:
            return np.sqrt(1 - e2 * np.sin(phi) ** 2) * np.tan(phi)

        def step(phi: float) -> float:
            C = c_term(phi)
            Ma = meridian_arc(phi, a, e2) / a
            Mn = meridian_arc_derivative(phi, e2)
            sin_2phi = np.sin(2 * phi)
            numerator = A * (C * Ma + 1) - Ma - 0.5 * (Ma ** 2 + B) * C
            denominator = (e2 * sin_2phi * (Ma ** 2 + B - 2 * A * Ma) / (4 * C)
                           + (A - Ma) * (C * Mn - 2 / sin_2phi) - Mn)
            return phi - numerator / denominator

        latitude = iterate_until_converged(step, A, self._name, self._tolerance, self._iteration_limit)
        longitude = self._longitude_of_origin + np.arcsin(dx * c_term(latitude) / a) / np.sin(latitude)
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# Bonne
# =============================================================================

class BonneProjection(CoordinateProjection):
    """Bonne.

    Equal-area pseudoconic; parallels are concentric arcs true to scale.
    A zero latitude of natural origin degenerates to Sinusoidal and is
    rejected.
    """

    method = OperationMethod("EPSG::9827", "Bonne")

    # +1 for the standard grid; -1 negates both axes (south orientated)
    axis_sign = 1.0

    def _initialize(self, parameters: ProjectionParameters) -> None:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        if latitude_of_origin == 0:
            raise InvalidParameterError(
                f"{self._name}: latitude of natural origin must not be 0 (use Sinusoidal)"
            )
        self._latitude_of_origin = latitude_of_origin
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        self._meridian_origin = meridian_arc(latitude_of_origin, a, e2)
        self._apex_distance = a * _m(latitude_of_origin, e2) / np.sin(latitude_of_origin)

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        lat = coordinate.latitude

        rho = self._apex_distance + self._meridian_origin - meridian_arc(lat, a, e2)
        if rho == 0:
            x, y = 0.0, self._apex_distance
        else:
            T = a * _m(lat, e2) * (coordinate.longitude - self._longitude_of_origin) / rho
            x = rho * np.sin(T)
            y = self._apex_distance - rho * np.cos(T)
        return Coordinate(self._false_easting + self.axis_sign * x,
                          self._false_northing + self.axis_sign * y, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        x = self.axis_sign * (coordinate.x - self._false_easting)
        y = self.axis_sign * (coordinate.y - self._false_northing)

        rho = np.sign(self._latitude_of_origin) * np.hypot(x, self._apex_distance - y)
        M = self._apex_distance + self._meridian_origin - rho
        latitude = footpoint_latitude(M, a, e2)
        if abs(abs(latitude) - HALF_PI) < self._tolerance:
            return GeoCoordinate(float(np.copysign(HALF_PI, latitude)), self._longitude_of_origin, coordinate.z)

        m = _m(latitude, e2)
        if self._latitude_of_origin >= 0:
            angle = np.arctan2(x, self._apex_distance - y)
        else:
            angle = np.arctan2(-x, y - self._apex_distance)
        longitude = self._longitude_of_origin + rho * angle / (a * m)
        return GeoCoordinate(latitude, longitude, coordinate.z)


class BonneSouthOrientatedProjection(BonneProjection):
    """Bonne (South Orientated): westing and southing axes."""

    method = OperationMethod("EPSG::9828", "Bonne (South Orientated)")
    axis_sign = -1.0
