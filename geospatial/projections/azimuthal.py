"""
Azimuthal Projections.

Polar Stereographic (variants A, B and C), Oblique Stereographic,
Lambert Azimuthal Equal Area (ellipsoidal and spherical), Gnomonic,
Modified Azimuthal Equidistant, the Guam projection and Vertical
Perspective.

The aspect of a projection (north polar, south polar, equatorial or
oblique) is fixed at construction from its origin latitude and selects
the formulas used by forward and reverse.

References
----------
- IOGP Publication 373-7-2, Sections 3.4 and 3.5.4
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 154-196.
"""

from enum import Enum
import numpy as np

from common.exceptions import InvalidParameterError
from common.types import Coordinate, GeoCoordinate
from geospatial.numerics import (
    HALF_PI,
    QUARTER_PI,
    authalic_latitude_inverse,
    authalic_q,
    conformal_latitude_inverse,
    conformal_t,
    footpoint_latitude,
    iterate_fixed,
    iterate_until_converged,
    meridian_arc,
    wrap_longitude,
)
from geospatial.projections.base import CoordinateProjection, OperationMethod
from geospatial.projections.parameters import ParameterKind as P, ProjectionParameters

GUAM_ITERATIONS = 3


class OperationAspect(Enum):
    """Aspect of an azimuthal projection."""
    NORTH_POLAR = "north polar"
    SOUTH_POLAR = "south polar"
    EQUATORIAL = "equatorial"
    OBLIQUE = "oblique"

    @classmethod
    def from_latitude(cls, latitude: float, tolerance: float = 1e-10) -> "OperationAspect":
        """Aspect for an origin latitude in radians."""
        if abs(latitude - HALF_PI) <= tolerance:
            return cls.NORTH_POLAR
        if abs(latitude + HALF_PI) <= tolerance:
            return cls.SOUTH_POLAR
        if abs(latitude) <= tolerance:
            return cls.EQUATORIAL
        return cls.OBLIQUE

    @property
    def is_polar(self) -> bool:
        return self in (OperationAspect.NORTH_POLAR, OperationAspect.SOUTH_POLAR)

    @property
    def sign(self) -> float:
        """-1 for the south polar aspect, +1 otherwise."""
        return -1.0 if self is OperationAspect.SOUTH_POLAR else 1.0


# =============================================================================
# Polar Stereographic
# =============================================================================

class PolarStereographicProjection(CoordinateProjection):
    """Base of the Polar Stereographic variants.

    The polar radius is ρ = `_radius_scale`·t, t being the conformal term
    of the latitude measured from the projection pole. Variant C offsets
    the northing by the radius of its standard parallel
    (`_origin_offset`); A and B do not.
    """

    _origin_offset = 0.0

    def _select_aspect(self, latitude: float) -> OperationAspect:
        return OperationAspect.NORTH_POLAR if latitude >= 0 else OperationAspect.SOUTH_POLAR

    def _polar_t(self, latitude: float) -> float:
        return conformal_t(self._aspect.sign * latitude, self._ellipsoid.eccentricity)

    @property
    def aspect(self) -> OperationAspect:
        return self._aspect

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        sign = self._aspect.sign
        if abs(coordinate.latitude + sign * HALF_PI) < self._tolerance:
            self._reject(coordinate, "is the pole opposite to the projection pole")
        rho = self._radius_scale * self._polar_t(coordinate.latitude)
        delta = coordinate.longitude - self._longitude_of_origin
        easting = self._false_easting + rho * np.sin(delta)
        northing = self._false_northing + sign * (self._origin_offset - rho * np.cos(delta))
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        sign = self._aspect.sign
        dx = coordinate.x - self._false_easting
        dy = coordinate.y - self._false_northing - sign * self._origin_offset
        t = np.hypot(dx, dy) / self._radius_scale
        chi = sign * (HALF_PI - 2 * np.arctan(t))
        latitude = conformal_latitude_inverse(chi, self._ellipsoid.eccentricity)

        if coordinate.x == self._false_easting:
            longitude = self._longitude_of_origin
        else:
            longitude = self._longitude_of_origin + np.arctan2(dx, -sign * dy)
        return GeoCoordinate(latitude, longitude, coordinate.z)


def _stereographic_denominator(e: float) -> float:
    """sqrt((1 + e)^(1 + e) (1 - e)^(1 - e))"""
    return float(np.sqrt((1 + e) ** (1 + e) * (1 - e) ** (1 - e)))


class PolarStereographicAProjection(PolarStereographicProjection):
    """Polar Stereographic (variant A): scale factor given at the pole.

    The latitude of natural origin must be ±90°.
    """

    method = OperationMethod("EPSG::9810", "Polar Stereographic (variant A)")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        if abs(abs(latitude_of_origin) - HALF_PI) > self._tolerance:
            raise InvalidParameterError(
                f"{self._name}: latitude of natural origin must be ±90°, got {np.degrees(latitude_of_origin)}°"
            )
        self._aspect = self._select_aspect(latitude_of_origin)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_AT_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        e = self._ellipsoid.eccentricity
        self._radius_scale = 2 * self._ellipsoid.semi_major_axis * self._scale_factor / _stereographic_denominator(e)


class PolarStereographicBProjection(PolarStereographicProjection):
    """Polar Stereographic (variant B): true scale on a standard parallel;
    the scale factor at the pole is derived from it."""

    method = OperationMethod("EPSG::9829", "Polar Stereographic (variant B)")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        parallel = parameters.angle(P.LATITUDE_OF_STANDARD_PARALLEL)
        self._aspect = self._select_aspect(parallel)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        e = self._ellipsoid.eccentricity
        m_f = np.cos(parallel) / np.sqrt(1 - e * e * np.sin(parallel) ** 2)
        t_f = self._polar_t(parallel)
        denominator = _stereographic_denominator(e)
        if abs(abs(parallel) - HALF_PI) <= self._tolerance:
            self._scale_factor = 1.0
        else:
            self._scale_factor = float(m_f * denominator / (2 * t_f))
        self._radius_scale = 2 * self._ellipsoid.semi_major_axis * self._scale_factor / denominator


class PolarStereographicCProjection(PolarStereographicProjection):
    """Polar Stereographic (variant C): standard parallel with the false
    origin at its intersection with the longitude of origin."""

    method = OperationMethod("EPSG::9830", "Polar Stereographic (variant C)")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        parallel = parameters.angle(P.LATITUDE_OF_STANDARD_PARALLEL)
        if abs(abs(parallel) - HALF_PI) <= self._tolerance:
            raise InvalidParameterError(f"{self._name}: standard parallel must not be a pole")
        self._aspect = self._select_aspect(parallel)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_ORIGIN)
        self._false_easting = parameters.length(P.EASTING_AT_FALSE_ORIGIN)
        self._false_northing = parameters.length(P.NORTHING_AT_FALSE_ORIGIN)

        e = self._ellipsoid.eccentricity
        m_f = np.cos(parallel) / np.sqrt(1 - e * e * np.sin(parallel) ** 2)
        self._origin_offset = float(self._ellipsoid.semi_major_axis * m_f)
        self._radius_scale = self._origin_offset / self._polar_t(parallel)


# =============================================================================
# Oblique Stereographic
# =============================================================================

class ObliqueStereographicProjection(CoordinateProjection):
    """Oblique Stereographic (double projection through the conformal sphere).

    Derived Constants
    -----------------
    _R : float
        Radius of the conformal sphere at the origin, sqrt(ρ0 ν0).
    _n, _c : float
        Constants of the conformal mapping.
    _chi0 : float
        Conformal latitude of the origin.
    """

    method = OperationMethod("EPSG::9809", "Oblique Stereographic")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        if abs(abs(latitude_of_origin) - HALF_PI) <= self._tolerance:
            raise InvalidParameterError(
                f"{self._name}: a polar origin is not supported, use Polar Stereographic"
            )
        self._latitude_of_origin = latitude_of_origin
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_AT_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        e = self._ellipsoid.eccentricity
        e2 = e * e
        sin0 = np.sin(latitude_of_origin)
        self._R = float(self._ellipsoid.radius_of_conformal_sphere(latitude_of_origin))
        self._n = float(np.sqrt(1 + e2 * np.cos(latitude_of_origin) ** 4 / (1 - e2)))

        S1 = (1 + sin0) / (1 - sin0)
        S2 = (1 - e * sin0) / (1 + e * sin0)
        w1 = (S1 * S2 ** e) ** self._n
        sin_chi = (w1 - 1) / (w1 + 1)
        self._c = float((self._n + sin0) * (1 - sin_chi) / ((self._n - sin0) * (1 + sin_chi)))
        w2 = self._c * w1
        self._chi0 = float(np.arcsin((w2 - 1) / (w2 + 1)))

        self._g = 2 * self._R * self._scale_factor * np.tan(QUARTER_PI - self._chi0 / 2)
        self._h = 4 * self._R * self._scale_factor * np.tan(self._chi0) + self._g

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        e = self._ellipsoid.eccentricity
        lat = coordinate.latitude
        if abs(lat + np.sign(self._latitude_of_origin) * HALF_PI) < self._tolerance:
            self._reject(coordinate, "is the antipodal pole")
        sin_lat = np.sin(lat)

        delta = self._n * (coordinate.longitude - self._longitude_of_origin)
        Sa = (1 + sin_lat) / (1 - sin_lat) if sin_lat < 1 else np.inf
        Sb = (1 - e * sin_lat) / (1 + e * sin_lat)
        w = self._c * (Sa * Sb ** e) ** self._n
        chi = np.arcsin((w - 1) / (w + 1)) if np.isfinite(w) else HALF_PI

        B = 1 + np.sin(chi) * np.sin(self._chi0) + np.cos(chi) * np.cos(self._chi0) * np.cos(delta)
        scale = 2 * self._R * self._scale_factor / B
        easting = self._false_easting + scale * np.cos(chi) * np.sin(delta)
        northing = self._false_northing + scale * (
            np.sin(chi) * np.cos(self._chi0) - np.cos(chi) * np.sin(self._chi0) * np.cos(delta)
        )
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        e = self._ellipsoid.eccentricity
        e2 = e * e
        dx = coordinate.x - self._false_easting
        dy = coordinate.y - self._false_northing

        i = np.arctan(dx / (self._h + dy))
        j = np.arctan(dx / (self._g - dy)) - i
        chi = self._chi0 + 2 * np.arctan((dy - dx * np.tan(j / 2)) / (2 * self._R * self._scale_factor))
        longitude = (j + 2 * i) / self._n + self._longitude_of_origin

        sin_chi = np.sin(chi)
        psi = 0.5 * np.log((1 + sin_chi) / (self._c * (1 - sin_chi))) / self._n

        def step(phi: float) -> float:
            e_sin = e * np.sin(phi)
            psi_i = np.log(np.tan(phi / 2 + QUARTER_PI) * ((1 - e_sin) / (1 + e_sin)) ** (e / 2))
            return phi - (psi_i - psi) * np.cos(phi) * (1 - e_sin ** 2) / (1 - e2)

        latitude = iterate_until_converged(
            step, 2 * np.arctan(np.exp(psi)) - HALF_PI, self._name, self._tolerance, self._iteration_limit
        )
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# Lambert Azimuthal Equal Area
# =============================================================================

class LambertAzimuthalEqualAreaProjection(CoordinateProjection):
    """Lambert Azimuthal Equal Area.

    Ellipsoidal formulas through the authalic latitude; polar aspects use
    the polar radius directly. On a sphere the spherical formulas are used
    with the sphere's radius.
    """

    method = OperationMethod("EPSG::9820", "Lambert Azimuthal Equal Area")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._aspect = OperationAspect.from_latitude(self._latitude_of_origin, self._tolerance)
        self._spherical = self._ellipsoid.is_sphere
        self._radius = self._ellipsoid.semi_major_axis

        e = self._ellipsoid.eccentricity
        a = self._ellipsoid.semi_major_axis
        lat0 = self._latitude_of_origin
        self._q_pole = authalic_q(HALF_PI, e)
        self._Rq = a * np.sqrt(self._q_pole / 2)
        self._beta0 = float(np.arcsin(np.clip(authalic_q(lat0, e) / self._q_pole, -1.0, 1.0)))
        if self._aspect.is_polar:
            self._D = 1.0
        else:
            m0 = np.cos(lat0) / np.sqrt(1 - e * e * np.sin(lat0) ** 2)
            self._D = float(a * m0 / (self._Rq * np.cos(self._beta0)))

    @property
    def aspect(self) -> OperationAspect:
        return self._aspect

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        if self._spherical:
            return self._forward_spherical(coordinate)
        e = self._ellipsoid.eccentricity
        a = self._ellipsoid.semi_major_axis
        delta = coordinate.longitude - self._longitude_of_origin
        q = authalic_q(coordinate.latitude, e)

        if self._aspect.is_polar:
            sign = self._aspect.sign
            rho = a * np.sqrt(max(self._q_pole - sign * q, 0.0))
            easting = self._false_easting + rho * np.sin(delta)
            northing = self._false_northing - sign * rho * np.cos(delta)
            return Coordinate(easting, northing, coordinate.height)

        beta = np.arcsin(np.clip(q / self._q_pole, -1.0, 1.0))
        denominator = 1 + np.sin(self._beta0) * np.sin(beta) + np.cos(self._beta0) * np.cos(beta) * np.cos(delta)
        if denominator <= self._tolerance:
            self._reject(coordinate, "is the antipode of the projection centre")
        B = self._Rq * np.sqrt(2 / denominator)
        easting = self._false_easting + B * self._D * np.cos(beta) * np.sin(delta)
        northing = self._false_northing + (B / self._D) * (
            np.cos(self._beta0) * np.sin(beta) - np.sin(self._beta0) * np.cos(beta) * np.cos(delta)
        )
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        if self._spherical:
            return self._reverse_spherical(coordinate)
        e = self._ellipsoid.eccentricity
        a = self._ellipsoid.semi_major_axis
        dx = coordinate.x - self._false_easting
        dy = coordinate.y - self._false_northing

        if self._aspect.is_polar:
            sign = self._aspect.sign
            rho = np.hypot(dx, dy)
            ratio = 1 - rho ** 2 / (a ** 2 * self._q_pole)
            if ratio < -1 - self._tolerance:
                self._reject(coordinate, "lies outside the projected disc")
            beta = sign * np.arcsin(np.clip(ratio, -1.0, 1.0))
            longitude = self._longitude_of_origin + np.arctan2(dx, -sign * dy)
            return GeoCoordinate(authalic_latitude_inverse(beta, e), longitude, coordinate.z)

        rho = np.hypot(dx / self._D, self._D * dy)
        if rho == 0:
            return GeoCoordinate(self._latitude_of_origin, self._longitude_of_origin, coordinate.z)
        if rho > 2 * self._Rq * (1 + self._tolerance):
            self._reject(coordinate, "lies outside the projected disc")
        C = 2 * np.arcsin(min(rho / (2 * self._Rq), 1.0))
        beta = np.arcsin(np.clip(
            np.cos(C) * np.sin(self._beta0) + self._D * dy * np.sin(C) * np.cos(self._beta0) / rho, -1.0, 1.0
        ))
        longitude = self._longitude_of_origin + np.arctan2(
            dx * np.sin(C),
            self._D * rho * np.cos(self._beta0) * np.cos(C) - self._D ** 2 * dy * np.sin(self._beta0) * np.sin(C)
        )
        return GeoCoordinate(authalic_latitude_inverse(beta, e), longitude, coordinate.z)

    def _forward_spherical(self, coordinate: GeoCoordinate) -> Coordinate:
        R = self._radius
        lat = coordinate.latitude
        delta = coordinate.longitude - self._longitude_of_origin

        if self._aspect is OperationAspect.NORTH_POLAR:
            rho = 2 * R * np.sin(QUARTER_PI - lat / 2)
            x, y = rho * np.sin(delta), -rho * np.cos(delta)
        elif self._aspect is OperationAspect.SOUTH_POLAR:
            rho = 2 * R * np.cos(QUARTER_PI - lat / 2)
            x, y = rho * np.sin(delta), rho * np.cos(delta)
        else:
            lat0 = self._latitude_of_origin
            denominator = 1 + np.sin(lat0) * np.sin(lat) + np.cos(lat0) * np.cos(lat) * np.cos(delta)
            if denominator <= self._tolerance:
                self._reject(coordinate, "is the antipode of the projection centre")
            k = np.sqrt(2 / denominator)
            x = R * k * np.cos(lat) * np.sin(delta)
            y = R * k * (np.cos(lat0) * np.sin(lat) - np.sin(lat0) * np.cos(lat) * np.cos(delta))
        return Coordinate(self._false_easting + x, self._false_northing + y, coordinate.height)

    def _reverse_spherical(self, coordinate: Coordinate) -> GeoCoordinate:
        R = self._radius
        lat0 = self._latitude_of_origin
        x = coordinate.x - self._false_easting
        y = coordinate.y - self._false_northing
        rho = np.hypot(x, y)
        if rho == 0:
            return GeoCoordinate(lat0, self._longitude_of_origin, coordinate.z)
        if rho > 2 * R * (1 + self._tolerance):
            self._reject(coordinate, "lies outside the projected disc")

        c = 2 * np.arcsin(min(rho / (2 * R), 1.0))
        latitude = np.arcsin(np.clip(np.cos(c) * np.sin(lat0) + y * np.sin(c) * np.cos(lat0) / rho, -1.0, 1.0))
        if self._aspect is OperationAspect.NORTH_POLAR:
            delta = np.arctan2(x, -y)
        elif self._aspect is OperationAspect.SOUTH_POLAR:
            delta = np.arctan2(x, y)
        else:
            delta = np.arctan2(x * np.sin(c), rho * np.cos(lat0) * np.cos(c) - y * np.sin(lat0) * np.sin(c))
        return GeoCoordinate(latitude, self._longitude_of_origin + delta, coordinate.z)


class LambertAzimuthalEqualAreaSphericalProjection(LambertAzimuthalEqualAreaProjection):
    """Lambert Azimuthal Equal Area (Spherical), on the authalic sphere."""

    method = OperationMethod("EPSG::1027", "Lambert Azimuthal Equal Area (Spherical)")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        super()._initialize(parameters)
        self._spherical = True
        self._radius = self._ellipsoid.radius_of_authalic_sphere


# =============================================================================
# Gnomonic
# =============================================================================

class GnomonicProjection(CoordinateProjection):
    """Gnomonic projection on a sphere of radius a.

    Great circles map to straight lines; only the hemisphere around the
    projection centre can be projected.
    """

    method = OperationMethod("ESRI::Gnomonic", "Gnomonic")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_centre = parameters.angle(P.LATITUDE_OF_PROJECTION_CENTRE)
        self._longitude_of_centre = parameters.angle(P.LONGITUDE_OF_PROJECTION_CENTRE)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._radius = self._ellipsoid.semi_major_axis

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        lat = coordinate.latitude
        lat0 = self._latitude_of_centre
        delta = wrap_longitude(coordinate.longitude - self._longitude_of_centre)
        cos_c = np.sin(lat0) * np.sin(lat) + np.cos(lat0) * np.cos(lat) * np.cos(delta)
        if cos_c <= self._tolerance:
            self._reject(coordinate, "is 90° or more from the projection centre")

        x = self._radius * np.cos(lat) * np.sin(delta) / cos_c
        y = self._radius * (np.cos(lat0) * np.sin(lat) - np.sin(lat0) * np.cos(lat) * np.cos(delta)) / cos_c
        return Coordinate(self._false_easting + x, self._false_northing + y, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        x = coordinate.x - self._false_easting
        y = coordinate.y - self._false_northing
        rho = np.hypot(x, y)
        if rho == 0:
            # bearing is undefined at the centre
            return GeoCoordinate(self._latitude_of_centre, self._longitude_of_centre, coordinate.z)

        lat0 = self._latitude_of_centre
        c = np.arctan(rho / self._radius)
        latitude = np.arcsin(np.cos(c) * np.sin(lat0) + y * np.sin(c) * np.cos(lat0) / rho)
        longitude = self._longitude_of_centre + np.arctan2(
            x * np.sin(c), rho * np.cos(lat0) * np.cos(c) - y * np.sin(lat0) * np.sin(c)
        )
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# Modified Azimuthal Equidistant
# =============================================================================

class ModifiedAzimuthalEquidistantProjection(CoordinateProjection):
    """Modified Azimuthal Equidistant (Micronesia grids)."""

    method = OperationMethod("EPSG::9832", "Modified Azimuthal Equidistant")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        e = self._ellipsoid.eccentricity
        self._nu0 = float(self._ellipsoid.radius_of_prime_vertical_curvature(self._latitude_of_origin))
        self._G = e * np.sin(self._latitude_of_origin) / np.sqrt(1 - e * e)

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        e = self._ellipsoid.eccentricity
        e2 = e * e
        lat, lat0 = coordinate.latitude, self._latitude_of_origin
        delta = coordinate.longitude - self._longitude_of_origin
        nu = self._ellipsoid.radius_of_prime_vertical_curvature(lat)

        psi = np.arctan((1 - e2) * np.tan(lat) + e2 * self._nu0 * np.sin(lat0) / (nu * np.cos(lat)))
        alpha = np.arctan2(np.sin(delta), np.cos(lat0) * np.tan(psi) - np.sin(lat0) * np.cos(delta))
        G = self._G
        H = e * np.cos(lat0) * np.cos(alpha) / np.sqrt(1 - e2)

        if np.sin(alpha) == 0:
            s = np.arcsin(np.cos(lat0) * np.sin(psi) - np.sin(lat0) * np.cos(psi)) * np.sign(np.cos(alpha))
        else:
            s = np.arcsin(np.sin(delta) * np.cos(psi) / np.sin(alpha))

        c = self._nu0 * s * (
            1 - s ** 2 * H ** 2 * (1 - H ** 2) / 6
            + s ** 3 / 8 * G * H * (1 - 2 * H ** 2)
            + s ** 4 / 120 * (H ** 2 * (4 - 7 * H ** 2) - 3 * G ** 2 * (1 - 7 * H ** 2))
            - s ** 5 / 48 * G * H
        )
        return Coordinate(self._false_easting + c * np.sin(alpha),
                          self._false_northing + c * np.cos(alpha), coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        e2 = self._ellipsoid.eccentricity_squared
        lat0 = self._latitude_of_origin
        dx = coordinate.x - self._false_easting
        dy = coordinate.y - self._false_northing
        c = np.hypot(dx, dy)
        if c == 0:
            return GeoCoordinate(lat0, self._longitude_of_origin, coordinate.z)

        alpha = np.arctan2(dx, dy)
        A = -e2 * np.cos(lat0) ** 2 * np.cos(alpha) ** 2 / (1 - e2)
        B = 3 * e2 * (1 - A) * np.sin(lat0) * np.cos(lat0) * np.cos(alpha) / (1 - e2)
        D = c / self._nu0
        J = D - A * (1 + A) * D ** 3 / 6 - B * (1 + 3 * A) * D ** 4 / 24
        K = 1 - A * J ** 2 / 2 - B * J ** 3 / 6
        psi = np.arcsin(np.sin(lat0) * np.cos(J) + np.cos(lat0) * np.sin(J) * np.cos(alpha))

        longitude = self._longitude_of_origin + np.arcsin(np.sin(alpha) * np.sin(J) / np.cos(psi))
        latitude = np.arctan((1 - e2 * K * np.sin(lat0) / np.sin(psi)) * np.tan(psi) / (1 - e2))
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# Guam
# =============================================================================

class GuamProjection(CoordinateProjection):
    """Guam projection: simplified azimuthal equidistant for small islands.

    The reverse refines the footpoint latitude in a fixed three passes.
    """

    method = OperationMethod("EPSG::9831", "Guam Projection")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._meridian_origin = meridian_arc(
            self._latitude_of_origin, self._ellipsoid.semi_major_axis, self._ellipsoid.eccentricity_squared
        )

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        lat = coordinate.latitude
        root = np.sqrt(1 - e2 * np.sin(lat) ** 2)

        x = a * (coordinate.longitude - self._longitude_of_origin) * np.cos(lat) / root
        northing = (self._false_northing + meridian_arc(lat, a, e2) - self._meridian_origin
                    + x ** 2 * np.tan(lat) * root / (2 * a))
        return Coordinate(self._false_easting + x, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        dx = coordinate.x - self._false_easting
        dy = coordinate.y - self._false_northing

        def step(phi: float) -> float:
            arc = self._meridian_origin + dy - dx ** 2 * np.tan(phi) * np.sqrt(1 - e2 * np.sin(phi) ** 2) / (2 * a)
            return footpoint_latitude(arc, a, e2)

        latitude = iterate_fixed(step, self._latitude_of_origin, GUAM_ITERATIONS)
        longitude = self._longitude_of_origin + dx * np.sqrt(1 - e2 * np.sin(latitude) ** 2) / (a * np.cos(latitude))
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# Vertical Perspective
# =============================================================================

class VerticalPerspectiveProjection(CoordinateProjection):
    """Vertical Perspective: the view from a point above the topocentric origin.

    The ellipsoidal height of the projected point is taken from the input
    coordinate. There is no reverse.
    """

    method = OperationMethod("EPSG::9838", "Vertical Perspective", reversible=False)

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_origin = parameters.angle(P.LATITUDE_OF_TOPOCENTRIC_ORIGIN)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_TOPOCENTRIC_ORIGIN)
        self._height_of_origin = parameters.length(P.ELLIPSOIDAL_HEIGHT_OF_TOPOCENTRIC_ORIGIN, default=0.0)
        self._viewpoint_height = parameters.length(P.VIEWPOINT_HEIGHT)
        if self._viewpoint_height <= 0:
            raise InvalidParameterError(f"{self._name}: viewpoint height must be positive")
        self._nu0 = float(self._ellipsoid.radius_of_prime_vertical_curvature(self._latitude_of_origin))

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        e2 = self._ellipsoid.eccentricity_squared
        lat, lat0 = coordinate.latitude, self._latitude_of_origin
        delta = coordinate.longitude - self._longitude_of_origin
        nu = self._ellipsoid.radius_of_prime_vertical_curvature(lat)
        radial = nu + coordinate.height
        correction = e2 * (self._nu0 * np.sin(lat0) - nu * np.sin(lat))

        U = radial * np.cos(lat) * np.sin(delta)
        V = radial * (np.sin(lat) * np.cos(lat0) - np.cos(lat) * np.sin(lat0) * np.cos(delta)) + correction * np.cos(lat0)
        W = (radial * (np.sin(lat) * np.sin(lat0) + np.cos(lat) * np.cos(lat0) * np.cos(delta))
             + correction * np.sin(lat0) - (self._nu0 + self._height_of_origin))

        H = self._viewpoint_height
        if H - W <= 0:
            self._reject(coordinate, "is not below the viewpoint")
        return Coordinate(U * H / (H - W), V * H / (H - W), coordinate.height)
