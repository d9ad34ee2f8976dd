"""
Cylindrical and Pseudo-Cylindrical Projections.

Mercator (variants A and B, Popular Visualisation Pseudo Mercator),
Equidistant Cylindrical, Lambert Cylindrical Equal Area and Sinusoidal,
each with the ellipsoidal formulas of IOGP 373-7-2 and a spherical form.

References
----------
- IOGP Publication 373-7-2, Sections 3.5.1 and 3.5.5
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 38-47, 76-85, 243-248.
"""

import numpy as np

from common.constants import GeodeticConstants, NumericConstants
from common.exceptions import InvalidParameterError
from common.types import Coordinate, GeoCoordinate
from geospatial.numerics import (
    HALF_PI,
    QUARTER_PI,
    authalic_q,
    conformal_latitude_inverse,
    footpoint_latitude,
    iterate_until_converged,
    meridian_arc,
    simpson,
)
from geospatial.projections.base import CoordinateProjection, OperationMethod
from geospatial.projections.parameters import ParameterKind as P, ProjectionParameters


# =============================================================================
# Mercator
# =============================================================================

class MercatorProjection(CoordinateProjection):
    """Base of the Mercator variants.

    Subclasses choose how the scale factor is obtained. Forward rejects
    latitudes beyond `GeodeticConstants.MERCATOR_LATITUDE_LIMIT`, where the
    northing grows without bound.
    """

    _latitude_limit = GeodeticConstants.in_radians(GeodeticConstants.MERCATOR_LATITUDE_LIMIT)

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._scale_factor = self._compute_scale_factor(parameters)
        self._radius = self._ellipsoid.semi_major_axis * self._scale_factor

    def _compute_scale_factor(self, parameters: ProjectionParameters) -> float:
        raise NotImplementedError

    def _check_latitude(self, coordinate: GeoCoordinate) -> None:
        if abs(coordinate.latitude) > self._latitude_limit:
            self._reject(coordinate, "is beyond the Mercator latitude limit")

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        self._check_latitude(coordinate)
        e = self._ellipsoid.eccentricity
        lat = coordinate.latitude
        e_sin = e * np.sin(lat)

        easting = self._false_easting + self._radius * (coordinate.longitude - self._longitude_of_origin)
        northing = self._false_northing + self._radius * np.log(
            np.tan(QUARTER_PI + lat / 2) * ((1 - e_sin) / (1 + e_sin)) ** (e / 2)
        )
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        t = np.exp((self._false_northing - coordinate.y) / self._radius)
        chi = HALF_PI - 2 * np.arctan(t)
        latitude = conformal_latitude_inverse(chi, self._ellipsoid.eccentricity)
        longitude = (coordinate.x - self._false_easting) / self._radius + self._longitude_of_origin
        return GeoCoordinate(latitude, longitude, coordinate.z)


class MercatorAProjection(MercatorProjection):
    """Mercator (variant A): scale factor given at the equator.

    The latitude of natural origin must be zero.
    """

    method = OperationMethod("EPSG::9804", "Mercator (variant A)")

    def _compute_scale_factor(self, parameters: ProjectionParameters) -> float:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN, default=0.0)
        if latitude_of_origin != 0.0:
            raise InvalidParameterError(
                f"{self._name}: latitude of natural origin must be 0, got {latitude_of_origin} rad"
            )
        return parameters.scalar(P.SCALE_FACTOR_AT_NATURAL_ORIGIN)


class MercatorBProjection(MercatorProjection):
    """Mercator (variant B): scale factor derived from a standard parallel."""

    method = OperationMethod("EPSG::9805", "Mercator (variant B)")

    def _compute_scale_factor(self, parameters: ProjectionParameters) -> float:
        parallel = parameters.angle(P.LATITUDE_OF_1ST_STANDARD_PARALLEL)
        e2 = self._ellipsoid.eccentricity_squared
        return float(np.cos(parallel) / np.sqrt(1 - e2 * np.sin(parallel) ** 2))


class PseudoMercatorProjection(MercatorProjection):
    """Popular Visualisation Pseudo Mercator.

    Spherical Mercator formulas evaluated with the semi-major axis as the
    radius of the sphere, on ellipsoidal coordinates.
    """

    method = OperationMethod("EPSG::1024", "Popular Visualisation Pseudo Mercator")

    def _compute_scale_factor(self, parameters: ProjectionParameters) -> float:
        latitude_of_origin = parameters.angle(P.LATITUDE_OF_NATURAL_ORIGIN, default=0.0)
        if latitude_of_origin != 0.0:
            raise InvalidParameterError(
                f"{self._name}: latitude of natural origin must be 0, got {latitude_of_origin} rad"
            )
        return 1.0

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        self._check_latitude(coordinate)
        easting = self._false_easting + self._radius * (coordinate.longitude - self._longitude_of_origin)
        northing = self._false_northing + self._radius * np.log(np.tan(QUARTER_PI + coordinate.latitude / 2))
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        d = (self._false_northing - coordinate.y) / self._radius
        latitude = HALF_PI - 2 * np.arctan(np.exp(d))
        longitude = (coordinate.x - self._false_easting) / self._radius + self._longitude_of_origin
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# Equidistant Cylindrical
# =============================================================================

class EquidistantCylindricalProjection(CoordinateProjection):
    """Equidistant Cylindrical (Plate Carrée family).

    The northing is the meridian arc, integrated with the composite
    Simpson rule; the reverse uses the rectifying-latitude series to the
    14th order in e. On a sphere the spherical formulas are used.
    """

    method = OperationMethod("EPSG::1028", "Equidistant Cylindrical")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._standard_parallel = parameters.angle(P.LATITUDE_OF_1ST_STANDARD_PARALLEL)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        self._parallel_radius = (
            self._ellipsoid.radius_of_prime_vertical_curvature(self._standard_parallel)
            * np.cos(self._standard_parallel)
        )

        e4, e6, e8 = e2 ** 2, e2 ** 3, e2 ** 4
        e10, e12, e14 = e2 ** 5, e2 ** 6, e2 ** 7
        self._rectifying_radius = a * (
            1 - e2 / 4 - 3 * e4 / 64 - 5 * e6 / 256 - 175 * e8 / 16384
            - 441 * e10 / 65536 - 4851 * e12 / 1048576 - 14157 * e14 / 4194304
        )
        n = self._ellipsoid.flattening / (2 - self._ellipsoid.flattening)
        self._inverse_coefficients = (
            3 * n / 2 - 27 * n ** 3 / 32 + 269 * n ** 5 / 512,
            21 * n ** 2 / 16 - 55 * n ** 4 / 32,
            151 * n ** 3 / 96 - 417 * n ** 5 / 128,
            1097 * n ** 4 / 512,
            8011 * n ** 5 / 2560,
        )

    def _meridian_arc(self, latitude: float) -> float:
        a = self._ellipsoid.semi_major_axis
        e2 = self._ellipsoid.eccentricity_squared
        return a * (1 - e2) * simpson(
            lambda phi: (1 - e2 * np.sin(phi) ** 2) ** -1.5,
            0.0, latitude, NumericConstants.SIMPSON_STEPS
        )

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        if self._ellipsoid.is_sphere:
            return self._forward_spherical(coordinate, self._ellipsoid.semi_major_axis)
        easting = self._false_easting + self._parallel_radius * (coordinate.longitude - self._longitude_of_origin)
        northing = self._false_northing + self._meridian_arc(coordinate.latitude)
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        if self._ellipsoid.is_sphere:
            return self._reverse_spherical(coordinate, self._ellipsoid.semi_major_axis)
        mu = (coordinate.y - self._false_northing) / self._rectifying_radius
        latitude = mu + sum(
            c * np.sin(2 * (i + 1) * mu) for i, c in enumerate(self._inverse_coefficients)
        )
        longitude = self._longitude_of_origin + (coordinate.x - self._false_easting) / self._parallel_radius
        return GeoCoordinate(latitude, longitude, coordinate.z)

    def _forward_spherical(self, coordinate: GeoCoordinate, radius: float) -> Coordinate:
        easting = self._false_easting + radius * np.cos(self._standard_parallel) * (
            coordinate.longitude - self._longitude_of_origin)
        northing = self._false_northing + radius * coordinate.latitude
        return Coordinate(easting, northing, coordinate.height)

    def _reverse_spherical(self, coordinate: Coordinate, radius: float) -> GeoCoordinate:
        latitude = (coordinate.y - self._false_northing) / radius
        longitude = self._longitude_of_origin + (coordinate.x - self._false_easting) / (
            radius * np.cos(self._standard_parallel))
        return GeoCoordinate(latitude, longitude, coordinate.z)


class EquidistantCylindricalSphericalProjection(EquidistantCylindricalProjection):
    """Equidistant Cylindrical (Spherical), on the authalic sphere."""

    method = OperationMethod("EPSG::1029", "Equidistant Cylindrical (Spherical)")

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        return self._forward_spherical(coordinate, self._ellipsoid.radius_of_authalic_sphere)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        return self._reverse_spherical(coordinate, self._ellipsoid.radius_of_authalic_sphere)


# =============================================================================
# Lambert Cylindrical Equal Area
# =============================================================================

class LambertCylindricalEqualAreaProjection(CoordinateProjection):
    """Lambert Cylindrical Equal Area (ellipsoidal case).

    The reverse iterates the latitude from the authalic term q until
    successive estimates agree within the tolerance.
    """

    method = OperationMethod("EPSG::9835", "Lambert Cylindrical Equal Area")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._standard_parallel = parameters.angle(P.LATITUDE_OF_1ST_STANDARD_PARALLEL)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        e2 = self._ellipsoid.eccentricity_squared
        self._scale_factor = float(
            np.cos(self._standard_parallel) / np.sqrt(1 - e2 * np.sin(self._standard_parallel) ** 2)
        )
        self._q_pole = authalic_q(HALF_PI, self._ellipsoid.eccentricity)

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        a = self._ellipsoid.semi_major_axis
        q = authalic_q(coordinate.latitude, self._ellipsoid.eccentricity)
        easting = self._false_easting + a * self._scale_factor * (coordinate.longitude - self._longitude_of_origin)
        northing = self._false_northing + a * q / (2 * self._scale_factor)
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        a = self._ellipsoid.semi_major_axis
        e = self._ellipsoid.eccentricity
        e2 = e * e
        q = 2 * (coordinate.y - self._false_northing) * self._scale_factor / a
        longitude = self._longitude_of_origin + (coordinate.x - self._false_easting) / (a * self._scale_factor)

        if abs(abs(q) - self._q_pole) <= self._tolerance:
            return GeoCoordinate(np.copysign(HALF_PI, q), longitude, coordinate.z)
        if abs(q) > self._q_pole:
            self._reject(coordinate, "lies beyond the pole")
        if e == 0:
            return GeoCoordinate(np.arcsin(q / 2), longitude, coordinate.z)

        def step(phi: float) -> float:
            sin_phi = np.sin(phi)
            one_minus = 1 - e2 * sin_phi ** 2
            return phi + one_minus ** 2 / (2 * np.cos(phi)) * (
                q / (1 - e2) - sin_phi / one_minus
                + 1 / (2 * e) * np.log((1 - e * sin_phi) / (1 + e * sin_phi))
            )

        latitude = iterate_until_converged(
            step, np.arcsin(q / 2), self._name, self._tolerance, self._iteration_limit
        )
        return GeoCoordinate(latitude, longitude, coordinate.z)


class LambertCylindricalEqualAreaSphericalProjection(CoordinateProjection):
    """Lambert Cylindrical Equal Area (Spherical), on the authalic sphere."""

    method = OperationMethod("EPSG::9834", "Lambert Cylindrical Equal Area (Spherical)")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._standard_parallel = parameters.angle(P.LATITUDE_OF_1ST_STANDARD_PARALLEL)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)
        self._radius = self._ellipsoid.radius_of_authalic_sphere

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        cos_parallel = np.cos(self._standard_parallel)
        easting = self._false_easting + self._radius * (coordinate.longitude - self._longitude_of_origin) * cos_parallel
        northing = self._false_northing + self._radius * np.sin(coordinate.latitude) / cos_parallel
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        cos_parallel = np.cos(self._standard_parallel)
        sine = (coordinate.y - self._false_northing) * cos_parallel / self._radius
        if abs(sine) > 1 + self._tolerance:
            self._reject(coordinate, "lies beyond the pole")
        latitude = np.arcsin(np.clip(sine, -1.0, 1.0))
        longitude = self._longitude_of_origin + (coordinate.x - self._false_easting) / (self._radius * cos_parallel)
        return GeoCoordinate(latitude, longitude, coordinate.z)


# =============================================================================
# Sinusoidal
# =============================================================================

class SinusoidalProjection(CoordinateProjection):
    """Sinusoidal (Sanson-Flamsteed) projection.

    Equal-area; the central meridian and every parallel are true to
    scale. Sphere and ellipsoid take separate formulas.
    """

    method = OperationMethod("ESRI::53008", "Sinusoidal")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_NATURAL_ORIGIN)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        a = self._ellipsoid.semi_major_axis
        lat = coordinate.latitude
        delta = coordinate.longitude - self._longitude_of_origin
        if self._ellipsoid.is_sphere:
            x = a * delta * np.cos(lat)
            y = a * lat
        else:
            e2 = self._ellipsoid.eccentricity_squared
            x = a * delta * np.cos(lat) / np.sqrt(1 - e2 * np.sin(lat) ** 2)
            y = meridian_arc(lat, a, e2)
        return Coordinate(self._false_easting + x, self._false_northing + y, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        a = self._ellipsoid.semi_major_axis
        x = coordinate.x - self._false_easting
        y = coordinate.y - self._false_northing
        if self._ellipsoid.is_sphere:
            latitude = y / a
            cos_lat = np.cos(latitude)
            scale = a * cos_lat
        else:
            e2 = self._ellipsoid.eccentricity_squared
            latitude = footpoint_latitude(y, a, e2)
            cos_lat = np.cos(latitude)
            scale = a * cos_lat / np.sqrt(1 - e2 * np.sin(latitude) ** 2)
        if abs(latitude) > HALF_PI + self._tolerance:
            self._reject(coordinate, "lies beyond the pole")
        if abs(cos_lat) < self._tolerance:
            return GeoCoordinate(np.copysign(HALF_PI, latitude), self._longitude_of_origin, coordinate.z)
        return GeoCoordinate(latitude, self._longitude_of_origin + x / scale, coordinate.z)
