"""
Oblique Cylindrical Projections.

Hotine Oblique Mercator (variants A and B) and Laborde Oblique Mercator.

Hotine maps the ellipsoid conformally onto the aposphere and projects it
on a cylinder tangent along the initial line. The two variants differ
only in where the u axis starts: at the natural origin (A) or at the
projection centre (B).

Laborde uses a complex-valued series; its reverse solves the cubic
H + G·H³ = H0 by fixed-point iteration in the complex plane.

References
----------
- IOGP Publication 373-7-2, Sections 3.3.1 and 3.3.2
"""

import numpy as np

from common.exceptions import ConvergenceError, InvalidParameterError
from common.constants import NumericConstants
from common.logging_config import get_logger
from common.types import Coordinate, GeoCoordinate
from geospatial.numerics import (
    HALF_PI,
    QUARTER_PI,
    conformal_latitude_inverse,
    conformal_t,
    iterate_until_converged,
)
from geospatial.projections.base import CoordinateProjection, OperationMethod
from geospatial.projections.parameters import ParameterKind as P, ProjectionParameters

logger = get_logger(__name__)


def _aposphere_constant(latitude: float, e2: float) -> float:
    """B = sqrt(1 + e² cos⁴φc / (1 - e²))"""
    return float(np.sqrt(1 + e2 * np.cos(latitude) ** 4 / (1 - e2)))


# =============================================================================
# Hotine Oblique Mercator
# =============================================================================

class HotineObliqueMercatorProjection(CoordinateProjection):
    """Base of the Hotine Oblique Mercator variants.

    Derived Constants
    -----------------
    _A, _B, _H : float
        Aposphere constants.
    _gamma0 : float
        Azimuth of the initial line at the equator of the aposphere.
    _lambda0 : float
        Longitude of the natural origin.
    _u_offset : float
        Offset of the u axis: 0 for variant A, uc for variant B.
    """

    def _read_false_origin(self, parameters: ProjectionParameters) -> None:
        raise NotImplementedError

    def _u_origin(self, uc: float) -> float:
        raise NotImplementedError

    def _initialize(self, parameters: ProjectionParameters) -> None:
        lat_c = parameters.angle(P.LATITUDE_OF_PROJECTION_CENTRE)
        lon_c = parameters.angle(P.LONGITUDE_OF_PROJECTION_CENTRE)
        azimuth = parameters.angle(P.AZIMUTH_OF_INITIAL_LINE)
        self._gamma_c = parameters.angle(P.ANGLE_FROM_RECTIFIED_TO_SKEW_GRID)
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_ON_INITIAL_LINE)
        self._read_false_origin(parameters)
        if abs(abs(lat_c) - HALF_PI) <= self._tolerance:
            raise InvalidParameterError(f"{self._name}: latitude of projection centre must not be a pole")

        a = self._ellipsoid.semi_major_axis
        e = self._ellipsoid.eccentricity
        e2 = e * e
        sin_c = np.sin(lat_c)
        sign_c = 1.0 if lat_c >= 0 else -1.0

        self._B = _aposphere_constant(lat_c, e2)
        self._A = a * self._B * self._scale_factor * np.sqrt(1 - e2) / (1 - e2 * sin_c ** 2)
        t0 = conformal_t(lat_c, e)
        D = self._B * np.sqrt(1 - e2) / (np.cos(lat_c) * np.sqrt(1 - e2 * sin_c ** 2))
        D2_minus_1 = max(D * D - 1, 0.0)
        F = D + np.sqrt(D2_minus_1) * sign_c
        self._H = F * t0 ** self._B
        G = (F - 1 / F) / 2
        self._gamma0 = float(np.arcsin(np.sin(azimuth) / D))
        self._lambda0 = float(lon_c - np.arcsin(G * np.tan(self._gamma0)) / self._B)

        uc = (self._A / self._B) * np.arctan2(np.sqrt(D2_minus_1), np.cos(azimuth)) * sign_c
        self._u_offset = float(self._u_origin(uc))

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        if abs(coordinate.latitude) >= HALF_PI:
            self._reject(coordinate, "is a pole")
        A, B = self._A, self._B
        t = conformal_t(coordinate.latitude, self._ellipsoid.eccentricity)
        Q = self._H / t ** B
        S = (Q - 1 / Q) / 2
        T = (Q + 1 / Q) / 2
        delta = B * (coordinate.longitude - self._lambda0)
        V = np.sin(delta)
        U = (-V * np.cos(self._gamma0) + S * np.sin(self._gamma0)) / T
        if abs(U) >= 1:
            self._reject(coordinate, "projects to infinity")

        v = A * np.log((1 - U) / (1 + U)) / (2 * B)
        u = A * np.arctan2(S * np.cos(self._gamma0) + V * np.sin(self._gamma0), np.cos(delta)) / B
        u -= self._u_offset

        easting = v * np.cos(self._gamma_c) + u * np.sin(self._gamma_c) + self._false_easting
        northing = u * np.cos(self._gamma_c) - v * np.sin(self._gamma_c) + self._false_northing
        return Coordinate(easting, northing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        A, B = self._A, self._B
        dx = coordinate.x - self._false_easting
        dy = coordinate.y - self._false_northing
        v = dx * np.cos(self._gamma_c) - dy * np.sin(self._gamma_c)
        u = dy * np.cos(self._gamma_c) + dx * np.sin(self._gamma_c) + self._u_offset

        Q = np.exp(-B * v / A)
        S = (Q - 1 / Q) / 2
        T = (Q + 1 / Q) / 2
        V = np.sin(B * u / A)
        U = (V * np.cos(self._gamma0) + S * np.sin(self._gamma0)) / T
        if abs(U) >= 1:
            return GeoCoordinate(float(np.copysign(HALF_PI, U)), self._lambda0, coordinate.z)

        t = (self._H / np.sqrt((1 + U) / (1 - U))) ** (1 / B)
        latitude = conformal_latitude_inverse(HALF_PI - 2 * np.arctan(t), self._ellipsoid.eccentricity)
        longitude = self._lambda0 - np.arctan2(S * np.cos(self._gamma0) - V * np.sin(self._gamma0),
                                               np.cos(B * u / A)) / B
        return GeoCoordinate(latitude, longitude, coordinate.z)


class HotineObliqueMercatorAProjection(HotineObliqueMercatorProjection):
    """Hotine Oblique Mercator (variant A): false origin at the natural
    origin of the aposphere."""

    method = OperationMethod("EPSG::9812", "Hotine Oblique Mercator (variant A)")

    def _read_false_origin(self, parameters: ProjectionParameters) -> None:
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

    def _u_origin(self, uc: float) -> float:
        return 0.0


class HotineObliqueMercatorBProjection(HotineObliqueMercatorProjection):
    """Hotine Oblique Mercator (variant B): false origin at the projection
    centre."""

    method = OperationMethod("EPSG::9815", "Hotine Oblique Mercator (variant B)")

    def _read_false_origin(self, parameters: ProjectionParameters) -> None:
        self._false_easting = parameters.length(P.EASTING_AT_PROJECTION_CENTRE)
        self._false_northing = parameters.length(P.NORTHING_AT_PROJECTION_CENTRE)

    def _u_origin(self, uc: float) -> float:
        return uc


# =============================================================================
# Laborde Oblique Mercator
# =============================================================================

class LabordeObliqueMercatorProjection(CoordinateProjection):
    """Laborde Oblique Mercator (Madagascar grid).

    Notes
    -----
    Forward: E + iN from H + G·H³, with G = (1 - cos 2αc)/12 + i sin 2αc/12.
    Reverse: H solved from H0 = (N - FN)/R + i(E - FE)/R by iterating
    H ← (H0 + 2GH³)/(3GH² + 1) until the real part of the residual is below
    `NumericConstants.LABORDE_EPSILON`.
    """

    method = OperationMethod("EPSG::9813", "Laborde Oblique Mercator")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_centre = parameters.angle(P.LATITUDE_OF_PROJECTION_CENTRE)
        self._longitude_of_centre = parameters.angle(P.LONGITUDE_OF_PROJECTION_CENTRE)
        azimuth = parameters.angle(P.AZIMUTH_OF_INITIAL_LINE)
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_ON_INITIAL_LINE)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        a = self._ellipsoid.semi_major_axis
        e = self._ellipsoid.eccentricity
        e2 = e * e
        lat_c = self._latitude_of_centre
        self._B = _aposphere_constant(lat_c, e2)
        self._lat_s = float(np.arcsin(np.sin(lat_c) / self._B))
        self._R = a * self._scale_factor * np.sqrt(1 - e2) / (1 - e2 * np.sin(lat_c) ** 2)
        self._C = float(np.log(np.tan(QUARTER_PI + self._lat_s / 2)) - self._B * self._isometric(lat_c))
        self._G = complex((1 - np.cos(2 * azimuth)) / 12, np.sin(2 * azimuth) / 12)
        self._epsilon = NumericConstants.LABORDE_EPSILON

    def _isometric(self, latitude: float) -> float:
        e = self._ellipsoid.eccentricity
        e_sin = e * np.sin(latitude)
        return np.log(np.tan(QUARTER_PI + latitude / 2) * ((1 - e_sin) / (1 + e_sin)) ** (e / 2))

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        L = self._B * (coordinate.longitude - self._longitude_of_centre)
        q = self._C + self._B * self._isometric(coordinate.latitude)
        P_ = 2 * np.arctan(np.exp(q)) - HALF_PI

        U = np.cos(P_) * np.cos(L) * np.cos(self._lat_s) + np.sin(P_) * np.sin(self._lat_s)
        V = np.cos(P_) * np.cos(L) * np.sin(self._lat_s) - np.sin(P_) * np.cos(self._lat_s)
        W = np.cos(P_) * np.sin(L)
        d = np.hypot(U, V)
        if abs(d) > self._epsilon:
            L_oblique = 2 * np.arctan(V / (U + d))
            P_oblique = np.arctan(W / d)
        else:
            L_oblique = 0.0
            P_oblique = np.sign(W) * HALF_PI
        if abs(P_oblique) >= HALF_PI:
            self._reject(coordinate, "projects to infinity")

        H = complex(-L_oblique, np.log(np.tan(QUARTER_PI + P_oblique / 2)))
        result = H + self._G * H ** 3
        return Coordinate(self._false_easting + self._R * result.imag,
                          self._false_northing + self._R * result.real, coordinate.height)

    def _solve_cubic(self, h0: complex) -> complex:
        G = self._G
        h = h0 / (h0 + G * h0 ** 3) if h0 != 0 else 0j
        for _ in range(self._iteration_limit):
            if abs((h0 - h - G * h ** 3).real) <= self._epsilon:
                return h
            h = (h0 + 2 * G * h ** 3) / (3 * G * h ** 2 + 1)
        residual = abs((h0 - h - G * h ** 3).real)
        logger.warning(f"{self._name}: iteration ceiling {self._iteration_limit} reached, residual {residual:.3e}")
        raise ConvergenceError(self._name, self._iteration_limit, residual)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        e = self._ellipsoid.eccentricity
        h0 = complex((coordinate.y - self._false_northing) / self._R, (coordinate.x - self._false_easting) / self._R)
        h = self._solve_cubic(h0)

        L_oblique = -h.real
        P_oblique = 2 * np.arctan(np.exp(h.imag)) - HALF_PI
        U = (np.cos(P_oblique) * np.cos(L_oblique) * np.cos(self._lat_s)
             + np.cos(P_oblique) * np.sin(L_oblique) * np.sin(self._lat_s))
        V = np.sin(P_oblique)
        W = (np.cos(P_oblique) * np.cos(L_oblique) * np.sin(self._lat_s)
             - np.cos(P_oblique) * np.sin(L_oblique) * np.cos(self._lat_s))
        d = np.hypot(U, V)
        if abs(d) > self._epsilon:
            L = 2 * np.arctan(V / (U + d))
            P_ = np.arctan(W / d)
        else:
            L = 0.0
            P_ = np.sign(W) * HALF_PI

        longitude = self._longitude_of_centre + L / self._B
        q = (np.log(np.tan(QUARTER_PI + P_ / 2)) - self._C) / self._B

        def step(phi: float) -> float:
            e_sin = e * np.sin(phi)
            return 2 * np.arctan(((1 + e_sin) / (1 - e_sin)) ** (e / 2) * np.exp(q)) - HALF_PI

        latitude = iterate_until_converged(
            step, 2 * np.arctan(np.exp(q)) - HALF_PI, self._name, self._epsilon, self._iteration_limit
        )
        return GeoCoordinate(latitude, longitude, coordinate.z)
