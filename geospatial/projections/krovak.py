"""
Krovak Oblique Conic Conformal Projections.

Krovak and Krovak Modified, each in the south-west orientated form used
by S-JTSK (westing, southing) and in the north orientated form
(easting, northing), which negates both axes.

Krovak Modified adds a ten-coefficient polynomial correction, centred on an
evaluation point, to the plain Krovak grid coordinates. The correction
is evaluated from the plain coordinates in the forward direction and
from the corrected coordinates in the reverse direction.

References
----------
- IOGP Publication 373-7-2, Section 3.1.4
"""

from typing import Tuple
import numpy as np

from common.types import Coordinate, GeoCoordinate
from geospatial.numerics import QUARTER_PI, iterate_fixed
from geospatial.projections.base import CoordinateProjection, OperationMethod
from geospatial.projections.parameters import ParameterKind as P, ProjectionParameters

KROVAK_ITERATIONS = 3

CORRECTION_COEFFICIENTS = (P.C1, P.C2, P.C3, P.C4, P.C5, P.C6, P.C7, P.C8, P.C9, P.C10)


class KrovakProjection(CoordinateProjection):
    """Krovak.

    Output is (westing, southing) as the x and y of the coordinate.

    Derived Constants
    -----------------
    _A, _B : float
        Constants of the conformal sphere.
    _t0 : float
        Isometric constant of the projection centre.
    _n, _r0 : float
        Cone constant and radius of the pseudo standard parallel.
    """

    method = OperationMethod("EPSG::9819", "Krovak")

    # +1 for westing/southing; -1 for easting/northing
    axis_sign = 1.0

    def _initialize(self, parameters: ProjectionParameters) -> None:
        self._latitude_of_centre = parameters.angle(P.LATITUDE_OF_PROJECTION_CENTRE)
        self._longitude_of_origin = parameters.angle(P.LONGITUDE_OF_ORIGIN)
        self._cone_axis_colatitude = parameters.angle(P.CO_LATITUDE_OF_CONE_AXIS)
        self._pseudo_parallel = parameters.angle(P.LATITUDE_OF_PSEUDO_STANDARD_PARALLEL)
        self._scale_factor = parameters.scalar(P.SCALE_FACTOR_ON_PSEUDO_STANDARD_PARALLEL)
        self._false_easting = parameters.length(P.FALSE_EASTING)
        self._false_northing = parameters.length(P.FALSE_NORTHING)

        a = self._ellipsoid.semi_major_axis
        e = self._ellipsoid.eccentricity
        e2 = e * e
        lat_c = self._latitude_of_centre
        e_sin = e * np.sin(lat_c)

        self._A = a * np.sqrt(1 - e2) / (1 - e2 * np.sin(lat_c) ** 2)
        self._B = float(np.sqrt(1 + e2 * np.cos(lat_c) ** 4 / (1 - e2)))
        gamma0 = np.arcsin(np.sin(lat_c) / self._B)
        self._t0 = float(
            np.tan(QUARTER_PI + gamma0 / 2) * ((1 + e_sin) / (1 - e_sin)) ** (e * self._B / 2)
            / np.tan(QUARTER_PI + lat_c / 2) ** self._B
        )
        self._n = float(np.sin(self._pseudo_parallel))
        self._r0 = self._scale_factor * self._A / np.tan(self._pseudo_parallel)
        self._pseudo_term = np.tan(QUARTER_PI + self._pseudo_parallel / 2) ** self._n

    def _project(self, latitude: float, longitude: float) -> Tuple[float, float]:
        """Southing and westing without false origin: (Xp, Yp)."""
        e = self._ellipsoid.eccentricity
        B = self._B
        alpha = self._cone_axis_colatitude
        e_sin = e * np.sin(latitude)

        U = 2 * (np.arctan(self._t0 * np.tan(latitude / 2 + QUARTER_PI) ** B
                           / ((1 + e_sin) / (1 - e_sin)) ** (e * B / 2)) - QUARTER_PI)
        V = B * (self._longitude_of_origin - longitude)
        T = np.arcsin(np.cos(alpha) * np.sin(U) + np.sin(alpha) * np.cos(U) * np.cos(V))
        D = np.arcsin(np.cos(U) * np.sin(V) / np.cos(T))
        theta = self._n * D
        r = self._r0 * self._pseudo_term / np.tan(T / 2 + QUARTER_PI) ** self._n
        return r * np.cos(theta), r * np.sin(theta)

    def _unproject(self, xp: float, yp: float) -> Tuple[float, float]:
        """Latitude and longitude from (Xp, Yp)."""
        e = self._ellipsoid.eccentricity
        B = self._B
        alpha = self._cone_axis_colatitude

        r = np.hypot(xp, yp)
        theta = np.arctan2(yp, xp)
        D = theta / self._n
        T = 2 * (np.arctan((self._r0 / r) ** (1 / self._n) * np.tan(QUARTER_PI + self._pseudo_parallel / 2))
                 - QUARTER_PI)
        U = np.arcsin(np.cos(alpha) * np.sin(T) - np.sin(alpha) * np.cos(T) * np.cos(D))
        V = np.arcsin(np.cos(T) * np.sin(D) / np.cos(U))
        longitude = self._longitude_of_origin - V / B

        base = self._t0 ** (-1 / B) * np.tan(U / 2 + QUARTER_PI) ** (1 / B)

        def step(phi: float) -> float:
            e_sin = e * np.sin(phi)
            return 2 * (np.arctan(base * ((1 + e_sin) / (1 - e_sin)) ** (e / 2)) - QUARTER_PI)

        return iterate_fixed(step, U, KROVAK_ITERATIONS), longitude

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        xp, yp = self._project(coordinate.latitude, coordinate.longitude)
        westing = yp + self._false_easting
        southing = xp + self._false_northing
        return Coordinate(self.axis_sign * westing, self.axis_sign * southing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        westing = self.axis_sign * coordinate.x
        southing = self.axis_sign * coordinate.y
        if westing == self._false_easting and southing == self._false_northing:
            self._reject(coordinate, "is the apex of the cone")
        latitude, longitude = self._unproject(southing - self._false_northing, westing - self._false_easting)
        return GeoCoordinate(latitude, longitude, coordinate.z)


class KrovakNorthOrientatedProjection(KrovakProjection):
    """Krovak (North Orientated): easting = -westing, northing = -southing."""

    method = OperationMethod("EPSG::1041", "Krovak (North Orientated)")
    axis_sign = -1.0


class KrovakModifiedProjection(KrovakProjection):
    """Krovak Modified.

    Notes
    -----
    With Xr = Xp - X0 and Yr = Yp - Y0:

    dX = C1 + C3Xr - C4Yr - 2C6XrYr + C5(Xr² - Yr²) + C7Xr(Xr² - 3Yr²)
         - C8Yr(3Xr² - Yr²) + 4C9XrYr(Xr² - Yr²) + C10(Xr⁴ + Yr⁴ - 6Xr²Yr²)
    dY = C2 + C3Yr + C4Xr + 2C5XrYr + C6(Xr² - Yr²) + C8Xr(Xr² - 3Yr²)
         + C7Yr(3Xr² - Yr²) - 4C10XrYr(Xr² - Yr²) + C9(Xr⁴ + Yr⁴ - 6Xr²Yr²)

    Southing = Xp - dX + FN, westing = Yp - dY + FE.
    """

    method = OperationMethod("EPSG::1042", "Krovak Modified")

    def _initialize(self, parameters: ProjectionParameters) -> None:
        super()._initialize(parameters)
        self._evaluation_point = (
            parameters.length(P.ORDINATE_1_OF_EVALUATION_POINT),
            parameters.length(P.ORDINATE_2_OF_EVALUATION_POINT),
        )
        self._coefficients = tuple(parameters.scalar(kind) for kind in CORRECTION_COEFFICIENTS)

    def correction(self, xp: float, yp: float) -> Tuple[float, float]:
        """The (dX, dY) correction at plain Krovak coordinates (Xp, Yp)."""
        C1, C2, C3, C4, C5, C6, C7, C8, C9, C10 = self._coefficients
        xr = xp - self._evaluation_point[0]
        yr = yp - self._evaluation_point[1]
        xr2, yr2 = xr * xr, yr * yr
        quartic = xr2 * xr2 + yr2 * yr2 - 6 * xr2 * yr2

        dX = (C1 + C3 * xr - C4 * yr - 2 * C6 * xr * yr + C5 * (xr2 - yr2)
              + C7 * xr * (xr2 - 3 * yr2) - C8 * yr * (3 * xr2 - yr2)
              + 4 * C9 * xr * yr * (xr2 - yr2) + C10 * quartic)
        dY = (C2 + C3 * yr + C4 * xr + 2 * C5 * xr * yr + C6 * (xr2 - yr2)
              + C8 * xr * (xr2 - 3 * yr2) + C7 * yr * (3 * xr2 - yr2)
              - 4 * C10 * xr * yr * (xr2 - yr2) + C9 * quartic)
        return dX, dY

    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        xp, yp = self._project(coordinate.latitude, coordinate.longitude)
        dX, dY = self.correction(xp, yp)
        westing = yp - dY + self._false_easting
        southing = xp - dX + self._false_northing
        return Coordinate(self.axis_sign * westing, self.axis_sign * southing, coordinate.height)

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        x = self.axis_sign * coordinate.y - self._false_northing
        y = self.axis_sign * coordinate.x - self._false_easting
        dX, dY = self.correction(x, y)
        xp, yp = x + dX, y + dY
        if xp == 0 and yp == 0:
            self._reject(coordinate, "is the apex of the cone")
        latitude, longitude = self._unproject(xp, yp)
        return GeoCoordinate(latitude, longitude, coordinate.z)


class KrovakModifiedNorthOrientatedProjection(KrovakModifiedProjection):
    """Krovak Modified (North Orientated)."""

    method = OperationMethod("EPSG::1043", "Krovak Modified (North Orientated)")
    axis_sign = -1.0
