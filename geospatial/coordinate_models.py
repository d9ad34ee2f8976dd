"""
Ellipsoid Model for Projection Formulas.

This module implements the reference ellipsoid consumed by every
projection: its defining parameters, the derived eccentricities and the
radii of curvature as functions of latitude.

Scientific Context
------------------
Domain: Geodesy, Earth geometry
Model: Oblate ellipsoid of revolution (a sphere when f = 0)

References
----------
- NIMA TR8350.2: WGS84 parameters
- IOGP Publication 373-7-2, Section 1.2
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS PP 1395.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Union
import numpy as np
from numpy.typing import NDArray

from common.constants import ELLIPSOID_DEFINITIONS
from common.units import units

ArrayLike = Union[float, NDArray[np.float64]]


@dataclass(frozen=True)
class Ellipsoid:
    """A reference ellipsoid.

    Attributes
    ----------
    name : str
        Identifier for the ellipsoid.
    semi_major_axis : float
        Semi-major axis (equatorial radius) in `unit`.
    inverse_flattening : float
        1/f. Zero denotes a sphere.
    unit : str
        Length unit of the semi-major axis and of every projected
        coordinate computed on this ellipsoid.

    Derived Parameters
    ------------------
    flattening, semi_minor_axis, eccentricity, eccentricity_squared,
    second_eccentricity_squared, is_sphere.
    """
    name: str
    semi_major_axis: float
    inverse_flattening: float
    unit: str = "meter"

    def __post_init__(self):
        if self.semi_major_axis <= 0:
            raise ValueError(f"Semi-major axis must be positive, got {self.semi_major_axis}")
        if self.inverse_flattening != 0 and self.inverse_flattening <= 1:
            raise ValueError(f"Inverse flattening {self.inverse_flattening} is not a valid ellipsoid")

    @classmethod
    def sphere(cls, radius: float, name: str = "Sphere", unit: str = "meter") -> "Ellipsoid":
        """Create a sphere of the given radius."""
        return cls(name, radius, 0.0, unit)

    @property
    def a(self) -> float:
        """Semi-major axis."""
        return self.semi_major_axis

    @property
    def flattening(self) -> float:
        """Flattening f = (a - b) / a."""
        return 0.0 if self.inverse_flattening == 0 else 1.0 / self.inverse_flattening

    @property
    def semi_minor_axis(self) -> float:
        """Semi-minor axis b."""
        return self.semi_major_axis * (1 - self.flattening)

    @property
    def eccentricity_squared(self) -> float:
        """First eccentricity squared: e² = f(2 - f)."""
        return self.flattening * (2 - self.flattening)

    @property
    def eccentricity(self) -> float:
        """First eccentricity e."""
        return float(np.sqrt(self.eccentricity_squared))

    @property
    def second_eccentricity_squared(self) -> float:
        """Second eccentricity squared: e'² = e² / (1 - e²)."""
        return self.eccentricity_squared / (1 - self.eccentricity_squared)

    @property
    def is_sphere(self) -> bool:
        """Whether the eccentricity is zero."""
        return self.flattening == 0.0

    def radius_of_prime_vertical_curvature(self, latitude: ArrayLike) -> ArrayLike:
        """Radius of curvature in the prime vertical.

        Notes
        -----
        ν = a / (1 - e² sin²φ)^(1/2)
        """
        return radius_of_curvature_prime_vertical(latitude, self)

    def radius_of_meridian_curvature(self, latitude: ArrayLike) -> ArrayLike:
        """Radius of curvature in the meridian.

        Notes
        -----
        ρ = a(1 - e²) / (1 - e² sin²φ)^(3/2)
        """
        return radius_of_curvature_meridian(latitude, self)

    def radius_of_conformal_sphere(self, latitude: ArrayLike) -> ArrayLike:
        """Radius of the conformal sphere at a latitude: sqrt(ρν)."""
        return np.sqrt(
            self.radius_of_meridian_curvature(latitude)
            * self.radius_of_prime_vertical_curvature(latitude)
        )

    @cached_property
    def radius_of_authalic_sphere(self) -> float:
        """Radius of the sphere with the surface area of the ellipsoid.

        Notes
        -----
        R = a sqrt(qP / 2), qP = 1 - ((1 - e²)/(2e)) ln((1 - e)/(1 + e))
        """
        if self.is_sphere:
            return self.semi_major_axis
        e = self.eccentricity
        q_p = 1 - (1 - e**2) / (2 * e) * np.log((1 - e) / (1 + e))
        return float(self.semi_major_axis * np.sqrt(q_p / 2))

    def to_unit(self, unit: str) -> "Ellipsoid":
        """Return the same ellipsoid with its axis expressed in `unit`."""
        axis = units.to_base(units.quantity(self.semi_major_axis, self.unit), unit)
        return Ellipsoid(self.name, axis, self.inverse_flattening, unit)


def radius_of_curvature_meridian(
    latitude_rad: ArrayLike,
    ellipsoid: Ellipsoid
) -> ArrayLike:
    """Compute the radius of curvature in the meridian plane.

    This is the radius of curvature for north-south motion along
    a meridian (line of constant longitude).

    Parameters
    ----------
    latitude_rad : float or ndarray
        Geodetic latitude in radians.
    ellipsoid : Ellipsoid
        Reference ellipsoid.

    Returns
    -------
    float or ndarray
        Radius of curvature ρ in the ellipsoid's unit.

    Notes
    -----
    ρ = a(1 - e²) / (1 - e² sin²φ)^(3/2)

    On WGS84 at the equator (φ=0): ρ ≈ 6,335,439 m
    At the poles (φ=±90°): ρ ≈ 6,399,594 m
    """
    sin_lat = np.sin(latitude_rad)
    denominator = (1 - ellipsoid.eccentricity_squared * sin_lat**2) ** 1.5
    return ellipsoid.a * (1 - ellipsoid.eccentricity_squared) / denominator


def radius_of_curvature_prime_vertical(
    latitude_rad: ArrayLike,
    ellipsoid: Ellipsoid
) -> ArrayLike:
    """Compute the radius of curvature in the prime vertical.

    This is the radius of curvature for east-west motion along
    a parallel (line of constant latitude).

    Parameters
    ----------
    latitude_rad : float or ndarray
        Geodetic latitude in radians.
    ellipsoid : Ellipsoid
        Reference ellipsoid.

    Returns
    -------
    float or ndarray
        Radius of curvature ν in the ellipsoid's unit.

    Notes
    -----
    ν = a / (1 - e² sin²φ)^(1/2)

    On WGS84 at the equator (φ=0): ν = a = 6,378,137 m
    At the poles (φ=±90°): ν ≈ 6,399,594 m
    """
    sin_lat = np.sin(latitude_rad)
    denominator = np.sqrt(1 - ellipsoid.eccentricity_squared * sin_lat**2)
    return ellipsoid.a / denominator


class Ellipsoids:
    """Catalog of reference ellipsoids.

    Each attribute is an `Ellipsoid` in metres, built from
    `common.constants.ELLIPSOID_DEFINITIONS`.
    """

    WGS84: Ellipsoid
    GRS1980: Ellipsoid
    BESSEL1841: Ellipsoid
    CLARKE1866: Ellipsoid
    CLARKE1880_IGN: Ellipsoid
    INTERNATIONAL1924: Ellipsoid
    AIRY1830: Ellipsoid
    KRASSOWSKY1940: Ellipsoid
    EVEREST1830_1967: Ellipsoid

    @classmethod
    def by_name(cls, name: str) -> Ellipsoid:
        """Look an ellipsoid up by key or display name (case-insensitive)."""
        wanted = name.replace(" ", "").upper()
        for key, definition in ELLIPSOID_DEFINITIONS.items():
            if wanted in (key, definition.name.replace(" ", "").upper()):
                return getattr(cls, key)
        raise KeyError(f"Unknown ellipsoid '{name}'")


for _key, _definition in ELLIPSOID_DEFINITIONS.items():
    setattr(Ellipsoids, _key, Ellipsoid(
        name=_definition.name,
        semi_major_axis=_definition.semi_major_axis,
        inverse_flattening=_definition.inverse_flattening,
    ))

# WGS84 ellipsoid - the reference for the universal grids
WGS84Ellipsoid = Ellipsoids.WGS84
