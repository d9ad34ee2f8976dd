"""
Geodetic and Numeric Constants for Coordinate Projections.

This module provides the constants with their provenance. Ellipsoid
defining parameters are exact by definition; derived quantities are
computed by `geospatial.coordinate_models.Ellipsoid`.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- Projection constants: IOGP Publication 373-7-2 (Guidance Note 7-2)
- Grid systems: NGA.SIG.0012_2.0.0_UTMUPS
"""

from dataclasses import dataclass
from typing import Dict, Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A defined constant with provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    unit : str
        The unit of the constant (pint-parsable).
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    unit: str
    source: str
    description: str


@dataclass(frozen=True)
class EllipsoidDefinition:
    """Defining parameters of a reference ellipsoid.

    Attributes
    ----------
    name : str
        Ellipsoid name.
    semi_major_axis : float
        Semi-major axis in metres.
    inverse_flattening : float
        Inverse flattening 1/f. Zero denotes a sphere.
    epsg_code : int
        EPSG ellipsoid code.
    """
    name: str
    semi_major_axis: float
    inverse_flattening: float
    epsg_code: int


class NumericConstants:
    """Settings shared by the iterative and series-based projections."""

    # Convergence tolerance for tolerance-driven loops (radians).
    TOLERANCE: Final[float] = 1e-10

    # Ceiling for tolerance-driven loops.
    ITERATION_LIMIT: Final[int] = 1000

    # Composite Simpson steps used for the meridian arc quadrature.
    SIMPSON_STEPS: Final[int] = 100

    # Residual threshold of the Laborde complex fixed point.
    LABORDE_EPSILON: Final[float] = 1e-11


class GeodeticConstants:
    """Registry of grid-system constants used throughout the system.

    Universal Grids
    ---------------
    The UTM and UPS parameters underlie the military grid reference
    system and the factory functions in `geospatial.projections.factory`.
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    EARTH_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    EARTH_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    # =========================================================================
    # Universal Transverse Mercator
    # =========================================================================

    UTM_SCALE_FACTOR: Final[Constant] = Constant(
        value=0.9996,
        unit="dimensionless",
        source="NGA.SIG.0012",
        description="Scale factor on the UTM zone central meridian"
    )

    UTM_FALSE_EASTING: Final[Constant] = Constant(
        value=500_000.0,
        unit="m",
        source="NGA.SIG.0012",
        description="False easting of every UTM zone"
    )

    UTM_FALSE_NORTHING_SOUTH: Final[Constant] = Constant(
        value=10_000_000.0,
        unit="m",
        source="NGA.SIG.0012",
        description="False northing of southern hemisphere UTM zones"
    )

    UTM_ZONE_WIDTH: Final[Constant] = Constant(
        value=6.0,
        unit="degree",
        source="NGA.SIG.0012",
        description="Longitudinal width of a UTM zone"
    )

    # =========================================================================
    # Universal Polar Stereographic
    # =========================================================================

    UPS_SCALE_FACTOR: Final[Constant] = Constant(
        value=0.994,
        unit="dimensionless",
        source="NGA.SIG.0012",
        description="Scale factor at the pole of the UPS projection"
    )

    UPS_FALSE_ORIGIN: Final[Constant] = Constant(
        value=2_000_000.0,
        unit="m",
        source="NGA.SIG.0012",
        description="False easting and northing of both UPS projections"
    )

    # =========================================================================
    # Military Grid Reference System
    # =========================================================================

    MGRS_SQUARE_SIZE: Final[Constant] = Constant(
        value=100_000.0,
        unit="m",
        source="NGA.SIG.0012",
        description="Side of a 100 km grid square"
    )

    MGRS_NORTH_LIMIT: Final[Constant] = Constant(
        value=84.0,
        unit="degree",
        source="NGA.SIG.0012",
        description="Northern limit of the UTM part of the grid"
    )

    MGRS_SOUTH_LIMIT: Final[Constant] = Constant(
        value=-80.0,
        unit="degree",
        source="NGA.SIG.0012",
        description="Southern limit of the UTM part of the grid"
    )

    # =========================================================================
    # Projection-specific constants
    # =========================================================================

    BELGIUM_CORRECTION: Final[Constant] = Constant(
        value=29.2985,
        unit="arcsecond",
        source="IOGP 373-7-2, method 9803",
        description="Angular correction of the Belgian Lambert 72 grid"
    )

    MERCATOR_LATITUDE_LIMIT: Final[Constant] = Constant(
        value=88.0,
        unit="degree",
        source="IOGP 373-7-2, method 9804 remarks",
        description="Largest absolute latitude accepted by Mercator forward"
    )

    @staticmethod
    def in_radians(constant: Constant) -> float:
        """Return an angular constant in radians.

        Parameters
        ----------
        constant : Constant
            A constant in degrees or arc-seconds.

        Returns
        -------
        float
            The value in radians.
        """
        if constant.unit == "degree":
            return float(np.radians(constant.value))
        if constant.unit == "arcsecond":
            return float(np.radians(constant.value / 3600.0))
        raise ValueError(f"Constant in '{constant.unit}' is not an angle")


# Reference ellipsoids, keyed by the attribute name used in `Ellipsoids`.
ELLIPSOID_DEFINITIONS: Final[Dict[str, EllipsoidDefinition]] = {
    "WGS84": EllipsoidDefinition("WGS 84", 6_378_137.0, 298.257223563, 7030),
    "GRS1980": EllipsoidDefinition("GRS 1980", 6_378_137.0, 298.257222101, 7019),
    "BESSEL1841": EllipsoidDefinition("Bessel 1841", 6_377_397.155, 299.1528128, 7004),
    "CLARKE1866": EllipsoidDefinition("Clarke 1866", 6_378_206.4, 294.978698214, 7008),
    "CLARKE1880_IGN": EllipsoidDefinition("Clarke 1880 (IGN)", 6_378_249.2, 293.466021294, 7011),
    "INTERNATIONAL1924": EllipsoidDefinition("International 1924", 6_378_388.0, 297.0, 7022),
    "AIRY1830": EllipsoidDefinition("Airy 1830", 6_377_563.396, 299.3249646, 7001),
    "KRASSOWSKY1940": EllipsoidDefinition("Krassowsky 1940", 6_378_245.0, 298.3, 7024),
    "EVEREST1830_1967": EllipsoidDefinition("Everest 1830 (1967 Definition)", 6_377_298.556, 300.8017, 7016),
}
