"""
Factory Functions for Well-Known Projected Grids.

Universal Transverse Mercator (per zone and as one zoned grid), the two
Universal Polar Stereographic projections, World Mercator and Web
Mercator, each built from `GeodeticConstants`.
"""

from typing import Union
import numpy as np

from common.constants import GeodeticConstants
from common.exceptions import InvalidParameterError
from common.types import AreaOfUse, Hemisphere
from common.units import Q_
from geospatial.coordinate_models import Ellipsoid, WGS84Ellipsoid
from geospatial.projections.azimuthal import PolarStereographicAProjection
from geospatial.projections.cylindrical import MercatorAProjection, PseudoMercatorProjection
from geospatial.projections.parameters import ParameterKind as P
from geospatial.projections.transverse import (
    TransverseMercatorProjection,
    TransverseMercatorZonedProjection,
)

UTM_ZONE_COUNT = 60


def _metres(value: float) -> Q_:
    return Q_(value, "meter")


def _degrees(value: float) -> Q_:
    return Q_(value, "degree")


def _hemisphere(hemisphere: Union[Hemisphere, str]) -> Hemisphere:
    if isinstance(hemisphere, Hemisphere):
        return hemisphere
    try:
        return Hemisphere(str(hemisphere).upper()[:1])
    except ValueError as e:
        raise InvalidParameterError(f"Unknown hemisphere '{hemisphere}'") from e


def utm_zone_number(longitude: float) -> int:
    """UTM zone (1..60) of a longitude in radians.

    Longitudes are wrapped to [-180°, 180°); 180° falls in zone 1.
    The Norway and Svalbard exceptions are handled by the military grid,
    not here.

    Examples
    --------
    >>> utm_zone_number(np.radians(3.0))
    31
    """
    degrees = (np.degrees(longitude) + 180.0) % 360.0
    return int(degrees // GeodeticConstants.UTM_ZONE_WIDTH.value) % UTM_ZONE_COUNT + 1


def utm_central_meridian(zone: int) -> float:
    """Central meridian of a UTM zone, in radians."""
    width = GeodeticConstants.UTM_ZONE_WIDTH.value
    return float(np.radians(-180.0 + zone * width - width / 2))


def universal_transverse_mercator(
    zone: int,
    hemisphere: Union[Hemisphere, str] = Hemisphere.NORTH,
    ellipsoid: Ellipsoid = WGS84Ellipsoid
) -> TransverseMercatorProjection:
    """Transverse Mercator projection of one UTM zone.

    Parameters
    ----------
    zone : int
        Zone number, 1..60.
    hemisphere : Hemisphere or str
        NORTH or SOUTH; the southern grid has a 10 000 km false northing.
    ellipsoid : Ellipsoid
        Reference ellipsoid (default WGS 84).

    Returns
    -------
    TransverseMercatorProjection

    Raises
    ------
    InvalidParameterError
        If the zone number is out of range.
    """
    if not 1 <= zone <= UTM_ZONE_COUNT:
        raise InvalidParameterError(f"UTM zone must be in 1..{UTM_ZONE_COUNT}, got {zone}")
    hemisphere = _hemisphere(hemisphere)
    false_northing = GeodeticConstants.UTM_FALSE_NORTHING_SOUTH.value if hemisphere is Hemisphere.SOUTH else 0.0

    width = GeodeticConstants.UTM_ZONE_WIDTH.value
    west = -180.0 + (zone - 1) * width
    if hemisphere is Hemisphere.NORTH:
        area = AreaOfUse.from_degrees(f"UTM zone {zone}N", 0.0, west, 84.0, west + width)
    else:
        area = AreaOfUse.from_degrees(f"UTM zone {zone}S", -80.0, west, 0.0, west + width)

    parameters = {
        P.LATITUDE_OF_NATURAL_ORIGIN: _degrees(0.0),
        P.LONGITUDE_OF_NATURAL_ORIGIN: Q_(utm_central_meridian(zone), "radian"),
        P.SCALE_FACTOR_AT_NATURAL_ORIGIN: GeodeticConstants.UTM_SCALE_FACTOR.value,
        P.FALSE_EASTING: _metres(GeodeticConstants.UTM_FALSE_EASTING.value),
        P.FALSE_NORTHING: _metres(false_northing),
    }
    return TransverseMercatorProjection(
        parameters, ellipsoid, area,
        identifier=f"UTM::{zone}{hemisphere.value}",
        name=f"UTM zone {zone}{hemisphere.value}",
    )


def utm_grid_system(
    hemisphere: Union[Hemisphere, str] = Hemisphere.NORTH,
    ellipsoid: Ellipsoid = WGS84Ellipsoid
) -> TransverseMercatorZonedProjection:
    """All sixty UTM zones of one hemisphere as a zoned grid.

    Eastings carry the zone number as a 1 000 000 m prefix.
    """
    hemisphere = _hemisphere(hemisphere)
    false_northing = GeodeticConstants.UTM_FALSE_NORTHING_SOUTH.value if hemisphere is Hemisphere.SOUTH else 0.0
    parameters = {
        P.LATITUDE_OF_NATURAL_ORIGIN: _degrees(0.0),
        P.INITIAL_LONGITUDE: _degrees(-180.0),
        P.ZONE_WIDTH: _degrees(GeodeticConstants.UTM_ZONE_WIDTH.value),
        P.SCALE_FACTOR_AT_NATURAL_ORIGIN: GeodeticConstants.UTM_SCALE_FACTOR.value,
        P.FALSE_EASTING: _metres(GeodeticConstants.UTM_FALSE_EASTING.value),
        P.FALSE_NORTHING: _metres(false_northing),
    }
    return TransverseMercatorZonedProjection(
        parameters, ellipsoid,
        identifier=f"UTM::{hemisphere.value}",
        name=f"UTM grid system ({hemisphere.name.lower()}ern hemisphere)",
    )


def _universal_polar_stereographic(hemisphere: Hemisphere, ellipsoid: Ellipsoid) -> PolarStereographicAProjection:
    origin = GeodeticConstants.UPS_FALSE_ORIGIN.value
    if hemisphere is Hemisphere.NORTH:
        latitude, area = 90.0, AreaOfUse.from_degrees("UPS north", 84.0, -180.0, 90.0, 180.0)
    else:
        latitude, area = -90.0, AreaOfUse.from_degrees("UPS south", -90.0, -180.0, -80.0, 180.0)
    parameters = {
        P.LATITUDE_OF_NATURAL_ORIGIN: _degrees(latitude),
        P.LONGITUDE_OF_NATURAL_ORIGIN: _degrees(0.0),
        P.SCALE_FACTOR_AT_NATURAL_ORIGIN: GeodeticConstants.UPS_SCALE_FACTOR.value,
        P.FALSE_EASTING: _metres(origin),
        P.FALSE_NORTHING: _metres(origin),
    }
    return PolarStereographicAProjection(
        parameters, ellipsoid, area,
        identifier=f"UPS::{hemisphere.value}",
        name=f"Universal Polar Stereographic {hemisphere.name.lower()}",
    )


def ups_north(ellipsoid: Ellipsoid = WGS84Ellipsoid) -> PolarStereographicAProjection:
    """Universal Polar Stereographic, north pole."""
    return _universal_polar_stereographic(Hemisphere.NORTH, ellipsoid)


def ups_south(ellipsoid: Ellipsoid = WGS84Ellipsoid) -> PolarStereographicAProjection:
    """Universal Polar Stereographic, south pole."""
    return _universal_polar_stereographic(Hemisphere.SOUTH, ellipsoid)


def world_mercator(ellipsoid: Ellipsoid = WGS84Ellipsoid) -> MercatorAProjection:
    """World Mercator (EPSG:3395 conversion): Mercator variant A, k0 = 1."""
    parameters = {
        P.LATITUDE_OF_NATURAL_ORIGIN: _degrees(0.0),
        P.LONGITUDE_OF_NATURAL_ORIGIN: _degrees(0.0),
        P.SCALE_FACTOR_AT_NATURAL_ORIGIN: 1.0,
        P.FALSE_EASTING: _metres(0.0),
        P.FALSE_NORTHING: _metres(0.0),
    }
    return MercatorAProjection(parameters, ellipsoid, identifier="EPSG::19883", name="World Mercator")


def pseudo_mercator(ellipsoid: Ellipsoid = WGS84Ellipsoid) -> PseudoMercatorProjection:
    """Popular Visualisation Pseudo Mercator (EPSG:3857 conversion)."""
    parameters = {
        P.LATITUDE_OF_NATURAL_ORIGIN: _degrees(0.0),
        P.LONGITUDE_OF_NATURAL_ORIGIN: _degrees(0.0),
        P.FALSE_EASTING: _metres(0.0),
        P.FALSE_NORTHING: _metres(0.0),
    }
    area = AreaOfUse.from_degrees("World between 85.06°S and 85.06°N", -85.06, -180.0, 85.06, 180.0)
    return PseudoMercatorProjection(parameters, ellipsoid, area, identifier="EPSG::3856", name="Popular Visualisation Pseudo-Mercator")
