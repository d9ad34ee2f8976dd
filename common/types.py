"""
Value Types for Geographic and Projected Coordinates.

This module defines the immutable dataclasses exchanged by every
projection: the geographic side (`GeoCoordinate`), the planar side
(`Coordinate`) and the advisory validity region (`AreaOfUse`).

Design Rationale
----------------
Using frozen dataclasses instead of raw tuples provides:
1. Self-documenting code - field names describe the data
2. Hashable values that can be shared between threads
3. Runtime validation of the latitude range
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Tuple
import numpy as np
from numpy.typing import NDArray

# Round-off slack accepted at the poles (radians).
_LATITUDE_SLACK = 1e-12


class Hemisphere(Enum):
    """Hemisphere of a zoned grid."""
    NORTH = "N"
    SOUTH = "S"


@dataclass(frozen=True)
class GeoCoordinate:
    """A geographic coordinate on the ellipsoid.

    Attributes
    ----------
    latitude : float
        Geodetic latitude in RADIANS (not degrees). Range: [-π/2, π/2].
    longitude : float
        Geodetic longitude in RADIANS, eastward positive from the prime
        meridian. Not normalized.
    height : float, optional
        Ellipsoidal height in the ellipsoid's length unit. Default is 0.

    Examples
    --------
    >>> coord = GeoCoordinate.from_degrees(52.0, 10.0)
    >>> lat_deg, lon_deg = coord.to_degrees()
    """
    latitude: float  # radians
    longitude: float  # radians
    height: float = 0.0

    def __post_init__(self):
        """Validate the latitude range."""
        if not abs(self.latitude) <= np.pi / 2 + _LATITUDE_SLACK:
            raise ValueError(
                f"Latitude {self.latitude} rad out of range [-π/2, π/2]. "
                f"Did you pass degrees instead of radians?"
            )

    def to_degrees(self) -> Tuple[float, float]:
        """Convert to degrees for display.

        Returns
        -------
        Tuple[float, float]
            (latitude_deg, longitude_deg)
        """
        return float(np.degrees(self.latitude)), float(np.degrees(self.longitude))

    @classmethod
    def from_degrees(cls, lat_deg: float, lon_deg: float, height: float = 0.0) -> "GeoCoordinate":
        """Create from degrees.

        Parameters
        ----------
        lat_deg : float
            Latitude in degrees.
        lon_deg : float
            Longitude in degrees.
        height : float
            Ellipsoidal height.

        Returns
        -------
        GeoCoordinate
            New coordinate instance.
        """
        return cls(
            latitude=float(np.radians(lat_deg)),
            longitude=float(np.radians(lon_deg)),
            height=height
        )

    @classmethod
    def from_sexagesimal(
        cls,
        lat: Tuple[float, float, float],
        lon: Tuple[float, float, float]
    ) -> "GeoCoordinate":
        """Create from (degrees, minutes, seconds) triples.

        The sign of the degrees field applies to the whole angle.
        """
        return cls.from_degrees(_dms_to_degrees(*lat), _dms_to_degrees(*lon))


def _dms_to_degrees(degrees: float, minutes: float = 0.0, seconds: float = 0.0) -> float:
    sign = -1.0 if degrees < 0 or (degrees == 0 and (minutes < 0 or seconds < 0)) else 1.0
    return sign * (abs(degrees) + abs(minutes) / 60.0 + abs(seconds) / 3600.0)


@dataclass(frozen=True)
class Coordinate:
    """A projected (planar) coordinate.

    Attributes
    ----------
    x : float
        Easting, in the ellipsoid's length unit.
    y : float
        Northing, in the ellipsoid's length unit.
    z : float, optional
        Height, passed through unchanged.
    """
    x: float
    y: float
    z: float = 0.0

    def as_array(self) -> NDArray[np.float64]:
        """Return (x, y) as an array."""
        return np.array([self.x, self.y])


@dataclass(frozen=True)
class AreaOfUse:
    """Geographic bounding region attached to a projection.

    Bounds are in radians. A region crossing the antimeridian has
    `west > east`. The region is advisory: projections that enforce a
    range do so with their own checks.
    """
    name: str
    south: float
    west: float
    north: float
    east: float

    WORLD: ClassVar["AreaOfUse"]

    def contains(self, coordinate: GeoCoordinate) -> bool:
        """Whether the coordinate lies inside the region."""
        if not self.south <= coordinate.latitude <= self.north:
            return False
        lon = np.arctan2(np.sin(coordinate.longitude), np.cos(coordinate.longitude))
        if self.west <= self.east:
            return bool(self.west <= lon <= self.east)
        return bool(lon >= self.west or lon <= self.east)

    @classmethod
    def from_degrees(cls, name: str, south: float, west: float, north: float, east: float) -> "AreaOfUse":
        """Create from bounds in degrees."""
        return cls(name, *(float(np.radians(v)) for v in (south, west, north, east)))


AreaOfUse.WORLD = AreaOfUse.from_degrees("World", -90.0, -180.0, 90.0, 180.0)
