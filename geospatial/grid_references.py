"""
Grid Reference Strings.

Encodings of a geographic position as a string naming a cell of a
fixed grid, at a chosen precision:

- Military Grid Reference System (MGRS) on WGS 84, built on UTM between
  80°S and 84°N and on UPS in the polar caps.
- World Geographic Reference System (Georef), a pure latitude/longitude
  grid of 15° quadrangles, 1° cells and minute subdivisions.

Both decode to the south-west corner of the addressed cell. Letters
I and O never appear in either alphabet.

References
----------
- NGA.SIG.0012_2.0.0_UTMUPS, The Universal Grids and the Transverse
  Mercator and Polar Stereographic Map Projections
- DMA TM 8358.1, Datums, Ellipsoids, Grids, and Grid Reference Systems
"""

from abc import ABC, abstractmethod
from functools import lru_cache
import re
from typing import ClassVar, Dict, Optional, Tuple, Type
import numpy as np

from common.constants import GeodeticConstants
from common.exceptions import CoordinateOutOfRangeError, GridFormatError, UnknownMethodError
from common.logging_config import get_logger
from common.types import AreaOfUse, Coordinate, GeoCoordinate, Hemisphere
from geospatial.projections.azimuthal import PolarStereographicAProjection
from geospatial.projections.base import OperationMethod
from geospatial.projections.factory import universal_transverse_mercator, ups_north, ups_south
from geospatial.projections.transverse import TransverseMercatorProjection

logger = get_logger(__name__)

# Round-off absorbed before flooring a position onto a grid (degrees).
_DEGREE_SNAP = 1e-9


def _snap(value: float) -> float:
    return round(value / _DEGREE_SNAP) * _DEGREE_SNAP


def _wrap_degrees(longitude: float) -> float:
    """Longitude in degrees wrapped to [-180, 180)."""
    return (longitude + 180.0) % 360.0 - 180.0


class GridProjection(ABC):
    """Base of the grid reference encodings.

    `forward` turns a geographic coordinate into a grid reference string;
    `reverse` parses a string back to the south-west corner of its cell.
    Whitespace is ignored and letters are case-insensitive on decode.
    """

    method: ClassVar[OperationMethod]

    # Accepted precision range of `forward`
    min_precision: ClassVar[int] = 0
    max_precision: ClassVar[int] = 5
    default_precision: ClassVar[int] = 5

    def __init__(self):
        self._area_of_use = AreaOfUse.WORLD
        logger.debug(f"Constructed {self.method.name} grid ({self.method.identifier})")

    @property
    def identifier(self) -> str:
        return self.method.identifier

    @property
    def name(self) -> str:
        return self.method.name

    @property
    def area_of_use(self) -> AreaOfUse:
        return self._area_of_use

    def forward(self, coordinate: GeoCoordinate, precision: Optional[int] = None) -> str:
        """Encode a coordinate.

        Parameters
        ----------
        coordinate : GeoCoordinate
            Position in radians.
        precision : int, optional
            Precision level, between `min_precision` and `max_precision`.

        Returns
        -------
        str
            The grid reference.

        Raises
        ------
        ValueError
            If the precision is out of range.
        """
        if precision is None:
            precision = self.default_precision
        if not self.min_precision <= precision <= self.max_precision:
            raise ValueError(
                f"{self.name} precision must be in {self.min_precision}..{self.max_precision}, got {precision}"
            )
        return self._compute_forward(coordinate, precision)

    def reverse(self, reference: str) -> GeoCoordinate:
        """Decode a grid reference to the south-west corner of its cell.

        Raises
        ------
        GridFormatError
            If the string is not a well-formed reference.
        """
        if not isinstance(reference, str):
            raise GridFormatError(f"{self.name} reference must be a string, got {type(reference).__name__}")
        normalized = re.sub(r"\s+", "", reference).upper()
        return self._compute_reverse(normalized)

    @abstractmethod
    def _compute_forward(self, coordinate: GeoCoordinate, precision: int) -> str:
        pass

    @abstractmethod
    def _compute_reverse(self, reference: str) -> GeoCoordinate:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self.identifier!r})"


# =============================================================================
# MGRS
# =============================================================================

# 8° latitude bands from 80°S; X spans 72°N to 84°N
LATITUDE_BANDS = "CDEFGHJKLMNPQRSTUVWX"

# 100 km column letters; zone sets 1, 2, 3 use A-H, J-R, S-Z
COLUMN_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"

# 100 km row letters, repeating every 2 000 km
ROW_LETTERS = "ABCDEFGHJKLMNPQRSTUV"

# Even zones start their row cycle five letters later
EVEN_ZONE_ROW_SHIFT = 5

UPS_WEST_COLUMNS = "JKLPQRSTUXYZ"
UPS_EAST_COLUMNS = "ABCFGHJKLPQR"
UPS_ROW_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"

# First 100 km column of each half and first row of each pole
UPS_WEST_COLUMN_ORIGIN = 8
UPS_EAST_COLUMN_ORIGIN = 20
UPS_NORTH_ROW_ORIGIN = 13
UPS_SOUTH_ROW_ORIGIN = 8

# (west letter, east letter) of each pole
UPS_ZONE_LETTERS = {Hemisphere.NORTH: ("Y", "Z"), Hemisphere.SOUTH: ("A", "B")}

SQUARE_SIZE = GeodeticConstants.MGRS_SQUARE_SIZE.value
ROW_CYCLE = len(ROW_LETTERS) * SQUARE_SIZE

_UTM_PATTERN = re.compile(
    r"^(\d{1,2})([C-HJ-NP-X])([A-HJ-NP-Z])([A-HJ-NP-V])(\d{0,10})$"
)
_UPS_PATTERN = re.compile(r"^([ABYZ])([A-HJ-NP-Z])([A-HJ-NP-Z])(\d{0,10})$")


@lru_cache(maxsize=None)
def _utm_zone_projection(zone: int, hemisphere: Hemisphere) -> TransverseMercatorProjection:
    return universal_transverse_mercator(zone, hemisphere)


@lru_cache(maxsize=None)
def _ups_projection(hemisphere: Hemisphere) -> PolarStereographicAProjection:
    return ups_north() if hemisphere is Hemisphere.NORTH else ups_south()


@lru_cache(maxsize=None)
def band_minimum_northing(band: str) -> float:
    """Lowest UTM northing inside a latitude band, floored to 100 km.

    Every zone has the same shape, so zone 31 is used. Parallels bend
    towards the pole, which puts the minimum on the central meridian
    in the north and on the zone edge in the south.
    """
    index = LATITUDE_BANDS.index(band)
    south = -80.0 + 8.0 * index
    hemisphere = Hemisphere.NORTH if south >= 0 else Hemisphere.SOUTH
    projection = _utm_zone_projection(31, hemisphere)
    northings = [
        projection.forward(GeoCoordinate.from_degrees(south, lon)).y
        for lon in (3.0, 6.0)
    ]
    return float(np.floor(min(northings) / SQUARE_SIZE) * SQUARE_SIZE)


def latitude_band(latitude: float) -> str:
    """Band letter of a latitude in degrees, for 80°S <= latitude < 84°N."""
    index = int(np.floor((latitude + 80.0) / 8.0))
    return LATITUDE_BANDS[min(index, len(LATITUDE_BANDS) - 1)]


def mgrs_zone(latitude: float, longitude: float) -> int:
    """UTM zone of a position in degrees, with the Norway and Svalbard
    exceptions."""
    longitude = _wrap_degrees(longitude)
    zone = int(np.floor((longitude + 180.0) / 6.0)) % 60 + 1
    if 56.0 <= latitude < 64.0 and 3.0 <= longitude < 12.0:
        return 32
    if 72.0 <= latitude < 84.0 and 0.0 <= longitude < 42.0:
        if longitude < 9.0:
            return 31
        if longitude < 21.0:
            return 33
        if longitude < 33.0:
            return 35
        return 37
    return zone


def _split_digits(digits: str, reference: str) -> Tuple[float, float]:
    """Easting and northing offsets (metres) from the numeric part."""
    if len(digits) % 2:
        raise GridFormatError(f"MGRS reference '{reference}' has an odd number of digits")
    precision = len(digits) // 2
    if precision == 0:
        return 0.0, 0.0
    scale = 10 ** (5 - precision)
    return float(int(digits[:precision]) * scale), float(int(digits[precision:]) * scale)


def _format_offsets(easting: float, northing: float, precision: int) -> str:
    """Offsets inside the 100 km square, truncated to `precision` digits."""
    if precision == 0:
        return ""
    scale = 10 ** (5 - precision)
    e = int(np.floor(easting)) % int(SQUARE_SIZE) // scale
    n = int(np.floor(northing)) % int(SQUARE_SIZE) // scale
    return f"{e:0{precision}d}{n:0{precision}d}"


class MilitaryGridReferenceSystem(GridProjection):
    """Military Grid Reference System on WGS 84.

    Precision is the number of digits per axis: 0 names the 100 km
    square, 5 a 1 m cell.

    Format
    ------
    UTM:  ``{zone}{band}{column}{row}{easting digits}{northing digits}``
    UPS:  ``{zone letter}{column}{row}{easting digits}{northing digits}``

    Examples
    --------
    >>> grid = MilitaryGridReferenceSystem()
    >>> grid.forward(GeoCoordinate.from_degrees(48.8584, 2.2945), precision=3)
    '31UDQ482119'
    """

    method = OperationMethod("GRID::MGRS", "Military Grid Reference System")

    def _compute_forward(self, coordinate: GeoCoordinate, precision: int) -> str:
        latitude, longitude = coordinate.to_degrees()
        latitude = _snap(latitude)
        longitude = _snap(_wrap_degrees(longitude))

        north_limit = GeodeticConstants.MGRS_NORTH_LIMIT.value
        south_limit = GeodeticConstants.MGRS_SOUTH_LIMIT.value
        if latitude >= north_limit:
            return self._forward_polar(coordinate, Hemisphere.NORTH, precision)
        if latitude < south_limit:
            return self._forward_polar(coordinate, Hemisphere.SOUTH, precision)

        band = latitude_band(latitude)
        zone = mgrs_zone(latitude, longitude)
        hemisphere = Hemisphere.NORTH if latitude >= 0 else Hemisphere.SOUTH
        projected = _utm_zone_projection(zone, hemisphere).forward(
            GeoCoordinate.from_degrees(latitude, longitude)
        )

        column = int(np.floor(projected.x / SQUARE_SIZE))
        if not 1 <= column <= 8:
            raise CoordinateOutOfRangeError(
                f"{self.name}: {coordinate} falls outside the columns of zone {zone}"
            )
        column_letter = COLUMN_LETTERS[((zone - 1) % 3) * 8 + column - 1]

        row = int(np.floor(projected.y / SQUARE_SIZE)) % len(ROW_LETTERS)
        if zone % 2 == 0:
            row = (row + EVEN_ZONE_ROW_SHIFT) % len(ROW_LETTERS)
        row_letter = ROW_LETTERS[row]

        return f"{zone:02d}{band}{column_letter}{row_letter}" + _format_offsets(projected.x, projected.y, precision)

    def _forward_polar(self, coordinate: GeoCoordinate, hemisphere: Hemisphere, precision: int) -> str:
        projected = _ups_projection(hemisphere).forward(coordinate)
        column = int(np.floor(projected.x / SQUARE_SIZE))
        row = int(np.floor(projected.y / SQUARE_SIZE))
        west_letter, east_letter = UPS_ZONE_LETTERS[hemisphere]

        if column >= UPS_EAST_COLUMN_ORIGIN:
            zone_letter, letters, column = east_letter, UPS_EAST_COLUMNS, column - UPS_EAST_COLUMN_ORIGIN
        else:
            zone_letter, letters, column = west_letter, UPS_WEST_COLUMNS, column - UPS_WEST_COLUMN_ORIGIN
        row -= UPS_NORTH_ROW_ORIGIN if hemisphere is Hemisphere.NORTH else UPS_SOUTH_ROW_ORIGIN

        if not (0 <= column < len(letters) and 0 <= row < len(UPS_ROW_LETTERS)):
            raise CoordinateOutOfRangeError(f"{self.name}: {coordinate} falls outside the UPS grid")
        return f"{zone_letter}{letters[column]}{UPS_ROW_LETTERS[row]}" + _format_offsets(
            projected.x, projected.y, precision
        )

    def _compute_reverse(self, reference: str) -> GeoCoordinate:
        match = _UTM_PATTERN.match(reference)
        if match:
            return self._reverse_utm(reference, *match.groups())
        match = _UPS_PATTERN.match(reference)
        if match:
            return self._reverse_polar(reference, *match.groups())
        raise GridFormatError(f"'{reference}' is not a valid MGRS reference")

    def _reverse_utm(self, reference: str, zone_text: str, band: str, column_letter: str,
                     row_letter: str, digits: str) -> GeoCoordinate:
        zone = int(zone_text)
        if not 1 <= zone <= 60:
            raise GridFormatError(f"MGRS reference '{reference}' has invalid zone {zone}")
        easting_offset, northing_offset = _split_digits(digits, reference)

        column = COLUMN_LETTERS.index(column_letter) - ((zone - 1) % 3) * 8
        if not 0 <= column < 8:
            raise GridFormatError(f"MGRS reference '{reference}': column {column_letter} is not used in zone {zone}")
        easting = (column + 1) * SQUARE_SIZE + easting_offset

        row = ROW_LETTERS.index(row_letter)
        if zone % 2 == 0:
            row = (row - EVEN_ZONE_ROW_SHIFT) % len(ROW_LETTERS)
        northing = row * SQUARE_SIZE + northing_offset

        minimum = band_minimum_northing(band)
        while northing < minimum:
            northing += ROW_CYCLE

        hemisphere = Hemisphere.NORTH if band >= "N" else Hemisphere.SOUTH
        return _utm_zone_projection(zone, hemisphere).reverse(Coordinate(easting, northing))

    def _reverse_polar(self, reference: str, zone_letter: str, column_letter: str,
                       row_letter: str, digits: str) -> GeoCoordinate:
        easting_offset, northing_offset = _split_digits(digits, reference)
        hemisphere = Hemisphere.NORTH if zone_letter in "YZ" else Hemisphere.SOUTH
        west_letter, _ = UPS_ZONE_LETTERS[hemisphere]

        if zone_letter == west_letter:
            letters, origin = UPS_WEST_COLUMNS, UPS_WEST_COLUMN_ORIGIN
        else:
            letters, origin = UPS_EAST_COLUMNS, UPS_EAST_COLUMN_ORIGIN
        if column_letter not in letters:
            raise GridFormatError(f"MGRS reference '{reference}': column {column_letter} is not used in zone {zone_letter}")

        row_origin = UPS_NORTH_ROW_ORIGIN if hemisphere is Hemisphere.NORTH else UPS_SOUTH_ROW_ORIGIN
        easting = (origin + letters.index(column_letter)) * SQUARE_SIZE + easting_offset
        northing = (row_origin + UPS_ROW_LETTERS.index(row_letter)) * SQUARE_SIZE + northing_offset
        return _ups_projection(hemisphere).reverse(Coordinate(easting, northing))


# =============================================================================
# Georef
# =============================================================================

GEOREF_LONGITUDE_ZONES = "ABCDEFGHJKLMNPQRSTUVWXYZ"
GEOREF_LATITUDE_BANDS = "ABCDEFGHJKLM"
GEOREF_DEGREE_LETTERS = "ABCDEFGHJKLMNPQ"

GEOREF_QUADRANGLE = 15.0

# Characters of a reference at each precision level
GEOREF_LENGTHS = (2, 4, 8, 10, 12)

_GEOREF_PATTERN = re.compile(
    r"^([A-HJ-NP-Z])([A-HJ-M])(?:([A-HJ-NP-Q])([A-HJ-NP-Q])(\d*))?$"
)


class GeographicGridReference(GridProjection):
    """World Geographic Reference System (Georef).

    Precision levels:

    ====  ======  =========================
    0     2 char  15° quadrangle
    1     4 char  1° cell
    2     8 char  1' cell
    3     10 char 0.1' cell
    4     12 char 0.01' cell
    ====  ======  =========================

    Examples
    --------
    >>> GeographicGridReference().forward(GeoCoordinate.from_degrees(38.2861, -76.4291), precision=2)
    'GJPJ3417'
    """

    method = OperationMethod("GRID::GEOREF", "World Geographic Reference System")

    max_precision = 4
    default_precision = 2

    def _compute_forward(self, coordinate: GeoCoordinate, precision: int) -> str:
        latitude, longitude = coordinate.to_degrees()
        lon = _snap(_wrap_degrees(longitude) + 180.0)
        # the north pole belongs to the topmost cell
        lat = min(_snap(latitude + 90.0), np.nextafter(180.0, 0.0))

        text = (GEOREF_LONGITUDE_ZONES[int(lon // GEOREF_QUADRANGLE)]
                + GEOREF_LATITUDE_BANDS[int(lat // GEOREF_QUADRANGLE)])
        if precision == 0:
            return text

        text += (GEOREF_DEGREE_LETTERS[int(lon % GEOREF_QUADRANGLE)]
                 + GEOREF_DEGREE_LETTERS[int(lat % GEOREF_QUADRANGLE)])
        if precision == 1:
            return text

        digits = precision
        scale = 10 ** (digits - 2)
        lon_minutes = int(np.floor(_snap((lon - np.floor(lon)) * 60.0) * scale))
        lat_minutes = int(np.floor(_snap((lat - np.floor(lat)) * 60.0) * scale))
        return text + f"{lon_minutes:0{digits}d}{lat_minutes:0{digits}d}"

    def _compute_reverse(self, reference: str) -> GeoCoordinate:
        match = _GEOREF_PATTERN.match(reference)
        if not match or len(reference) not in GEOREF_LENGTHS:
            raise GridFormatError(f"'{reference}' is not a valid Georef reference")
        lon_zone, lat_band, lon_degree, lat_degree, digits = match.groups()

        lon = GEOREF_LONGITUDE_ZONES.index(lon_zone) * GEOREF_QUADRANGLE
        lat = GEOREF_LATITUDE_BANDS.index(lat_band) * GEOREF_QUADRANGLE
        if lon_degree:
            lon += GEOREF_DEGREE_LETTERS.index(lon_degree)
            lat += GEOREF_DEGREE_LETTERS.index(lat_degree)
        if digits:
            half = len(digits) // 2
            scale = 10 ** (half - 2)
            lon_minutes = int(digits[:half]) / scale
            lat_minutes = int(digits[half:]) / scale
            if lon_minutes >= 60 or lat_minutes >= 60:
                raise GridFormatError(f"Georef reference '{reference}' has minutes of 60 or more")
            lon += lon_minutes / 60.0
            lat += lat_minutes / 60.0

        return GeoCoordinate.from_degrees(lat - 90.0, lon - 180.0)


GRID_PROJECTIONS: Dict[str, Type[GridProjection]] = {
    cls.method.identifier: cls for cls in (MilitaryGridReferenceSystem, GeographicGridReference)
}


def create_grid_projection(identifier: str) -> GridProjection:
    """Build a grid encoding by identifier (``"GRID::MGRS"``, ``"GRID::GEOREF"``)
    or name, case-insensitive."""
    wanted = identifier.strip().upper()
    for key, cls in GRID_PROJECTIONS.items():
        if wanted in (key.upper(), cls.method.name.upper()):
            return cls()
    logger.warning(f"No grid projection registered for '{identifier}'")
    raise UnknownMethodError(f"No grid projection registered for '{identifier}'")
