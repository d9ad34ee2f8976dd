"""
Named Operation Parameters.

A projection is built from a mapping of `ParameterKind` to value. Each kind
declares its measure (angle, length or pure number) so that the mapping
can be checked and converted to base units when the projection is built.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

from common.exceptions import MissingParameterError
from common.units import angle_to_radians, length_to_unit, scalar_value


class Measure(Enum):
    """Kind of value a parameter holds."""
    ANGLE = "angle"
    LENGTH = "length"
    SCALAR = "scalar"


class ParameterKind(Enum):
    """Operation parameters with their EPSG codes and measures."""

    LATITUDE_OF_NATURAL_ORIGIN = (8801, "Latitude of natural origin", Measure.ANGLE)
    LONGITUDE_OF_NATURAL_ORIGIN = (8802, "Longitude of natural origin", Measure.ANGLE)
    SCALE_FACTOR_AT_NATURAL_ORIGIN = (8805, "Scale factor at natural origin", Measure.SCALAR)
    FALSE_EASTING = (8806, "False easting", Measure.LENGTH)
    FALSE_NORTHING = (8807, "False northing", Measure.LENGTH)
    LATITUDE_OF_PROJECTION_CENTRE = (8811, "Latitude of projection centre", Measure.ANGLE)
    LONGITUDE_OF_PROJECTION_CENTRE = (8812, "Longitude of projection centre", Measure.ANGLE)
    AZIMUTH_OF_INITIAL_LINE = (8813, "Azimuth of initial line", Measure.ANGLE)
    ANGLE_FROM_RECTIFIED_TO_SKEW_GRID = (8814, "Angle from Rectified to Skew Grid", Measure.ANGLE)
    SCALE_FACTOR_ON_INITIAL_LINE = (8815, "Scale factor on initial line", Measure.SCALAR)
    EASTING_AT_PROJECTION_CENTRE = (8816, "Easting at projection centre", Measure.LENGTH)
    NORTHING_AT_PROJECTION_CENTRE = (8817, "Northing at projection centre", Measure.LENGTH)
    LATITUDE_OF_PSEUDO_STANDARD_PARALLEL = (8818, "Latitude of pseudo standard parallel", Measure.ANGLE)
    SCALE_FACTOR_ON_PSEUDO_STANDARD_PARALLEL = (8819, "Scale factor on pseudo standard parallel", Measure.SCALAR)
    LATITUDE_OF_FALSE_ORIGIN = (8821, "Latitude of false origin", Measure.ANGLE)
    LONGITUDE_OF_FALSE_ORIGIN = (8822, "Longitude of false origin", Measure.ANGLE)
    LATITUDE_OF_1ST_STANDARD_PARALLEL = (8823, "Latitude of 1st standard parallel", Measure.ANGLE)
    LATITUDE_OF_2ND_STANDARD_PARALLEL = (8824, "Latitude of 2nd standard parallel", Measure.ANGLE)
    EASTING_AT_FALSE_ORIGIN = (8826, "Easting at false origin", Measure.LENGTH)
    NORTHING_AT_FALSE_ORIGIN = (8827, "Northing at false origin", Measure.LENGTH)
    LATITUDE_OF_STANDARD_PARALLEL = (8832, "Latitude of standard parallel", Measure.ANGLE)
    LONGITUDE_OF_ORIGIN = (8833, "Longitude of origin", Measure.ANGLE)
    LATITUDE_OF_TOPOCENTRIC_ORIGIN = (8834, "Latitude of topocentric origin", Measure.ANGLE)
    LONGITUDE_OF_TOPOCENTRIC_ORIGIN = (8835, "Longitude of topocentric origin", Measure.ANGLE)
    ELLIPSOIDAL_HEIGHT_OF_TOPOCENTRIC_ORIGIN = (8836, "Ellipsoidal height of topocentric origin", Measure.LENGTH)
    VIEWPOINT_HEIGHT = (8840, "Viewpoint height", Measure.LENGTH)
    CO_LATITUDE_OF_CONE_AXIS = (1036, "Co-latitude of cone axis", Measure.ANGLE)
    INITIAL_LONGITUDE = (8830, "Initial longitude", Measure.ANGLE)
    ZONE_WIDTH = (8831, "Zone width", Measure.ANGLE)
    ORDINATE_1_OF_EVALUATION_POINT = (8617, "Ordinate 1 of evaluation point", Measure.LENGTH)
    ORDINATE_2_OF_EVALUATION_POINT = (8618, "Ordinate 2 of evaluation point", Measure.LENGTH)
    C1 = (1026, "C1", Measure.SCALAR)
    C2 = (1027, "C2", Measure.SCALAR)
    C3 = (1028, "C3", Measure.SCALAR)
    C4 = (1029, "C4", Measure.SCALAR)
    C5 = (1030, "C5", Measure.SCALAR)
    C6 = (1031, "C6", Measure.SCALAR)
    C7 = (1032, "C7", Measure.SCALAR)
    C8 = (1033, "C8", Measure.SCALAR)
    C9 = (1034, "C9", Measure.SCALAR)
    C10 = (1035, "C10", Measure.SCALAR)

    def __init__(self, code: int, label: str, measure: Measure):
        self.code = code
        self.label = label
        self.measure = measure


class ProjectionParameters(Mapping):
    """Read-only mapping of parameter kinds to raw values.

    Values are kept as supplied (pint quantities or numbers) and converted
    on read: angles to radians, lengths to the length unit given at
    construction, scalars to float.

    Parameters
    ----------
    values : mapping
        Parameter kind to value.
    length_unit : str
        Unit lengths are converted to, normally the ellipsoid's unit.
    owner : str
        Name of the projection, used in error messages.
    """

    def __init__(self, values: Mapping[ParameterKind, Any], length_unit: str = "meter", owner: str = ""):
        self._values: Mapping[ParameterKind, Any] = MappingProxyType(dict(values))
        self._length_unit = length_unit
        self._owner = owner

    def __getitem__(self, kind: ParameterKind) -> Any:
        return self._values[kind]

    def __iter__(self) -> Iterator[ParameterKind]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def _require(self, kind: ParameterKind) -> Any:
        if kind not in self._values:
            raise MissingParameterError(kind, self._owner)
        return self._values[kind]

    def angle(self, kind: ParameterKind, default: Optional[float] = None) -> float:
        """Read an angle in radians.

        Raises
        ------
        MissingParameterError
            If absent and no default is given.
        ParameterUnitError
            If the value is not an angle.
        """
        if default is not None and kind not in self._values:
            return default
        return angle_to_radians(self._require(kind))

    def length(self, kind: ParameterKind, default: Optional[float] = None) -> float:
        """Read a length in the length unit."""
        if default is not None and kind not in self._values:
            return default
        return length_to_unit(self._require(kind), self._length_unit)

    def scalar(self, kind: ParameterKind, default: Optional[float] = None) -> float:
        """Read a pure number."""
        if default is not None and kind not in self._values:
            return default
        return scalar_value(self._require(kind))

    def read(self, kind: ParameterKind, default: Optional[float] = None) -> float:
        """Read a parameter according to its declared measure."""
        reader = {
            Measure.ANGLE: self.angle,
            Measure.LENGTH: self.length,
            Measure.SCALAR: self.scalar,
        }[kind.measure]
        return reader(kind, default)

    def to_dict(self) -> Dict[ParameterKind, Any]:
        """Copy of the raw values."""
        return dict(self._values)
