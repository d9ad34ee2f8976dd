"""
Common utilities and infrastructure for the coordinate projection engine.

This package provides foundational components used across all modules:
- Geodetic and numeric constants with provenance
- Unit registry and parameter conversion
- Immutable coordinate value types
- Typed error hierarchy
- Logging infrastructure
"""

from common.constants import GeodeticConstants, NumericConstants, ELLIPSOID_DEFINITIONS
from common.units import UnitRegistry, Q_, ureg
from common.types import (
    GeoCoordinate,
    Coordinate,
    AreaOfUse,
    Hemisphere,
)
from common.exceptions import (
    ProjectionError,
    ConstructionError,
    MissingParameterError,
    ParameterUnitError,
    InvalidParameterError,
    DomainError,
    CoordinateOutOfRangeError,
    ConvergenceError,
    OperationNotSupportedError,
    GridFormatError,
    UnknownMethodError,
    ValidationFailedError,
)
from common.logging_config import get_logger

__all__ = [
    "GeodeticConstants",
    "NumericConstants",
    "ELLIPSOID_DEFINITIONS",
    "UnitRegistry",
    "Q_",
    "ureg",
    "GeoCoordinate",
    "Coordinate",
    "AreaOfUse",
    "Hemisphere",
    "ProjectionError",
    "ConstructionError",
    "MissingParameterError",
    "ParameterUnitError",
    "InvalidParameterError",
    "DomainError",
    "CoordinateOutOfRangeError",
    "ConvergenceError",
    "OperationNotSupportedError",
    "GridFormatError",
    "UnknownMethodError",
    "ValidationFailedError",
    "get_logger",
]
