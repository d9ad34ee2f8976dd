"""
Map Projections.

One module per projection family, all implementing the
`CoordinateProjection` contract of `geospatial.projections.base`:

- cylindrical: Mercator variants, Equidistant Cylindrical, Lambert
  Cylindrical Equal Area, Sinusoidal
- transverse: Transverse Mercator (plain and zoned), Cassini-Soldner
- conic: Lambert Conic Conformal variants, Near-Conformal, Albers,
  American Polyconic, Bonne
- azimuthal: Polar and Oblique Stereographic, Lambert Azimuthal Equal
  Area, Gnomonic, Modified Azimuthal Equidistant, Guam, Vertical
  Perspective
- oblique: Hotine and Laborde Oblique Mercator
- krovak: Krovak variants

Projections are built directly from their class, through
`create_projection` by method identifier or name, or through the
factory functions for the universal grids.
"""

from geospatial.projections.base import (
    CoordinateProjection,
    OperationMethod,
    batch_forward,
    batch_reverse,
)
from geospatial.projections.parameters import (
    Measure,
    ParameterKind,
    ProjectionParameters,
)
from geospatial.projections.azimuthal import OperationAspect
from geospatial.projections.registry import (
    METHODS,
    available_methods,
    create_projection,
    resolve_method,
)
from geospatial.projections.factory import (
    pseudo_mercator,
    universal_transverse_mercator,
    ups_north,
    ups_south,
    utm_grid_system,
    utm_zone_number,
    world_mercator,
)

__all__ = [
    "CoordinateProjection",
    "OperationMethod",
    "batch_forward",
    "batch_reverse",
    "Measure",
    "ParameterKind",
    "ProjectionParameters",
    "OperationAspect",
    "METHODS",
    "available_methods",
    "create_projection",
    "resolve_method",
    "pseudo_mercator",
    "universal_transverse_mercator",
    "ups_north",
    "ups_south",
    "utm_grid_system",
    "utm_zone_number",
    "world_mercator",
]
