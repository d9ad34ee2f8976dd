"""
Geospatial Module for the Coordinate Projection Engine.

All projection arithmetic originates from this module: the reference
ellipsoid, the shared numeric kernel, the projection families, the
grid reference encodings and distortion analysis.

This module provides:
- Reference ellipsoids and radii of curvature
- Map projections (forward and reverse) by EPSG method
- MGRS and Georef grid reference strings
- Tissot's indicatrix for any projection
"""

from geospatial.coordinate_models import (
    Ellipsoid,
    Ellipsoids,
    WGS84Ellipsoid,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)

from geospatial.projections import (
    CoordinateProjection,
    OperationMethod,
    ParameterKind,
    ProjectionParameters,
    available_methods,
    create_projection,
)

from geospatial.grid_references import (
    GridProjection,
    MilitaryGridReferenceSystem,
    GeographicGridReference,
    create_grid_projection,
)

from geospatial.distortion import (
    TissotIndicatrix,
    compute_tissot_indicatrix,
)

__all__ = [
    # Coordinate models
    "Ellipsoid",
    "Ellipsoids",
    "WGS84Ellipsoid",
    "radius_of_curvature_meridian",
    "radius_of_curvature_prime_vertical",
    # Projections
    "CoordinateProjection",
    "OperationMethod",
    "ParameterKind",
    "ProjectionParameters",
    "available_methods",
    "create_projection",
    # Grid references
    "GridProjection",
    "MilitaryGridReferenceSystem",
    "GeographicGridReference",
    "create_grid_projection",
    # Distortion
    "TissotIndicatrix",
    "compute_tissot_indicatrix",
]
