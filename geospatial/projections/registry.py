"""
Registry of Projection Methods.

A static table from method identifier to the class that implements it.
The table is built once at import; lookups accept the identifier
(``"EPSG::9807"``) or the method name (case-insensitive).
"""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from common.exceptions import UnknownMethodError
from common.logging_config import get_logger
from common.types import AreaOfUse
from geospatial.coordinate_models import Ellipsoid
from geospatial.projections.azimuthal import (
    GnomonicProjection,
    GuamProjection,
    LambertAzimuthalEqualAreaProjection,
    LambertAzimuthalEqualAreaSphericalProjection,
    ModifiedAzimuthalEquidistantProjection,
    ObliqueStereographicProjection,
    PolarStereographicAProjection,
    PolarStereographicBProjection,
    PolarStereographicCProjection,
    VerticalPerspectiveProjection,
)
from geospatial.projections.base import CoordinateProjection, OperationMethod
from geospatial.projections.conic import (
    AlbersEqualAreaProjection,
    AmericanPolyconicProjection,
    BonneProjection,
    BonneSouthOrientatedProjection,
    LambertConicConformal1SPProjection,
    LambertConicConformal2SPBelgiumProjection,
    LambertConicConformal2SPProjection,
    LambertConicConformalWestOrientatedProjection,
    LambertConicNearConformalProjection,
)
from geospatial.projections.cylindrical import (
    EquidistantCylindricalProjection,
    EquidistantCylindricalSphericalProjection,
    LambertCylindricalEqualAreaProjection,
    LambertCylindricalEqualAreaSphericalProjection,
    MercatorAProjection,
    MercatorBProjection,
    PseudoMercatorProjection,
    SinusoidalProjection,
)
from geospatial.projections.krovak import (
    KrovakModifiedNorthOrientatedProjection,
    KrovakModifiedProjection,
    KrovakNorthOrientatedProjection,
    KrovakProjection,
)
from geospatial.projections.oblique import (
    HotineObliqueMercatorAProjection,
    HotineObliqueMercatorBProjection,
    LabordeObliqueMercatorProjection,
)
from geospatial.projections.parameters import ParameterKind, ProjectionParameters
from geospatial.projections.transverse import (
    CassiniSoldnerProjection,
    HyperbolicCassiniSoldnerProjection,
    TransverseMercatorProjection,
    TransverseMercatorZonedProjection,
)

logger = get_logger(__name__)

_IMPLEMENTATIONS: List[Type[CoordinateProjection]] = [
    # Cylindrical
    MercatorAProjection,
    MercatorBProjection,
    PseudoMercatorProjection,
    EquidistantCylindricalProjection,
    EquidistantCylindricalSphericalProjection,
    LambertCylindricalEqualAreaProjection,
    LambertCylindricalEqualAreaSphericalProjection,
    SinusoidalProjection,
    # Transverse
    TransverseMercatorProjection,
    TransverseMercatorZonedProjection,
    CassiniSoldnerProjection,
    HyperbolicCassiniSoldnerProjection,
    # Conic
    LambertConicConformal1SPProjection,
    LambertConicConformalWestOrientatedProjection,
    LambertConicConformal2SPProjection,
    LambertConicConformal2SPBelgiumProjection,
    LambertConicNearConformalProjection,
    AlbersEqualAreaProjection,
    AmericanPolyconicProjection,
    BonneProjection,
    BonneSouthOrientatedProjection,
    # Azimuthal
    PolarStereographicAProjection,
    PolarStereographicBProjection,
    PolarStereographicCProjection,
    ObliqueStereographicProjection,
    LambertAzimuthalEqualAreaProjection,
    LambertAzimuthalEqualAreaSphericalProjection,
    GnomonicProjection,
    ModifiedAzimuthalEquidistantProjection,
    GuamProjection,
    VerticalPerspectiveProjection,
    # Oblique
    HotineObliqueMercatorAProjection,
    HotineObliqueMercatorBProjection,
    LabordeObliqueMercatorProjection,
    # Krovak
    KrovakProjection,
    KrovakNorthOrientatedProjection,
    KrovakModifiedProjection,
    KrovakModifiedNorthOrientatedProjection,
]

_CONSTRUCTORS: Mapping[str, Type[CoordinateProjection]] = MappingProxyType(
    {cls.method.identifier: cls for cls in _IMPLEMENTATIONS}
)

# Method identifier -> OperationMethod
METHODS: Mapping[str, OperationMethod] = MappingProxyType(
    {identifier: cls.method for identifier, cls in _CONSTRUCTORS.items()}
)

_BY_NAME: Dict[str, str] = {cls.method.name.lower(): cls.method.identifier for cls in _IMPLEMENTATIONS}


def resolve_method(method: Union[str, OperationMethod]) -> Type[CoordinateProjection]:
    """Find the class implementing a method.

    Parameters
    ----------
    method : str or OperationMethod
        Identifier (e.g. ``"EPSG::9807"``), method name, or an
        `OperationMethod`.

    Returns
    -------
    type
        The `CoordinateProjection` subclass.

    Raises
    ------
    UnknownMethodError
        If nothing is registered under that identifier or name.
    """
    key = method.identifier if isinstance(method, OperationMethod) else str(method).strip()
    if key in _CONSTRUCTORS:
        return _CONSTRUCTORS[key]
    identifier = _BY_NAME.get(key.lower())
    if identifier is None:
        logger.warning(f"No projection registered for method '{key}'")
        raise UnknownMethodError(f"No projection registered for method '{key}'")
    return _CONSTRUCTORS[identifier]


def create_projection(
    method: Union[str, OperationMethod],
    parameters: Union[Mapping[ParameterKind, Any], ProjectionParameters],
    ellipsoid: Ellipsoid,
    area_of_use: Optional[AreaOfUse] = None,
    identifier: Optional[str] = None,
    name: Optional[str] = None,
    **settings: Any
) -> CoordinateProjection:
    """Build a projection for a registered method.

    Parameters
    ----------
    method : str or OperationMethod
        Method identifier or name.
    parameters : mapping
        Operation parameters of the method.
    ellipsoid : Ellipsoid
        Reference ellipsoid.
    area_of_use : AreaOfUse, optional
        Advisory validity region.
    identifier, name : str, optional
        Identifier and display name of the new projection.
    **settings
        ``tolerance`` and ``iteration_limit`` overrides.

    Returns
    -------
    CoordinateProjection
        The constructed projection.

    Examples
    --------
    >>> from common.units import Q_
    >>> from geospatial.coordinate_models import WGS84Ellipsoid
    >>> projection = create_projection("Mercator (variant B)", {
    ...     ParameterKind.LATITUDE_OF_1ST_STANDARD_PARALLEL: Q_(0, "degree"),
    ...     ParameterKind.LONGITUDE_OF_NATURAL_ORIGIN: Q_(0, "degree"),
    ...     ParameterKind.FALSE_EASTING: Q_(0, "m"),
    ...     ParameterKind.FALSE_NORTHING: Q_(0, "m"),
    ... }, WGS84Ellipsoid)
    """
    cls = resolve_method(method)
    return cls(parameters, ellipsoid, area_of_use, identifier, name, **settings)


def available_methods() -> List[OperationMethod]:
    """Every registered method, in registration order."""
    return list(METHODS.values())
