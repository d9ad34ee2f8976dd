"""
Projection Base Contract.

Every projection converts between geographic coordinates (`GeoCoordinate`)
and projected coordinates (`Coordinate`) on one ellipsoid with one fixed
parameter set.

Lifecycle
---------
1. Construction reads the named parameters, converts them to base units
   and precomputes every derived constant in `_initialize`.
2. The instance is then sealed: attributes can no longer be assigned, so
   `forward` and `reverse` are pure functions of their argument and are
   safe to call from several threads.

Failures at construction raise `ConstructionError` subclasses; failures
of a transform raise `DomainError` subclasses or
`OperationNotSupportedError`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union
import numpy as np
from numpy.typing import NDArray

from common.exceptions import CoordinateOutOfRangeError, OperationNotSupportedError
from common.logging_config import get_logger
from common.types import AreaOfUse, Coordinate, GeoCoordinate
from geospatial.coordinate_models import Ellipsoid
from geospatial.numerics import ITERATION_LIMIT, TOLERANCE
from geospatial.projections.parameters import ParameterKind, ProjectionParameters

logger = get_logger(__name__)


@dataclass(frozen=True)
class OperationMethod:
    """A projection method as identified in a registry.

    Attributes
    ----------
    identifier : str
        Authority-qualified code, e.g. ``"EPSG::9807"``.
    name : str
        Method name.
    reversible : bool
        Whether the method defines a reverse transform.
    """
    identifier: str
    name: str
    reversible: bool = True


class CoordinateProjection(ABC):
    """Abstract base class for coordinate projections.

    Parameters
    ----------
    parameters : mapping
        `ParameterKind` to value (pint quantity or number).
    ellipsoid : Ellipsoid
        Reference ellipsoid; lengths are converted to its unit.
    area_of_use : AreaOfUse, optional
        Advisory validity region (default: the world).
    identifier, name : str, optional
        Identifier and display name of this projection instance. Default to
        the method's.
    tolerance : float
        Convergence tolerance of tolerance-driven reverse loops.
    iteration_limit : int
        Ceiling of tolerance-driven reverse loops.
    """

    method: ClassVar[OperationMethod]

    def __init__(
        self,
        parameters: Union[Mapping[ParameterKind, Any], ProjectionParameters],
        ellipsoid: Ellipsoid,
        area_of_use: Optional[AreaOfUse] = None,
        identifier: Optional[str] = None,
        name: Optional[str] = None,
        *,
        tolerance: float = TOLERANCE,
        iteration_limit: int = ITERATION_LIMIT
    ):
        self._identifier = identifier or self.method.identifier
        self._name = name or self.method.name
        self._ellipsoid = ellipsoid
        self._area_of_use = area_of_use or AreaOfUse.WORLD
        if not isinstance(parameters, ProjectionParameters):
            parameters = ProjectionParameters(parameters, ellipsoid.unit, self._name)
        self._parameters = parameters
        self._tolerance = tolerance
        self._iteration_limit = iteration_limit

        base_names = set(vars(self))
        self._initialize(parameters)
        self._constant_names = tuple(sorted(set(vars(self)) - base_names))
        self._sealed = True

        logger.debug(f"Constructed {self.method.name} projection '{self._name}' ({self._identifier})")

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_sealed", False):
            raise AttributeError(f"{type(self).__name__} is immutable after construction")
        super().__setattr__(name, value)

    @abstractmethod
    def _initialize(self, parameters: ProjectionParameters) -> None:
        """Read parameters and compute the derived constants."""
        pass

    @abstractmethod
    def _compute_forward(self, coordinate: GeoCoordinate) -> Coordinate:
        pass

    def _compute_reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        raise OperationNotSupportedError(f"{self.method.name} has no reverse transform")

    # -------------------------------------------------------------------------
    # Public contract
    # -------------------------------------------------------------------------

    def forward(self, coordinate: GeoCoordinate) -> Coordinate:
        """Transform a geographic coordinate to a projected coordinate.

        Parameters
        ----------
        coordinate : GeoCoordinate
            Latitude and longitude in radians.

        Returns
        -------
        Coordinate
            Easting and northing in the ellipsoid's unit.

        Raises
        ------
        CoordinateOutOfRangeError
            If the coordinate lies outside the valid region of the method.
        """
        return self._compute_forward(coordinate)

    def reverse(self, coordinate: Coordinate) -> GeoCoordinate:
        """Transform a projected coordinate to a geographic coordinate.

        Raises
        ------
        OperationNotSupportedError
            If the method has no reverse.
        DomainError
            If the coordinate is out of range or an iteration fails.
        """
        if not self.method.reversible:
            raise OperationNotSupportedError(f"{self.method.name} has no reverse transform")
        return self._compute_reverse(coordinate)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def name(self) -> str:
        return self._name

    @property
    def ellipsoid(self) -> Ellipsoid:
        return self._ellipsoid

    @property
    def area_of_use(self) -> AreaOfUse:
        return self._area_of_use

    @property
    def parameters(self) -> ProjectionParameters:
        return self._parameters

    @property
    def is_reversible(self) -> bool:
        return self.method.reversible

    def derived_constants(self) -> Dict[str, Any]:
        """The constants computed at construction, by attribute name."""
        return {name: getattr(self, name) for name in self._constant_names}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self._identifier!r}, name={self._name!r}, ellipsoid={self._ellipsoid.name!r})"

    # -------------------------------------------------------------------------
    # Helpers for subclasses
    # -------------------------------------------------------------------------

    def _reject(self, coordinate: Any, reason: str) -> None:
        raise CoordinateOutOfRangeError(f"{self._name}: {coordinate} {reason}")

    @property
    def _a(self) -> float:
        return self._ellipsoid.semi_major_axis

    @property
    def _e(self) -> float:
        return self._ellipsoid.eccentricity

    @property
    def _e2(self) -> float:
        return self._ellipsoid.eccentricity_squared


def batch_forward(
    projection: CoordinateProjection,
    lats_rad: NDArray[np.float64],
    lons_rad: NDArray[np.float64]
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Project arrays of coordinates.

    Parameters
    ----------
    projection : CoordinateProjection
        Projection to use.
    lats_rad, lons_rad : ndarray
        Coordinates in radians.

    Returns
    -------
    Tuple[ndarray, ndarray]
        (x, y) projected coordinates.
    """
    lats = np.asarray(lats_rad, dtype=float).ravel()
    lons = np.asarray(lons_rad, dtype=float).ravel()
    x = np.empty_like(lats)
    y = np.empty_like(lats)
    for i, (lat, lon) in enumerate(zip(lats, lons)):
        projected = projection.forward(GeoCoordinate(lat, lon))
        x[i], y[i] = projected.x, projected.y
    return x.reshape(np.shape(lats_rad)), y.reshape(np.shape(lats_rad))


def batch_reverse(
    projection: CoordinateProjection,
    x: NDArray[np.float64],
    y: NDArray[np.float64]
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Reverse-project arrays of coordinates; returns (lats_rad, lons_rad)."""
    xs = np.asarray(x, dtype=float).ravel()
    ys = np.asarray(y, dtype=float).ravel()
    lats = np.empty_like(xs)
    lons = np.empty_like(xs)
    for i, (px, py) in enumerate(zip(xs, ys)):
        geographic = projection.reverse(Coordinate(px, py))
        lats[i], lons[i] = geographic.latitude, geographic.longitude
    return lats.reshape(np.shape(x)), lons.reshape(np.shape(x))
