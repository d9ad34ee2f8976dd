"""
Error Hierarchy for Coordinate Projections.

All failures raised by the projection engine are synchronous and carry no
partial result. Construction problems surface when a projection is built,
never at transform time.
"""


class ProjectionError(Exception):
    """Base class for every error raised by the projection engine."""
    pass


class ConstructionError(ProjectionError, ValueError):
    """Raised when a projection cannot be built from its parameters."""
    pass


class MissingParameterError(ConstructionError):
    """Raised when a required operation parameter is absent."""

    def __init__(self, kind, projection_name: str = ""):
        self.kind = kind
        where = f" for {projection_name}" if projection_name else ""
        super().__init__(f"Required parameter '{kind.label}' is missing{where}")


class ParameterUnitError(ConstructionError):
    """Raised when a parameter value is of the wrong measure or unit."""
    pass


class InvalidParameterError(ConstructionError):
    """Raised when parameter values form an unusable combination."""
    pass


class DomainError(ProjectionError, ValueError):
    """Raised when a coordinate cannot be transformed."""
    pass


class CoordinateOutOfRangeError(DomainError):
    """Raised when an input coordinate lies outside the valid region."""
    pass


class ConvergenceError(DomainError):
    """Raised when an iterative reverse exhausts its iteration ceiling."""

    def __init__(self, projection_name: str, iterations: int, residual: float):
        self.iterations = iterations
        self.residual = residual
        super().__init__(
            f"{projection_name}: no convergence after {iterations} iterations "
            f"(residual {residual:.3e})"
        )


class OperationNotSupportedError(ProjectionError, NotImplementedError):
    """Raised when a projection has no implementation of an operation."""
    pass


class GridFormatError(ProjectionError, ValueError):
    """Raised when a grid reference string is malformed."""
    pass


class UnknownMethodError(ProjectionError, KeyError):
    """Raised when no projection is registered for a method."""
    pass


class ValidationFailedError(ProjectionError, AssertionError):
    """Raised by a strict consistency checker when a check fails."""
    pass
