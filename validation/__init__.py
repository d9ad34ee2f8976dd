"""
Validation Framework for the Coordinate Projection Engine.

This module provides consistency checks for projections: round trip,
construction determinism and a cross-check against PROJ.
"""

from validation.projection_checks import (
    ProjectionConsistencyChecker,
    ValidationResult,
)

__all__ = [
    "ProjectionConsistencyChecker",
    "ValidationResult",
]
