"""
Projection Consistency Checks.

This module provides checks that a projection's outputs are consistent
with themselves and with an independent implementation.

Test Categories
---------------
1. Round trip (reverse(forward(c)) returns c)
2. Construction determinism (same inputs, same constants and outputs)
3. Cross-check against PROJ through pyproj
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence
import numpy as np

from pyproj import CRS, Transformer

from common.exceptions import ProjectionError, ValidationFailedError
from common.logging_config import get_logger
from common.types import GeoCoordinate
from geospatial.projections.base import CoordinateProjection

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the test.
    passed : bool
        Whether the test passed.
    message : str
        Description of result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


def _angular_error(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Largest of the latitude and wrapped longitude differences (radians)."""
    d_lon = np.arctan2(np.sin(a.longitude - b.longitude), np.cos(a.longitude - b.longitude))
    return float(max(abs(a.latitude - b.latitude), abs(d_lon)))


class ProjectionConsistencyChecker:
    """Checker for the numerical consistency of projections.

    Parameters
    ----------
    strict_mode : bool
        If True, raise `ValidationFailedError` on the first failed check.
    log_violations : bool
        Whether to log failed checks.
    """

    def __init__(
        self,
        strict_mode: bool = False,
        log_violations: bool = True
    ):
        self.strict_mode = strict_mode
        self.log_violations = log_violations
        self._logger = get_logger("ProjectionConsistencyChecker")

    def check_all(
        self,
        projection: CoordinateProjection,
        sample: Sequence[GeoCoordinate],
        proj_definition: Optional[str] = None,
        factory: Optional[Callable[[], CoordinateProjection]] = None
    ) -> List[ValidationResult]:
        """Run every applicable check.

        Parameters
        ----------
        projection : CoordinateProjection
            Projection under test.
        sample : sequence of GeoCoordinate
            Points inside the projection's valid region.
        proj_definition : str, optional
            PROJ string of the same projection; enables the cross-check.
        factory : callable, optional
            Builds a fresh, identical projection; enables the determinism check.

        Returns
        -------
        List[ValidationResult]
            Results of all checks.
        """
        results = []

        # 1. Round trip
        if projection.is_reversible:
            results.append(self.check_round_trip(projection, sample))

        # 2. Determinism
        if factory is not None:
            results.append(self.check_determinism(factory, sample))

        # 3. PROJ
        if proj_definition is not None:
            results.append(self.check_against_proj(projection, proj_definition, sample))

        return results

    def check_round_trip(
        self,
        projection: CoordinateProjection,
        sample: Sequence[GeoCoordinate],
        tolerance_rad: float = 1e-9
    ) -> ValidationResult:
        """Check that reverse(forward(c)) returns c within the tolerance."""
        errors = []
        failures = []
        for coordinate in sample:
            try:
                restored = projection.reverse(projection.forward(coordinate))
            except ProjectionError as e:
                failures.append(f"{coordinate}: {e}")
                continue
            errors.append(_angular_error(coordinate, restored))

        max_error = max(errors) if errors else 0.0
        num_violations = sum(error > tolerance_rad for error in errors) + len(failures)

        return self._finalize(ValidationResult(
            test_name="round_trip",
            passed=num_violations == 0,
            message=f"Round trip of {projection.name}: {num_violations} violations, max error {max_error:.3e} rad",
            details={
                'max_error_rad': max_error,
                'num_points': len(sample),
                'num_violations': int(num_violations),
                'failures': failures,
                'tolerance_rad': tolerance_rad,
            }
        ))

    def check_determinism(
        self,
        factory: Callable[[], CoordinateProjection],
        sample: Sequence[GeoCoordinate]
    ) -> ValidationResult:
        """Check that two constructions give the same constants and outputs."""
        first, second = factory(), factory()

        constants_a = first.derived_constants()
        constants_b = second.derived_constants()
        differing = [
            name for name in constants_a
            if name not in constants_b or not np.array_equal(
                np.asarray(constants_a[name], dtype=object), np.asarray(constants_b[name], dtype=object)
            )
        ]
        mismatches = [c for c in sample if first.forward(c) != second.forward(c)]

        return self._finalize(ValidationResult(
            test_name="construction_determinism",
            passed=not differing and not mismatches,
            message=f"Determinism of {first.name}: {len(differing)} constants and {len(mismatches)} outputs differ",
            details={
                'differing_constants': differing,
                'num_output_mismatches': len(mismatches),
            }
        ))

    def check_against_proj(
        self,
        projection: CoordinateProjection,
        proj_definition: str,
        sample: Sequence[GeoCoordinate],
        tolerance_m: float = 1e-3
    ) -> ValidationResult:
        """Compare forward output with PROJ.

        Parameters
        ----------
        proj_definition : str
            PROJ string, e.g. ``"+proj=tmerc +lat_0=0 +lon_0=9 +k=0.9996
            +x_0=500000 +ellps=WGS84"``. Its geographic CRS provides the
            input longitudes and latitudes.
        tolerance_m : float
            Largest accepted distance between the two outputs, in the
            projection's length unit.
        """
        crs = CRS.from_user_input(proj_definition)
        transformer = Transformer.from_crs(crs.geodetic_crs, crs, always_xy=True)

        lats, lons = zip(*(c.to_degrees() for c in sample))
        expected_x, expected_y = transformer.transform(np.asarray(lons), np.asarray(lats))
        actual = np.array([projection.forward(c).as_array() for c in sample])

        distances = np.hypot(actual[:, 0] - np.asarray(expected_x), actual[:, 1] - np.asarray(expected_y))
        max_distance = float(np.max(distances))
        num_violations = int(np.sum(~(distances <= tolerance_m)))

        return self._finalize(ValidationResult(
            test_name="proj_cross_check",
            passed=num_violations == 0,
            message=f"PROJ cross-check of {projection.name}: max difference {max_distance:.3e}",
            details={
                'max_difference': max_distance,
                'num_violations': num_violations,
                'proj_definition': proj_definition,
                'tolerance': tolerance_m,
            }
        ))

    def _finalize(self, result: ValidationResult) -> ValidationResult:
        if not result.passed:
            if self.log_violations:
                self._logger.warning(result.message)
            if self.strict_mode:
                raise ValidationFailedError(result.message)
        return result
