"""
Unit Registry and Dimensional Checks for Projection Parameters.

This module provides a centralized unit system using the `pint` library.
Projection parameters are supplied as quantities (angles and lengths) and
converted once, at construction, to the base units used by the formulas:
radians for angles and the ellipsoid's unit for lengths.

Angles in pint
--------------
pint treats radians as dimensionless, so an angle cannot be told apart
from a pure number by dimensionality alone. An angle is therefore a
quantity that is NOT unitless and converts to radians.

Example Usage
-------------
>>> from common.units import Q_
>>> latitude = Q_(52.0, 'degree')
>>> latitude.to('radian')
<Quantity(0.907571211, 'radian')>
"""

from typing import Union
import warnings

import pint
from pint import UnitRegistry as PintUnitRegistry

from common.exceptions import ParameterUnitError

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity


class UnitRegistry:
    """Wrapper around pint UnitRegistry with surveying extensions.

    This class provides access to the global unit registry and defines
    the grid and survey units found in projected reference systems.

    Attributes
    ----------
    registry : pint.UnitRegistry
        The underlying pint unit registry.

    Examples
    --------
    >>> units = UnitRegistry()
    >>> units.to_base(units.quantity(90, 'degree'), 'radian')
    1.5707963267948966
    """

    def __init__(self):
        """Initialize the unit registry with survey extensions."""
        self._registry = ureg
        self._setup_survey_units()

    def _setup_survey_units(self) -> None:
        """Define length units used by historical projected systems."""
        try:
            self._registry.define("clarke_foot = 0.3047972654 * meter")
            self._registry.define("clarke_link = 0.201166195164 * meter")
        except pint.errors.RedefinitionError:
            # Units already defined, skip
            pass

    @property
    def registry(self) -> PintUnitRegistry:
        """Access the underlying pint registry."""
        return self._registry

    def quantity(self, value: float, unit: str) -> pint.Quantity:
        """Create a quantity with units.

        Parameters
        ----------
        value : float
            The numerical value.
        unit : str
            The unit string (e.g., 'degree', 'm', 'survey_foot').

        Returns
        -------
        pint.Quantity
            A quantity object with associated units.
        """
        return self._registry.Quantity(value, unit)

    def validate_dimensionality(
        self,
        quantity: pint.Quantity,
        expected_dim: str
    ) -> bool:
        """Check if a quantity has the expected dimensionality.

        Parameters
        ----------
        quantity : pint.Quantity
            The quantity to check.
        expected_dim : str
            The expected dimensionality (e.g., '[length]').

        Returns
        -------
        bool
            True if dimensionality matches.

        Raises
        ------
        ParameterUnitError
            If dimensionality does not match.
        """
        expected = self._registry.parse_expression(expected_dim).dimensionality
        if quantity.dimensionality != expected:
            raise ParameterUnitError(
                f"Expected a quantity of dimension {expected_dim}, got {quantity}"
            )
        return True

    def to_base(self, quantity: pint.Quantity, unit: str) -> float:
        """Convert a quantity to a plain float in the given unit.

        Raises
        ------
        ParameterUnitError
            If the quantity cannot be expressed in `unit`.
        """
        try:
            return float(quantity.to(unit).magnitude)
        except pint.DimensionalityError as e:
            raise ParameterUnitError(
                f"Quantity {quantity} cannot be expressed in {unit}"
            ) from e


units = UnitRegistry()


def is_angle(value) -> bool:
    """Whether `value` is a pint quantity carrying an angular unit."""
    if not isinstance(value, pint.Quantity) or value.unitless:
        return False
    return value.is_compatible_with("radian")


def is_length(value) -> bool:
    """Whether `value` is a pint quantity carrying a length unit."""
    return isinstance(value, pint.Quantity) and value.is_compatible_with("meter")


def ensure_quantity(value: Union[float, pint.Quantity], default_unit: str) -> pint.Quantity:
    """Ensure a value is a pint Quantity, applying default unit if necessary.

    Parameters
    ----------
    value : float or pint.Quantity
        The value to convert.
    default_unit : str
        The unit to apply if value is a bare number.

    Returns
    -------
    pint.Quantity
        The value with units.

    Warnings
    --------
    Issues a warning if a bare number is provided without units.
    """
    if isinstance(value, pint.Quantity):
        return value
    else:
        warnings.warn(
            f"Bare number {value} provided without units. "
            f"Assuming {default_unit}. Consider using explicit units.",
            UserWarning,
            stacklevel=3
        )
        return ureg.Quantity(value, default_unit)


def angle_to_radians(value: Union[float, pint.Quantity]) -> float:
    """Convert an angular parameter value to radians.

    Raises
    ------
    ParameterUnitError
        If `value` is a quantity without an angular unit.
    """
    quantity = ensure_quantity(value, "radian")
    if not is_angle(quantity):
        raise ParameterUnitError(f"Expected an angle, got {quantity}")
    return units.to_base(quantity, "radian")


def length_to_unit(value: Union[float, pint.Quantity], unit: str) -> float:
    """Convert a length parameter value to `unit`.

    Raises
    ------
    ParameterUnitError
        If `value` is a quantity without a length unit.
    """
    quantity = ensure_quantity(value, unit)
    units.validate_dimensionality(quantity, "[length]")
    return units.to_base(quantity, unit)


def scalar_value(value: Union[float, pint.Quantity]) -> float:
    """Return a plain scale or coefficient value.

    Raises
    ------
    ParameterUnitError
        If `value` carries a unit.
    """
    if isinstance(value, pint.Quantity):
        if not value.unitless:
            raise ParameterUnitError(f"Expected a pure number, got {value}")
        return float(value.to("dimensionless").magnitude)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ParameterUnitError(f"Expected a pure number, got {value!r}") from e
