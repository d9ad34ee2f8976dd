"""
Numeric Kernel for Projection Formulas.

Elementary helpers shared by the projection families: trigonometric
shortcuts, auxiliary latitudes and their inverse series, the meridian
arc, a fixed-step quadrature and the two iteration styles used by
reverse transforms without a closed form.

Iteration Styles
----------------
1. `iterate_fixed`: exactly N passes, no convergence check.
2. `iterate_until_converged`: stops when successive estimates differ by
   less than the tolerance; raises `ConvergenceError` when the ceiling
   is reached first.

References
----------
- IOGP Publication 373-7-2 (Guidance Note 7-2)
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS PP 1395.
"""

from typing import Callable
import numpy as np

from common.constants import NumericConstants
from common.exceptions import ConvergenceError
from common.logging_config import get_logger

logger = get_logger(__name__)

TOLERANCE = NumericConstants.TOLERANCE
ITERATION_LIMIT = NumericConstants.ITERATION_LIMIT

HALF_PI = np.pi / 2
QUARTER_PI = np.pi / 4


def asinh(x: float) -> float:
    return float(np.arcsinh(x))


def atanh(x: float) -> float:
    return float(np.arctanh(x))


def wrap_longitude(delta: float) -> float:
    """Reduce a longitude difference to [-π, π]."""
    return float(np.arctan2(np.sin(delta), np.cos(delta)))


def simpson(func: Callable[[float], float], lower: float, upper: float,
            steps: int = NumericConstants.SIMPSON_STEPS) -> float:
    """Integrate `func` over [lower, upper] with the composite Simpson rule.

    Parameters
    ----------
    func : callable
        Integrand.
    lower, upper : float
        Integration bounds.
    steps : int
        Number of sub-intervals; rounded up to an even number.

    Returns
    -------
    float
        The approximate integral.
    """
    if steps % 2:
        steps += 1
    x = np.linspace(lower, upper, steps + 1)
    y = np.array([func(v) for v in x])
    h = (upper - lower) / steps
    return float(h / 3 * (y[0] + y[-1] + 4 * y[1:-1:2].sum() + 2 * y[2:-1:2].sum()))


# -----------------------------------------------------------------------------
# Auxiliary latitudes
# -----------------------------------------------------------------------------

def conformal_t(latitude: float, e: float) -> float:
    """Isometric term t = tan(π/4 - φ/2) / ((1 - e sinφ)/(1 + e sinφ))^(e/2)."""
    e_sin = e * np.sin(latitude)
    return np.tan(QUARTER_PI - latitude / 2) / ((1 - e_sin) / (1 + e_sin)) ** (e / 2)


def conformal_latitude_inverse(chi: float, e: float) -> float:
    """Geodetic latitude from conformal latitude χ.

    Fourier series to the 8th order in e (IOGP 373-7-2, method 9804).
    """
    e2 = e * e
    e4 = e2 * e2
    e6 = e4 * e2
    e8 = e4 * e4
    return (chi
            + (e2 / 2 + 5 * e4 / 24 + e6 / 12 + 13 * e8 / 360) * np.sin(2 * chi)
            + (7 * e4 / 48 + 29 * e6 / 240 + 811 * e8 / 11520) * np.sin(4 * chi)
            + (7 * e6 / 120 + 81 * e8 / 1120) * np.sin(6 * chi)
            + (4279 * e8 / 161280) * np.sin(8 * chi))


def authalic_q(latitude: float, e: float) -> float:
    """Authalic term q of a latitude.

    Notes
    -----
    q = (1 - e²)[sinφ/(1 - e² sin²φ) - (1/(2e)) ln((1 - e sinφ)/(1 + e sinφ))]

    On a sphere q = 2 sinφ.
    """
    sin_lat = np.sin(latitude)
    if e == 0:
        return 2 * sin_lat
    e2 = e * e
    return (1 - e2) * (sin_lat / (1 - e2 * sin_lat ** 2)
                       - 1 / (2 * e) * np.log((1 - e * sin_lat) / (1 + e * sin_lat)))


def authalic_latitude_inverse(beta: float, e: float) -> float:
    """Geodetic latitude from authalic latitude β (series to e⁶)."""
    e2 = e * e
    e4 = e2 * e2
    e6 = e4 * e2
    return (beta
            + (e2 / 3 + 31 * e4 / 180 + 517 * e6 / 5040) * np.sin(2 * beta)
            + (23 * e4 / 360 + 251 * e6 / 3780) * np.sin(4 * beta)
            + (761 * e6 / 45360) * np.sin(6 * beta))


# -----------------------------------------------------------------------------
# Meridian arc
# -----------------------------------------------------------------------------

def meridian_arc(latitude: float, a: float, e2: float) -> float:
    """Meridian distance from the equator to `latitude` (series to e⁶).

    Notes
    -----
    M = a[(1 - e²/4 - 3e⁴/64 - 5e⁶/256)φ - (3e²/8 + 3e⁴/32 + 45e⁶/1024)sin2φ
          + (15e⁴/256 + 45e⁶/1024)sin4φ - (35e⁶/3072)sin6φ]
    """
    e4 = e2 * e2
    e6 = e4 * e2
    return a * ((1 - e2 / 4 - 3 * e4 / 64 - 5 * e6 / 256) * latitude
                - (3 * e2 / 8 + 3 * e4 / 32 + 45 * e6 / 1024) * np.sin(2 * latitude)
                + (15 * e4 / 256 + 45 * e6 / 1024) * np.sin(4 * latitude)
                - (35 * e6 / 3072) * np.sin(6 * latitude))


def meridian_arc_derivative(latitude: float, e2: float) -> float:
    """dM/dφ divided by a, for the series of `meridian_arc`."""
    e4 = e2 * e2
    e6 = e4 * e2
    return ((1 - e2 / 4 - 3 * e4 / 64 - 5 * e6 / 256)
            - 2 * (3 * e2 / 8 + 3 * e4 / 32 + 45 * e6 / 1024) * np.cos(2 * latitude)
            + 4 * (15 * e4 / 256 + 45 * e6 / 1024) * np.cos(4 * latitude)
            - 6 * (35 * e6 / 3072) * np.cos(6 * latitude))


def footpoint_latitude(arc: float, a: float, e2: float) -> float:
    """Latitude whose meridian arc is `arc` (inverse of `meridian_arc`).

    Uses the rectifying latitude μ and e1 = (1 - sqrt(1 - e²))/(1 + sqrt(1 - e²)).
    """
    e4 = e2 * e2
    e6 = e4 * e2
    mu = arc / (a * (1 - e2 / 4 - 3 * e4 / 64 - 5 * e6 / 256))
    root = np.sqrt(1 - e2)
    e1 = (1 - root) / (1 + root)
    return (mu
            + (3 * e1 / 2 - 27 * e1 ** 3 / 32) * np.sin(2 * mu)
            + (21 * e1 ** 2 / 16 - 55 * e1 ** 4 / 32) * np.sin(4 * mu)
            + (151 * e1 ** 3 / 96) * np.sin(6 * mu)
            + (1097 * e1 ** 4 / 512) * np.sin(8 * mu))


# -----------------------------------------------------------------------------
# Iteration
# -----------------------------------------------------------------------------

def iterate_fixed(step: Callable[[float], float], initial: float, count: int) -> float:
    """Apply `step` exactly `count` times starting from `initial`."""
    value = initial
    for _ in range(count):
        value = step(value)
    return value


def iterate_until_converged(
    step: Callable[[float], float],
    initial: float,
    name: str,
    tolerance: float = TOLERANCE,
    iteration_limit: int = ITERATION_LIMIT
) -> float:
    """Apply `step` until successive estimates differ by less than `tolerance`.

    Parameters
    ----------
    step : callable
        Maps an estimate to the next estimate.
    initial : float
        Starting estimate.
    name : str
        Name of the calling projection, used in the error message.
    tolerance : float
        Convergence threshold on |x(n) - x(n-1)|.
    iteration_limit : int
        Maximum number of steps.

    Returns
    -------
    float
        The converged estimate.

    Raises
    ------
    ConvergenceError
        If the ceiling is reached without convergence.
    """
    previous = initial
    for _ in range(iteration_limit):
        current = step(previous)
        if not np.isfinite(current):
            break
        if abs(current - previous) <= tolerance:
            return current
        previous = current
    else:
        residual = abs(step(previous) - previous)
        logger.warning(f"{name}: iteration ceiling {iteration_limit} reached, residual {residual:.3e}")
        raise ConvergenceError(name, iteration_limit, residual)
    logger.warning(f"{name}: iteration diverged")
    raise ConvergenceError(name, iteration_limit, float("inf"))
