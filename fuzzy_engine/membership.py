"""
Closed-form membership function factories.

Each factory validates its parameters once and returns a pure callable that
maps a crisp value to a membership degree. The callables hold no state, so a
single function can back any number of fuzzy sets.
"""

import math
from typing import Callable, Dict

import numpy as np

from fuzzy_engine.errors import ConfigurationError

MembershipFunction = Callable[[float], float]


def triangular(a: float, b: float, c: float) -> MembershipFunction:
    """
    Builds a triangular membership function.

    Args:
        a (float): Left foot of the triangle (membership 0).
        b (float): Peak of the triangle (membership 1).
        c (float): Right foot of the triangle (membership 0).

    Returns:
        MembershipFunction: Callable returning the degree in [0, 1]. A
            degenerate edge (a == b or b == c) still yields exactly 1.0 at
            the peak, which gives left and right shoulder shapes.
    """
    a, b, c = float(a), float(b), float(c)
    if not a <= b <= c:
        raise ConfigurationError(f"Invalid triangle params [{a}, {b}, {c}]")

    def _triangle(x: float) -> float:
        if x == b:
            return 1.0
        # left half rt triangle
        if a < x < b:
            return (x - a) / (b - a)
        # right half rt triangle
        if b < x < c:
            return (c - x) / (c - b)
        return 0.0

    return _triangle


def trapezoidal(a: float, b: float, c: float, d: float) -> MembershipFunction:
    """
    Builds a trapezoidal membership function.

    Args:
        a (float): Left base (membership 0).
        b (float): Start of the plateau (membership 1).
        c (float): End of the plateau (membership 1).
        d (float): Right base (membership 0).

    Returns:
        MembershipFunction: Callable returning the degree in [0, 1].
    """
    a, b, c, d = float(a), float(b), float(c), float(d)
    if not (a <= b <= c <= d):
        raise ConfigurationError(f"Invalid trapezoid params [{a}, {b}, {c}, {d}]")

    def _trapezoid(x: float) -> float:
        if b <= x <= c:
            return 1.0
        elif a < x < b:
            return (x - a) / (b - a)
        elif c < x < d:
            return (d - x) / (d - c)
        return 0.0

    return _trapezoid


def sigmoidal(steepness: float, midpoint: float) -> MembershipFunction:
    """
    Builds a logistic membership function 1 / (1 + exp(-k * (x - m))).

    A positive steepness opens to the right, a negative one to the left. The
    degree at the midpoint is 0.5.
    """
    k, m = float(steepness), float(midpoint)

    def _sigmoid(x: float) -> float:
        return float(1.0 / (1.0 + np.exp(-k * (x - m))))

    return _sigmoid


def gaussian(height: float, center: float, width: float) -> MembershipFunction:
    """Builds h * exp(-(x - c)^2 / (2 * w^2)). Height should lie in (0, 1]."""
    h, c, w = float(height), float(center), float(width)
    if w == 0.0 or not math.isfinite(w):
        raise ConfigurationError(f"Invalid gaussian width {width!r}")

    def _gaussian(x: float) -> float:
        return float(h * np.exp(-((x - c) ** 2) / (2.0 * w * w)))

    return _gaussian


MEMBERSHIP_FACTORIES: Dict[str, Callable[..., MembershipFunction]] = {
    "triangular": triangular,
    "trapezoidal": trapezoidal,
    "sigmoidal": sigmoidal,
    "gaussian": gaussian,
}
