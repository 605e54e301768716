"""
Computes the final crisp output from the aggregated fuzzy rule output.

The aggregate is a snapshot FuzzySet: a sparse mapping from crisp output
values to degrees. Defuzzifiers reduce it to a single number.
"""

import logging
from typing import Callable, Dict

import numpy as np

from fuzzy_engine.fuzzy_set import FuzzySet

defuzzifier_log = logging.getLogger("defuzzifier")


def _as_arrays(fuzzy_set: FuzzySet):
    items = fuzzy_set.cached_items()
    keys = np.fromiter((k for k, _ in items), dtype=float, count=len(items))
    degrees = np.fromiter((v for _, v in items), dtype=float, count=len(items))
    return keys, degrees


def center_of_mass(fuzzy_set: FuzzySet) -> float:
    """
    Calculates the degree-weighted average of the set's cached values.

    The output is calculated as:
        crisp = (Σ(mu_i * x_i)) / (Σ mu_i)

    Args:
        fuzzy_set (FuzzySet): The aggregated rule output.

    Returns:
        float: The crisp value. Returns 0 if the set is empty.
    """
    keys, degrees = _as_arrays(fuzzy_set)
    denominator = float(degrees.sum())
    if denominator <= 0.0:
        defuzzifier_log.warning(
            "Set '%s' has no support to defuzzify. Outputting 0.", fuzzy_set.name)
        return 0.0

    crisp = float(np.dot(keys, degrees) / denominator)
    defuzzifier_log.debug(
        "Center of mass of '%s': %.4f (from %d points)", fuzzy_set.name, crisp, len(keys))
    return crisp


def mean_of_maximum(fuzzy_set: FuzzySet) -> float:
    """Mean of the values whose degree reaches the set's peak. Empty set gives 0."""
    keys, degrees = _as_arrays(fuzzy_set)
    if keys.size == 0:
        defuzzifier_log.warning(
            "Set '%s' has no support to defuzzify. Outputting 0.", fuzzy_set.name)
        return 0.0

    peak = float(degrees.max())
    # numerical tolerance
    tol = max(1e-12, 1e-6 * peak)
    tops = keys[np.abs(degrees - peak) <= tol]
    crisp = float(tops.mean())
    defuzzifier_log.debug(
        "Mean of maximum of '%s': %.4f (peak %.3f over %d points)",
        fuzzy_set.name, crisp, peak, tops.size)
    return crisp


DEFUZZIFIERS: Dict[str, Callable[[FuzzySet], float]] = {
    "center_of_mass": center_of_mass,
    "mean_of_maximum": mean_of_maximum,
}
