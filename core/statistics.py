"""
Descriptive statistics primitives.

All functions are total over plain numeric sequences: empty or
too-short inputs return 0 instead of raising.
"""

from typing import Sequence
import numpy as np


def calculate_mean(values: Sequence[float]) -> float:
    """Arithmetic mean, or 0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def calculate_median(values: Sequence[float]) -> float:
    """
    Median value, or 0 for an empty sequence.

    Even-length inputs average the two central values.
    """
    if len(values) == 0:
        return 0.0
    return float(np.median(np.asarray(values, dtype=float)))


def calculate_standard_deviation(values: Sequence[float]) -> float:
    """
    Sample standard deviation (divisor n - 1).

    Returns 0 for fewer than 2 values.
    """
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float), ddof=1))


def calculate_coefficient_of_variation(values: Sequence[float]) -> float:
    """
    Coefficient of variation: standard deviation / mean.

    Returns 0 for fewer than 2 values or a zero mean.
    """
    if len(values) < 2:
        return 0.0

    mean = calculate_mean(values)
    if mean == 0:
        return 0.0

    return calculate_standard_deviation(values) / mean


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Clamp ``value`` to the inclusive range [min_value, max_value]."""
    if min_value > max_value:
        raise ValueError(f"min_value ({min_value}) must not exceed max_value ({max_value})")
    return max(min_value, min(value, max_value))
