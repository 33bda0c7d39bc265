"""
Trend analysis over a cohort's workout history.

The series is (days since first workout, metric value) ordered by start
date. A least-squares line gives the trend; |r| of the fit is the trend
strength and the slope relative to the series mean gives the momentum.
Lower values are better for both series used here (pace, duration).
"""

from datetime import datetime
from typing import List, Sequence, Tuple
import warnings

import numpy as np
from scipy import stats

from core.records import MetricType, WorkoutRecord
from core.statistics import calculate_coefficient_of_variation, calculate_mean, clamp
from .models import Momentum, PerformanceTrend
from .params import PredictionParams


SECONDS_PER_DAY = 86400.0


def series_attribute(metric: MetricType) -> str:
    """Which workout attribute is forecast for cohorts of ``metric``."""
    if metric is MetricType.DURATION:
        return 'duration'
    return 'pace'


def order_members(members: Sequence[WorkoutRecord]) -> List[WorkoutRecord]:
    """Members sorted by start date; ids break ties so order never depends on input order."""
    return sorted(members, key=lambda r: (r.start_date, r.id))


def days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def build_series(
    members: Sequence[WorkoutRecord],
    attribute: str,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build the (day offset, value) series for ``members``.

    Args:
        members: Workouts, in any order
        attribute: 'pace' or 'duration'

    Returns:
        Tuple of (x, y) arrays ordered by start date
    """
    ordered = order_members(members)
    if not ordered:
        return np.array([]), np.array([])

    first = ordered[0].start_date
    x = np.array([days_between(first, r.start_date) for r in ordered], dtype=float)
    y = np.array([getattr(r, attribute).value for r in ordered], dtype=float)
    return x, y


def fit_linear_trend(x: np.ndarray, y: np.ndarray) -> Tuple[float, float, float]:
    """
    Least-squares fit of y against x.

    Returns:
        Tuple of (slope, intercept, r). Degenerate series (fewer than two
        points, all on one day, or a constant value) give a flat line
        through the mean with r = 0.
    """
    if len(x) < 2 or np.ptp(x) == 0:
        return 0.0, calculate_mean(list(y)), 0.0

    if np.ptp(y) == 0:
        return 0.0, float(y[0]), 0.0

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        result = stats.linregress(x, y)

    r = float(result.rvalue) if np.isfinite(result.rvalue) else 0.0
    return float(result.slope), float(result.intercept), r


def classify_momentum(weekly_change_rate: float, threshold: float) -> Momentum:
    """Improving when values fall faster than ``threshold`` per week, declining when they rise."""
    if weekly_change_rate < -threshold:
        return Momentum.IMPROVING
    if weekly_change_rate > threshold:
        return Momentum.DECLINING
    return Momentum.PLATEAUING


def calculate_performance_trend(
    x: np.ndarray,
    y: np.ndarray,
    params: PredictionParams,
) -> PerformanceTrend:
    """Fit the series and summarise its direction, strength and volatility."""
    slope, intercept, r = fit_linear_trend(x, y)

    mean_value = calculate_mean(list(y))
    weekly_change_rate = slope * 7 / mean_value if mean_value > 0 else 0.0

    return PerformanceTrend(
        slope=slope,
        intercept=intercept,
        trend_strength=clamp(abs(r), 0.0, 1.0),
        momentum=classify_momentum(weekly_change_rate, params.momentum_threshold),
        volatility=calculate_coefficient_of_variation(list(y)),
        weekly_change_rate=weekly_change_rate,
    )
