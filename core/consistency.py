"""
Consistency scoring for cohorts of workouts.

A cohort is consistent when the metric it is NOT grouped by varies little:
runs in a 5-mile cohort are consistent when their durations are similar.
The coefficient of variation of those values is mapped to a 0-100 score
with exponential decay, score = 100 * e^(-10 * CV), so near-identical
repeats score high and moderate variability (CV ~ 0.1) still lands
around 37.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Sequence
import math

from .records import MetricType, WorkoutRecord
from .statistics import (
    calculate_mean,
    calculate_median,
    calculate_standard_deviation,
    calculate_coefficient_of_variation,
    clamp,
)


DECAY_RATE = 10.0

# Cohort metric -> attribute whose variation is measured
CONSISTENCY_AXIS: Dict[MetricType, str] = {
    MetricType.PACE: 'distance',
    MetricType.DISTANCE: 'duration',
    MetricType.DURATION: 'distance',
    MetricType.ELEVATION: 'duration',
    MetricType.TEMPERATURE: 'pace',
    MetricType.HUMIDITY: 'pace',
}

AXIS_LABELS = {
    'distance': 'Distance',
    'duration': 'Duration',
    'pace': 'Pace',
}


@dataclass(frozen=True)
class ConsistencyResult:
    """Score (0-100, higher is more consistent) and the statistics behind it."""
    score: int
    mean: float
    median: float
    standard_deviation: float
    coefficient_of_variation: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


EMPTY_CONSISTENCY = ConsistencyResult(
    score=0, mean=0.0, median=0.0, standard_deviation=0.0, coefficient_of_variation=0.0
)


def calculate_consistency(values: Sequence[float]) -> ConsistencyResult:
    """
    Score how little a list of observations varies.

    Args:
        values: Observations (durations, distances, paces...)

    Returns:
        ConsistencyResult. No observations score 0, a single observation
        scores 100.

    Example:
        >>> calculate_consistency([20, 20, 20, 20]).score
        100
    """
    if len(values) == 0:
        return EMPTY_CONSISTENCY

    if len(values) == 1:
        only = float(values[0])
        return ConsistencyResult(
            score=100, mean=only, median=only,
            standard_deviation=0.0, coefficient_of_variation=0.0,
        )

    cv = calculate_coefficient_of_variation(values)
    score = clamp(100 * math.exp(-DECAY_RATE * cv), 0, 100)

    return ConsistencyResult(
        score=int(round(score)),
        mean=calculate_mean(values),
        median=calculate_median(values),
        standard_deviation=calculate_standard_deviation(values),
        coefficient_of_variation=cv,
    )


def extract_consistency_values(
    records: Sequence[WorkoutRecord],
    metric: MetricType,
) -> List[float]:
    """Values of the off-axis attribute for a cohort grouped by ``metric``."""
    attribute = CONSISTENCY_AXIS[metric]
    return [getattr(record, attribute).value for record in records]


def consistency_metric_label(metric: MetricType) -> str:
    """Human-readable name of what consistency is measured over."""
    return AXIS_LABELS[CONSISTENCY_AXIS[metric]]
