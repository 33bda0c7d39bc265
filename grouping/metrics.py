"""
Metric definitions: how each groupable metric is read from a workout and
how its cohorts are labelled.

Point metrics label a cohort with a single representative value
("5 mi"); range metrics label it with the acceptance window around the
center ("40–50 min").
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from core.quantity import Quantity
from core.records import MetricType, WorkoutRecord


def format_bucket_key(center: float) -> str:
    """
    Integer text for whole centers, one decimal otherwise.

    Centers that one decimal cannot represent exactly use the shortest
    positional text that round-trips, so distinct centers never share a key.
    """
    if float(center).is_integer():
        return str(int(center))
    one_decimal = f"{center:.1f}"
    if float(one_decimal) == center:
        return one_decimal
    return np.format_float_positional(float(center), trim='-')


def _format_number(value: float) -> str:
    return f"{round(value, 1):g}"


def _range_label(center: float, tolerance: float, scale: float = 1.0) -> str:
    low = max(0.0, center - tolerance) / scale
    high = (center + tolerance) / scale
    if low == high:
        return _format_number(low)
    return f"{_format_number(low)}–{_format_number(high)}"


def _signed_range_label(center: float, tolerance: float) -> str:
    if tolerance == 0:
        return _format_number(center)
    return f"{_format_number(center - tolerance)}–{_format_number(center + tolerance)}"


@dataclass(frozen=True)
class GroupMetricDefinition:
    """
    Static description of one groupable metric.

    Attributes:
        metric_type: Which metric this is
        default_tolerance: Max deviation from a bucket center for membership
        default_bucket_width: Spacing between adjacent bucket centers
        extractor: Reads the metric value from a workout
        unit_formatter: Unit of the metric for a given workout
        suffix_formatter: Short display suffix for a cohort unit
        title_formatter: (center, unit, tolerance) -> cohort title
        include: Optional predicate; rejected workouts are ignored entirely
    """
    metric_type: MetricType
    default_tolerance: float
    default_bucket_width: float
    extractor: Callable[[WorkoutRecord], Optional[Quantity]]
    unit_formatter: Callable[[WorkoutRecord], str]
    suffix_formatter: Callable[[str], str]
    title_formatter: Callable[[float, str, float], str]
    include: Optional[Callable[[WorkoutRecord], bool]] = None
    label: str = ""

    def includes(self, record: WorkoutRecord) -> bool:
        """Whether a workout takes part in grouping by this metric."""
        if self.include is not None and not self.include(record):
            return False
        return self.extractor(record) is not None

    def extract(self, record: WorkoutRecord) -> Quantity:
        value = self.extractor(record)
        if value is None:
            raise ValueError(f"Workout {record.id} has no {self.metric_type.value} value")
        return value


METRIC_DEFINITIONS: Dict[MetricType, GroupMetricDefinition] = {
    MetricType.DISTANCE: GroupMetricDefinition(
        metric_type=MetricType.DISTANCE,
        default_tolerance=0.25,
        default_bucket_width=1.0,
        extractor=lambda r: r.distance,
        unit_formatter=lambda r: r.distance.unit,
        suffix_formatter=lambda unit: unit,
        title_formatter=lambda center, unit, tol: f"{format_bucket_key(center)} {unit}",
        label="Distance",
    ),
    MetricType.PACE: GroupMetricDefinition(
        metric_type=MetricType.PACE,
        default_tolerance=0.5,
        default_bucket_width=1.0,
        extractor=lambda r: r.pace,
        unit_formatter=lambda r: r.pace.unit,
        suffix_formatter=lambda unit: unit,
        title_formatter=lambda center, unit, tol: f"{format_bucket_key(center)} {unit}",
        label="Pace",
    ),
    MetricType.DURATION: GroupMetricDefinition(
        metric_type=MetricType.DURATION,
        default_tolerance=300.0,     # 5 minutes
        default_bucket_width=900.0,  # 15 minute increments
        extractor=lambda r: r.duration,
        unit_formatter=lambda r: 's',
        suffix_formatter=lambda unit: "minutes",
        title_formatter=lambda center, unit, tol: f"{_range_label(center, tol, scale=60.0)} min",
        label="Duration",
    ),
    MetricType.ELEVATION: GroupMetricDefinition(
        metric_type=MetricType.ELEVATION,
        default_tolerance=50.0,
        default_bucket_width=100.0,
        extractor=lambda r: r.elevation,
        unit_formatter=lambda r: r.elevation.unit,
        suffix_formatter=lambda unit: unit,
        title_formatter=lambda center, unit, tol: f"{format_bucket_key(center)} {unit} elevation",
        include=lambda r: r.elevation is not None and r.elevation.value > 0,
        label="Elevation",
    ),
    MetricType.TEMPERATURE: GroupMetricDefinition(
        metric_type=MetricType.TEMPERATURE,
        default_tolerance=2.5,
        default_bucket_width=5.0,
        extractor=lambda r: r.temperature,
        unit_formatter=lambda r: r.temperature.unit,
        suffix_formatter=lambda unit: unit,
        title_formatter=lambda center, unit, tol: f"{_signed_range_label(center, tol)} {unit}",
        label="Temperature",
    ),
    MetricType.HUMIDITY: GroupMetricDefinition(
        metric_type=MetricType.HUMIDITY,
        default_tolerance=5.0,
        default_bucket_width=10.0,
        extractor=lambda r: r.humidity,
        unit_formatter=lambda r: r.humidity.unit,
        suffix_formatter=lambda unit: "%",
        title_formatter=lambda center, unit, tol: f"{_range_label(center, tol)} {unit}",
        label="Humidity",
    ),
}


def get_metric_definition(metric) -> GroupMetricDefinition:
    """
    Look up a metric definition by MetricType or its string value.

    Raises:
        ValueError: for an unknown metric name
    """
    if isinstance(metric, GroupMetricDefinition):
        return metric
    if not isinstance(metric, MetricType):
        try:
            metric = MetricType(str(metric).lower())
        except ValueError:
            valid = ", ".join(m.value for m in MetricType)
            raise ValueError(f"Unknown metric {metric!r}; expected one of: {valid}") from None
    return METRIC_DEFINITIONS[metric]
