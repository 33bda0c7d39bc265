"""
Grouping Engine: bucket workouts into cohorts by one metric.

For each workout the metric value v is snapped to the nearest multiple of
the bucket width (round half up):

    center = floor(v / width + 0.5) * width

and accepted into that center's cohort iff |v - center| <= tolerance.
Rejected workouts are counted as skipped and appear in no cohort. Every
workout is compared against exactly one center, so with the half-width
rule (tolerance <= width / 2) no workout can land in two cohorts.

After binning, each cohort runs through its stat calculators and cohorts
are ranked by member count.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union
import math

from loguru import logger

from core.errors import CalculatorFailure
from core.records import MetricType, WorkoutRecord
from prediction.params import PredictionParams
from .calculators import CalculationContext, StatCalculator, calculate_all
from .cohort import Cohort
from .config import GroupingConfig
from .metrics import GroupMetricDefinition, format_bucket_key, get_metric_definition


# Absorbs float noise from v / width so exact multiples stay exact
QUOTIENT_PRECISION = 9
ACCEPTANCE_EPSILON = 1e-9

MOST_COMMON = "Most Common"
LEAST_COMMON = "Least Common"


def bucket_center(value: float, bucket_width: float) -> float:
    """
    Nearest multiple of ``bucket_width`` to ``value``, halves rounding up.

    A zero width puts every distinct value in its own bucket.
    """
    if bucket_width == 0:
        return float(value)
    quotient = round(value / bucket_width, QUOTIENT_PRECISION)
    center = math.floor(quotient + 0.5) * bucket_width
    return round(center, QUOTIENT_PRECISION) + 0.0


def is_within_tolerance(value: float, center: float, tolerance: float) -> bool:
    return abs(value - center) <= tolerance + ACCEPTANCE_EPSILON


def rank_label(rank: int, total: int) -> str:
    """'Most Common' for the first, 'Least Common' for the last, '{n}th Most Common' between."""
    if rank == 1:
        return MOST_COMMON
    if rank == total:
        return LEAST_COMMON
    return f"{rank}th Most Common"


def assign_ranks(cohorts: Sequence[Cohort]) -> List[Cohort]:
    """Sort by descending member count (ties keep discovery order) and label ranks."""
    ordered = sorted(cohorts, key=lambda c: -c.size)
    total = len(ordered)
    return [
        replace(cohort, rank=rank, rank_label=rank_label(rank, total))
        for rank, cohort in enumerate(ordered, start=1)
    ]


@dataclass
class GroupingResult:
    """
    Output of one grouping pass.

    Iterating a result yields its cohorts in rank order. ``considered`` is
    the number of workouts that passed the metric's inclusion predicate;
    ``skipped`` those of them rejected by the tolerance test.
    """
    metric: MetricType
    config: GroupingConfig
    cohorts: List[Cohort] = field(default_factory=list)
    considered: int = 0
    skipped: int = 0
    failures: List[CalculatorFailure] = field(default_factory=list)

    def __iter__(self) -> Iterator[Cohort]:
        return iter(self.cohorts)

    def __len__(self) -> int:
        return len(self.cohorts)

    def __getitem__(self, index: int) -> Cohort:
        return self.cohorts[index]

    @property
    def grouped(self) -> int:
        """Workouts placed in some cohort."""
        return sum(c.size for c in self.cohorts)

    def cohort(self, key: str) -> Cohort:
        """Look up a cohort by its bucket key."""
        for cohort in self.cohorts:
            if cohort.key == key:
                return cohort
        raise KeyError(key)

    def keys(self) -> List[str]:
        return [c.key for c in self.cohorts]


class GroupingEngine:
    """
    Groups workouts into ranked cohorts with statistics and forecasts.

    The engine holds no state between calls; ``today`` pins the reference
    date used for forecasts (the current date when None).
    """

    def __init__(
        self,
        prediction_params: Optional[PredictionParams] = None,
        today: Optional[date] = None,
        calculators: Optional[Dict[MetricType, StatCalculator]] = None,
    ):
        self.prediction_params = (prediction_params or PredictionParams()).require_valid()
        self.today = today
        self.calculators = calculators

    def run(
        self,
        records: Iterable[WorkoutRecord],
        metric: Union[MetricType, str, GroupMetricDefinition],
        config: Optional[GroupingConfig] = None,
    ) -> GroupingResult:
        """
        Group workouts by ``metric``.

        Args:
            records: Workouts to group (not modified)
            metric: Metric type, its name, or a metric definition
            config: Tolerance and bucket width (metric defaults if None)

        Returns:
            GroupingResult with cohorts in rank order

        Raises:
            InvalidConfiguration: if the config violates its constraints
        """
        definition = get_metric_definition(metric)
        if config is None:
            config = GroupingConfig.for_metric(definition)
        config.require_valid()

        metric_type = definition.metric_type
        included = [r for r in records if definition.includes(r)]
        result = GroupingResult(metric=metric_type, config=config, considered=len(included))

        if not included:
            logger.warning(f"No workouts to group by {metric_type.value}")
            return result

        cohorts: Dict[float, Cohort] = {}
        skipped_by_center: Dict[float, int] = {}

        for record in included:
            value = definition.extract(record).value
            center = bucket_center(value, config.bucket_width)

            if not is_within_tolerance(value, center, config.tolerance):
                logger.debug(
                    f"Workout {record.id} with {metric_type.value} {value} is not within "
                    f"{config.tolerance} of {center}; skipping"
                )
                skipped_by_center[center] = skipped_by_center.get(center, 0) + 1
                result.skipped += 1
                continue

            logger.debug(f"Workout {record.id} with {metric_type.value} {value} assigned to {center}")

            if center in cohorts:
                cohorts[center] = cohorts[center].add(record)
            else:
                unit = definition.unit_formatter(record)
                cohorts[center] = Cohort.seed(
                    key=format_bucket_key(center),
                    center=center,
                    metric=metric_type,
                    unit=unit,
                    title=format_bucket_key(center),
                    suffix=definition.suffix_formatter(unit),
                    first=record,
                )

        binned = [
            cohort.with_skipped(skipped_by_center.get(center, 0))
            for center, cohort in cohorts.items()
        ]

        ctx = CalculationContext(
            metric=definition,
            config=config,
            total_records=len(included),
            today=self.today,
            prediction_params=self.prediction_params,
        )
        calculated, failures = calculate_all(binned, ctx, self.calculators)

        result.cohorts = assign_ranks(calculated)
        result.failures = failures

        logger.info(
            f"Grouped {result.grouped} of {result.considered} workouts by {metric_type.value} "
            f"into {len(result.cohorts)} cohorts ({result.skipped} skipped, "
            f"{len(failures)} calculator failures)"
        )
        return result

    def group(
        self,
        records: Iterable[WorkoutRecord],
        metric: Union[MetricType, str, GroupMetricDefinition],
        tolerance: Optional[float] = None,
        bucket_width: Optional[float] = None,
    ) -> List[Cohort]:
        """Group workouts and return only the ranked cohorts."""
        definition = get_metric_definition(metric)
        config = GroupingConfig.for_metric(definition, tolerance, bucket_width)
        return self.run(records, definition, config).cohorts


def group_workouts(
    records: Iterable[WorkoutRecord],
    metric: Union[MetricType, str, GroupMetricDefinition],
    tolerance: Optional[float] = None,
    bucket_width: Optional[float] = None,
    today: Optional[date] = None,
    prediction_params: Optional[PredictionParams] = None,
) -> GroupingResult:
    """
    Convenience wrapper: group ``records`` by ``metric`` with a fresh engine.

    Tolerance and bucket width default to the metric's defaults.
    """
    definition = get_metric_definition(metric)
    config = GroupingConfig.for_metric(definition, tolerance, bucket_width)
    engine = GroupingEngine(prediction_params=prediction_params, today=today)
    return engine.run(records, definition, config)
