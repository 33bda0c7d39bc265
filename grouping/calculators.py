"""
Per-metric cohort statistics.

Every cohort first goes through ``base_stats`` (title, representative
values, consistency, the 'Most Common' section), then through the
function registered for its metric in ``STAT_CALCULATORS``, which picks
the highlight and worst members, the total variation and the
metric-specific stat sections. Each stage returns a new Cohort.

A failure in the metric stage never escapes ``calculate_cohort_stats``:
the cohort keeps its base statistics and the failure is returned to the
caller.
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from core.consistency import calculate_consistency, extract_consistency_values
from core.errors import CalculatorFailure, InsufficientData
from core.quantity import Quantity, absolute_difference, percentage
from core.records import MetricType, WorkoutRecord
from prediction.engine import predict
from prediction.models import CohortPredictions, EMPTY_PREDICTIONS
from prediction.params import PredictionParams
from prediction.recommendations import format_recommendation
from .cohort import Cohort, StatItem, StatSection, StatType
from .config import GroupingConfig
from .metrics import GroupMetricDefinition


@dataclass(frozen=True)
class CalculationContext:
    """Run-wide inputs shared by all cohorts of one grouping pass."""
    metric: GroupMetricDefinition
    config: GroupingConfig
    total_records: int
    today: Optional[date] = None
    prediction_params: PredictionParams = field(default_factory=PredictionParams)


# ═══════════════════════════════════════════════════════════════════════════════
# MEMBER SELECTION
# ═══════════════════════════════════════════════════════════════════════════════
# Ties keep the earlier member

def _select(members: Sequence[WorkoutRecord], key: Callable, prefer_lower: bool) -> WorkoutRecord:
    best = members[0]
    for record in members[1:]:
        if (key(record) < key(best)) if prefer_lower else (key(record) > key(best)):
            best = record
    return best


def find_fastest(members: Sequence[WorkoutRecord]) -> WorkoutRecord:
    return _select(members, lambda r: r.pace.value, prefer_lower=True)


def find_slowest(members: Sequence[WorkoutRecord]) -> WorkoutRecord:
    return _select(members, lambda r: r.pace.value, prefer_lower=False)


def find_furthest(members: Sequence[WorkoutRecord]) -> WorkoutRecord:
    return _select(members, lambda r: r.distance.value, prefer_lower=False)


def find_shortest(members: Sequence[WorkoutRecord]) -> WorkoutRecord:
    return _select(members, lambda r: r.distance.value, prefer_lower=True)


def find_highest_elevation(members: Sequence[WorkoutRecord]) -> WorkoutRecord:
    return _select(members, lambda r: r.elevation.value, prefer_lower=False)


def find_lowest_elevation(members: Sequence[WorkoutRecord]) -> WorkoutRecord:
    return _select(members, lambda r: r.elevation.value, prefer_lower=True)


def find_most_recent(members: Sequence[WorkoutRecord]) -> WorkoutRecord:
    return _select(members, lambda r: r.end_date, prefer_lower=False)


def find_oldest(members: Sequence[WorkoutRecord]) -> WorkoutRecord:
    return _select(members, lambda r: r.end_date, prefer_lower=True)


# ═══════════════════════════════════════════════════════════════════════════════
# MODAL REPRESENTATIVES
# ═══════════════════════════════════════════════════════════════════════════════
# The "typical" workout: round every value to a coarse step, take the most
# frequent step and report the first real value that rounds to it.

REPRESENTATIVE_GRANULARITY: Dict[str, float] = {
    'pace': 1.0,          # min per distance unit
    'duration': 60.0,     # nearest minute
    'distance': 0.1,
    'elevation': 10.0,
    'humidity': 5.0,
    'temperature': 2.0,
}


def most_frequent(members: Sequence[WorkoutRecord], attribute: str) -> Optional[Quantity]:
    """
    Modal-rounded value of ``attribute`` across members.

    Members without the attribute are ignored. Ties go to the rounded
    value seen first. Returns None if no member has the attribute.
    """
    step = REPRESENTATIVE_GRANULARITY[attribute]
    values = [getattr(m, attribute) for m in members if getattr(m, attribute) is not None]
    if not values:
        return None

    rounded = [round(q.value / step) * step for q in values]
    counts = Counter(rounded)
    mode, _ = counts.most_common(1)[0]
    return values[rounded.index(mode)]


# ═══════════════════════════════════════════════════════════════════════════════
# STAT SECTION HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _section(title: str, description: str, *items: Optional[StatItem]) -> StatSection:
    return StatSection(
        title=title,
        description=description,
        items=tuple(item for item in items if item is not None),
    )


def _pace(workout: WorkoutRecord, label: str = 'Pace') -> StatItem:
    return StatItem(StatType.PACE, label, workout.pace, workout)


def _time(workout: WorkoutRecord, label: str = 'Time') -> StatItem:
    return StatItem(StatType.DURATION, label, workout.duration, workout)


def _distance(workout: WorkoutRecord, label: str = 'Distance') -> StatItem:
    return StatItem(StatType.DISTANCE, label, workout.distance, workout)


def _elevation(workout: WorkoutRecord, label: str = 'Elevation') -> StatItem:
    return StatItem(StatType.ELEVATION, label, workout.elevation, workout)


def _weather(workout: WorkoutRecord, metric: MetricType) -> Optional[StatItem]:
    if metric is MetricType.TEMPERATURE and workout.temperature is not None:
        return StatItem(StatType.TEMPERATURE, 'Temperature', workout.temperature, workout)
    if metric is MetricType.HUMIDITY and workout.humidity is not None:
        return StatItem(StatType.HUMIDITY, 'Humidity', workout.humidity, workout)
    return None


def _cumulative(cohort: Cohort, include_elevation: bool = True) -> StatSection:
    return _section(
        'Cumulative',
        f"Cumulative stats for {cohort.pretty_name}",
        StatItem(StatType.DISTANCE, 'Cumulative Distance', cohort.total_distance),
        StatItem(StatType.DURATION, 'Cumulative Duration', cohort.total_duration),
        StatItem(StatType.ELEVATION, 'Cumulative Elevation', cohort.total_elevation)
        if include_elevation else None,
    )


def _most_common(cohort: Cohort) -> StatSection:
    def item(stat_type: StatType, label: str, value: Optional[Quantity]) -> Optional[StatItem]:
        return StatItem(stat_type, label, value) if value is not None else None

    return _section(
        'Most Common',
        f"These are the most common stats for {cohort.pretty_name}",
        item(StatType.PACE, 'Pace', cohort.average_pace),
        item(StatType.DURATION, 'Time', cohort.average_duration),
        item(StatType.DISTANCE, 'Distance', cohort.average_distance),
        item(StatType.ELEVATION, 'Elevation', cohort.average_elevation),
        item(StatType.HUMIDITY, 'Humidity', cohort.average_humidity),
        item(StatType.TEMPERATURE, 'Temperature', cohort.average_temperature),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# BASE STAGE
# ═══════════════════════════════════════════════════════════════════════════════

def base_stats(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    """Statistics shared by every metric."""
    members = cohort.members
    title = ctx.metric.title_formatter(cohort.center, cohort.unit, ctx.config.tolerance)
    distribution = extract_consistency_values(members, cohort.metric)

    cohort = replace(
        cohort,
        title=title,
        pretty_name=title,
        percentage_of_total_workouts=percentage(
            Quantity.count(len(members)), Quantity.count(ctx.total_records)
        ),
        average_pace=most_frequent(members, 'pace'),
        average_duration=most_frequent(members, 'duration'),
        average_distance=most_frequent(members, 'distance'),
        average_elevation=most_frequent(members, 'elevation'),
        average_humidity=most_frequent(members, 'humidity'),
        average_temperature=most_frequent(members, 'temperature'),
        most_recent=find_most_recent(members),
        oldest=find_oldest(members),
        greatest_elevation=find_highest_elevation(members),
        lowest_elevation=find_lowest_elevation(members),
        variant_distribution=tuple(distribution),
        consistency=calculate_consistency(distribution),
        predictions=EMPTY_PREDICTIONS,
    )
    return replace(cohort, stats=(_most_common(cohort),))


# ═══════════════════════════════════════════════════════════════════════════════
# PREDICTIONS
# ═══════════════════════════════════════════════════════════════════════════════

def build_predictions(cohort: Cohort, ctx: CalculationContext) -> CohortPredictions:
    """
    Short and long horizon forecasts plus recommendation bullets.

    Raises:
        InsufficientData: for cohorts with fewer than two members
    """
    short_weeks, long_weeks = ctx.prediction_params.horizons_weeks[:2]
    short = predict(cohort, short_weeks, today=ctx.today, params=ctx.prediction_params)
    long = predict(cohort, long_weeks, today=ctx.today, params=ctx.prediction_params)
    return CohortPredictions(
        four_week=short,
        twelve_week=long,
        recommendations=tuple(format_recommendation(r) for r in short.recommendations),
    )


def attach_predictions(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    """
    Attach forecasts and a 'Training Recommendations' section.

    Cohorts with fewer than two members, or whose forecast fails, keep an
    empty prediction payload.
    """
    if cohort.size < 2:
        return cohort

    try:
        predictions = build_predictions(cohort, ctx)
    except (InsufficientData, ArithmeticError, ValueError) as e:
        logger.warning(f"Failed to generate prediction for cohort {cohort.title}: {e}")
        return replace(cohort, predictions=EMPTY_PREDICTIONS)

    training_items = tuple(
        StatItem(
            StatType.TRAINING,
            bullet,
            rec.target_pace if rec.target_pace is not None else rec.duration,
        )
        for bullet, rec in zip(predictions.recommendations, predictions.four_week.recommendations)
    )
    stats = cohort.stats
    if training_items:
        stats = stats + (StatSection(
            title='Training Recommendations',
            description=f"Suggested training for {cohort.pretty_name}",
            items=training_items,
        ),)
    return replace(cohort, predictions=predictions, stats=stats)


# ═══════════════════════════════════════════════════════════════════════════════
# METRIC STAGES
# ═══════════════════════════════════════════════════════════════════════════════

def distance_stats(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    """Best and worst by pace at this distance; variation in time taken."""
    highlight = find_fastest(cohort.members)
    worst = find_slowest(cohort.members)
    name = cohort.pretty_name

    cohort = replace(
        cohort,
        highlight=highlight,
        worst=worst,
        total_variation=absolute_difference(worst.duration, highlight.duration),
        stats=(
            _section('Fastest', f"Your best performance for {name}",
                     _pace(highlight), _time(highlight)),
            _section('Slowest', f"Your worst performance for {name}",
                     _pace(worst), _time(worst)),
            _section('Highest', f"Your highest elevation workouts for {name}",
                     _elevation(cohort.greatest_elevation)),
            _section('Lowest', f"Your lowest elevation workouts for {name}",
                     _elevation(cohort.lowest_elevation)),
        ) + cohort.stats + (_cumulative(cohort),),
    )
    return attach_predictions(cohort, ctx)


def pace_stats(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    """Best and worst by pace within the pace band; variation in distance covered."""
    highlight = find_fastest(cohort.members)
    worst = find_slowest(cohort.members)
    name = cohort.pretty_name

    cohort = replace(
        cohort,
        highlight=highlight,
        worst=worst,
        total_variation=absolute_difference(highlight.distance, worst.distance),
        stats=(
            _section('Fastest', f"The fastest run at {name}",
                     _pace(highlight), _distance(highlight)),
            _section('Slowest', f"The slowest run at {name}",
                     _pace(worst), _distance(worst)),
            _section('Highest Elevation', f"The highest elevation gain at {name}",
                     _elevation(cohort.greatest_elevation)),
            _section('Lowest Elevation', f"The lowest elevation gain at {name}",
                     _elevation(cohort.lowest_elevation)),
        ) + cohort.stats + (_cumulative(cohort, include_elevation=False),),
    )
    return attach_predictions(cohort, ctx)


def duration_stats(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    """Furthest and shortest distance covered in this time."""
    highlight = find_furthest(cohort.members)
    worst = find_shortest(cohort.members)
    name = cohort.pretty_name

    return replace(
        cohort,
        highlight=highlight,
        worst=worst,
        total_variation=absolute_difference(worst.distance, highlight.distance),
        stats=(
            _section('Furthest', f"Your longest distance at {name}",
                     _distance(highlight), _pace(highlight)),
            _section('Shortest', f"Your shortest distance at {name}",
                     _distance(worst), _pace(worst)),
            _section('Highest Elevation', f"Your highest elevation gain at {name}",
                     _elevation(cohort.greatest_elevation)),
            _section('Lowest Elevation', f"Your lowest elevation gain at {name}",
                     _elevation(cohort.lowest_elevation)),
            _section('Most Recent', f"Your most recent workout at {name}",
                     _distance(cohort.most_recent), _pace(cohort.most_recent),
                     _time(cohort.most_recent)),
        ) + cohort.stats,
    )


def elevation_stats(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    """Highest and lowest climb; always forecasts cohorts of two or more."""
    highlight = find_highest_elevation(cohort.members)
    worst = find_lowest_elevation(cohort.members)
    fastest = find_fastest(cohort.members)

    cohort = replace(
        cohort,
        highlight=highlight,
        worst=worst,
        total_variation=absolute_difference(highlight.elevation, worst.elevation),
        stats=(
            _section('Overview', f"Totals for {cohort.pretty_name}",
                     StatItem(StatType.DISTANCE, 'Total Distance', cohort.total_distance),
                     StatItem(StatType.ELEVATION, 'Total Elevation Gain', cohort.total_elevation)),
            _section('Elevation', f"Climbing range for {cohort.pretty_name}",
                     _elevation(highlight, 'Highest Elevation Gain'),
                     _elevation(worst, 'Lowest Elevation Gain')),
            _section('Pace', f"Pace for {cohort.pretty_name}",
                     _pace(fastest, 'Best Pace'),
                     StatItem(StatType.PACE, 'Average Pace', cohort.average_pace)
                     if cohort.average_pace is not None else None),
        ),
    )
    return attach_predictions(cohort, ctx)


def _weather_stats(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    highlight = find_fastest(cohort.members)
    worst = find_slowest(cohort.members)
    recent = cohort.most_recent
    metric = cohort.metric
    name = cohort.pretty_name

    return replace(
        cohort,
        highlight=highlight,
        worst=worst,
        total_variation=absolute_difference(worst.duration, highlight.duration),
        stats=(
            _section('Fastest', f"Your best performance at {name}",
                     _pace(highlight), _time(highlight), _weather(highlight, metric),
                     _distance(highlight)),
            _section('Slowest', f"Your worst performance at {name}",
                     _pace(worst), _time(worst), _weather(worst, metric), _distance(worst)),
            _section('Most Recent', f"Your most recent workout at {name}",
                     _pace(recent), _time(recent), _distance(recent), _weather(recent, metric)),
        ) + cohort.stats + (_cumulative(cohort),),
    )


def temperature_stats(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    """Best and worst by pace at this temperature; variation in time taken."""
    return _weather_stats(cohort, ctx)


def humidity_stats(cohort: Cohort, ctx: CalculationContext) -> Cohort:
    """Best and worst by pace at this humidity; variation in time taken."""
    return _weather_stats(cohort, ctx)


StatCalculator = Callable[[Cohort, CalculationContext], Cohort]

STAT_CALCULATORS: Dict[MetricType, StatCalculator] = {
    MetricType.DISTANCE: distance_stats,
    MetricType.PACE: pace_stats,
    MetricType.DURATION: duration_stats,
    MetricType.ELEVATION: elevation_stats,
    MetricType.TEMPERATURE: temperature_stats,
    MetricType.HUMIDITY: humidity_stats,
}


def _failure(cohort: Cohort, error: Exception, fallback: str) -> CalculatorFailure:
    failure = CalculatorFailure(cohort.metric.value, cohort.key, error)
    failure.__cause__ = error
    logger.warning(f"{failure}; {fallback}")
    return failure


def calculate_cohort_stats(
    cohort: Cohort,
    ctx: CalculationContext,
    calculators: Optional[Dict[MetricType, StatCalculator]] = None,
) -> Tuple[Cohort, Optional[CalculatorFailure]]:
    """
    Run the base stage and the metric stage for one cohort.

    Returns:
        Tuple of (cohort, failure). When the metric stage fails the cohort
        carries only the base statistics and an empty prediction payload;
        when the base stage fails it is returned as binned.
    """
    if calculators is None:
        calculators = STAT_CALCULATORS

    try:
        base = base_stats(cohort, ctx)
    except Exception as e:
        return cohort, _failure(cohort, e, "keeping the bare cohort")

    calculator = calculators.get(cohort.metric)
    if calculator is None:
        return base, None

    try:
        return calculator(base, ctx), None
    except Exception as e:
        return base, _failure(cohort, e, "keeping base statistics")


def calculate_all(
    cohorts: List[Cohort],
    ctx: CalculationContext,
    calculators: Optional[Dict[MetricType, StatCalculator]] = None,
) -> Tuple[List[Cohort], List[CalculatorFailure]]:
    """Calculate stats for every cohort, collecting failures instead of raising."""
    results, failures = [], []
    for cohort in cohorts:
        calculated, failure = calculate_cohort_stats(cohort, ctx, calculators)
        results.append(calculated)
        if failure is not None:
            failures.append(failure)
    return results, failures
