"""
Prediction engine: forecast a cohort's performance weeks ahead.

Given a cohort with at least two workouts, fits a linear trend over its
history, projects it to ``today + weeks_ahead`` and bounds the projection
so a short noisy series cannot promise runaway improvement; the
improvement window narrows further as the cohort's best pace approaches
elite pace for its distance. Confidence
combines four saturating components (data volume, time span, trend
strength, cohort consistency) and maps to fixed bands:

    low < 40 <= medium < 70 <= high

The result depends only on the cohort members, ``weeks_ahead`` and the
reference date, so repeated calls are identical.
"""

from datetime import date, timedelta
from typing import Optional

from core.consistency import calculate_consistency, extract_consistency_values
from core.errors import InsufficientData
from core.quantity import Quantity, in_miles, pace_per_mile
from core.records import WorkoutRecord
from core.statistics import clamp
from .models import ConfidenceLevel, Prediction, PredictionBasis
from .params import PredictionParams
from .recommendations import generate_training_recommendations
from .trend import (
    build_series,
    calculate_performance_trend,
    order_members,
    series_attribute,
)


MIN_MEMBERS = 2


def calculate_confidence(
    data_points: int,
    time_span_days: float,
    trend_strength: float,
    consistency_score: float,
    params: Optional[PredictionParams] = None,
) -> float:
    """
    Weighted 0-100 confidence score.

    Each component grows with its input and saturates at its weight:
    data points at ``data_points_saturation``, time span at
    ``time_span_saturation_days``, trend strength at 1, consistency at 100.
    """
    if params is None:
        params = PredictionParams()

    data_score = params.data_points_weight * min(1.0, data_points / params.data_points_saturation)
    span_score = params.time_span_weight * min(
        1.0, max(0.0, time_span_days) / params.time_span_saturation_days
    )
    trend_score = params.trend_strength_weight * clamp(trend_strength, 0.0, 1.0)
    consistency_component = params.consistency_weight * clamp(consistency_score, 0.0, 100.0) / 100

    return clamp(data_score + span_score + trend_score + consistency_component, 0.0, 100.0)


def calculate_realism_factor(best: WorkoutRecord, params: PredictionParams) -> float:
    """
    Share of the improvement window available to a cohort.

    The best workout's pace is compared with the elite pace for the closest
    benchmark distance; the smaller the gap, the smaller the factor. Units
    without a known distance get no damping.

    Returns:
        Factor in (0, 1]
    """
    distance = in_miles(best.distance)
    pace = pace_per_mile(best.pace)
    if distance is None or pace is None or pace <= 0:
        return 1.0

    _, elite_pace = min(params.elite_pace_benchmarks, key=lambda b: abs(b[0] - distance))
    gap = pace - elite_pace
    for threshold, factor in params.realism_tiers:
        if gap < threshold:
            return factor
    return 1.0


def bound_projection(
    baseline: float,
    projected: float,
    weeks_ahead: int,
    params: PredictionParams,
    realism: float = 1.0,
) -> float:
    """
    Clamp a projected value to the allowed improvement/decline window around ``baseline``.

    ``realism`` scales the improvement side of the window only.
    """
    if baseline <= 0:
        return max(0.0, projected)

    max_improvement = realism * min(
        params.max_weekly_improvement * weeks_ahead, params.max_total_improvement
    )
    max_decline = min(params.max_weekly_decline * weeks_ahead, params.max_total_decline)

    lower = baseline * (1 - max_improvement)
    upper = baseline * (1 + max_decline)
    return clamp(projected, lower, upper)


def predict(
    cohort,
    weeks_ahead: int,
    today: Optional[date] = None,
    params: Optional[PredictionParams] = None,
) -> Prediction:
    """
    Forecast a cohort's performance ``weeks_ahead`` weeks from ``today``.

    Args:
        cohort: Cohort with at least two members
        weeks_ahead: Forecast horizon in weeks (>= 1)
        today: Reference date (defaults to the current date)
        params: Prediction parameters (defaults if None)

    Returns:
        Prediction

    Raises:
        InsufficientData: if the cohort has fewer than two members
        ValueError: if weeks_ahead is not positive
    """
    if params is None:
        params = PredictionParams()
    params.require_valid()

    if len(cohort.members) < MIN_MEMBERS:
        raise InsufficientData(
            f"Prediction for cohort {cohort.key!r} needs at least {MIN_MEMBERS} workouts, "
            f"got {len(cohort.members)}"
        )
    if weeks_ahead < 1:
        raise ValueError(f"weeks_ahead must be at least 1, got {weeks_ahead}")

    if today is None:
        today = date.today()

    attribute = series_attribute(cohort.metric)
    ordered = order_members(cohort.members)
    x, y = build_series(ordered, attribute)
    trend = calculate_performance_trend(x, y, params)

    first, latest = ordered[0], ordered[-1]
    target_date = today + timedelta(weeks=weeks_ahead)
    target_offset = (target_date - first.start_date.date()).days

    baseline = float(y[-1])
    raw_projection = trend.intercept + trend.slope * target_offset
    paced = [r for r in ordered if r.pace.value > 0]
    realism = 1.0
    if paced:
        realism = calculate_realism_factor(min(paced, key=lambda r: r.pace.value), params)
    projected = bound_projection(baseline, raw_projection, weeks_ahead, params, realism)

    if baseline > 0:
        improvement_percentage = round((baseline - projected) / baseline * 100, 2)
    else:
        improvement_percentage = 0.0

    distance = latest.distance
    if attribute == 'pace':
        predicted_pace = latest.pace.with_value(round(projected, 2))
        predicted_duration = Quantity(round(projected * distance.value * 60, 2), 's')
    else:
        predicted_duration = Quantity(round(projected, 2), 's')
        pace_value = projected / 60 / distance.value if distance.value > 0 else 0.0
        predicted_pace = latest.pace.with_value(round(pace_value, 2))

    time_span_days = (latest.start_date - first.start_date).days
    consistency = calculate_consistency(extract_consistency_values(ordered, cohort.metric))
    confidence = round(
        calculate_confidence(
            len(ordered), time_span_days, trend.trend_strength, consistency.score, params
        ),
        2,
    )

    recommendations = generate_training_recommendations(
        trend,
        current_pace=latest.pace,
        projected_pace=predicted_pace,
        params=params,
        distance=distance,
    )

    return Prediction(
        cohort_key=cohort.key,
        target_date=target_date,
        weeks_ahead=weeks_ahead,
        predicted_pace=predicted_pace,
        predicted_duration=predicted_duration,
        predicted_distance=distance if distance.value > 0 else None,
        confidence=confidence,
        confidence_level=ConfidenceLevel.from_score(confidence),
        improvement_percentage=improvement_percentage,
        basis=PredictionBasis(
            data_points=len(ordered),
            time_span_days=time_span_days,
            trend_strength=round(trend.trend_strength, 2),
            consistency_score=consistency.score,
            realism_factor=realism,
        ),
        trend=trend,
        recommendations=tuple(recommendations),
    )
