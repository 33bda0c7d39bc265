"""
Training recommendations derived from a cohort's trend and distance.

Improving cohorts get work that reinforces the pattern at a target pace
taken from the projection; plateauing cohorts get variety (hills, speed);
declining cohorts get recovery-weighted volume at an easier pace.

The cohort's distance band then sets how long tempo and long runs last
and adds the band's key session when the momentum picks left it out:
intervals for short races, a long run for everything longer.
"""

from typing import Dict, List, Optional, Tuple

from core.quantity import Quantity, format_pace, in_miles
from .models import (
    DistanceTier,
    Intensity,
    Momentum,
    PerformanceTrend,
    TrainingRecommendation,
    WorkoutKind,
)
from .params import PredictionParams


TIER_TEMPO_MINUTES: Dict[DistanceTier, float] = {
    DistanceTier.SHORT: 20,
    DistanceTier.MEDIUM: 30,
    DistanceTier.LONG: 40,
}

# (minutes, pace factor)
TIER_LONG_RUN: Dict[DistanceTier, Tuple[float, float]] = {
    DistanceTier.SHORT: (60, 1.1),
    DistanceTier.MEDIUM: (60, 1.1),
    DistanceTier.LONG: (90, 1.15),
}


def _minutes(value: float) -> Quantity:
    return Quantity(value, 'min')


def _scaled_pace(pace: Optional[Quantity], factor: float) -> Optional[Quantity]:
    if pace is None or pace.value <= 0:
        return None
    return pace.with_value(round(pace.value * factor, 2))


def distance_tier(
    distance: Optional[Quantity],
    params: Optional[PredictionParams] = None,
) -> Optional[DistanceTier]:
    """Distance band of a cohort, or None when the distance unit is unknown."""
    if params is None:
        params = PredictionParams()
    miles = in_miles(distance) if distance is not None else None
    if miles is None:
        return None
    if miles <= params.short_distance_max:
        return DistanceTier.SHORT
    if miles <= params.medium_distance_max:
        return DistanceTier.MEDIUM
    return DistanceTier.LONG


def _tier_focus(tier: DistanceTier, current_pace: Optional[Quantity]) -> TrainingRecommendation:
    if tier is DistanceTier.SHORT:
        return TrainingRecommendation(
            workout_type=WorkoutKind.INTERVALS,
            frequency=2,
            intensity=Intensity.HARD,
            reason="Improve speed and VO2 max for shorter distances",
            duration=_minutes(30),
            target_pace=_scaled_pace(current_pace, 0.9),
        )
    minutes, factor = TIER_LONG_RUN[tier]
    reason = ("Build aerobic base and endurance" if tier is DistanceTier.MEDIUM
              else "Essential for marathon and ultra endurance")
    return TrainingRecommendation(
        workout_type=WorkoutKind.LONG_RUN,
        frequency=1,
        intensity=Intensity.EASY,
        reason=reason,
        duration=_minutes(minutes),
        target_pace=_scaled_pace(current_pace, factor),
    )


def generate_training_recommendations(
    trend: PerformanceTrend,
    current_pace: Optional[Quantity],
    projected_pace: Optional[Quantity],
    params: Optional[PredictionParams] = None,
    distance: Optional[Quantity] = None,
) -> List[TrainingRecommendation]:
    """
    Recommend workouts for a cohort.

    Args:
        trend: Fitted performance trend of the cohort
        current_pace: Most recent observed pace
        projected_pace: Forecast pace at the prediction horizon
        params: Prediction parameters (defaults if None)
        distance: Cohort workout distance; None skips distance-specific sessions

    Returns:
        Up to ``params.max_recommendations`` recommendations
    """
    if params is None:
        params = PredictionParams()

    if projected_pace is None:
        projected_pace = current_pace

    tier = distance_tier(distance, params)
    tempo_minutes = TIER_TEMPO_MINUTES.get(tier, 30)
    long_run_minutes, long_run_factor = TIER_LONG_RUN.get(tier, (60, 1.1))

    recommendations: List[TrainingRecommendation] = []

    if trend.momentum is Momentum.IMPROVING:
        recommendations.append(TrainingRecommendation(
            workout_type=WorkoutKind.TEMPO,
            frequency=2,
            intensity=Intensity.MODERATE,
            reason="Reinforce your improving trend with sustained threshold work",
            duration=_minutes(tempo_minutes),
            target_pace=_scaled_pace(projected_pace, 1.03),
        ))
        recommendations.append(TrainingRecommendation(
            workout_type=WorkoutKind.INTERVALS,
            frequency=1,
            intensity=Intensity.HARD,
            reason="Sharpen speed toward your projected pace",
            duration=_minutes(25),
            target_pace=_scaled_pace(projected_pace, 0.95),
        ))
    elif trend.momentum is Momentum.PLATEAUING:
        recommendations.append(TrainingRecommendation(
            workout_type=WorkoutKind.HILL_TRAINING,
            frequency=1,
            intensity=Intensity.HARD,
            reason="Break through performance plateau with strength training",
            duration=_minutes(25),
        ))
        recommendations.append(TrainingRecommendation(
            workout_type=WorkoutKind.SPEED_WORK,
            frequency=1,
            intensity=Intensity.HARD,
            reason="Introduce variety with faster leg turnover",
            duration=_minutes(20),
            target_pace=_scaled_pace(current_pace, 0.92),
        ))
    else:
        recommendations.append(TrainingRecommendation(
            workout_type=WorkoutKind.RECOVERY,
            frequency=2,
            intensity=Intensity.EASY,
            reason="Recent workouts are trending slower; prioritise recovery",
            duration=_minutes(30),
            target_pace=_scaled_pace(current_pace, 1.2),
        ))
        recommendations.append(TrainingRecommendation(
            workout_type=WorkoutKind.LONG_RUN,
            frequency=1,
            intensity=Intensity.EASY,
            reason="Rebuild aerobic volume at an easier effort",
            duration=_minutes(long_run_minutes),
            target_pace=_scaled_pace(current_pace, long_run_factor),
        ))

    if tier is not None:
        focus = _tier_focus(tier, current_pace)
        if all(r.workout_type is not focus.workout_type for r in recommendations):
            recommendations.append(focus)

    has_recovery = any(r.workout_type is WorkoutKind.RECOVERY for r in recommendations)
    if trend.volatility > params.recovery_volatility_threshold and not has_recovery:
        recommendations.append(TrainingRecommendation(
            workout_type=WorkoutKind.RECOVERY,
            frequency=1,
            intensity=Intensity.EASY,
            reason="High performance variability suggests need for more recovery",
            duration=_minutes(30),
            target_pace=_scaled_pace(current_pace, 1.2),
        ))

    return recommendations[:params.max_recommendations]


def format_recommendation(recommendation: TrainingRecommendation) -> str:
    """
    Render a recommendation as a one-line bullet.

    >>> format_recommendation(rec)  # doctest: +SKIP
    'Tempo (2x per week, MODERATE intensity) - 30 min at 7:45 /mi - Reinforce ...'
    """
    name = recommendation.workout_type.value.replace('_', ' ').title()
    intensity = recommendation.intensity.value.upper()
    bullet = f"{name} ({recommendation.frequency}x per week, {intensity} intensity)"

    if recommendation.duration is not None:
        bullet += f" - {recommendation.duration.value:g} {recommendation.duration.unit}"
    if recommendation.target_pace is not None:
        bullet += f" at {format_pace(recommendation.target_pace)}"

    return f"{bullet} - {recommendation.reason}"
