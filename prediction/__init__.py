"""Trend analysis and performance forecasting for workout cohorts."""

from .models import (
    CohortPredictions,
    ConfidenceLevel,
    DistanceTier,
    Intensity,
    Momentum,
    PerformanceTrend,
    Prediction,
    PredictionBasis,
    TrainingRecommendation,
    WorkoutKind,
)
from .params import PredictionParams
from .engine import predict, calculate_confidence, calculate_realism_factor
from .recommendations import (
    distance_tier,
    format_recommendation,
    generate_training_recommendations,
)

__all__ = [
    'CohortPredictions',
    'ConfidenceLevel',
    'DistanceTier',
    'Intensity',
    'Momentum',
    'PerformanceTrend',
    'Prediction',
    'PredictionBasis',
    'TrainingRecommendation',
    'WorkoutKind',
    'PredictionParams',
    'predict',
    'calculate_confidence',
    'calculate_realism_factor',
    'distance_tier',
    'generate_training_recommendations',
    'format_recommendation',
]
