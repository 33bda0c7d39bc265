"""
Prediction data model: trends, forecasts and training recommendations.
"""

from dataclasses import dataclass, asdict
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from core.quantity import Quantity


class Momentum(Enum):
    """Qualitative direction of a cohort's performance over time."""
    IMPROVING = "improving"
    PLATEAUING = "plateauing"
    DECLINING = "declining"


class ConfidenceLevel(Enum):
    """Discrete confidence bands: low < 40 <= medium < 70 <= high."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_score(cls, score: float) -> 'ConfidenceLevel':
        if score >= 70:
            return cls.HIGH
        if score >= 40:
            return cls.MEDIUM
        return cls.LOW


class WorkoutKind(Enum):
    """Types of workout a recommendation can prescribe."""
    TEMPO = "tempo"
    INTERVALS = "intervals"
    LONG_RUN = "long_run"
    RECOVERY = "recovery"
    SPEED_WORK = "speed_work"
    HILL_TRAINING = "hill_training"


class Intensity(Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


class DistanceTier(Enum):
    """Cohort distance band; prescriptions lengthen with the band."""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


@dataclass(frozen=True)
class TrainingRecommendation:
    """One prescribed workout with the reason it was suggested."""
    workout_type: WorkoutKind
    frequency: int                          # sessions per week
    intensity: Intensity
    reason: str
    duration: Optional[Quantity] = None     # min
    target_pace: Optional[Quantity] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'workout_type': self.workout_type.value,
            'frequency': self.frequency,
            'intensity': self.intensity.value,
            'reason': self.reason,
            'duration': asdict(self.duration) if self.duration else None,
            'target_pace': asdict(self.target_pace) if self.target_pace else None,
        }


@dataclass(frozen=True)
class PerformanceTrend:
    """
    Linear trend of a cohort's metric over time.

    slope/intercept are in metric units per day from the first workout.
    trend_strength is |r| of the fit, volatility the coefficient of
    variation of the series.
    """
    slope: float
    intercept: float
    trend_strength: float
    momentum: Momentum
    volatility: float
    weekly_change_rate: float   # relative change per week, negative = getting lower


@dataclass(frozen=True)
class PredictionBasis:
    """What a prediction was computed from."""
    data_points: int
    time_span_days: int
    trend_strength: float
    consistency_score: int
    realism_factor: float = 1.0


@dataclass(frozen=True)
class Prediction:
    """Forecast of a cohort's performance ``weeks_ahead`` weeks from today."""
    cohort_key: str
    target_date: date
    weeks_ahead: int
    predicted_pace: Quantity
    predicted_duration: Quantity
    confidence: float
    confidence_level: ConfidenceLevel
    improvement_percentage: float
    basis: PredictionBasis
    trend: PerformanceTrend
    recommendations: Tuple[TrainingRecommendation, ...] = ()
    predicted_distance: Optional[Quantity] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'cohort_key': self.cohort_key,
            'target_date': self.target_date.isoformat(),
            'weeks_ahead': self.weeks_ahead,
            'predicted_pace': asdict(self.predicted_pace),
            'predicted_duration': asdict(self.predicted_duration),
            'predicted_distance': asdict(self.predicted_distance) if self.predicted_distance else None,
            'confidence': self.confidence,
            'confidence_level': self.confidence_level.value,
            'improvement_percentage': self.improvement_percentage,
            'momentum': self.trend.momentum.value,
            'basis': asdict(self.basis),
            'recommendations': [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class CohortPredictions:
    """Prediction payload attached to a cohort by its stat calculator."""
    four_week: Optional[Prediction] = None
    twelve_week: Optional[Prediction] = None
    recommendations: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.four_week is None and self.twelve_week is None


EMPTY_PREDICTIONS = CohortPredictions()
