"""
Tunable parameters for trend analysis, forecasting and confidence scoring.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple

from core.errors import InvalidConfiguration


@dataclass
class PredictionParams:
    """
    Parameters for the prediction engine.

    Rates are expressed as decimals (e.g. 0.01 = 1% per week). Confidence
    weights are points out of 100; each component saturates at its weight.
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # MOMENTUM
    # ═══════════════════════════════════════════════════════════════════════════
    # Relative change per week below which a trend counts as a plateau

    momentum_threshold: float = 0.005

    # ═══════════════════════════════════════════════════════════════════════════
    # PROJECTION BOUNDS
    # ═══════════════════════════════════════════════════════════════════════════
    # Maximum move of a forecast away from the most recent observation

    max_weekly_improvement: float = 0.01
    max_total_improvement: float = 0.15
    max_weekly_decline: float = 0.02
    max_total_decline: float = 0.25

    # ═══════════════════════════════════════════════════════════════════════════
    # CONFIDENCE WEIGHTS (points, must sum to 100)
    # ═══════════════════════════════════════════════════════════════════════════

    data_points_weight: float = 30.0
    time_span_weight: float = 20.0
    trend_strength_weight: float = 25.0
    consistency_weight: float = 25.0

    data_points_saturation: int = 10     # workouts for full data-volume credit
    time_span_saturation_days: int = 84  # 12 weeks for full time-span credit

    # ═══════════════════════════════════════════════════════════════════════════
    # REALISM
    # ═══════════════════════════════════════════════════════════════════════════
    # The improvement window shrinks as the best pace nears the elite pace of
    # the closest race distance

    # (distance in miles, elite pace in min/mi)
    elite_pace_benchmarks: Tuple[Tuple[float, float], ...] = (
        (1.0, 4.5),     # mile
        (3.1, 5.0),     # 5K
        (5.0, 5.2),
        (6.2, 5.4),     # 10K
        (13.1, 5.8),    # half marathon
        (26.2, 6.2),    # marathon
    )
    # (gap to elite pace in min/mi below which, factor); wider gaps get 1.0
    realism_tiers: Tuple[Tuple[float, float], ...] = ((1.0, 0.2), (2.0, 0.5), (3.0, 0.8))

    # ═══════════════════════════════════════════════════════════════════════════
    # RECOMMENDATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    recovery_volatility_threshold: float = 0.10
    max_recommendations: int = 4

    # Cohort distance bands (miles) for distance-specific prescriptions
    short_distance_max: float = 5.0
    medium_distance_max: float = 13.0

    # Forecast horizons attached to cohorts by the stat calculators
    horizons_weeks: Tuple[int, ...] = (4, 12)

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'PredictionParams':
        """Create parameters from dictionary."""
        d = dict(d)
        if 'horizons_weeks' in d:
            d['horizons_weeks'] = tuple(d['horizons_weeks'])
        for name in ('elite_pace_benchmarks', 'realism_tiers'):
            if name in d:
                d[name] = tuple(tuple(pair) for pair in d[name])
        return cls(**d)

    def validate(self) -> Tuple[bool, str]:
        """Validate parameter constraints."""
        issues = []

        if not (0 <= self.momentum_threshold < 1):
            issues.append("momentum_threshold must be in [0, 1)")

        if not (0 <= self.max_weekly_improvement <= self.max_total_improvement < 1):
            issues.append("0 <= max_weekly_improvement <= max_total_improvement < 1")
        if not (0 <= self.max_weekly_decline <= self.max_total_decline):
            issues.append("0 <= max_weekly_decline <= max_total_decline")

        weights = (
            self.data_points_weight,
            self.time_span_weight,
            self.trend_strength_weight,
            self.consistency_weight,
        )
        if any(w < 0 for w in weights):
            issues.append("Confidence weights must be non-negative")
        if abs(sum(weights) - 100.0) > 1e-9:
            issues.append(f"Confidence weights must sum to 100, got {sum(weights)}")

        if self.data_points_saturation < 1 or self.time_span_saturation_days < 1:
            issues.append("Saturation points must be positive")

        if not self.elite_pace_benchmarks or any(
            distance <= 0 or pace <= 0 for distance, pace in self.elite_pace_benchmarks
        ):
            issues.append("elite_pace_benchmarks must be non-empty with positive values")
        gaps = [gap for gap, _ in self.realism_tiers]
        if gaps != sorted(gaps) or any(not (0 < factor <= 1) for _, factor in self.realism_tiers):
            issues.append("realism_tiers must have ascending gaps and factors in (0, 1]")

        if not (0 < self.short_distance_max < self.medium_distance_max):
            issues.append("0 < short_distance_max < medium_distance_max")

        if self.max_recommendations < 1:
            issues.append("max_recommendations must be at least 1")

        if len(self.horizons_weeks) < 2 or any(w < 1 for w in self.horizons_weeks):
            issues.append("horizons_weeks needs a short and a long positive horizon")

        if issues:
            return False, "; ".join(issues)
        return True, "Valid"

    def require_valid(self) -> 'PredictionParams':
        valid, message = self.validate()
        if not valid:
            raise InvalidConfiguration(message)
        return self
