"""
Synthetic workout history generation.

Generates realistic workout records for demos and tests with:
- A handful of favourite route distances per runner
- Pace that drifts with a configurable weekly trend plus day-to-day noise
- Elevation gain proportional to distance with route-specific hilliness
- Seasonal temperature and humidity readings

Generation is seeded, so the same arguments always give the same records.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import math

import numpy as np

from core.quantity import Quantity
from core.records import WorkoutRecord


class RunnerArchetype(Enum):
    """Typical training patterns."""
    FIVE_K_REGULAR = "five_k_regular"
    HALF_MARATHONER = "half_marathoner"
    TRAIL_RUNNER = "trail_runner"
    COMEBACK_RUNNER = "comeback_runner"


@dataclass
class RunnerProfile:
    """
    Parameters driving one synthetic workout history.

    Paces are minutes per distance unit; ``weekly_pace_change`` is a
    relative change per week (negative = getting faster).
    """
    name: str
    archetype: RunnerArchetype
    route_distances: List[float]
    base_pace: float
    weekly_pace_change: float = 0.0
    pace_noise: float = 0.02
    distance_noise: float = 0.03
    runs_per_week: int = 3
    climb_per_distance: float = 15.0   # metres per distance unit
    distance_unit: str = 'mi'
    indoor_rate: float = 0.0
    weather_coverage: float = 1.0      # share of workouts with weather readings

    def to_dict(self) -> Dict[str, Any]:
        """Convert profile to dictionary."""
        return {
            'name': self.name,
            'archetype': self.archetype.value,
            'route_distances': list(self.route_distances),
            'base_pace': self.base_pace,
            'weekly_pace_change': self.weekly_pace_change,
            'runs_per_week': self.runs_per_week,
            'distance_unit': self.distance_unit,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# RUNNER ARCHETYPES
# ═══════════════════════════════════════════════════════════════════════════════

ARCHETYPE_PROFILES: Dict[RunnerArchetype, RunnerProfile] = {
    RunnerArchetype.FIVE_K_REGULAR: RunnerProfile(
        name="5K Regular",
        archetype=RunnerArchetype.FIVE_K_REGULAR,
        route_distances=[3.1, 3.1, 4.0, 5.0],
        base_pace=8.5,
        weekly_pace_change=-0.004,
        runs_per_week=4,
        climb_per_distance=10.0,
    ),
    RunnerArchetype.HALF_MARATHONER: RunnerProfile(
        name="Half Marathoner",
        archetype=RunnerArchetype.HALF_MARATHONER,
        route_distances=[5.0, 6.0, 8.0, 10.0, 13.1],
        base_pace=9.0,
        weekly_pace_change=-0.002,
        runs_per_week=5,
        climb_per_distance=12.0,
    ),
    RunnerArchetype.TRAIL_RUNNER: RunnerProfile(
        name="Trail Runner",
        archetype=RunnerArchetype.TRAIL_RUNNER,
        route_distances=[6.0, 8.0, 12.0],
        base_pace=11.0,
        pace_noise=0.06,
        runs_per_week=3,
        climb_per_distance=60.0,
    ),
    RunnerArchetype.COMEBACK_RUNNER: RunnerProfile(
        name="Comeback Runner",
        archetype=RunnerArchetype.COMEBACK_RUNNER,
        route_distances=[2.0, 3.0, 4.0],
        base_pace=10.5,
        weekly_pace_change=0.006,
        pace_noise=0.04,
        runs_per_week=3,
        climb_per_distance=8.0,
    ),
}


def get_profile(archetype: RunnerArchetype) -> RunnerProfile:
    return ARCHETYPE_PROFILES[archetype]


# ═══════════════════════════════════════════════════════════════════════════════
# WORKOUT GENERATION
# ═══════════════════════════════════════════════════════════════════════════════

def seasonal_weather(day_of_year: int, rng: np.random.Generator) -> Tuple[float, float]:
    """
    Temperature (°C) and humidity (%) for a northern-hemisphere day.

    Warmest around day 200, with daily noise.
    """
    seasonal = math.cos(2 * math.pi * (day_of_year - 200) / 365)
    temperature = 12 + 12 * seasonal + rng.normal(0, 3)
    humidity = float(np.clip(60 - 10 * seasonal + rng.normal(0, 8), 15, 100))
    return round(temperature, 1), round(humidity, 0)


def generate_workout(
    profile: RunnerProfile,
    workout_id: str,
    start: datetime,
    weeks_elapsed: float,
    rng: np.random.Generator,
) -> WorkoutRecord:
    """
    Generate a single workout for ``profile``.

    Args:
        profile: Runner profile
        workout_id: Identifier for the record
        start: Start time
        weeks_elapsed: Weeks since the start of the history (drives the pace trend)
        rng: Random generator

    Returns:
        WorkoutRecord
    """
    route = float(rng.choice(profile.route_distances))
    distance = max(0.1, route * (1 + rng.normal(0, profile.distance_noise)))

    trend_factor = (1 + profile.weekly_pace_change) ** weeks_elapsed
    pace = profile.base_pace * trend_factor * (1 + rng.normal(0, profile.pace_noise))
    pace = max(3.0, pace)

    duration_s = pace * distance * 60
    hilliness = max(0.0, rng.normal(1.0, 0.35))
    elevation = round(profile.climb_per_distance * distance * hilliness, 1)

    is_indoor = bool(rng.random() < profile.indoor_rate)
    temperature = humidity = None
    if not is_indoor and rng.random() < profile.weather_coverage:
        temp_c, humidity_pct = seasonal_weather(start.timetuple().tm_yday, rng)
        temperature = Quantity(temp_c, '°C')
        humidity = Quantity(humidity_pct, '%')

    return WorkoutRecord(
        id=workout_id,
        start_date=start,
        end_date=start + timedelta(seconds=duration_s),
        duration=Quantity(round(duration_s, 1), 's'),
        distance=Quantity(round(distance, 2), profile.distance_unit),
        elevation=Quantity(0.0 if is_indoor else elevation, 'm'),
        humidity=humidity,
        temperature=temperature,
        is_indoor=is_indoor,
    )


def generate_workout_history(
    profile: RunnerProfile,
    weeks: int = 12,
    start_date: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> List[WorkoutRecord]:
    """
    Generate ``weeks`` of workouts for a runner, oldest first.

    Args:
        profile: Runner profile
        weeks: Number of weeks of history
        start_date: Monday of the first week (defaults to 2024-01-01 06:30)
        seed: Random seed for reproducibility

    Returns:
        List of WorkoutRecord objects
    """
    rng = np.random.default_rng(seed)
    if start_date is None:
        start_date = datetime(2024, 1, 1, 6, 30)

    records = []
    for week in range(weeks):
        days = sorted(rng.choice(7, size=min(7, profile.runs_per_week), replace=False))
        for day in days:
            start = start_date + timedelta(
                weeks=week, days=int(day), minutes=int(rng.integers(0, 180))
            )
            weeks_elapsed = (start - start_date).days / 7
            workout_id = f"{profile.archetype.value}-{len(records) + 1:04d}"
            records.append(generate_workout(profile, workout_id, start, weeks_elapsed, rng))

    return records


def generate_mixed_history(
    weeks: int = 12,
    seed: Optional[int] = None,
) -> List[WorkoutRecord]:
    """Histories of every archetype merged and ordered by start date."""
    records: List[WorkoutRecord] = []
    for offset, archetype in enumerate(RunnerArchetype):
        child_seed = None if seed is None else seed + offset
        records.extend(generate_workout_history(get_profile(archetype), weeks, seed=child_seed))
    return sorted(records, key=lambda r: (r.start_date, r.id))
