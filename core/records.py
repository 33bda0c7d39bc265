"""
Workout records: the read-only input of the grouping engine.

Records arrive from a health-data provider already unit-normalized: all
distances share one unit, durations are seconds, elevation is metres.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .quantity import Quantity


class MetricType(Enum):
    """Metrics a workout collection can be grouped by."""
    DISTANCE = "distance"
    PACE = "pace"
    DURATION = "duration"
    ELEVATION = "elevation"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"


@dataclass(frozen=True)
class WorkoutRecord:
    """
    A single completed workout.

    ``pace`` is derived from duration and distance when not supplied, in
    minutes per distance unit (e.g. ``min/mi``). Zero-distance workouts get
    a zero pace.
    """
    id: str
    start_date: datetime
    end_date: datetime
    duration: Quantity                      # seconds
    distance: Quantity                      # mi or km
    elevation: Quantity = field(default_factory=lambda: Quantity(0.0, 'm'))
    pace: Optional[Quantity] = None         # min per distance unit
    humidity: Optional[Quantity] = None     # %
    temperature: Optional[Quantity] = None  # °C
    activity_type: str = "running"
    is_indoor: bool = False

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError(
                f"Workout {self.id}: end_date {self.end_date} precedes start_date {self.start_date}"
            )
        if self.pace is None:
            object.__setattr__(self, 'pace', derive_pace(self.duration, self.distance))

    @property
    def distance_unit(self) -> str:
        return self.distance.unit


def derive_pace(duration: Quantity, distance: Quantity) -> Quantity:
    """Pace in minutes per distance unit from a duration in seconds."""
    unit = f"min/{distance.unit}"
    if distance.value == 0:
        return Quantity(0.0, unit)
    return Quantity(duration.value / 60.0 / distance.value, unit)
