"""Shared fixtures: workout and cohort factories on a fixed calendar."""

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

import pytest

from core.quantity import Quantity
from core.records import MetricType, WorkoutRecord
from grouping.cohort import Cohort


BASE_DATE = datetime(2024, 1, 1, 7, 0)
REFERENCE_DATE = date(2024, 3, 1)


def build_workout(
    workout_id: str,
    distance: float = 5.0,
    pace: Optional[float] = 8.0,
    day: int = 0,
    elevation: float = 50.0,
    duration: Optional[float] = None,
    humidity: Optional[float] = None,
    temperature: Optional[float] = None,
    unit: str = 'mi',
) -> WorkoutRecord:
    """Workout starting ``day`` days after BASE_DATE; pace wins over duration."""
    start = BASE_DATE + timedelta(days=day)
    if duration is None:
        duration = pace * distance * 60
        pace_quantity = Quantity(pace, f"min/{unit}")
    else:
        pace_quantity = None

    return WorkoutRecord(
        id=workout_id,
        start_date=start,
        end_date=start + timedelta(seconds=duration),
        duration=Quantity(duration, 's'),
        distance=Quantity(distance, unit),
        elevation=Quantity(elevation, 'm'),
        pace=pace_quantity,
        humidity=Quantity(humidity, '%') if humidity is not None else None,
        temperature=Quantity(temperature, '°C') if temperature is not None else None,
    )


def build_cohort(records: Sequence[WorkoutRecord], metric: MetricType = MetricType.PACE) -> Cohort:
    cohort = Cohort.seed(
        key='test',
        center=0.0,
        metric=metric,
        unit='min/mi',
        title='test',
        suffix='min/mi',
        first=records[0],
    )
    for record in records[1:]:
        cohort = cohort.add(record)
    return cohort


@pytest.fixture
def make_workout():
    return build_workout


@pytest.fixture
def make_cohort():
    return build_cohort


@pytest.fixture
def reference_date():
    return REFERENCE_DATE
