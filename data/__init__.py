"""Data generation and loading utilities."""

from .synthetic import (
    RunnerArchetype,
    RunnerProfile,
    generate_workout_history,
    generate_mixed_history,
    get_profile,
)
from .frames import records_from_frame, records_to_frame, load_workouts_csv

__all__ = [
    # Synthetic data
    'RunnerArchetype',
    'RunnerProfile',
    'generate_workout_history',
    'generate_mixed_history',
    'get_profile',
    # Tabular exports
    'records_from_frame',
    'records_to_frame',
    'load_workouts_csv',
]
