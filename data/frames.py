"""
Tabular workout exports to WorkoutRecords.

Health-data exports usually arrive as CSV or DataFrames with one row per
workout. ``records_from_frame`` maps the expected columns onto
WorkoutRecords; units must already be consistent across rows.

Expected columns:
    id, start_date, end_date, duration_s, distance
Optional columns:
    elevation_m, humidity_pct, temperature_c, activity_type, is_indoor
"""

from pathlib import Path
from typing import List, Union

import pandas as pd

from core.quantity import Quantity
from core.records import WorkoutRecord


REQUIRED_COLUMNS = ['id', 'start_date', 'end_date', 'duration_s', 'distance']


def _optional(row: pd.Series, column: str, unit: str):
    if column not in row.index or pd.isna(row[column]):
        return None
    return Quantity(float(row[column]), unit)


def records_from_frame(df: pd.DataFrame, distance_unit: str = 'mi') -> List[WorkoutRecord]:
    """
    Convert a workout DataFrame to records, ordered by start date.

    Args:
        df: One row per workout
        distance_unit: Unit of the ``distance`` column

    Returns:
        List of WorkoutRecord objects

    Raises:
        ValueError: if required columns are missing
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Workout frame is missing columns: {', '.join(missing)}")

    df = df.copy()
    df['start_date'] = pd.to_datetime(df['start_date'])
    df['end_date'] = pd.to_datetime(df['end_date'])
    df = df.sort_values('start_date', kind='stable')

    records = []
    for _, row in df.iterrows():
        elevation = _optional(row, 'elevation_m', 'm') or Quantity(0.0, 'm')
        records.append(WorkoutRecord(
            id=str(row['id']),
            start_date=row['start_date'].to_pydatetime(),
            end_date=row['end_date'].to_pydatetime(),
            duration=Quantity(float(row['duration_s']), 's'),
            distance=Quantity(float(row['distance']), distance_unit),
            elevation=elevation,
            humidity=_optional(row, 'humidity_pct', '%'),
            temperature=_optional(row, 'temperature_c', '°C'),
            activity_type=str(row['activity_type']) if 'activity_type' in row.index else "running",
            is_indoor=bool(row['is_indoor']) if 'is_indoor' in row.index else False,
        ))
    return records


def load_workouts_csv(path: Union[str, Path], distance_unit: str = 'mi') -> List[WorkoutRecord]:
    """Load workouts from a CSV export with the columns described above."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No workout export found at {path}")
    return records_from_frame(pd.read_csv(path), distance_unit=distance_unit)


def records_to_frame(records: List[WorkoutRecord]) -> pd.DataFrame:
    """Inverse of ``records_from_frame``, handy for exporting synthetic data."""
    rows = []
    for r in records:
        rows.append({
            'id': r.id,
            'start_date': r.start_date,
            'end_date': r.end_date,
            'duration_s': r.duration.value,
            'distance': r.distance.value,
            'elevation_m': r.elevation.value,
            'humidity_pct': r.humidity.value if r.humidity else None,
            'temperature_c': r.temperature.value if r.temperature else None,
            'activity_type': r.activity_type,
            'is_indoor': r.is_indoor,
        })
    return pd.DataFrame(rows, columns=REQUIRED_COLUMNS + [
        'elevation_m', 'humidity_pct', 'temperature_c', 'activity_type', 'is_indoor'
    ])
