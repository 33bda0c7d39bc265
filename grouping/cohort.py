"""
Cohorts: buckets of workouts sharing a near-equal value of one metric.

Cohorts are immutable. Each stage of the pipeline (binning, base stats,
metric-specific stats, prediction) returns a new Cohort via
``dataclasses.replace`` so every stage can be tested on its own.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from core.consistency import ConsistencyResult, EMPTY_CONSISTENCY
from core.quantity import Quantity, sum_quantities
from core.records import MetricType, WorkoutRecord
from prediction.models import CohortPredictions, EMPTY_PREDICTIONS


class StatType(Enum):
    """What kind of value a stat item displays."""
    PACE = "pace"
    DISTANCE = "distance"
    DURATION = "duration"
    ELEVATION = "elevation"
    HUMIDITY = "humidity"
    TEMPERATURE = "temperature"
    PREDICTION = "prediction"
    TRAINING = "training"


@dataclass(frozen=True)
class StatItem:
    type: StatType
    label: str
    value: Optional[Quantity]
    workout: Optional[WorkoutRecord] = None


@dataclass(frozen=True)
class StatSection:
    """A titled group of stat items, e.g. 'Fastest' or 'Cumulative'."""
    title: str
    items: Tuple[StatItem, ...]
    description: str = ""

    def item(self, label: str) -> StatItem:
        """Look up an item by label."""
        for stat in self.items:
            if stat.label == label:
                return stat
        raise KeyError(label)


@dataclass(frozen=True)
class Cohort:
    """
    A bucket of workouts grouped around one metric value.

    ``highlight``/``worst``/``most_recent`` are seeded with the first
    accepted workout so they are always set once a cohort exists; the stat
    calculators replace them with the real selections.
    """
    key: str
    center: float
    metric: MetricType
    unit: str
    title: str
    suffix: str
    members: Tuple[WorkoutRecord, ...]
    highlight: WorkoutRecord
    worst: WorkoutRecord
    most_recent: WorkoutRecord
    oldest: WorkoutRecord
    total_distance: Quantity
    total_duration: Quantity
    total_elevation: Quantity
    skipped: int = 0
    rank: int = 0
    rank_label: str = ""
    percentage_of_total_workouts: float = 0.0
    pretty_name: str = ""

    # Modal-rounded representative values
    average_pace: Optional[Quantity] = None
    average_duration: Optional[Quantity] = None
    average_distance: Optional[Quantity] = None
    average_elevation: Optional[Quantity] = None
    average_humidity: Optional[Quantity] = None
    average_temperature: Optional[Quantity] = None

    greatest_elevation: Optional[WorkoutRecord] = None
    lowest_elevation: Optional[WorkoutRecord] = None

    total_variation: Optional[Quantity] = None
    variant_distribution: Tuple[float, ...] = ()
    consistency: ConsistencyResult = EMPTY_CONSISTENCY
    stats: Tuple[StatSection, ...] = ()
    predictions: CohortPredictions = EMPTY_PREDICTIONS

    @classmethod
    def seed(
        cls,
        key: str,
        center: float,
        metric: MetricType,
        unit: str,
        title: str,
        suffix: str,
        first: WorkoutRecord,
    ) -> 'Cohort':
        """Create a cohort holding its first accepted workout."""
        return cls(
            key=key,
            center=center,
            metric=metric,
            unit=unit,
            title=title,
            suffix=suffix,
            members=(first,),
            highlight=first,
            worst=first,
            most_recent=first,
            oldest=first,
            total_distance=first.distance,
            total_duration=first.duration,
            total_elevation=first.elevation,
        )

    def add(self, record: WorkoutRecord) -> 'Cohort':
        """Return a cohort with ``record`` appended and totals accumulated."""
        most_recent = record if record.end_date > self.most_recent.end_date else self.most_recent
        return replace(
            self,
            members=self.members + (record,),
            most_recent=most_recent,
            total_distance=sum_quantities([self.total_distance, record.distance]),
            total_duration=sum_quantities([self.total_duration, record.duration]),
            total_elevation=sum_quantities([self.total_elevation, record.elevation]),
        )

    def with_skipped(self, skipped: int) -> 'Cohort':
        return replace(self, skipped=skipped)

    @property
    def size(self) -> int:
        return len(self.members)

    def section(self, title: str) -> StatSection:
        """Look up a stat section by title."""
        for stat_section in self.stats:
            if stat_section.title == title:
                return stat_section
        raise KeyError(title)

    def section_titles(self) -> List[str]:
        return [s.title for s in self.stats]

    def to_dict(self) -> Dict[str, Any]:
        """Summary dictionary for serialization (member ids, not records)."""
        return {
            'key': self.key,
            'metric': self.metric.value,
            'title': self.title,
            'unit': self.unit,
            'rank': self.rank,
            'rank_label': self.rank_label,
            'size': self.size,
            'skipped': self.skipped,
            'member_ids': [m.id for m in self.members],
            'highlight_id': self.highlight.id,
            'worst_id': self.worst.id,
            'most_recent_id': self.most_recent.id,
            'oldest_id': self.oldest.id,
            'percentage_of_total_workouts': self.percentage_of_total_workouts,
            'total_variation': str(self.total_variation) if self.total_variation else None,
            'consistency': self.consistency.to_dict(),
            'sections': self.section_titles(),
            'has_predictions': not self.predictions.is_empty,
        }
