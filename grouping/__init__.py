"""Workout grouping: metric definitions, cohorts, stat calculators and the engine."""

from .metrics import GroupMetricDefinition, METRIC_DEFINITIONS, get_metric_definition
from .config import GroupingConfig
from .cohort import Cohort, StatItem, StatSection, StatType
from .calculators import (
    CalculationContext,
    STAT_CALCULATORS,
    base_stats,
    calculate_cohort_stats,
)
from .engine import GroupingEngine, GroupingResult, group_workouts

__all__ = [
    'GroupMetricDefinition',
    'METRIC_DEFINITIONS',
    'get_metric_definition',
    'GroupingConfig',
    'Cohort',
    'StatItem',
    'StatSection',
    'StatType',
    'CalculationContext',
    'STAT_CALCULATORS',
    'base_stats',
    'calculate_cohort_stats',
    'GroupingEngine',
    'GroupingResult',
    'group_workouts',
]
