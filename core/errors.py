"""
Error taxonomy for the workout analytics engine.

Configuration problems are raised before any work happens. Per-cohort
problems (calculator or prediction failures) are isolated by the grouping
engine and reported alongside the results instead of aborting the run.
"""

from typing import Optional


class WorkoutAnalyticsError(Exception):
    """Base class for all engine errors."""


class QuantityError(WorkoutAnalyticsError, ValueError):
    """Invalid quantity value or arithmetic result."""


class UnitMismatch(QuantityError):
    """Binary quantity operation on incompatible units."""

    def __init__(self, left_unit: str, right_unit: str):
        self.left_unit = left_unit
        self.right_unit = right_unit
        super().__init__(f"Unit mismatch: {left_unit!r} != {right_unit!r}")


class InvalidConfiguration(WorkoutAnalyticsError, ValueError):
    """Grouping or prediction parameters violate their constraints."""


class InsufficientData(WorkoutAnalyticsError):
    """Not enough members in a cohort to compute the requested result."""


class CalculatorFailure(WorkoutAnalyticsError):
    """
    A metric-specific stat calculator step failed for one cohort.

    The original exception is chained as ``__cause__`` when raised with
    ``raise ... from``; ``original`` keeps it available for reporting.
    """

    def __init__(self, metric: str, cohort_key: str, original: Optional[BaseException] = None):
        self.metric = metric
        self.cohort_key = cohort_key
        self.original = original
        detail = f": {original}" if original is not None else ""
        super().__init__(f"{metric} calculator failed for cohort {cohort_key!r}{detail}")
