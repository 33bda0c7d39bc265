"""
Core primitives for workout analytics.

This package provides:
- Unit-tagged quantities with unit-checked arithmetic
- Descriptive statistics (mean, median, standard deviation, CV)
- Consistency scoring of a cohort's off-axis metric
- The workout record model
- The error taxonomy shared by the grouping and prediction engines
"""

# Errors
from .errors import (
    WorkoutAnalyticsError,
    QuantityError,
    UnitMismatch,
    InvalidConfiguration,
    InsufficientData,
    CalculatorFailure,
)

# Quantities
from .quantity import (
    Quantity,
    sum_quantities,
    average_quantity,
    difference,
    absolute_difference,
    percentage,
    format_pace,
    format_duration,
)

# Statistics
from .statistics import (
    calculate_mean,
    calculate_median,
    calculate_standard_deviation,
    calculate_coefficient_of_variation,
    clamp,
)

# Records
from .records import (
    MetricType,
    WorkoutRecord,
    derive_pace,
)

# Consistency
from .consistency import (
    ConsistencyResult,
    calculate_consistency,
    extract_consistency_values,
    consistency_metric_label,
)

__all__ = [
    # Errors
    'WorkoutAnalyticsError',
    'QuantityError',
    'UnitMismatch',
    'InvalidConfiguration',
    'InsufficientData',
    'CalculatorFailure',
    # Quantities
    'Quantity',
    'sum_quantities',
    'average_quantity',
    'difference',
    'absolute_difference',
    'percentage',
    'format_pace',
    'format_duration',
    # Statistics
    'calculate_mean',
    'calculate_median',
    'calculate_standard_deviation',
    'calculate_coefficient_of_variation',
    'clamp',
    # Records
    'MetricType',
    'WorkoutRecord',
    'derive_pace',
    # Consistency
    'ConsistencyResult',
    'calculate_consistency',
    'extract_consistency_values',
    'consistency_metric_label',
]
