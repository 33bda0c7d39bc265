"""Report formatting for grouping results and predictions."""

from .reports import (
    generate_grouping_report,
    generate_cohort_report,
    generate_prediction_report,
    format_quantity,
)

__all__ = [
    'generate_grouping_report',
    'generate_cohort_report',
    'generate_prediction_report',
    'format_quantity',
]
