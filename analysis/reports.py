"""
Report generation for grouping results and predictions.

Produces plain-text summaries of cohorts, their consistency and their
forecasts.
"""

from typing import List, Optional

from core.consistency import consistency_metric_label
from core.quantity import Quantity, format_duration, format_pace
from grouping.cohort import Cohort, StatItem
from grouping.engine import GroupingResult
from prediction.models import Prediction
from prediction.recommendations import format_recommendation


def format_quantity(value: Optional[Quantity]) -> str:
    """Display text for a quantity, using pace and duration formats where they apply."""
    if value is None:
        return "-"
    if value.unit.startswith('min/'):
        return format_pace(value)
    if value.unit == 's':
        return format_duration(value)
    return f"{value.value:,.2f} {value.unit}".replace('.00 ', ' ')


def format_stat_item(item: StatItem) -> str:
    label = item.label
    if item.workout is not None:
        label += f" ({item.workout.start_date:%Y-%m-%d})"
    return f"{label:<40} {format_quantity(item.value):>16}"


def generate_cohort_report(cohort: Cohort) -> str:
    """Text block for one cohort: summary, stat sections and forecasts."""
    report = f"""
{cohort.title} [{cohort.rank_label}]
{'-' * 70}
Workouts:                  {cohort.size:>8d} ({cohort.percentage_of_total_workouts:.1f}% of total)
Skipped near this bucket:  {cohort.skipped:>8d}
Consistency ({consistency_metric_label(cohort.metric).lower():<8}):    {cohort.consistency.score:>8d}/100
Total variation:           {format_quantity(cohort.total_variation):>8}
"""
    for section in cohort.stats:
        report += f"\n  {section.title.upper()}\n"
        for item in section.items:
            report += f"    {format_stat_item(item)}\n"

    for prediction in (cohort.predictions.four_week, cohort.predictions.twelve_week):
        if prediction is not None:
            report += generate_prediction_report(prediction, indent="  ")

    return report


def generate_grouping_report(
    result: GroupingResult,
    title: str = "Workout Cohort Report",
) -> str:
    """
    Generate a text report for a grouping run.

    Args:
        result: Output of GroupingEngine.run
        title: Report title

    Returns:
        Formatted report string
    """
    config = result.config
    report = f"""
{'=' * 70}
{title}
{'=' * 70}
Metric:                    {result.metric.value}
Tolerance / bucket width:  {config.tolerance:g} / {config.bucket_width:g}
Workouts considered:       {result.considered:>8d}
Workouts grouped:          {result.grouped:>8d}
Workouts skipped:          {result.skipped:>8d}
Cohorts:                   {len(result.cohorts):>8d}
"""

    if result.cohorts:
        report += f"\n{'Rank':<6} {'Cohort':<24} {'Runs':>6} {'Consistency':>12} {'Forecast':>10}\n"
        report += "-" * 70 + "\n"
        for cohort in result.cohorts:
            forecast = cohort.predictions.four_week
            forecast_text = forecast.confidence_level.value if forecast else "-"
            report += (f"{cohort.rank:<6d} "
                       f"{cohort.title[:24]:<24} "
                       f"{cohort.size:>6d} "
                       f"{cohort.consistency.score:>12d} "
                       f"{forecast_text:>10}\n")

    for cohort in result.cohorts:
        report += generate_cohort_report(cohort)

    if result.failures:
        report += "\nCALCULATOR FAILURES\n-------------------\n"
        for failure in result.failures:
            report += f"  {failure}\n"

    return report


def generate_prediction_report(prediction: Prediction, indent: str = "") -> str:
    """Text block for one prediction."""
    basis = prediction.basis
    lines: List[str] = [
        "",
        f"{prediction.weeks_ahead}-WEEK FORECAST ({prediction.target_date:%Y-%m-%d})",
        f"Predicted pace:            {format_quantity(prediction.predicted_pace)}",
        f"Predicted time:            {format_quantity(prediction.predicted_duration)}",
        f"Improvement:               {prediction.improvement_percentage:+.2f}%",
        f"Confidence:                {prediction.confidence:.1f} ({prediction.confidence_level.value})",
        f"Momentum:                  {prediction.trend.momentum.value}",
        f"Basis:                     {basis.data_points} workouts over {basis.time_span_days} days, "
        f"trend strength {basis.trend_strength:.2f}, consistency {basis.consistency_score}, "
        f"realism {basis.realism_factor:.1f}",
    ]
    if prediction.recommendations:
        lines.append("Recommended training:")
        lines.extend(f"  - {format_recommendation(r)}" for r in prediction.recommendations)

    return "\n".join(indent + line if line else line for line in lines) + "\n"
