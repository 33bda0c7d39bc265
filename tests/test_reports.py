"""
Tests for text reports.

Run with: python -m pytest tests/test_reports.py -v
"""

from datetime import date
import re

import pytest

from analysis.reports import (
    format_quantity,
    generate_cohort_report,
    generate_grouping_report,
    generate_prediction_report,
)
from core.quantity import Quantity
from core.records import MetricType
from data.synthetic import RunnerArchetype, generate_workout_history, get_profile
from grouping.calculators import STAT_CALCULATORS
from grouping.engine import GroupingEngine


@pytest.fixture
def history():
    return generate_workout_history(get_profile(RunnerArchetype.FIVE_K_REGULAR), weeks=10, seed=21)


@pytest.fixture
def engine():
    return GroupingEngine(today=date(2024, 4, 1))


class TestFormatQuantity:
    """Tests for quantity display text."""

    def test_formats(self):
        assert format_quantity(None) == "-"
        assert format_quantity(Quantity(7.75, 'min/mi')) == "7:45 /mi"
        assert format_quantity(Quantity(3725, 's')) == "1:02:05"
        assert format_quantity(Quantity(5.0, 'mi')) == "5 mi"
        assert format_quantity(Quantity(5.25, 'mi')) == "5.25 mi"


class TestReports:
    """Tests for grouping and forecast reports."""

    def test_grouping_report(self, history, engine):
        result = engine.run(history, MetricType.DISTANCE)
        report = generate_grouping_report(result)

        assert "Workout Cohort Report" in report
        assert "Metric:                    distance" in report
        assert f"Workouts considered:       {result.considered:>8d}" in report
        for cohort in result:
            assert cohort.title in report
        assert "MOST COMMON" in report
        assert "4-WEEK FORECAST" in report
        assert "12-WEEK FORECAST" in report
        assert "CALCULATOR FAILURES" not in report

    def test_empty_result(self, engine):
        report = generate_grouping_report(engine.run([], MetricType.PACE), title="Pace")
        assert re.search(r"Cohorts:\s+0\n", report)

    def test_failures_listed(self, history, engine):
        def broken(cohort, ctx):
            raise KeyError("missing")

        calculators = dict(STAT_CALCULATORS)
        calculators[MetricType.DISTANCE] = broken
        result = GroupingEngine(today=engine.today, calculators=calculators).run(
            history, MetricType.DISTANCE
        )
        report = generate_grouping_report(result)
        assert "CALCULATOR FAILURES" in report
        assert "distance calculator failed" in report

    def test_cohort_and_prediction_reports(self, history, engine):
        cohort = engine.run(history, MetricType.DISTANCE)[0]
        text = generate_cohort_report(cohort)
        assert cohort.rank_label in text
        assert "Consistency (duration):" in text

        prediction = cohort.predictions.four_week
        block = generate_prediction_report(prediction, indent="  ")
        assert "  Predicted pace:" in block
        assert f"realism {prediction.basis.realism_factor:.1f}" in block
        assert prediction.confidence_level.value in block
        assert "Recommended training:" in block
