"""
Tests for per-metric cohort statistics and failure isolation.

Run with: python -m pytest tests/test_calculators.py -v
"""

import pytest

from core.errors import CalculatorFailure
from core.quantity import Quantity
from core.records import MetricType
from grouping import calculators
from grouping.calculators import STAT_CALCULATORS, distance_stats, most_frequent
from grouping.cohort import StatType
from grouping.engine import GroupingEngine


@pytest.fixture
def engine(reference_date):
    return GroupingEngine(today=reference_date)


# =============================================================================
# Distance Cohorts
# =============================================================================

class TestDistanceStats:
    """Tests for distance cohort statistics."""

    @pytest.fixture
    def result(self, engine, make_workout):
        runs = [
            make_workout('a', distance=5.0, pace=8.0, day=0, elevation=40.0),
            make_workout('b', distance=5.0, pace=7.5, day=7, elevation=80.0),
            make_workout('c', distance=5.0, pace=8.5, day=14, elevation=20.0),
            make_workout('d', distance=10.0, pace=9.0, day=3),
        ]
        return engine.run(runs, MetricType.DISTANCE)

    def test_highlight_and_worst_by_pace(self, result):
        cohort = result.cohort("5")
        assert cohort.highlight.id == 'b'
        assert cohort.worst.id == 'c'
        assert cohort.total_variation == Quantity(300.0, 's')

    def test_sections(self, result):
        assert result.cohort("5").section_titles() == [
            'Fastest', 'Slowest', 'Highest', 'Lowest', 'Most Common', 'Cumulative',
            'Training Recommendations',
        ]

    def test_single_member_has_no_forecast(self, result):
        cohort = result.cohort("10")
        assert cohort.predictions.is_empty
        assert 'Training Recommendations' not in cohort.section_titles()
        assert cohort.consistency.score == 100

    def test_totals_and_share(self, result):
        cohort = result.cohort("5")
        assert cohort.title == "5 mi"
        assert cohort.percentage_of_total_workouts == 75.0
        assert cohort.total_distance == Quantity(15.0, 'mi')
        assert cohort.total_elevation == Quantity(140.0, 'm')
        assert cohort.section('Highest').items[0].value == Quantity(80.0, 'm')
        assert cohort.section('Lowest').items[0].workout.id == 'c'

    def test_recency(self, result):
        cohort = result.cohort("5")
        assert cohort.most_recent.id == 'c'
        assert cohort.oldest.id == 'a'

    def test_forecasts_attached(self, result):
        predictions = result.cohort("5").predictions
        assert predictions.four_week.weeks_ahead == 4
        assert predictions.twelve_week.weeks_ahead == 12
        assert predictions.recommendations
        section = result.cohort("5").section('Training Recommendations')
        assert [item.label for item in section.items] == list(predictions.recommendations)
        assert all(item.type is StatType.TRAINING for item in section.items)

    def test_consistency_on_duration(self, result):
        cohort = result.cohort("5")
        assert cohort.variant_distribution == (2400.0, 2250.0, 2550.0)
        assert 0 < cohort.consistency.score < 100


# =============================================================================
# Modal Representatives
# =============================================================================

class TestMostFrequent:
    """Tests for modal-rounded representative values."""

    def test_returns_first_real_value_of_mode(self, make_workout):
        runs = [make_workout('a', pace=8.1), make_workout('b', pace=8.2),
                make_workout('c', pace=9.4)]
        assert most_frequent(runs, 'pace') == Quantity(8.1, 'min/mi')

    def test_tie_goes_to_first_seen(self, make_workout):
        runs = [make_workout('a', pace=9.0), make_workout('b', pace=8.0)]
        assert most_frequent(runs, 'pace').value == 9.0

    def test_missing_attribute(self, make_workout):
        assert most_frequent([make_workout('a')], 'humidity') is None

    def test_cohort_average_pace(self, engine, make_workout):
        runs = [make_workout('a', pace=8.1), make_workout('b', pace=8.2),
                make_workout('c', pace=9.4)]
        cohort = engine.run(runs, MetricType.DISTANCE)[0]
        assert cohort.average_pace == Quantity(8.1, 'min/mi')
        assert cohort.section('Most Common').item('Pace').value == Quantity(8.1, 'min/mi')


# =============================================================================
# Pace Cohorts
# =============================================================================

class TestPaceStats:
    """Tests for pace cohort statistics."""

    @pytest.fixture
    def cohort(self, engine, make_workout):
        runs = [
            make_workout('a', distance=3.0, pace=8.0, day=0),
            make_workout('b', distance=6.0, pace=8.2, day=5),
            make_workout('c', distance=4.0, pace=7.9, day=9),
        ]
        return engine.run(runs, MetricType.PACE).cohort("8")

    def test_title(self, cohort):
        assert cohort.title == "8 min/mi"
        assert cohort.suffix == "min/mi"

    def test_highlight_and_variation(self, cohort):
        assert cohort.highlight.id == 'c'
        assert cohort.worst.id == 'b'
        assert cohort.total_variation == Quantity(2.0, 'mi')

    def test_distribution_is_distance(self, cohort):
        assert cohort.variant_distribution == (3.0, 6.0, 4.0)

    def test_cumulative_without_elevation(self, cohort):
        labels = [item.label for item in cohort.section('Cumulative').items]
        assert labels == ['Cumulative Distance', 'Cumulative Duration']

    def test_sections(self, cohort):
        assert cohort.section_titles()[:4] == [
            'Fastest', 'Slowest', 'Highest Elevation', 'Lowest Elevation',
        ]
        assert not cohort.predictions.is_empty


# =============================================================================
# Duration Cohorts
# =============================================================================

class TestDurationStats:
    """Tests for duration cohort statistics."""

    @pytest.fixture
    def cohort(self, engine, make_workout):
        runs = [
            make_workout('a', distance=5.0, duration=2700, day=0),
            make_workout('b', distance=5.5, duration=2800, day=2),
            make_workout('c', distance=4.8, duration=2600, day=4),
        ]
        return engine.run(runs, MetricType.DURATION).cohort("2700")

    def test_range_title(self, cohort):
        assert cohort.title == "40–50 min"
        assert cohort.suffix == "minutes"

    def test_highlight_is_furthest(self, cohort):
        assert cohort.highlight.id == 'b'
        assert cohort.worst.id == 'c'
        assert cohort.total_variation.value == pytest.approx(0.7)

    def test_sections_without_forecast(self, cohort):
        assert cohort.section_titles() == [
            'Furthest', 'Shortest', 'Highest Elevation', 'Lowest Elevation', 'Most Recent',
            'Most Common',
        ]
        assert cohort.section('Most Recent').items[0].workout.id == 'c'
        assert cohort.predictions.is_empty


# =============================================================================
# Elevation Cohorts
# =============================================================================

class TestElevationStats:
    """Tests for elevation cohort statistics."""

    @pytest.fixture
    def result(self, engine, make_workout):
        runs = [
            make_workout('a', elevation=100.0, pace=9.0, day=0),
            make_workout('b', elevation=120.0, pace=8.8, day=7),
            make_workout('c', elevation=80.0, pace=8.6, day=14),
            make_workout('d', elevation=310.0, day=20),
        ]
        return engine.run(runs, MetricType.ELEVATION)

    def test_title_and_extremes(self, result):
        cohort = result.cohort("100")
        assert cohort.title == "100 m elevation"
        assert cohort.highlight.id == 'b'
        assert cohort.worst.id == 'c'
        assert cohort.total_variation == Quantity(40.0, 'm')

    def test_sections(self, result):
        cohort = result.cohort("100")
        assert cohort.section_titles() == ['Overview', 'Elevation', 'Pace',
                                           'Training Recommendations']
        assert cohort.section('Pace').item('Best Pace').workout.id == 'c'

    def test_forecast_only_for_multi_member_cohorts(self, result):
        assert not result.cohort("100").predictions.is_empty
        assert result.cohort("300").predictions.is_empty


# =============================================================================
# Weather Cohorts
# =============================================================================

class TestWeatherStats:
    """Tests for temperature and humidity cohort statistics."""

    def test_temperature_cohort(self, engine, make_workout):
        runs = [
            make_workout('a', temperature=10.0, pace=8.0, day=0),
            make_workout('b', temperature=11.0, pace=7.8, day=1),
            make_workout('c', temperature=9.0, pace=8.4, day=2),
        ]
        cohort = engine.run(runs, MetricType.TEMPERATURE).cohort("10")
        assert cohort.title == "7.5–12.5 °C"
        assert cohort.highlight.id == 'b'
        assert cohort.worst.id == 'c'
        assert cohort.section_titles() == [
            'Fastest', 'Slowest', 'Most Recent', 'Most Common', 'Cumulative',
        ]
        assert cohort.section('Fastest').item('Temperature').value == Quantity(11.0, '°C')
        assert cohort.predictions.is_empty

    def test_freezing_temperatures(self, engine, make_workout):
        runs = [make_workout('a', temperature=-3.0), make_workout('b', temperature=-6.0)]
        result = engine.run(runs, MetricType.TEMPERATURE)
        assert result.keys() == ["-5"]
        assert result[0].title == "-7.5–-2.5 °C"

    def test_humidity_cohort(self, engine, make_workout):
        runs = [make_workout('a', humidity=55.0), make_workout('b', humidity=58.0, day=1)]
        cohort = engine.run(runs, MetricType.HUMIDITY).cohort("60")
        assert cohort.title == "55–65 %"
        assert cohort.suffix == "%"
        assert cohort.size == 2


# =============================================================================
# Failure Isolation
# =============================================================================

class TestFailureIsolation:
    """A failing calculator must not affect other cohorts."""

    @pytest.fixture
    def runs(self, make_workout):
        return [
            make_workout('a', distance=5.0, day=0),
            make_workout('b', distance=5.1, day=7),
            make_workout('c', distance=8.0, day=1),
            make_workout('d', distance=8.1, day=8),
        ]

    def test_calculator_failure_keeps_base_stats(self, runs, reference_date):
        def flaky_distance_stats(cohort, ctx):
            if cohort.key == "5":
                raise RuntimeError("boom")
            return distance_stats(cohort, ctx)

        custom = dict(STAT_CALCULATORS)
        custom[MetricType.DISTANCE] = flaky_distance_stats
        result = GroupingEngine(today=reference_date, calculators=custom).run(
            runs, MetricType.DISTANCE
        )

        assert len(result.failures) == 1
        failure = result.failures[0]
        assert isinstance(failure, CalculatorFailure)
        assert failure.metric == 'distance'
        assert failure.cohort_key == "5"
        assert isinstance(failure.__cause__, RuntimeError)

        broken = result.cohort("5")
        assert broken.section_titles() == ['Most Common']
        assert broken.predictions.is_empty
        assert broken.size == 2

        healthy = result.cohort("8")
        assert 'Fastest' in healthy.section_titles()
        assert not healthy.predictions.is_empty

    def test_prediction_failure_keeps_metric_sections(self, runs, reference_date, monkeypatch):
        def failing_predict(*args, **kwargs):
            raise ValueError("degenerate series")

        monkeypatch.setattr(calculators, 'predict', failing_predict)
        result = GroupingEngine(today=reference_date).run(runs, MetricType.DISTANCE)

        assert result.failures == []
        for cohort in result:
            assert cohort.predictions.is_empty
            assert 'Fastest' in cohort.section_titles()
            assert 'Training Recommendations' not in cohort.section_titles()

    def test_base_stage_failure_keeps_bare_cohort(self, runs, reference_date, monkeypatch):
        original = calculators.base_stats

        def flaky_base_stats(cohort, ctx):
            if cohort.key == "5":
                raise ZeroDivisionError("empty share")
            return original(cohort, ctx)

        monkeypatch.setattr(calculators, 'base_stats', flaky_base_stats)
        result = GroupingEngine(today=reference_date).run(runs, MetricType.DISTANCE)

        assert [f.cohort_key for f in result.failures] == ["5"]
        assert isinstance(result.failures[0].__cause__, ZeroDivisionError)

        bare = result.cohort("5")
        assert bare.stats == ()
        assert bare.size == 2
        assert bare.predictions.is_empty

        assert 'Fastest' in result.cohort("8").section_titles()
