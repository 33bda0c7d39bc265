"""
Tests for quantities, statistics primitives and consistency scoring.

Run with: python -m pytest tests/test_primitives.py -v
"""

import math

import numpy as np
import pytest

from core.consistency import (
    CONSISTENCY_AXIS,
    calculate_consistency,
    consistency_metric_label,
    extract_consistency_values,
)
from core.errors import QuantityError, UnitMismatch
from core.quantity import (
    Quantity,
    absolute_difference,
    average_quantity,
    difference,
    format_duration,
    format_pace,
    in_miles,
    pace_per_mile,
    percentage,
    sum_quantities,
)
from core.records import MetricType
from core.statistics import (
    calculate_coefficient_of_variation,
    calculate_mean,
    calculate_median,
    calculate_standard_deviation,
    clamp,
)


# =============================================================================
# Quantity Tests
# =============================================================================

class TestQuantity:
    """Tests for quantity construction and arithmetic."""

    def test_rejects_invalid_values(self):
        for bad in (float('nan'), float('inf'), -1.0):
            with pytest.raises(QuantityError):
                Quantity(bad, 'mi')

    def test_temperature_may_be_negative(self):
        assert Quantity(-4.5, '°C').value == -4.5

    def test_accepts_numpy_scalars(self):
        assert Quantity(np.float64(3.5), 'mi').value == 3.5
        assert Quantity(np.int64(3), 'mi').value == 3

    def test_sum(self):
        total = sum_quantities([Quantity(1.5, 'mi'), Quantity(2.5, 'mi')])
        assert total == Quantity(4.0, 'mi')

    def test_sum_empty_raises(self):
        with pytest.raises(QuantityError):
            sum_quantities([])

    def test_average(self):
        avg = average_quantity([Quantity(600, 's'), Quantity(1200, 's')])
        assert avg == Quantity(900, 's')

    def test_difference_ordering_contract(self):
        assert difference(Quantity(10, 'm'), Quantity(4, 'm')) == Quantity(6, 'm')
        with pytest.raises(QuantityError):
            difference(Quantity(4, 'm'), Quantity(10, 'm'))

    def test_absolute_difference(self):
        assert absolute_difference(Quantity(4, 'm'), Quantity(10, 'm')) == Quantity(6, 'm')

    def test_percentage(self):
        assert percentage(Quantity.count(1), Quantity.count(3)) == 33.33
        assert percentage(Quantity.count(5), Quantity.count(0)) == 0.0

    def test_mismatched_units_always_raise(self):
        a, b = Quantity(5, 'mi'), Quantity(5, 'km')
        operations = [
            lambda: sum_quantities([a, b]),
            lambda: average_quantity([a, b]),
            lambda: difference(a, b),
            lambda: absolute_difference(a, b),
            lambda: percentage(a, b),
        ]
        for operation in operations:
            with pytest.raises(UnitMismatch):
                operation()

    def test_unit_mismatch_is_never_coerced(self):
        with pytest.raises(UnitMismatch) as exc_info:
            sum_quantities([Quantity(1, 's'), Quantity(1, 'min')])
        assert exc_info.value.left_unit == 's'
        assert exc_info.value.right_unit == 'min'

    def test_format_pace(self):
        assert format_pace(Quantity(7.75, 'min/mi')) == "7:45 /mi"
        assert format_pace(Quantity(5.0, 'min/km')) == "5:00 /km"

    def test_format_duration(self):
        assert format_duration(Quantity(3725, 's')) == "1:02:05"
        assert format_duration(Quantity(125, 's')) == "2:05"

    def test_mile_conversions(self):
        assert in_miles(Quantity(10.0, 'km')) == pytest.approx(6.2137, abs=1e-4)
        assert in_miles(Quantity(1609.344, 'm')) == pytest.approx(1.0)
        assert in_miles(Quantity(3.0, 'yd')) is None
        assert pace_per_mile(Quantity(5.0, 'min/km')) == pytest.approx(8.0467, abs=1e-4)
        assert pace_per_mile(Quantity(8.0, 'min/mi')) == 8.0
        assert pace_per_mile(Quantity(300.0, 's')) is None


# =============================================================================
# Statistics Tests
# =============================================================================

class TestStatistics:
    """Tests for descriptive statistics."""

    def test_mean(self):
        assert calculate_mean([1, 2, 3, 4]) == 2.5
        assert calculate_mean([]) == 0

    def test_median_odd_and_even(self):
        assert calculate_median([3, 1, 2]) == 2
        assert calculate_median([4, 1, 3, 2]) == 2.5
        assert calculate_median([]) == 0

    def test_sample_standard_deviation(self):
        values = [2, 4, 4, 4, 5, 5, 7, 9]
        assert calculate_standard_deviation(values) == pytest.approx(2.138, abs=1e-3)

    def test_standard_deviation_short_input(self):
        assert calculate_standard_deviation([]) == 0
        assert calculate_standard_deviation([5]) == 0

    def test_coefficient_of_variation(self):
        assert calculate_coefficient_of_variation([10, 30, 10, 30]) == pytest.approx(0.577, abs=1e-3)
        assert calculate_coefficient_of_variation([0, 0, 0]) == 0
        assert calculate_coefficient_of_variation([7]) == 0

    def test_clamp(self):
        assert clamp(150, 0, 100) == 100
        assert clamp(-5, 0, 100) == 0
        assert clamp(42, 0, 100) == 42
        with pytest.raises(ValueError):
            clamp(1, 10, 0)


# =============================================================================
# Consistency Tests
# =============================================================================

class TestConsistency:
    """Tests for consistency scoring."""

    def test_empty_scores_zero(self):
        assert calculate_consistency([]).score == 0

    def test_single_value_scores_100(self):
        result = calculate_consistency([42.0])
        assert result.score == 100
        assert result.mean == 42.0

    def test_constant_values_score_100(self):
        result = calculate_consistency([20, 20, 20, 20])
        assert result.score == 100
        assert result.coefficient_of_variation == 0

    def test_alternating_values_score_near_zero(self):
        result = calculate_consistency([10, 30, 10, 30])
        assert result.coefficient_of_variation == pytest.approx(0.577, abs=1e-3)
        assert result.score in (0, 1)

    def test_exponential_mapping(self):
        values = [100, 102, 98, 101, 99]
        result = calculate_consistency(values)
        expected = round(100 * math.exp(-10 * result.coefficient_of_variation))
        assert result.score == expected == 85
        assert result.median == 100

    def test_score_bounds(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            values = list(rng.uniform(0.1, 100, size=rng.integers(1, 20)))
            assert 0 <= calculate_consistency(values).score <= 100

    def test_axis_mapping(self):
        assert CONSISTENCY_AXIS[MetricType.PACE] == 'distance'
        assert CONSISTENCY_AXIS[MetricType.DISTANCE] == 'duration'
        assert CONSISTENCY_AXIS[MetricType.DURATION] == 'distance'
        assert CONSISTENCY_AXIS[MetricType.ELEVATION] == 'duration'
        assert CONSISTENCY_AXIS[MetricType.TEMPERATURE] == 'pace'
        assert CONSISTENCY_AXIS[MetricType.HUMIDITY] == 'pace'

    def test_extract_values_uses_off_axis(self, make_workout):
        runs = [make_workout('a', distance=5.0, pace=8.0), make_workout('b', distance=6.0, pace=9.0)]
        assert extract_consistency_values(runs, MetricType.PACE) == [5.0, 6.0]
        assert extract_consistency_values(runs, MetricType.DISTANCE) == [2400.0, 3240.0]
        assert consistency_metric_label(MetricType.HUMIDITY) == 'Pace'
