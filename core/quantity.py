"""
Unit-tagged quantities and unit-checked arithmetic.

A Quantity is a value plus a unit string. Binary operations require equal
units: a mismatch is a caller bug and raises UnitMismatch, nothing is ever
converted silently.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union
import math
import numbers

from .errors import QuantityError, UnitMismatch


# Units whose values may legitimately be below zero
SIGNED_UNITS = frozenset({'°C', '°F', 'degC', 'degF'})

COUNT_UNIT = 'count'

KM_PER_MILE = 1.609344

# Distance unit -> miles in one unit
MILES_PER_UNIT = {'mi': 1.0, 'km': 1 / KM_PER_MILE, 'm': 1 / (KM_PER_MILE * 1000)}


@dataclass(frozen=True)
class Quantity:
    """
    An immutable measured value.

    Values must be finite. Magnitudes (distance, duration, elevation, pace,
    humidity) must also be non-negative; only temperature units are signed.
    """
    value: float
    unit: str

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, numbers.Real):
            raise QuantityError(f"Quantity value must be numeric, got {self.value!r}")
        if not math.isfinite(self.value):
            raise QuantityError(f"Quantity value must be finite, got {self.value!r}")
        if self.value < 0 and self.unit not in SIGNED_UNITS:
            raise QuantityError(
                f"Quantity value must be non-negative for unit {self.unit!r}, got {self.value}"
            )

    @classmethod
    def count(cls, n: int) -> 'Quantity':
        """Dimensionless count, used for percentages of record totals."""
        return cls(n, COUNT_UNIT)

    def with_value(self, value: float) -> 'Quantity':
        """Same unit, new value."""
        return Quantity(value, self.unit)

    def __str__(self) -> str:
        return f"{self.value:g} {self.unit}"


Number = Union[int, float]


def _check_units(quantities: List[Quantity]) -> str:
    unit = quantities[0].unit
    for q in quantities[1:]:
        if q.unit != unit:
            raise UnitMismatch(unit, q.unit)
    return unit


def sum_quantities(quantities: Iterable[Quantity]) -> Quantity:
    """
    Sum quantities sharing one unit.

    Raises:
        QuantityError: if the list is empty
        UnitMismatch: if units differ
    """
    quantities = list(quantities)
    if not quantities:
        raise QuantityError("No quantities to sum")
    unit = _check_units(quantities)
    return Quantity(math.fsum(q.value for q in quantities), unit)


def average_quantity(quantities: Iterable[Quantity]) -> Quantity:
    """Arithmetic mean of quantities sharing one unit."""
    quantities = list(quantities)
    if not quantities:
        raise QuantityError("No quantities to average")
    total = sum_quantities(quantities)
    return Quantity(total.value / len(quantities), total.unit)


def difference(a: Quantity, b: Quantity) -> Quantity:
    """
    Compute ``a - b``.

    Callers pass operands in the order that yields a non-negative result
    (e.g. worst minus highlight); use absolute_difference otherwise.

    Raises:
        UnitMismatch: if units differ
        QuantityError: if the result would be negative
    """
    _check_units([a, b])
    result = a.value - b.value
    if result < 0 and a.unit not in SIGNED_UNITS:
        raise QuantityError(f"Difference {a} - {b} is negative")
    return Quantity(result, a.unit)


def absolute_difference(a: Quantity, b: Quantity) -> Quantity:
    """Compute ``|a - b|``."""
    _check_units([a, b])
    return Quantity(abs(a.value - b.value), a.unit)


def percentage(part: Quantity, whole: Quantity) -> float:
    """
    Express ``part`` as a percentage of ``whole``, rounded to 2 decimals.

    Returns 0 when ``whole`` is zero.
    """
    _check_units([part, whole])
    if whole.value == 0:
        return 0.0
    return round(part.value / whole.value * 100, 2)


def in_miles(distance: Quantity) -> Optional[float]:
    """Distance in miles, or None when the unit is not a known distance unit."""
    factor = MILES_PER_UNIT.get(distance.unit)
    return None if factor is None else distance.value * factor


def pace_per_mile(pace: Quantity) -> Optional[float]:
    """
    Pace in minutes per mile, or None when the pace unit has no known distance.

    >>> pace_per_mile(Quantity(5.0, 'min/km'))  # doctest: +ELLIPSIS
    8.04...
    """
    if not pace.unit.startswith('min/'):
        return None
    factor = MILES_PER_UNIT.get(pace.unit[len('min/'):])
    return None if factor is None else pace.value / factor


def format_pace(pace: Quantity) -> str:
    """
    Format a decimal minutes-per-distance pace as ``m:ss``.

    >>> format_pace(Quantity(7.75, 'min/mi'))
    '7:45 /mi'
    """
    total_seconds = int(round(pace.value * 60))
    minutes, seconds = divmod(total_seconds, 60)
    suffix = pace.unit.split('/', 1)[1] if '/' in pace.unit else pace.unit
    return f"{minutes}:{seconds:02d} /{suffix}"


def format_duration(duration: Quantity) -> str:
    """Format a duration in seconds as ``h:mm:ss`` or ``m:ss``."""
    total_seconds = int(round(duration.value))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"
