"""
Grouping configuration and its validation.

The half-width rule, tolerance <= bucket_width / 2, keeps the acceptance
windows of adjacent bucket centers from overlapping, so no workout can be
accepted by two cohorts. Violating configurations are rejected before
any binning happens.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple, Union
import math

from core.errors import InvalidConfiguration
from core.records import MetricType
from .metrics import GroupMetricDefinition, get_metric_definition


@dataclass
class GroupingConfig:
    """Tolerance and bucket width for one grouping pass."""

    tolerance: float
    bucket_width: float

    @classmethod
    def for_metric(
        cls,
        metric: Union[MetricType, str, GroupMetricDefinition],
        tolerance: Optional[float] = None,
        bucket_width: Optional[float] = None,
    ) -> 'GroupingConfig':
        """Build a config from a metric's defaults, overriding either value."""
        metric = get_metric_definition(metric)
        return cls(
            tolerance=metric.default_tolerance if tolerance is None else tolerance,
            bucket_width=metric.default_bucket_width if bucket_width is None else bucket_width,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'GroupingConfig':
        """Create parameters from dictionary."""
        return cls(**d)

    def validate(self) -> Tuple[bool, str]:
        """Validate parameter constraints."""
        issues = []

        for name in ('tolerance', 'bucket_width'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                issues.append(f"{name} must be a number, got {value!r}")
            elif not math.isfinite(value):
                issues.append(f"{name} must be finite, got {value}")
            elif value < 0:
                issues.append(f"{name} must be non-negative, got {value}")

        if not issues and self.tolerance > self.bucket_width / 2:
            issues.append(
                f"tolerance ({self.tolerance}) must not exceed half the bucket width "
                f"({self.bucket_width / 2})"
            )

        if issues:
            return False, "; ".join(issues)
        return True, "Valid"

    def require_valid(self) -> 'GroupingConfig':
        """Raise InvalidConfiguration unless the config validates."""
        valid, message = self.validate()
        if not valid:
            raise InvalidConfiguration(message)
        return self
