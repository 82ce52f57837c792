"""Route metrics: the cost associated with using a route."""

from __future__ import annotations

from dataclasses import dataclass

METRIC_INFINITE = 0xFFFF
"""Value of the infinite metric, marking a retracted route."""

_MAX_FINITE = METRIC_INFINITE - 1


@dataclass(frozen=True, order=True)
class Metric:
    """Cost of a route; a lower metric means a more favourable route."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("metric value must be an integer")
        if not 0 <= self.value <= METRIC_INFINITE:
            raise ValueError(f"metric value {self.value} does not fit in 16 bits")

    @classmethod
    def infinite(cls) -> Metric:
        """Return the infinite metric."""
        return cls(METRIC_INFINITE)

    def is_infinite(self) -> bool:
        """Whether this metric indicates a retracted route."""
        return self.value == METRIC_INFINITE

    def is_direct(self) -> bool:
        """Whether this metric represents a directly connected route."""
        return self.value == 0

    def delta(self, other: Metric) -> Metric:
        """Absolute difference between this metric and another."""
        return Metric(abs(self.value - other.value))

    def __add__(self, other: object) -> Metric:
        if not isinstance(other, Metric):
            return NotImplemented
        if self.is_infinite() or other.is_infinite():
            return Metric.infinite()
        # A finite sum never becomes infinite; it saturates just below it.
        return Metric(min(self.value + other.value, _MAX_FINITE))

    def __sub__(self, other: object) -> Metric:
        if not isinstance(other, Metric):
            return NotImplemented
        if other.is_infinite():
            raise ValueError("can't subtract an infinite metric")
        if self.is_infinite():
            return Metric.infinite()
        return Metric(max(self.value - other.value, 0))

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return "Infinite" if self.is_infinite() else str(self.value)