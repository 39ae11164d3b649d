"""Fake metrics adapter for testing.

Provides a test double for MetricsPort that records all metric updates
for assertion in tests.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MetricCall:
    """Record of a single metric update.

    Attributes:
        metric_name: Name of the metric that was updated.
        value: Value that was set or recorded.
    """

    metric_name: str
    value: float | int | bool | str


class FakeMetricsAdapter:
    """Fake implementation of MetricsPort for testing.

    Example:
        >>> fake = FakeMetricsAdapter()
        >>> fake.set_primary_available(False)
        >>> fake.current_primary_available
        False
        >>> fake.calls
        [MetricCall(metric_name='primary_available', value=False)]
    """

    def __init__(self) -> None:
        """Initialize with no recorded state."""
        self._primary_available: bool | None = None
        self._failover_attempts: int | None = None
        self._outcomes: list[bool] = []
        self._calls: list[MetricCall] = []

    @property
    def calls(self) -> list[MetricCall]:
        """Return a copy of all metric update calls, in order."""
        return list(self._calls)

    @property
    def current_primary_available(self) -> bool | None:
        """Return last set primary availability, or None if never set."""
        return self._primary_available

    @property
    def current_failover_attempts(self) -> int | None:
        """Return last set attempts of an episode, or None if never set."""
        return self._failover_attempts

    @property
    def outcomes(self) -> list[bool]:
        """Return recorded episode outcomes, in order."""
        return list(self._outcomes)

    def set_primary_available(self, available: bool) -> None:
        self._primary_available = available
        self._calls.append(MetricCall("primary_available", available))

    def record_failover_outcome(self, succeeded: bool) -> None:
        self._outcomes.append(succeeded)
        self._calls.append(MetricCall("failover_outcome", succeeded))

    def set_failover_attempts(self, attempts: int) -> None:
        self._failover_attempts = attempts
        self._calls.append(MetricCall("failover_attempts", attempts))

    def reset(self) -> None:
        """Reset all state and calls."""
        self._primary_available = None
        self._failover_attempts = None
        self._outcomes.clear()
        self._calls.clear()
