"""Port interface and no-op implementation for metrics collection.

Metrics ports follow fire-and-forget semantics: implementations may
buffer, sample, or drop metrics as needed. No exceptions should propagate.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsPort(Protocol):
    """Port interface for metrics collection.

    Contract:
        - All methods are fire-and-forget (no return value, no exceptions)
        - set_* methods update gauges to specific values
        - record_* methods increment counters
        - Implementations may no-op if metrics are disabled
    """

    def set_primary_available(self, available: bool) -> None:
        """Set the primary availability gauge.

        Args:
            available: True if the configured primary answered (gauge 1),
                      False otherwise (gauge 0).
        """
        ...

    def record_failover_outcome(self, succeeded: bool) -> None:
        """Count a finished failover episode.

        Args:
            succeeded: True if the application was cut over.
        """
        ...

    def set_failover_attempts(self, attempts: int) -> None:
        """Set the number of search passes of the last episode.

        Args:
            attempts: Passes run before the episode ended.
        """
        ...


class NoOpMetricsAdapter:
    """No-operation metrics adapter for when metrics are disabled.

    All methods are no-ops. This allows use cases to unconditionally
    call metrics methods without checking if metrics are enabled.
    """

    def set_primary_available(self, available: bool) -> None:
        """No-op."""
        pass

    def record_failover_outcome(self, succeeded: bool) -> None:
        """No-op."""
        pass

    def set_failover_attempts(self, attempts: int) -> None:
        """No-op."""
        pass
