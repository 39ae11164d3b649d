"""Prometheus metrics adapter for the failover monitor.

Implements MetricsPort using prometheus-client library.
Gracefully handles missing prometheus-client (raises ImportError at init).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prometheus_client import Counter, Gauge


class PrometheusMetricsAdapter:
    """Prometheus implementation of MetricsPort.

    This adapter requires prometheus-client to be installed:
        pip install pg-failover-monitor[metrics]

    Example:
        >>> adapter = PrometheusMetricsAdapter(prefix="myapp_failover")
        >>> adapter.set_primary_available(True)  # myapp_failover_primary_available = 1
        >>> adapter.record_failover_outcome(True)

    Raises:
        ImportError: If prometheus-client is not installed.
    """

    def __init__(self, prefix: str = "pg_failover") -> None:
        """Initialize Prometheus metrics.

        Args:
            prefix: Metric name prefix. Defaults to "pg_failover".

        Raises:
            ImportError: If prometheus-client is not installed.
        """
        # Import here to make prometheus-client optional
        from prometheus_client import Counter, Gauge

        self._primary_available: Gauge = Gauge(
            f"{prefix}_primary_available",
            "Configured primary reachable: 1=yes, 0=no",
        )
        self._failover_attempts: Gauge = Gauge(
            f"{prefix}_last_episode_attempts",
            "Search passes run by the last failover episode",
        )
        self._failover_episodes: Counter = Counter(
            f"{prefix}_episodes",
            "Finished failover episodes by outcome",
            ["outcome"],
        )

    def set_primary_available(self, available: bool) -> None:
        """Set primary availability gauge."""
        self._primary_available.set(1 if available else 0)

    def record_failover_outcome(self, succeeded: bool) -> None:
        """Increment the episode counter for the outcome label."""
        outcome = "succeeded" if succeeded else "failed"
        self._failover_episodes.labels(outcome=outcome).inc()

    def set_failover_attempts(self, attempts: int) -> None:
        """Set the last episode attempts gauge."""
        self._failover_attempts.set(attempts)
