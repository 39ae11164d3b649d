"""Fake adapters for testing.

This module provides test doubles for port interfaces, enabling
deterministic testing without real I/O operations.
"""

from pg_failover_monitor.adapters.fakes.fake_collaborators import (
    FakeCandidateSource,
    FakeEventEmitter,
    FakeIntervalTimer,
    FakePrimaryConfigStore,
    FakeServiceController,
)
from pg_failover_monitor.adapters.fakes.fake_database_driver import (
    FakeConnection,
    FakeDatabaseDriver,
    FakeNode,
)
from pg_failover_monitor.adapters.fakes.fake_logging_adapter import FakeLoggingAdapter
from pg_failover_monitor.adapters.fakes.fake_metrics import FakeMetricsAdapter, MetricCall

__all__ = [
    "FakeCandidateSource",
    "FakeEventEmitter",
    "FakeIntervalTimer",
    "FakePrimaryConfigStore",
    "FakeServiceController",
    "FakeConnection",
    "FakeDatabaseDriver",
    "FakeNode",
    "FakeLoggingAdapter",
    "FakeMetricsAdapter",
    "MetricCall",
]
