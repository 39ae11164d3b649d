"""Shared fixtures for failover monitor unit tests."""

from __future__ import annotations

import pytest

from pg_failover_monitor.adapters.fakes import (
    FakeCandidateSource,
    FakeDatabaseDriver,
    FakeEventEmitter,
    FakeIntervalTimer,
    FakeLoggingAdapter,
    FakeNode,
    FakePrimaryConfigStore,
    FakeServiceController,
)
from pg_failover_monitor.domain.connection import ConnectionParams


@pytest.fixture
def logger() -> FakeLoggingAdapter:
    """Provide a FakeLoggingAdapter capturing every log call."""
    return FakeLoggingAdapter()


@pytest.fixture
def primary_params() -> ConnectionParams:
    """Parameters of the configured primary, as read from database.yml."""
    return ConnectionParams.of(
        host="db1",
        port=5432,
        dbname="vmdb_production",
        user="root",
        password="smartvm",
    )


@pytest.fixture
def driver() -> FakeDatabaseDriver:
    """Provide a FakeDatabaseDriver with a reachable, writable primary db1.

    Example:
        def test_primary_down(driver):
            driver.node("db1").reachable = False
    """
    return FakeDatabaseDriver([FakeNode("db1", in_recovery=False)])


@pytest.fixture
def config_store(primary_params: ConnectionParams) -> FakePrimaryConfigStore:
    return FakePrimaryConfigStore(primary_params)


@pytest.fixture
def candidates() -> FakeCandidateSource:
    return FakeCandidateSource()


@pytest.fixture
def service_controller() -> FakeServiceController:
    return FakeServiceController()


@pytest.fixture
def event_emitter() -> FakeEventEmitter:
    return FakeEventEmitter()


@pytest.fixture
def timer() -> FakeIntervalTimer:
    return FakeIntervalTimer()
