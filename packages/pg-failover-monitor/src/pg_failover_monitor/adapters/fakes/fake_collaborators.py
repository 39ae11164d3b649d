"""Fake collaborators of the failover orchestrator for testing.

Each fake records the calls it receives for later assertion.
"""

from __future__ import annotations

from typing import Sequence

from pg_failover_monitor.adapters.ports import DatabaseConnection
from pg_failover_monitor.domain.connection import ConnectionParams
from pg_failover_monitor.domain.events import FailoverEvent
from pg_failover_monitor.domain.exceptions import ConfigStoreWriteError


class FakePrimaryConfigStore:
    """In-memory fake for PrimaryConfigStorePort.

    Example:
        store = FakePrimaryConfigStore(ConnectionParams.of(host="db1"))
        store.write(ConnectionParams.of(host="db2"))
        assert store.writes[0].host == "db2"
    """

    def __init__(self, params: ConnectionParams) -> None:
        self._params = params
        self._writes: list[ConnectionParams] = []
        self.read_count = 0
        self.read_error: Exception | None = None
        self.write_error: str | None = None

    @property
    def current(self) -> ConnectionParams:
        """Return the parameters a read() would return."""
        return self._params

    @property
    def writes(self) -> list[ConnectionParams]:
        """Return every successfully written parameter set."""
        return list(self._writes)

    def read(self) -> ConnectionParams:
        self.read_count += 1
        if self.read_error is not None:
            raise self.read_error
        return self._params

    def write(self, params: ConnectionParams) -> None:
        if self.write_error is not None:
            raise ConfigStoreWriteError(self.write_error)
        self._writes.append(params)
        self._params = params


class FakeCandidateSource:
    """In-memory fake for CandidateSourcePort.

    The standby list may be replaced between passes to simulate the
    replication manager changing the topology.
    """

    def __init__(
        self,
        standbys: Sequence[ConnectionParams] = (),
        marked_primary_hosts: Sequence[str] = (),
    ) -> None:
        self.standbys: list[ConnectionParams] = list(standbys)
        self.marked_primary_hosts: set[str] = set(marked_primary_hosts)
        self.list_calls = 0
        self.marked_primary_checks: list[str | None] = []
        self.refreshed_with: list[DatabaseConnection] = []
        self.refresh_error: Exception | None = None

    def list_standbys(self) -> Sequence[ConnectionParams]:
        self.list_calls += 1
        return tuple(self.standbys)

    def is_marked_primary(
        self, candidate: ConnectionParams, connection: DatabaseConnection
    ) -> bool:
        self.marked_primary_checks.append(candidate.host)
        return candidate.host in self.marked_primary_hosts

    def refresh_snapshot(self, connection: DatabaseConnection) -> None:
        if self.refresh_error is not None:
            raise self.refresh_error
        self.refreshed_with.append(connection)


class FakeServiceController:
    """Records stop/restart calls in order."""

    def __init__(self) -> None:
        self._calls: list[str] = []

    @property
    def calls(self) -> list[str]:
        return list(self._calls)

    def stop(self) -> None:
        self._calls.append("stop")

    def restart(self) -> None:
        self._calls.append("restart")


class FakeEventEmitter:
    """Records emitted events."""

    def __init__(self) -> None:
        self.events: list[FailoverEvent] = []

    def emit(self, event: FailoverEvent) -> None:
        self.events.append(event)

    def clear(self) -> None:
        self.events.clear()


class FakeIntervalTimer:
    """IntervalTimerPort that never blocks.

    Records every requested wait. Optionally stops itself after a number of
    waits, which ends a monitor loop deterministically.
    """

    def __init__(self, stop_after: int | None = None) -> None:
        """Initialize the timer.

        Args:
            stop_after: Stop once this many waits were requested. None never stops.
        """
        self._stop_after = stop_after
        self._stopped = False
        self.waits: list[float] = []

    def wait(self, seconds: float) -> bool:
        self.waits.append(seconds)
        if self._stop_after is not None and len(self.waits) >= self._stop_after:
            self._stopped = True
        return self._stopped

    def stop(self) -> None:
        self._stopped = True

    def is_stopped(self) -> bool:
        return self._stopped
