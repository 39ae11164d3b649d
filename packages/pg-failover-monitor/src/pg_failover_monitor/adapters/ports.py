"""Port interfaces for the failover monitor.

Ports define the contracts that adapters must implement.
These are Protocol classes (structural subtyping) for flexible testing.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from pg_failover_monitor.domain.connection import ConnectionParams
    from pg_failover_monitor.domain.events import FailoverEvent


@runtime_checkable
class DatabaseConnection(Protocol):
    """Port interface for an open connection to a database node.

    Contract:
        - query_scalar() returns the first column of the first row, or None
        - query_rows() returns all rows as tuples
        - Query failures raise DatabaseQueryError
        - close() releases the connection; callers close exactly once
    """

    def query_scalar(self, sql: str) -> Any:
        """Run a query and return its single scalar result.

        Raises:
            DatabaseQueryError: If the query fails.
        """
        ...

    def query_rows(self, sql: str) -> list[tuple[Any, ...]]:
        """Run a query and return all result rows.

        Raises:
            DatabaseQueryError: If the query fails.
        """
        ...

    def close(self) -> None:
        """Release the connection."""
        ...


@runtime_checkable
class DatabaseDriverPort(Protocol):
    """Port interface for opening database connections.

    Contract:
        - connect(params) returns an open DatabaseConnection
        - Any connection-layer failure (auth, timeout, network) raises
          DatabaseUnavailableError; no driver-specific exception escapes
    """

    def connect(self, params: ConnectionParams) -> DatabaseConnection:
        """Open a connection to the node described by params.

        Raises:
            DatabaseUnavailableError: If the connection cannot be opened.
        """
        ...


@runtime_checkable
class PrimaryConfigStorePort(Protocol):
    """Port interface for the persisted primary connection parameters.

    Contract:
        - read() returns the parameters currently believed to be the primary
        - write(params) persists new primary parameters, idempotently
        - A failed write raises ConfigStoreWriteError (never silently swallowed)
    """

    def read(self) -> ConnectionParams:
        """Read the current primary's connection parameters."""
        ...

    def write(self, params: ConnectionParams) -> None:
        """Persist new primary connection parameters.

        Raises:
            ConfigStoreWriteError: If the parameters cannot be persisted.
        """
        ...


@runtime_checkable
class CandidateSourcePort(Protocol):
    """Port interface for the cluster's standby candidates.

    Contract:
        - list_standbys() returns the known nodes in snapshot order
        - is_marked_primary() asks the replication manager, through the given
          connection, whether the candidate (matched on host and port) is its
          active primary
        - refresh_snapshot() rewrites the snapshot from the given connection;
          raises CandidateSourceError on failure
    """

    def list_standbys(self) -> Sequence[ConnectionParams]:
        """Return connection parameters of the known standby nodes."""
        ...

    def is_marked_primary(
        self, candidate: ConnectionParams, connection: DatabaseConnection
    ) -> bool:
        """Check whether the replication manager marks the candidate as primary."""
        ...

    def refresh_snapshot(self, connection: DatabaseConnection) -> None:
        """Refresh the persisted candidate snapshot.

        Raises:
            CandidateSourceError: If the snapshot cannot be refreshed.
        """
        ...


@runtime_checkable
class ServiceControllerPort(Protocol):
    """Port interface for the dependent application service.

    Contract:
        - stop() and restart() are fire-and-forget
        - Failures are logged by the implementation, never raised or retried
    """

    def stop(self) -> None:
        """Stop the application."""
        ...

    def restart(self) -> None:
        """Restart the application."""
        ...


@runtime_checkable
class EventEmitterPort(Protocol):
    """Port interface for announcing failover events.

    Contract:
        - emit(event) delivers the event to the notification channel
        - emit() is fire-and-forget (no return value, no exceptions propagated)
        - No acknowledgement is awaited
    """

    def emit(self, event: FailoverEvent) -> None:
        """Emit a failover event.

        Args:
            event: The FailoverEvent to emit.
        """
        ...


@runtime_checkable
class LoggingPort(Protocol):
    """Port interface for logging.

    Implementations handle log message delivery to configured logging backends.

    Contract:
        - info(), warning(), error() log a message at that level
        - exception() logs at error level with the active traceback
        - All methods are fire-and-forget
    """

    def info(self, message: str) -> None:
        """Log an info message."""
        ...

    def warning(self, message: str) -> None:
        """Log a warning message."""
        ...

    def error(self, message: str) -> None:
        """Log an error message."""
        ...

    def exception(self, message: str) -> None:
        """Log an error message with the active exception's traceback."""
        ...


@runtime_checkable
class IntervalTimerPort(Protocol):
    """Port interface for waiting between polls.

    Implementations block the caller for an interval and expose a stop signal
    so that polling loops can be halted cleanly.

    Contract:
        - wait(seconds) blocks up to seconds; returns True if stop was requested
        - After stop(), wait() returns True immediately
        - is_stopped() reports whether stop() was called
    """

    def wait(self, seconds: float) -> bool:
        """Wait for the interval or until stopped.

        Returns:
            True if the timer was stopped, False if the interval elapsed.
        """
        ...

    def stop(self) -> None:
        """Request the timer to stop."""
        ...

    def is_stopped(self) -> bool:
        """Return True if stop() was called."""
        ...


class ThreadingIntervalTimer:
    """Default implementation: waits on a threading.Event.

    stop() may be called from a signal handler or another thread; a pending
    wait() returns immediately.
    """

    def __init__(self) -> None:
        self._stopped = threading.Event()

    def wait(self, seconds: float) -> bool:
        """Wait for the interval or until stopped.

        Args:
            seconds: Interval length. Non-positive values do not block.

        Returns:
            True if the timer was stopped, False if the interval elapsed.
        """
        return self._stopped.wait(max(float(seconds), 0.0))

    def stop(self) -> None:
        """Request the timer to stop."""
        self._stopped.set()

    def is_stopped(self) -> bool:
        """Return True if stop() was called."""
        return self._stopped.is_set()
