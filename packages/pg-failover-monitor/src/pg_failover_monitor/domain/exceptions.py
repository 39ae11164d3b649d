"""Domain exceptions.

Exception hierarchy:
- FailoverMonitorError: Base exception for every error raised by this package.
  - ConfigLocationError: No candidate configuration location exists (fatal at init).
  - DatabaseUnavailableError: A connection to a database node could not be opened.
  - DatabaseQueryError: A query on an open connection failed.
  - ConfigStoreReadError: The primary connection config could not be read.
  - ConfigStoreWriteError: The primary connection config could not be persisted.
  - CandidateSourceError: The standby snapshot could not be read or refreshed.

Connection and query errors are expected conditions: the connection probe
converts them into result values and never lets them escape to the
orchestrator. The rest propagate to the layer that owns the policy for them.
"""

from __future__ import annotations


class FailoverMonitorError(Exception):
    """Base exception for the failover monitor."""

    pass


class ConfigLocationError(FailoverMonitorError):
    """Raised when none of the candidate configuration locations exist.

    Attributes:
        candidates: The locations that were tried, in order.
    """

    def __init__(self, candidates: tuple[str, ...]) -> None:
        super().__init__(
            f"None of the configuration locations exist: {', '.join(candidates)}"
        )
        self.candidates = candidates


class DatabaseUnavailableError(FailoverMonitorError):
    """Raised by database drivers when a connection cannot be opened.

    Covers authentication failures, timeouts and network errors alike.

    Attributes:
        message: Human-readable error description.
        host: Host the connection was attempted against (optional).
        original_error: The underlying driver exception (optional).
    """

    def __init__(
        self,
        message: str,
        host: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize DatabaseUnavailableError.

        Args:
            message: Human-readable error description.
            host: Host the connection was attempted against.
            original_error: The underlying driver exception.
        """
        super().__init__(message)
        self.message = message
        self.host = host
        self.original_error = original_error


class DatabaseQueryError(FailoverMonitorError):
    """Raised by database connections when a query fails.

    Attributes:
        sql: The statement that failed.
        original_error: The underlying driver exception (optional).
    """

    def __init__(
        self,
        message: str,
        sql: str,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.sql = sql
        self.original_error = original_error


class ConfigStoreReadError(FailoverMonitorError):
    """Raised when the primary's connection parameters cannot be read.

    Covers a missing or unparsable file and a missing environment section.
    Not handled by the orchestrator: the monitor loop logs it and retries on
    the next health check.
    """

    pass


class ConfigStoreWriteError(FailoverMonitorError):
    """Raised when the new primary's connection parameters cannot be persisted.

    A failed write ends the failover episode as failed. It never crashes the
    monitor loop.
    """

    pass


class CandidateSourceError(FailoverMonitorError):
    """Raised when the standby snapshot cannot be read or refreshed."""

    pass
