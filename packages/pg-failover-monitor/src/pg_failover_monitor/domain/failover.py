"""Failover episode state machine value objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pg_failover_monitor.domain.connection import ConnectionParams


class FailoverState(Enum):
    """States a single health check can end in, or pass through.

    State machine:
        HEALTHY: The configured primary answered; nothing else happens.
        SEARCHING: Primary unreachable, application stopped, passes running.
        SEARCHING -> CUTOVER_COMPLETE: A promoted candidate was persisted.
        SEARCHING -> CUTOVER_FAILED: Attempts exhausted or the write failed.
    """

    HEALTHY = "healthy"
    SEARCHING = "searching"
    CUTOVER_COMPLETE = "cutover_complete"
    CUTOVER_FAILED = "cutover_failed"

    @property
    def is_terminal(self) -> bool:
        """Return True for states that end a health check."""
        return self is not FailoverState.SEARCHING


@dataclass(frozen=True)
class SearchProgress:
    """Position of a running failover search.

    Attributes:
        attempt: The current pass, 1-indexed.
        max_attempts: Number of passes allowed for the episode.
    """

    attempt: int
    max_attempts: int

    @property
    def has_next(self) -> bool:
        """Return True if another pass may follow this one."""
        return self.attempt < self.max_attempts

    def advance(self) -> SearchProgress:
        """Return the progress of the next pass."""
        return SearchProgress(attempt=self.attempt + 1, max_attempts=self.max_attempts)


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of one health check.

    Attributes:
        state: Terminal state the check ended in.
        attempts: Number of search passes run (0 when healthy).
        new_primary: Parameters of the node cut over to, if any.
        error: Reason for a failed cutover, if any.
    """

    state: FailoverState
    attempts: int = 0
    new_primary: ConnectionParams | None = None
    error: str | None = None

    @property
    def failover_executed(self) -> bool:
        """Return True if the application was cut over to a new primary."""
        return self.state is FailoverState.CUTOVER_COMPLETE
