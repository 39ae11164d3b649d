"""Failover tunables domain value object."""

from dataclasses import dataclass

FAILOVER_ATTEMPTS = 10
DB_CHECK_FREQUENCY = 300
FAILOVER_CHECK_FREQUENCY = 60


@dataclass(frozen=True)
class FailoverSettings:
    """Immutable failover tunables.

    Loaded once at startup and passed by value into the orchestrator and the
    monitor loop. No bounds are enforced: callers must tolerate degenerate
    values such as zero-second intervals.

    Attributes:
        failover_attempts: Maximum number of search passes per failover episode.
        db_check_frequency: Seconds between two health checks of the primary.
        failover_check_frequency: Seconds between two search passes.
    """

    failover_attempts: int = FAILOVER_ATTEMPTS
    db_check_frequency: int = DB_CHECK_FREQUENCY
    failover_check_frequency: int = FAILOVER_CHECK_FREQUENCY

    def describe(self) -> str:
        """Return the one-line summary logged at startup."""
        return (
            f"FAILOVER_ATTEMPTS={self.failover_attempts} "
            f"DB_CHECK_FREQUENCY={self.db_check_frequency} "
            f"FAILOVER_CHECK_FREQUENCY={self.failover_check_frequency}"
        )
