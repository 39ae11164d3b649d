"""Monitor loop use case: runs health checks until stopped."""

from __future__ import annotations

from typing import Protocol

from pg_failover_monitor.adapters.ports import IntervalTimerPort, LoggingPort
from pg_failover_monitor.domain.failover import HealthCheckResult
from pg_failover_monitor.domain.settings import FailoverSettings


class HealthCheckRunner(Protocol):
    """Anything that performs one health check (the FailoverOrchestrator)."""

    def run_health_check(self) -> HealthCheckResult: ...


class MonitorLoop:
    """Runs health checks every db_check_frequency seconds until stopped.

    This is the single point of crash containment: any exception escaping a
    health check is logged with its traceback and the loop carries on with
    the next interval. Checks never overlap; the next one starts only after
    the previous check, including any failover episode, has finished.
    """

    def __init__(
        self,
        health_check: HealthCheckRunner,
        settings: FailoverSettings,
        timer: IntervalTimerPort,
        logger: LoggingPort,
    ) -> None:
        """Initialize the loop.

        Args:
            health_check: Performs one health check per iteration.
            settings: Supplies db_check_frequency.
            timer: Waits between checks; stopping it ends the loop.
            logger: Port for reporting contained errors.
        """
        self._health_check = health_check
        self._settings = settings
        self._timer = timer
        self._logger = logger
        self._checks_run = 0

    @property
    def checks_run(self) -> int:
        """Return the number of health checks started so far."""
        return self._checks_run

    def run(self) -> None:
        """Run health checks until stop() is called."""
        while not self._timer.is_stopped():
            self.run_once()
            if self._timer.wait(self._settings.db_check_frequency):
                break

    def run_once(self) -> HealthCheckResult | None:
        """Run one contained health check.

        Returns:
            The check's result, or None if it raised.
        """
        self._checks_run += 1
        try:
            return self._health_check.run_health_check()
        except Exception as err:
            self._logger.exception(f"{err.__class__.__name__}: {err}")
            return None

    def stop(self) -> None:
        """Stop the loop; a pending wait between checks returns immediately."""
        self._timer.stop()
