"""FailoverOrchestrator use case: primary health check and failover episodes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pg_failover_monitor.adapters.ports import (
    CandidateSourcePort,
    DatabaseConnection,
    EventEmitterPort,
    IntervalTimerPort,
    LoggingPort,
    PrimaryConfigStorePort,
    ServiceControllerPort,
)
from pg_failover_monitor.domain.connection import ConnectionParams, RecoveryStatus
from pg_failover_monitor.domain.events import FailoverEvent, FailoverEventType
from pg_failover_monitor.domain.exceptions import (
    CandidateSourceError,
    ConfigStoreWriteError,
    DatabaseQueryError,
)
from pg_failover_monitor.domain.failover import (
    FailoverState,
    HealthCheckResult,
    SearchProgress,
)
from pg_failover_monitor.domain.settings import FailoverSettings
from pg_failover_monitor.usecases.connection_probe import ConnectionProbe

if TYPE_CHECKING:
    from pg_failover_monitor.adapters.metrics_port import MetricsPort


class FailoverOrchestrator:
    """Keeps the application pointed at the live primary.

    One call to run_health_check() is one unit of work:

        HEALTHY             primary answers; the candidate snapshot is
                            refreshed and nothing else happens
        SEARCHING(n, max)   primary unreachable; the application is stopped
                            and up to max passes over the candidates run,
                            failover_check_frequency seconds apart
        CUTOVER_COMPLETE    first qualifying candidate persisted as primary;
                            application restarted, one event emitted
        CUTOVER_FAILED      attempts exhausted or the write failed; the
                            application is left stopped

    A candidate qualifies when it is reachable, no longer in recovery, and
    the replication manager marks its host as primary. Every pass re-reads
    the candidate list and re-evaluates every candidate: promotion may happen
    at any point of an episode, so earlier failures are not remembered.

    Dependencies:
        - ConnectionProbe: Opens and checks probe connections.
        - PrimaryConfigStorePort: Reads and persists the primary's parameters.
        - CandidateSourcePort: Standby list, promotion check, snapshot refresh.
        - ServiceControllerPort: Stops and restarts the application.
        - EventEmitterPort: Announces a completed failover.
        - IntervalTimerPort: Sleeps between search passes.

    Thread safety:
        Not thread-safe. Health checks must never overlap; the monitor loop
        runs them strictly one after another.
    """

    def __init__(
        self,
        settings: FailoverSettings,
        probe: ConnectionProbe,
        config_store: PrimaryConfigStorePort,
        candidate_source: CandidateSourcePort,
        service_controller: ServiceControllerPort,
        event_emitter: EventEmitterPort,
        timer: IntervalTimerPort,
        logger: LoggingPort,
        metrics: MetricsPort | None = None,
    ) -> None:
        self._settings = settings
        self._probe = probe
        self._config_store = config_store
        self._candidate_source = candidate_source
        self._service_controller = service_controller
        self._event_emitter = event_emitter
        self._timer = timer
        self._logger = logger
        self._metrics = metrics

    @property
    def settings(self) -> FailoverSettings:
        return self._settings

    def run_health_check(self) -> HealthCheckResult:
        """Check the primary and fail over if it is unreachable.

        Returns:
            HealthCheckResult describing the terminal state of this check.

        Raises:
            Errors raised by collaborators outside the handled conditions
            propagate to the caller (the monitor loop contains them).
        """
        primary = self._config_store.read()

        with self._probe.connection(primary) as connection:
            if connection is not None:
                self._refresh_snapshot(connection)

        if connection is not None:
            self._set_primary_available(True)
            return HealthCheckResult(state=FailoverState.HEALTHY)

        self._set_primary_available(False)
        self._logger.error(
            "Primary Database is not available. EVM server stop initiated. "
            "Starting to execute failover..."
        )
        self._service_controller.stop()

        result = self._execute_failover(primary)

        if result.failover_executed:
            self._service_controller.restart()
            self._logger.info("Starting EVM server from failover monitor")
            self._event_emitter.emit(
                FailoverEvent(event_type=FailoverEventType.DB_FAILOVER_EXECUTED)
            )
        else:
            self._logger.error(f"Failover failed: {result.error}")

        if self._metrics is not None:
            self._metrics.set_failover_attempts(result.attempts)
            self._metrics.record_failover_outcome(result.failover_executed)

        return result

    def candidate_params(self, template: ConnectionParams) -> list[ConnectionParams]:
        """Build the candidate list for one search pass.

        Each standby's parameters are laid over the template so that shared
        attributes (credentials, database name, driver options) carry over.

        Args:
            template: Parameters of the configured primary.

        Returns:
            Candidate parameters in candidate source order.
        """
        return [
            standby.merged_over(template)
            for standby in self._candidate_source.list_standbys()
        ]

    def _execute_failover(self, primary: ConnectionParams) -> HealthCheckResult:
        max_attempts = self._settings.failover_attempts
        if max_attempts < 1:
            return HealthCheckResult(
                state=FailoverState.CUTOVER_FAILED,
                error="no failover attempts configured",
            )

        state = FailoverState.SEARCHING
        progress = SearchProgress(attempt=1, max_attempts=max_attempts)
        new_primary: ConnectionParams | None = None
        error: str | None = None

        while not state.is_terminal:
            self._logger.info(
                f"Searching for promoted primary, attempt "
                f"{progress.attempt} of {progress.max_attempts}"
            )
            try:
                new_primary = self._search_pass(primary)
            except ConfigStoreWriteError as e:
                state, error = FailoverState.CUTOVER_FAILED, str(e)
                break

            if new_primary is not None:
                state = FailoverState.CUTOVER_COMPLETE
                break

            self._timer.wait(self._settings.failover_check_frequency)

            if progress.has_next:
                progress = progress.advance()
            else:
                state = FailoverState.CUTOVER_FAILED
                error = f"no promoted primary found after {progress.max_attempts} attempts"

        return HealthCheckResult(
            state=state,
            attempts=progress.attempt,
            new_primary=new_primary,
            error=error,
        )

    def _search_pass(self, primary: ConnectionParams) -> ConnectionParams | None:
        """Evaluate every candidate in order; cut over to the first that qualifies.

        Returns:
            The parameters cut over to, or None if no candidate qualified.

        Raises:
            ConfigStoreWriteError: If the new primary cannot be persisted.
        """
        for params in self.candidate_params(primary):
            with self._probe.connection(params) as connection:
                if connection is None:
                    continue
                if not self._qualifies(params, connection):
                    continue

                self._logger.info(
                    f"Failing over to server using conninfo: {params.redacted()}"
                )
                self._refresh_snapshot(connection)
                self._config_store.write(params)
                return params
        return None

    def _qualifies(self, params: ConnectionParams, connection: DatabaseConnection) -> bool:
        if self._probe.check_recovery(connection) is not RecoveryStatus.NOT_IN_RECOVERY:
            return False
        try:
            return self._candidate_source.is_marked_primary(params, connection)
        except (DatabaseQueryError, CandidateSourceError) as e:
            self._logger.error(
                f"Cannot confirm {params.host} is marked primary: {e}"
            )
            return False

    def _refresh_snapshot(self, connection: DatabaseConnection) -> None:
        try:
            self._candidate_source.refresh_snapshot(connection)
        except CandidateSourceError as e:
            self._logger.warning(f"Failed to refresh standby snapshot: {e}")

    def _set_primary_available(self, available: bool) -> None:
        if self._metrics is not None:
            self._metrics.set_primary_available(available)
