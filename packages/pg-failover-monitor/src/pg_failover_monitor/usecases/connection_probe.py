"""Connection probe use case for checking database nodes."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from pg_failover_monitor.adapters.ports import (
    DatabaseConnection,
    DatabaseDriverPort,
    LoggingPort,
)
from pg_failover_monitor.domain.connection import (
    ConnectionParams,
    ProbeResult,
    RecoveryStatus,
)
from pg_failover_monitor.domain.exceptions import (
    DatabaseQueryError,
    DatabaseUnavailableError,
)

RECOVERY_QUERY = "SELECT pg_catalog.pg_is_in_recovery()"

# Seconds; applied when the parameters do not set their own connect_timeout
DEFAULT_CONNECT_TIMEOUT = 5


class ConnectionProbe:
    """Opens short-lived connections to database nodes.

    Expected failures never escape as exceptions: a connection that cannot
    be opened becomes an unavailable ProbeResult, and a failed recovery check
    becomes RecoveryStatus.UNKNOWN. Both are logged.

    Callers own the returned connection and must close it. connection()
    does this for them on every exit path.
    """

    def __init__(
        self,
        driver: DatabaseDriverPort,
        logger: LoggingPort,
        connect_timeout: int | None = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        """Initialize the probe.

        Args:
            driver: Port implementation for opening connections.
            logger: Port for reporting connection and query failures.
            connect_timeout: Seconds to wait for a connection, unless the
                parameters set one. None leaves the driver's default.
        """
        self._driver = driver
        self._logger = logger
        self._connect_timeout = connect_timeout

    def open(self, params: ConnectionParams) -> ProbeResult:
        """Try to open a connection to the node described by params.

        Args:
            params: Connection parameters of the node.

        Returns:
            ProbeResult carrying the open connection, or the error if the
            node is unavailable.
        """
        driver_params = params
        if self._connect_timeout is not None:
            driver_params = params.with_defaults(connect_timeout=self._connect_timeout)

        try:
            connection = self._driver.connect(driver_params)
        except DatabaseUnavailableError as e:
            self._logger.error(f"Failed to establish PG connection: {e.message}")
            return ProbeResult(params=params, error=e.message)
        return ProbeResult(params=params, connection=connection)

    def check_recovery(self, connection: DatabaseConnection) -> RecoveryStatus:
        """Check whether the node considers itself a hot standby.

        Args:
            connection: Open connection to the node.

        Returns:
            IN_RECOVERY for a standby, NOT_IN_RECOVERY for a writable primary,
            UNKNOWN if the check itself failed.
        """
        try:
            in_recovery = connection.query_scalar(RECOVERY_QUERY)
        except DatabaseQueryError as e:
            self._logger.error(f"Failed to check recovery status: {e}")
            return RecoveryStatus.UNKNOWN

        if in_recovery is None:
            return RecoveryStatus.UNKNOWN
        return RecoveryStatus.IN_RECOVERY if in_recovery else RecoveryStatus.NOT_IN_RECOVERY

    @contextmanager
    def connection(self, params: ConnectionParams) -> Iterator[DatabaseConnection | None]:
        """Scoped probe connection.

        Yields the open connection, or None if the node is unavailable.
        An opened connection is closed exactly once when the block exits,
        whether it completes or raises.
        """
        result = self.open(params)
        if result.connection is None:
            yield None
            return

        try:
            yield result.connection
        finally:
            result.connection.close()
