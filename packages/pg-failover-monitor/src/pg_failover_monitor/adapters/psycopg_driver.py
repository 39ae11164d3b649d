"""psycopg2-based implementation of the DatabaseDriverPort.

This adapter opens short-lived PostgreSQL connections for probing and
translates psycopg2 errors into domain exceptions.
"""

from __future__ import annotations

from typing import Any

import psycopg2

from pg_failover_monitor.adapters.ports import DatabaseDriverPort
from pg_failover_monitor.domain.connection import ConnectionParams
from pg_failover_monitor.domain.exceptions import (
    DatabaseQueryError,
    DatabaseUnavailableError,
)


class PsycopgConnection:
    """DatabaseConnection wrapping a psycopg2 connection.

    Runs in autocommit mode: the monitor only issues read-only queries and
    must not leave transactions open on nodes it probes.
    """

    def __init__(self, connection: Any) -> None:
        """Initialize the wrapper.

        Args:
            connection: An open psycopg2 connection.
        """
        self._connection = connection
        self._connection.autocommit = True

    @property
    def closed(self) -> bool:
        """Return True if the underlying connection is closed."""
        return bool(self._connection.closed)

    def query_scalar(self, sql: str) -> Any:
        """Run a query and return the first column of the first row.

        Raises:
            DatabaseQueryError: If the query fails.
        """
        rows = self.query_rows(sql)
        if not rows:
            return None
        return rows[0][0]

    def query_rows(self, sql: str) -> list[tuple[Any, ...]]:
        """Run a query and return all rows.

        Raises:
            DatabaseQueryError: If the query fails.
        """
        try:
            with self._connection.cursor() as cursor:
                cursor.execute(sql)
                return [tuple(row) for row in cursor.fetchall()]
        except psycopg2.Error as e:
            raise DatabaseQueryError(
                f"Query failed: {e}".strip(), sql=sql, original_error=e
            ) from e

    def close(self) -> None:
        """Close the underlying connection."""
        self._connection.close()


class PsycopgDriver:
    """psycopg2 adapter for opening database connections.

    Any psycopg2.Error raised while connecting (authentication failure,
    timeout, refused connection, unknown host) becomes DatabaseUnavailableError.
    """

    def __init__(self, connect: Any = None) -> None:
        """Initialize the driver.

        Args:
            connect: Connection factory for dependency injection (testing).
                    Defaults to psycopg2.connect.
        """
        self._connect = connect or psycopg2.connect

    def connect(self, params: ConnectionParams) -> PsycopgConnection:
        """Open a connection with the given libpq keyword parameters.

        Raises:
            DatabaseUnavailableError: If the connection cannot be opened.
        """
        try:
            raw = self._connect(**params.as_dict())
        except psycopg2.Error as e:
            raise DatabaseUnavailableError(
                str(e).strip() or e.__class__.__name__,
                host=params.host,
                original_error=e,
            ) from e
        return PsycopgConnection(raw)


# Runtime protocol check
assert isinstance(PsycopgDriver(), DatabaseDriverPort)
