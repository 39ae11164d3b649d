"""Fake database driver for testing.

Simulates a cluster of PostgreSQL nodes keyed by host, and records every
connection opened and closed so tests can assert on probing order and on
resource release.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pg_failover_monitor.domain.connection import ConnectionParams
from pg_failover_monitor.domain.exceptions import (
    DatabaseQueryError,
    DatabaseUnavailableError,
)


@dataclass
class FakeNode:
    """Behaviour of one simulated database node.

    Attributes:
        host: Host name the node answers on.
        reachable: If False, connecting raises DatabaseUnavailableError.
        in_recovery: Value returned by the recovery check.
        recovery_check_fails: If True, the recovery check raises DatabaseQueryError.
        repmgr_rows: Rows returned for queries on repmgr.nodes.
    """

    host: str
    reachable: bool = True
    in_recovery: bool = True
    recovery_check_fails: bool = False
    repmgr_rows: list[tuple[Any, ...]] = field(default_factory=list)


class FakeConnection:
    """In-memory DatabaseConnection bound to a FakeNode."""

    def __init__(self, node: FakeNode, params: ConnectionParams) -> None:
        self.node = node
        self.params = params
        self.close_count = 0
        self.queries: list[str] = []

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def query_scalar(self, sql: str) -> Any:
        self.queries.append(sql)
        if "pg_is_in_recovery" in sql:
            if self.node.recovery_check_fails:
                raise DatabaseQueryError(
                    f"recovery check failed on {self.node.host}", sql=sql
                )
            return self.node.in_recovery
        rows = self.query_rows(sql)
        return rows[0][0] if rows else None

    def query_rows(self, sql: str) -> list[tuple[Any, ...]]:
        self.queries.append(sql)
        if "repmgr.nodes" in sql:
            return list(self.node.repmgr_rows)
        raise DatabaseQueryError(f"unexpected query: {sql}", sql=sql)

    def close(self) -> None:
        self.close_count += 1


class FakeDatabaseDriver:
    """In-memory fake for DatabaseDriverPort - no real network I/O.

    Unknown hosts behave like unreachable ones.

    Example:
        driver = FakeDatabaseDriver()
        driver.add_node(FakeNode("db1", in_recovery=False))
        connection = driver.connect(ConnectionParams.of(host="db1"))
        assert driver.connect_attempts == ["db1"]
    """

    def __init__(self, nodes: list[FakeNode] | None = None) -> None:
        self._nodes: dict[str, FakeNode] = {}
        self._connect_attempts: list[str | None] = []
        self._connect_params: list[ConnectionParams] = []
        self._connections: list[FakeConnection] = []
        self._connect_error: Exception | None = None
        for node in nodes or []:
            self.add_node(node)

    def add_node(self, node: FakeNode) -> FakeNode:
        """Register a simulated node, replacing any node with the same host."""
        self._nodes[node.host] = node
        return node

    def node(self, host: str) -> FakeNode:
        """Return the simulated node for host."""
        return self._nodes[host]

    def fail_connections_with(self, error: Exception | None) -> None:
        """Raise error from every connect() call (None to disable).

        Used to inject faults the probe does not anticipate.
        """
        self._connect_error = error

    @property
    def connect_attempts(self) -> list[str | None]:
        """Return hosts connect() was called for, in order."""
        return list(self._connect_attempts)

    @property
    def connect_params(self) -> list[ConnectionParams]:
        """Return the parameters connect() was called with, in order."""
        return list(self._connect_params)

    @property
    def connections(self) -> list[FakeConnection]:
        """Return every connection successfully opened, in order."""
        return list(self._connections)

    def connect(self, params: ConnectionParams) -> FakeConnection:
        self._connect_attempts.append(params.host)
        self._connect_params.append(params)
        if self._connect_error is not None:
            raise self._connect_error

        node = self._nodes.get(params.host or "")
        if node is None or not node.reachable:
            raise DatabaseUnavailableError(
                f'could not connect to server: host "{params.host}"',
                host=params.host,
            )

        connection = FakeConnection(node, params)
        self._connections.append(connection)
        return connection
