"""repmgr-backed candidate source.

Keeps a YAML snapshot (failover_databases.yml) of the cluster nodes known to
repmgr, refreshed from the repmgr.nodes table of whichever node is reachable,
and answers whether repmgr currently marks a host as its active primary.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import psycopg2
import yaml
from psycopg2.extensions import parse_dsn

from pg_failover_monitor.adapters.logging_adapter import StdlibLoggingAdapter
from pg_failover_monitor.adapters.ports import (
    CandidateSourcePort,
    DatabaseConnection,
    LoggingPort,
)
from pg_failover_monitor.adapters.yaml_database_config import write_yaml_atomically
from pg_failover_monitor.domain.connection import ConnectionParams
from pg_failover_monitor.domain.exceptions import (
    CandidateSourceError,
    DatabaseQueryError,
)

NODES_QUERY = "SELECT type, conninfo, active FROM repmgr.nodes"

# conninfo keywords kept in the snapshot; credentials come from the
# primary's template when candidates are built
_SNAPSHOT_KEYS = ("host", "port", "dbname", "user")
_BOOKKEEPING_KEYS = frozenset({"type", "active"})


class RepmgrServerStore:
    """Candidate source backed by repmgr metadata and a YAML snapshot.

    Snapshot entries look like::

        - type: standby
          active: true
          host: db2.example.com
          port: 5432
          dbname: vmdb_production
          user: root

    repmgr.nodes rows whose conninfo cannot be parsed are logged and
    skipped; the remaining rows are still used.
    """

    def __init__(self, path: Path | str, logger: LoggingPort | None = None) -> None:
        """Initialize the store.

        Args:
            path: Path to the snapshot file (failover_databases.yml).
            logger: Port for reporting skipped repmgr rows.
        """
        self._path = Path(path)
        self._logger = logger or StdlibLoggingAdapter()

    @property
    def path(self) -> Path:
        """Return the snapshot path."""
        return self._path

    def list_standbys(self) -> tuple[ConnectionParams, ...]:
        """Return the active nodes of the last snapshot, in snapshot order.

        A missing snapshot yields no candidates.

        Raises:
            CandidateSourceError: If the snapshot exists but cannot be parsed.
        """
        return tuple(
            self._node_params(entry)
            for entry in self._load_snapshot()
            if entry.get("active")
        )

    def is_marked_primary(
        self, candidate: ConnectionParams, connection: DatabaseConnection
    ) -> bool:
        """Check whether repmgr marks the candidate's node as its active primary.

        Queries repmgr.nodes on the given connection rather than the
        snapshot, so the answer reflects the replication manager's view
        at the time of the call. Nodes are matched on host and port.
        """
        if candidate.host is None:
            return False
        return any(
            node["type"] == "primary"
            and node["active"]
            and self._node_params(node).same_node(candidate)
            for node in self._query_nodes(connection)
        )

    def refresh_snapshot(self, connection: DatabaseConnection) -> None:
        """Rewrite the snapshot from repmgr.nodes on the given connection.

        Raises:
            CandidateSourceError: If the query or the write fails.
        """
        try:
            nodes = self._query_nodes(connection)
        except DatabaseQueryError as e:
            raise CandidateSourceError(f"Cannot query repmgr nodes: {e}") from e

        try:
            write_yaml_atomically(self._path, nodes)
        except (OSError, yaml.YAMLError) as e:
            raise CandidateSourceError(f"Failed to write {self._path}: {e}") from e

    def _query_nodes(self, connection: DatabaseConnection) -> list[dict[str, Any]]:
        nodes: list[dict[str, Any]] = []
        for node_type, conninfo, active in connection.query_rows(NODES_QUERY):
            try:
                info = self._parse_conninfo(conninfo)
            except (psycopg2.Error, TypeError, ValueError) as e:
                self._logger.warning(
                    f"Skipping repmgr {node_type} node with unparsable conninfo: {e}"
                )
                continue
            entry: dict[str, Any] = {"type": node_type, "active": bool(active)}
            entry.update(info)
            nodes.append(entry)
        return nodes

    @staticmethod
    def _node_params(node: dict[str, Any]) -> ConnectionParams:
        return ConnectionParams({k: v for k, v in node.items() if k not in _BOOKKEEPING_KEYS})

    @staticmethod
    def _parse_conninfo(conninfo: str) -> dict[str, Any]:
        parsed = parse_dsn(conninfo)
        info: dict[str, Any] = {}
        for key in _SNAPSHOT_KEYS:
            if key not in parsed:
                continue
            value = parsed[key]
            if key == "port":
                if not value.isdigit():
                    raise ValueError(f"invalid port {value!r}")
                value = int(value)
            info[key] = value
        return info

    def _load_snapshot(self) -> list[dict[str, Any]]:
        try:
            with self._path.open() as f:
                snapshot = yaml.safe_load(f)
        except FileNotFoundError:
            return []
        except (OSError, yaml.YAMLError) as e:
            raise CandidateSourceError(f"Cannot read {self._path}: {e}") from e

        if snapshot is None:
            return []
        if not isinstance(snapshot, list):
            raise CandidateSourceError(f"{self._path} must contain a list")
        return [entry for entry in snapshot if isinstance(entry, dict)]


# Runtime protocol check
assert isinstance(RepmgrServerStore("failover_databases.yml"), CandidateSourcePort)
