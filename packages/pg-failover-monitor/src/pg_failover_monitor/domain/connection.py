"""Connection parameter and probe value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from pg_failover_monitor.adapters.ports import DatabaseConnection

DEFAULT_PORT = 5432

# Keys that must never reach a log line
_SECRET_KEYS = frozenset({"password"})


@dataclass(frozen=True)
class ConnectionParams:
    """Connection attributes sufficient to open a database connection.

    Value object wrapping libpq keyword parameters (host, port, dbname, user,
    password, sslmode, connect_timeout, ...). The wrapped mapping is read-only.

    Two parameter sets refer to the same node when their host and port match,
    regardless of credentials or database name.

    Attributes:
        values: Read-only mapping of libpq keywords to values.
    """

    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze the wrapped mapping."""
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def of(cls, **values: Any) -> ConnectionParams:
        """Build parameters from keyword arguments."""
        return cls(values)

    @property
    def host(self) -> str | None:
        """Return the host, or None if not set."""
        host = self.values.get("host")
        return None if host is None else str(host)

    @property
    def port(self) -> int:
        """Return the port, defaulting to the PostgreSQL port."""
        port = self.values.get("port")
        if port in (None, ""):
            return DEFAULT_PORT
        return int(port)

    def same_node(self, other: ConnectionParams) -> bool:
        """Check whether both parameter sets point at the same node.

        Args:
            other: Parameters to compare with.

        Returns:
            True if host and port match.
        """
        return self.host == other.host and self.port == other.port

    def merged_over(self, base: ConnectionParams) -> ConnectionParams:
        """Return base values overridden by this instance's values.

        Used to fill shared attributes (credentials, database name, driver
        options) of a candidate from the primary's template.

        Args:
            base: Template parameters.

        Returns:
            New ConnectionParams with the merged values.
        """
        merged = dict(base.values)
        merged.update(self.values)
        return ConnectionParams(merged)

    def with_defaults(self, **defaults: Any) -> ConnectionParams:
        """Return parameters with keys added only where not already present."""
        merged = dict(defaults)
        merged.update(self.values)
        return ConnectionParams(merged)

    def redacted(self) -> dict[str, Any]:
        """Return the values without secrets, for logging."""
        return {k: v for k, v in self.values.items() if k not in _SECRET_KEYS}

    def as_dict(self) -> dict[str, Any]:
        """Return a plain mutable copy of the values."""
        return dict(self.values)

    def __str__(self) -> str:
        return str(self.redacted())


class RecoveryStatus(Enum):
    """Whether a node reports itself as a hot standby.

    Attributes:
        IN_RECOVERY: Node is a standby (read-only).
        NOT_IN_RECOVERY: Node is a writable primary.
        UNKNOWN: The recovery check failed; eligibility cannot be confirmed.
    """

    IN_RECOVERY = "in_recovery"
    NOT_IN_RECOVERY = "not_in_recovery"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of opening a probe connection.

    Either carries an open connection or the reason it could not be opened.

    Attributes:
        params: Parameters the probe was opened with.
        connection: The open connection, or None if unavailable.
        error: Error description when unavailable.
    """

    params: ConnectionParams
    connection: DatabaseConnection | None = None
    error: str | None = None

    @property
    def is_available(self) -> bool:
        """Return True if a connection was opened."""
        return self.connection is not None
