"""Domain layer: Entities with zero external dependencies."""

from pg_failover_monitor.domain.connection import (
    ConnectionParams,
    ProbeResult,
    RecoveryStatus,
)
from pg_failover_monitor.domain.events import FailoverEvent, FailoverEventType
from pg_failover_monitor.domain.exceptions import (
    CandidateSourceError,
    ConfigLocationError,
    ConfigStoreReadError,
    ConfigStoreWriteError,
    DatabaseQueryError,
    DatabaseUnavailableError,
    FailoverMonitorError,
)
from pg_failover_monitor.domain.failover import (
    FailoverState,
    HealthCheckResult,
    SearchProgress,
)
from pg_failover_monitor.domain.settings import FailoverSettings

__all__ = [
    "ConnectionParams",
    "ProbeResult",
    "RecoveryStatus",
    "FailoverEvent",
    "FailoverEventType",
    "FailoverMonitorError",
    "ConfigLocationError",
    "DatabaseUnavailableError",
    "DatabaseQueryError",
    "ConfigStoreReadError",
    "ConfigStoreWriteError",
    "CandidateSourceError",
    "FailoverState",
    "HealthCheckResult",
    "SearchProgress",
    "FailoverSettings",
]
