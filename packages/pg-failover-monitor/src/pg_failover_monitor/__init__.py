"""pg-failover-monitor: keeps an application pointed at the live PostgreSQL primary."""

__version__ = "0.1.0"

from pg_failover_monitor.domain.connection import ConnectionParams
from pg_failover_monitor.domain.exceptions import FailoverMonitorError
from pg_failover_monitor.domain.settings import FailoverSettings
from pg_failover_monitor.domain.failover import FailoverState, HealthCheckResult
from pg_failover_monitor.usecases.failover_orchestrator import FailoverOrchestrator
from pg_failover_monitor.usecases.monitor_loop import MonitorLoop

__all__ = [
    "ConnectionParams",
    "FailoverMonitorError",
    "FailoverSettings",
    "FailoverState",
    "HealthCheckResult",
    "FailoverOrchestrator",
    "MonitorLoop",
]
