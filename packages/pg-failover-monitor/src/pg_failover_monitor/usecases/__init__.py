"""Use cases: Application logic layer."""

from pg_failover_monitor.usecases.config_location_resolver import ConfigLocationResolver
from pg_failover_monitor.usecases.connection_probe import ConnectionProbe
from pg_failover_monitor.usecases.failover_orchestrator import FailoverOrchestrator
from pg_failover_monitor.usecases.monitor_loop import HealthCheckRunner, MonitorLoop
from pg_failover_monitor.usecases.settings_loader import SettingsLoader

__all__ = [
    "ConfigLocationResolver",
    "ConnectionProbe",
    "FailoverOrchestrator",
    "HealthCheckRunner",
    "MonitorLoop",
    "SettingsLoader",
]
