"""Interface adapters: ports plus database, file, process and HTTP adapters."""

from pg_failover_monitor.adapters.ports import (
    CandidateSourcePort,
    DatabaseConnection,
    DatabaseDriverPort,
    EventEmitterPort,
    IntervalTimerPort,
    LoggingPort,
    PrimaryConfigStorePort,
    ServiceControllerPort,
    ThreadingIntervalTimer,
)
from pg_failover_monitor.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from pg_failover_monitor.adapters.logging_adapter import StdlibLoggingAdapter
from pg_failover_monitor.adapters.psycopg_driver import PsycopgConnection, PsycopgDriver
from pg_failover_monitor.adapters.yaml_database_config import YamlDatabaseConfig
from pg_failover_monitor.adapters.repmgr_server_store import RepmgrServerStore
from pg_failover_monitor.adapters.systemctl_service_controller import (
    SystemctlServiceController,
)
from pg_failover_monitor.adapters.command_event_notifier import CommandEventNotifier
from pg_failover_monitor.adapters.httpx_event_notifier import HTTPXEventNotifier

__all__ = [
    "CandidateSourcePort",
    "DatabaseConnection",
    "DatabaseDriverPort",
    "EventEmitterPort",
    "IntervalTimerPort",
    "LoggingPort",
    "PrimaryConfigStorePort",
    "ServiceControllerPort",
    "ThreadingIntervalTimer",
    "MetricsPort",
    "NoOpMetricsAdapter",
    "StdlibLoggingAdapter",
    "PsycopgConnection",
    "PsycopgDriver",
    "YamlDatabaseConfig",
    "RepmgrServerStore",
    "SystemctlServiceController",
    "CommandEventNotifier",
    "HTTPXEventNotifier",
]
