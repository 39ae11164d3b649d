"""Factory functions wiring the failover monitor from configuration files.

Resolves configuration locations once, loads settings once, and builds the
orchestrator and monitor loop with the production adapters. Handles optional
dependency imports gracefully.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from pg_failover_monitor.adapters.command_event_notifier import CommandEventNotifier
from pg_failover_monitor.adapters.httpx_event_notifier import HTTPXEventNotifier
from pg_failover_monitor.adapters.logging_adapter import StdlibLoggingAdapter
from pg_failover_monitor.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from pg_failover_monitor.adapters.ports import (
    DatabaseDriverPort,
    EventEmitterPort,
    IntervalTimerPort,
    LoggingPort,
    ServiceControllerPort,
    ThreadingIntervalTimer,
)
from pg_failover_monitor.adapters.psycopg_driver import PsycopgDriver
from pg_failover_monitor.adapters.repmgr_server_store import RepmgrServerStore
from pg_failover_monitor.adapters.systemctl_service_controller import (
    DEFAULT_SERVICE_NAME,
    SystemctlServiceController,
)
from pg_failover_monitor.adapters.yaml_database_config import YamlDatabaseConfig
from pg_failover_monitor.domain.settings import FailoverSettings
from pg_failover_monitor.usecases.config_location_resolver import ConfigLocationResolver
from pg_failover_monitor.usecases.connection_probe import (
    DEFAULT_CONNECT_TIMEOUT,
    ConnectionProbe,
)
from pg_failover_monitor.usecases.failover_orchestrator import FailoverOrchestrator
from pg_failover_monitor.usecases.monitor_loop import MonitorLoop
from pg_failover_monitor.usecases.settings_loader import SettingsLoader

DEFAULT_CONFIG_DIRS: tuple[str, ...] = ("/var/www/miq/vmdb/config", "config")
DEFAULT_APP_ROOTS: tuple[str, ...] = ("/var/www/miq/vmdb", ".")

DATABASE_YML = "database.yml"
FAILOVER_DATABASES_YML = "failover_databases.yml"
HA_ADMIN_YML = "ha_admin.yml"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class PrometheusNotInstalledError(ImportError):
    """Raised when metrics are requested but prometheus-client is not installed.

    Install with: pip install pg-failover-monitor[metrics]
    """

    def __init__(self) -> None:
        super().__init__(
            "prometheus-client is not installed. "
            "Install with: pip install pg-failover-monitor[metrics]"
        )


@dataclass(frozen=True)
class MonitorPaths:
    """Resolved, immutable file locations used by the monitor.

    Attributes:
        config_dir: Directory holding the YAML configuration files.
        app_root: Root directory of the monitored application.
    """

    config_dir: Path
    app_root: Path

    @property
    def database_yml(self) -> Path:
        return self.config_dir / DATABASE_YML

    @property
    def failover_databases_yml(self) -> Path:
        return self.config_dir / FAILOVER_DATABASES_YML

    @property
    def ha_admin_yml(self) -> Path:
        return self.config_dir / HA_ADMIN_YML


def resolve_paths(
    config_dirs: Sequence[Path | str] = DEFAULT_CONFIG_DIRS,
    app_roots: Sequence[Path | str] = DEFAULT_APP_ROOTS,
) -> MonitorPaths:
    """Resolve the configuration directory and application root.

    Args:
        config_dirs: Candidate configuration directories, most preferred first.
        app_roots: Candidate application roots, most preferred first.

    Returns:
        MonitorPaths with the first existing candidate of each list.

    Raises:
        ConfigLocationError: If no candidate of a list exists.
    """
    return MonitorPaths(
        config_dir=ConfigLocationResolver(config_dirs).resolve(),
        app_root=ConfigLocationResolver(app_roots).resolve(),
    )


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure process-wide logging for the monitor."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_metrics_adapter(enabled: bool, prefix: str = "pg_failover") -> MetricsPort:
    """Create the metrics adapter.

    Args:
        enabled: If False, metrics are discarded.
        prefix: Metric name prefix for Prometheus.

    Raises:
        PrometheusNotInstalledError: If enabled and prometheus-client is missing.
    """
    if not enabled:
        return NoOpMetricsAdapter()

    try:
        from pg_failover_monitor.adapters.prometheus_metrics import (
            PrometheusMetricsAdapter,
        )

        return PrometheusMetricsAdapter(prefix=prefix)
    except ImportError as exc:
        raise PrometheusNotInstalledError() from exc


def create_event_emitter(
    paths: MonitorPaths,
    logger: LoggingPort,
    webhook_url: str | None = None,
) -> EventEmitterPort:
    """Create the notification channel.

    Posts to webhook_url when given, otherwise runs the application's
    event-raising command from its root directory.
    """
    if webhook_url:
        return HTTPXEventNotifier(webhook_url, logger=logger)
    return CommandEventNotifier(cwd=paths.app_root, logger=logger)


def create_failover_orchestrator(
    paths: MonitorPaths,
    settings: FailoverSettings,
    logger: LoggingPort,
    environment: str = "production",
    service_name: str = DEFAULT_SERVICE_NAME,
    event_emitter: EventEmitterPort | None = None,
    service_controller: ServiceControllerPort | None = None,
    metrics: MetricsPort | None = None,
    driver: DatabaseDriverPort | None = None,
    search_timer: IntervalTimerPort | None = None,
    connect_timeout: int | None = DEFAULT_CONNECT_TIMEOUT,
) -> FailoverOrchestrator:
    """Create a FailoverOrchestrator wired to the production adapters.

    Example:
        >>> paths = resolve_paths()
        >>> logger = StdlibLoggingAdapter()
        >>> settings = SettingsLoader(logger).load(paths.ha_admin_yml)
        >>> orchestrator = create_failover_orchestrator(paths, settings, logger)
        >>> orchestrator.run_health_check()
    """
    return FailoverOrchestrator(
        settings=settings,
        probe=ConnectionProbe(
            driver or PsycopgDriver(), logger, connect_timeout=connect_timeout
        ),
        config_store=YamlDatabaseConfig(paths.database_yml, environment),
        candidate_source=RepmgrServerStore(paths.failover_databases_yml, logger),
        service_controller=service_controller
        or SystemctlServiceController(service_name, logger=logger),
        event_emitter=event_emitter or create_event_emitter(paths, logger),
        timer=search_timer or ThreadingIntervalTimer(),
        logger=logger,
        metrics=metrics,
    )


def create_monitor_loop(
    paths: MonitorPaths,
    logger: LoggingPort | None = None,
    environment: str = "production",
    service_name: str = DEFAULT_SERVICE_NAME,
    webhook_url: str | None = None,
    metrics_enabled: bool = False,
) -> MonitorLoop:
    """Load settings once and build the monitor loop.

    The loop's timer and the orchestrator's search timer are separate:
    stopping the loop never cuts a failover search short.
    """
    logger = logger or StdlibLoggingAdapter()
    settings = SettingsLoader(logger).load(paths.ha_admin_yml)
    orchestrator = create_failover_orchestrator(
        paths,
        settings,
        logger,
        environment=environment,
        service_name=service_name,
        event_emitter=create_event_emitter(paths, logger, webhook_url),
        metrics=create_metrics_adapter(metrics_enabled),
    )
    return MonitorLoop(orchestrator, settings, ThreadingIntervalTimer(), logger)
