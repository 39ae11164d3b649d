"""Process entry point: ``python -m pg_failover_monitor``.

Configuration comes from environment variables only:

    PG_FAILOVER_CONFIG_DIR   config directory (skips the default candidates)
    PG_FAILOVER_APP_ROOT     application root (skips the default candidates)
    PG_FAILOVER_ENVIRONMENT  database.yml section, default "production"
    PG_FAILOVER_SERVICE      systemd unit to stop/restart, default "evmserverd"
    PG_FAILOVER_WEBHOOK_URL  post events here instead of running the event command
    PG_FAILOVER_METRICS      "1" to export Prometheus metrics
    PG_FAILOVER_LOG_LEVEL    logging level, default "INFO"
"""

from __future__ import annotations

import os
import signal
import sys
from typing import Any, Mapping

from pg_failover_monitor.adapters.logging_adapter import StdlibLoggingAdapter
from pg_failover_monitor.adapters.systemctl_service_controller import DEFAULT_SERVICE_NAME
from pg_failover_monitor.domain.exceptions import ConfigLocationError
from pg_failover_monitor.factories import (
    DEFAULT_APP_ROOTS,
    DEFAULT_CONFIG_DIRS,
    configure_logging,
    create_monitor_loop,
    resolve_paths,
)


def main(environ: Mapping[str, str] | None = None) -> int:
    """Run the monitor until SIGTERM or SIGINT.

    Returns:
        Process exit status.
    """
    env = os.environ if environ is None else environ
    configure_logging(env.get("PG_FAILOVER_LOG_LEVEL", "INFO").upper())
    logger = StdlibLoggingAdapter()

    config_dir = env.get("PG_FAILOVER_CONFIG_DIR")
    app_root = env.get("PG_FAILOVER_APP_ROOT")
    try:
        paths = resolve_paths(
            config_dirs=(config_dir,) if config_dir else DEFAULT_CONFIG_DIRS,
            app_roots=(app_root,) if app_root else DEFAULT_APP_ROOTS,
        )
    except ConfigLocationError as e:
        logger.error(str(e))
        return 1

    loop = create_monitor_loop(
        paths,
        logger=logger,
        environment=env.get("PG_FAILOVER_ENVIRONMENT", "production"),
        service_name=env.get("PG_FAILOVER_SERVICE", DEFAULT_SERVICE_NAME),
        webhook_url=env.get("PG_FAILOVER_WEBHOOK_URL") or None,
        metrics_enabled=env.get("PG_FAILOVER_METRICS") == "1",
    )

    def _shutdown(signum: int, frame: Any) -> None:
        logger.info(f"Received signal {signum}, stopping after the current check")
        loop.stop()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    logger.info(f"Failover monitor started using {paths.config_dir}")
    loop.run()
    logger.info("Failover monitor stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
