"""systemd implementation of the ServiceControllerPort."""

from __future__ import annotations

import subprocess
from typing import Callable, Sequence

from pg_failover_monitor.adapters.logging_adapter import StdlibLoggingAdapter
from pg_failover_monitor.adapters.ports import LoggingPort, ServiceControllerPort

DEFAULT_SERVICE_NAME = "evmserverd"


class SystemctlServiceController:
    """Stops and restarts the application service through systemctl.

    Fire-and-forget: a failing systemctl call is logged and never raised or
    retried.
    """

    def __init__(
        self,
        service_name: str = DEFAULT_SERVICE_NAME,
        logger: LoggingPort | None = None,
        systemctl: str = "systemctl",
        run: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run,
    ) -> None:
        """Initialize the controller.

        Args:
            service_name: systemd unit of the dependent application.
            logger: Port for reporting failures.
            systemctl: Path to the systemctl executable.
            run: Process runner for dependency injection (testing).
        """
        self._service_name = service_name
        self._logger = logger or StdlibLoggingAdapter()
        self._systemctl = systemctl
        self._run = run

    @property
    def service_name(self) -> str:
        return self._service_name

    def stop(self) -> None:
        """Stop the application service."""
        self._systemctl_call("stop")

    def restart(self) -> None:
        """Restart the application service."""
        self._systemctl_call("restart")

    def _systemctl_call(self, action: str) -> None:
        command: Sequence[str] = [self._systemctl, action, self._service_name]
        try:
            completed = self._run(command, capture_output=True, text=True, check=False)
        except OSError as e:
            self._logger.error(f"Failed to {action} {self._service_name}: {e}")
            return

        if completed.returncode != 0:
            self._logger.error(
                f"Failed to {action} {self._service_name}: "
                f"exit status {completed.returncode}: {(completed.stderr or '').strip()}"
            )


# Runtime protocol check
assert isinstance(SystemctlServiceController(), ServiceControllerPort)
