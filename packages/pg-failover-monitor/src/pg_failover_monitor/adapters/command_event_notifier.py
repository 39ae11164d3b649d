"""Command-based implementation of the EventEmitterPort.

Announces a failover by running the application's own event-raising command
(for example ``rake evm:raise_server_event``) from its root directory.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Sequence

from pg_failover_monitor.adapters.logging_adapter import StdlibLoggingAdapter
from pg_failover_monitor.adapters.ports import EventEmitterPort, LoggingPort
from pg_failover_monitor.domain.events import FailoverEvent

DEFAULT_COMMAND = ("rake", "evm:raise_server_event")


class CommandEventNotifier:
    """Runs ``<command> -- --event <event name>`` in the application root.

    Fire-and-forget: the command's failure is logged, never raised.
    """

    def __init__(
        self,
        cwd: Path | str,
        command: Sequence[str] = DEFAULT_COMMAND,
        logger: LoggingPort | None = None,
        run: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run,
    ) -> None:
        """Initialize the notifier.

        Args:
            cwd: Application root the command runs from.
            command: Executable and leading arguments.
            logger: Port for reporting failures.
            run: Process runner for dependency injection (testing).
        """
        self._cwd = Path(cwd)
        self._command = tuple(command)
        self._logger = logger or StdlibLoggingAdapter()
        self._run = run

    def build_command(self, event: FailoverEvent) -> list[str]:
        """Return the full argument vector for an event."""
        return [*self._command, "--", "--event", event.name]

    def emit(self, event: FailoverEvent) -> None:
        """Run the notification command for the event."""
        command = self.build_command(event)
        try:
            completed = self._run(
                command, cwd=self._cwd, capture_output=True, text=True, check=False
            )
        except OSError as e:
            self._logger.error(f"Failed to raise event {event.name}: {e}")
            return

        if completed.returncode != 0:
            self._logger.error(
                f"Failed to raise event {event.name}: exit status "
                f"{completed.returncode}: {(completed.stderr or '').strip()}"
            )


# Runtime protocol check
assert isinstance(CommandEventNotifier("."), EventEmitterPort)
