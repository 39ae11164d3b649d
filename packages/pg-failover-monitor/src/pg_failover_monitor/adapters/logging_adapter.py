"""Standard library implementation of the LoggingPort."""

from __future__ import annotations

import logging

DEFAULT_LOGGER_NAME = "pg_failover_monitor"


class StdlibLoggingAdapter:
    """LoggingPort backed by a standard library logger.

    Handlers, formatting and levels are left to the process-wide logging
    configuration (see factories.configure_logging).
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize the adapter.

        Args:
            logger: Logger to delegate to. Defaults to the package logger.
        """
        self._logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

    @property
    def logger(self) -> logging.Logger:
        """Return the underlying logger."""
        return self._logger

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def exception(self, message: str) -> None:
        self._logger.exception(message)
