"""Settings loader use case for the failover tunables."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from pg_failover_monitor.adapters.ports import LoggingPort
from pg_failover_monitor.domain.settings import (
    DB_CHECK_FREQUENCY,
    FAILOVER_ATTEMPTS,
    FAILOVER_CHECK_FREQUENCY,
    FailoverSettings,
)


class SettingsLoader:
    """Loads FailoverSettings from a YAML document (ha_admin.yml).

    An absent or unreadable document is not fatal: the condition is logged
    and the built-in defaults are used. Each key is defaulted independently
    when missing. Values are taken verbatim, without bounds checking.
    """

    def __init__(self, logger: LoggingPort) -> None:
        """Initialize the loader.

        Args:
            logger: Port for reporting load failures and the effective values.
        """
        self._logger = logger

    def load(self, path: Path | str) -> FailoverSettings:
        """Load settings from path.

        Args:
            path: Location of the settings document.

        Returns:
            FailoverSettings with values from the document, defaulted per key.
        """
        document = self._read_document(Path(path))
        settings = FailoverSettings(
            failover_attempts=self._value(document, "failover_attempts", FAILOVER_ATTEMPTS),
            db_check_frequency=self._value(document, "db_check_frequency", DB_CHECK_FREQUENCY),
            failover_check_frequency=self._value(
                document, "failover_check_frequency", FAILOVER_CHECK_FREQUENCY
            ),
        )
        self._logger.info(settings.describe())
        return settings

    def _read_document(self, path: Path) -> dict[str, Any]:
        try:
            with path.open() as f:
                document = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            self._logger.error(f"{e.__class__.__name__}: {e}")
            self._log_defaults_used(path)
            return {}

        if document is None:
            return {}
        if not isinstance(document, dict):
            self._logger.error(f"{path} must contain a mapping, got {type(document).__name__}")
            self._log_defaults_used(path)
            return {}
        return document

    def _log_defaults_used(self, path: Path) -> None:
        self._logger.info(
            f"File not loaded: {path}. Default settings for failover will be used."
        )

    @staticmethod
    def _value(document: dict[str, Any], key: str, default: int) -> Any:
        value = document.get(key)
        return default if value is None else value
