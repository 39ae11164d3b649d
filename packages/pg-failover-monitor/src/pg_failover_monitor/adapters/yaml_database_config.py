"""YAML-backed primary connection config store (Rails-style database.yml)."""

from __future__ import annotations

import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from pg_failover_monitor.adapters.ports import PrimaryConfigStorePort
from pg_failover_monitor.domain.connection import ConnectionParams
from pg_failover_monitor.domain.exceptions import (
    ConfigStoreReadError,
    ConfigStoreWriteError,
)

# database.yml keys that are spelled differently in libpq
_YML_TO_PG = {"database": "dbname", "username": "user"}
_PG_TO_YML = {pg: yml for yml, pg in _YML_TO_PG.items()}

# libpq keywords carried over from database.yml; everything else
# (adapter, encoding, pool, wait_timeout, ...) is framework-only
_PG_KEYWORDS = frozenset(
    {
        "host",
        "hostaddr",
        "port",
        "dbname",
        "user",
        "password",
        "connect_timeout",
        "sslmode",
        "sslcert",
        "sslkey",
        "sslrootcert",
        "application_name",
        "options",
    }
)


def write_yaml_atomically(path: Path, data: Any) -> None:
    """Write data as YAML to path via a temporary file and os.replace.

    Readers never observe a partially written file.

    Raises:
        OSError: If the file cannot be written.
        yaml.YAMLError: If data cannot be serialized.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class YamlDatabaseConfig:
    """Reads and writes the primary's connection parameters in database.yml.

    The file holds one section per environment. Only the configured
    environment's section is read or rewritten; other sections and
    framework-only keys are preserved on write.
    """

    def __init__(self, path: Path | str, environment: str = "production") -> None:
        """Initialize the store.

        Args:
            path: Path to database.yml.
            environment: Section of the file holding the primary's settings.
        """
        self._path = Path(path)
        self._environment = environment

    @property
    def path(self) -> Path:
        """Return the path to database.yml."""
        return self._path

    def read(self) -> ConnectionParams:
        """Read the primary's connection parameters.

        Returns:
            Parameters translated to libpq keywords.

        Raises:
            ConfigStoreReadError: If the file or the environment section
                cannot be read.
        """
        section = self._load_document().get(self._environment)
        if not isinstance(section, dict):
            raise ConfigStoreReadError(
                f"Environment {self._environment!r} missing from {self._path}"
            )
        return ConnectionParams(self._to_pg_params(section))

    def write(self, params: ConnectionParams) -> None:
        """Persist new primary parameters into the environment section.

        Backs up the current file as <file>_<timestamp> first.

        Raises:
            ConfigStoreWriteError: If the file cannot be backed up or written.
        """
        try:
            document = self._load_document()
            section = document.get(self._environment)
            if not isinstance(section, dict):
                section = {}
            section.update(self._to_yml_params(params))
            document[self._environment] = section

            self._backup()
            write_yaml_atomically(self._path, document)
        except (OSError, yaml.YAMLError, ConfigStoreReadError) as e:
            raise ConfigStoreWriteError(
                f"Failed to write {self._path}: {e}"
            ) from e

    def _load_document(self) -> dict[str, Any]:
        try:
            with self._path.open() as f:
                document = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigStoreReadError(f"Cannot read {self._path}: {e}") from e
        if not isinstance(document, dict):
            raise ConfigStoreReadError(f"{self._path} must contain a mapping")
        return document

    def _backup(self) -> None:
        if not self._path.exists():
            return
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        shutil.copy2(self._path, self._path.with_name(f"{self._path.name}_{stamp}"))

    @staticmethod
    def _to_pg_params(section: dict[str, Any]) -> dict[str, Any]:
        params: dict[str, Any] = {}
        for key, value in section.items():
            pg_key = _YML_TO_PG.get(key, key)
            if pg_key in _PG_KEYWORDS and value is not None:
                params[pg_key] = value
        return params

    @staticmethod
    def _to_yml_params(params: ConnectionParams) -> dict[str, Any]:
        return {_PG_TO_YML.get(key, key): value for key, value in params.values.items()}


# Runtime protocol check
assert isinstance(YamlDatabaseConfig("database.yml"), PrimaryConfigStorePort)
