"""Pytest configuration for adapter unit tests."""

from __future__ import annotations

import subprocess
from typing import Any

import pytest


class RecordingRunner:
    """Stands in for subprocess.run and records every invocation.

    Example:
        def test_stop(recording_runner):
            controller = SystemctlServiceController(run=recording_runner)
            controller.stop()
            assert recording_runner.commands == [["systemctl", "stop", "evmserverd"]]
    """

    def __init__(self) -> None:
        self.commands: list[list[str]] = []
        self.kwargs: list[dict[str, Any]] = []
        self.returncode = 0
        self.stderr = ""
        self.error: OSError | None = None

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.commands.append(list(command))
        self.kwargs.append(kwargs)
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(command, self.returncode, "", self.stderr)


@pytest.fixture
def recording_runner() -> RecordingRunner:
    """Provide a process runner that never spawns a process."""
    return RecordingRunner()
