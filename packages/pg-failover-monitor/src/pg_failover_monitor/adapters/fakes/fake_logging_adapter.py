"""Fake logging adapter for testing."""

from __future__ import annotations


class FakeLoggingAdapter:
    """Fake logging adapter that captures log messages for assertion.

    Implements LoggingPort by storing (level, message) records in a list
    for later retrieval and assertion in tests. exception() is recorded at
    the "error" level and flagged with the active exception's presence.

    Example:
        logger = FakeLoggingAdapter()
        some_use_case.execute(logger=logger)
        assert "expected error" in logger.errors
    """

    def __init__(self) -> None:
        """Initialize with no records."""
        self._records: list[tuple[str, str]] = []
        self._exception_messages: list[str] = []

    def info(self, message: str) -> None:
        self._records.append(("info", message))

    def warning(self, message: str) -> None:
        self._records.append(("warning", message))

    def error(self, message: str) -> None:
        self._records.append(("error", message))

    def exception(self, message: str) -> None:
        self._records.append(("error", message))
        self._exception_messages.append(message)

    @property
    def records(self) -> list[tuple[str, str]]:
        """Get a copy of all (level, message) records."""
        return list(self._records)

    @property
    def infos(self) -> list[str]:
        return self._messages("info")

    @property
    def warnings(self) -> list[str]:
        return self._messages("warning")

    @property
    def errors(self) -> list[str]:
        return self._messages("error")

    @property
    def exceptions(self) -> list[str]:
        """Get messages logged through exception()."""
        return list(self._exception_messages)

    def contains(self, fragment: str, level: str | None = None) -> bool:
        """Return True if any message (at level, if given) contains fragment."""
        return any(
            fragment in message
            for record_level, message in self._records
            if level is None or record_level == level
        )

    def clear(self) -> None:
        """Clear all captured records."""
        self._records.clear()
        self._exception_messages.clear()

    def _messages(self, level: str) -> list[str]:
        return [message for record_level, message in self._records if record_level == level]
