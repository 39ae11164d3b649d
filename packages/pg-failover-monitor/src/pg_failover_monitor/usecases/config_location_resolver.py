"""Resolves configuration locations from an explicit ordered candidate list."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from pg_failover_monitor.domain.exceptions import ConfigLocationError


class ConfigLocationResolver:
    """Picks the first existing location from an ordered list of candidates.

    Resolution happens once at startup; the resolved path is then passed to
    the components that need it and never re-resolved.
    """

    def __init__(self, candidates: Sequence[Path | str]) -> None:
        """Initialize the resolver.

        Args:
            candidates: Locations to try, most preferred first.
        """
        self._candidates = tuple(Path(c) for c in candidates)

    @property
    def candidates(self) -> tuple[Path, ...]:
        return self._candidates

    def resolve(self) -> Path:
        """Return the first candidate that exists.

        Raises:
            ConfigLocationError: If no candidate exists.
        """
        for candidate in self._candidates:
            if candidate.exists():
                return candidate
        raise ConfigLocationError(tuple(str(c) for c in self._candidates))
