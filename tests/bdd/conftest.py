"""Shared configuration for BDD tests."""

from typing import Any


def pytest_bdd_apply_tag(tag: str, function: Any) -> bool | None:
    """Leave feature tags to the default marker handling."""
    return None
