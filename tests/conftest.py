"""
Root conftest.py for the pg-failover-monitor test suite.

Pytest plugin that checks every test declares what it protects and how slow it may be:
- @pytest.mark.tra("<Namespace>.<Subject>") names the single responsibility under test
- @pytest.mark.tier(n) places the test in a speed tier and, with pytest-timeout, bounds it

Usage:
    @pytest.mark.tier(1)
    @pytest.mark.tra("UseCase.FailoverOrchestrator")
    def test_something():
        ...

Configuration:
    MARKER_ENFORCE=warn   list problems after the run (default)
    MARKER_ENFORCE=1      fail collection on any problem
    MARKER_ENFORCE=0      skip the checks
    TIER_TIMEOUT_MULTIPLIER=<float> scales the tier timeouts (slow CI machines)
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.nodes import Item


TRA_NAMESPACES = (
    "Domain.Invariant.",
    "Domain.Policy.",
    "UseCase.",
    "Port.",
    "Adapter.",
    "Contract.",
)

# tier -> (name, timeout in seconds; 0 means unbounded)
TIERS: dict[int, tuple[str, float]] = {
    0: ("instant", 0.1),
    1: ("fast", 2.0),
    2: ("standard", 30.0),
    3: ("slow", 300.0),
}

_collected_problems: list[str] = []


def pytest_configure(config: Config) -> None:
    """Register the markers used across the suite."""
    config.addinivalue_line(
        "markers",
        "tra(anchor): responsibility this test protects, "
        f"starting with one of: {', '.join(TRA_NAMESPACES)}",
    )
    config.addinivalue_line(
        "markers",
        "tier(level): 0=instant, 1=fast, 2=standard, 3=slow; bounds the test's runtime",
    )
    config.addinivalue_line("markers", "unit: Unit tests (no database, no processes)")
    config.addinivalue_line("markers", "property: Property-based tests using Hypothesis")


def _tier_of(item: Item) -> int | None:
    marker = item.get_closest_marker("tier")
    if marker is None or not marker.args:
        return None
    tier = marker.args[0]
    return tier if isinstance(tier, int) and tier in TIERS else None


def _problems_of(item: Item) -> list[str]:
    problems = []

    anchors = [m.args[0] for m in item.iter_markers(name="tra") if m.args]
    if len(anchors) != 1:
        problems.append(f"{item.nodeid}: expected exactly one @tra anchor, got {len(anchors)}")
    elif not isinstance(anchors[0], str) or not anchors[0].startswith(TRA_NAMESPACES):
        problems.append(f"{item.nodeid}: invalid @tra anchor {anchors[0]!r}")

    if _tier_of(item) is None:
        problems.append(f"{item.nodeid}: missing or invalid @tier marker")

    return problems


def _apply_tier_timeouts(items: list[Item]) -> None:
    """Bound each test by its tier's timeout when pytest-timeout is available."""
    try:
        import pytest_timeout as _  # type: ignore[import-untyped]  # noqa: F401
    except ImportError:
        return

    multiplier = float(os.environ.get("TIER_TIMEOUT_MULTIPLIER", "1.0"))
    for item in items:
        tier = _tier_of(item)
        if tier is None or any(item.iter_markers(name="timeout")):
            continue
        _, timeout = TIERS[tier]
        if timeout > 0:
            item.add_marker(pytest.mark.timeout(timeout * multiplier))


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config: Config, items: list[Item]) -> None:
    """Check markers at collection time and apply tier timeouts."""
    mode = os.environ.get("MARKER_ENFORCE", "warn")
    if mode != "0":
        problems = [p for item in items for p in _problems_of(item)]
        if problems and mode != "warn":
            pytest.fail(
                "Marker errors:\n" + "\n".join(f"  - {p}" for p in problems),
                pytrace=False,
            )
        _collected_problems[:] = problems

    _apply_tier_timeouts(items)


def pytest_report_header(config: Config) -> str:
    return f"marker enforcement: {os.environ.get('MARKER_ENFORCE', 'warn')}"


def pytest_terminal_summary(terminalreporter, exitstatus: int, config: Config) -> None:
    """List the marker problems found at collection."""
    if not _collected_problems:
        return
    terminalreporter.write_sep("=", "marker warnings")
    for problem in _collected_problems[:20]:
        terminalreporter.write_line(f"  {problem}")
    if len(_collected_problems) > 20:
        terminalreporter.write_line(f"  ... and {len(_collected_problems) - 20} more")
