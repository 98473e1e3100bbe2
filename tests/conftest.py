"""Shared pytest fixtures and configuration."""

import pytest

from enrollgate.policy import Policy
from enrollgate.timemodel import DayOfWeek, TimeSlot


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def default_policy() -> Policy:
    """The documented default policy."""
    return Policy()


@pytest.fixture
def make_slot():
    """Factory building a TimeSlot from "HH:MM" strings."""

    def _make(course_id: str, day: DayOfWeek | str, start: str, end: str) -> TimeSlot:
        return TimeSlot.from_clock(course_id, day, start, end)

    return _make
