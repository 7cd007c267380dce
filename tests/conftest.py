"""Shared fixtures for calmaker tests."""

from datetime import UTC, datetime
from typing import Any, Callable

import pytest

from calmaker.models import EventTemplate


@pytest.fixture
def make_template() -> Callable[..., EventTemplate]:
    """Factory for EventTemplate with sensible defaults.

    Keyword overrides use model field names; ``recurrence`` may be a mapping.
    """

    def _make(**overrides: Any) -> EventTemplate:
        data: dict[str, Any] = {
            "id": "test-1",
            "title": "Test Event",
            "anchor_date": "2024-01-15",
            "start_time": "09:00",
            "end_time": "10:00",
            "all_day": False,
            "time_zone": "America/Los_Angeles",
            "location": "",
            "description": "",
            "recurrence": {"frequency": "NONE"},
        }
        data.update(overrides)
        return EventTemplate.model_validate(data)

    return _make


@pytest.fixture
def fixed_stamp() -> datetime:
    """Deterministic DTSTAMP for encoder tests."""
    return datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "fast: Tests that run in well under a second")
