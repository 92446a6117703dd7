"""Shared fixtures."""

import pytest


@pytest.fixture
def sleeps() -> list[float]:
    """Collect durations passed to a fake sleep."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]):
    """Sleep replacement recording durations instead of blocking."""
    return sleeps.append
