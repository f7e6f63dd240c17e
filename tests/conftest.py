"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from datetime import UTC, datetime
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings  # noqa: E402
from src.repetition import (  # noqa: E402
    FixedClock,
    InMemoryCatalog,
    ProgressStore,
    ReviewService,
    SM2Scheduler,
    StreakTracker,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings():
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def start_time():
    """A fixed review instant."""
    return datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def clock(start_time):
    """Manually driven clock starting at ``start_time``."""
    return FixedClock(start_time)


@pytest.fixture
def scheduler():
    """SM-2 scheduler with default policy."""
    return SM2Scheduler()


@pytest.fixture
def store():
    """Empty progress store."""
    return ProgressStore()


@pytest.fixture
def tracker():
    """Empty streak tracker."""
    return StreakTracker()


@pytest.fixture
def catalog():
    """Two sets: set 1 holds cards 101-104, set 2 holds cards 201-202, set 3 is empty."""
    return InMemoryCatalog({1: [101, 102, 103, 104], 2: [201, 202], 3: []})


@pytest.fixture
def service(catalog, store, tracker, scheduler, clock, settings):
    """ReviewService wired to in-memory collaborators and a fixed clock."""
    return ReviewService(
        catalog,
        store=store,
        streaks=tracker,
        scheduler=scheduler,
        clock=clock,
        settings=settings,
    )
