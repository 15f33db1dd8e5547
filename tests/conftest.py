"""Shared test fixtures for FocusZone tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- A controllable clock pinned to a known Wednesday morning
- Task builders and an in-memory repository
- A focus session that records every call

Usage:
    def test_something(temp_db, clock, make_task):
        task = make_task(start_offset_minutes=-10, duration_minutes=30)
        ...
"""

import os
import tempfile
from collections.abc import Generator
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from focuszone.config_models import TimerSettingsConfig
from focuszone.tasks.models import TaskRecord
from focuszone.tasks.repository import InMemoryTaskRepository
from focuszone.timer.session import FocusSession


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "focuszone"

# Wednesday
FIXED_NOW = datetime(2026, 3, 11, 10, 0, 0)


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


# ─────────────────────────────────────────────────────────────────────────────
# Clock Fixtures
# ─────────────────────────────────────────────────────────────────────────────


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now: datetime) -> FakeClock:
    return FakeClock(fixed_now)


# ─────────────────────────────────────────────────────────────────────────────
# Task Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_task(fixed_now: datetime):
    """Build a task whose start is given relative to FIXED_NOW.

    Returns:
        factory(start_offset_minutes=0, duration_minutes=30, **fields) -> TaskRecord
    """

    def factory(start_offset_minutes: float = 0, duration_minutes: int = 30, **fields) -> TaskRecord:
        fields.setdefault("title", "Focus block")
        return TaskRecord(
            start_time=fixed_now + timedelta(minutes=start_offset_minutes),
            duration_minutes=duration_minutes,
            **fields,
        )

    return factory


@pytest.fixture
def memory_repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


# ─────────────────────────────────────────────────────────────────────────────
# Timer Fixtures
# ─────────────────────────────────────────────────────────────────────────────


class RecordingFocusSession(FocusSession):
    """Focus session that keeps every call for later assertions."""

    def __init__(self):
        self.activations = []
        self.deactivations = 0
        self.progress = []

    async def activate_session(self, mode, duration, task):
        self.activations.append((mode, duration, task.id))

    async def deactivate_session(self):
        self.deactivations += 1

    def update_progress(self, time_remaining, progress, phase, is_active):
        self.progress.append((time_remaining, progress, phase, is_active))


@pytest.fixture
def focus_session() -> RecordingFocusSession:
    return RecordingFocusSession()


@pytest.fixture
def timer_config() -> TimerSettingsConfig:
    """Ticks effectively never fire on their own; grace clear is quick."""
    return TimerSettingsConfig(tick_interval_seconds=3600, completion_grace_seconds=0.05)
