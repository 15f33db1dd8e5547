"""
Tool: Focus Session Collaborator
Purpose: Interfaces the timer engine reports through

FocusSession is whatever presents the running timer to the user (a lock
screen widget, a notification, a terminal line). The engine fires
activate/deactivate without awaiting them and calls update_progress once
per tick and on every transition.

TimerSnapshot is what the engine's change feed emits after each mutation.

Usage:
    class TerminalSession(FocusSession):
        async def activate_session(self, mode, duration, task): ...
        async def deactivate_session(self): ...
        def update_progress(self, time_remaining, progress, phase, is_active): ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from focuszone.logging_config import get_logger
from focuszone.tasks.models import TaskRecord, TaskStatus

logger = get_logger(__name__)


class SessionPhase(str, Enum):
    FOCUS = "focus"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TimerSnapshot:
    """Engine state after a mutation."""

    active_task_id: str | None
    elapsed_seconds: int
    status: TaskStatus | None


class FocusSession(ABC):
    """Presentation side of a running focus timer."""

    @abstractmethod
    async def activate_session(self, mode: str, duration: timedelta, task: TaskRecord) -> None:
        """Begin presenting a focus session for the remaining duration."""

    @abstractmethod
    async def deactivate_session(self) -> None:
        """Tear down whatever activate_session set up."""

    @abstractmethod
    def update_progress(
        self,
        time_remaining: timedelta,
        progress: float,
        phase: SessionPhase,
        is_active: bool,
    ) -> None:
        """Refresh the displayed countdown."""


class LoggingFocusSession(FocusSession):
    """Default session that only writes to the log."""

    async def activate_session(self, mode: str, duration: timedelta, task: TaskRecord) -> None:
        logger.info(f"Focus session '{mode}' started for '{task.title}' ({int(duration.total_seconds())}s)")

    async def deactivate_session(self) -> None:
        logger.info("Focus session ended")

    def update_progress(
        self,
        time_remaining: timedelta,
        progress: float,
        phase: SessionPhase,
        is_active: bool,
    ) -> None:
        logger.debug(
            f"Progress {int(progress * 100)}% ({phase.value}, "
            f"{int(time_remaining.total_seconds())}s left, active={is_active})"
        )
