"""
Schedule-window arithmetic for task records.

Everything here is a pure function of a task and an instant. "now"
defaults to the local wall clock so callers outside the engine can use
these directly; the engine always passes its own clock reading.

Smart elapsed time:
    spent = duration - minutes_remaining(task)

    minutes_remaining is how much of the scheduled window is still ahead
    of now, in whole minutes, and 0 whenever now is outside the window.
    A task started late therefore begins part-way through its countdown,
    and a task whose window is already over (or has not opened yet)
    counts as fully spent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from focuszone.tasks.models import TaskRecord


@dataclass(frozen=True)
class LateStartInfo:
    is_late: bool
    minutes_late: int


@dataclass(frozen=True)
class TaskTimeInfo:
    spent: int
    planned: int
    remaining: int
    percentage: float


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now()


def minutes_remaining(task: TaskRecord, now: datetime | None = None) -> int:
    """Whole minutes left in the task's schedule window (0 outside the window)."""
    now = _now(now)
    window_end = task.estimated_end_time

    if task.start_time <= now <= window_end:
        remaining = (window_end - now).total_seconds()
        return int(remaining // 60)

    return 0


def smart_elapsed_minutes(task: TaskRecord, now: datetime | None = None) -> int:
    """Minutes of the schedule window already used up."""
    return task.duration_minutes - minutes_remaining(task, now)


def can_resume(task: TaskRecord, now: datetime | None = None) -> bool:
    """True while the window is open, partly used, and the task is not completed."""
    remaining = minutes_remaining(task, now)
    return 0 < remaining < task.duration_minutes and not task.is_completed


def late_start_info(task: TaskRecord, now: datetime | None = None) -> LateStartInfo:
    now = _now(now)
    if now > task.start_time:
        late_seconds = (now - task.start_time).total_seconds()
        return LateStartInfo(is_late=True, minutes_late=int(late_seconds // 60))
    return LateStartInfo(is_late=False, minutes_late=0)


def effective_remaining_minutes(task: TaskRecord, now: datetime | None = None) -> int:
    """
    Minutes until the scheduled end.

    Unlike minutes_remaining this does not care whether the window has
    opened yet: a future task reports the time until its end.
    """
    now = _now(now)
    window_end = task.estimated_end_time
    if now >= window_end:
        return 0
    return int((window_end - now).total_seconds() // 60)


def task_time_info(task: TaskRecord, now: datetime | None = None) -> TaskTimeInfo:
    """Spent vs planned minutes for a task, measured against its schedule."""
    spent = smart_elapsed_minutes(task, now)
    planned = task.duration_minutes
    remaining = max(0, planned - spent)
    percentage = spent / planned if planned > 0 else 0.0
    return TaskTimeInfo(spent=spent, planned=planned, remaining=remaining, percentage=min(1.0, percentage))


def format_duration(minutes: int) -> str:
    """45 -> '45m', 60 -> '1h', 90 -> '1h 30m'."""
    if minutes >= 60:
        hours, rest = divmod(minutes, 60)
        return f"{hours}h {rest}m" if rest else f"{hours}h"
    return f"{minutes}m"


def format_clock(total_seconds: int) -> str:
    """mm:ss, minutes not wrapped at the hour."""
    minutes, seconds = divmod(max(0, total_seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"
