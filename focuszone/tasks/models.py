"""
Tool: Task Record Models
Purpose: Data structures for scheduled tasks

Enumerations are stored as raw strings. Decoding happens once, at the
storage boundary, through each enum's from_raw() which maps anything
unrecognised to the enum's default.

Usage:
    from focuszone.tasks.models import (
        TaskRecord,
        TaskStatus,
        TaskType,
        RepeatRule,
    )
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    """Execution status of a task."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "inProgress"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def from_raw(cls, raw: str | None) -> "TaskStatus":
        try:
            return cls(raw)
        except ValueError:
            return cls.SCHEDULED


class TaskType(str, Enum):
    """
    Task category.

    Used by the insight analyzer (relax tasks count as breaks) and to pick
    the focus mode when a session starts.
    """

    DEEP_WORK = "deepWork"
    WORK = "work"
    STUDY = "study"
    EXERCISE = "exercise"
    RELAX = "relax"
    PERSONAL = "personal"

    @classmethod
    def from_raw(cls, raw: str | None) -> "TaskType | None":
        if raw is None:
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


class RepeatRule(str, Enum):
    """Recurrence descriptor."""

    NONE = "none"
    ONCE = "once"
    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def from_raw(cls, raw: str | None) -> "RepeatRule":
        try:
            return cls(raw)
        except ValueError:
            return cls.ONCE

    @property
    def is_recurring(self) -> bool:
        return self not in (RepeatRule.NONE, RepeatRule.ONCE)


@dataclass
class TaskRecord:
    """
    One schedulable unit of work.

    The schedule window is [start_time, start_time + duration_minutes].
    Parent/child links are id references; resolve them through a
    TaskRepository rather than holding object references.
    """

    title: str
    start_time: datetime
    duration_minutes: int

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    icon: str = ""
    color_hex: str = "#007AFF"

    # Execution state
    status: TaskStatus = TaskStatus.SCHEDULED
    is_completed: bool = False
    actual_start_time: datetime | None = None

    # Classification
    task_type: TaskType | None = None
    repeat_rule: RepeatRule = RepeatRule.ONCE

    # Hierarchy
    parent_task_id: str | None = None
    is_generated_from_repeat: bool = False

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {self.duration_minutes}")
        if self.status is TaskStatus.COMPLETED:
            self.is_completed = True

    def touch(self) -> None:
        self.updated_at = datetime.now()

    def set_status(self, status: TaskStatus) -> None:
        """Change status, keeping is_completed in sync and bumping updated_at."""
        self.status = status
        if status is TaskStatus.COMPLETED:
            self.is_completed = True
        self.touch()

    # Timing
    @property
    def estimated_end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60

    @property
    def is_scheduled(self) -> bool:
        return self.status is TaskStatus.SCHEDULED

    @property
    def is_active(self) -> bool:
        return self.status is TaskStatus.IN_PROGRESS

    @property
    def is_paused(self) -> bool:
        return self.status is TaskStatus.PAUSED

    @property
    def is_finished(self) -> bool:
        return self.status is TaskStatus.COMPLETED or self.is_completed

    # Hierarchy
    @property
    def has_recurring_rule(self) -> bool:
        return self.repeat_rule.is_recurring and not self.is_generated_from_repeat

    @property
    def is_child_task(self) -> bool:
        return self.parent_task_id is not None or self.is_generated_from_repeat

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for database storage."""
        return {
            "id": self.id,
            "title": self.title,
            "icon": self.icon,
            "color_hex": self.color_hex,
            "start_time": self.start_time.isoformat(),
            "duration_minutes": self.duration_minutes,
            "status": self.status.value,
            "is_completed": self.is_completed,
            "actual_start_time": self.actual_start_time.isoformat() if self.actual_start_time else None,
            "task_type": self.task_type.value if self.task_type else None,
            "repeat_rule": self.repeat_rule.value,
            "parent_task_id": self.parent_task_id,
            "is_generated_from_repeat": self.is_generated_from_repeat,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskRecord":
        """Create from a storage dict (raw strings for enums and instants)."""
        data = dict(data)
        for field_name in ["start_time", "actual_start_time", "created_at", "updated_at"]:
            if isinstance(data.get(field_name), str):
                data[field_name] = datetime.fromisoformat(data[field_name])

        data["status"] = TaskStatus.from_raw(data.get("status"))
        data["task_type"] = TaskType.from_raw(data.get("task_type"))
        data["repeat_rule"] = RepeatRule.from_raw(data.get("repeat_rule"))
        data["is_completed"] = bool(data.get("is_completed", False))
        data["is_generated_from_repeat"] = bool(data.get("is_generated_from_repeat", False))

        if data.get("created_at") is None:
            data.pop("created_at", None)
        if data.get("updated_at") is None:
            data.pop("updated_at", None)

        return cls(**data)
