"""
Tool: Insight Models
Purpose: Data structures produced by the insight analyzer

Usage:
    from focuszone.learning.insights import (
        Insight,
        InsightType,
        Trend,
        TimeOfDay,
        DurationCategory,
    )
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from focuszone.tasks.models import TaskRecord


class InsightType(str, Enum):
    TIME_OF_DAY = "timeOfDay"
    TASK_DURATION = "taskDuration"
    BREAK_PATTERN = "breakPattern"
    COMPLETION = "completion"
    DAY_OF_WEEK = "dayOfWeek"


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    NEEDS_IMPROVEMENT = "needsImprovement"


class TimeOfDay(str, Enum):
    """Local-time band a task starts in."""

    EARLY_MORNING = "earlyMorning"      # 6-9
    LATE_MORNING = "lateMorning"        # 9-12
    EARLY_AFTERNOON = "earlyAfternoon"  # 12-15
    LATE_AFTERNOON = "lateAfternoon"    # 15-18
    EVENING = "evening"                 # 18-21
    NIGHT = "night"                     # 21-6

    @classmethod
    def from_datetime(cls, when: datetime) -> "TimeOfDay":
        hour = when.hour
        if 6 <= hour < 9:
            return cls.EARLY_MORNING
        if 9 <= hour < 12:
            return cls.LATE_MORNING
        if 12 <= hour < 15:
            return cls.EARLY_AFTERNOON
        if 15 <= hour < 18:
            return cls.LATE_AFTERNOON
        if 18 <= hour < 21:
            return cls.EVENING
        return cls.NIGHT

    @property
    def display_name(self) -> str:
        return {
            TimeOfDay.EARLY_MORNING: "early morning",
            TimeOfDay.LATE_MORNING: "late morning",
            TimeOfDay.EARLY_AFTERNOON: "early afternoon",
            TimeOfDay.LATE_AFTERNOON: "late afternoon",
            TimeOfDay.EVENING: "evening",
            TimeOfDay.NIGHT: "night",
        }[self]

    @property
    def time_range(self) -> str:
        return {
            TimeOfDay.EARLY_MORNING: "6-9 AM",
            TimeOfDay.LATE_MORNING: "9 AM-12 PM",
            TimeOfDay.EARLY_AFTERNOON: "12-3 PM",
            TimeOfDay.LATE_AFTERNOON: "3-6 PM",
            TimeOfDay.EVENING: "6-9 PM",
            TimeOfDay.NIGHT: "9 PM-6 AM",
        }[self]


class DurationCategory(str, Enum):
    SHORT = "short"        # < 30 min
    MEDIUM = "medium"      # 30-60 min
    LONG = "long"          # 60-120 min
    EXTENDED = "extended"  # 120+ min

    @classmethod
    def from_minutes(cls, minutes: int) -> "DurationCategory":
        if minutes < 30:
            return cls.SHORT
        if minutes < 60:
            return cls.MEDIUM
        if minutes < 120:
            return cls.LONG
        return cls.EXTENDED

    @property
    def display_name(self) -> str:
        return {
            DurationCategory.SHORT: "short (under 30 min)",
            DurationCategory.MEDIUM: "medium (30-60 min)",
            DurationCategory.LONG: "long (1-2 hour)",
            DurationCategory.EXTENDED: "extended (2+ hour)",
        }[self]

    @property
    def suggested_minutes(self) -> int:
        return {
            DurationCategory.SHORT: 25,
            DurationCategory.MEDIUM: 45,
            DurationCategory.LONG: 90,
            DurationCategory.EXTENDED: 120,
        }[self]


@dataclass(frozen=True)
class TimeSlotMetrics:
    task_count: int
    average_completion_rate: float
    total_minutes: int


@dataclass(frozen=True)
class Insight:
    """
    One statistically backed observation.

    impact_score is 0-100; higher means more actionable. data_points is
    the number of tasks the insight rests on.
    """

    type: InsightType
    title: str
    message: str
    recommendation: str
    impact_score: float
    data_points: int
    trend: Trend
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "recommendation": self.recommendation,
            "impact_score": round(self.impact_score, 2),
            "data_points": self.data_points,
            "trend": self.trend.value,
            "created_at": self.created_at.isoformat(),
        }


def completion_rate(tasks: list[TaskRecord]) -> float:
    """Fraction of tasks marked completed (0.0 for no tasks)."""
    if not tasks:
        return 0.0
    return sum(1 for task in tasks if task.is_completed) / len(tasks)
