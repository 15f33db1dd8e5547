"""
Tool: Insight Analyzer
Purpose: Turn a month of task history into a few ranked, actionable insights

Each analyzer looks at the same window of task records (last 30 days,
repeat-generated instances excluded) and only emits an insight when its
numbers clear a significance threshold. The combined list is ranked by
impact score and capped.

Analyzers:
- time of day: best band beats the cross-band mean by > 0.15 (peak),
  worst band trails it by > 0.20 (energy dip)
- task duration: best duration bucket completes > 80% with >= 5 samples
- break effectiveness: tasks started within 30 minutes after a relax
  task vs the rest, >= 3 samples each, benefit > 0.15
- completion trend: last 7 days, >= 5 tasks, against a 75% goal
- day of week: >= 4 weekdays present, best-worst spread > 0.25

Usage:
    # Weekly insights for the default database
    python -m focuszone.learning.insight_analyzer --action insights

    # Per-band and per-weekday completion rates
    python -m focuszone.learning.insight_analyzer --action summary --db data/tasks.db

Dependencies:
    - structlog (logging)
    - pydantic + PyYAML (args/insights.yaml)

Output:
    JSON result with success status and insight data
"""

from __future__ import annotations

import argparse
import json
import sys
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from focuszone.config_models import InsightsSettingsConfig, load_insights_config
from focuszone.learning.insights import (
    DurationCategory,
    Insight,
    InsightType,
    TimeOfDay,
    TimeSlotMetrics,
    Trend,
    completion_rate,
)
from focuszone.logging_config import get_logger, setup_logging
from focuszone.tasks.models import TaskRecord, TaskType
from focuszone.tasks.repository import SQLiteTaskRepository, TaskFilter, TaskRepository, TaskSort
from focuszone.timer.schedule import format_duration

logger = get_logger(__name__)

# Day name mapping (datetime.weekday())
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _pct(value: float) -> int:
    return int(value * 100)


def categorize_by_time_of_day(tasks: list[TaskRecord]) -> dict[TimeOfDay, TimeSlotMetrics]:
    """Group tasks into time-of-day bands. Only bands with tasks appear."""
    grouped: dict[TimeOfDay, list[TaskRecord]] = defaultdict(list)
    for task in tasks:
        grouped[TimeOfDay.from_datetime(task.start_time)].append(task)

    metrics = {}
    for slot in TimeOfDay:
        slot_tasks = grouped.get(slot)
        if not slot_tasks:
            continue
        metrics[slot] = TimeSlotMetrics(
            task_count=len(slot_tasks),
            average_completion_rate=completion_rate(slot_tasks),
            total_minutes=sum(t.duration_minutes for t in slot_tasks),
        )
    return metrics


class InsightAnalyzer:
    """Computes weekly insights from a repository's task history.

    Args:
        repository: Read-only source of task records.
        config: Analyzer thresholds. Loaded from args/insights.yaml when omitted.
        clock: Source of "now". Defaults to datetime.now.
    """

    def __init__(
        self,
        repository: TaskRepository,
        config: InsightsSettingsConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repository = repository
        self.config = config or load_insights_config().insights
        self._clock = clock or datetime.now

    def fetch_recent_tasks(self, now: datetime) -> list[TaskRecord]:
        cutoff = now - timedelta(days=self.config.lookback_days)
        task_filter = TaskFilter(started_after=cutoff, include_generated=False)
        return self.repository.fetch(task_filter, TaskSort.START_TIME_DESC)

    def generate_weekly_insights(self) -> list[Insight]:
        """
        Run every analyzer over the recent history.

        Returns:
            Up to max_insights insights, highest impact first. Empty when
            analysis is disabled, the history read fails, or there is no history.
        """
        if not self.config.enabled:
            logger.info("Insight analysis is disabled")
            return []

        now = self._clock()

        try:
            tasks = self.fetch_recent_tasks(now)
        except Exception as e:
            logger.error(f"Error fetching tasks for analysis: {e}")
            return []

        if not tasks:
            logger.info("No task history in the analysis window")
            return []

        insights: list[Insight] = []
        insights.extend(self.analyze_time_of_day(tasks))
        insights.extend(self.analyze_task_duration(tasks))
        insights.extend(self.analyze_break_effectiveness(tasks))
        insights.extend(self.analyze_completion_trend(tasks, now))
        insights.extend(self.analyze_day_of_week(tasks))

        ranked = sorted(insights, key=lambda i: i.impact_score, reverse=True)[: self.config.max_insights]
        logger.info(f"Generated {len(ranked)} insight(s) from {len(tasks)} tasks ({len(insights)} candidates)")
        return ranked

    # ─────────────────────────────────────────────────────────────────────
    # Analyzers
    # ─────────────────────────────────────────────────────────────────────

    def analyze_time_of_day(self, tasks: list[TaskRecord]) -> list[Insight]:
        thresholds = self.config.time_of_day
        slots = categorize_by_time_of_day(tasks)
        if not slots:
            return []

        mean_rate = sum(m.average_completion_rate for m in slots.values()) / len(slots)
        insights = []

        best_slot, best = max(slots.items(), key=lambda item: item[1].average_completion_rate)
        improvement = best.average_completion_rate - mean_rate
        if improvement > thresholds.peak_margin:
            insights.append(
                Insight(
                    type=InsightType.TIME_OF_DAY,
                    title="Peak Performance Window",
                    message=f"You're {_pct(improvement)}% more productive during {best_slot.display_name}",
                    recommendation=f"Schedule your most important tasks between {best_slot.time_range}",
                    impact_score=improvement * thresholds.peak_weight,
                    data_points=best.task_count,
                    trend=Trend.IMPROVING,
                )
            )

        worst_slot, worst = min(slots.items(), key=lambda item: item[1].average_completion_rate)
        decline = mean_rate - worst.average_completion_rate
        if decline > thresholds.dip_margin:
            insights.append(
                Insight(
                    type=InsightType.TIME_OF_DAY,
                    title="Energy Dip Detected",
                    message=f"Your focus drops {_pct(decline)}% during {worst_slot.display_name}",
                    recommendation=(
                        "Consider scheduling breaks, admin tasks, or lighter work during "
                        f"{worst_slot.time_range}"
                    ),
                    impact_score=decline * thresholds.dip_weight,
                    data_points=worst.task_count,
                    trend=Trend.DECLINING,
                )
            )

        return insights

    def analyze_task_duration(self, tasks: list[TaskRecord]) -> list[Insight]:
        thresholds = self.config.duration

        groups: dict[DurationCategory, list[TaskRecord]] = defaultdict(list)
        for task in tasks:
            groups[DurationCategory.from_minutes(task.duration_minutes)].append(task)

        ordered = [(category, groups[category]) for category in DurationCategory if groups.get(category)]
        if not ordered:
            return []

        category, group = max(ordered, key=lambda item: completion_rate(item[1]))
        rate = completion_rate(group)

        if rate > thresholds.min_completion_rate and len(group) >= thresholds.min_samples:
            return [
                Insight(
                    type=InsightType.TASK_DURATION,
                    title="Sweet Spot Duration",
                    message=f"You complete {_pct(rate)}% of {category.display_name} tasks",
                    recommendation=(
                        f"Try breaking longer tasks into {category.suggested_minutes}-minute chunks"
                    ),
                    impact_score=rate * thresholds.weight,
                    data_points=len(group),
                    trend=Trend.STABLE,
                )
            ]

        return []

    def analyze_break_effectiveness(self, tasks: list[TaskRecord]) -> list[Insight]:
        thresholds = self.config.breaks
        window = timedelta(minutes=thresholds.window_minutes)
        break_type = TaskType.from_raw(thresholds.break_task_type)

        break_starts = [t.start_time for t in tasks if break_type is not None and t.task_type is break_type]

        after_break: list[TaskRecord] = []
        without_break: list[TaskRecord] = []
        for task in tasks:
            window_start = task.start_time - window
            if any(window_start <= start < task.start_time for start in break_starts):
                after_break.append(task)
            else:
                without_break.append(task)

        if len(after_break) < thresholds.min_samples or len(without_break) < thresholds.min_samples:
            return []

        benefit = completion_rate(after_break) - completion_rate(without_break)

        if benefit > thresholds.min_benefit:
            return [
                Insight(
                    type=InsightType.BREAK_PATTERN,
                    title="Break Power Boost",
                    message=f"Tasks after breaks have {_pct(benefit)}% higher completion rates",
                    recommendation="Schedule 5-10 minute breaks before important tasks",
                    impact_score=benefit * thresholds.weight,
                    data_points=len(after_break),
                    trend=Trend.IMPROVING,
                )
            ]

        return []

    def analyze_completion_trend(self, tasks: list[TaskRecord], now: datetime) -> list[Insight]:
        thresholds = self.config.completion
        cutoff = now - timedelta(days=thresholds.window_days)
        this_week = [t for t in tasks if t.start_time >= cutoff]

        if len(this_week) < thresholds.min_samples:
            return []

        rate = completion_rate(this_week)
        focus_minutes = sum(t.duration_minutes for t in this_week if t.is_completed)

        if rate >= thresholds.weekly_goal:
            return [
                Insight(
                    type=InsightType.COMPLETION,
                    title="Consistency Champion",
                    message=(
                        f"You completed {_pct(rate)}% of tasks this week "
                        f"({format_duration(focus_minutes)} focused)"
                    ),
                    recommendation="Great momentum! Consider gradually increasing your daily focus goals",
                    impact_score=rate * thresholds.success_weight,
                    data_points=len(this_week),
                    trend=Trend.IMPROVING,
                )
            ]

        shortfall = thresholds.weekly_goal - rate
        return [
            Insight(
                type=InsightType.COMPLETION,
                title="Room for Growth",
                message=(
                    f"You're {_pct(shortfall)}% away from your completion goal this week "
                    f"({format_duration(focus_minutes)} focused so far)"
                ),
                recommendation="Try reducing task durations by 25% or scheduling fewer tasks per day",
                impact_score=shortfall * thresholds.shortfall_weight,
                data_points=len(this_week),
                trend=Trend.NEEDS_IMPROVEMENT,
            )
        ]

    def analyze_day_of_week(self, tasks: list[TaskRecord]) -> list[Insight]:
        thresholds = self.config.day_of_week

        groups: dict[int, list[TaskRecord]] = defaultdict(list)
        for task in tasks:
            groups[task.start_time.weekday()].append(task)

        if len(groups) < thresholds.min_days:
            return []

        performance = {day: completion_rate(groups[day]) for day in sorted(groups)}
        best_day = max(performance, key=performance.get)
        worst_day = min(performance, key=performance.get)
        spread = performance[best_day] - performance[worst_day]

        if spread > thresholds.min_spread:
            best_name = DAY_NAMES[best_day]
            return [
                Insight(
                    type=InsightType.DAY_OF_WEEK,
                    title="Weekly Rhythm",
                    message=(
                        f"{best_name} is your strongest day ({_pct(performance[best_day])}% completion), "
                        f"{DAY_NAMES[worst_day]} your weakest ({_pct(performance[worst_day])}%)"
                    ),
                    recommendation=f"Schedule your most challenging tasks on {best_name}s",
                    impact_score=spread * thresholds.weight,
                    data_points=len(groups[best_day]),
                    trend=Trend.STABLE,
                )
            ]

        return []

    # ─────────────────────────────────────────────────────────────────────
    # Summary
    # ─────────────────────────────────────────────────────────────────────

    def completion_summary(self) -> dict[str, Any]:
        """Raw per-band and per-weekday completion rates for the analysis window."""
        now = self._clock()
        tasks = self.fetch_recent_tasks(now)

        by_day: dict[int, list[TaskRecord]] = defaultdict(list)
        for task in tasks:
            by_day[task.start_time.weekday()].append(task)

        return {
            "task_count": len(tasks),
            "completion_rate": completion_rate(tasks),
            "time_of_day": {
                slot.value: {
                    "task_count": m.task_count,
                    "completion_rate": m.average_completion_rate,
                    "total_minutes": m.total_minutes,
                }
                for slot, m in categorize_by_time_of_day(tasks).items()
            },
            "day_of_week": {
                DAY_NAMES[day]: completion_rate(day_tasks) for day, day_tasks in sorted(by_day.items())
            },
        }


def main():
    parser = argparse.ArgumentParser(
        description="Insight Analyzer - Weekly focus insights from task history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Ranked weekly insights
    python -m focuszone.learning.insight_analyzer --action insights

    # Completion rates by band and weekday
    python -m focuszone.learning.insight_analyzer --action summary
        """,
    )
    parser.add_argument("--action", required=True, choices=["insights", "summary"], help="Action to perform")
    parser.add_argument("--db", help="Path to the tasks database")

    args = parser.parse_args()
    setup_logging()

    repository = SQLiteTaskRepository(args.db) if args.db else SQLiteTaskRepository()
    analyzer = InsightAnalyzer(repository)

    if args.action == "insights":
        insights = analyzer.generate_weekly_insights()
        result: dict[str, Any] = {
            "success": True,
            "insights": [i.to_dict() for i in insights],
            "count": len(insights),
        }
        if not insights:
            result["message"] = "Not enough history for insights yet."
    else:
        try:
            result = {"success": True, "summary": analyzer.completion_summary()}
        except Exception as e:
            result = {"success": False, "error": str(e)}

    print(json.dumps(result, indent=2, default=str))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
