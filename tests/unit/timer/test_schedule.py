"""Tests for focuszone/timer/schedule.py

The schedule window drives every elapsed-time calculation:
- minutes_remaining is 0 outside [start, end]
- smart elapsed is duration minus what is left of the window
- can_resume only inside a partly used window
"""

from datetime import timedelta

from focuszone.tasks.models import TaskStatus
from focuszone.timer.schedule import (
    can_resume,
    effective_remaining_minutes,
    format_clock,
    format_duration,
    late_start_info,
    minutes_remaining,
    smart_elapsed_minutes,
    task_time_info,
)


# ─────────────────────────────────────────────────────────────────────────────
# Window Arithmetic Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestMinutesRemaining:
    """Whole minutes left inside the schedule window."""

    def test_started_late(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=-10, duration_minutes=30)
        assert minutes_remaining(task, fixed_now) == 20
        assert smart_elapsed_minutes(task, fixed_now) == 10

    def test_rounds_down_to_whole_minutes(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=-10.5, duration_minutes=30)
        assert minutes_remaining(task, fixed_now) == 19
        assert smart_elapsed_minutes(task, fixed_now) == 11

    def test_window_over(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=-60, duration_minutes=30)
        assert minutes_remaining(task, fixed_now) == 0
        assert smart_elapsed_minutes(task, fixed_now) == 30

    def test_window_not_open_yet(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=15, duration_minutes=30)
        assert minutes_remaining(task, fixed_now) == 0
        assert smart_elapsed_minutes(task, fixed_now) == 30

    def test_exactly_at_start(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=0, duration_minutes=30)
        assert minutes_remaining(task, fixed_now) == 30
        assert smart_elapsed_minutes(task, fixed_now) == 0

    def test_exactly_at_end(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=-30, duration_minutes=30)
        assert minutes_remaining(task, fixed_now) == 0


class TestCanResume:
    """Resumable only while the window is open and partly used."""

    def test_midway(self, make_task, fixed_now):
        assert can_resume(make_task(start_offset_minutes=-10, duration_minutes=30), fixed_now) is True

    def test_at_window_start(self, make_task, fixed_now):
        assert can_resume(make_task(start_offset_minutes=0, duration_minutes=30), fixed_now) is False

    def test_within_first_minute(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=-0.5, duration_minutes=30)
        assert can_resume(task, fixed_now) is True

    def test_last_minute_of_window(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=-29.5, duration_minutes=30)
        assert can_resume(task, fixed_now) is False

    def test_completed_task(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=-10, duration_minutes=30, status=TaskStatus.COMPLETED)
        assert can_resume(task, fixed_now) is False

    def test_outside_window(self, make_task, fixed_now):
        assert can_resume(make_task(start_offset_minutes=-45, duration_minutes=30), fixed_now) is False
        assert can_resume(make_task(start_offset_minutes=45, duration_minutes=30), fixed_now) is False


class TestLateStartAndRemaining:
    def test_late_start(self, make_task, fixed_now):
        info = late_start_info(make_task(start_offset_minutes=-12.5), fixed_now)
        assert info.is_late is True
        assert info.minutes_late == 12

    def test_not_late(self, make_task, fixed_now):
        info = late_start_info(make_task(start_offset_minutes=5), fixed_now)
        assert info.is_late is False
        assert info.minutes_late == 0

    def test_effective_remaining_for_future_task(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=10, duration_minutes=30)
        assert effective_remaining_minutes(task, fixed_now) == 40

    def test_effective_remaining_after_end(self, make_task, fixed_now):
        task = make_task(start_offset_minutes=-40, duration_minutes=30)
        assert effective_remaining_minutes(task, fixed_now) == 0


class TestTaskTimeInfo:
    def test_midway(self, make_task, fixed_now):
        info = task_time_info(make_task(start_offset_minutes=-15, duration_minutes=60), fixed_now)

        assert info.spent == 15
        assert info.planned == 60
        assert info.remaining == 45
        assert info.percentage == 0.25

    def test_window_over(self, make_task, fixed_now):
        info = task_time_info(make_task(start_offset_minutes=-90, duration_minutes=60), fixed_now)
        assert info.spent == 60
        assert info.remaining == 0
        assert info.percentage == 1.0

    def test_defaults_to_wall_clock(self, make_task, fixed_now):
        # Task pinned far in the past relative to real time
        task = make_task(start_offset_minutes=-60 * 24 * 365 * 10, duration_minutes=30)
        assert task_time_info(task).spent == 30


# ─────────────────────────────────────────────────────────────────────────────
# Formatting Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestFormatting:
    def test_format_duration(self):
        assert format_duration(45) == "45m"
        assert format_duration(60) == "1h"
        assert format_duration(90) == "1h 30m"
        assert format_duration(0) == "0m"

    def test_format_clock(self):
        assert format_clock(605) == "10:05"
        assert format_clock(3600) == "60:00"
        assert format_clock(0) == "00:00"
        assert format_clock(-5) == "00:00"

    def test_window_length_matches_duration(self, make_task):
        task = make_task(duration_minutes=25)
        assert task.estimated_end_time - task.start_time == timedelta(minutes=25)
