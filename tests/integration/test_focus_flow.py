"""
Integration tests for a focus session end to end.

The timer engine persists through SQLite, the insight analyzer reads the
same database back, and the command-line entry points operate on it.
"""

from datetime import datetime, timedelta

import pytest

from focuszone.config_models import InsightsSettingsConfig, TimerSettingsConfig
from focuszone.learning import insight_analyzer
from focuszone.learning.insight_analyzer import InsightAnalyzer
from focuszone.tasks import repository as repository_module
from focuszone.tasks.models import TaskRecord, TaskStatus, TaskType
from focuszone.timer.engine import TaskTimerEngine


class TestEngineWithSQLite:
    """Every transition lands in the database."""

    @pytest.mark.asyncio
    async def test_full_session(self, sqlite_repository, focus_session, clock, make_task):
        config = TimerSettingsConfig(tick_interval_seconds=3600, completion_grace_seconds=0.01)
        engine = TaskTimerEngine(sqlite_repository, focus_session=focus_session, config=config, clock=clock)
        task = make_task(start_offset_minutes=-10, duration_minutes=30, task_type=TaskType.DEEP_WORK)
        sqlite_repository.save(task)

        try:
            await engine.start(task)
            stored = sqlite_repository.get(task.id)
            assert stored.status is TaskStatus.IN_PROGRESS
            assert stored.actual_start_time == clock()

            await engine.pause()
            assert sqlite_repository.get(task.id).status is TaskStatus.PAUSED

            clock.advance(minutes=2)
            await engine.resume()
            assert engine.elapsed_seconds == 12 * 60

            await engine.complete_task()
            stored = sqlite_repository.get(task.id)
            assert stored.status is TaskStatus.COMPLETED
            assert stored.is_completed is True
        finally:
            await engine.shutdown()

    @pytest.mark.asyncio
    async def test_insights_from_engine_history(self, sqlite_repository, focus_session, clock, make_task):
        config = TimerSettingsConfig(tick_interval_seconds=3600, completion_grace_seconds=0)
        engine = TaskTimerEngine(sqlite_repository, focus_session=focus_session, config=config, clock=clock)

        try:
            for day in range(1, 7):
                finished = make_task(start_offset_minutes=-day * 24 * 60 - 5, duration_minutes=30)
                await engine.start(finished)
                await engine.complete_task()

                abandoned = make_task(start_offset_minutes=-day * 24 * 60 + 60, duration_minutes=30)
                sqlite_repository.save(abandoned)
        finally:
            await engine.shutdown()

        analyzer = InsightAnalyzer(sqlite_repository, config=InsightsSettingsConfig(), clock=clock)
        insights = analyzer.generate_weekly_insights()

        assert [t.status for t in sqlite_repository.fetch()].count(TaskStatus.COMPLETED) == 6
        completion = next(i for i in insights if i.title == "Room for Growth")
        assert completion.impact_score == pytest.approx(15)
        assert completion.data_points == 12


class TestCommandLine:
    def test_add_list_delete(self, run_cli, temp_db):
        code, added = run_cli(
            repository_module.main,
            "--action", "add", "--db", str(temp_db),
            "--title", "Write report", "--start", "2026-03-10T09:00", "--duration", "45",
            "--type", "deepWork",
        )
        assert code == 0
        task_id = added["data"]["id"]
        assert added["data"]["task_type"] == "deepWork"

        code, listed = run_cli(repository_module.main, "--action", "list", "--db", str(temp_db))
        assert code == 0
        assert listed["count"] == 1

        code, fetched = run_cli(repository_module.main, "--action", "get", "--db", str(temp_db), "--task-id", task_id)
        assert fetched["root_parent_id"] == task_id
        assert fetched["is_parent"] is False

        code, deleted = run_cli(
            repository_module.main, "--action", "delete", "--db", str(temp_db), "--task-id", task_id
        )
        assert code == 0
        assert deleted["removed"] == 1

    def test_list_filters_by_status(self, run_cli, sqlite_repository, temp_db, fixed_now):
        sqlite_repository.save(TaskRecord(title="Done", start_time=fixed_now, duration_minutes=30, status=TaskStatus.COMPLETED))
        sqlite_repository.save(TaskRecord(title="Planned", start_time=fixed_now, duration_minutes=30))

        code, listed = run_cli(repository_module.main, "--action", "list", "--db", str(temp_db), "--status", "completed")

        assert code == 0
        assert listed["count"] == 1
        assert listed["data"][0]["title"] == "Done"

    def test_add_rejects_bad_duration(self, run_cli, temp_db):
        code, result = run_cli(
            repository_module.main,
            "--action", "add", "--db", str(temp_db),
            "--title", "Nothing", "--start", "2026-03-10T09:00", "--duration", "-5",
        )
        assert code == 1
        assert result["success"] is False

    def test_insights_on_empty_database(self, run_cli, temp_db):
        code, result = run_cli(insight_analyzer.main, "--action", "insights", "--db", str(temp_db))

        assert code == 0
        assert result["count"] == 0
        assert "message" in result

    def test_summary(self, run_cli, sqlite_repository, temp_db):
        # The CLI reads the wall clock, so history is placed relative to it
        now = datetime.now()
        sqlite_repository.save(
            TaskRecord(title="Recent", start_time=now - timedelta(hours=2), duration_minutes=30, status=TaskStatus.COMPLETED)
        )
        sqlite_repository.save(TaskRecord(title="Old", start_time=now - timedelta(days=40), duration_minutes=30))

        code, result = run_cli(insight_analyzer.main, "--action", "summary", "--db", str(temp_db))

        assert code == 0
        assert result["summary"]["task_count"] == 1
        assert result["summary"]["completion_rate"] == 1.0
