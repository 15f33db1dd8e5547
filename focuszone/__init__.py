"""
FocusZone Core

Scheduling-aware focus timer and weekly behavioral insights.

Components:
- tasks/: Task records and the repository they are persisted through
- timer/: The single-active-task countdown engine and schedule arithmetic
- learning/: Weekly insight analysis over task history

Usage:
    from focuszone.tasks.repository import SQLiteTaskRepository
    from focuszone.timer.engine import TaskTimerEngine
    from focuszone.learning.insight_analyzer import InsightAnalyzer

    repository = SQLiteTaskRepository()
    engine = TaskTimerEngine(repository)
    await engine.start(task)

    insights = InsightAnalyzer(repository).generate_weekly_insights()
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_ROOT = Path(__file__).parent
DATA_DIR = PROJECT_ROOT / "data"
ARGS_DIR = PROJECT_ROOT / "args"

__all__ = [
    "PROJECT_ROOT",
    "PACKAGE_ROOT",
    "DATA_DIR",
    "ARGS_DIR",
]
