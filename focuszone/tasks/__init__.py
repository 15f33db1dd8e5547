"""Task Records - the schedulable units of work

Philosophy:
    A task is a promise about a window of time, not just a to-do item.
    It carries when it was planned to happen, how long it should take,
    and what actually happened when the timer ran.

Components:
    models.py: TaskRecord and its status/type/repeat enumerations
    repository.py: Fetch/save collaborator with in-memory and SQLite storage

Lifecycle:
    Scheduling flows create records in 'scheduled' status. After that,
    only the timer engine moves them between statuses. Records are never
    deleted by the core; cascade deletion of repeat-generated children
    is a repository operation.

Usage:
    from focuszone.tasks.models import TaskRecord
    from focuszone.tasks.repository import SQLiteTaskRepository

    repository = SQLiteTaskRepository()
    task = TaskRecord(title="Write report", start_time=datetime.now(), duration_minutes=45)
    repository.save(task)
"""

from focuszone import DATA_DIR

# Database path
DB_PATH = DATA_DIR / "tasks.db"

# Raw values as stored
TASK_STATUSES = ("scheduled", "inProgress", "paused", "completed", "cancelled")
TASK_TYPES = ("deepWork", "work", "study", "exercise", "relax", "personal")
REPEAT_RULES = ("none", "once", "daily", "weekdays", "weekends", "weekly", "monthly")

__all__ = [
    "DB_PATH",
    "TASK_STATUSES",
    "TASK_TYPES",
    "REPEAT_RULES",
]
