"""
Tool: Task Repository
Purpose: Fetch/save collaborator for task records

Both the timer engine and the insight analyzer talk to storage only
through TaskRepository. Records form an arena keyed by id; parent/child
links are id references resolved through lookups here.

Usage:
    python -m focuszone.tasks.repository --action add --title "Deep work" --start 2026-03-10T09:00 --duration 45
    python -m focuszone.tasks.repository --action list --since 7d --status completed
    python -m focuszone.tasks.repository --action get --task-id abc123
    python -m focuszone.tasks.repository --action delete --task-id abc123

Dependencies:
    - sqlite3 (stdlib)

Output:
    JSON result with success status and data
"""

from __future__ import annotations

import argparse
import json
import re
import sqlite3
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any

from focuszone.logging_config import get_logger, setup_logging
from focuszone.tasks import DB_PATH, REPEAT_RULES, TASK_STATUSES, TASK_TYPES
from focuszone.tasks.models import RepeatRule, TaskRecord, TaskStatus, TaskType

logger = get_logger(__name__)


class TaskSort(str, Enum):
    START_TIME_ASC = "start_time_asc"
    START_TIME_DESC = "start_time_desc"


@dataclass(frozen=True)
class TaskFilter:
    """Predicate over task records."""

    started_after: datetime | None = None
    include_generated: bool = True

    def matches(self, task: TaskRecord) -> bool:
        if self.started_after is not None and task.start_time < self.started_after:
            return False
        if not self.include_generated and task.is_generated_from_repeat:
            return False
        return True


class TaskRepository(ABC):
    """Storage collaborator for task records."""

    @abstractmethod
    def fetch(
        self, task_filter: TaskFilter | None = None, sort: TaskSort = TaskSort.START_TIME_ASC
    ) -> list[TaskRecord]:
        """Return every record matching the filter, in the requested order."""

    @abstractmethod
    def save(self, task: TaskRecord) -> bool:
        """Insert or update a record. Returns False when the write did not happen."""

    @abstractmethod
    def get(self, task_id: str) -> TaskRecord | None:
        """Look up a single record by id."""

    @abstractmethod
    def _delete_ids(self, task_ids: list[str]) -> int:
        """Remove the given ids, returning how many were removed."""

    def children_of(self, task_id: str) -> list[TaskRecord]:
        return [task for task in self.fetch() if task.parent_task_id == task_id]

    def root_parent(self, task: TaskRecord) -> TaskRecord:
        """Walk parent ids to the top of the chain (the task itself if it has no parent)."""
        current = task
        seen = {current.id}
        while current.parent_task_id is not None:
            parent = self.get(current.parent_task_id)
            if parent is None or parent.id in seen:
                break
            seen.add(parent.id)
            current = parent
        return current

    def is_parent_task(self, task: TaskRecord) -> bool:
        return task.has_recurring_rule or bool(self.children_of(task.id))

    def delete(self, task_id: str) -> int:
        """
        Delete a record and every record whose parent chain includes it.

        Returns:
            Number of records removed
        """
        if self.get(task_id) is None:
            return 0

        by_parent: dict[str, list[str]] = {}
        for task in self.fetch():
            if task.parent_task_id is not None:
                by_parent.setdefault(task.parent_task_id, []).append(task.id)

        doomed: list[str] = []
        pending = [task_id]
        while pending:
            current = pending.pop()
            if current in doomed:
                continue
            doomed.append(current)
            pending.extend(by_parent.get(current, []))

        removed = self._delete_ids(doomed)
        logger.info(f"Deleted task {task_id} and {removed - 1} descendant(s)")
        return removed


class InMemoryTaskRepository(TaskRepository):
    """Arena of task records keyed by id."""

    def __init__(self, tasks: list[TaskRecord] | None = None):
        self._tasks: dict[str, TaskRecord] = {}
        for task in tasks or []:
            self._tasks[task.id] = task

    def fetch(
        self, task_filter: TaskFilter | None = None, sort: TaskSort = TaskSort.START_TIME_ASC
    ) -> list[TaskRecord]:
        task_filter = task_filter or TaskFilter()
        matched = [task for task in self._tasks.values() if task_filter.matches(task)]
        return sorted(
            matched,
            key=lambda t: t.start_time,
            reverse=sort is TaskSort.START_TIME_DESC,
        )

    def save(self, task: TaskRecord) -> bool:
        self._tasks[task.id] = task
        return True

    def get(self, task_id: str) -> TaskRecord | None:
        return self._tasks.get(task_id)

    def _delete_ids(self, task_ids: list[str]) -> int:
        removed = 0
        for task_id in task_ids:
            if self._tasks.pop(task_id, None) is not None:
                removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._tasks)


class SQLiteTaskRepository(TaskRepository):
    """Task records persisted to a local SQLite database."""

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = Path(db_path) if db_path is not None else DB_PATH

    def get_connection(self) -> sqlite3.Connection:
        """Get database connection, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row

        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                icon TEXT DEFAULT '',
                color_hex TEXT DEFAULT '#007AFF',
                start_time DATETIME NOT NULL,
                duration_minutes INTEGER NOT NULL CHECK(duration_minutes > 0),
                status TEXT NOT NULL DEFAULT 'scheduled',
                is_completed INTEGER DEFAULT 0,
                actual_start_time DATETIME,
                task_type TEXT,
                repeat_rule TEXT DEFAULT 'once',
                parent_task_id TEXT,
                is_generated_from_repeat INTEGER DEFAULT 0,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_start ON tasks(start_time)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_parent ON tasks(parent_task_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")

        conn.commit()
        return conn

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> TaskRecord:
        return TaskRecord.from_dict(dict(row))

    def fetch(
        self, task_filter: TaskFilter | None = None, sort: TaskSort = TaskSort.START_TIME_ASC
    ) -> list[TaskRecord]:
        task_filter = task_filter or TaskFilter()

        query = "SELECT * FROM tasks WHERE 1=1"
        params: list[Any] = []

        if task_filter.started_after is not None:
            query += " AND start_time >= ?"
            params.append(task_filter.started_after.isoformat())

        if not task_filter.include_generated:
            query += " AND is_generated_from_repeat = 0"

        direction = "DESC" if sort is TaskSort.START_TIME_DESC else "ASC"
        query += f" ORDER BY start_time {direction}"

        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [self._row_to_task(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def save(self, task: TaskRecord) -> bool:
        data = task.to_dict()
        columns = list(data.keys())
        placeholders = ", ".join("?" for _ in columns)
        values = [int(v) if isinstance(v, bool) else v for v in data.values()]

        conn = self.get_connection()
        try:
            conn.execute(
                f"INSERT OR REPLACE INTO tasks ({', '.join(columns)}) VALUES ({placeholders})",
                values,
            )
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to save task {task.id}: {e}")
            return False
        finally:
            conn.close()

        return True

    def get(self, task_id: str) -> TaskRecord | None:
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = cursor.fetchone()
        finally:
            conn.close()

        return self._row_to_task(row) if row else None

    def children_of(self, task_id: str) -> list[TaskRecord]:
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM tasks WHERE parent_task_id = ? ORDER BY start_time", (task_id,)
            )
            return [self._row_to_task(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def _delete_ids(self, task_ids: list[str]) -> int:
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.executemany("DELETE FROM tasks WHERE id = ?", [(tid,) for tid in task_ids])
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()


def parse_duration(duration_str: str) -> timedelta | None:
    """Parse duration string like '24h', '7d', '30m' into timedelta."""
    match = re.match(r"^(\d+)([mhdw])$", duration_str.lower())
    if not match:
        return None

    value = int(match.group(1))
    unit = match.group(2)

    if unit == "m":
        return timedelta(minutes=value)
    elif unit == "h":
        return timedelta(hours=value)
    elif unit == "d":
        return timedelta(days=value)
    elif unit == "w":
        return timedelta(weeks=value)

    return None


def main():
    parser = argparse.ArgumentParser(
        description="Task Repository - inspect and edit stored task records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--action", required=True, choices=["add", "list", "get", "delete"], help="Action to perform"
    )
    parser.add_argument("--db", help="Path to the tasks database")
    parser.add_argument("--task-id", help="Task ID")
    parser.add_argument("--title", help="Task title")
    parser.add_argument("--start", help="Start time (ISO-8601)")
    parser.add_argument("--duration", type=int, help="Planned duration in minutes")
    parser.add_argument("--type", choices=TASK_TYPES, help="Task type")
    parser.add_argument("--repeat", choices=REPEAT_RULES, default="once")
    parser.add_argument("--status", choices=TASK_STATUSES, help="Status filter for list")
    parser.add_argument("--parent-id", help="Parent task ID")
    parser.add_argument("--since", help="Lookback duration for list (e.g., 7d)")

    args = parser.parse_args()
    setup_logging()

    repository = SQLiteTaskRepository(args.db) if args.db else SQLiteTaskRepository()
    result: dict[str, Any]

    if args.action == "add":
        if not args.title or not args.start or not args.duration:
            print(json.dumps({"success": False, "error": "--title, --start and --duration required"}))
            sys.exit(1)
        try:
            task = TaskRecord(
                title=args.title,
                start_time=datetime.fromisoformat(args.start),
                duration_minutes=args.duration,
                task_type=TaskType.from_raw(args.type),
                repeat_rule=RepeatRule.from_raw(args.repeat),
                parent_task_id=args.parent_id,
                status=TaskStatus.SCHEDULED,
            )
        except ValueError as e:
            print(json.dumps({"success": False, "error": str(e)}))
            sys.exit(1)
        saved = repository.save(task)
        result = {"success": saved, "data": task.to_dict()}

    elif args.action == "list":
        task_filter = TaskFilter()
        if args.since:
            lookback = parse_duration(args.since)
            if lookback is None:
                print(json.dumps({"success": False, "error": f"Invalid --since: {args.since}"}))
                sys.exit(1)
            task_filter = TaskFilter(started_after=datetime.now() - lookback)
        tasks = repository.fetch(task_filter, TaskSort.START_TIME_DESC)
        if args.status:
            tasks = [t for t in tasks if t.status.value == args.status]
        result = {"success": True, "data": [t.to_dict() for t in tasks], "count": len(tasks)}

    elif args.action == "get":
        if not args.task_id:
            print(json.dumps({"success": False, "error": "--task-id required"}))
            sys.exit(1)
        task = repository.get(args.task_id)
        if task is None:
            result = {"success": False, "error": f"Task {args.task_id} not found"}
        else:
            result = {
                "success": True,
                "data": task.to_dict(),
                "root_parent_id": repository.root_parent(task).id,
                "is_parent": repository.is_parent_task(task),
            }

    else:
        if not args.task_id:
            print(json.dumps({"success": False, "error": "--task-id required"}))
            sys.exit(1)
        removed = repository.delete(args.task_id)
        result = {"success": removed > 0, "removed": removed}
        if not removed:
            result["error"] = f"Task {args.task_id} not found"

    print(json.dumps(result, indent=2, default=str))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
