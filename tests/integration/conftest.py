"""
Integration test fixtures for FocusZone.

Provides fixtures specific to integration testing:
- A SQLite-backed repository on a temporary database
- Command-line invocation of the module entry points
"""

import json
import sys

import pytest

from focuszone.tasks.repository import SQLiteTaskRepository


@pytest.fixture
def sqlite_repository(temp_db) -> SQLiteTaskRepository:
    return SQLiteTaskRepository(temp_db)


@pytest.fixture
def run_cli(monkeypatch, capsys):
    """
    Run a module's main() with the given arguments.

    Returns:
        runner(main, *args) -> (exit_code, parsed JSON output)
    """

    def runner(main, *args):
        monkeypatch.setattr(sys, "argv", ["focuszone", *args])
        exit_code = 0
        try:
            main()
        except SystemExit as e:
            exit_code = e.code or 0
        out = capsys.readouterr().out
        return exit_code, json.loads(out)

    return runner
