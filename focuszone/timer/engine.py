"""
Tool: Task Timer Engine
Purpose: Live countdown for the single active task

State machine:
    scheduled --start--> inProgress --pause--> paused --resume--> inProgress
    inProgress --complete / window used up--> completed
    any --stop--> scheduled (engine cleared)

Elapsed time is schedule-anchored. Starting (without reset) or resuming
re-derives the spent minutes from how much of the task's scheduled window
has passed, so the countdown always agrees with the wall clock rather
than with how long the user actually had the timer running.

Serialization:
    Every transition and every tick takes the engine lock and does its
    read-modify-write without awaiting. The tick runs as its own asyncio
    task and exits as soon as it is no longer the engine's current timer.
    The post-completion clear is a call_later handle tagged with a
    generation number, so a start() during the grace window wins.

Failure handling:
    Repository and focus-session failures are logged and swallowed. The
    in-memory state stays authoritative for the running session.

Usage:
    engine = TaskTimerEngine(repository, focus_session=session)
    unsubscribe = engine.subscribe(lambda snapshot: print(snapshot))

    await engine.start(task)
    await engine.pause()
    await engine.resume()
    await engine.complete_task()
    await engine.shutdown()
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable, Coroutine
from datetime import datetime, timedelta
from typing import Any

from focuszone.config_models import TimerSettingsConfig, load_timer_config
from focuszone.logging_config import get_logger, get_task_logger
from focuszone.tasks.models import TaskRecord, TaskStatus
from focuszone.tasks.repository import TaskRepository
from focuszone.timer.schedule import format_clock, smart_elapsed_minutes
from focuszone.timer.session import FocusSession, LoggingFocusSession, SessionPhase, TimerSnapshot

logger = get_logger(__name__)

SnapshotCallback = Callable[[TimerSnapshot], None]


class TaskTimerEngine:
    """Owns the active task's countdown and its status transitions.

    Args:
        repository: Where task records are saved after every transition.
        focus_session: Presentation collaborator. Defaults to logging only.
        config: Timer settings. Loaded from args/timer.yaml when omitted.
        clock: Source of "now". Defaults to datetime.now.
    """

    def __init__(
        self,
        repository: TaskRepository,
        focus_session: FocusSession | None = None,
        config: TimerSettingsConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        config = config or load_timer_config().timer

        self.repository = repository
        self.focus_session = focus_session or LoggingFocusSession()
        self.tick_interval = config.tick_interval_seconds
        self.completion_grace = config.completion_grace_seconds
        self.default_focus_mode = config.default_focus_mode
        self._clock = clock or datetime.now

        # Session state
        self.active_task: TaskRecord | None = None
        self.elapsed_seconds = 0
        self._session_anchor: datetime | None = None
        # Tagged with the active task id while a task is active
        self._log = logger

        self._lock = asyncio.Lock()
        self._tick_task: asyncio.Task | None = None
        self._grace_handle: asyncio.TimerHandle | None = None
        self._generation = 0
        self._background: set[asyncio.Task] = set()
        self._subscribers: list[SnapshotCallback] = []

    # ─────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────

    async def start(self, task: TaskRecord, reset: bool = False) -> None:
        """
        Make task the active task.

        Any task already active is stopped first. Unless reset is set,
        the countdown starts part-way through according to how much of
        the schedule window has passed; a fully used window completes
        the task immediately.
        """
        async with self._lock:
            if self.active_task is not None:
                self._stop_locked()

            now = self._clock()
            already_spent = 0 if reset else smart_elapsed_minutes(task, now)

            task.set_status(TaskStatus.IN_PROGRESS)
            task.actual_start_time = now
            self._save(task)

            self.active_task = task
            self.elapsed_seconds = already_spent * 60
            self._session_anchor = now - timedelta(seconds=self.elapsed_seconds)
            self._log = get_task_logger(__name__, task.id)

            self._log.info(
                f"Starting task '{task.title}' with {already_spent}m already elapsed "
                f"({self.elapsed_seconds}s)"
            )

            remaining = timedelta(minutes=task.duration_minutes - already_spent)
            self._spawn(self.focus_session.activate_session(self._focus_mode_for(task), remaining, task))
            self._emit()

            if self.elapsed_seconds >= task.duration_seconds:
                self._complete_locked(automatic=True)
                return

            self._report_progress(SessionPhase.FOCUS, is_active=True)
            self._start_timer()

    async def pause(self) -> bool:
        """Pause the running task. Returns False (no-op) if nothing is running."""
        async with self._lock:
            task = self.active_task
            if task is None or task.status is not TaskStatus.IN_PROGRESS:
                return False

            self._stop_timer()

            task.set_status(TaskStatus.PAUSED)
            self._save(task)

            self._log.info(f"Paused task '{task.title}' at {self.current_elapsed_minutes}m")

            self._report_progress(SessionPhase.PAUSED, is_active=False)
            self._emit()
            return True

    async def resume(self) -> bool:
        """
        Resume the paused task.

        Elapsed time is re-derived from the schedule window, not carried
        over from the pause. Returns False (no-op) unless a paused task
        is active.
        """
        async with self._lock:
            task = self.active_task
            if task is None or not task.is_paused:
                return False

            now = self._clock()
            task.set_status(TaskStatus.IN_PROGRESS)
            self._save(task)

            already_spent = smart_elapsed_minutes(task, now)
            self.elapsed_seconds = already_spent * 60
            self._session_anchor = now - timedelta(seconds=self.elapsed_seconds)

            self._log.info(f"Resumed task '{task.title}' at {already_spent}m")

            self._report_progress(SessionPhase.FOCUS, is_active=True)
            self._emit()
            self._start_timer()
            return True

    async def complete_task(self) -> bool:
        """Mark the active task completed. Returns False (no-op) if there is none."""
        async with self._lock:
            task = self.active_task
            if task is None or task.status is TaskStatus.COMPLETED:
                return False

            self._complete_locked(automatic=False)
            return True

    async def stop_current_task(self) -> None:
        """Return the active task (if any) to scheduled and clear the engine."""
        async with self._lock:
            self._stop_locked()

    async def tick(self) -> None:
        """Advance the countdown by one second. Normally driven by the internal timer."""
        async with self._lock:
            self._tick_locked()

    async def shutdown(self) -> None:
        """Cancel the timer, the pending clear and wait for outstanding session calls."""
        async with self._lock:
            tick_task = self._tick_task
            self._stop_timer()
            self._cancel_grace_clear()

        if tick_task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await tick_task

        pending = list(self._background)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # ─────────────────────────────────────────────────────────────────────
    # Change feed
    # ─────────────────────────────────────────────────────────────────────

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Register for a TimerSnapshot after every mutation. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def snapshot(self) -> TimerSnapshot:
        task = self.active_task
        return TimerSnapshot(
            active_task_id=task.id if task else None,
            elapsed_seconds=self.elapsed_seconds,
            status=task.status if task else None,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Derived values
    # ─────────────────────────────────────────────────────────────────────

    @property
    def session_anchor(self) -> datetime | None:
        return self._session_anchor

    @property
    def current_elapsed_minutes(self) -> int:
        return self.elapsed_seconds // 60

    @property
    def remaining_seconds_total(self) -> int:
        if self.active_task is None:
            return 0
        return max(0, self.active_task.duration_seconds - self.elapsed_seconds)

    @property
    def current_remaining_minutes(self) -> int:
        return self.remaining_seconds_total // 60

    @property
    def current_remaining_seconds(self) -> int:
        """Seconds part of the remaining time (0-59)."""
        return self.remaining_seconds_total % 60

    @property
    def progress_fraction(self) -> float:
        task = self.active_task
        if task is None:
            return 0.0
        return min(1.0, max(0.0, self.elapsed_seconds / task.duration_seconds))

    @property
    def is_overtime(self) -> bool:
        task = self.active_task
        if task is None:
            return False
        return self.elapsed_seconds > task.duration_seconds

    @property
    def is_timer_running(self) -> bool:
        return self._tick_task is not None and self.active_task is not None and self.active_task.is_active

    @property
    def should_show_overtime(self) -> bool:
        return self.is_overtime and self.active_task is not None and self.active_task.is_active

    @property
    def formatted_elapsed_time(self) -> str:
        return format_clock(self.elapsed_seconds)

    @property
    def formatted_remaining_time(self) -> str:
        if self.active_task is None:
            return "00:00"
        return format_clock(self.remaining_seconds_total)

    @property
    def time_remaining_text(self) -> str:
        task = self.active_task
        if task is None:
            return "No active task"

        if self.is_overtime:
            minutes, seconds = divmod(self.elapsed_seconds - task.duration_seconds, 60)
            if minutes > 0:
                return f"{minutes}m {seconds}s overtime"
            return f"{seconds}s overtime"

        minutes, seconds = divmod(task.duration_seconds - self.elapsed_seconds, 60)
        if minutes > 0:
            return f"{minutes}m {seconds}s remaining"
        if seconds > 0:
            return f"{seconds}s remaining"
        return "Time's up!"

    # ─────────────────────────────────────────────────────────────────────
    # Internals (callers hold the lock)
    # ─────────────────────────────────────────────────────────────────────

    def _tick_locked(self) -> None:
        task = self.active_task
        if task is None or task.status is not TaskStatus.IN_PROGRESS:
            return

        cap = task.duration_seconds

        if self.elapsed_seconds < cap:
            self.elapsed_seconds += 1
            self._log.debug(f"Tick {self.elapsed_seconds}/{cap}s for '{task.title}'")
            self._report_progress(SessionPhase.FOCUS, is_active=True)
            self._emit()

        if self.elapsed_seconds >= cap:
            self.elapsed_seconds = cap
            self._complete_locked(automatic=True)

    def _complete_locked(self, automatic: bool) -> None:
        task = self.active_task
        if task is None:
            return

        self._stop_timer()

        task.set_status(TaskStatus.COMPLETED)
        self._save(task)

        if automatic:
            self._log.info(f"Auto-completed task '{task.title}' after {task.duration_minutes} minutes")
        else:
            self._log.info(f"Completed task '{task.title}' with {self.current_elapsed_minutes}m total time")

        self._report_progress(SessionPhase.COMPLETED, is_active=False)
        self._emit()
        self._schedule_grace_clear()

    def _stop_locked(self) -> None:
        task = self.active_task
        self._stop_timer()
        self._cancel_grace_clear()

        if task is not None:
            # A task still showing its completion is left completed
            if task.status is not TaskStatus.COMPLETED:
                task.set_status(TaskStatus.SCHEDULED)
                self._save(task)
                self._report_progress(SessionPhase.PAUSED, is_active=False)
            self._log.info(f"Stopped task '{task.title}' with {self.current_elapsed_minutes}m total time")

        self._spawn(self.focus_session.deactivate_session())
        self._clear_state()

    def _clear_state(self) -> None:
        self._stop_timer()
        self._cancel_grace_clear()
        self._generation += 1
        self.active_task = None
        self.elapsed_seconds = 0
        self._session_anchor = None
        self._log = logger
        self._emit()

    def _start_timer(self) -> None:
        self._stop_timer()
        self._tick_task = asyncio.get_running_loop().create_task(self._run_timer())

    def _stop_timer(self) -> None:
        tick_task = self._tick_task
        self._tick_task = None
        if tick_task is not None and tick_task is not asyncio.current_task():
            tick_task.cancel()

    async def _run_timer(self) -> None:
        me = asyncio.current_task()
        while True:
            await asyncio.sleep(self.tick_interval)
            async with self._lock:
                if self._tick_task is not me:
                    return
                self._tick_locked()
                if self._tick_task is not me:
                    return

    def _schedule_grace_clear(self) -> None:
        self._cancel_grace_clear()
        generation = self._generation
        loop = asyncio.get_running_loop()
        self._grace_handle = loop.call_later(self.completion_grace, self._clear_after_completion, generation)

    def _cancel_grace_clear(self) -> None:
        if self._grace_handle is not None:
            self._grace_handle.cancel()
            self._grace_handle = None

    def _clear_after_completion(self, generation: int) -> None:
        if generation != self._generation:
            return

        self._grace_handle = None
        if self.active_task is not None:
            self._log.debug(f"Clearing completed task '{self.active_task.title}'")
        self._clear_state()

    def _focus_mode_for(self, task: TaskRecord) -> str:
        return task.task_type.value if task.task_type is not None else self.default_focus_mode

    def _save(self, task: TaskRecord) -> None:
        try:
            if not self.repository.save(task):
                self._log.error(f"Failed to persist task {task.id} ({task.status.value})")
        except Exception as e:
            self._log.error(f"Error persisting task {task.id} ({task.status.value}): {e}")

    def _report_progress(self, phase: SessionPhase, is_active: bool) -> None:
        if phase is SessionPhase.COMPLETED:
            time_remaining = timedelta(0)
            progress = 1.0
        else:
            time_remaining = timedelta(seconds=self.remaining_seconds_total)
            progress = self.progress_fraction

        try:
            self.focus_session.update_progress(time_remaining, progress, phase, is_active)
        except Exception as e:
            self._log.warning(f"Focus session progress update failed: {e}")

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                self._log.warning(f"Timer subscriber failed: {e}")

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error(f"Focus session call failed: {exc}")
