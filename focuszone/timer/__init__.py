"""Focus Timer - one active task, counted against its schedule

Philosophy:
    A task planned for 9:00-9:30 that gets started at 9:10 has already
    lost ten minutes. The timer catches up to the real clock instead of
    pretending the full half hour is still available.

Components:
    schedule.py: Pure arithmetic over a task's schedule window
        - minutes_remaining / smart_elapsed_minutes
        - can_resume, late_start_info, effective_remaining_minutes
        - duration and countdown formatting
    session.py: Focus-session collaborator and change-feed types
    engine.py: TaskTimerEngine, the serialized state machine
        scheduled -> inProgress -> paused / completed / scheduled (stop)

Concurrency:
    Every transition and every tick runs on one asyncio event loop and is
    serialized by the engine's lock. Focus-session activation and
    deactivation are fire-and-forget.

Usage:
    engine = TaskTimerEngine(repository, focus_session=MyFocusSession())
    await engine.start(task)
    await engine.pause()
    await engine.resume()
    await engine.complete_task()
"""
