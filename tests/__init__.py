"""FocusZone Test Suite

This package contains all tests for the FocusZone core.

Test organization:
- unit/: Unit tests for individual modules
  - tasks/: Task records and repositories
  - timer/: Schedule arithmetic and the timer engine
  - learning/: Insight models and the insight analyzer
  - test_config_models.py, test_logging_config.py: ambient setup

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/timer/

    # With coverage
    pytest --cov=focuszone --cov-report=term-missing
"""
