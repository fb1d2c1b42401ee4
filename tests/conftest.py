"""Shared test fixtures and configuration for all tests.

This conftest.py provides settings and helpers used across unit tests.
"""

from typing import Callable

import pytest

from failsafe.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with metrics disabled.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.DEFAULT_RETRY_ATTEMPTS = 5
    """
    return Settings(
        APP_NAME="failsafe (test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        DEFAULT_RETRY_ATTEMPTS=3,
        METRICS_ENABLED=False,  # Enable explicitly in metrics tests
    )


@pytest.fixture
def events() -> list[str]:
    """Ordered record of side effects, appended to by callbacks under test."""
    return []


@pytest.fixture
def always_fail() -> Callable[[BaseException], Callable[[], None]]:
    """Factory fixture for operations that raise on every call.

    Usage:
        def test_something(always_fail):
            operation = always_fail(ValueError("boom"))
            operation.calls  # number of invocations so far
    """

    def _create(failure: BaseException) -> Callable[[], None]:
        def operation() -> None:
            operation.calls += 1
            raise failure

        operation.calls = 0
        return operation

    return _create


@pytest.fixture
def fail_then_succeed() -> Callable[[int, BaseException], Callable[[], str]]:
    """Factory fixture for operations that fail ``n`` times, then return "ok"."""

    def _create(failures: int, failure: BaseException) -> Callable[[], str]:
        def operation() -> str:
            operation.calls += 1
            if operation.calls <= failures:
                raise failure
            return "ok"

        operation.calls = 0
        return operation

    return _create
