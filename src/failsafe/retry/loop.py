"""
Retry loop: invokes the protected operation until the engine says stop.

Each execute() call owns a fresh attempt counter. On failure the loop asks
the ResolutionEngine for an outcome and:

    - CONTINUE: invokes the operation again
    - STOP: returns normally, failure absorbed, success callback skipped
    - PROPAGATE (or no handler matched): raises PropagatedFailure

The finally callback wraps the whole loop and runs on every exit path.

Usage:
    loop = RetryLoop(operation, handlers, on_finally=release)
    report = loop.execute()
"""

from typing import Any, Callable, Iterable, Optional

import structlog

from failsafe.config import Settings, settings as default_settings
from failsafe.exceptions import ConfigurationError, PropagatedFailure, describe_failure
from failsafe.models.chain import Handler
from failsafe.models.enums import Outcome
from failsafe.monitoring.metrics import attempts_total, executions_total
from failsafe.retry.engine import ResolutionEngine
from failsafe.retry.metadata import ExecutionReport

logger = structlog.get_logger(__name__)


class RetryLoop:
    """
    Runs a protected operation under a frozen set of handlers.

    The loop is synchronous: the operation, modifiers and callbacks all run
    on the caller's thread. The handler table is frozen on construction;
    independent loops share no mutable state and may run concurrently.

    Attributes:
        operation: Zero-argument fallible callable (None is a configuration error)
        engine: ResolutionEngine built from the handlers
        on_success: Runs once when the operation itself succeeded
        on_finally: Runs once on every exit path
        settings: Library settings
    """

    def __init__(
        self,
        operation: Optional[Callable[[], Any]],
        handlers: Iterable[Handler] = (),
        on_success: Optional[Callable[[], Any]] = None,
        on_finally: Optional[Callable[[], Any]] = None,
        settings: Optional[Settings] = None,
    ):
        self.operation = operation
        self.settings = settings or default_settings
        self.engine = ResolutionEngine(handlers, self.settings)
        self.on_success = on_success
        self.on_finally = on_finally

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return self.engine.handlers

    def execute(self) -> ExecutionReport:
        """
        Run the protected operation with retry/resolution.

        Returns:
            ExecutionReport for a success or an absorbed failure

        Raises:
            ConfigurationError: No protected operation configured
            PropagatedFailure: A failure was unhandled or a handler re-raised it
        """
        if self.operation is None:
            raise ConfigurationError(
                "No protected operation provided. Configure one before calling execute()."
            )

        try:
            report = self._run_with_handlers(self.operation)
            if report.succeeded and self.on_success is not None:
                self.on_success()
            return report
        finally:
            if self.on_finally is not None:
                self.on_finally()

    def _run_with_handlers(self, operation: Callable[[], Any]) -> ExecutionReport:
        attempt = 0
        failure_count = 0
        last_failure: Optional[BaseException] = None

        while True:
            attempt += 1
            if self.settings.METRICS_ENABLED:
                attempts_total.inc()

            try:
                operation()
            except Exception as failure:
                failure_count += 1
                last_failure = failure
                logger.info(
                    "attempt_failed",
                    attempt=attempt,
                    error_type=type(failure).__name__,
                    error=describe_failure(failure),
                )

                resolution = self.engine.resolve(failure, attempt)

                if resolution.outcome is Outcome.PROPAGATE:
                    logger.error(
                        "failure_propagated",
                        attempt=attempt,
                        error_type=type(failure).__name__,
                        handled=resolution.handled,
                    )
                    self._record("propagated")
                    raise PropagatedFailure(failure, attempt) from failure

                if resolution.outcome is Outcome.STOP:
                    logger.info("failure_absorbed", attempt=attempt, error_type=type(failure).__name__)
                    self._record("absorbed")
                    return ExecutionReport(
                        attempts=attempt,
                        succeeded=False,
                        outcome=Outcome.STOP,
                        failure_count=failure_count,
                        last_failure=last_failure,
                    )

                logger.debug("retrying", next_attempt=attempt + 1)
                continue

            logger.info("operation_succeeded", attempt=attempt)
            self._record("succeeded")
            return ExecutionReport(
                attempts=attempt,
                succeeded=True,
                failure_count=failure_count,
                last_failure=last_failure,
            )

    def _record(self, result: str) -> None:
        if self.settings.METRICS_ENABLED:
            executions_total.labels(result=result).inc()
