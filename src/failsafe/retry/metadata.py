"""
Execution report.

This module defines the ExecutionReport dataclass returned by a completed
execution that did not raise.
"""

from dataclasses import dataclass
from typing import Optional

from failsafe.models.enums import Outcome


@dataclass(frozen=True)
class ExecutionReport:
    """
    Summary of one execute() call that returned normally.

    Only the most recent failure is kept; earlier ones (and the frames
    their tracebacks reference) are released as soon as the next attempt
    starts, so a long retry run holds constant memory.

    Attributes:
        attempts: Number of times the protected operation was invoked
        succeeded: True if the last attempt completed without failing
        outcome: None on success, STOP when the last failure was absorbed
        failure_count: Number of attempts that raised
        last_failure: Most recent failure raised by the operation, if any
    """

    attempts: int
    succeeded: bool
    outcome: Optional[Outcome] = None
    failure_count: int = 0
    last_failure: Optional[BaseException] = None

    def __post_init__(self) -> None:
        """Validate report invariants."""
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")

        if self.succeeded:
            if self.outcome is not None:
                raise ValueError("a successful execution has no outcome")
            expected_failures = self.attempts - 1
        else:
            if self.outcome is not Outcome.STOP:
                raise ValueError(
                    f"an absorbed execution must end in STOP, got {self.outcome!r}"
                )
            expected_failures = self.attempts

        if self.failure_count != expected_failures:
            raise ValueError(
                f"expected {expected_failures} failures for {self.attempts} attempts, "
                f"got {self.failure_count}"
            )

        if (self.last_failure is None) != (self.failure_count == 0):
            raise ValueError("last_failure must be set exactly when failure_count > 0")
