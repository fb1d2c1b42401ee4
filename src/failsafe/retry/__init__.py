"""
Failure-resolution engine and retry loop.

When the protected operation fails, the retry loop hands the failure to
the resolution engine, which:

1. **Selects** the first handler whose category matches (registration order)
2. **Folds** the handler's chain links into one Outcome
3. Returns CONTINUE (retry), STOP (absorb) or PROPAGATE (re-raise)

Main Components:
    - RetryLoop: Owns the attempt counter and the success/finally callbacks
    - ResolutionEngine: Handler selection and chain fold
    - Resolution: Selected handler plus folded outcome
    - ExecutionReport: Immutable summary of a completed execution

Usage:
    >>> from failsafe.retry import RetryLoop
    >>> report = RetryLoop(operation, handlers).execute()
"""

from failsafe.retry.engine import Resolution, ResolutionEngine
from failsafe.retry.loop import RetryLoop
from failsafe.retry.metadata import ExecutionReport

__all__ = [
    "RetryLoop",
    "ResolutionEngine",
    "Resolution",
    "ExecutionReport",
]
