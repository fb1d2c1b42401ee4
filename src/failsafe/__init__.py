"""
failsafe: declarative failure classification and resolution.

Classifies failures of a protected operation by exception category and
decides, per category, whether to retry, suppress, unwind or propagate,
with per-attempt side effects interleaved into the decision.

Architecture: fluent builder -> handler table -> retry loop + resolution engine
"""

from failsafe.builder import Failsafe, FailsafeBuilder, OnExceptionBuilder
from failsafe.exceptions import ConfigurationError, FailsafeError, PropagatedFailure
from failsafe.models import (
    ChainLink,
    ContinueRetrying,
    Handler,
    Modifier,
    Outcome,
    PropagateReaction,
    Reaction,
    RetryBudget,
    StopReaction,
    Suppress,
    Unwind,
)
from failsafe.retry import ExecutionReport, Resolution, ResolutionEngine, RetryLoop

__version__ = "0.1.0"

__all__ = [
    "Failsafe",
    "FailsafeBuilder",
    "OnExceptionBuilder",
    "FailsafeError",
    "ConfigurationError",
    "PropagatedFailure",
    "Outcome",
    "Reaction",
    "ContinueRetrying",
    "Suppress",
    "Unwind",
    "StopReaction",
    "PropagateReaction",
    "RetryBudget",
    "Modifier",
    "ChainLink",
    "Handler",
    "RetryLoop",
    "ResolutionEngine",
    "Resolution",
    "ExecutionReport",
]
