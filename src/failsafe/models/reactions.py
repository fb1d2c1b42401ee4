"""
Reactions to a matched failure.

This module implements the Strategy Pattern for failure handling. Each
reaction resolves to an :class:`Outcome` given the current attempt number,
and a handler's chain folds those outcomes into one decision.

Reaction Variants:
    1. ContinueRetrying: always asks for another attempt
    2. Suppress: absorbs the failure (can cancel an adjacent PROPAGATE)
    3. Unwind: a compensating step ran, stop here
    4. StopReaction: stop here
    5. PropagateReaction: re-raise the failure
    6. RetryBudget: retry until a limit, then defer to a fallback reaction
"""

from dataclasses import dataclass, field
from typing import ClassVar, Protocol, runtime_checkable

from failsafe.models.enums import Outcome


@runtime_checkable
class Reaction(Protocol):
    """
    Protocol for reactions.

    Each reaction implements a single ``resolve`` method. Reactions are
    immutable and hold no per-execution state, so one instance can be
    shared by any number of chains and executions.
    """

    name: ClassVar[str]

    def resolve(self, attempt: int) -> Outcome:
        """
        Resolve the reaction for the given attempt.

        Args:
            attempt: Current attempt number (1-indexed)

        Returns:
            Outcome to be combined into the chain fold
        """
        ...


@dataclass(frozen=True)
class ContinueRetrying:
    """Always retry. Without a later terminal link this retries forever."""

    name: ClassVar[str] = "continue"

    def resolve(self, attempt: int) -> Outcome:
        return Outcome.CONTINUE


@dataclass(frozen=True)
class Suppress:
    """
    Catch and silently absorb the failure.

    Resolves to SUPPRESSED rather than STOP, which lets it forgive a
    PROPAGATE accumulated by earlier links in the same chain.
    """

    name: ClassVar[str] = "suppress"

    def resolve(self, attempt: int) -> Outcome:
        return Outcome.SUPPRESSED


@dataclass(frozen=True)
class Unwind:
    """Marks that a compensating (undo) step ran; resolves to STOP."""

    name: ClassVar[str] = "unwind"

    def resolve(self, attempt: int) -> Outcome:
        return Outcome.STOP


@dataclass(frozen=True)
class StopReaction:
    name: ClassVar[str] = "stop"

    def resolve(self, attempt: int) -> Outcome:
        return Outcome.STOP


@dataclass(frozen=True)
class PropagateReaction:
    name: ClassVar[str] = "propagate"

    def resolve(self, attempt: int) -> Outcome:
        return Outcome.PROPAGATE


@dataclass(frozen=True)
class RetryBudget:
    """
    Retry while attempts remain, then hand over to a fallback reaction.

    Yields CONTINUE while ``attempt < limit``. From ``attempt >= limit`` on
    the fallback decides, receiving the same attempt number. A ``limit`` of
    zero or less never retries: the fallback resolves on the first attempt.

    Attributes:
        limit: Number of attempts (not re-attempts) this budget allows
        fallback: Reaction used once the budget is spent
    """

    name: ClassVar[str] = "retry"

    limit: int
    fallback: Reaction = field(default_factory=PropagateReaction)

    def resolve(self, attempt: int) -> Outcome:
        if attempt < self.limit:
            return Outcome.CONTINUE
        return self.fallback.resolve(attempt)
