"""
Enumerations for the failure-resolution data model.

Outcome is a closed set - every reaction resolves to one of these values
and the retry loop decides what to do next from the folded result.
"""

from enum import Enum
from typing import Iterable


class Outcome(str, Enum):
    """
    Result of evaluating a reaction, and of folding a whole handler chain.

    CONTINUE
        Ask the retry loop to invoke the operation again.
    STOP
        Terminate the loop; the failure is absorbed.
    PROPAGATE
        Terminate the loop; the failure is re-raised.
    SUPPRESSED
        A failure was handled and deliberately not escalated. Only ever an
        operand of :meth:`combine`; a completed fold turns it into STOP.
    """

    CONTINUE = "continue"
    STOP = "stop"
    PROPAGATE = "propagate"
    SUPPRESSED = "suppressed"

    @property
    def is_terminal(self) -> bool:
        """True for outcomes that end the retry loop."""
        return self in (Outcome.STOP, Outcome.PROPAGATE)

    @classmethod
    def combine(cls, a: "Outcome", b: "Outcome") -> "Outcome":
        """
        Combine two outcomes, left operand first.

        PROPAGATE wins unless either operand is SUPPRESSED, then CONTINUE
        wins over everything else, otherwise the pair resolves to STOP.
        A SUPPRESSED operand therefore cancels a PROPAGATE it is paired
        with, but only within that single step.
        """
        if a is not cls.SUPPRESSED and b is not cls.SUPPRESSED:
            if a is cls.PROPAGATE or b is cls.PROPAGATE:
                return cls.PROPAGATE
        if a is cls.CONTINUE or b is cls.CONTINUE:
            return cls.CONTINUE
        return cls.STOP

    @classmethod
    def fold(cls, outcomes: Iterable["Outcome"]) -> "Outcome":
        """Left fold of ``outcomes`` through :meth:`combine`, seeded with STOP."""
        result = cls.STOP
        for outcome in outcomes:
            result = cls.combine(result, outcome)
        return result
