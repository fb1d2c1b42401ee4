"""
Data model for failure resolution: outcomes, reactions, chain links and handlers.
"""

from failsafe.models.chain import ChainLink, FailureCategory, Handler, Modifier
from failsafe.models.enums import Outcome
from failsafe.models.reactions import (
    ContinueRetrying,
    PropagateReaction,
    Reaction,
    RetryBudget,
    StopReaction,
    Suppress,
    Unwind,
)

__all__ = [
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
    "FailureCategory",
]
