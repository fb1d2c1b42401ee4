"""
Resolution engine: maps a failure to a handler and folds its chain.

This module implements the decision half of failsafe. Given the ordered
handlers, the current failure and the attempt number it:

    1. Selects the first handler (registration order) whose category
       matches the failure, subtype-inclusive
    2. Fires that handler's on_select callback
    3. Folds the handler's chain links into one Outcome, running each
       link's modifier before its reaction and stopping early as soon
       as the running result is CONTINUE

Usage:
    engine = ResolutionEngine(handlers)
    resolution = engine.resolve(failure, attempt=1)
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from failsafe.config import Settings, settings as default_settings
from failsafe.models.chain import Handler
from failsafe.models.enums import Outcome
from failsafe.monitoring.metrics import failures_total

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Decision reached for one failure.

    Attributes:
        handler: Selected handler, or None when no handler matched
        outcome: Folded outcome (PROPAGATE when unhandled)
    """

    handler: Optional[Handler]
    outcome: Outcome

    @property
    def handled(self) -> bool:
        return self.handler is not None


class ResolutionEngine:
    """
    Selects handlers and folds their chains into outcomes.

    The handler list is copied into a tuple on construction and never
    changes afterwards, so one engine can serve any number of sequential
    or concurrent executions.

    Attributes:
        handlers: Handlers in registration order
        settings: Library settings (for METRICS_ENABLED)
    """

    def __init__(self, handlers: Iterable[Handler] = (), settings: Optional[Settings] = None):
        self.handlers: tuple[Handler, ...] = tuple(handlers)
        self.settings = settings or default_settings

    def select(self, failure: BaseException) -> Optional[Handler]:
        """
        Return the first handler matching ``failure``, or None.

        Linear scan in registration order, so specific handlers registered
        before a broad one always win.
        """
        for handler in self.handlers:
            if handler.matches(failure):
                return handler
        return None

    def fold(self, handler: Handler, failure: BaseException, attempt: int) -> Outcome:
        """
        Fold a handler's chain links into one outcome.

        Args:
            handler: Handler whose links are folded
            failure: Failure being handled (passed to consuming modifiers)
            attempt: Current attempt number (1-indexed)

        Returns:
            CONTINUE, STOP or PROPAGATE
        """
        result = Outcome.STOP
        for index, link in enumerate(handler.links):
            if link.modifier is not None:
                link.modifier.apply(failure)

            current = link.reaction.resolve(attempt)
            result = Outcome.combine(result, current)

            logger.debug(
                "chain_link_resolved",
                category=handler.category_name,
                link_index=index,
                reaction=link.reaction.name,
                attempt=attempt,
                current=current.value,
                result=result.value,
            )

            if result is Outcome.CONTINUE:
                return result

        # combine() never yields SUPPRESSED, the STOP seed absorbs it
        return result

    def resolve(self, failure: BaseException, attempt: int) -> Resolution:
        """
        Decide what the retry loop does with ``failure``.

        Raises:
            Whatever a modifier or on_select callback raises; those are
            not classified.
        """
        handler = self.select(failure)
        if handler is None:
            logger.warning(
                "failure_unhandled",
                error_type=type(failure).__name__,
                attempt=attempt,
            )
            self._record(failure, "unhandled")
            return Resolution(handler=None, outcome=Outcome.PROPAGATE)

        logger.info(
            "handler_selected",
            category=handler.category_name,
            error_type=type(failure).__name__,
            attempt=attempt,
            links=len(handler.links),
        )

        if handler.on_select is not None:
            handler.on_select()

        outcome = self.fold(handler, failure, attempt)
        self._record(failure, outcome.value)
        return Resolution(handler=handler, outcome=outcome)

    def _record(self, failure: BaseException, outcome: str) -> None:
        if self.settings.METRICS_ENABLED:
            failures_total.labels(category=type(failure).__name__, outcome=outcome).inc()
