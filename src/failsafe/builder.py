"""
Fluent configuration surface.

Builds the handler table and callbacks consumed by RetryLoop:

    report = (
        Failsafe.run(sync_inventory)
        .on_exception(TimeoutError)
            .modify(lambda e: log_timeout(e))
            .retry(3)
            .modify(rollback)
            .undo()
            .and_()
        .on_exception(ValueError)
            .ignore()
        .finally_do(close_session)
        .start()
    )

A modifier staged with ``modify`` is captured by the next link appended
and then cleared, so every link carries its own snapshot.
"""

from typing import Any, Callable, Iterable, Optional, TypeVar

from failsafe.config import Settings, settings as default_settings
from failsafe.exceptions import ConfigurationError
from failsafe.models.chain import ChainLink, Handler, Modifier
from failsafe.models.reactions import (
    ContinueRetrying,
    PropagateReaction,
    Reaction,
    RetryBudget,
    StopReaction,
    Suppress,
    Unwind,
)
from failsafe.retry.loop import RetryLoop
from failsafe.retry.metadata import ExecutionReport

T = TypeVar("T")


class Failsafe:
    """Entry points for building a protected execution."""

    @staticmethod
    def run(operation: Callable[[], Any], settings: Optional[Settings] = None) -> "FailsafeBuilder":
        return FailsafeBuilder(settings).run(operation)

    @staticmethod
    def run_with(
        value: T, consumer: Callable[[T], Any], settings: Optional[Settings] = None
    ) -> "FailsafeBuilder":
        """Protect ``consumer(value)``."""
        return FailsafeBuilder(settings).run(lambda: consumer(value))

    @staticmethod
    def iterate(
        values: Iterable[T], consumer: Callable[[T], Any], settings: Optional[Settings] = None
    ) -> "FailsafeBuilder":
        """
        Protect a traversal of ``values``.

        The whole traversal is one protected operation: a retry restarts it
        from the first element. ``values`` is materialized here, so one-shot
        iterators such as generators replay in full on every attempt.
        """
        materialized = tuple(values)

        def traverse() -> None:
            for value in materialized:
                consumer(value)

        return FailsafeBuilder(settings).run(traverse)


class FailsafeBuilder:
    """
    Collects the protected operation, handlers and callbacks.

    Handlers are registered in the order ``on_exception`` is called; that
    order decides which handler wins when categories overlap.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self._operation: Optional[Callable[[], Any]] = None
        self._on_success: Optional[Callable[[], Any]] = None
        self._on_finally: Optional[Callable[[], Any]] = None
        self._handler_builders: list[OnExceptionBuilder] = []

    def run(self, operation: Callable[[], Any]) -> "FailsafeBuilder":
        self._operation = operation
        return self

    def on_exception(
        self,
        *categories: type[BaseException],
        when: Optional[Callable[[BaseException], bool]] = None,
    ) -> "OnExceptionBuilder":
        """
        Start a handler for the given exception classes (``Exception`` if none).

        Args:
            categories: Exception classes this handler covers, subtypes included
            when: Optional extra predicate on the failure
        """
        category = categories if len(categories) > 1 else (categories[0] if categories else Exception)
        handler_builder = OnExceptionBuilder(category, self, when)
        self._handler_builders.append(handler_builder)
        return handler_builder

    def on_success(self, action: Callable[[], Any]) -> "FailsafeBuilder":
        self._on_success = action
        return self

    def finally_do(self, action: Callable[[], Any]) -> "FailsafeBuilder":
        self._on_finally = action
        return self

    def build(self) -> RetryLoop:
        """Finalize all handlers and return the configured RetryLoop."""
        handlers = [handler_builder.finalize() for handler_builder in self._handler_builders]
        return RetryLoop(
            self._operation,
            handlers,
            on_success=self._on_success,
            on_finally=self._on_finally,
            settings=self.settings,
        )

    def start(self) -> ExecutionReport:
        """
        Build and execute.

        Raises:
            ConfigurationError: No operation configured, or a handler is invalid
            PropagatedFailure: The operation's failure escaped the handlers
        """
        return self.build().execute()


class OnExceptionBuilder:
    """
    Builds the chain of one handler.

    Chain methods that append a link (``retry``, ``undo``, ``stop``,
    ``propagate``, ``keep_retrying``) return this builder; ``ignore``,
    ``finally_do`` and ``and_`` finalize the handler and return the parent.
    """

    def __init__(
        self,
        category: Any,
        parent: FailsafeBuilder,
        predicate: Optional[Callable[[BaseException], bool]] = None,
    ):
        self.category = category
        self.parent = parent
        self.predicate = predicate
        self._links: list[ChainLink] = []
        self._staged_modifier: Optional[Modifier] = None
        self._on_select: Optional[Callable[[], Any]] = None
        self._handler: Optional[Handler] = None

    # === Modifiers ===

    def modify(self, modifier: Callable[..., Any]) -> "OnExceptionBuilder":
        """
        Stage a side effect for the next link.

        ``modifier`` may take no arguments or the failure itself. Calling
        modify twice before a link is appended keeps only the latest.
        """
        self._ensure_open()
        self._staged_modifier = Modifier.of(modifier)
        return self

    # === Links ===

    def retry(self, attempts: Optional[int] = None, after: Optional[Reaction] = None) -> "OnExceptionBuilder":
        """
        Retry until ``attempts`` invocations have been made, then apply ``after``.

        Args:
            attempts: Attempt budget (defaults to DEFAULT_RETRY_ATTEMPTS)
            after: Reaction once the budget is spent (defaults to propagate)
        """
        if attempts is None:
            attempts = self.parent.settings.DEFAULT_RETRY_ATTEMPTS
        return self._append(RetryBudget(attempts, after if after is not None else PropagateReaction()))

    def undo(self) -> "OnExceptionBuilder":
        return self._append(Unwind())

    def stop(self) -> "OnExceptionBuilder":
        return self._append(StopReaction())

    def propagate(self) -> "OnExceptionBuilder":
        return self._append(PropagateReaction())

    def keep_retrying(self) -> "OnExceptionBuilder":
        return self._append(ContinueRetrying())

    def ignore(self) -> FailsafeBuilder:
        """Append a suppressing link and finish this handler."""
        self._append(Suppress())
        return self.and_()

    # === Handler lifecycle ===

    def on_select(self, callback: Callable[[], Any]) -> "OnExceptionBuilder":
        """Run ``callback`` each time this handler is selected for a failure."""
        self._ensure_open()
        self._on_select = callback
        return self

    def finally_do(self, callback: Callable[[], Any]) -> FailsafeBuilder:
        """Set the selection callback and finish this handler."""
        self.on_select(callback)
        return self.and_()

    def and_(self) -> FailsafeBuilder:
        self.finalize()
        return self.parent

    def on_exception(
        self,
        *categories: type[BaseException],
        when: Optional[Callable[[BaseException], bool]] = None,
    ) -> "OnExceptionBuilder":
        """Finish this handler and start the next one."""
        return self.and_().on_exception(*categories, when=when)

    def start(self) -> ExecutionReport:
        return self.and_().start()

    def finalize(self) -> Handler:
        """
        Freeze the chain into a Handler. Calling it again returns the same Handler.

        Raises:
            ConfigurationError: A modifier was staged with no link after it
        """
        if self._handler is not None:
            return self._handler

        if self._staged_modifier is not None:
            raise ConfigurationError(
                "modify() must be followed by a reaction (retry, undo, stop, propagate, ignore)",
                {"category": repr(self.category)},
            )

        self._handler = Handler(
            category=self.category,
            links=tuple(self._links),
            on_select=self._on_select,
            predicate=self.predicate,
        )
        return self._handler

    def _append(self, reaction: Reaction) -> "OnExceptionBuilder":
        self._ensure_open()
        self._links.append(ChainLink(reaction, self._staged_modifier))
        self._staged_modifier = None
        return self

    def _ensure_open(self) -> None:
        if self._handler is not None:
            raise ConfigurationError(
                "Handler already finalized; start a new one with on_exception()",
                {"category": repr(self.category)},
            )
