"""
Unit tests for the fluent builder.

Covers the end-to-end behaviour of chains configured through
Failsafe / FailsafeBuilder / OnExceptionBuilder.
"""

import pytest

from failsafe.builder import Failsafe, FailsafeBuilder
from failsafe.exceptions import ConfigurationError, PropagatedFailure
from failsafe.models.enums import Outcome
from failsafe.models.reactions import RetryBudget, StopReaction, Suppress, Unwind


# ============================================================================
# Entry Points
# ============================================================================


def test_basic_execution(test_settings):
    """Test a plain run executes the operation once."""
    calls = []

    report = Failsafe.run(lambda: calls.append(1), test_settings).start()

    assert calls == [1]
    assert report.succeeded


def test_run_with_single_value(test_settings):
    """Test run_with passes the value to the consumer."""
    received = []

    Failsafe.run_with(42, received.append, test_settings).start()

    assert received == [42]


def test_iterate_processes_every_value(test_settings):
    """Test iterate runs the consumer for each value in order."""
    processed = []

    Failsafe.iterate(["1", "2", "3"], processed.append, test_settings).start()

    assert processed == ["1", "2", "3"]


def test_iterate_generator_replays_on_retry(test_settings):
    """Test a one-shot generator is replayed in full on each attempt."""
    processed = []
    failed = []

    def consume(value):
        if value == 2 and not failed:
            failed.append(value)
            raise ValueError(value)
        processed.append(value)

    report = (
        Failsafe.iterate((n for n in range(1, 4)), consume, test_settings)
        .on_exception(ValueError)
        .retry(2)
        .start()
    )

    assert report.attempts == 2
    assert processed == [1, 1, 2, 3]


def test_iterate_retry_restarts_traversal(test_settings):
    """Test a retried traversal starts again from the first value."""
    processed = []
    failed = []

    def consume(value):
        if value == "b" and not failed:
            failed.append(value)
            raise ValueError(value)
        processed.append(value)

    Failsafe.iterate(["a", "b", "c"], consume, test_settings).on_exception(ValueError).retry(2).start()

    assert processed == ["a", "a", "b", "c"]


def test_no_operation_provided(test_settings):
    """Test starting a builder with no operation is a configuration error."""
    with pytest.raises(ConfigurationError):
        FailsafeBuilder(test_settings).start()


# ============================================================================
# Callbacks
# ============================================================================


def test_success_callback(test_settings):
    """Test on_success fires once on success."""
    successes = []

    Failsafe.run(lambda: None, test_settings).on_success(lambda: successes.append(1)).start()

    assert successes == [1]


def test_finally_callback(test_settings):
    """Test finally_do fires once on success."""
    finals = []

    Failsafe.run(lambda: None, test_settings).finally_do(lambda: finals.append(1)).start()

    assert finals == [1]


def test_finally_callback_on_exception(test_settings):
    """Test finally_do fires once when the failure is unhandled."""
    finals = []

    def operation():
        raise RuntimeError()

    with pytest.raises(PropagatedFailure):
        Failsafe.run(operation, test_settings).finally_do(lambda: finals.append(1)).start()

    assert finals == [1]


def test_handler_finally_do_fires_on_selection(test_settings):
    """Test the handler-level finally_do fires per selection and returns the parent."""
    selections = []
    attempts = []

    def operation():
        attempts.append(1)
        raise ValueError()

    (
        Failsafe.run(operation, test_settings)
        .on_exception(ValueError)
        .retry(3, after=StopReaction())
        .finally_do(lambda: selections.append(len(attempts)))
        .start()
    )

    assert selections == [1, 2, 3]


# ============================================================================
# Handler Selection
# ============================================================================


def test_specific_exception_handling(test_settings):
    """Test the first matching handler in registration order wins."""
    specific, broad = [], []

    def operation():
        raise KeyError()

    (
        Failsafe.run(operation, test_settings)
        .on_exception(KeyError)
        .modify(lambda: specific.append(1))
        .ignore()
        .on_exception(LookupError)
        .modify(lambda: broad.append(1))
        .ignore()
        .start()
    )

    assert specific == [1]
    assert broad == []


def test_chained_with_different_exception_types(test_settings):
    """Test matching uses the raised exception, not its __cause__."""
    order = []

    def operation():
        try:
            raise KeyError("state")
        except KeyError as e:
            raise ValueError("arg") from e

    (
        Failsafe.run(operation, test_settings)
        .on_exception(ValueError)
        .modify(lambda: order.append("value-handler"))
        .retry(1)
        .ignore()
        .on_exception(KeyError)
        .modify(lambda: order.append("key-handler"))
        .ignore()
        .start()
    )

    assert order == ["value-handler"]


def test_multiple_categories_and_predicate(test_settings):
    """Test on_exception accepts several classes and a predicate."""
    seen = []

    def operation():
        raise TimeoutError("transient")

    (
        Failsafe.run(operation, test_settings)
        .on_exception(ConnectionError, TimeoutError, when=lambda e: "transient" in str(e))
        .modify(seen.append)
        .ignore()
        .start()
    )

    assert len(seen) == 1
    assert isinstance(seen[0], TimeoutError)


def test_unhandled_exception(test_settings):
    """Test a failure outside every handler propagates."""

    def operation():
        raise Exception("Unhandled")

    with pytest.raises(PropagatedFailure):
        Failsafe.run(operation, test_settings).on_exception(ValueError).ignore().start()


# ============================================================================
# Chains
# ============================================================================


def test_retry_mechanism(test_settings):
    """Test retry(3) invokes the operation 3 times, then raises."""
    attempts = []

    def operation():
        attempts.append(1)
        raise RuntimeError("Test exception")

    with pytest.raises(PropagatedFailure):
        Failsafe.run(operation, test_settings).on_exception().retry(3).start()

    assert len(attempts) == 3


def test_retry_defaults_to_configured_attempts(test_settings):
    """Test retry() without a count uses DEFAULT_RETRY_ATTEMPTS."""
    test_settings.DEFAULT_RETRY_ATTEMPTS = 4
    attempts = []

    def operation():
        attempts.append(1)
        raise RuntimeError()

    with pytest.raises(PropagatedFailure):
        Failsafe.run(operation, test_settings).on_exception().retry().start()

    assert len(attempts) == 4


def test_modify_with_consumer(test_settings):
    """Test a one-argument modifier receives the failure."""
    messages = []

    def operation():
        raise ValueError("test message")

    Failsafe.run(operation, test_settings).on_exception(ValueError).modify(lambda e: messages.append(str(e))).ignore().start()

    assert messages == ["test message"]


def test_undo_then_modified_ignore(test_settings):
    """Test undo then a modified ignore runs the modifier once and absorbs."""
    callbacks = []

    def operation():
        raise RuntimeError()

    report = (
        Failsafe.run(operation, test_settings)
        .on_exception()
        .undo()
        .modify(lambda: callbacks.append(1))
        .ignore()
        .start()
    )

    assert callbacks == [1]
    assert report.outcome is Outcome.STOP


def test_chained_retry_then_ignore(test_settings):
    """Test retry(2) then ignore: 2 attempts, ignore modifier once, no raise."""
    retries, ignores = [], []

    def operation():
        raise RuntimeError("test")

    report = (
        Failsafe.run(operation, test_settings)
        .on_exception(RuntimeError)
        .modify(lambda: retries.append(1))
        .retry(2)
        .modify(lambda: ignores.append(1))
        .ignore()
        .start()
    )

    assert len(retries) == 2
    assert len(ignores) == 1
    assert report.attempts == 2


def test_chained_retry_then_undo_then_ignore(test_settings):
    """Test every modifier in retry(1) -> undo -> ignore runs in order."""
    actions = []

    def operation():
        raise RuntimeError("test")

    (
        Failsafe.run(operation, test_settings)
        .on_exception(RuntimeError)
        .modify(lambda: actions.append("retry"))
        .retry(1)
        .modify(lambda: actions.append("undo"))
        .undo()
        .modify(lambda: actions.append("ignore"))
        .ignore()
        .start()
    )

    assert actions == ["retry", "undo", "ignore"]


def test_chained_with_consumer_modifiers(test_settings):
    """Test consuming and nullary modifiers interleave across attempts."""
    messages = []
    attempts = []

    def operation():
        attempts.append(1)
        raise ValueError(f"error {len(attempts)}")

    (
        Failsafe.run(operation, test_settings)
        .on_exception(ValueError)
        .modify(lambda e: messages.append(f"Attempt {len(attempts)}: {e}"))
        .retry(2)
        .modify(lambda: messages.append(f"Giving up after {len(attempts)} attempts"))
        .ignore()
        .start()
    )

    assert messages == [
        "Attempt 1: error 1",
        "Attempt 2: error 2",
        "Giving up after 2 attempts",
    ]


def test_empty_chain_defaults_to_ignore(test_settings):
    """Test a handler with no links absorbs after one attempt."""
    attempts = []
    successes = []

    def operation():
        attempts.append(1)
        raise RuntimeError()

    report = Failsafe.run(operation, test_settings).on_success(lambda: successes.append(1)).on_exception().start()

    assert attempts == [1]
    assert successes == []
    assert report.outcome is Outcome.STOP


def test_modifier_reset_between_links(test_settings):
    """Test a modifier is captured by one link only."""
    modifications = []

    def operation():
        raise RuntimeError()

    (
        Failsafe.run(operation, test_settings)
        .on_exception()
        .modify(lambda: modifications.append("first"))
        .retry(1)
        .ignore()
        .start()
    )

    assert modifications == ["first"]


def test_latest_modify_wins(test_settings):
    """Test calling modify twice before a link keeps only the latest."""
    seen = []

    def operation():
        raise RuntimeError()

    (
        Failsafe.run(operation, test_settings)
        .on_exception()
        .modify(lambda: seen.append("first"))
        .modify(lambda: seen.append("second"))
        .ignore()
        .start()
    )

    assert seen == ["second"]


# ============================================================================
# Handler Construction
# ============================================================================


def test_built_handler_links(test_settings):
    """Test the builder produces the configured reactions in order."""
    loop = (
        Failsafe.run(lambda: None, test_settings)
        .on_exception(ValueError)
        .retry(2, after=StopReaction())
        .undo()
        .ignore()
        .build()
    )

    (handler,) = loop.handlers
    assert [link.reaction for link in handler.links] == [RetryBudget(2, StopReaction()), Unwind(), Suppress()]
    assert handler.links[0].attempt_limit == 2


def test_handlers_registered_in_call_order(test_settings):
    """Test handlers left open are still registered in on_exception order."""
    builder = Failsafe.run(lambda: None, test_settings)
    first = builder.on_exception(KeyError)
    second = builder.on_exception(ValueError)
    second.stop()
    first.propagate()

    handlers = builder.build().handlers

    assert [h.category for h in handlers] == [KeyError, ValueError]


def test_dangling_modifier_is_configuration_error(test_settings):
    """Test a modifier with no following reaction is rejected."""
    builder = Failsafe.run(lambda: None, test_settings).on_exception().modify(lambda: None)

    with pytest.raises(ConfigurationError, match="must be followed by a reaction"):
        builder.start()


def test_finalized_handler_rejects_new_links(test_settings):
    """Test links cannot be added after a handler is finished."""
    builder = Failsafe.run(lambda: None, test_settings)
    handler_builder = builder.on_exception(ValueError)
    handler_builder.and_()

    with pytest.raises(ConfigurationError, match="already finalized"):
        handler_builder.retry(2)


def test_invalid_category_is_configuration_error(test_settings):
    """Test a non-exception category is rejected when the handler is built."""
    with pytest.raises(ConfigurationError):
        Failsafe.run(lambda: None, test_settings).on_exception(int).start()
