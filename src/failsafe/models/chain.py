"""
Handler and chain link records.

A Handler binds a failure category to an ordered chain of links. Each
ChainLink is an immutable snapshot of an optional side-effecting modifier
and the reaction evaluated right after it. Handlers are built once,
before the first execution, and never mutated afterwards.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Union

from failsafe.exceptions import ConfigurationError
from failsafe.models.reactions import Reaction, RetryBudget, Suppress

FailureCategory = Union[type[BaseException], tuple[type[BaseException], ...]]


def _accepts_failure(fn: Callable[..., Any]) -> bool:
    """Whether ``fn`` can be called with exactly one positional argument."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures are treated as nullary
        return False

    positional = [
        p
        for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    required = [p for p in positional if p.default is p.empty]
    if len(required) == 1:
        return True
    if not required:
        return False
    raise ConfigurationError(
        f"Modifier {fn!r} requires {len(required)} arguments, expected 0 or 1",
        {"modifier": repr(fn), "required_arguments": len(required)},
    )


@dataclass(frozen=True)
class Modifier:
    """
    Side effect run right before a link's reaction is evaluated.

    Attributes:
        fn: The callable to run
        consumes_failure: True if ``fn`` receives the current failure
    """

    fn: Callable[..., Any]
    consumes_failure: bool = False

    @classmethod
    def nullary(cls, fn: Callable[[], Any]) -> "Modifier":
        return cls(fn, consumes_failure=False)

    @classmethod
    def consuming(cls, fn: Callable[[BaseException], Any]) -> "Modifier":
        return cls(fn, consumes_failure=True)

    @classmethod
    def of(cls, fn: Callable[..., Any]) -> "Modifier":
        """
        Build a modifier, detecting from the signature whether ``fn``
        takes the failure.

        Raises:
            ConfigurationError: If ``fn`` requires more than one argument
        """
        return cls(fn, consumes_failure=_accepts_failure(fn))

    def apply(self, failure: BaseException) -> None:
        if self.consumes_failure:
            self.fn(failure)
        else:
            self.fn()


@dataclass(frozen=True)
class ChainLink:
    """One step of a handler chain: optional modifier, then a reaction."""

    reaction: Reaction
    modifier: Optional[Modifier] = None

    @property
    def attempt_limit(self) -> Optional[int]:
        """Attempt budget of a retry link, None for every other reaction."""
        if isinstance(self.reaction, RetryBudget):
            return self.reaction.limit
        return None


def _validate_category(category: Any) -> tuple[type[BaseException], ...]:
    members = category if isinstance(category, tuple) else (category,)
    if not members:
        raise ConfigurationError("Handler category must name at least one exception class")
    for member in members:
        if not (isinstance(member, type) and issubclass(member, BaseException)):
            raise ConfigurationError(
                f"Handler category must be an exception class, got {member!r}",
                {"category": repr(member)},
            )
    return members


@dataclass(frozen=True)
class Handler:
    """
    Failure category bound to an ordered chain of links.

    Matching is subtype-inclusive: a handler for ``LookupError`` matches a
    ``KeyError``. An optional ``predicate`` narrows the match further, e.g.
    on the failure's message or attributes.

    An empty chain is normalized at construction to a single Suppress link,
    so a handler with nothing configured catches and absorbs.

    Attributes:
        category: Exception class, or tuple of classes, this handler covers
        links: Ordered chain links (stored as a tuple)
        on_select: Callback fired each time this handler is selected
        predicate: Extra ``failure -> bool`` test applied after the type check
    """

    category: FailureCategory
    links: Sequence[ChainLink] = field(default_factory=tuple)
    on_select: Optional[Callable[[], Any]] = None
    predicate: Optional[Callable[[BaseException], bool]] = None

    def __post_init__(self) -> None:
        _validate_category(self.category)
        links = tuple(self.links)
        if not links:
            links = (ChainLink(Suppress()),)
        object.__setattr__(self, "links", links)

    @property
    def category_name(self) -> str:
        members = _validate_category(self.category)
        return "|".join(member.__name__ for member in members)

    def matches(self, failure: BaseException) -> bool:
        """Whether this handler covers ``failure``."""
        if not isinstance(failure, self.category):
            return False
        if self.predicate is not None:
            return bool(self.predicate(failure))
        return True
