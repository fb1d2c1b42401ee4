"""
Exceptions raised by failsafe.

Two kinds of error leave an execution:

- ConfigurationError: the execution was wired incorrectly. Fatal, never
  retried, and raised before the protected operation is touched.
- PropagatedFailure: the protected operation failed and the failure was
  either unhandled or a handler chose to re-raise it. Both cases use the
  same type; the original failure is the ``__cause__``.
"""


class FailsafeError(Exception):
    """
    Base exception for all failsafe errors.

    Catch this to handle anything the library itself raises.
    """


class ConfigurationError(FailsafeError):
    """
    Raised when an execution or handler is configured incorrectly.

    Examples:
    - execute() without a protected operation
    - a handler category that is not an exception class
    - a modifier staged with no reaction following it
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PropagatedFailure(FailsafeError, RuntimeError):
    """
    Raised when a failure of the protected operation escapes the retry loop.

    Always raised ``from`` the original failure so the cause chain stays
    inspectable.

    Attributes:
        failure: The exception raised by the protected operation
        attempt: Attempt number (1-indexed) on which it was raised
    """

    def __init__(self, failure: BaseException, attempt: int) -> None:
        self.failure = failure
        self.attempt = attempt

        super().__init__(
            f"Operation failed on attempt {attempt}: {describe_failure(failure)}"
        )


def describe_failure(failure: BaseException) -> str:
    """
    ``"TypeName: message"`` for logs and messages.

    Never raises: an exception whose ``__str__`` fails is rendered as
    ``"TypeName: <unprintable>"`` so that formatting cannot replace the
    failure being reported.
    """
    try:
        message = str(failure)
    except Exception:
        message = "<unprintable>"
    return f"{type(failure).__name__}: {message}"
