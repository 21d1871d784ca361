"""Exception hierarchy for callbackhub.

All exceptions inherit from :class:`CallbackHubError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`callbackhub.exit_codes`.
The top-level error handler in :func:`callbackhub.app.main` catches
``CallbackHubError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    CallbackHubError (exit 1)
    +-- CallbackError            (exit 10)
    +-- CallbackExecutionError   (exit 11)
    +-- ConfigError              (exit 1)

Note that handler failures are *not* wrapped by default: an exception raised
inside a plugin callback propagates unchanged out of
:meth:`~callbackhub.callbacks.dispatcher.CallbackDispatcher.dispatch`.
:class:`CallbackExecutionError` only appears when the dispatcher runs with
``isolate_errors`` enabled.
"""

from __future__ import annotations

from callbackhub.exit_codes import (
    EXIT_CALLBACK_ERROR,
    EXIT_CALLBACK_EXECUTION_ERROR,
    EXIT_GENERIC_FAILURE,
)


class CallbackHubError(Exception):
    """Base exception for all callbackhub errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`callbackhub.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class CallbackError(CallbackHubError):
    """Raised when the dispatcher is misused.

    Covers dispatching an unknown lifecycle event, dispatching before
    :meth:`~callbackhub.callbacks.dispatcher.CallbackDispatcher.initialize`
    has run, and initializing the same dispatcher twice.
    """

    exit_code = EXIT_CALLBACK_ERROR


class CallbackExecutionError(CallbackHubError):
    """Raised after an isolated dispatch in which one or more callbacks failed.

    Every callback still ran; the failures were collected in order.

    Args:
        event: The lifecycle event name that was being dispatched.
        failures: ``(identifier, exception)`` pairs in invocation order.
    """

    exit_code = EXIT_CALLBACK_EXECUTION_ERROR

    def __init__(self, event: str, failures: list[tuple[str, Exception]]):
        names = ", ".join(identifier for identifier, _ in failures)
        super().__init__(
            f"{len(failures)} callback(s) failed during '{event}': {names}"
        )
        self.event = event
        self.failures = list(failures)


class ConfigError(CallbackHubError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
