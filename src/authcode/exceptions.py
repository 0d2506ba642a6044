"""Exception hierarchy for authcode.

All exceptions inherit from :class:`AuthcodeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`authcode.exit_codes`.
The top-level error handler in :func:`authcode.app.main` catches
``AuthcodeError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    AuthcodeError                (exit 1)
    +-- ConfigError              (exit 2)
    +-- CaptureError
    |   +-- ListenerStartError       (exit 3)
    |   +-- ListenerShutdownError    (exit 3)
    |   +-- CaptureTimeoutError      (exit 4)
    |   +-- AuthorizationDeniedError (exit 5)
    +-- ExchangeError
        +-- TokenTransportError      (exit 6)
        +-- TokenStatusError         (exit 7)
        +-- TokenParseError          (exit 8)
"""

from __future__ import annotations

import copy

from authcode.exit_codes import (
    EXIT_AUTH_DENIED,
    EXIT_BAD_RESPONSE,
    EXIT_CAPTURE_TIMEOUT,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LISTENER_ERROR,
    EXIT_TOKEN_REJECTED,
)


class AuthcodeError(Exception):
    """Base exception for all authcode errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`authcode.exit_codes`. The entry point catches
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

    def with_context(self, context: str) -> AuthcodeError:
        """Return a copy of this error whose message is prefixed with *context*.

        The copy keeps the concrete class, the exit code, and any extra
        attributes (such as :attr:`TokenStatusError.status_code`), so callers
        can still dispatch on the failure kind after a stage adds context.

        Args:
            context: Short description of the failing stage, for example
                ``"failed to get code"``.

        Returns:
            A new exception of the same type. Raise it ``from`` the original.
        """
        wrapped = copy.copy(self)
        wrapped.args = (f"{context}: {self}",)
        return wrapped


class ConfigError(AuthcodeError):
    """Raised for configuration problems (missing file, invalid JSON, empty fields)."""

    exit_code = EXIT_INVALID_USAGE


# --- Code capture ---


class CaptureError(AuthcodeError):
    """Base class for failures while waiting for the redirect."""


class ListenerStartError(CaptureError):
    """Raised when the local listener cannot bind, or fails while serving."""

    exit_code = EXIT_LISTENER_ERROR


class ListenerShutdownError(CaptureError):
    """Raised when the listener does not stop within its shutdown deadline.

    Only raised after a successful capture: the code is discarded rather
    than returned while the port may still be held.
    """

    exit_code = EXIT_LISTENER_ERROR


class CaptureTimeoutError(CaptureError):
    """Raised when no redirect with a code arrives within the timeout."""

    exit_code = EXIT_CAPTURE_TIMEOUT


class AuthorizationDeniedError(CaptureError):
    """Raised when the redirect carries an ``error`` parameter instead of a code."""

    exit_code = EXIT_AUTH_DENIED


# --- Token exchange ---


class ExchangeError(AuthcodeError):
    """Base class for failures while trading the code for a token."""


class TokenTransportError(ExchangeError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class TokenStatusError(ExchangeError):
    """Raised when the token endpoint answers with a status other than 200.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status returned by the token endpoint.
        body: The raw response body, kept for diagnosis.
    """

    exit_code = EXIT_TOKEN_REJECTED

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        body: str = "",
        exit_code: int | None = None,
    ):
        super().__init__(message, exit_code)
        self.status_code = status_code
        self.body = body


class TokenParseError(ExchangeError):
    """Raised when a 200 response body is not the expected token JSON."""

    exit_code = EXIT_BAD_RESPONSE
