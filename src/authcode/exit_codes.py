"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific failure category and is referenced by the
corresponding :class:`~authcode.exceptions.AuthcodeError` subclass.
Shell wrappers can inspect the exit code to tell a timed-out login from a
rejected code without parsing stderr.

Example::

    $ authcode login
    $ echo $?
    4   # EXIT_CAPTURE_TIMEOUT -- no redirect arrived in time
"""

EXIT_SUCCESS = 0
"""The flow completed and a token was obtained."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or the configuration file is missing or invalid."""

EXIT_LISTENER_ERROR = 3
"""The local redirect listener could not start, failed, or could not stop."""

EXIT_CAPTURE_TIMEOUT = 4
"""No redirect carrying a code arrived within the configured timeout."""

EXIT_AUTH_DENIED = 5
"""The authorization server redirected back with an ``error`` instead of a code."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred talking to the token endpoint."""

EXIT_TOKEN_REJECTED = 7
"""The token endpoint answered with a non-200 status."""

EXIT_BAD_RESPONSE = 8
"""The token endpoint answered 200 but the body was not the expected JSON."""
