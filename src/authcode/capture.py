"""Local redirect listener that captures one OAuth2 authorization code.

:func:`capture_code` binds an :class:`~http.server.HTTPServer` on
``localhost:<port>``, serves it from a daemon thread, and blocks the
caller until the first of three things happens:

1. A redirect carrying ``?code=...`` arrives -- the listener is stopped
   within a short deadline and the code is returned.
2. The listener fails (or the provider redirects back with ``?error=...``)
   -- the listener is stopped and the error is raised.
3. The timeout elapses -- the listener is stopped best effort and
   :class:`~authcode.exceptions.CaptureTimeoutError` is raised.

The handler hands its result to the waiting caller through a
single-assignment :class:`concurrent.futures.Future`. Setting it never
blocks, and a handler call made after the future is resolved (a browser
retry, a second tab) is answered but otherwise dropped.

See Also:
    :func:`authcode.flow.run_auth_flow` for the capture-then-exchange flow.
"""

from __future__ import annotations

import socketserver
import threading
from concurrent.futures import Future, InvalidStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, urlparse

from authcode.exceptions import (
    AuthorizationDeniedError,
    CaptureTimeoutError,
    ListenerShutdownError,
    ListenerStartError,
)
from authcode.output import debug

SHUTDOWN_TIMEOUT = 5.0
"""Seconds allowed for a graceful listener stop, independent of the capture timeout."""

REQUEST_TIMEOUT = 5.0
"""Socket timeout for a single inbound connection."""

NOISE_PATHS = frozenset({"/favicon.ico"})
"""Paths browsers request on their own; these never consume the code slot."""

CONFIRMATION_TEXT = "Code received, you can now close this window."
CLOSED_TEXT = "This login attempt has already ended. Start the login again."


class _CaptureServer(HTTPServer):
    """HTTPServer carrying the delivery future for its handler."""

    def __init__(self, address: tuple[str, int], delivery: Future[str]) -> None:
        self.delivery = delivery
        super().__init__(address, _CallbackHandler)

    def server_bind(self) -> None:
        # Skip the reverse DNS lookup HTTPServer.server_bind performs.
        socketserver.TCPServer.server_bind(self)
        host, port = self.server_address[:2]
        self.server_name = str(host)
        self.server_port = port

    def handle_error(self, request: Any, client_address: Any) -> None:
        debug(f"Error while handling a callback from {client_address[0]}")


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _CaptureServer
    timeout = REQUEST_TIMEOUT

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path in NOISE_PATHS:
            self._respond(204)
            return

        params = parse_qs(parsed.query)
        delivery = self.server.delivery

        if "error" in params:
            reason = params["error"][0]
            description = params.get("error_description", [""])[0]
            message = f"authorization denied: {reason}"
            if description:
                message += f" ({description})"
            self._respond(200, f"Authorization failed: {reason}. You can close this window.")
            _deliver(delivery, AuthorizationDeniedError(message))
        elif "code" in params:
            if delivery.cancelled():
                # The caller gave up waiting; nothing will exchange this code.
                self._respond(200, CLOSED_TEXT)
                debug("Ignoring redirect that arrived after the wait ended")
                return
            self._respond(200, CONFIRMATION_TEXT)
            if not _deliver(delivery, params["code"][0]):
                debug("Ignoring repeated redirect, a code was already captured")
        else:
            self._respond(400, "No authorization code received.")

    def _respond(self, status: int, body: str = "") -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        if payload:
            self.send_header("Content-Type", "text/plain; charset=utf-8")
        if status != 204:
            self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if payload:
            self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:
        debug(f"callback {self.address_string()} {format % args}")


def _deliver(delivery: Future[str], outcome: str | BaseException) -> bool:
    """Resolve *delivery* with *outcome* unless it is already resolved.

    Returns:
        ``True`` if this call resolved the future, ``False`` if an earlier
        outcome (or a cancellation) already won.
    """
    if delivery.done():
        return False
    try:
        if isinstance(outcome, BaseException):
            delivery.set_exception(outcome)
        else:
            delivery.set_result(outcome)
    except InvalidStateError:
        return False
    return True


def _serve(server: _CaptureServer) -> None:
    try:
        server.serve_forever(poll_interval=0.1)
    except Exception as exc:
        _deliver(server.delivery, ListenerStartError(f"server failed: {exc}"))


def _stop_listener(
    server: _CaptureServer, serve_thread: threading.Thread, deadline: float
) -> None:
    """Stop *server* within *deadline* seconds and release its socket.

    Raises:
        ListenerShutdownError: If the serving loop has not exited by the
            deadline. The socket is closed regardless.
    """
    stopped = True
    # shutdown() waits for serve_forever to exit, so only call it while it runs.
    if serve_thread.is_alive():
        stopper = threading.Thread(
            target=server.shutdown, name="authcode-listener-stop", daemon=True
        )
        stopper.start()
        stopper.join(deadline)
        stopped = not stopper.is_alive()
    server.server_close()
    if not stopped:
        raise ListenerShutdownError(
            f"failed to shutdown server: listener did not stop within {deadline:g}s"
        )


def _abandon(
    delivery: Future[str],
    server: _CaptureServer,
    serve_thread: threading.Thread,
    deadline: float,
) -> None:
    """Drop any late delivery and stop the listener, logging a slow stop."""
    delivery.cancel()
    try:
        _stop_listener(server, serve_thread, deadline)
    except ListenerShutdownError as exc:
        debug(str(exc))


def capture_code(
    port: int,
    timeout: float,
    *,
    host: str = "localhost",
    shutdown_timeout: float = SHUTDOWN_TIMEOUT,
    on_ready: Optional[Callable[[], None]] = None,
) -> str:
    """Wait for one redirect on ``host:port`` and return its ``code`` parameter.

    Args:
        port: TCP port to listen on. Must match the registered redirect URI.
        timeout: Seconds to wait for the redirect.
        host: Interface to bind. Defaults to ``localhost``.
        shutdown_timeout: Seconds allowed for stopping the listener once the
            wait is over.
        on_ready: Called once the listener is bound and serving, for example
            to open the consent page in a browser.

    Returns:
        The exact, URL-decoded value of the ``code`` query parameter.

    Raises:
        ListenerStartError: If the port cannot be bound or the listener
            fails while serving.
        AuthorizationDeniedError: If the redirect carries ``error`` instead
            of ``code``.
        CaptureTimeoutError: If nothing arrives within *timeout*.
        ListenerShutdownError: If a code arrived but the listener could not
            be stopped in time.
    """
    delivery: Future[str] = Future()
    try:
        server = _CaptureServer((host, port), delivery)
    except OSError as exc:
        raise ListenerStartError(
            f"server failed: cannot listen on {host}:{port}: {exc}"
        ) from exc

    serve_thread = threading.Thread(
        target=_serve, args=(server,), name="authcode-listener", daemon=True
    )
    serve_thread.start()
    debug(f"Listening for the redirect on http://{host}:{port}")

    try:
        if on_ready is not None:
            on_ready()
        code = delivery.result(timeout=timeout)
    except FutureTimeoutError:
        _abandon(delivery, server, serve_thread, shutdown_timeout)
        raise CaptureTimeoutError(
            f"timed out waiting for code after {timeout:g}s"
        ) from None
    except BaseException:
        _abandon(delivery, server, serve_thread, shutdown_timeout)
        raise

    _stop_listener(server, serve_thread, shutdown_timeout)
    debug("Authorization code captured, listener stopped")
    return code
