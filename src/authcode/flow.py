"""Capture-then-exchange orchestration.

:func:`run_auth_flow` runs the two stages in order and adds the failing
stage to any error message (``failed to get code: ...`` or
``failed to exchange code: ...``) while keeping the exception class, so
``except CaptureTimeoutError`` still works on the caller's side.
"""

from __future__ import annotations

import threading
import webbrowser
from typing import Optional
from urllib.parse import urlencode

import httpx

from authcode.capture import capture_code
from authcode.exceptions import CaptureError, ExchangeError
from authcode.exchange import exchange_code
from authcode.models import AuthFlowConfig, ExchangeResult
from authcode.output import notice


def build_authorize_url(config: AuthFlowConfig) -> str:
    """Return the consent page URL whose redirect the listener will catch."""
    params: dict[str, str] = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "response_type": "code",
    }
    if config.scopes:
        params["scope"] = " ".join(config.scopes)
    return f"{config.authorize_url}?{urlencode(params)}"


def _announce_consent_url(url: str, open_browser: bool) -> None:
    notice(f"Open this URL to authorize: {url}")
    if open_browser:
        # Opening the browser can block on some platforms.
        threading.Thread(target=webbrowser.open, args=(url,), daemon=True).start()


def run_auth_flow(
    config: AuthFlowConfig,
    *,
    open_browser: bool = False,
    transport: Optional[httpx.BaseTransport] = None,
) -> ExchangeResult:
    """Capture an authorization code and exchange it for a token.

    Args:
        config: Validated flow configuration.
        open_browser: Open the consent page in the default browser once the
            listener is ready. The URL is printed to stderr either way.
        transport: Optional ``httpx`` transport for the token request.

    Returns:
        The token endpoint's parsed response.

    Raises:
        CaptureError: Any capture failure, message prefixed with
            ``failed to get code``.
        ExchangeError: Any exchange failure, message prefixed with
            ``failed to exchange code``.
    """
    consent_url = build_authorize_url(config)
    try:
        code = capture_code(
            config.localhost_port,
            config.timeout_time,
            on_ready=lambda: _announce_consent_url(consent_url, open_browser),
        )
    except CaptureError as exc:
        raise exc.with_context("failed to get code") from exc

    try:
        return exchange_code(config, code, transport=transport)
    except ExchangeError as exc:
        raise exc.with_context("failed to exchange code") from exc
