"""Token endpoint request for the authorization code grant.

:func:`exchange_code` sends exactly one form-encoded ``POST`` to the
configured token endpoint and turns the reply into an
:class:`~authcode.models.ExchangeResult`. Three failure kinds are kept
apart so callers (and exit codes) can tell them apart:

- :class:`~authcode.exceptions.TokenTransportError` -- the request never
  completed (DNS, refused connection, timeout).
- :class:`~authcode.exceptions.TokenStatusError` -- the server answered
  with something other than ``200``; the raw body is kept for diagnosis.
- :class:`~authcode.exceptions.TokenParseError` -- a ``200`` whose body is
  not the expected token JSON.

Nothing is retried. A failed exchange means the whole flow has to be
started again, since authorization codes are single use.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError

from authcode.exceptions import TokenParseError, TokenStatusError, TokenTransportError
from authcode.models import AuthFlowConfig, ExchangeResult
from authcode.output import debug

REQUEST_TIMEOUT = 10.0
"""Seconds allowed for the whole token request."""


def build_token_form(config: AuthFlowConfig, code: str) -> dict[str, str]:
    """Return the form fields for an ``authorization_code`` grant."""
    return {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": config.redirect_uri,
        "client_id": config.client_id,
        "client_secret": config.client_secret,
    }


def exchange_code(
    config: AuthFlowConfig,
    code: str,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> ExchangeResult:
    """Exchange an authorization code for an access token.

    Args:
        config: Flow configuration with client credentials, port (for the
            ``redirect_uri``), and ``token_url``.
        code: The authorization code captured from the redirect.
        transport: Optional ``httpx`` transport, used by tests to stand in
            for the token endpoint.

    Returns:
        The parsed token response.

    Raises:
        TokenTransportError: If the request could not be sent or completed.
        TokenStatusError: If the endpoint answered with a non-200 status.
        TokenParseError: If a 200 body is not valid token JSON.
    """
    debug(f"POST {config.token_url}")
    try:
        with httpx.Client(timeout=REQUEST_TIMEOUT, transport=transport) as client:
            response = client.post(
                config.token_url,
                data=build_token_form(config, code),
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
            )
    except httpx.HTTPError as exc:
        raise TokenTransportError(f"failed to send HTTP request: {exc}") from exc

    body = response.text
    debug(f"Token endpoint answered {response.status_code}")

    if response.status_code != httpx.codes.OK:
        raise TokenStatusError(
            f"unexpected status code: {response.status_code}, response body: {body}",
            status_code=response.status_code,
            body=body,
        )

    try:
        return ExchangeResult.model_validate_json(response.content)
    except ValidationError as exc:
        raise TokenParseError(f"failed to parse response: {exc}") from exc
