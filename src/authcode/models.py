"""Pydantic models shared across authcode modules.

Two shapes flow through the package:

* :class:`AuthFlowConfig` -- the user's configuration file, validated once
  by :mod:`authcode.config` before any listener is started.
* :class:`ExchangeResult` -- the token endpoint's success response, built
  once by :func:`authcode.exchange.exchange_code` and handed back to the
  caller unchanged.

Both ignore unknown keys so that extra fields in a config file or in a
provider's token response do not break validation.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TOKEN_URL = "https://discord.com/api/oauth2/token"
DEFAULT_AUTHORIZE_URL = "https://discord.com/oauth2/authorize"


class AuthFlowConfig(BaseModel):
    """Settings for one authorization code exchange.

    The four required fields mirror the on-disk ``config.json``; the rest
    have defaults targeting Discord's OAuth2 endpoints.

    Example::

        AuthFlowConfig(
            client_id="1234",
            client_secret="s3cret",
            localhost_port=8080,
            timeout_time=60,
        )
    """

    model_config = ConfigDict(extra="ignore")

    client_id: str = Field(min_length=1, description="OAuth2 client identifier")
    client_secret: str = Field(min_length=1, description="OAuth2 client secret")
    localhost_port: int = Field(
        gt=0, le=65535, description="Port the redirect listener binds on localhost"
    )
    timeout_time: int = Field(
        gt=0, description="Seconds to wait for the redirect before giving up"
    )
    token_url: str = Field(default=DEFAULT_TOKEN_URL, min_length=1)
    authorize_url: str = Field(default=DEFAULT_AUTHORIZE_URL, min_length=1)
    scopes: list[str] = Field(default_factory=lambda: ["identify"])

    @property
    def redirect_uri(self) -> str:
        """The redirect URI registered with the provider for this port."""
        return f"http://localhost:{self.localhost_port}"


class ExchangeResult(BaseModel):
    """Token endpoint response for a successful code exchange.

    Immutable once constructed. ``token_type`` and ``access_token`` are
    required; providers that omit the remaining fields leave them ``None``.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    token_type: str
    access_token: str
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
