"""authcode -- one-shot OAuth2 authorization code exchange for CLI apps.

This package opens a short-lived listener on ``localhost`` to catch the
redirect that ends a browser consent flow, then trades the captured code
for an access token at the provider's token endpoint.

Typical usage::

    authcode login --config config.json --open-browser

or from Python::

    from authcode.config import load_config
    from authcode.flow import run_auth_flow

    result = run_auth_flow(load_config())
    print(result.token_type, result.expires_in)

Modules:
    app: Typer application and CLI entry point.
    capture: Local redirect listener that captures the code.
    exchange: Token endpoint request.
    flow: Capture-then-exchange orchestration.
    models: Pydantic models for configuration and token results.
    config: Configuration file discovery and loading.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
