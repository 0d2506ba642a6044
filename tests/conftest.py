"""Shared test fixtures for authcode.

Provides free ports for the redirect listener, a ready-made flow
configuration, config-directory isolation, and output state management.
These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import socket
from pathlib import Path

import pytest

from authcode.models import AuthFlowConfig
from authcode.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams and the
    test finishes, the cached references become stale. Resetting forces a
    fresh manager on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Ports and configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def free_port() -> int:
    """A TCP port on localhost that nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def flow_config(free_port: int) -> AuthFlowConfig:
    """A valid flow configuration listening on ``free_port`` with a short timeout."""
    return AuthFlowConfig(
        client_id="client-123",
        client_secret="secret-456",
        localhost_port=free_port,
        timeout_time=5,
        token_url="https://auth.example.com/oauth2/token",
        authorize_url="https://auth.example.com/oauth2/authorize",
    )


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration lookup to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of tmp_path,
    clears AUTHCODE_CONFIG, and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("authcode.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("AUTHCODE_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
