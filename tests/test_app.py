"""Tests for the authcode CLI commands and entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from authcode import __version__
from authcode.app import app, main
from authcode.exceptions import CaptureTimeoutError, TokenStatusError
from authcode.exit_codes import (
    EXIT_CAPTURE_TIMEOUT,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TOKEN_REJECTED,
)
from authcode.models import ExchangeResult


RESULT = ExchangeResult(
    token_type="Bearer",
    access_token="abc",
    expires_in=604800,
    refresh_token="r1",
    scope="identify",
)


@pytest.fixture
def config_file(isolated_config: Path) -> Path:
    path = isolated_config / "config.json"
    path.write_text(
        json.dumps(
            {
                "client_id": "cid",
                "client_secret": "csecret",
                "localhost_port": "8080",
                "timeout_time": 30,
            }
        ),
        encoding="utf-8",
    )
    return path


class TestLogin:
    def test_success_prints_result_json(self, cli_runner, config_file: Path) -> None:
        with patch("authcode.flow.run_auth_flow", return_value=RESULT) as mock_flow:
            result = cli_runner.invoke(app, ["--json", "--quiet", "login", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == RESULT.model_dump()
        config = mock_flow.call_args.args[0]
        assert config.localhost_port == 8080
        assert mock_flow.call_args.kwargs["open_browser"] is False

    def test_open_browser_flag(self, cli_runner, config_file: Path) -> None:
        with patch("authcode.flow.run_auth_flow", return_value=RESULT) as mock_flow:
            result = cli_runner.invoke(
                app, ["--json", "--quiet", "login", "-c", str(config_file), "--open-browser"]
            )

        assert result.exit_code == 0, result.output
        assert mock_flow.call_args.kwargs["open_browser"] is True

    def test_quiet_still_prints_consent_url(self, cli_runner, config_file: Path) -> None:
        def fake_capture(port, timeout, *, on_ready=None, **kwargs):
            on_ready()
            return "CODE"

        with patch("authcode.flow.capture_code", side_effect=fake_capture), patch(
            "authcode.flow.exchange_code", return_value=RESULT
        ):
            result = cli_runner.invoke(
                app, ["--quiet", "--no-color", "login", "-c", str(config_file)]
            )

        assert result.exit_code == 0, result.output
        assert "Open this URL to authorize: https://discord.com/oauth2/authorize?" in result.output
        assert "Successfully received" not in result.output

    def test_timeout_exit_code(self, cli_runner, config_file: Path) -> None:
        error = CaptureTimeoutError("failed to get code: timed out waiting for code")
        with patch("authcode.flow.run_auth_flow", side_effect=error):
            result = cli_runner.invoke(app, ["--no-color", "login", "-c", str(config_file)])

        assert result.exit_code == EXIT_CAPTURE_TIMEOUT
        assert "timed out waiting for code" in result.output

    def test_rejected_code_exit_code(self, cli_runner, config_file: Path) -> None:
        error = TokenStatusError(
            "failed to exchange code: unexpected status code: 400", status_code=400
        )
        with patch("authcode.flow.run_auth_flow", side_effect=error):
            result = cli_runner.invoke(app, ["login", "-c", str(config_file)])

        assert result.exit_code == EXIT_TOKEN_REJECTED

    def test_missing_config_exit_code(self, cli_runner, isolated_config: Path) -> None:
        with patch("authcode.flow.run_auth_flow") as mock_flow:
            result = cli_runner.invoke(app, ["login"])

        assert result.exit_code == EXIT_INVALID_USAGE
        mock_flow.assert_not_called()


class TestCheckConfig:
    def test_valid(self, cli_runner, config_file: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "check-config", "-c", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "http://localhost:8080" in result.output
        assert "csecret" not in result.output

    def test_invalid(self, cli_runner, isolated_config: Path) -> None:
        path = isolated_config / "bad.json"
        path.write_text('{"client_id": ""}', encoding="utf-8")

        result = cli_runner.invoke(app, ["check-config", "-c", str(path)])
        assert result.exit_code == EXIT_INVALID_USAGE


class TestMain:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_unexpected_error_writes_crash_log(
        self, isolated_config: Path, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("sys.argv", ["authcode", "login", "-c", str(config_file)])
        monkeypatch.setattr("authcode.app._setup_signal_handlers", lambda: None)

        with patch("authcode.flow.run_auth_flow", side_effect=RuntimeError("kaboom")):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == EXIT_GENERIC_FAILURE
        logs = list((isolated_config / "data" / "authcode" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "kaboom" in logs[0].read_text()
