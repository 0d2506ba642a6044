"""Typer application and CLI entry point for authcode.

Commands:

* ``authcode login`` -- run the capture-then-exchange flow and print the
  token response.
* ``authcode check-config`` -- validate the configuration file without
  opening a listener.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the Typer app,
and maps :class:`~authcode.exceptions.AuthcodeError` to its exit code.
Anything else is written to a crash log under the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from authcode import __version__
from authcode.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="authcode",
    help="Run a one-shot OAuth2 authorization code exchange.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"authcode {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~authcode.output.OutputManager` built from
    the output flags.
    """
    from authcode.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )


@app.command("login")
def login_command(
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to the JSON configuration file."
    ),
    open_browser: bool = typer.Option(
        False, "--open-browser", "-b", help="Open the consent page in the default browser."
    ),
) -> None:
    """Capture an authorization code and exchange it for an access token.

    Failures are reported on stderr and the command exits with the
    failure's code from :mod:`authcode.exit_codes`.
    """
    from authcode.config import load_config, resolve_config_path
    from authcode.exceptions import AuthcodeError
    from authcode.flow import run_auth_flow
    from authcode.output import debug, error, format_response, info

    try:
        path = resolve_config_path(config_path)
        debug(f"Using configuration file {path}")
        config = load_config(path)

        info(f"Waiting up to {config.timeout_time}s for the redirect to {config.redirect_uri}")
        result = run_auth_flow(config, open_browser=open_browser)
    except AuthcodeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Successfully received server response. Token type: {result.token_type}")
    format_response(result.model_dump())


@app.command("check-config")
def check_config_command(
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to the JSON configuration file."
    ),
) -> None:
    """Validate the configuration file without starting a listener."""
    from authcode.config import load_config, resolve_config_path
    from authcode.exceptions import ConfigError
    from authcode.output import error, info, success

    try:
        path = resolve_config_path(config_path)
        config = load_config(path)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Configuration OK: {path}")
    info(f"  client_id:    {config.client_id}")
    info(f"  redirect_uri: {config.redirect_uri}")
    info(f"  timeout:      {config.timeout_time}s")
    info(f"  token_url:    {config.token_url}")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from authcode.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``authcode`` console script.

    :class:`~authcode.exceptions.AuthcodeError` instances cause a clean exit
    with the error's ``exit_code``. All other exceptions produce a crash log
    and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from authcode.exceptions import AuthcodeError
        from authcode.output import error

        if isinstance(exc, AuthcodeError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
