"""Configuration discovery and loading.

The flow needs four settings (client id, client secret, local port, and
timeout), read from a JSON file::

    {
      "client_id": "1234567890",
      "client_secret": "...",
      "localhost_port": "8080",
      "timeout_time": 60
    }

:func:`resolve_config_path` picks the file (highest precedence first):

    1. The ``--config`` CLI option
    2. The ``AUTHCODE_CONFIG`` environment variable
    3. ``./config.json`` in the working directory
    4. ``config.json`` in the user config directory (XDG on Linux/BSD,
       ``~/.authcode/`` elsewhere)

:func:`load_config` parses and validates it into an
:class:`~authcode.models.AuthFlowConfig`. Everything downstream trusts the
result and never re-checks it.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from authcode.exceptions import ConfigError
from authcode.models import AuthFlowConfig

_APP_NAME = "authcode"
_CONFIG_FILENAME = "config.json"
CONFIG_ENV_VAR = "AUTHCODE_CONFIG"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the user configuration directory (not created).

    On Linux/BSD: ``$XDG_CONFIG_HOME/authcode/`` (default ``~/.config/authcode/``).
    On macOS/Windows: ``~/.authcode/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory used for crash logs, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/authcode/`` (default ``~/.local/share/authcode/``).
    On macOS/Windows: ``~/.authcode/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Loading ---


def resolve_config_path(cli_path: Optional[str] = None) -> Path:
    """Return the configuration file to use.

    Args:
        cli_path: Value of the ``--config`` option, if given.

    Returns:
        The first candidate from the precedence chain. An explicit path
        (CLI or environment) is returned even if it does not exist so the
        error names the file the user asked for.

    Raises:
        ConfigError: If no explicit path was given and neither default
            location holds a config file.
    """
    if cli_path:
        return Path(cli_path).expanduser()

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()

    candidates = [Path.cwd() / _CONFIG_FILENAME, get_config_dir() / _CONFIG_FILENAME]
    for candidate in candidates:
        if candidate.is_file():
            return candidate

    searched = ", ".join(str(c) for c in candidates)
    raise ConfigError(
        f"No configuration file found (searched: {searched}). "
        f"Pass --config or set {CONFIG_ENV_VAR}."
    )


def load_config(path: Optional[Path] = None) -> AuthFlowConfig:
    """Load and validate the flow configuration.

    Args:
        path: Config file to read. Defaults to :func:`resolve_config_path`.

    Returns:
        The validated :class:`~authcode.models.AuthFlowConfig`.

    Raises:
        ConfigError: If the file is missing, unreadable, not JSON, or any
            required field is empty or zero.
    """
    if path is None:
        path = resolve_config_path()
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in configuration file {path}: {exc}") from exc

    try:
        return AuthFlowConfig.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "<root>" for err in exc.errors()
        )
        raise ConfigError(
            f"Invalid configuration in {path}: missing or invalid fields: {fields}"
        ) from exc
