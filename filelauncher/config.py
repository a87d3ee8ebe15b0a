"""Persistent JSON config helpers.

Stores the quick-exec preference, the terminal command used for
``Terminal=true`` applications, and the re-resolution depth bound.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

from .launcher import DEFAULT_MAX_RESOLUTION_DEPTH
from .registry import DEFAULT_TERMINAL

APP_NAME = "filelauncher"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored so an unwritable config never breaks a launch.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def load_quick_exec() -> bool:
    """Return the persisted quick-exec preference; non-booleans mean ``False``."""
    value = load_config().get("quick_exec")
    return value if isinstance(value, bool) else False


def save_quick_exec(enabled: bool) -> None:
    config = load_config()
    config["quick_exec"] = bool(enabled)
    save_config(config)


def load_terminal_command() -> str:
    """Load the terminal command prefix, falling back to the default when blank."""
    value = load_config().get("terminal")
    if not isinstance(value, str):
        return DEFAULT_TERMINAL
    stripped = value.strip()
    return stripped if stripped else DEFAULT_TERMINAL


def save_terminal_command(command: str) -> None:
    stripped = str(command).strip()
    if not stripped:
        return
    config = load_config()
    config["terminal"] = stripped
    save_config(config)


def load_max_resolution_depth() -> int:
    """Load the re-resolution bound.

    Booleans, non-integers and values below 1 fall back to the default.
    """
    value = load_config().get("max_resolution_depth")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return DEFAULT_MAX_RESOLUTION_DEPTH
    return value


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "load_config",
    "load_max_resolution_depth",
    "load_quick_exec",
    "load_terminal_command",
    "save_config",
    "save_quick_exec",
    "save_terminal_command",
]
