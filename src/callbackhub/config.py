"""Where callbackhub keeps its settings, and how the layers combine.

Settings live in three places, from lowest to highest precedence:

1. the user's global file, ``config.json`` in the config directory
   (``$XDG_CONFIG_HOME/callbackhub`` on Linux/BSD, ``~/.callbackhub``
   elsewhere);
2. an optional ``callbackhub.json`` in the working directory, whose
   ``callbacks`` object overrides the global section key by key;
3. ``CALLBACKHUB_*`` environment variables, then explicit CLI flags.

:func:`resolve_config` folds them into one validated
:class:`~callbackhub.models.GlobalConfig`. Writes go through
:func:`_atomic_write` so a crash never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from callbackhub.exceptions import ConfigError
from callbackhub.models import GlobalConfig

_APP_NAME = "callbackhub"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "callbackhub.json"

ENV_PRIORITY = "CALLBACKHUB_PRIORITY"
ENV_PLUGINS = "CALLBACKHUB_PLUGINS"
ENV_PLUGINS_DIR = "CALLBACKHUB_PLUGINS_DIR"

# kind -> (XDG variable, default below $HOME, sub-dir of ~/.callbackhub)
_DIR_KINDS: dict[str, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), ()),
    "data": ("XDG_DATA_HOME", (".local", "share"), ("logs",)),
}


# --- Directories ---


def _is_xdg_platform() -> bool:
    """True on Linux and the BSDs."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, xdg_default, fallback = _DIR_KINDS[kind]
    if _is_xdg_platform():
        base = Path(os.environ.get(env_var) or Path.home().joinpath(*xdg_default))
        path = base / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``; created on first use.

    ``$XDG_CONFIG_HOME/callbackhub`` (default ``~/.config/callbackhub``) on
    Linux/BSD, ``~/.callbackhub`` on macOS and Windows.
    """
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory for crash logs; created on first use.

    ``$XDG_DATA_HOME/callbackhub`` (default ``~/.local/share/callbackhub``)
    on Linux/BSD, ``~/.callbackhub/logs`` on macOS and Windows.
    """
    return _app_dir("data")


# --- File I/O ---


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* via a sibling temp file and ``os.replace``.

    The original file is untouched if anything fails, and the temp file is
    removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(handle.name, path)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read the user's global config, or defaults when there is none.

    Raises:
        ConfigError: The file is not valid JSON or does not match
            :class:`~callbackhub.models.GlobalConfig`.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    payload = json.dumps(config.model_dump(mode="json"), indent=2)
    _atomic_write(_global_config_path(), payload + "\n")


# --- Project config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./callbackhub.json`` if present.

    Raises:
        ConfigError: The file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Layering ---


def _split_names(value: str) -> list[str]:
    """``"Blog, Search,"`` -> ``["Blog", "Search"]``."""
    return [part.strip() for part in value.split(",") if part.strip()]


def _apply_env(callbacks: dict[str, Any]) -> None:
    for var, key in ((ENV_PRIORITY, "priority"), (ENV_PLUGINS, "plugins")):
        value = os.environ.get(var)
        if value:
            callbacks[key] = _split_names(value)
    plugins_dir = os.environ.get(ENV_PLUGINS_DIR)
    if plugins_dir:
        callbacks["plugins_dir"] = plugins_dir


def resolve_config(
    cli_priority: Optional[list[str]] = None,
    cli_plugins: Optional[list[str]] = None,
    cli_plugins_dir: Optional[str] = None,
    cli_package: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Merge every config layer into the effective settings.

    Order, lowest first: defaults, global file, project file, environment
    (``CALLBACKHUB_PRIORITY``, ``CALLBACKHUB_PLUGINS``,
    ``CALLBACKHUB_PLUGINS_DIR``; lists are comma-separated), CLI flags. An
    empty CLI list means the flag was not given.

    Raises:
        ConfigError: A layer is malformed or the merged result is invalid.
    """
    data = load_global_config().model_dump(mode="json")
    callbacks = data["callbacks"]

    project = load_project_config()
    if project is not None:
        section = project.get("callbacks", {})
        if not isinstance(section, dict):
            raise ConfigError("Project config 'callbacks' must be a JSON object")
        callbacks.update(section)

    _apply_env(callbacks)

    overrides = {
        "priority": list(cli_priority or []) or None,
        "plugins": list(cli_plugins or []) or None,
        "plugins_dir": cli_plugins_dir,
        "package": cli_package,
    }
    callbacks.update({key: value for key, value in overrides.items() if value is not None})
    if cli_format is not None:
        data["output"]["format"] = cli_format

    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
