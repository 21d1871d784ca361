"""``callbackhub config`` -- read and edit the user's global settings.

The stored ``callbacks`` section supplies the default priority and plugin
locations for ``callbackhub inspect order`` and for
:meth:`~callbackhub.callbacks.dispatcher.CallbackDispatcher.from_config`.
Project files and environment variables are not touched here.
"""

from __future__ import annotations

from typing import Any

import typer

from callbackhub.config import get_config_dir, load_global_config, save_global_config
from callbackhub.exit_codes import EXIT_INVALID_USAGE
from callbackhub.models import GlobalConfig
from callbackhub.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

_NULLABLE_KEYS = {"plugins_dir", "package"}
_TRUTHY = {"true", "1", "yes"}


def _parent_of(data: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Walk a dotted *key* and return the mapping that holds its last part."""
    *path, leaf = key.split(".")
    node = data
    for part in path:
        child = node.get(part)
        if not isinstance(child, dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        node = child
    if leaf not in node:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    return node, leaf


def _coerce(leaf: str, current: Any, raw: str) -> Any:
    if isinstance(current, bool):
        return raw.lower() in _TRUTHY
    if isinstance(current, list):
        return [part.strip() for part in raw.split(",") if part.strip()]
    if raw == "" and leaf in _NULLABLE_KEYS:
        return None
    return raw


@config_app.command("show")
def config_show() -> None:
    """Print the stored configuration.

    Example::

        callbackhub --json config show
    """
    info(f"Config directory: {get_config_dir()}")
    format_response(load_global_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted key, e.g. 'callbacks.priority'."),
    value: str = typer.Argument(help="New value; lists are comma-separated."),
) -> None:
    """Change one stored setting.

    Booleans accept ``true``/``1``/``yes``, lists take ``A,B,C``, and an
    empty string clears ``plugins_dir`` or ``package``. Unknown keys and
    values that fail validation exit with code 2 and leave the file as is.

    Example::

        callbackhub config set callbacks.priority Blog,Search
        callbackhub config set callbacks.isolate_errors true
    """
    data = load_global_config().model_dump(mode="json")
    parent, leaf = _parent_of(data, key)
    parent[leaf] = _coerce(leaf, parent[leaf], value)

    try:
        updated = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(updated)
    success(f"Set {key} = {parent[leaf]}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Restore the default configuration (asks first unless ``--force``)."""
    force = bool(ctx.obj and ctx.obj.get("force"))
    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
