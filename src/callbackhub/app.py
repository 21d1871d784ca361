"""Root Typer application for the ``callbackhub`` command.

:data:`app` carries the global flags; :func:`register_commands` mounts the
``inspect`` and ``config`` groups; :func:`main` is the console script.
Errors derived from :class:`~callbackhub.exceptions.CallbackHubError` end
the process with their own exit code, anything else leaves a traceback in
``<data dir>/logs/crash-<timestamp>.log`` and exits with 1.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import typer

from callbackhub import __version__
from callbackhub.exit_codes import EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from callbackhub.output import OutputFormat


app = typer.Typer(
    name="callbackhub",
    help="Inspect and configure ordered plugin callbacks.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_EXIT_INTERRUPTED = 130


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"callbackhub {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True,
        help="Print the version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Emit tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Never use colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide status messages."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug messages and DEBUG logging."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
) -> None:
    """Install the output manager and logging, then share flags via ``ctx.obj``.

    Without ``--json`` or ``--plain`` the stored ``output.format`` applies.
    """
    from callbackhub.output import OutputManager, set_output

    _configure_logging(verbose)
    flag = "json" if json_output else "plain" if plain_output else None
    set_output(
        OutputManager(
            format=_resolve_format(flag), no_color=no_color, quiet=quiet, verbose=verbose
        )
    )

    ctx.obj = {**(ctx.obj or {}), "force": force, "verbose": verbose}


def _resolve_format(flag: Optional[str]) -> OutputFormat:
    """*flag* if given, else the configured ``output.format``."""
    from callbackhub.config import resolve_config
    from callbackhub.exceptions import ConfigError
    from callbackhub.output import OutputFormat

    try:
        return OutputFormat(resolve_config(cli_format=flag).output.format)
    except ConfigError as exc:
        logger.warning("Ignoring stored output format: %s", exc)
        return OutputFormat(flag or OutputFormat.AUTO)


def _configure_logging(verbose: bool) -> None:
    """Route ``callbackhub.*`` records to stderr; DEBUG when verbose, else WARNING."""
    package_logger = logging.getLogger("callbackhub")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        package_logger.addHandler(handler)


def _on_sigint(signum: int, frame: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(_EXIT_INTERRUPTED)


def _setup_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log() -> Path:
    """Save the traceback being handled and return the file it went to."""
    from callbackhub.config import get_data_dir

    path = get_data_dir() / "logs" / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(traceback.format_exc(), encoding="utf-8")
    return path


def register_commands() -> None:
    """Mount the sub-command groups on :data:`app`; safe to call repeatedly."""
    from callbackhub.commands.config import config_app
    from callbackhub.commands.inspect import inspect_app

    mounted = {group.name for group in app.registered_groups}
    groups = (
        ("inspect", inspect_app, "Inspect callback order and lifecycle events."),
        ("config", config_app, "View and edit the stored configuration."),
    )
    for name, sub_app, help_text in groups:
        if name not in mounted:
            app.add_typer(sub_app, name=name, help=help_text)


def main() -> None:
    """Console-script entry point. Always ends in :class:`SystemExit`."""
    from callbackhub.exceptions import CallbackHubError
    from callbackhub.output import error

    _setup_signal_handlers()
    try:
        register_commands()
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(_EXIT_INTERRUPTED)
    except CallbackHubError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
