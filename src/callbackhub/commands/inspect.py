"""Inspect commands -- examine how callbacks will be ordered and dispatched.

Provides the ``callbackhub inspect`` sub-command group. ``order`` resolves
the effective callback priority from the stored configuration plus any CLI
overrides and reports, for each plugin, whether a callback class was found
and which lifecycle events it overrides. Nothing is instantiated or
dispatched. ``events`` lists the lifecycle events themselves.
"""

from __future__ import annotations

from typing import Optional

import typer

from callbackhub.exit_codes import EXIT_INVALID_USAGE
from callbackhub.output import error, info, print_table


inspect_app = typer.Typer(no_args_is_help=True)


@inspect_app.command("order")
def inspect_order(
    plugin: Optional[list[str]] = typer.Option(
        None, "--plugin", help="Installed plugin name (repeatable, in registration order)."
    ),
    priority: Optional[list[str]] = typer.Option(
        None, "--priority", help="Plugin to run first (repeatable, in priority order)."
    ),
    plugins_dir: Optional[str] = typer.Option(
        None, "--plugins-dir", help="Directory with <plugin>/<plugin>_callback.py files."
    ),
    package: Optional[str] = typer.Option(
        None, "--package", help="Package with <plugin>.<plugin>_callback modules."
    ),
    all_plugins: bool = typer.Option(
        False, "--all", help="Also list plugins without a callback."
    ),
) -> None:
    """Show the order in which plugin callbacks will run.

    Example::

        callbackhub inspect order --plugin Search --plugin Blog --priority Blog
        callbackhub --json inspect order --plugins-dir app/plugins
    """
    from callbackhub.callbacks import CallbackDispatcher
    from callbackhub.config import resolve_config

    try:
        config = resolve_config(
            cli_priority=priority,
            cli_plugins=plugin,
            cli_plugins_dir=plugins_dir,
            cli_package=package,
        )
    except Exception as exc:
        error(f"Config error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    dispatcher = CallbackDispatcher.from_config(config.callbacks)
    planned = dispatcher.plan(config.callbacks)
    if not all_plugins:
        planned = [entry for entry in planned if entry.resolvable]

    if not planned:
        info("No plugin callbacks found.")
        return

    headers = ["#", "Plugin", "Callback", "Found", "Events"]
    rows: list[list[str]] = []
    for position, entry in enumerate(planned, start=1):
        rows.append([
            str(position),
            entry.name,
            entry.identifier,
            "yes" if entry.resolvable else "no",
            ", ".join(e.value for e in entry.events) or "-",
        ])

    print_table(headers, rows, title=f"Callback order ({len(rows)})")


@inspect_app.command("events")
def inspect_events() -> None:
    """List the lifecycle events, their callback methods, and extra arguments.

    Example::

        callbackhub inspect events
    """
    from callbackhub.models import LifecycleEvent

    headers = ["Event", "Method", "Arguments"]
    rows = [
        [event.value, event.method_name, ", ".join(("context", *event.extra_args))]
        for event in LifecycleEvent
    ]
    print_table(headers, rows, title="Lifecycle events")
