"""Built-in CLI sub-commands for callbackhub.

* :mod:`~callbackhub.commands.inspect` -- show the resolved callback order
  and the lifecycle events callbacks can handle.
* :mod:`~callbackhub.commands.config` -- view and modify global settings.

Each module exports a :class:`typer.Typer` sub-application that
:func:`callbackhub.app.main` mounts on the root app.
"""
