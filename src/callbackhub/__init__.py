"""callbackhub -- Ordered plugin callbacks for MVC controller lifecycles.

This package lets each installed plugin contribute a ``<PluginName>Callback``
class whose hooks run at fixed points of a controller's lifecycle
(``initialize``, ``beforeFilter``, ``beforeRender``, ``shutdown``,
``beforeRedirect``). Callbacks run in a configurable priority order and share
the controller object, so one plugin can prepare state for the next.

Typical workflow::

    dispatcher = CallbackDispatcher.from_config(resolve_config().callbacks)
    dispatcher.initialize(controller)
    dispatcher.startup()

The ``callbackhub`` command inspects the resolved callback order and manages
the stored configuration.

Modules:
    app: Typer application and CLI entry point.
    callbacks: Callback base class, loaders, registry, and dispatcher.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
