"""Plugin callbacks -- ordering, loading, and lifecycle dispatch.

This package lets plugins hook into a host controller's lifecycle. Each
plugin may ship a ``<PluginName>Callback`` class; the
:class:`CallbackDispatcher` finds those classes, orders them by the
configured priority, and calls their hooks at every lifecycle point.

Key classes:

* :class:`Callback` -- Base class with a no-op hook per lifecycle event.
* :class:`CallbackDispatcher` -- Builds the ordered callback list and
  dispatches lifecycle events to it.
* :class:`InstanceRegistry` -- Shared identifier -> instance cache.
* :class:`FactoryLoader`, :class:`DirectoryLoader`, :class:`PackageLoader`,
  :class:`EntryPointLoader`, :class:`ChainLoader` -- Map plugin names to
  callback factories.
* :class:`StaticPluginSource`, :class:`EntryPointPluginSource` -- List the
  installed plugins.

Example:
    Typical usage from a controller::

        from callbackhub.callbacks import CallbackDispatcher, FactoryLoader, StaticPluginSource

        dispatcher = CallbackDispatcher(
            source=StaticPluginSource(["Blog", "Search"]),
            loader=FactoryLoader({"Blog": BlogCallback}),
        )
        dispatcher.initialize(controller)
        dispatcher.startup()
"""

from callbackhub.callbacks.base import Callback
from callbackhub.callbacks.discovery import (
    EntryPointPluginSource,
    PluginSource,
    StaticPluginSource,
)
from callbackhub.callbacks.dispatcher import (
    CallbackDispatcher,
    PlannedCallback,
    effective_priority,
)
from callbackhub.callbacks.loader import (
    CallbackLoader,
    ChainLoader,
    DirectoryLoader,
    EntryPointLoader,
    FactoryLoader,
    PackageLoader,
    callback_identifier,
    callback_module,
    underscore,
)
from callbackhub.callbacks.registry import InstanceRegistry

__all__ = [
    "Callback",
    "CallbackDispatcher",
    "CallbackLoader",
    "ChainLoader",
    "DirectoryLoader",
    "EntryPointLoader",
    "EntryPointPluginSource",
    "FactoryLoader",
    "InstanceRegistry",
    "PackageLoader",
    "PlannedCallback",
    "PluginSource",
    "StaticPluginSource",
    "callback_identifier",
    "callback_module",
    "effective_priority",
    "underscore",
]
