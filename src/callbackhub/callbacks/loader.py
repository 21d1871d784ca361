"""Callback loaders -- turn a plugin name into a callback factory.

Every loader implements :class:`CallbackLoader`: given a plugin name it
returns a zero-argument factory producing a
:class:`~callbackhub.callbacks.base.Callback`, or ``None`` when the plugin
has no callback. Loaders never raise for a missing or broken plugin; the
failure is logged and reported as ``None`` so the dispatcher can skip it.

Naming convention used by the convention-based loaders:

* class name -- ``<PluginName>Callback`` (see :func:`callback_identifier`)
* module name -- ``<plugin_name>_callback`` (see :func:`callback_module`)
* location -- inside a per-plugin directory or subpackage named
  ``<plugin_name>``

Available loaders:

* :class:`FactoryLoader` -- explicit name -> factory registration.
* :class:`DirectoryLoader` -- ``<root>/<plugin_name>/<plugin_name>_callback.py``.
* :class:`PackageLoader` -- ``<package>.<plugin_name>.<plugin_name>_callback``.
* :class:`EntryPointLoader` -- the ``callbackhub.callbacks`` entry-point group.
* :class:`ChainLoader` -- first of several loaders that resolves wins.
"""

from __future__ import annotations

import importlib
import importlib.metadata
import importlib.util
import logging
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Mapping, Optional, Protocol

from callbackhub.callbacks.base import CALLBACK_SUFFIX, Callback
from callbackhub.callbacks.registry import CallbackFactory

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "callbackhub.callbacks"
"""The entry-point group name used for callback discovery and loading."""

_CAMEL_BOUNDARY = re.compile(r"(?<=\w)([A-Z])")


# ------------------------------------------------------------------
# Naming convention
# ------------------------------------------------------------------


def underscore(name: str) -> str:
    """Convert a CamelCase plugin name to snake_case (``BlogPosts`` -> ``blog_posts``)."""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def callback_identifier(plugin: str) -> str:
    """Return the callback class name for *plugin* (``Blog`` -> ``BlogCallback``)."""
    return f"{plugin}{CALLBACK_SUFFIX}"


def callback_module(plugin: str) -> str:
    """Return the callback module name for *plugin* (``BlogPosts`` -> ``blog_posts_callback``)."""
    return f"{underscore(plugin)}_callback"


def _callback_class(module: ModuleType, plugin: str) -> Optional[type[Callback]]:
    """Fetch ``<Plugin>Callback`` from *module* if it is a Callback subclass."""
    cls_name = callback_identifier(plugin)
    cls = getattr(module, cls_name, None)
    if cls is None:
        logger.debug("Module '%s' has no class '%s'", module.__name__, cls_name)
        return None
    if not (isinstance(cls, type) and issubclass(cls, Callback)):
        logger.warning(
            "'%s' in module '%s' is not a Callback subclass, skipping",
            cls_name,
            module.__name__,
        )
        return None
    return cls


class CallbackLoader(Protocol):
    """Anything that can map a plugin name to a callback factory."""

    def resolve(self, plugin: str) -> Optional[CallbackFactory]:
        """Return a factory for *plugin*'s callback, or ``None`` if it has none."""
        ...


# ------------------------------------------------------------------
# Loaders
# ------------------------------------------------------------------


class FactoryLoader:
    """Resolve callbacks from an explicit plugin-name -> factory mapping.

    This is the preferred loader for hosts that know their plugins up front:
    the mapping is plain Python and can be type-checked.

    Example::

        loader = FactoryLoader({"Blog": BlogCallback})
        loader.register("Search", SearchCallback)
    """

    def __init__(self, factories: Optional[Mapping[str, CallbackFactory]] = None) -> None:
        self._factories: dict[str, CallbackFactory] = dict(factories or {})

    def register(self, plugin: str, factory: CallbackFactory) -> None:
        """Register (or replace) the factory for *plugin*."""
        self._factories[plugin] = factory

    def resolve(self, plugin: str) -> Optional[CallbackFactory]:
        return self._factories.get(plugin)

    def names(self) -> list[str]:
        """Return registered plugin names in registration order."""
        return list(self._factories)


class DirectoryLoader:
    """Load callbacks from ``<root>/<plugin_name>/<plugin_name>_callback.py``.

    Each file is executed as a standalone module named
    ``callbackhub_plugins.<plugin_name>_callback`` so it does not collide with
    importable packages. Modules are cached per loader and registered in
    ``sys.modules`` so decorators that look up their
    defining module keep working.

    Args:
        root: Directory containing one subdirectory per plugin.
    """

    MODULE_PREFIX = "callbackhub_plugins"

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()
        self._modules: dict[str, ModuleType] = {}

    def path_for(self, plugin: str) -> Path:
        """Return the file the callback for *plugin* is expected in."""
        return self.root / underscore(plugin) / f"{callback_module(plugin)}.py"

    def resolve(self, plugin: str) -> Optional[CallbackFactory]:
        path = self.path_for(plugin)
        if not path.is_file():
            logger.debug("No callback file for plugin '%s' at %s", plugin, path)
            return None

        module = self._modules.get(plugin)
        if module is None:
            module = self._load_module(plugin, path)
            if module is None:
                return None
            self._modules[plugin] = module
        return _callback_class(module, plugin)

    def _load_module(self, plugin: str, path: Path) -> Optional[ModuleType]:
        module_name = f"{self.MODULE_PREFIX}.{callback_module(plugin)}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            logger.warning("Cannot build import spec for %s", path)
            return None
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            sys.modules.pop(module_name, None)
            logger.warning("Failed to load callback file %s: %s", path, exc)
            return None
        return module


class PackageLoader:
    """Load callbacks from ``<package>.<plugin_name>.<plugin_name>_callback``.

    Args:
        package: Dotted name of the package holding one subpackage per plugin.
    """

    def __init__(self, package: str) -> None:
        self.package = package

    def module_for(self, plugin: str) -> str:
        """Return the dotted module name the callback for *plugin* is expected in."""
        return f"{self.package}.{underscore(plugin)}.{callback_module(plugin)}"

    def resolve(self, plugin: str) -> Optional[CallbackFactory]:
        module_name = self.module_for(plugin)
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            logger.debug("No callback module for plugin '%s': %s", plugin, exc)
            return None
        except Exception as exc:
            logger.warning("Failed to import callback module '%s': %s", module_name, exc)
            return None
        return _callback_class(module, plugin)


def select_entry_points(group: str) -> list[Any]:
    """Return the entry points registered under *group*."""
    return list(importlib.metadata.entry_points(group=group))


class EntryPointLoader:
    """Load callbacks registered as Python entry points.

    Third-party packages register a callback by declaring an entry point in
    their ``pyproject.toml``::

        [project.entry-points."callbackhub.callbacks"]
        Blog = "blog_plugin.callback:BlogCallback"

    The entry-point name is the plugin name.
    """

    def __init__(self, group: str = ENTRY_POINT_GROUP) -> None:
        self.group = group

    def resolve(self, plugin: str) -> Optional[CallbackFactory]:
        for ep in select_entry_points(self.group):
            if ep.name != plugin:
                continue
            try:
                obj = ep.load()
            except Exception as exc:
                logger.warning("Failed to load entry point '%s': %s", plugin, exc)
                return None
            if not callable(obj):
                logger.warning("Entry point '%s' is not callable, skipping", plugin)
                return None
            return obj
        logger.debug("No entry point for plugin '%s' in group '%s'", plugin, self.group)
        return None


class ChainLoader:
    """Try several loaders in order; the first one that resolves wins."""

    def __init__(self, *loaders: CallbackLoader) -> None:
        self.loaders = list(loaders)

    def resolve(self, plugin: str) -> Optional[CallbackFactory]:
        for loader in self.loaders:
            factory = loader.resolve(plugin)
            if factory is not None:
                return factory
        return None
