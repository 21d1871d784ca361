"""Callback dispatcher -- ordering, registration, and lifecycle dispatch.

:class:`CallbackDispatcher` is the component a host controller attaches to.
During :meth:`~CallbackDispatcher.initialize` it builds the callback
priority list, resolves one callback per plugin through a
:class:`~callbackhub.callbacks.loader.CallbackLoader`, and registers the
instances in an :class:`~callbackhub.callbacks.registry.InstanceRegistry`.
Afterwards every lifecycle entry point (:meth:`~CallbackDispatcher.startup`,
:meth:`~CallbackDispatcher.before_render`, ...) calls the matching hook on
each callback, in priority order, with the controller as first argument.

The set of callbacks is fixed once ``initialize`` returns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from callbackhub.callbacks.base import Callback
from callbackhub.callbacks.discovery import (
    EntryPointPluginSource,
    PluginSource,
    StaticPluginSource,
)
from callbackhub.callbacks.loader import (
    CallbackLoader,
    ChainLoader,
    DirectoryLoader,
    EntryPointLoader,
    FactoryLoader,
    PackageLoader,
    callback_identifier,
)
from callbackhub.callbacks.registry import CallbackFactory, InstanceRegistry
from callbackhub.exceptions import (
    CallbackError,
    CallbackExecutionError,
    ConfigError,
)
from callbackhub.models import CallbacksConfig, LifecycleEvent

logger = logging.getLogger(__name__)

EventLike = Union[LifecycleEvent, str]
ConfigLike = Union[CallbacksConfig, Mapping[str, Any], None]


def effective_priority(priority: Iterable[str], discovered: Iterable[str]) -> list[str]:
    """Merge a configured priority list with the discovered plugin names.

    Names from *priority* come first in their given order, followed by
    discovered names not already listed, in discovery order. Each name
    appears once; the first occurrence wins. An empty *priority* therefore
    yields the discovery order unchanged.
    """
    ordered: list[str] = []
    seen: set[str] = set()
    for name in [*priority, *discovered]:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def _coerce_config(config: ConfigLike) -> CallbacksConfig:
    """Return a private :class:`CallbacksConfig` built from *config*."""
    if config is None:
        return CallbacksConfig()
    if isinstance(config, CallbacksConfig):
        return config.model_copy(deep=True)
    try:
        return CallbacksConfig.model_validate(dict(config))
    except ValueError as exc:
        raise ConfigError(f"Invalid callback settings: {exc}") from exc


def _coerce_event(event: EventLike) -> LifecycleEvent:
    if isinstance(event, LifecycleEvent):
        return event
    try:
        return LifecycleEvent(event)
    except ValueError:
        valid = ", ".join(e.value for e in LifecycleEvent)
        raise CallbackError(
            f"Unknown lifecycle event '{event}' (expected one of: {valid})"
        ) from None


def _checked(identifier: str, factory: CallbackFactory) -> CallbackFactory:
    """Wrap *factory* so that anything but a :class:`Callback` is rejected."""

    def build() -> Callback:
        instance = factory()
        if not isinstance(instance, Callback):
            raise TypeError(
                f"factory for '{identifier}' returned {type(instance).__name__}, not a Callback"
            )
        return instance

    return build


@dataclass(frozen=True)
class PlannedCallback:
    """One entry of a dry-run resolution produced by :meth:`CallbackDispatcher.plan`."""

    name: str
    identifier: str
    factory: Optional[CallbackFactory]

    @property
    def resolvable(self) -> bool:
        return self.factory is not None

    @property
    def events(self) -> list[LifecycleEvent]:
        """Events the callback class overrides; empty when unknown."""
        factory = self.factory
        if isinstance(factory, type) and issubclass(factory, Callback):
            return factory.overridden_events()
        return []


class CallbackDispatcher:
    """Runs plugin callbacks at each controller lifecycle point.

    Args:
        source: Lists the installed plugins in registration order. Defaults
            to an empty :class:`StaticPluginSource`.
        loader: Maps plugin names to callback factories. Defaults to an
            empty :class:`FactoryLoader`.
        registry: Shared-instance cache. When omitted, a private registry is
            created during :meth:`initialize`.

    Example:
        Wiring the dispatcher into a controller::

            dispatcher = CallbackDispatcher(
                source=StaticPluginSource(["Search", "Blog"]),
                loader=FactoryLoader({"Blog": BlogCallback, "Search": SearchCallback}),
            )
            dispatcher.initialize(controller, {"priority": ["Blog"]})
            dispatcher.startup()
            ...
            dispatcher.shutdown()
    """

    def __init__(
        self,
        source: Optional[PluginSource] = None,
        loader: Optional[CallbackLoader] = None,
        registry: Optional[InstanceRegistry] = None,
    ) -> None:
        self._source: PluginSource = source if source is not None else StaticPluginSource()
        self._loader: CallbackLoader = loader if loader is not None else FactoryLoader()
        self._registry = registry
        self._settings = CallbacksConfig()
        self._context: Any = None
        self._resolved: tuple[str, ...] = ()
        self._factories: dict[str, CallbackFactory] = {}
        self._initialized = False

    @classmethod
    def from_config(cls, config: CallbacksConfig) -> CallbackDispatcher:
        """Build a dispatcher whose source and loaders follow *config*.

        Plugins come from ``config.plugins`` when set, otherwise from the
        ``callbackhub.callbacks`` entry points. Callbacks are looked up in
        ``config.plugins_dir``, then ``config.package``, then entry points.
        """
        source: PluginSource
        if config.plugins:
            source = StaticPluginSource(config.plugins)
        else:
            source = EntryPointPluginSource()

        loaders: list[CallbackLoader] = []
        if config.plugins_dir:
            loaders.append(DirectoryLoader(config.plugins_dir))
        if config.package:
            loaders.append(PackageLoader(config.package))
        loaders.append(EntryPointLoader())
        return cls(source=source, loader=ChainLoader(*loaders))

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def settings(self) -> CallbacksConfig:
        """Effective settings; after initialize, ``priority`` holds the merged order."""
        return self._settings

    @property
    def context(self) -> Any:
        return self._context

    @property
    def registry(self) -> Optional[InstanceRegistry]:
        return self._registry

    @property
    def resolved(self) -> tuple[str, ...]:
        """Plugin names whose callbacks were registered, in invocation order."""
        return self._resolved

    @property
    def identifiers(self) -> tuple[str, ...]:
        """Callback identifiers (``<Plugin>Callback``) in invocation order."""
        return tuple(callback_identifier(name) for name in self._resolved)

    @property
    def callbacks(self) -> tuple[Callback, ...]:
        """Live callback instances in invocation order."""
        return tuple(self._instance(identifier) for identifier in self.identifiers)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def plan(self, config: ConfigLike = None) -> list[PlannedCallback]:
        """Compute the callback order for *config* without instantiating anything.

        Every name in the effective priority list is reported, including
        those whose callback cannot be resolved.
        """
        settings = _coerce_config(config)
        order = effective_priority(settings.priority, self._source.list_plugins())
        return [
            PlannedCallback(name, callback_identifier(name), self._resolve(name))
            for name in order
        ]

    def initialize(self, context: Any, config: ConfigLike = None) -> None:
        """Register the callbacks for *context* and run their ``initialize`` hooks.

        Args:
            context: The host controller. It is kept and passed as the first
                argument to every callback hook.
            config: A :class:`~callbackhub.models.CallbacksConfig`, a mapping
                of settings, or ``None`` for defaults. The caller's object is
                not modified.

        Raises:
            CallbackError: If this dispatcher was already initialized.
            ConfigError: If *config* is a mapping that fails validation.
        """
        if self._initialized:
            raise CallbackError("Callback dispatcher is already initialized")

        settings = _coerce_config(config)
        settings.priority = effective_priority(
            settings.priority, self._source.list_plugins()
        )
        if self._registry is None:
            self._registry = InstanceRegistry()

        resolved: list[str] = []
        for name in settings.priority:
            identifier = callback_identifier(name)
            factory = self._resolve(name)
            if factory is None:
                continue
            checked = _checked(identifier, factory)
            try:
                self._registry.init(identifier, checked)
            except Exception as exc:
                logger.warning("Failed to instantiate callback '%s': %s", identifier, exc)
                continue
            self._factories[identifier] = checked
            resolved.append(name)
            logger.info("Registered callback '%s'", identifier)

        self._settings = settings
        self._context = context
        self._resolved = tuple(resolved)
        self._initialized = True

        self.dispatch(LifecycleEvent.INITIALIZE)

    def _resolve(self, name: str) -> Optional[CallbackFactory]:
        try:
            factory = self._loader.resolve(name)
        except Exception as exc:
            logger.warning("Loader failed for plugin '%s': %s", name, exc)
            return None
        if factory is None:
            logger.debug("Plugin '%s' has no callback, skipping", name)
        return factory

    def _instance(self, identifier: str) -> Callback:
        if self._registry is None:
            raise CallbackError("Callback dispatcher is not initialized")
        return self._registry.init(identifier, self._factories[identifier])

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, event: EventLike, *args: Any) -> None:
        """Call the hook for *event* on every registered callback, in order.

        Each hook receives ``(context, *args)``; return values are ignored.
        By default the first exception raised by a hook propagates
        unchanged and the remaining callbacks do not run for this event.
        With ``isolate_errors`` enabled every callback runs and the
        failures are raised together as :class:`CallbackExecutionError`.

        Args:
            event: A :class:`~callbackhub.models.LifecycleEvent` or its
                string value (``"beforeFilter"``).
            *args: Extra arguments forwarded after the context.

        Raises:
            CallbackError: If the dispatcher is not initialized or *event*
                is unknown.
            CallbackExecutionError: In isolation mode, if any hook raised.
        """
        if not self._initialized:
            raise CallbackError("Callback dispatcher is not initialized")
        lifecycle = _coerce_event(event)
        isolate = self._settings.isolate_errors

        failures: list[tuple[str, Exception]] = []
        for identifier in self.identifiers:
            hook = getattr(self._instance(identifier), lifecycle.method_name)
            if not isolate:
                hook(self._context, *args)
                continue
            try:
                hook(self._context, *args)
            except Exception as exc:
                logger.warning(
                    "Callback '%s' failed during '%s': %s", identifier, lifecycle.value, exc
                )
                failures.append((identifier, exc))

        if failures:
            raise CallbackExecutionError(lifecycle.value, failures)

    # ------------------------------------------------------------------
    # Lifecycle entry points
    # ------------------------------------------------------------------

    def startup(self) -> None:
        """Run ``beforeFilter`` hooks; called once the controller's beforeFilter is done."""
        self.dispatch(LifecycleEvent.BEFORE_FILTER)

    before_filter = startup

    def before_render(self) -> None:
        """Run ``beforeRender`` hooks before the view and layout are rendered."""
        self.dispatch(LifecycleEvent.BEFORE_RENDER)

    def shutdown(self) -> None:
        """Run ``shutdown`` hooks before output is sent."""
        self.dispatch(LifecycleEvent.SHUTDOWN)

    def before_redirect(
        self, url: str, status: Optional[str] = None, exit: bool = True
    ) -> None:
        """Run ``beforeRedirect`` hooks with ``(context, url, status, exit)``."""
        self.dispatch(LifecycleEvent.BEFORE_REDIRECT, url, status, exit)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def describe(self) -> list[dict[str, str]]:
        """Describe the registered callbacks, in invocation order.

        Returns:
            One dict per callback with ``"name"``, ``"identifier"``,
            ``"version"``, and ``"events"`` (comma-separated event names
            the callback overrides) keys.
        """
        rows = []
        for name, callback in zip(self._resolved, self.callbacks):
            events = type(callback).overridden_events()
            rows.append(
                {
                    "name": name,
                    "identifier": callback_identifier(name),
                    "version": callback.version,
                    "events": ", ".join(e.value for e in events),
                }
            )
        return rows
