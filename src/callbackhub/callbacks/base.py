"""Base class for plugin callbacks.

A plugin takes part in the controller lifecycle by shipping a subclass of
:class:`Callback` named ``<PluginName>Callback``. Every lifecycle method has a
no-op default, so a callback only overrides the events it cares about and the
dispatcher can call each method unconditionally.

Example:
    Minimal callback for a ``Blog`` plugin::

        class BlogCallback(Callback):
            def on_before_filter(self, context):
                context.helpers.append("BlogHelper")

            def on_before_redirect(self, context, url, status=None, exit=True):
                context.flash = f"Redirecting to {url}"
"""

from __future__ import annotations

from typing import Any, Optional

from callbackhub.models import LifecycleEvent

CALLBACK_SUFFIX = "Callback"


class Callback:
    """Base class for all plugin callbacks.

    The callback lifecycle is:

    1. Instantiation -- the dispatcher calls the no-arg constructor once per
       shared-instance registry.
    2. :meth:`on_initialize` -- called once, right after every callback for
       the controller has been registered.
    3. The remaining hooks -- called whenever the host controller reaches
       the matching lifecycle point.

    Every hook receives the host *context* (the controller) as its first
    argument. It is the same mutable object for every callback and every
    event, so callbacks may change it for those that run after them.

    See Also:
        :class:`~callbackhub.callbacks.dispatcher.CallbackDispatcher` for
        how callbacks are ordered and invoked.
    """

    @property
    def name(self) -> str:
        """Return the plugin name this callback belongs to.

        Defaults to the class name with the ``Callback`` suffix removed, so
        ``BlogCallback().name == "Blog"``.
        """
        cls_name = type(self).__name__
        if cls_name.endswith(CALLBACK_SUFFIX) and cls_name != CALLBACK_SUFFIX:
            return cls_name[: -len(CALLBACK_SUFFIX)]
        return cls_name

    @property
    def version(self) -> str:
        """Return the callback version string. Defaults to ``"0.1.0"``."""
        return "0.1.0"

    @property
    def description(self) -> str:
        """Return a one-line description. Defaults to ``""``."""
        return ""

    @classmethod
    def implements(cls, event: LifecycleEvent) -> bool:
        """Return ``True`` if this class overrides the hook for *event*."""
        method = event.method_name
        return getattr(cls, method) is not getattr(Callback, method)

    @classmethod
    def overridden_events(cls) -> list[LifecycleEvent]:
        """Return the lifecycle events this class overrides, in lifecycle order."""
        return [event for event in LifecycleEvent if cls.implements(event)]

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def on_initialize(self, context: Any) -> None:
        """Called once after all callbacks for the controller are registered.

        Args:
            context: The host controller.
        """

    def on_before_filter(self, context: Any) -> None:
        """Called after the controller's own ``beforeFilter`` but before the action runs.

        Args:
            context: The host controller.
        """

    def on_before_render(self, context: Any) -> None:
        """Called before the controller renders its view and layout.

        Args:
            context: The host controller.
        """

    def on_shutdown(self, context: Any) -> None:
        """Called before output is sent to the client.

        Args:
            context: The host controller.
        """

    def on_before_redirect(
        self, context: Any, url: str, status: Optional[str] = None, exit: bool = True
    ) -> None:
        """Called when the controller starts a redirect, before anything else happens.

        Args:
            context: The host controller.
            url: The redirect target.
            status: Optional HTTP status for the redirect.
            exit: Whether the controller stops after redirecting.
        """
