"""Canonical Pydantic models shared across all callbackhub modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory
or passed in by the host framework as component settings:
    :class:`CallbacksConfig`, :class:`OutputConfig`, :class:`GlobalConfig`.

**Lifecycle vocabulary** -- the fixed set of controller lifecycle events:
    :class:`LifecycleEvent`.

``CallbacksConfig`` uses ``extra="allow"`` so that host-specific settings
passed alongside ``priority`` are preserved in ``model_extra``.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Lifecycle events ---


class LifecycleEvent(str, enum.Enum):
    """Controller lifecycle events that plugin callbacks can respond to.

    The member values are the event names the host framework uses; the
    :attr:`method_name` property gives the corresponding
    :class:`~callbackhub.callbacks.base.Callback` method.
    """

    INITIALIZE = "initialize"
    BEFORE_FILTER = "beforeFilter"
    BEFORE_RENDER = "beforeRender"
    SHUTDOWN = "shutdown"
    BEFORE_REDIRECT = "beforeRedirect"

    @property
    def method_name(self) -> str:
        """Name of the ``Callback`` method invoked for this event."""
        return _METHOD_NAMES[self]

    @property
    def extra_args(self) -> tuple[str, ...]:
        """Names of the arguments forwarded after the context."""
        if self is LifecycleEvent.BEFORE_REDIRECT:
            return ("url", "status", "exit")
        return ()


_METHOD_NAMES = {
    LifecycleEvent.INITIALIZE: "on_initialize",
    LifecycleEvent.BEFORE_FILTER: "on_before_filter",
    LifecycleEvent.BEFORE_RENDER: "on_before_render",
    LifecycleEvent.SHUTDOWN: "on_shutdown",
    LifecycleEvent.BEFORE_REDIRECT: "on_before_redirect",
}


# --- Callbacks Config ---


class CallbacksConfig(BaseModel):
    """Settings for a :class:`~callbackhub.callbacks.dispatcher.CallbackDispatcher`.

    ``priority`` is the only option the dispatcher strictly needs. When it is
    empty or ``None``, callbacks run in plugin discovery order; when it names
    only some plugins, the rest are appended in discovery order.

    Example::

        CallbacksConfig(priority=["Blog", "Search"], isolate_errors=True)
    """

    model_config = ConfigDict(extra="allow")

    priority: list[str] = Field(
        default_factory=list,
        description="Plugin names in the order their callbacks should run",
    )
    isolate_errors: bool = Field(
        default=False,
        description="Keep dispatching after a callback raises and report all "
        "failures together at the end",
    )
    plugins: list[str] = Field(
        default_factory=list,
        description="Statically configured plugin names, in registration order",
    )
    plugins_dir: Optional[str] = Field(
        default=None,
        description="Directory holding <plugin_name>/<plugin_name>_callback.py files",
    )
    package: Optional[str] = Field(
        default=None,
        description="Dotted package holding <plugin_name>.<plugin_name>_callback modules",
    )

    @field_validator("priority", "plugins", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto",
        description="Output format used when neither --json nor --plain is given",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/callbackhub/config.json``.

    Loaded and saved by :func:`~callbackhub.config.load_global_config` and
    :func:`~callbackhub.config.save_global_config`. See
    :func:`~callbackhub.config.resolve_config` for the full precedence chain.
    """

    callbacks: CallbacksConfig = Field(default_factory=CallbacksConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
