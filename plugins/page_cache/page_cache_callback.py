"""Example callback that marks a controller's response as cacheable."""

from __future__ import annotations

from typing import Any

from callbackhub.callbacks.base import Callback


class PageCacheCallback(Callback):
    """Sets ``controller.cache_action = True`` unless the audit plugin ran first."""

    @property
    def description(self) -> str:
        return "Enables full-page caching for the current action"

    def on_before_render(self, context: Any) -> None:
        # audited responses carry per-user data
        context.cache_action = not getattr(context, "audit_trail", None)
