"""Example callback that records every lifecycle event on the controller."""

from __future__ import annotations

from typing import Any, Optional

from callbackhub.callbacks.base import Callback


class AuditCallback(Callback):
    """Appends ``(event, detail)`` tuples to ``controller.audit_trail``."""

    @property
    def description(self) -> str:
        return "Records controller lifecycle events"

    def _record(self, context: Any, event: str, detail: str = "") -> None:
        trail = getattr(context, "audit_trail", None)
        if trail is None:
            trail = []
            setattr(context, "audit_trail", trail)
        trail.append((event, detail))

    def on_initialize(self, context: Any) -> None:
        self._record(context, "initialize")

    def on_before_filter(self, context: Any) -> None:
        self._record(context, "beforeFilter")

    def on_shutdown(self, context: Any) -> None:
        self._record(context, "shutdown")

    def on_before_redirect(
        self, context: Any, url: str, status: Optional[str] = None, exit: bool = True
    ) -> None:
        self._record(context, "beforeRedirect", url)
