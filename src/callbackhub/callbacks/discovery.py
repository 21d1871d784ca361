"""Plugin discovery sources.

A :class:`PluginSource` answers one question: which plugins are installed,
in registration order? The dispatcher uses the answer to fill in the
callback priority list. Hosts usually wrap their own plugin registry in a
:class:`StaticPluginSource`; packaged plugins can be found through
:class:`EntryPointPluginSource`.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from callbackhub.callbacks.loader import ENTRY_POINT_GROUP, select_entry_points

logger = logging.getLogger(__name__)


class PluginSource(Protocol):
    """Anything that can list installed plugin names in registration order."""

    def list_plugins(self) -> list[str]:
        ...


class StaticPluginSource:
    """A fixed list of plugin names supplied by the host."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names = list(names)

    def list_plugins(self) -> list[str]:
        return list(self._names)


class EntryPointPluginSource:
    """Plugin names taken from an entry-point group.

    Names are reported in the order the installed distributions expose
    them. A name registered by several distributions is reported once.
    """

    def __init__(self, group: str = ENTRY_POINT_GROUP) -> None:
        self.group = group

    def list_plugins(self) -> list[str]:
        names: list[str] = []
        for ep in select_entry_points(self.group):
            if ep.name in names:
                logger.debug("Duplicate entry point '%s' in group '%s'", ep.name, self.group)
                continue
            names.append(ep.name)
        return names
