"""Shared-instance registry for callback objects.

:class:`InstanceRegistry` maps a callback identifier (``BlogCallback``) to
the one live instance of that callback. It is an ordinary object owned by a
:class:`~callbackhub.callbacks.dispatcher.CallbackDispatcher` rather than
process-wide state; two dispatchers only share instances when they are
handed the same registry.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterator, Optional

from callbackhub.callbacks.base import Callback

logger = logging.getLogger(__name__)

CallbackFactory = Callable[[], Callback]


class InstanceRegistry:
    """Identifier -> instance cache with register-if-absent semantics.

    Population is guarded by a lock so that a registry shared across
    threads never builds two instances for the same identifier. Lookups
    are lock-free. The lock is re-entrant, so a callback constructor may
    itself call :meth:`init` for another identifier.
    """

    def __init__(self) -> None:
        self._objects: dict[str, Callback] = {}
        self._lock = threading.RLock()

    def add_object(self, identifier: str, instance: Callback) -> bool:
        """Register *instance* under *identifier* unless one is already present.

        Returns:
            ``True`` if the instance was stored, ``False`` if an instance was
            already registered (the existing one is kept).
        """
        with self._lock:
            if identifier in self._objects:
                return False
            self._objects[identifier] = instance
            return True

    def get_object(self, identifier: str) -> Optional[Callback]:
        """Return the instance registered under *identifier*, or ``None``."""
        return self._objects.get(identifier)

    def init(self, identifier: str, factory: CallbackFactory) -> Callback:
        """Return the cached instance, constructing and registering it if absent.

        The factory is called at most once per identifier while the entry
        stays cached. Exceptions raised by the factory propagate and leave
        the registry unchanged.
        """
        instance = self._objects.get(identifier)
        if instance is not None:
            return instance
        with self._lock:
            instance = self._objects.get(identifier)
            if instance is None:
                instance = factory()
                self._objects[identifier] = instance
                logger.debug("Registered callback instance '%s'", identifier)
            return instance

    def remove_object(self, identifier: str) -> None:
        """Drop *identifier* from the registry; missing identifiers are ignored."""
        with self._lock:
            self._objects.pop(identifier, None)

    def flush(self) -> None:
        """Remove every registered instance."""
        with self._lock:
            self._objects.clear()

    def keys(self) -> list[str]:
        """Return registered identifiers in registration order."""
        return list(self._objects)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._objects))
