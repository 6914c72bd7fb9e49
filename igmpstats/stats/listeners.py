"""Listener registration and fan-out for published statistics events."""

from __future__ import annotations

import threading
from typing import Callable

from igmpstats.lib.logger import get_logger
from igmpstats.stats.schemas import StatsEvent

logger = get_logger(__name__)

StatsListener = Callable[[StatsEvent], None]


class ListenerRegistry:
    """Set of listeners with copy-on-write storage.

    Mutations swap in a new tuple under the lock; ``dispatch`` iterates the
    tuple it saw on entry, so callbacks never run while the lock is held and
    a concurrent register/unregister cannot corrupt an in-flight delivery.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: tuple[StatsListener, ...] = ()

    def register(self, listener: StatsListener) -> None:
        """Add a listener; registering the same listener again is a no-op."""

        if not callable(listener):
            raise TypeError("Stats listener must be callable")
        with self._lock:
            if listener in self._listeners:
                return
            self._listeners = (*self._listeners, listener)

    def unregister(self, listener: StatsListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                return
            self._listeners = tuple(entry for entry in self._listeners if entry != listener)

    def dispatch(self, event: StatsEvent) -> int:
        """Deliver ``event`` to every registered listener.

        Returns the number of listeners that handled the event without raising.
        """

        delivered = 0
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "stats_listener_failed",
                    extra={"listener": repr(listener), "sequence": event.sequence},
                )
                continue
            delivered += 1
        return delivered

    def clear(self) -> None:
        with self._lock:
            self._listeners = ()

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners
