"""
In-process change feed.

Stores publish a fresh snapshot of a collection after every
committed write to it; subscribers receive it without polling.
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[list[Any]], None]


class ChangeFeed:

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, collection: str, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns the function that removes it."""
        with self._lock:
            self._listeners[collection].append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners[collection]:
                    self._listeners[collection].remove(listener)

        return unsubscribe

    def has_listeners(self, collection: str) -> bool:
        with self._lock:
            return bool(self._listeners[collection])

    def publish(self, collection: str, snapshot: list[Any]) -> None:
        with self._lock:
            listeners = list(self._listeners[collection])
        for listener in listeners:
            # The write is already committed at this point
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Listener on '%s' failed", collection)
