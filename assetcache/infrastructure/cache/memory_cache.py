"""In-process memory tier for decoded assets.

Unbounded and process-lifetime: entries are never evicted or expired.
"""

from __future__ import annotations

import logging
import threading
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MemoryCache(Generic[T]):
    """Thread-safe key -> decoded asset map.

    A single lock guards the dict, so a set() that has returned is seen by
    every later get() from any thread. No operation does I/O.
    """

    def __init__(self) -> None:
        self._entries: dict[str, T] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> T | None:
        """Return cached entry or None."""
        with self._lock:
            value = self._entries.get(key)
        if value is not None:
            logger.debug("Memory cache HIT: %s", key)
        return value

    def set(self, key: str, value: T) -> None:
        """Insert or replace the entry for key."""
        with self._lock:
            self._entries[key] = value
        logger.debug("Memory cache SET: %s", key)

    def clear(self) -> None:
        """Drop every entry (e.g. to simulate a cold start)."""
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
