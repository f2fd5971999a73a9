"""Per-key fetch coalescing.

Many concurrent resolve() calls for one key share a single fetch. The
in-flight table is the only place that decides whether a fetch starts,
so it is guarded by a lock and never awaited while held.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchFn = Callable[[], Awaitable[T | None]]


class FetchCoordinator(Generic[T]):
    """Collapse concurrent fetches for the same key into one.

    The first caller for a key starts a task running fetch(); later callers
    await that same task. When it finishes, with a value or with an error,
    every waiter gets the one outcome and the key is removed from the table,
    so the next caller starts fresh. Failures become None; nothing is
    cached negatively.

    Waiters await through asyncio.shield: a cancelled caller stops waiting
    but the fetch runs to completion. Tasks belong to the loop that made
    them, so the table is keyed by (running loop, key): callers on another
    loop (another thread) coalesce among themselves and never await a
    foreign task.
    """

    def __init__(self) -> None:
        self._in_flight: dict[
            tuple[asyncio.AbstractEventLoop, str], asyncio.Task[T | None]
        ] = {}
        self._lock = threading.Lock()

    @property
    def in_flight_count(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def is_in_flight(self, key: str) -> bool:
        """Return True while a fetch for key is running."""
        with self._lock:
            return any(k == key for _, k in self._in_flight)

    async def resolve(self, key: str, fetch: FetchFn[T]) -> T | None:
        """Return the result of the single in-flight fetch for key.

        Args:
            key: Asset key.
            fetch: Zero-arg coroutine function doing the network work. Only
                called when no fetch for key is running.

        Returns:
            The fetched value, or None if the fetch failed.
        """
        slot = (asyncio.get_running_loop(), key)
        with self._lock:
            task = self._in_flight.get(slot)
            if task is None:
                task = asyncio.ensure_future(self._run(slot, fetch))
                self._in_flight[slot] = task
                logger.debug("Fetch START: %s", key)
            else:
                logger.debug("Fetch JOIN: %s", key)
        return await asyncio.shield(task)

    async def _run(
        self, slot: tuple[asyncio.AbstractEventLoop, str], fetch: FetchFn[T]
    ) -> T | None:
        key = slot[1]
        try:
            return await fetch()
        except Exception as e:
            logger.warning("Fetch failed for %s: %s", key, e)
            return None
        finally:
            with self._lock:
                if self._in_flight.get(slot) is asyncio.current_task():
                    del self._in_flight[slot]
            logger.debug("Fetch DONE: %s", key)
