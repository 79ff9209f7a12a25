"""
Live queries over SQLite tables.

Writers call InvalidationTracker.notify(table) after a committed change.
A LiveQuery re-runs its fetch function whenever one of its tables is
notified and yields the new result to the observer. Every `async for`
over a LiveQuery is an independent subscription; leaving the loop (break,
aclose, cancellation) unsubscribes. Closing the tracker ends all
subscriptions.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from sqlite3 import Connection
from typing import TYPE_CHECKING, AsyncIterator, Callable, Generic, Iterable, TypeVar

if TYPE_CHECKING:
    from .database import InventoryDatabase

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


class InvalidationTracker:
    """Registry of observer callbacks per table."""

    def __init__(self):
        self._lock = threading.Lock()
        self._observers: dict[str, set[Callable[[], None]]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, tables: Iterable[str], callback: Callable[[], None]) -> Callable[[], None]:
        """Register callback for the given tables; returns the unsubscribe function."""
        tables = tuple(tables)
        with self._lock:
            for t in tables:
                self._observers.setdefault(t, set()).add(callback)

        def unsubscribe():
            with self._lock:
                for t in tables:
                    watchers = self._observers.get(t)
                    if watchers is None:
                        continue
                    watchers.discard(callback)
                    if not watchers:
                        del self._observers[t]

        return unsubscribe

    def notify(self, table: str):
        with self._lock:
            callbacks = list(self._observers.get(table, ()))
        for cb in callbacks:
            cb()

    def observer_count(self, table: str) -> int:
        with self._lock:
            return len(self._observers.get(table, ()))

    def close(self):
        """Wake every observer so it can see the closed flag, then drop them."""
        with self._lock:
            self._closed = True
            callbacks = {cb for watchers in self._observers.values() for cb in watchers}
            self._observers.clear()
        for cb in callbacks:
            cb()


class LiveQuery(Generic[T]):
    """Restartable, never-completing stream of query results."""

    def __init__(self, database: "InventoryDatabase", tables: Iterable[str], fetch: Callable[[Connection], T]):
        self._database = database
        self._tables = tuple(tables)
        self._fetch = fetch

    def __aiter__(self) -> AsyncIterator[T]:
        return self._observe()

    async def _observe(self) -> AsyncIterator[T]:
        loop = asyncio.get_running_loop()
        changed = asyncio.Event()
        tracker = self._database.invalidation_tracker

        def on_invalidated():
            try:
                loop.call_soon_threadsafe(changed.set)
            except RuntimeError:
                # loop already closed; its observer is gone
                pass

        unsubscribe = tracker.subscribe(self._tables, on_invalidated)
        try:
            last = _UNSET
            while not tracker.closed:
                changed.clear()
                try:
                    value = await self._database.run(self._fetch)
                except Exception as e:
                    if tracker.closed:
                        return
                    logger.warning(f"live query on {','.join(self._tables)} failed: {e}")
                    raise
                if value != last:
                    last = value
                    yield value
                await changed.wait()
        finally:
            unsubscribe()


async def first(query: LiveQuery[T]) -> T:
    """Take the current result of a live query and detach."""
    stream = query.__aiter__()
    try:
        return await stream.__anext__()
    finally:
        await stream.aclose()
