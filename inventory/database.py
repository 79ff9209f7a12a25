from __future__ import annotations

import asyncio
import functools
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Callable, TypeVar

from .db import DEFAULTS, get_conn, get_db_path
from .live import InvalidationTracker
from .repository import item_repo

if TYPE_CHECKING:
    from .services.item_store import ItemStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseClosedError(RuntimeError):
    """Raised when work is submitted to a closed database handle."""


class SchemaVersionError(RuntimeError):
    """Raised when the file carries a schema version this code does not know."""


class InventoryDatabase:
    """
    Handle to the inventory SQLite file.

    Opening creates the items table and stamps the schema version. The
    handle owns a worker pool: every statement runs there on its own
    short-lived connection, so coroutines awaiting it never block their
    event loop. Writes that change rows notify the invalidation tracker,
    which drives the live queries.
    """

    def __init__(
        self,
        db_path: str | None = None,
        max_workers: int = DEFAULTS["max_workers"],
        busy_timeout: float = DEFAULTS["busy_timeout"],
    ):
        self.db_path = db_path or get_db_path()
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        self.busy_timeout = busy_timeout
        self.invalidation_tracker = InvalidationTracker()
        self._lock = threading.Lock()
        self._closed = False
        self._item_store: ItemStore | None = None

        self._open()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="inventory-db")
        logger.info(f"opened inventory database {self.db_path}")

    def _open(self):
        with self.connect() as conn:
            version = item_repo.get_schema_version(conn)
            if version not in (0, item_repo.SCHEMA_VERSION):
                raise SchemaVersionError(
                    f"{self.db_path}: schema version {version}, expected {item_repo.SCHEMA_VERSION}"
                )
            item_repo.ensure_schema(conn)
            if version == 0:
                item_repo.set_schema_version(conn)
                logger.debug(f"created items schema v{item_repo.SCHEMA_VERSION} in {self.db_path}")

    @property
    def closed(self) -> bool:
        return self._closed

    def connect(self):
        """Context manager yielding a fresh connection to this database file."""
        return get_conn(self.db_path, timeout=self.busy_timeout)

    def call(self, fn: Callable[..., T], *args) -> T:
        """Run fn(conn, *args) on a fresh connection in the current thread."""
        if self._closed:
            raise DatabaseClosedError(self.db_path)
        with self.connect() as conn:
            return fn(conn, *args)

    async def run(self, fn: Callable[..., T], *args) -> T:
        """Run fn(conn, *args) on the worker pool and await the result."""
        if self._closed:
            raise DatabaseClosedError(self.db_path)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, functools.partial(self.call, fn, *args))
        except RuntimeError as e:
            # executor rejects new work once shut down
            if self._closed and not isinstance(e, DatabaseClosedError):
                raise DatabaseClosedError(self.db_path) from e
            raise

    def item_store(self) -> "ItemStore":
        from .services.item_store import ItemStore

        with self._lock:
            if self._item_store is None:
                self._item_store = ItemStore(self)
            return self._item_store

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.invalidation_tracker.close()
        self._executor.shutdown(wait=True)
        logger.info(f"closed inventory database {self.db_path}")

    def __repr__(self) -> str:
        return f"InventoryDatabase({self.db_path!r})"

