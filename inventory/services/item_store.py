from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ..domain.item import Item
from ..live import LiveQuery
from ..repository import item_repo

if TYPE_CHECKING:
    from ..database import InventoryDatabase

logger = logging.getLogger(__name__)


class ItemStore:
    """
    Data access object for the items table.

    Writes are coroutines executed on the database worker pool; they return
    once SQLite has committed. A duplicate id on insert and a missing id on
    update or delete are silent no-ops, visible only through the return
    value. Reads are LiveQuery streams that re-emit after every write which
    changed the table.
    """

    def __init__(self, database: "InventoryDatabase"):
        self._db = database

    def _changed(self):
        self._db.invalidation_tracker.notify(item_repo.TABLE)

    async def insert(self, item: Item) -> Optional[int]:
        new_id = await self._db.run(item_repo.insert, item)
        if new_id is None:
            logger.debug(f"insert ignored, id {item.id} already exists")
        else:
            logger.debug(f"inserted item {new_id}")
            self._changed()
        return new_id

    async def update(self, item: Item) -> int:
        n = await self._db.run(item_repo.update, item)
        logger.debug(f"update item {item.id}: {n} row(s)")
        if n:
            self._changed()
        return n

    async def delete(self, item: Item) -> int:
        n = await self._db.run(item_repo.delete, item)
        logger.debug(f"delete item {item.id}: {n} row(s)")
        if n:
            self._changed()
        return n

    def get_item(self, item_id: int) -> LiveQuery[Optional[Item]]:
        return LiveQuery(self._db, (item_repo.TABLE,), lambda conn: item_repo.get_one(conn, item_id))

    def get_all_items(self) -> LiveQuery[list[Item]]:
        return LiveQuery(self._db, (item_repo.TABLE,), item_repo.list_all)
