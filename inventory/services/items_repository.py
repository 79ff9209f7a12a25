"""Repository contract for inventory items and its offline (local SQLite) implementation."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..domain.item import Item
from ..live import LiveQuery
from .item_store import ItemStore


class ItemsRepository(ABC):
    """What callers depend on instead of a concrete storage technology."""

    @abstractmethod
    def get_all_items_stream(self) -> LiveQuery[list[Item]]:
        """Live list of all items ordered by name."""

    @abstractmethod
    def get_item_stream(self, item_id: int) -> LiveQuery[Optional[Item]]:
        """Live view of one item; emits None while no such item exists."""

    @abstractmethod
    async def insert_item(self, item: Item) -> Optional[int]:
        """Store a new item; returns its id, or None when the id is taken."""

    @abstractmethod
    async def delete_item(self, item: Item) -> int:
        """Remove the item with item.id; returns rows removed."""

    @abstractmethod
    async def update_item(self, item: Item) -> int:
        """Replace the stored fields of item.id; returns rows changed."""


class OfflineItemsRepository(ItemsRepository):
    def __init__(self, item_store: ItemStore):
        self.item_store = item_store

    def get_all_items_stream(self) -> LiveQuery[list[Item]]:
        return self.item_store.get_all_items()

    def get_item_stream(self, item_id: int) -> LiveQuery[Optional[Item]]:
        return self.item_store.get_item(item_id)

    async def insert_item(self, item: Item) -> Optional[int]:
        return await self.item_store.insert(item)

    async def delete_item(self, item: Item) -> int:
        return await self.item_store.delete(item)

    async def update_item(self, item: Item) -> int:
        return await self.item_store.update(item)
