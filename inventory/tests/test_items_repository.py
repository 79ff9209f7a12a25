import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from inventory.domain.item import Item
from inventory.live import first
from inventory.services.item_store import ItemStore
from inventory.services.items_repository import ItemsRepository, OfflineItemsRepository


def test_repository_contract_is_abstract():
    with pytest.raises(TypeError):
        ItemsRepository()


def test_offline_repository_forwards_every_call():
    store = MagicMock(spec=ItemStore)
    store.insert = AsyncMock(return_value=5)
    store.update = AsyncMock(return_value=1)
    store.delete = AsyncMock(return_value=0)
    repo = OfflineItemsRepository(store)
    item = Item(id=5, name="Bolt", price=0.1, quantity=100)

    assert asyncio.run(repo.insert_item(item)) == 5
    assert asyncio.run(repo.update_item(item)) == 1
    assert asyncio.run(repo.delete_item(item)) == 0
    store.insert.assert_awaited_once_with(item)
    store.update.assert_awaited_once_with(item)
    store.delete.assert_awaited_once_with(item)

    assert repo.get_all_items_stream() is store.get_all_items.return_value
    assert repo.get_item_stream(5) is store.get_item.return_value
    store.get_item.assert_called_once_with(5)


def test_offline_repository_propagates_store_errors():
    store = MagicMock(spec=ItemStore)
    store.insert = AsyncMock(side_effect=OSError("disk full"))
    repo = OfflineItemsRepository(store)
    with pytest.raises(OSError, match="disk full"):
        asyncio.run(repo.insert_item(Item(name="X", price=1.0, quantity=1)))


def test_offline_repository_on_sqlite(repository):
    async def scenario():
        new_id = await repository.insert_item(Item(name="Nut", price=0.05, quantity=500))
        stored = await first(repository.get_item_stream(new_id))
        await repository.update_item(stored.model_copy(update={"quantity": 450}))
        after_update = await first(repository.get_all_items_stream())
        await repository.delete_item(stored)
        return new_id, after_update, await first(repository.get_item_stream(new_id))

    new_id, after_update, after_delete = asyncio.run(scenario())
    assert after_update == [Item(id=new_id, name="Nut", price=0.05, quantity=450)]
    assert after_delete is None
