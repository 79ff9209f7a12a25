"""
Application container.

Owns the single database handle and the items repository. Both are built
on first access; ThreadSafeSingleton guards construction so concurrent
first callers all receive the same instance.
"""
from __future__ import annotations

from dependency_injector import containers, providers

from .database import InventoryDatabase
from .db import load_settings
from .services.items_repository import OfflineItemsRepository


class AppContainer(containers.DeclarativeContainer):

    config = providers.Configuration()

    database = providers.ThreadSafeSingleton(
        InventoryDatabase,
        db_path=config.db_path,
        max_workers=config.max_workers,
        busy_timeout=config.busy_timeout,
    )

    items_repository = providers.ThreadSafeSingleton(
        OfflineItemsRepository,
        item_store=database.provided.item_store.call(),
    )


def create_container(db_path: str | None = None) -> AppContainer:
    """Composition root: container configured from config.yaml/env, nothing opened yet."""
    container = AppContainer()
    container.config.from_dict(load_settings(db_path))
    return container
