import os
import sys
from pathlib import Path

import pytest

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def tmp_db_path(tmp_path, monkeypatch):
    path = tmp_path / "db" / "inventory_test.db"
    # Point the package to this temp DB; keep any real config.yaml out of the way
    monkeypatch.setenv("INVENTORY_DB_PATH", str(path))
    monkeypatch.setenv("INVENTORY_CONFIG", str(tmp_path / "config.yaml"))
    return str(path)


@pytest.fixture()
def database(tmp_db_path):
    from inventory.database import InventoryDatabase

    db = InventoryDatabase(tmp_db_path)
    yield db
    db.close()


@pytest.fixture()
def store(database):
    return database.item_store()


@pytest.fixture()
def repository(store):
    from inventory.services.items_repository import OfflineItemsRepository

    return OfflineItemsRepository(store)


@pytest.fixture()
def container(tmp_db_path):
    from inventory.container import create_container

    c = create_container(tmp_db_path)
    yield c
    # Safety: only ever close the temp DB we created
    assert c.config.db_path() == tmp_db_path, "container escaped the temp DB"
    if os.path.exists(tmp_db_path):
        c.database().close()
