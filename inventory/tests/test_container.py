import logging
import os
import threading

from inventory.container import create_container
from inventory.database import InventoryDatabase
from inventory.services.items_repository import ItemsRepository


def test_nothing_opened_until_first_access(container, tmp_db_path):
    assert not os.path.exists(tmp_db_path)
    db = container.database()
    assert isinstance(db, InventoryDatabase)
    assert os.path.exists(tmp_db_path)


def test_database_is_a_singleton(container):
    assert container.database() is container.database()


def test_repository_is_cached_and_bound_to_the_handle(container):
    repo = container.items_repository()
    assert isinstance(repo, ItemsRepository)
    assert container.items_repository() is repo
    assert repo.item_store is container.database().item_store()


def test_concurrent_first_access_builds_one_handle(container, caplog):
    caplog.set_level(logging.INFO, logger="inventory.database")
    n = 16
    barrier = threading.Barrier(n)
    handles = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        db = container.database()
        with lock:
            handles.append(db)

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(handles) == n
    assert len({id(h) for h in handles}) == 1
    opened = [r for r in caplog.records if r.getMessage().startswith("opened inventory database")]
    assert len(opened) == 1


def test_containers_are_independent(tmp_path):
    c1 = create_container(str(tmp_path / "a.db"))
    c2 = create_container(str(tmp_path / "b.db"))
    try:
        assert c1.database() is not c2.database()
        assert c1.database().db_path.endswith("a.db")
    finally:
        c1.database().close()
        c2.database().close()


def test_settings_come_from_config_yaml(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("max_workers: 2\nbusy_timeout: 1.5\n", encoding="utf-8")
    monkeypatch.setenv("INVENTORY_CONFIG", str(cfg))
    c = create_container(str(tmp_path / "cfg.db"))
    try:
        assert c.config.max_workers() == 2
        assert c.database().busy_timeout == 1.5
    finally:
        c.database().close()
