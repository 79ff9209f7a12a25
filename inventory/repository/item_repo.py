from __future__ import annotations

from sqlite3 import Connection, Row
from typing import Optional

from ..domain.item import Item

TABLE = "items"
SCHEMA_VERSION = 1


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            price REAL NOT NULL,
            quantity INTEGER NOT NULL
        )
        """
    )


def get_schema_version(conn: Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def set_schema_version(conn: Connection, version: int = SCHEMA_VERSION):
    # PRAGMA does not take bound parameters
    conn.execute(f"PRAGMA user_version = {int(version)}")


def row_to_item(row: Row) -> Item:
    return Item(id=row["id"], name=row["name"], price=row["price"], quantity=row["quantity"])


def insert(conn: Connection, item: Item) -> Optional[int]:
    """Insert a row; returns the stored id, or None when the id is already taken."""
    if not item.is_persisted:
        cur = conn.execute(
            "INSERT INTO items(name, price, quantity) VALUES(?, ?, ?)",
            (item.name, item.price, item.quantity),
        )
    else:
        cur = conn.execute(
            "INSERT INTO items(id, name, price, quantity) VALUES(?, ?, ?, ?) "
            "ON CONFLICT(id) DO NOTHING",
            (item.id, item.name, item.price, item.quantity),
        )
    if cur.rowcount == 0:
        return None
    return cur.lastrowid


def update(conn: Connection, item: Item) -> int:
    cur = conn.execute(
        "UPDATE items SET name=?, price=?, quantity=? WHERE id=?",
        (item.name, item.price, item.quantity, item.id),
    )
    return cur.rowcount


def delete(conn: Connection, item: Item) -> int:
    cur = conn.execute("DELETE FROM items WHERE id=?", (item.id,))
    return cur.rowcount


def get_one(conn: Connection, item_id: int) -> Optional[Item]:
    row = conn.execute(
        "SELECT id, name, price, quantity FROM items WHERE id=?", (item_id,)
    ).fetchone()
    return row_to_item(row) if row else None


def list_all(conn: Connection) -> list[Item]:
    rows = conn.execute("SELECT id, name, price, quantity FROM items ORDER BY name ASC").fetchall()
    return [row_to_item(r) for r in rows]
