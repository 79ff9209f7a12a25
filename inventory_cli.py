#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Inventory items (SQLite)

Commands:
  init                Create the database file and the items table
  add                 Store a new item (engine assigns the id unless --id is given)
  show                Print one item
  list                Print all items ordered by name
  update              Replace name/price/quantity of an existing item
  delete              Remove an item
  watch               Print the item list (or one item) every time it changes

Notes:
- The database path comes from --db, INVENTORY_DB_PATH or config.yaml (db_path).
- A duplicate id on add, or a missing id on delete, is not an error: the command reports it and exits 0.
- Engine errors (unreadable file, unknown schema version) exit with status 1.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sqlite3
import sys

from inventory.container import AppContainer, create_container
from inventory.database import DatabaseClosedError, SchemaVersionError
from inventory.domain.item import Item
from inventory.live import first

logger = logging.getLogger("inventory.cli")


def fmt_item(it: Item | None) -> str:
    if it is None:
        return "(none)"
    return f"{it.id:>5}  {it.name:<30} {it.price:>12.2f} {it.quantity:>8}"


# ---------------- Commands ----------------

async def cmd_init(container: AppContainer, args) -> int:
    db = container.database()
    print(f"initialized {db.db_path}")
    return 0


async def cmd_add(container: AppContainer, args) -> int:
    repo = container.items_repository()
    item = Item(id=args.id or 0, name=args.name, price=args.price, quantity=args.quantity)
    new_id = await repo.insert_item(item)
    if new_id is None:
        logger.info(f"add: id {item.id} taken, insert ignored")
        print(f"item {item.id} already exists, nothing inserted")
        return 0
    stored = await first(repo.get_item_stream(new_id))
    logger.info(f"add: stored item {new_id}")
    print(fmt_item(stored))
    return 0


async def cmd_show(container: AppContainer, args) -> int:
    it = await first(container.items_repository().get_item_stream(args.id))
    if it is None:
        print(f"item {args.id} not found", file=sys.stderr)
        return 1
    print(fmt_item(it))
    return 0


async def cmd_list(container: AppContainer, args) -> int:
    items = await first(container.items_repository().get_all_items_stream())
    for it in items:
        print(fmt_item(it))
    print(f"{len(items)} item(s)")
    return 0


async def cmd_update(container: AppContainer, args) -> int:
    repo = container.items_repository()
    current = await first(repo.get_item_stream(args.id))
    if current is None:
        print(f"item {args.id} not found", file=sys.stderr)
        return 1
    changes = {k: v for k, v in (("name", args.name), ("price", args.price), ("quantity", args.quantity)) if v is not None}
    if not changes:
        print("nothing to update (use --name/--price/--quantity)", file=sys.stderr)
        return 2
    updated = Item(**{**current.model_dump(), **changes})
    await repo.update_item(updated)
    logger.info(f"update: item {args.id} {current.model_dump()} -> {updated.model_dump()}")
    print(fmt_item(updated))
    return 0


async def cmd_delete(container: AppContainer, args) -> int:
    repo = container.items_repository()
    current = await first(repo.get_item_stream(args.id))
    n = await repo.delete_item(current or Item(id=args.id, name="", price=0.0, quantity=0))
    logger.info(f"delete: item {args.id}, {n} row(s) removed")
    print(f"deleted {n} item(s)")
    return 0


async def cmd_watch(container: AppContainer, args) -> int:
    repo = container.items_repository()
    stream = repo.get_item_stream(args.id) if args.id is not None else repo.get_all_items_stream()
    seen = 0
    async for value in stream:
        print(f"--- update {seen + 1}")
        if isinstance(value, list):
            for it in value:
                print(fmt_item(it))
        else:
            print(fmt_item(value))
        sys.stdout.flush()
        seen += 1
        if args.limit and seen >= args.limit:
            break
    return 0


# ---------------- Entry point ----------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inventory items (SQLite)")
    parser.add_argument("--db", default=None, help="database file (default: INVENTORY_DB_PATH / config.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create database and table")
    p_init.set_defaults(func=cmd_init)

    p_add = sub.add_parser("add", help="add an item")
    p_add.add_argument("--name", required=True)
    p_add.add_argument("--price", required=True, type=float)
    p_add.add_argument("--quantity", required=True, type=int)
    p_add.add_argument("--id", required=False, type=int, help="explicit id (default: engine assigned)")
    p_add.set_defaults(func=cmd_add)

    p_show = sub.add_parser("show", help="show one item")
    p_show.add_argument("id", type=int)
    p_show.set_defaults(func=cmd_show)

    p_list = sub.add_parser("list", help="list items ordered by name")
    p_list.set_defaults(func=cmd_list)

    p_upd = sub.add_parser("update", help="update an item")
    p_upd.add_argument("id", type=int)
    p_upd.add_argument("--name", required=False)
    p_upd.add_argument("--price", required=False, type=float)
    p_upd.add_argument("--quantity", required=False, type=int)
    p_upd.set_defaults(func=cmd_update)

    p_del = sub.add_parser("delete", help="delete an item")
    p_del.add_argument("id", type=int)
    p_del.set_defaults(func=cmd_delete)

    p_watch = sub.add_parser("watch", help="print items on every change")
    p_watch.add_argument("--id", required=False, type=int)
    p_watch.add_argument("--limit", required=False, type=int, default=0, help="stop after N updates")
    p_watch.set_defaults(func=cmd_watch)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    container = create_container(args.db)
    level = logging.DEBUG if args.verbose else container.config.log_level()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    db = None
    try:
        db = container.database()
        return asyncio.run(args.func(container, args))
    except (sqlite3.Error, SchemaVersionError, DatabaseClosedError, OSError, ValueError) as e:
        logger.error(f"{args.func.__name__} failed: {e}")
        return 1
    except KeyboardInterrupt:
        return 130
    finally:
        if db is not None:
            db.close()


if __name__ == "__main__":
    sys.exit(main())
