from __future__ import annotations

# inventory/db.py
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

import yaml

# DB path resolution order:
# 1) env INVENTORY_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: item_database.db in the working directory
_DEFAULT_DB = "item_database.db"

DEFAULTS = {
    "max_workers": 4,
    "busy_timeout": 5.0,
    "log_level": "INFO",
}


def _config_path() -> str:
    return os.environ.get("INVENTORY_CONFIG", os.path.join(os.getcwd(), "config.yaml"))


def _read_config_yaml() -> dict:
    cfg_path = _config_path()
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(cfg, dict):
        return {}
    out = {}
    for k in ("db_path", "test_db_path"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    if isinstance(cfg.get("max_workers"), int) and cfg["max_workers"] > 0:
        out["max_workers"] = cfg["max_workers"]
    if isinstance(cfg.get("busy_timeout"), (int, float)) and cfg["busy_timeout"] >= 0:
        out["busy_timeout"] = float(cfg["busy_timeout"])
    if isinstance(cfg.get("log_level"), str) and cfg["log_level"].strip():
        out["log_level"] = cfg["log_level"].strip().upper()
    return out


def get_db_path(_: str | None = None) -> str:
    env_path = os.environ.get("INVENTORY_DB_PATH")
    cfg = _read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = os.path.join(os.getcwd(), _DEFAULT_DB)

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def load_settings(db_path: str | None = None) -> dict:
    """Merged settings for the container: defaults < config.yaml < explicit db_path."""
    cfg = _read_config_yaml()
    out = dict(DEFAULTS)
    for k in DEFAULTS:
        if k in cfg:
            out[k] = cfg[k]
    out["db_path"] = db_path or get_db_path()
    return out


@contextmanager
def get_conn(db_path: str | None = None, timeout: float = DEFAULTS["busy_timeout"]) -> Iterator[sqlite3.Connection]:
    """
    Open a SQLite connection in autocommit mode with Row results.

    Uses db_path when given, otherwise get_db_path(). The connection is
    closed on exit; statements commit as they run.
    """
    path = db_path or get_db_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    conn = sqlite3.connect(
        path,
        timeout=timeout,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()
