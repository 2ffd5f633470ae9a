# nlqms/db/connection.py
"""
Database connection management for NLQMS.

One SQLite file per named database under <app_dir>/databases/.
Connections are short-lived: opened per call by the executor, never pooled.

Rules:
  - Autocommit mode (isolation_level=None); transactions are explicit BEGIN/COMMIT.
  - Foreign keys enforced on every connection.
  - Rows come back as sqlite3.Row so callers can turn them into dicts.
  - host/port/user/password are carried in the config but have no meaning for
    a file-backed database.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from nlqms.config.db_config import ConnectionConfig, SessionContext
from nlqms.core.constants import DB_FILE_SUFFIX, NO_DB_KEY

_log = logging.getLogger("nlqms.db.connection")


def _configure_connection(conn: sqlite3.Connection) -> None:
    """Apply standard PRAGMAs to every connection."""
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")
    conn.row_factory = sqlite3.Row


def open_connection(path: Path) -> sqlite3.Connection:
    """
    Open a read-write connection to the database file at path.
    Creates the file and parent directories if they don't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), isolation_level=None)
    _configure_connection(conn)
    _log.debug("database opened: %s", path)
    return conn


def test_connection(context: SessionContext, config: Optional[ConnectionConfig] = None) -> dict:
    """Open the configured database and run SELECT 1. Never raises."""
    conn = None
    try:
        conn = open_connection(context.database_path(config))
        conn.execute("SELECT 1").fetchone()
        return {"ok": True, "message": "Connected successfully."}
    except Exception as exc:
        _log.warning("connection test failed: %s", exc)
        return {"ok": False, "message": str(exc)}
    finally:
        if conn is not None:
            conn.close()


def list_databases(data_dir: Path) -> list[str]:
    """Names of the database files present in data_dir, sorted. Unselected file excluded."""
    if not data_dir.exists():
        return []
    return sorted(
        p.stem for p in data_dir.glob(f"*{DB_FILE_SUFFIX}")
        if p.is_file() and p.stem != NO_DB_KEY
    )
