# nlqms/db/executor.py
"""
ConnectionExecutor — the only component that talks to the database.

Every run() opens a fresh connection from the session's current config and
closes it on every exit path. A caller-supplied handler gets a LiveConnection
and may run an explicit transaction; if the handler raises with a transaction
open, it is rolled back before the connection is closed.

Database errors propagate unchanged. No retries, no pooling, no timeout.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from nlqms.config.db_config import SessionContext
from nlqms.db.connection import open_connection

_log = logging.getLogger("nlqms.db.executor")

ConnectFn = Callable[[Path], sqlite3.Connection]


@dataclass
class QueryOutput:
    rows: list[dict] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def affected_rows(self) -> Optional[int]:
        return self.meta.get("affected_rows")


class LiveConnection:
    """Connection handed to transactional handlers. Valid only inside run()."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    def execute(self, sql: str, params: Sequence[Any] = ()) -> QueryOutput:
        cursor = self._conn.execute(sql, tuple(params))
        rows = [dict(r) for r in cursor.fetchall()] if cursor.description else []
        meta = {
            "affected_rows": cursor.rowcount if cursor.rowcount >= 0 else None,
            "last_row_id": cursor.lastrowid,
        }
        return QueryOutput(rows=rows, meta=meta)

    def begin(self) -> None:
        self._conn.execute("BEGIN")

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()


Handler = Callable[[LiveConnection], Any]


class ConnectionExecutor:
    def __init__(self, context: SessionContext, connect: ConnectFn = open_connection) -> None:
        self._context = context
        self._connect = connect

    def run(self, sql: str, handler: Optional[Handler] = None, params: Sequence[Any] = ()) -> Any:
        """
        Without handler: execute sql (with params) and return QueryOutput.
        With handler: return whatever handler(live_connection) returns.
        """
        conn = self._connect(self._context.database_path())
        live = LiveConnection(conn)
        try:
            if handler is None:
                return live.execute(sql, params)
            try:
                return handler(live)
            except Exception:
                if live.in_transaction:
                    live.rollback()
                    _log.info("transaction rolled back after handler failure")
                raise
        finally:
            try:
                conn.close()
            except sqlite3.Error as exc:
                _log.warning("failed to close connection: %s", exc)
