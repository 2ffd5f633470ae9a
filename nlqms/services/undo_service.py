# nlqms/services/undo_service.py
"""
UndoService — single-step undo of the last captured DELETE ... WHERE.

Only the most recent history entry of the active namespace is considered.
The replay is a multi-row INSERT built from the column set of the first
captured row; every captured row is assumed to share those columns.
The replay itself is recorded without undo data, so undo does not chain.
"""
from __future__ import annotations

import logging
import sqlite3
import time
from typing import Any

from nlqms.config.db_config import SessionContext
from nlqms.core.constants import MSG_NO_CAPTURED_ROWS, MSG_NO_HISTORY, MSG_UNDO_UNSUPPORTED
from nlqms.core.enums import StatementState, UndoType
from nlqms.core.exceptions import ConfigError, DatabaseError, UndoUnavailable
from nlqms.db.executor import ConnectionExecutor
from nlqms.services.audit import AuditRecord, log_outcome
from nlqms.services.history_store import HistoryStore
from nlqms.sql.models import ExecResult, UndoInfo
from nlqms.utils.hashing import hash_sql

_log = logging.getLogger("nlqms.services.undo_service")


def quote_identifier(name: str) -> str:
    return '"' + str(name).replace('"', '""') + '"'


def render_literal(value: Any) -> str:
    """SQL literal for a captured value, used only for the recorded statement text."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"X'{bytes(value).hex()}'"
    return "'" + str(value).replace("'", "''") + "'"


def build_restore_statement(undo: UndoInfo) -> tuple[str, list[Any], str]:
    """
    Returns (parameterised_sql, params, display_sql) re-inserting undo.rows.
    Columns come from the first row only.
    """
    cols = list(undo.rows[0].keys())
    col_list = ", ".join(quote_identifier(c) for c in cols)
    placeholders = "(" + ", ".join("?" for _ in cols) + ")"
    params = [row.get(c) for row in undo.rows for c in cols]
    sql = f"INSERT INTO {undo.table} ({col_list}) VALUES " + ", ".join(placeholders for _ in undo.rows)
    display_values = ", ".join(
        "(" + ", ".join(render_literal(row.get(c)) for c in cols) + ")" for row in undo.rows
    )
    display = f"INSERT INTO {undo.table} ({col_list}) VALUES {display_values}"
    return sql, params, display


class UndoService:
    def __init__(self, context: SessionContext, executor: ConnectionExecutor,
                 history: HistoryStore) -> None:
        self._context = context
        self._executor = executor
        self._history = history

    def undo_last(self) -> ExecResult:
        """Re-insert the rows captured by the last history entry. Never raises."""
        try:
            undo = self._restorable()
        except UndoUnavailable as exc:
            return ExecResult.failure(str(exc))

        sql, params, display = build_restore_statement(undo)
        record = AuditRecord(
            statement_hash=hash_sql(display),
            namespace=self._context.namespace_key(),
            state=StatementState.EXECUTING,
        )
        result = ExecResult.failure("Undo did not complete.")
        t_start = time.monotonic()
        try:
            output = self._executor.run(sql, params=params)
            record.state = StatementState.COMMITTED
            if self._history.append(display, output.affected_rows) is not None:
                record.state = StatementState.HISTORY_RECORDED
            affected = output.affected_rows if output.affected_rows is not None else len(undo.rows)
            _log.info("undo restored %d row(s) into %s", affected, undo.table)
            result = ExecResult.write(affected)
        except (sqlite3.Error, sqlite3.Warning, UnicodeError, DatabaseError, ConfigError) as exc:
            record.state = StatementState.FAILED
            _log.warning("undo failed: %s", exc)
            result = ExecResult.failure(str(exc))
        finally:
            record.execution_ms = (time.monotonic() - t_start) * 1000
            log_outcome(record, result)
        return result

    def _restorable(self) -> UndoInfo:
        """Return the undo payload of the last entry, or raise UndoUnavailable."""
        entries = self._history.read_all()
        if not entries:
            raise UndoUnavailable(MSG_NO_HISTORY)
        last = entries[-1]
        if last.undo is None or last.undo.type != UndoType.DELETE:
            raise UndoUnavailable(MSG_UNDO_UNSUPPORTED)
        if not last.undo.rows:
            raise UndoUnavailable(MSG_NO_CAPTURED_ROWS)
        return last.undo
