# nlqms/services/execution_service.py
"""
ExecutionService — the safe-execution pipeline for a single statement.

Pipeline (fixed order):
  1. Classify            — rejected statements stop here, nothing is executed
  2. Namespace switch    — USE <db> updates the config and history, never hits the DB
  3. Confirmation gate   — destructive statements need confirmed=True or callback approval
  4. Reversible delete   — DELETE FROM <t> WHERE <c>: pre-image + delete in one transaction
  5. Direct execution    — everything else, no transaction wrapper
  6. History + audit     — history for successful statements, audit for every call

Database errors become ExecResult failures with a generic explanation.
Nothing is retried. A failed reversible delete is rolled back and leaves no history.
"""
from __future__ import annotations

import logging
import secrets
import sqlite3
import time
from typing import Callable, Iterable, Optional

from nlqms.config.db_config import SessionContext
from nlqms.core.constants import (
    BLOCKED_DATABASES,
    MAX_PENDING_CONFIRMATIONS,
    MSG_CANCELLED,
    MSG_CONFIRM_PROMPT,
    MSG_CONFIRMATION_PENDING,
    MSG_DB_EXPLANATION,
    MSG_UNKNOWN_TOKEN,
)
from nlqms.core.enums import StatementState
from nlqms.core.exceptions import (
    ConfigError,
    ConfirmationDeclined,
    DatabaseError,
    PersistenceError,
    ValidationError,
)
from nlqms.db.executor import ConnectionExecutor, LiveConnection, QueryOutput
from nlqms.services.audit import AuditRecord, log_outcome
from nlqms.services.history_store import HistoryStore
from nlqms.sql.classifier import classify, is_rowset, match_reversible_delete, match_use
from nlqms.sql.models import ExecResult, UndoInfo, Verdict
from nlqms.utils.hashing import hash_sql

_log = logging.getLogger("nlqms.services.execution_service")

# (warning message, sql) -> proceed?
ConfirmCallback = Callable[[str, str], bool]


class ExecutionService:
    """
    Composes classifier, executor and history store.
    One instance per session.
    """

    def __init__(
        self,
        context: SessionContext,
        executor: ConnectionExecutor,
        history: HistoryStore,
        confirm_callback: Optional[ConfirmCallback] = None,
        blocked: Iterable[str] = BLOCKED_DATABASES,
        max_pending: int = MAX_PENDING_CONFIRMATIONS,
    ) -> None:
        self._context = context
        self._executor = executor
        self._history = history
        self._confirm_callback = confirm_callback
        self._blocked = tuple(blocked)
        self._max_pending = max_pending
        self._pending: dict[str, str] = {}  # insertion order = age

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def execute_with_undo(self, sql: str, confirmed: bool = False) -> ExecResult:
        """
        Run the pipeline for one statement.
        Always returns an ExecResult. Always writes one audit record.
        """
        sql = (sql or "").strip()
        record = AuditRecord(statement_hash=hash_sql(sql), namespace=self._context.namespace_key())
        result = ExecResult.failure("Execution did not complete.")
        t_start = time.monotonic()
        try:
            result = self._run(sql, confirmed, record)
        finally:
            record.execution_ms = (time.monotonic() - t_start) * 1000
            log_outcome(record, result)
        return result

    def propose_execution(self, sql: str) -> ExecResult:
        """
        First half of the two-phase form.
        Statements that need no confirmation (or are rejected) complete immediately.
        Destructive ones are parked and a single-use token is returned;
        past max_pending the oldest parked statement is dropped.
        """
        verdict = classify(sql, self._blocked)
        if not verdict.accepted or not verdict.requires_confirmation or match_use(sql or ""):
            return self.execute_with_undo(sql, confirmed=False)
        while self._pending and len(self._pending) >= self._max_pending:
            self._pending.pop(next(iter(self._pending)))
            _log.warning("oldest parked execution evicted (limit %d)", self._max_pending)
        token = secrets.token_hex(16)
        self._pending[token] = sql
        _log.info("execution parked awaiting confirmation (%d pending)", len(self._pending))
        result = ExecResult.failure(MSG_CONFIRMATION_PENDING)
        result.pending = True
        result.token = token
        return result

    def confirm_execution(self, token: str, decision: bool) -> ExecResult:
        """Second half: resume (decision=True) or cancel a parked statement."""
        sql = self._pending.pop(token, None)
        if sql is None:
            return ExecResult.failure(MSG_UNKNOWN_TOKEN)
        if not decision:
            _log.info("parked execution cancelled")
            return ExecResult.failure(MSG_CANCELLED)
        return self.execute_with_undo(sql, confirmed=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(self, sql: str, confirmed: bool, record: AuditRecord) -> ExecResult:
        try:
            verdict = self._step_classify(sql, record)

            target = match_use(sql)
            if target is not None:
                return self._step_namespace_switch(sql, target, record)

            self._step_confirm(sql, verdict, confirmed, record)

            record.state = StatementState.EXECUTING
            delete = match_reversible_delete(sql)
            if delete is not None:
                table, condition = delete
                return self._step_reversible_delete(sql, table, condition, record)
            return self._step_direct(sql, record)

        except ValidationError as exc:
            record.state = StatementState.REJECTED
            return ExecResult.failure(str(exc))
        except ConfirmationDeclined as exc:
            record.state = StatementState.CANCELLED
            return ExecResult.failure(str(exc))
        except PersistenceError as exc:
            record.state = StatementState.FAILED
            return ExecResult.failure(str(exc))
        except (sqlite3.Error, sqlite3.Warning, UnicodeError, DatabaseError, ConfigError) as exc:
            record.state = StatementState.FAILED
            _log.warning("statement failed: %s", exc)
            return ExecResult.failure(str(exc), MSG_DB_EXPLANATION)

    def _step_classify(self, sql: str, record: AuditRecord) -> Verdict:
        verdict = classify(sql, self._blocked)
        record.state = StatementState.CLASSIFIED
        if not verdict.accepted:
            raise ValidationError(verdict.message)
        return verdict

    def _step_namespace_switch(self, sql: str, target: str, record: AuditRecord) -> ExecResult:
        """Persist the new active database; the history entry lands in the new namespace."""
        try:
            self._context.config_store.set_database(target)
        except OSError as exc:
            raise PersistenceError(f"Failed to save active database: {exc}") from exc
        record.state = StatementState.COMMITTED
        _log.info("active database switched to %s", target)
        self._record(sql, None, None, record)
        return ExecResult.write(0)

    def _step_confirm(self, sql: str, verdict: Verdict, confirmed: bool, record: AuditRecord) -> None:
        """Raises ConfirmationDeclined unless the statement may proceed."""
        if not verdict.requires_confirmation or confirmed:
            return
        record.state = StatementState.CONFIRMATION_PENDING
        if self._confirm_callback is None:
            _log.warning("destructive statement with no confirmation callback, cancelled")
            raise ConfirmationDeclined()
        try:
            approved = bool(self._confirm_callback(MSG_CONFIRM_PROMPT, sql))
        except Exception as exc:
            _log.error("confirmation callback failed, treating as cancel: %s", exc)
            approved = False
        if not approved:
            raise ConfirmationDeclined()

    def _step_reversible_delete(self, sql: str, table: str, condition: str,
                                record: AuditRecord) -> ExecResult:
        def capture_and_delete(conn: LiveConnection) -> tuple[list[dict], QueryOutput]:
            conn.begin()
            before = conn.execute(f"SELECT * FROM {table} WHERE {condition}")
            deleted = conn.execute(sql)
            conn.commit()
            return before.rows, deleted

        pre_image, output = self._executor.run(sql, handler=capture_and_delete)
        record.state = StatementState.COMMITTED
        undo = UndoInfo(table=table, rows=pre_image)
        record.undo_captured = len(undo.rows)
        self._record(sql, output.affected_rows, undo, record)
        return ExecResult.write(output.affected_rows or 0)

    def _step_direct(self, sql: str, record: AuditRecord) -> ExecResult:
        output = self._executor.run(sql)
        record.state = StatementState.COMMITTED
        if is_rowset(sql):
            self._record(sql, None, None, record)
            return ExecResult.rowset(output.rows)
        self._record(sql, output.affected_rows, None, record)
        return ExecResult.write(output.affected_rows or 0)

    def _record(self, sql: str, affected_rows: Optional[int], undo: Optional[UndoInfo],
                record: AuditRecord) -> None:
        if self._history.append(sql, affected_rows, undo) is not None:
            record.state = StatementState.HISTORY_RECORDED
