# nlqms/services/query_service.py
"""
QueryService — the only supported entrypoint between the presentation layer
and the pipeline. Wires session context, executor, history store, execution
and undo services together; one method per client action.
UI code must not import the executor or history store directly.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from nlqms.config.db_config import ConnectionConfig, SessionContext
from nlqms.core.exceptions import ConfigError
from nlqms.db.connection import list_databases, test_connection
from nlqms.db.executor import ConnectionExecutor
from nlqms.services import export_service
from nlqms.services.execution_service import ConfirmCallback, ExecutionService
from nlqms.services.history_store import HistoryStore
from nlqms.services.undo_service import UndoService
from nlqms.sql.classifier import classify
from nlqms.sql.models import ExecResult, HistoryEntry, Verdict

_log = logging.getLogger("nlqms.services.query_service")

# text -> {"ok": True, "sql": str} | {"ok": False, "error": str}
Translator = Callable[[str], dict]


class QueryService:
    def __init__(
        self,
        context: SessionContext,
        confirm_callback: Optional[ConfirmCallback] = None,
        translator: Optional[Translator] = None,
    ) -> None:
        self._context = context
        self._context.ensure_dirs()
        self._executor = ConnectionExecutor(context)
        self._history = HistoryStore(context)
        self._history.ensure_file()
        self._execution = ExecutionService(context, self._executor, self._history, confirm_callback)
        self._undo = UndoService(context, self._executor, self._history)
        self._translator = translator

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def validate(self, sql: str) -> Verdict:
        return classify(sql)

    def convert(self, text: str) -> dict:
        """
        Translate free text to SQL and classify the result.
        Translator output is untrusted: it is only returned together with its verdict,
        and execute() classifies it again.
        """
        if self._translator is None:
            return {"ok": False, "error": "No translator configured."}
        try:
            reply = self._translator(text) or {}
        except Exception as exc:
            _log.warning("translator failed: %s", exc)
            return {"ok": False, "error": str(exc)}
        sql = (reply.get("sql") or "").strip()
        if not reply.get("ok") or not sql:
            return {"ok": False, "error": reply.get("error") or "Translator returned no SQL."}
        return {"ok": True, "sql": sql, "verdict": classify(sql)}

    def execute(self, sql: str, confirmed: bool = False) -> ExecResult:
        return self._execution.execute_with_undo(sql, confirmed=confirmed)

    def propose(self, sql: str) -> ExecResult:
        return self._execution.propose_execution(sql)

    def confirm(self, token: str, decision: bool) -> ExecResult:
        return self._execution.confirm_execution(token, decision)

    def undo_last(self) -> ExecResult:
        return self._undo.undo_last()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_history(self) -> list[HistoryEntry]:
        return self._history.read_all()

    def clear_history_all(self) -> dict:
        return {"ok": self._history.clear_all()}

    def delete_history_selection(self, ids: Iterable[str] = ()) -> dict:
        return {"ok": self._history.delete_by_ids(ids or ())}

    def export_single(self, sql: str, path: Path) -> dict:
        return export_service.export_single(sql, path)

    def export_history(self, path: Path) -> dict:
        return export_service.export_history(self._history.read_all(), path)

    # ------------------------------------------------------------------
    # Connection config
    # ------------------------------------------------------------------

    def get_db_config(self) -> ConnectionConfig:
        return self._context.config

    def set_db_config(self, cfg: Optional[dict] = None) -> dict:
        try:
            return {"ok": True, "config": self._context.config_store.write(cfg or {})}
        except (ConfigError, OSError) as exc:
            return {"ok": False, "error": str(exc)}

    def test_connection(self, cfg: Optional[dict] = None) -> dict:
        config = ConnectionConfig.from_dict(cfg) if cfg is not None else None
        return test_connection(self._context, config)

    def list_databases(self) -> dict:
        try:
            return {"ok": True, "databases": list_databases(self._context.data_dir)}
        except OSError as exc:
            return {"ok": False, "error": str(exc)}

    def set_active_database(self, name: str) -> dict:
        try:
            return {"ok": True, "config": self._context.config_store.set_database(name)}
        except (ConfigError, OSError) as exc:
            return {"ok": False, "error": str(exc)}
