# nlqms/services/audit.py
"""
Audit logger for statement executions and undo replays.
One record per orchestrated call, written after the outcome is known.
Must NEVER log: raw SQL text, captured row values, passwords.
statement_hash must always be exactly 64 characters.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

from nlqms.core.constants import STATEMENT_HASH_LENGTH
from nlqms.core.enums import StatementState
from nlqms.sql.models import ExecResult

# Module-level logger; output destination configured by app startup
_log = logging.getLogger("nlqms.audit")


REQUIRED_FIELDS = frozenset([
    "statement_hash",
    "namespace",
    "state",
    "ok",
    "result_type",
    "affected_rows",
    "undo_captured",
    "error",
    "execution_ms",
])


@dataclass
class AuditRecord:
    statement_hash: str
    namespace: str
    state: StatementState = StatementState.RECEIVED
    undo_captured: int = 0
    execution_ms: float = 0.0


def log_outcome(record: AuditRecord, result: ExecResult) -> dict:
    """
    Serialize an outcome to the audit log and return the record written.
    Raises AssertionError if an invariant is violated (fail loud, never silent).
    """
    assert len(record.statement_hash) == STATEMENT_HASH_LENGTH, (
        f"statement_hash length {len(record.statement_hash)} != {STATEMENT_HASH_LENGTH}"
    )

    entry = {
        "statement_hash": record.statement_hash,
        "namespace":      record.namespace,
        "state":          record.state.value,
        "ok":             result.ok,
        "result_type":    result.type.value if result.type is not None else None,
        "affected_rows":  result.affected_rows,
        "undo_captured":  record.undo_captured,
        "error":          _first_line(result.error),
        "execution_ms":   round(record.execution_ms, 3),
    }

    missing = REQUIRED_FIELDS - entry.keys()
    assert not missing, f"Missing required log fields: {missing}"

    assert "sql" not in entry, "raw SQL must never be logged"
    assert "rows" not in entry, "captured rows must never be logged"

    _log.info(json.dumps(entry))
    return entry


def _first_line(message: Optional[str]) -> Optional[str]:
    if message is None:
        return None
    return message.splitlines()[0] if message else message
