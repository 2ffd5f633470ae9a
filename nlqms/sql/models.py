# nlqms/sql/models.py
"""
Data models for the safe-execution pipeline.
Verdict, UndoInfo and HistoryEntry are frozen: created once, never mutated.
ExecResult is the structured outcome every service call returns.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from nlqms.core.enums import ResultType, SafetyClass, UndoType


@dataclass(frozen=True)
class Verdict:
    """Classifier output for a single statement. Never persisted."""
    accepted: bool
    requires_confirmation: bool
    message: str
    safety: SafetyClass = SafetyClass.SAFE


@dataclass(frozen=True)
class UndoInfo:
    """
    Pre-image of a reversible delete.
    rows is a tuple of column -> value mappings in the order the database returned them.
    """
    table: str
    rows: tuple[dict, ...] = ()
    type: UndoType = UndoType.DELETE

    def __post_init__(self) -> None:
        # Accept any iterable of mappings; store as an immutable tuple of plain dicts.
        object.__setattr__(self, "rows", tuple(dict(r) for r in self.rows))

    def to_dict(self) -> dict:
        return {"type": self.type.value, "table": self.table, "rows": [dict(r) for r in self.rows]}

    @classmethod
    def from_dict(cls, data: dict) -> Optional["UndoInfo"]:
        """Returns None for undo payloads of a type this version does not know."""
        try:
            undo_type = UndoType(data.get("type"))
        except ValueError:
            return None
        return cls(table=data.get("table", ""), rows=data.get("rows") or (), type=undo_type)


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    timestamp: str
    sql: str
    affected_rows: Optional[int] = None
    undo: Optional[UndoInfo] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "timestamp": self.timestamp,
            "sql": self.sql,
            "meta": {"affectedRows": self.affected_rows},
        }
        if self.undo is not None:
            data["undo"] = self.undo.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        meta = data.get("meta") or {}
        affected = meta.get("affectedRows", meta.get("affected_rows"))
        undo_raw = data.get("undo")
        return cls(
            id=str(data.get("id", "")),
            timestamp=data.get("timestamp", ""),
            sql=data.get("sql", ""),
            affected_rows=affected,
            undo=UndoInfo.from_dict(undo_raw) if isinstance(undo_raw, dict) else None,
        )


@dataclass
class ExecResult:
    """
    Outcome of an execute/undo call.
    ok=False results carry error (and explanation for database failures);
    pending results carry the token that resumes them.
    """
    ok: bool
    type: Optional[ResultType] = None
    rows: Optional[list[dict]] = None
    affected_rows: Optional[int] = None
    error: Optional[str] = None
    explanation: Optional[str] = None
    token: Optional[str] = None
    pending: bool = False

    @classmethod
    def failure(cls, error: str, explanation: Optional[str] = None) -> "ExecResult":
        return cls(ok=False, error=error, explanation=explanation)

    @classmethod
    def write(cls, affected_rows: int) -> "ExecResult":
        return cls(ok=True, type=ResultType.WRITE, affected_rows=affected_rows)

    @classmethod
    def rowset(cls, rows: list[dict]) -> "ExecResult":
        return cls(ok=True, type=ResultType.ROWS, rows=rows)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"ok": self.ok}
        if self.type is not None:
            data["type"] = self.type.value
        if self.type == ResultType.ROWS:
            data["rows"] = self.rows or []
        if self.type == ResultType.WRITE:
            data["affectedRows"] = self.affected_rows
        for key in ("error", "explanation", "token"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.pending:
            data["pending"] = True
        return data
