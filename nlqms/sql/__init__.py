# nlqms/sql — statement classification and pipeline data models.
# Every statement passes classify() before it reaches the executor,
# including SQL produced by the translator.
from nlqms.sql.classifier import classify, is_rowset, match_reversible_delete, match_use
from nlqms.sql.models import ExecResult, HistoryEntry, UndoInfo, Verdict

__all__ = [
    "classify",
    "is_rowset",
    "match_reversible_delete",
    "match_use",
    "ExecResult",
    "HistoryEntry",
    "UndoInfo",
    "Verdict",
]
