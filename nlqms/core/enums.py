# nlqms/core/enums.py
"""
Canonical enums for the entire system.
String values are what gets written to history files and audit records.
"""
from enum import Enum


class SafetyClass(str, Enum):
    SAFE = "safe"
    DESTRUCTIVE = "destructive"
    BLOCKED = "blocked"


class ResultType(str, Enum):
    ROWS = "rows"
    WRITE = "write"


class UndoType(str, Enum):
    DELETE = "DELETE"


class StatementState(str, Enum):
    RECEIVED = "received"
    CLASSIFIED = "classified"
    REJECTED = "rejected"
    CONFIRMATION_PENDING = "confirmation-pending"
    CANCELLED = "cancelled"
    EXECUTING = "executing"
    COMMITTED = "committed"
    FAILED = "failed"
    HISTORY_RECORDED = "history-recorded"
