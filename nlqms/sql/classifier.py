# nlqms/sql/classifier.py
"""
Statement classifier — the safety gate in front of every execution.

Pure functions, no I/O. Coarse regex matching only; this module is the single
place SQL text is pattern-matched, so a real parser can replace it without
touching the services.

Order (fixed):
  1. Empty check          — "Empty SQL."
  2. Blocked namespace    — dotted reference or USE of a deny-listed database;
                            wins over everything else
  3. Destructive patterns — DROP TABLE/DATABASE, DELETE FROM, TRUNCATE TABLE, UPDATE <id>
  4. Safe

The blocked check is plain substring containment on the lowered text. It can
over-block (a column or alias ending in a system database name) and that is
accepted.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

from nlqms.core.constants import (
    BLOCKED_DATABASES,
    MSG_BLOCKED_DB,
    MSG_DESTRUCTIVE,
    MSG_EMPTY_SQL,
    MSG_SAFE,
)
from nlqms.core.enums import SafetyClass
from nlqms.sql.models import Verdict

_DESTRUCTIVE = re.compile(
    r"(drop\s+table|drop\s+database|delete\s+from|truncate\s+table|update\s+\w+)",
    re.IGNORECASE,
)
_USE = re.compile(r"^\s*use\s+([a-zA-Z0-9_]+);?\s*$", re.IGNORECASE)
_REVERSIBLE_DELETE = re.compile(
    r"^\s*delete\s+from\s+([a-zA-Z0-9_]+)\s+where\s+(.+?)\s*;?\s*$",
    re.IGNORECASE | re.DOTALL,
)
_ROWSET = re.compile(r"^\s*(select|show|describe|explain)\b", re.IGNORECASE)


def classify(sql: Optional[str], blocked: Iterable[str] = BLOCKED_DATABASES) -> Verdict:
    """
    Classify a raw statement.
    Deterministic for a given deny-list. Never raises.
    """
    raw = (sql or "").strip()
    if not raw:
        return Verdict(False, False, MSG_EMPTY_SQL, SafetyClass.BLOCKED)

    lowered = raw.lower()
    if references_blocked_database(lowered, blocked):
        return Verdict(False, False, MSG_BLOCKED_DB, SafetyClass.BLOCKED)

    if _DESTRUCTIVE.search(lowered):
        return Verdict(True, True, MSG_DESTRUCTIVE, SafetyClass.DESTRUCTIVE)

    return Verdict(True, False, MSG_SAFE, SafetyClass.SAFE)


def references_blocked_database(lowered: str, blocked: Iterable[str] = BLOCKED_DATABASES) -> bool:
    """True if lowered text contains '<db>.' or 'use <db>' for any deny-listed db."""
    return any(f"{db}." in lowered or f"use {db}" in lowered for db in blocked)


def match_use(sql: str) -> Optional[str]:
    """Return the target database of a `USE <name>` statement, else None."""
    m = _USE.match(sql or "")
    return m.group(1) if m else None


def match_reversible_delete(sql: str) -> Optional[tuple[str, str]]:
    """
    Return (table, where_condition) for a single-table DELETE ... WHERE, else None.
    Trailing semicolon is not part of the condition.
    """
    m = _REVERSIBLE_DELETE.match(sql or "")
    if not m:
        return None
    return m.group(1), m.group(2)


def is_rowset(sql: str) -> bool:
    """True for statements that return rows (SELECT, SHOW, DESCRIBE, EXPLAIN)."""
    return bool(_ROWSET.match(sql or ""))
