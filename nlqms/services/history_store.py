# nlqms/services/history_store.py
"""
HistoryStore — append-only, per-namespace statement history in a JSON file.

File shape: {"<namespace>": [entry, ...], ...}. The namespace is the active
database name, resolved from the session context on every call.

History is auxiliary: I/O and decode failures are logged and swallowed so they
never block execution or undo. Readers then see an empty list, writers get
False/None back.

Legacy shapes are upgraded on read:
  - a bare list           -> {"__legacy__": list}
  - {"perDb": {...}}      -> the inner mapping
"""
from __future__ import annotations

import json
import logging
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from nlqms.config.db_config import SessionContext
from nlqms.core.constants import LEGACY_KEY
from nlqms.sql.models import HistoryEntry, UndoInfo

_log = logging.getLogger("nlqms.services.history_store")

_BYTES_TAG = "__bytes__"


def utc_timestamp() -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2026-01-31T12:00:00.123Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _encode_value(value):
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {_BYTES_TAG: bytes(value).hex()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_object(obj: dict):
    if len(obj) == 1 and _BYTES_TAG in obj and isinstance(obj[_BYTES_TAG], str):
        return bytes.fromhex(obj[_BYTES_TAG])
    return obj


def normalize_store(parsed) -> dict[str, list[dict]]:
    """Bring any on-disk shape to {namespace: [entry dicts]}."""
    if isinstance(parsed, list):
        return {LEGACY_KEY: [e for e in parsed if isinstance(e, dict)]}
    if not isinstance(parsed, dict):
        _log.warning("history store has unexpected top-level type %s, starting empty",
                     type(parsed).__name__)
        return {}
    if isinstance(parsed.get("perDb"), dict):
        parsed = parsed["perDb"]
    store: dict[str, list[dict]] = {}
    for key, entries in parsed.items():
        if not isinstance(entries, list):
            _log.warning("dropping malformed history namespace %r", key)
            continue
        store[str(key)] = [e for e in entries if isinstance(e, dict)]
    return store


class HistoryStore:
    def __init__(self, context: SessionContext, path: Optional[Path] = None) -> None:
        self._context = context
        self._path = path or context.history_path

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------

    def ensure_file(self) -> None:
        try:
            if not self._path.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.write_text("{}", encoding="utf-8")
        except OSError as exc:
            _log.error("failed to initialize history file %s: %s", self._path, exc)

    def _load(self) -> dict[str, list[dict]]:
        """Read and normalize the whole store. Raises on I/O or decode failure."""
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        return normalize_store(json.loads(raw, object_hook=_decode_object))

    def _save(self, store: dict[str, list[dict]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(store, indent=2, default=_encode_value), encoding="utf-8")

    @staticmethod
    def _new_id(store: dict[str, list[dict]]) -> str:
        taken = {e.get("id") for entries in store.values() for e in entries}
        while True:
            candidate = f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"
            if candidate not in taken:
                return candidate

    # ------------------------------------------------------------------
    # Public API: all operations apply to the active namespace only
    # ------------------------------------------------------------------

    def append(self, sql: str, affected_rows: Optional[int],
               undo: Optional[UndoInfo] = None) -> Optional[HistoryEntry]:
        """Append an entry to the active namespace. Returns it, or None on failure."""
        try:
            store = self._load()
            key = self._context.namespace_key()
            entry = HistoryEntry(
                id=self._new_id(store),
                timestamp=utc_timestamp(),
                sql=sql,
                affected_rows=affected_rows,
                undo=undo,
            )
            store.setdefault(key, []).append(entry.to_dict())
            self._save(store)
            _log.debug("history appended: namespace=%s id=%s", key, entry.id)
            return entry
        except (OSError, ValueError, TypeError) as exc:
            _log.error("failed to append history: %s", exc)
            return None

    def read_all(self) -> list[HistoryEntry]:
        """Entries of the active namespace in insertion order."""
        try:
            store = self._load()
            entries = store.get(self._context.namespace_key(), [])
            return [HistoryEntry.from_dict(e) for e in entries]
        except (OSError, ValueError, TypeError) as exc:
            _log.error("failed to read history: %s", exc)
            return []

    def last(self) -> Optional[HistoryEntry]:
        entries = self.read_all()
        return entries[-1] if entries else None

    def clear_all(self) -> bool:
        try:
            store = self._load()
            key = self._context.namespace_key()
            store[key] = []
            self._save(store)
            _log.info("history cleared: namespace=%s", key)
            return True
        except (OSError, ValueError, TypeError) as exc:
            _log.error("failed to clear history: %s", exc)
            return False

    def delete_by_ids(self, ids: Iterable[str]) -> bool:
        try:
            doomed = set(ids)
            store = self._load()
            key = self._context.namespace_key()
            before = store.get(key, [])
            store[key] = [e for e in before if e.get("id") not in doomed]
            self._save(store)
            _log.info("history entries deleted: namespace=%s count=%d",
                      key, len(before) - len(store[key]))
            return True
        except (OSError, ValueError, TypeError) as exc:
            _log.error("failed to delete history entries: %s", exc)
            return False
