# nlqms/services/export_service.py
"""
Export of statements to plain-text .sql files.
Single statement: the trimmed SQL plus a newline.
History: one block per entry, "-- <timestamp>" then the SQL, blank line between blocks.
"""
import logging
from pathlib import Path
from typing import Iterable

from nlqms.sql.models import HistoryEntry

_log = logging.getLogger("nlqms.services.export_service")


def format_history(entries: Iterable[HistoryEntry]) -> str:
    return "\n".join(f"-- {e.timestamp}\n{e.sql}\n" for e in entries)


def _write(path: Path, text: str) -> dict:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        _log.error("export to %s failed: %s", path, exc)
        return {"ok": False, "error": str(exc)}
    _log.info("exported %d bytes to %s", len(text.encode("utf-8")), path)
    return {"ok": True, "message": "Exported successfully."}


def export_single(sql: str, path: Path) -> dict:
    return _write(Path(path), (sql or "").strip() + "\n")


def export_history(entries: Iterable[HistoryEntry], path: Path) -> dict:
    return _write(Path(path), format_history(entries))
