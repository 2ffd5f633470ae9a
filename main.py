"""
NLQMS — command-line entry point.
Runs one statement (or an undo/history action) through QueryService.
Destructive statements are confirmed with the Qt dialog unless --yes is given.
No business logic here.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from nlqms.config.db_config import SessionContext
from nlqms.core.constants import APP_DIR, APP_NAME, DEFAULT_EXPORT_NAME
from nlqms.services.query_service import QueryService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
_log = logging.getLogger("nlqms.main")

_qt_app = None


def _dialog_confirm(message: str, sql: str) -> bool:
    global _qt_app
    from PyQt6.QtWidgets import QApplication
    from nlqms.ui.dialogs.confirm_dialog import request_confirmation

    if QApplication.instance() is None:
        _qt_app = QApplication(sys.argv)
        _qt_app.setApplicationName(APP_NAME)
    return request_confirmation(message, sql)


def _print(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nlqms", description="Run SQL through the safe-execution pipeline.")
    parser.add_argument("sql", nargs="?", help="statement to execute")
    parser.add_argument("--app-dir", type=Path, default=APP_DIR, help="config/history/database directory")
    parser.add_argument("--yes", action="store_true", help="skip the confirmation dialog")
    parser.add_argument("--undo", action="store_true", help="undo the last captured DELETE ... WHERE")
    parser.add_argument("--history", action="store_true", help="print history of the active database")
    parser.add_argument("--clear-history", action="store_true", help="clear history of the active database")
    parser.add_argument("--use", metavar="NAME", help="set the active database")
    parser.add_argument("--databases", action="store_true", help="list available databases")
    parser.add_argument("--export", metavar="PATH", type=Path, nargs="?",
                        const=Path.home() / DEFAULT_EXPORT_NAME,
                        help="export the statement (or history, if none given) to a .sql file")
    return parser


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    service = QueryService(SessionContext(args.app_dir), confirm_callback=_dialog_confirm)

    if args.use:
        result = service.set_active_database(args.use)
        _print({"ok": result["ok"], "error": result.get("error")} if not result["ok"]
               else {"ok": True, "config": result["config"].masked()})
        return 0 if result["ok"] else 1
    if args.databases:
        _print(service.list_databases())
        return 0
    if args.history:
        _print([e.to_dict() for e in service.get_history()])
        return 0
    if args.clear_history:
        _print(service.clear_history_all())
        return 0
    if args.export is not None:
        result = service.export_single(args.sql, args.export) if args.sql else service.export_history(args.export)
        _print(result)
        return 0 if result["ok"] else 1
    if args.undo:
        result = service.undo_last()
    elif args.sql:
        result = service.execute(args.sql, confirmed=args.yes)
    else:
        _build_parser().print_help()
        return 2

    _print(result.to_dict())
    _log.info("%s finished: ok=%s", APP_NAME, result.ok)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
