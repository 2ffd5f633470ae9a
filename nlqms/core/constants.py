# nlqms/core/constants.py
"""
Project-wide constants.
Do not import from services or ui here. This is a leaf module.
"""
from pathlib import Path

APP_NAME = "NLQMS"
APP_VERSION = "0.1.0"

# Paths
APP_DIR = Path.home() / ".nlqms"
CONFIG_FILE_NAME = "db.config.json"
HISTORY_FILE_NAME = "history.json"
DATA_DIR_NAME = "databases"
DB_FILE_SUFFIX = ".db"
DEFAULT_EXPORT_NAME = "nlqms_export.sql"

# Connection defaults
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3306

# System databases that statements may never reference
BLOCKED_DATABASES = ("mysql", "information_schema", "performance_schema", "sys")

# History namespaces
NO_DB_KEY = "__no_db__"
LEGACY_KEY = "__legacy__"
DATABASE_NAME_PATTERN = r"^[A-Za-z0-9_]+$"
STATEMENT_HASH_LENGTH = 64  # SHA256 hex digest
MAX_PENDING_CONFIRMATIONS = 32  # oldest parked statement evicted beyond this

# User-facing messages
MSG_EMPTY_SQL = "Empty SQL."
MSG_BLOCKED_DB = "Query references a blocked system database."
MSG_DESTRUCTIVE = "Destructive operation detected. Confirmation is required."
MSG_SAFE = "Query looks safe."
MSG_CONFIRM_PROMPT = "This SQL may modify or delete data. Proceed?"
MSG_CANCELLED = "Execution cancelled by user."
MSG_UNKNOWN_TOKEN = "Unknown or expired confirmation token."
MSG_CONFIRMATION_PENDING = "Confirmation required before execution."
MSG_DB_EXPLANATION = (
    "The database reported an error. Please check table names, column names, and syntax."
)
MSG_NO_HISTORY = "No history to undo."
MSG_UNDO_UNSUPPORTED = "Undo is only available for DELETE ... WHERE queries captured in MVP."
MSG_NO_CAPTURED_ROWS = "No captured rows available to restore."
