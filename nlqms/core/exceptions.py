# nlqms/core/exceptions.py
"""
All custom exceptions for NLQMS.
Services catch these at their boundary and turn them into ExecResult failures;
none of them is allowed to terminate the process.
"""
from nlqms.core.constants import MSG_CANCELLED


class NlqmsError(Exception):
    """Base exception for all NLQMS errors."""


# --- Pipeline ---

class ValidationError(NlqmsError):
    """Statement rejected by the classifier (empty input, blocked namespace)."""


class ConfirmationDeclined(NlqmsError):
    """User cancelled a destructive operation. Message is always the cancel text."""
    def __init__(self, msg=MSG_CANCELLED):
        super().__init__(msg)


class UndoUnavailable(NlqmsError):
    """Nothing to undo: empty history, no undo data, or no captured rows."""


# --- DB ---

class DatabaseError(NlqmsError):
    """Failure reported by the connection or transaction layer."""


# --- Persistence ---

class PersistenceError(NlqmsError):
    """History or config file could not be read or written."""


# --- Config ---

class ConfigError(NlqmsError):
    """Configuration error."""
