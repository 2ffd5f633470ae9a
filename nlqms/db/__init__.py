# nlqms/db — SQLite layer
# One file per named database. Connections are opened per call by
# ConnectionExecutor and always closed; nothing else opens them for statements.
from nlqms.db.connection import list_databases, open_connection, test_connection
from nlqms.db.executor import ConnectionExecutor, LiveConnection, QueryOutput

__all__ = [
    "ConnectionExecutor",
    "LiveConnection",
    "QueryOutput",
    "list_databases",
    "open_connection",
    "test_connection",
]
