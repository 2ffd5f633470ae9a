# nlqms/utils/hashing.py
"""
Canonical hashing utilities.
statement_hash: SHA256 of the trimmed SQL text, always 64 hex characters.
Audit records carry the hash, never the statement itself.
"""
import hashlib

from nlqms.core.constants import STATEMENT_HASH_LENGTH


def hash_sql(sql: str) -> str:
    """
    Compute SHA256 hash of a statement (surrounding whitespace ignored).
    Returns 64-character hex string.
    """
    normalized = (sql or "").strip()
    digest = hashlib.sha256(normalized.encode("utf-8", "surrogatepass")).hexdigest()
    assert len(digest) == STATEMENT_HASH_LENGTH, f"Hash length invariant violated: {len(digest)}"
    return digest
