# tests/unit/services/test_audit.py
import json
import unittest

from nlqms.core.enums import StatementState
from nlqms.services.audit import REQUIRED_FIELDS, AuditRecord, log_outcome
from nlqms.sql.models import ExecResult
from nlqms.utils.hashing import hash_sql


class TestAuditLogger(unittest.TestCase):

    def test_record_has_all_required_fields(self):
        record = AuditRecord(statement_hash=hash_sql("SELECT 1"), namespace="school",
                             state=StatementState.HISTORY_RECORDED)
        with self.assertLogs("nlqms.audit", level="INFO") as logs:
            entry = log_outcome(record, ExecResult.rowset([{"x": 1}]))
        self.assertEqual(set(entry), REQUIRED_FIELDS)
        logged = json.loads(logs.records[0].getMessage())
        self.assertEqual(logged["state"], "history-recorded")
        self.assertEqual(logged["result_type"], "rows")

    def test_failure_message_first_line_only(self):
        record = AuditRecord(statement_hash=hash_sql("x"), namespace="school")
        with self.assertLogs("nlqms.audit", level="INFO"):
            entry = log_outcome(record, ExecResult.failure("line one\nline two"))
        self.assertEqual(entry["error"], "line one")

    def test_bad_hash_fails_loud(self):
        record = AuditRecord(statement_hash="short", namespace="school")
        with self.assertRaises(AssertionError):
            log_outcome(record, ExecResult.write(1))


if __name__ == "__main__":
    unittest.main()
