# tests/unit/sql/test_models.py
import dataclasses
import unittest

from nlqms.core.enums import ResultType, UndoType
from nlqms.sql.models import ExecResult, HistoryEntry, UndoInfo


class TestUndoInfo(unittest.TestCase):

    def test_rows_frozen_as_tuple(self):
        undo = UndoInfo(table="students", rows=[{"id": 1}])
        self.assertIsInstance(undo.rows, tuple)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            undo.table = "other"

    def test_unknown_type_ignored(self):
        self.assertIsNone(UndoInfo.from_dict({"type": "UPDATE", "table": "t", "rows": []}))

    def test_from_dict(self):
        undo = UndoInfo.from_dict({"type": "DELETE", "table": "t", "rows": [{"a": 1}]})
        self.assertEqual(undo.type, UndoType.DELETE)
        self.assertEqual(undo.rows, ({"a": 1},))


class TestHistoryEntry(unittest.TestCase):

    def test_disk_shape_uses_affected_rows_key(self):
        entry = HistoryEntry(id="1", timestamp="t", sql="SELECT 1")
        data = entry.to_dict()
        self.assertEqual(data["meta"], {"affectedRows": None})
        self.assertNotIn("undo", data)

    def test_from_dict_with_undo(self):
        entry = HistoryEntry.from_dict({
            "id": "abc", "timestamp": "t", "sql": "DELETE FROM t WHERE id = 1",
            "meta": {"affectedRows": 1},
            "undo": {"type": "DELETE", "table": "t", "rows": [{"id": 1}]},
        })
        self.assertEqual(entry.affected_rows, 1)
        self.assertEqual(entry.undo.table, "t")

    def test_from_dict_missing_meta(self):
        entry = HistoryEntry.from_dict({"id": "x", "timestamp": "t", "sql": "SELECT 1"})
        self.assertIsNone(entry.affected_rows)
        self.assertIsNone(entry.undo)


class TestExecResult(unittest.TestCase):

    def test_write_to_dict(self):
        self.assertEqual(ExecResult.write(3).to_dict(),
                         {"ok": True, "type": "write", "affectedRows": 3})

    def test_rows_to_dict(self):
        r = ExecResult.rowset([{"id": 1}])
        self.assertEqual(r.type, ResultType.ROWS)
        self.assertEqual(r.to_dict(), {"ok": True, "type": "rows", "rows": [{"id": 1}]})

    def test_failure_to_dict(self):
        self.assertEqual(ExecResult.failure("boom", "hint").to_dict(),
                         {"ok": False, "error": "boom", "explanation": "hint"})


if __name__ == "__main__":
    unittest.main()
