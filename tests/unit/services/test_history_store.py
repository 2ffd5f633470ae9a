# tests/unit/services/test_history_store.py
import json
import shutil
import tempfile
import unittest
from pathlib import Path

from nlqms.config.db_config import SessionContext
from nlqms.core.constants import LEGACY_KEY, NO_DB_KEY
from nlqms.services.history_store import HistoryStore, normalize_store
from nlqms.sql.models import UndoInfo


class _HistoryCase(unittest.TestCase):

    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp())
        self.ctx = SessionContext(self.tmp)
        self.ctx.ensure_dirs()
        self.ctx.config_store.set_database("school")
        self.store = HistoryStore(self.ctx)
        self.store.ensure_file()

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _raw(self):
        return json.loads(self.store.path.read_text())


class TestAppendAndRead(_HistoryCase):

    def test_ensure_file_creates_empty_object(self):
        self.assertEqual(self._raw(), {})

    def test_append_preserves_order(self):
        for i in range(3):
            self.store.append(f"SELECT {i}", None)
        self.assertEqual([e.sql for e in self.store.read_all()],
                         ["SELECT 0", "SELECT 1", "SELECT 2"])

    def test_append_returns_entry_with_id_and_timestamp(self):
        entry = self.store.append("UPDATE students SET age = 1", 3)
        self.assertTrue(entry.id)
        self.assertTrue(entry.timestamp.endswith("Z"))
        self.assertEqual(entry.affected_rows, 3)

    def test_ids_unique_across_namespaces(self):
        ids = [self.store.append("SELECT 1", None).id for _ in range(5)]
        self.ctx.config_store.set_database("library")
        ids += [self.store.append("SELECT 1", None).id for _ in range(5)]
        self.assertEqual(len(set(ids)), 10)

    def test_file_shape_is_namespace_keyed(self):
        self.store.append("SELECT 1", None)
        raw = self._raw()
        self.assertEqual(list(raw), ["school"])
        self.assertEqual(raw["school"][0]["meta"], {"affectedRows": None})

    def test_namespace_sentinel_without_database(self):
        self.ctx.config_store.write({"database": ""})
        self.store.append("SELECT 1", None)
        self.assertIn(NO_DB_KEY, self._raw())

    def test_undo_round_trip_with_bytes(self):
        undo = UndoInfo(table="files", rows=[{"id": 1, "blob": b"\x00\xff", "note": None}])
        self.store.append("DELETE FROM files WHERE id = 1", 1, undo)
        restored = self.store.last().undo
        self.assertEqual(restored.table, "files")
        self.assertEqual(restored.rows, ({"id": 1, "blob": b"\x00\xff", "note": None},))


class TestNamespaces(_HistoryCase):

    def test_switching_namespace_changes_visible_list(self):
        self.store.append("SELECT 1", None)
        self.ctx.config_store.set_database("library")
        self.assertEqual(self.store.read_all(), [])
        self.store.append("SELECT 2", None)
        self.ctx.config_store.set_database("school")
        self.assertEqual([e.sql for e in self.store.read_all()], ["SELECT 1"])

    def test_clear_all_is_namespace_local(self):
        self.store.append("SELECT 1", None)
        self.ctx.config_store.set_database("library")
        self.store.append("SELECT 2", None)
        before = self.store.read_all()
        self.ctx.config_store.set_database("school")
        self.assertTrue(self.store.clear_all())
        self.assertEqual(self.store.read_all(), [])
        self.ctx.config_store.set_database("library")
        self.assertEqual(self.store.read_all(), before)

    def test_delete_by_ids_keeps_survivor_order(self):
        entries = [self.store.append(f"SELECT {i}", None) for i in range(5)]
        self.assertTrue(self.store.delete_by_ids({entries[1].id, entries[3].id}))
        self.assertEqual([e.sql for e in self.store.read_all()],
                         ["SELECT 0", "SELECT 2", "SELECT 4"])

    def test_delete_unknown_ids_is_noop(self):
        self.store.append("SELECT 1", None)
        self.assertTrue(self.store.delete_by_ids(["missing"]))
        self.assertEqual(len(self.store.read_all()), 1)


class TestLegacyAndFailures(_HistoryCase):

    def test_bare_list_becomes_legacy_namespace(self):
        self.store.path.write_text(json.dumps([
            {"id": "1", "timestamp": "2024-01-01T00:00:00.000Z", "sql": "SELECT 1",
             "meta": {"affectedRows": None}},
        ]))
        self.assertEqual(self.store.read_all(), [])
        self.ctx.config_store.set_database(LEGACY_KEY)
        self.assertEqual([e.sql for e in self.store.read_all()], ["SELECT 1"])

    def test_legacy_list_upgraded_on_write(self):
        self.store.path.write_text(json.dumps([{"id": "1", "timestamp": "t", "sql": "SELECT 1"}]))
        self.store.append("SELECT 2", None)
        raw = self._raw()
        self.assertEqual(set(raw), {LEGACY_KEY, "school"})

    def test_normalize_shapes(self):
        self.assertEqual(normalize_store([{"id": "a"}, "junk"]), {LEGACY_KEY: [{"id": "a"}]})
        self.assertEqual(normalize_store({"perDb": {"school": []}}), {"school": []})
        self.assertEqual(normalize_store({"school": "oops", "library": []}), {"library": []})
        self.assertEqual(normalize_store("nonsense"), {})

    def test_corrupt_file_is_swallowed(self):
        self.store.path.write_text("{broken")
        self.assertEqual(self.store.read_all(), [])
        self.assertIsNone(self.store.append("SELECT 1", None))
        self.assertFalse(self.store.clear_all())
        self.assertFalse(self.store.delete_by_ids(["x"]))

    def test_unreadable_path_is_swallowed(self):
        store = HistoryStore(self.ctx, path=self.tmp)  # a directory, not a file
        with self.assertLogs("nlqms.services.history_store", level="ERROR"):
            self.assertEqual(store.read_all(), [])
        self.assertIsNone(store.append("SELECT 1", None))


if __name__ == "__main__":
    unittest.main()
