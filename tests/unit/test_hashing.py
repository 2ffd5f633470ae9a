# tests/unit/test_hashing.py
import unittest
from nlqms.utils.hashing import hash_sql


class TestHashSql(unittest.TestCase):

    def test_returns_64_chars(self):
        self.assertEqual(len(hash_sql("DELETE FROM students WHERE id = 1")), 64)

    def test_deterministic(self):
        self.assertEqual(hash_sql("SELECT 1"), hash_sql("SELECT 1"))

    def test_surrounding_whitespace_ignored(self):
        self.assertEqual(hash_sql("  SELECT 1\n"), hash_sql("SELECT 1"))

    def test_different_sql_different_hash(self):
        self.assertNotEqual(hash_sql("SELECT 1"), hash_sql("SELECT 2"))

    def test_empty(self):
        self.assertEqual(len(hash_sql("")), 64)
        self.assertEqual(hash_sql(None), hash_sql(""))

    def test_lone_surrogate_hashes(self):
        digest = hash_sql("SELECT '\ud800'")
        self.assertEqual(len(digest), 64)
        self.assertNotEqual(digest, hash_sql("SELECT '\udc80'"))


if __name__ == "__main__":
    unittest.main()
