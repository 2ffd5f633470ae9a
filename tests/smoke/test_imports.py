# tests/smoke/test_imports.py
"""Smoke test: all non-UI packages import cleanly."""
import unittest


class TestImports(unittest.TestCase):

    def test_core_constants(self):
        from nlqms.core import constants
        self.assertEqual(constants.APP_NAME, "NLQMS")

    def test_core_enums(self):
        from nlqms.core import enums
        self.assertIsNotNone(enums.SafetyClass)

    def test_core_exceptions(self):
        from nlqms.core import exceptions
        self.assertTrue(issubclass(exceptions.UndoUnavailable, exceptions.NlqmsError))

    def test_utils_hashing(self):
        from nlqms.utils import hashing
        self.assertTrue(callable(hashing.hash_sql))

    def test_sql_package(self):
        import nlqms.sql
        self.assertTrue(callable(nlqms.sql.classify))

    def test_db_package(self):
        import nlqms.db
        self.assertIsNotNone(nlqms.db.ConnectionExecutor)

    def test_services(self):
        from nlqms.services import query_service
        self.assertIsNotNone(query_service.QueryService)


if __name__ == "__main__":
    unittest.main()
