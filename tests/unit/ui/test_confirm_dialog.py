"""Tests for the destructive-query confirmation dialog (offscreen Qt)."""
import os
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PyQt6.QtWidgets import QApplication, QLabel
    from nlqms.ui.dialogs.confirm_dialog import ConfirmQueryDialog
except ImportError:  # Qt runtime libraries not available on this machine
    QApplication = None


@unittest.skipIf(QApplication is None, "PyQt6 not importable")
class TestConfirmQueryDialog(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def _dialog(self):
        return ConfirmQueryDialog("This SQL may modify or delete data. Proceed?",
                                  "DELETE FROM students WHERE id = 1")

    def test_defaults_to_cancel(self):
        self.assertFalse(self._dialog().proceed)

    def test_proceed(self):
        dialog = self._dialog()
        dialog._on_proceed()
        self.assertTrue(dialog.proceed)

    def test_cancel(self):
        dialog = self._dialog()
        dialog._on_proceed()
        dialog._on_cancel()
        self.assertFalse(dialog.proceed)

    def test_sql_shown_read_only(self):
        dialog = self._dialog()
        self.assertEqual(dialog._sql_view.toPlainText(), "DELETE FROM students WHERE id = 1")
        self.assertTrue(dialog._sql_view.isReadOnly())

    def test_shows_message_and_statement_only(self):
        dialog = self._dialog()
        labels = [label.text() for label in dialog.findChildren(QLabel)]
        self.assertIn("This SQL may modify or delete data. Proceed?", labels)
        self.assertFalse(any("destructive operation detected" in t.lower() for t in labels))


if __name__ == "__main__":
    unittest.main()
