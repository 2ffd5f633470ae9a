# nlqms/ui/dialogs/confirm_dialog.py
"""
ConfirmQueryDialog — modal confirmation for destructive statements.
Shows the warning message and the full SQL (read-only).
Cancel / Proceed buttons; Cancel is the default. Never executes anything,
only returns the decision.
"""
import logging
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel,
    QPushButton, QPlainTextEdit, QFrame
)
from PyQt6.QtGui import QFont

_log = logging.getLogger("nlqms.ui.dialogs.confirm_dialog")


class ConfirmQueryDialog(QDialog):
    def __init__(self, message: str, sql: str, parent=None) -> None:
        super().__init__(parent)
        self._proceed = False

        self.setWindowTitle("Confirm Destructive Query")
        self.setMinimumWidth(520)
        self.setModal(True)
        self.setStyleSheet("QDialog { background: #1e1e1e; color: #cccccc; }")

        font = QFont("Monospace")
        font.setStyleHint(QFont.StyleHint.Monospace)
        font.setPointSize(11)

        header = QLabel("⚠  Destructive Query")
        header.setStyleSheet("font-size: 14px; font-weight: bold; color: #f0c040; padding: 4px;")

        warning = QLabel(message)
        warning.setWordWrap(True)
        warning.setStyleSheet("color: #cccccc; padding: 2px 0;")

        sep = QFrame()
        sep.setFrameShape(QFrame.Shape.HLine)
        sep.setStyleSheet("color: #333;")

        sql_label = QLabel("Statement:")
        sql_label.setStyleSheet("color: #888888; padding: 2px 0;")

        self._sql_view = QPlainTextEdit()
        self._sql_view.setFont(font)
        self._sql_view.setReadOnly(True)
        self._sql_view.setFixedHeight(140)
        self._sql_view.setStyleSheet(
            "QPlainTextEdit { background: #1a1a1a; color: #cccccc; border: 1px solid #444; }"
        )
        self._sql_view.setPlainText(sql)

        cancel_btn = QPushButton("Cancel")
        cancel_btn.setStyleSheet(
            "QPushButton { background: #2d2d2d; color: #cccccc; "
            "border: 1px solid #444; padding: 6px 20px; }"
            "QPushButton:hover { background: #3d3d3d; }"
        )
        cancel_btn.clicked.connect(self._on_cancel)
        cancel_btn.setDefault(True)

        proceed_btn = QPushButton("Proceed")
        proceed_btn.setStyleSheet(
            "QPushButton { background: #3d1a1a; color: #f04040; "
            "border: 1px solid #f04040; padding: 6px 20px; }"
            "QPushButton:hover { background: #4d2a2a; }"
        )
        proceed_btn.clicked.connect(self._on_proceed)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        btn_row.addWidget(cancel_btn)
        btn_row.addWidget(proceed_btn)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(8)
        layout.addWidget(header)
        layout.addWidget(warning)
        layout.addWidget(sep)
        layout.addWidget(sql_label)
        layout.addWidget(self._sql_view)
        layout.addStretch()
        layout.addLayout(btn_row)

    def _on_proceed(self) -> None:
        self._proceed = True
        self.accept()

    def _on_cancel(self) -> None:
        self._proceed = False
        self.reject()

    @property
    def proceed(self) -> bool:
        return self._proceed


def request_confirmation(message: str, sql: str, parent=None) -> bool:
    """
    Confirmation callback for ExecutionService.
    Blocks on the modal dialog and returns True only for Proceed.
    """
    dialog = ConfirmQueryDialog(message=message, sql=sql, parent=parent)
    dialog.exec()
    _log.info("destructive query %s by user", "confirmed" if dialog.proceed else "cancelled")
    return dialog.proceed
