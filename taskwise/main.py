from __future__ import annotations

import logging
import sys

from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory

from taskwise.ai.client import SuggestionClient
from taskwise.config import SETTINGS
from taskwise.infra.credentials import StoredCredentialProvider
from taskwise.infra.db import init_db
from taskwise.infra.logging import setup_logging
from taskwise.infra.repository import KeyValueStore, TaskRepository
from taskwise.services.suggestions import SuggestionCoordinator
from taskwise.services.task_service import TaskService
from taskwise.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def _apply_dark_palette(app: QApplication) -> None:
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor("#0F172A"))
    palette.setColor(QPalette.WindowText, QColor("#E6EDF3"))
    palette.setColor(QPalette.Base, QColor("#111827"))
    palette.setColor(QPalette.AlternateBase, QColor("#1B2230"))
    palette.setColor(QPalette.Text, QColor("#E6EDF3"))
    palette.setColor(QPalette.Button, QColor("#202A3B"))
    palette.setColor(QPalette.ButtonText, QColor("#E6EDF3"))
    palette.setColor(QPalette.ToolTipBase, QColor("#1B2230"))
    palette.setColor(QPalette.ToolTipText, QColor("#E6EDF3"))
    palette.setColor(QPalette.Highlight, QColor("#2563EB"))
    palette.setColor(QPalette.HighlightedText, QColor("#FFFFFF"))
    app.setPalette(palette)


def main() -> None:
    setup_logging()
    app = QApplication(sys.argv)
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Database initialisation failed")
        QMessageBox.critical(None, "DB error", str(exc))
        return

    app.setStyle(QStyleFactory.create("Fusion"))
    _apply_dark_palette(app)
    app.setFont(QFont("Segoe UI", 10))

    store = KeyValueStore()
    service = TaskService(TaskRepository(store, key=SETTINGS.storage_key))
    service.load()

    credentials = StoredCredentialProvider(store, fallback=SETTINGS.ai_api_key)
    suggestions = SuggestionCoordinator(service, SuggestionClient(credentials))

    window = MainWindow(service, suggestions, credentials)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
