from __future__ import annotations

import logging
from datetime import datetime

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from taskwise.ai.client import CredentialMissingError, SuggestionRequest
from taskwise.domain.entities import TaskEntity
from taskwise.domain.enums import SuggestionAction
from taskwise.infra.credentials import CredentialProvider
from taskwise.services.suggestions import EditSession, SuggestionCoordinator, SuggestionOutcome
from taskwise.services.task_service import TaskService

from .dialogs import AISettingsDialog, TaskEditDialog
from .widgets import TaskItemWidget, TaskListWidget

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 200
NOTICE_TIMEOUT_MS = 5000


class MainWindow(QWidget):
    def __init__(
        self,
        service: TaskService,
        suggestions: SuggestionCoordinator,
        credentials: CredentialProvider,
    ):
        super().__init__()
        self.setWindowTitle("TaskWise")
        self.resize(820, 760)

        self.service = service
        self.suggestions = suggestions
        self.credentials = credentials
        self.edit_dialog: TaskEditDialog | None = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        header = QHBoxLayout()
        title = QLabel("TaskWise")
        title.setProperty("class", "panel-title")
        subtitle = QLabel("Rank your tasks by importance and stay focused")
        subtitle.setProperty("class", "stats")
        settings_button = QPushButton("AI Settings")
        settings_button.setProperty("variant", "ghost")
        settings_button.clicked.connect(self.open_ai_settings)
        header.addWidget(title)
        header.addWidget(subtitle)
        header.addStretch()
        header.addWidget(settings_button)

        input_bar = QFrame()
        input_bar.setObjectName("ActionBar")
        input_layout = QHBoxLayout(input_bar)
        input_layout.setContentsMargins(12, 10, 12, 10)
        self.quick_input = QLineEdit()
        self.quick_input.setPlaceholderText("What needs to be done?")
        self.quick_input.returnPressed.connect(self.quick_add)
        add_button = QPushButton("Add")
        add_button.clicked.connect(self.quick_add)
        details_button = QPushButton("Add with details")
        details_button.setProperty("variant", "secondary")
        details_button.clicked.connect(self.new_task)
        input_layout.addWidget(self.quick_input, 1)
        input_layout.addWidget(add_button)
        input_layout.addWidget(details_button)

        self.active_title = QLabel("")
        self.active_title.setProperty("class", "section-title")
        self.active_list = TaskListWidget()
        self.active_list.setObjectName("TaskList")
        self.active_list.setSpacing(8)

        self.completed_title = QLabel("")
        self.completed_title.setProperty("class", "section-title")
        self.completed_list = TaskListWidget()
        self.completed_list.setObjectName("CompletedList")
        self.completed_list.setSpacing(6)

        self.empty_label = QLabel("Add your first task to get started")
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setProperty("class", "stats")

        self.notice_label = QLabel("")
        self.notice_label.setObjectName("NoticeLabel")
        self.notice_label.setVisible(False)

        layout.addLayout(header)
        layout.addWidget(input_bar)
        layout.addWidget(self.notice_label)
        layout.addWidget(self.empty_label)
        layout.addWidget(self.active_title)
        layout.addWidget(self.active_list, 3)
        layout.addWidget(self.completed_title)
        layout.addWidget(self.completed_list, 1)

        self._notice_timer = QTimer(self)
        self._notice_timer.setSingleShot(True)
        self._notice_timer.timeout.connect(self._clear_notice)

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(POLL_INTERVAL_MS)
        self._poll_timer.timeout.connect(self.poll_suggestions)
        self._poll_timer.start()

        QShortcut(QKeySequence("Ctrl+N"), self, self.new_task)

        self.refresh_tasks()

    def refresh_tasks(self) -> None:
        now = datetime.now()
        tasks = self.service.list_tasks(now)
        active = [task for task in tasks if not task.completed]
        completed = [task for task in tasks if task.completed]

        self._fill_list(self.active_list, active, now)
        self._fill_list(self.completed_list, completed, now)

        self.active_title.setText(f"Tasks ({len(active)})")
        self.completed_title.setText(f"Completed ({len(completed)})")
        self.active_title.setVisible(bool(active))
        self.active_list.setVisible(bool(active))
        self.completed_title.setVisible(bool(completed))
        self.completed_list.setVisible(bool(completed))
        self.empty_label.setVisible(not tasks)

    def _fill_list(self, list_widget: TaskListWidget, tasks: list[TaskEntity], now: datetime) -> None:
        list_widget.clear()
        for task in tasks:
            item = QListWidgetItem()
            item.setData(Qt.UserRole, task.id)
            widget = TaskItemWidget(task, now, self.toggle_complete, self.edit_task)
            list_widget.addItem(item)
            list_widget.setItemWidget(item, widget)
            item.setSizeHint(widget.sizeHint())
        list_widget.sync_item_sizes()

    def quick_add(self) -> None:
        title = self.quick_input.text().strip()
        if not title:
            return
        self.service.quick_add(title)
        self.quick_input.clear()
        self.refresh_tasks()

    def toggle_complete(self, task_id: str) -> None:
        self.service.toggle_complete(task_id)
        # Defer so the checkbox signal finishes before its widget is replaced.
        QTimer.singleShot(0, self.refresh_tasks)

    def new_task(self) -> None:
        self._open_editor(None)

    def edit_task(self, task_id: str) -> None:
        task = self.service.get_task(task_id)
        if task is None:
            return
        self._open_editor(task)

    def _open_editor(self, task: TaskEntity | None) -> None:
        session = self.suggestions.open_session(task.id if task else None)
        dialog = TaskEditDialog(task, session, self.request_suggestion, self)
        self.edit_dialog = dialog
        try:
            dialog.exec()
        finally:
            self.edit_dialog = None
            self.suggestions.close_session(session)

        if dialog.result_action == TaskEditDialog.SAVE:
            data = dialog.form_data()
            if task is None:
                self.service.create_task(data)
            else:
                self.service.update_task(task.id, data)
        elif dialog.result_action == TaskEditDialog.DELETE and task is not None:
            self.service.delete_task(task.id)
        self.refresh_tasks()

    def request_suggestion(
        self,
        session: EditSession,
        action: SuggestionAction,
        request: SuggestionRequest,
    ) -> bool:
        if not self.credentials.get_api_key():
            self.show_notice("Add your Gemini API key to use AI suggestions.")
            self.open_ai_settings()
            if not self.credentials.get_api_key():
                return False
        if not self.suggestions.is_open(session):
            return False
        self.suggestions.request(session, action, request)
        return True

    def poll_suggestions(self) -> None:
        outcomes = self.suggestions.drain()
        if not outcomes:
            return
        for outcome in outcomes:
            self._handle_outcome(outcome)

    def _handle_outcome(self, outcome: SuggestionOutcome) -> None:
        dialog = self.edit_dialog
        if dialog is not None and dialog.session.token == outcome.session.token:
            dialog.apply_outcome(outcome)
        if outcome.stale:
            return
        if outcome.error is not None:
            self.show_notice(outcome.message or "AI request failed.")
            if isinstance(outcome.error, CredentialMissingError):
                self.open_ai_settings()
            return
        if outcome.action == SuggestionAction.ANALYZE_PRIORITY:
            self.show_notice(f"AI suggested priority: {outcome.value}")

    def open_ai_settings(self) -> None:
        dialog = AISettingsDialog(self.credentials, self)
        dialog.exec()

    def show_notice(self, text: str) -> None:
        self.notice_label.setText(text)
        self.notice_label.setVisible(True)
        self._notice_timer.start(NOTICE_TIMEOUT_MS)

    def _clear_notice(self) -> None:
        self.notice_label.clear()
        self.notice_label.setVisible(False)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._poll_timer.stop()
        self.suggestions.shutdown()
        super().closeEvent(event)
