from __future__ import annotations

from datetime import datetime, time

from PySide6.QtCore import QDate, Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
)

from taskwise.ai.client import SuggestionRequest
from taskwise.domain.entities import TaskEntity
from taskwise.domain.enums import SUBJECTS, Importance, SuggestionAction
from taskwise.infra.credentials import CredentialProvider
from taskwise.services.suggestions import EditSession, SuggestionOutcome

from .widgets import IMPORTANCE_OPTIONS

API_KEY_URL = "https://aistudio.google.com/app/apikey"

ACTION_BUSY_TEXT = {
    SuggestionAction.ANALYZE_PRIORITY: "Analyzing...",
    SuggestionAction.OPTIMIZE_TITLE: "Optimizing...",
    SuggestionAction.OPTIMIZE_DESCRIPTION: "Optimizing...",
    SuggestionAction.GENERATE_DESCRIPTION: "Generating...",
}


class TaskEditDialog(QDialog):
    SAVE = "save"
    DELETE = "delete"

    def __init__(self, task: TaskEntity | None, session: EditSession, on_suggest, parent=None):
        super().__init__(parent)
        self.task = task
        self.session = session
        self._on_suggest = on_suggest
        self.result_action: str | None = None

        self.setWindowTitle("Edit Task" if task else "Create Task")
        self.setObjectName("TaskEditDialog")
        self.resize(460, 520)

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Enter task title...")

        self.description_input = QTextEdit()
        self.description_input.setPlaceholderText("Add details about this task...")
        self.description_input.setMaximumHeight(120)

        self.due_toggle = QPushButton("No due date")
        self.due_toggle.setCheckable(True)
        self.due_toggle.setProperty("variant", "secondary")
        self.due_toggle.toggled.connect(self.on_due_toggled)

        self.due_input = QDateEdit()
        self.due_input.setCalendarPopup(True)
        self.due_input.setDate(QDate.currentDate())
        self.due_input.setEnabled(False)

        self.importance_combo = QComboBox()
        for label, value in IMPORTANCE_OPTIONS:
            self.importance_combo.addItem(label, value.value)

        self.subject_combo = QComboBox()
        self.subject_combo.setEditable(True)
        self.subject_combo.addItem("")
        self.subject_combo.addItems(list(SUBJECTS))

        self.context_input = QLineEdit()
        self.context_input.setPlaceholderText("e.g. worth 30% of the final grade")

        self.priority_button = QPushButton("AI Priority")
        self.priority_button.setProperty("variant", "secondary")
        self.priority_button.clicked.connect(lambda: self._suggest(SuggestionAction.ANALYZE_PRIORITY))

        self.title_button = QPushButton("Optimize Title")
        self.title_button.setProperty("variant", "ghost")
        self.title_button.clicked.connect(lambda: self._suggest(SuggestionAction.OPTIMIZE_TITLE))

        self.description_button = QPushButton("Improve Description")
        self.description_button.setProperty("variant", "ghost")
        self.description_button.clicked.connect(self._suggest_description)

        self._action_buttons = {
            SuggestionAction.ANALYZE_PRIORITY: (self.priority_button, "AI Priority"),
            SuggestionAction.OPTIMIZE_TITLE: (self.title_button, "Optimize Title"),
            SuggestionAction.OPTIMIZE_DESCRIPTION: (self.description_button, "Improve Description"),
            SuggestionAction.GENERATE_DESCRIPTION: (self.description_button, "Improve Description"),
        }

        save_button = QPushButton("Save")
        save_button.clicked.connect(self.save)

        cancel_button = QPushButton("Cancel")
        cancel_button.setProperty("variant", "ghost")
        cancel_button.clicked.connect(self.reject)

        ai_row = QHBoxLayout()
        ai_row.addWidget(self.priority_button)
        ai_row.addWidget(self.title_button)
        ai_row.addWidget(self.description_button)

        buttons = QHBoxLayout()
        if task is not None:
            delete_button = QPushButton("Delete")
            delete_button.setProperty("variant", "danger")
            delete_button.clicked.connect(self.delete)
            buttons.addWidget(delete_button)
        buttons.addStretch()
        buttons.addWidget(cancel_button)
        buttons.addWidget(save_button)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Task Title"))
        layout.addWidget(self.title_input)
        layout.addWidget(QLabel("Description (Optional)"))
        layout.addWidget(self.description_input)
        layout.addWidget(QLabel("Due Date (Optional)"))
        layout.addWidget(self.due_toggle)
        layout.addWidget(self.due_input)
        layout.addWidget(QLabel("Importance"))
        layout.addWidget(self.importance_combo)
        layout.addWidget(QLabel("Subject (Optional)"))
        layout.addWidget(self.subject_combo)
        layout.addWidget(QLabel("Context for AI (Optional)"))
        layout.addWidget(self.context_input)
        layout.addLayout(ai_row)
        layout.addStretch()
        layout.addLayout(buttons)

        QShortcut(QKeySequence("Ctrl+Return"), self, self.save)

        if task is not None:
            self.populate(task)

    def populate(self, task: TaskEntity) -> None:
        self.title_input.setText(task.title)
        self.description_input.setPlainText(task.description or "")
        self._set_importance(task.importance)
        self.subject_combo.setCurrentText(task.subject or "")
        if task.due_date:
            self.due_toggle.setChecked(True)
            self.due_input.setDate(QDate(task.due_date.year, task.due_date.month, task.due_date.day))
        else:
            self.due_toggle.setChecked(False)

    def form_data(self) -> dict:
        due_date = None
        if self.due_toggle.isChecked():
            due_date = datetime.combine(self.due_input.date().toPython(), time.min)
        return {
            "title": self.title_input.text().strip(),
            "description": self.description_input.toPlainText().strip(),
            "due_date": due_date,
            "importance": Importance(self.importance_combo.currentData()),
            "subject": self.subject_combo.currentText().strip(),
        }

    def on_due_toggled(self, checked: bool) -> None:
        self.due_input.setEnabled(checked)
        self.due_toggle.setText("Due date set" if checked else "No due date")

    def save(self) -> None:
        if not self.title_input.text().strip():
            QMessageBox.warning(self, "Title required", "Enter a task title.")
            return
        self.result_action = self.SAVE
        self.accept()

    def delete(self) -> None:
        confirm = QMessageBox.question(self, "Delete task", "Delete this task?")
        if confirm != QMessageBox.Yes:
            return
        self.result_action = self.DELETE
        self.accept()

    def apply_outcome(self, outcome: SuggestionOutcome) -> None:
        self.set_busy(outcome.action, False)
        if not outcome.ok or outcome.value is None:
            return
        if outcome.action == SuggestionAction.ANALYZE_PRIORITY:
            self._set_importance(Importance(outcome.value))
        elif outcome.action == SuggestionAction.OPTIMIZE_TITLE:
            self.title_input.setText(str(outcome.value))
        else:
            self.description_input.setPlainText(str(outcome.value))

    def set_busy(self, action: SuggestionAction, busy: bool) -> None:
        button, idle_text = self._action_buttons[action]
        button.setEnabled(not busy)
        button.setText(ACTION_BUSY_TEXT[action] if busy else idle_text)

    def _set_importance(self, importance: Importance) -> None:
        index = self.importance_combo.findData(importance.value)
        if index >= 0:
            self.importance_combo.setCurrentIndex(index)

    def _suggest_description(self) -> None:
        if self.description_input.toPlainText().strip():
            self._suggest(SuggestionAction.OPTIMIZE_DESCRIPTION)
        else:
            self._suggest(SuggestionAction.GENERATE_DESCRIPTION)

    def _suggest(self, action: SuggestionAction) -> None:
        data = self.form_data()
        if not data["title"]:
            QMessageBox.warning(self, "Title required", "Enter a task title first.")
            return
        request = SuggestionRequest.from_form(data, user_context=self.context_input.text())
        if self._on_suggest(self.session, action, request):
            self.set_busy(action, True)


class AISettingsDialog(QDialog):
    def __init__(self, credentials: CredentialProvider, parent=None):
        super().__init__(parent)
        self._credentials = credentials
        self.setWindowTitle("AI Settings")
        self.setFixedWidth(420)

        hint = QLabel(f'Get a Gemini API key at <a href="{API_KEY_URL}">{API_KEY_URL}</a>')
        hint.setOpenExternalLinks(True)
        hint.setWordWrap(True)
        hint.setTextFormat(Qt.RichText)

        self.key_input = QLineEdit()
        self.key_input.setEchoMode(QLineEdit.Password)
        self.key_input.setPlaceholderText("Gemini API key")
        self.key_input.setText(credentials.get_api_key() or "")

        self.status_label = QLabel("Key configured" if credentials.get_api_key() else "No key configured")
        self.status_label.setProperty("class", "stats")

        save_button = QPushButton("Save")
        save_button.clicked.connect(self.save)

        clear_button = QPushButton("Clear")
        clear_button.setProperty("variant", "ghost")
        clear_button.clicked.connect(self.clear)

        close_button = QPushButton("Close")
        close_button.setProperty("variant", "secondary")
        close_button.clicked.connect(self.reject)

        buttons = QHBoxLayout()
        buttons.addWidget(clear_button)
        buttons.addStretch()
        buttons.addWidget(close_button)
        buttons.addWidget(save_button)

        layout = QVBoxLayout(self)
        layout.addWidget(hint)
        layout.addWidget(self.key_input)
        layout.addWidget(self.status_label)
        layout.addLayout(buttons)

    def save(self) -> None:
        key = self.key_input.text().strip()
        if not key:
            QMessageBox.warning(self, "API key", "Enter an API key or use Clear.")
            return
        self._credentials.set_api_key(key)
        self.accept()

    def clear(self) -> None:
        self._credentials.clear_api_key()
        self.key_input.clear()
        self.status_label.setText("No key configured")
