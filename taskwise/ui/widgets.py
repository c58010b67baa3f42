from __future__ import annotations

from datetime import datetime

from PySide6.QtCore import QSize, Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from taskwise.domain.entities import TaskEntity
from taskwise.domain.enums import Importance
from taskwise.domain.ranking import days_until_due, is_overdue

IMPORTANCE_OPTIONS = [
    ("No Priority", Importance.NONE),
    ("Low Priority", Importance.LOW),
    ("Medium Priority", Importance.MEDIUM),
    ("High Priority", Importance.HIGH),
    ("Critical", Importance.CRITICAL),
]

IMPORTANCE_COLORS = {
    Importance.NONE: "#9CA3AF",
    Importance.LOW: "#7CC4A1",
    Importance.MEDIUM: "#E0B25B",
    Importance.HIGH: "#E57B63",
    Importance.CRITICAL: "#E24A4A",
}


def importance_label(importance: Importance) -> str:
    return next((label for label, value in IMPORTANCE_OPTIONS if value == importance), "Unknown")


def due_label(task: TaskEntity, now: datetime) -> str | None:
    if task.due_date is None:
        return None
    days = days_until_due(task.due_date, now)
    if days < 0:
        return "Overdue"
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    return f"Due {task.due_date.strftime('%b %d')}"


class TaskItemWidget(QWidget):
    def __init__(self, task: TaskEntity, now: datetime, on_toggle, on_edit, parent=None):
        super().__init__(parent)
        self.task = task
        self._on_toggle = on_toggle
        self._on_edit = on_edit

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(56)
        self.setProperty("completed", task.completed)
        self.setProperty("overdue", is_overdue(task, now))

        self.done_check = QCheckBox()
        self.done_check.setChecked(task.completed)
        self.done_check.toggled.connect(self._handle_toggle)

        title = QLabel(task.title)
        title.setProperty("class", "task-title")
        title.setWordWrap(True)
        title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        if task.completed:
            font = title.font()
            font.setStrikeOut(True)
            title.setFont(font)

        meta_parts = []
        label = due_label(task, now)
        if label:
            meta_parts.append(label)
        if task.subject:
            meta_parts.append(task.subject)
        meta_parts.append(f"Rank {task.rank}")

        meta = QLabel(" | ".join(meta_parts))
        meta.setProperty("class", "task-meta")
        meta.setWordWrap(True)

        priority = QLabel(importance_label(task.importance))
        priority.setProperty("class", "task-priority")
        priority.setStyleSheet(f"background-color: {IMPORTANCE_COLORS.get(task.importance, '#9CA3AF')};")
        priority.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)

        edit_button = QPushButton("Edit")
        edit_button.setProperty("variant", "ghost")
        edit_button.clicked.connect(self._handle_edit)

        text_column = QVBoxLayout()
        text_column.setSpacing(2)
        text_column.addWidget(title)
        text_column.addWidget(meta)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(8)
        layout.addWidget(self.done_check, 0, Qt.AlignTop)
        layout.addLayout(text_column, 1)
        layout.addWidget(priority, 0, Qt.AlignTop)
        layout.addWidget(edit_button, 0, Qt.AlignTop)

    def _handle_toggle(self, _checked: bool) -> None:
        self._on_toggle(self.task.id)

    def _handle_edit(self) -> None:
        self._on_edit(self.task.id)


class TaskListWidget(QListWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._h_margin = 8
        self._v_margin = 6
        self.setSelectionMode(QAbstractItemView.NoSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self._update_viewport_margins()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.sync_item_sizes()

    def _update_viewport_margins(self) -> None:
        scrollbar_width = self.verticalScrollBar().width() or self.verticalScrollBar().sizeHint().width()
        right_margin = self._h_margin + (scrollbar_width if self.verticalScrollBar().isVisible() else 0)
        self.setViewportMargins(self._h_margin, self._v_margin, right_margin, self._v_margin)

    def sync_item_sizes(self) -> None:
        self._update_viewport_margins()
        viewport_width = self.viewport().width()
        for index in range(self.count()):
            item = self.item(index)
            widget = self.itemWidget(item)
            if widget:
                widget.setMinimumWidth(viewport_width)
                widget.setMaximumWidth(viewport_width)
                widget.adjustSize()
                hint = widget.sizeHint()
                item.setSizeHint(QSize(viewport_width, hint.height()))
                widget.resize(viewport_width, hint.height())
