from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Iterable

from .entities import TaskEntity, TaskForm
from .ranking import compute_rank


def generate_id() -> str:
    return uuid.uuid4().hex


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def create_task(form: TaskForm, now: datetime) -> TaskEntity:
    if not form.is_valid:
        raise ValueError("title is required")

    task = TaskEntity(
        id=generate_id(),
        title=form.title.strip(),
        description=_blank_to_none(form.description),
        due_date=form.due_date,
        importance=form.importance,
        subject=_blank_to_none(form.subject),
        completed=False,
        created_at=now,
    )
    return replace(task, rank=compute_rank(task, now))


def update_task(existing: TaskEntity, form: TaskForm, now: datetime) -> TaskEntity:
    """Apply form values to ``existing``.

    The caller must reject blank titles before getting here. ``id``,
    ``created_at`` and ``completed`` are carried over unchanged.
    """
    updated = replace(
        existing,
        title=form.title.strip(),
        description=_blank_to_none(form.description),
        due_date=form.due_date,
        importance=form.importance,
        subject=_blank_to_none(form.subject),
    )
    return replace(updated, rank=compute_rank(updated, now))


def toggle_complete(task: TaskEntity) -> TaskEntity:
    return replace(task, completed=not task.completed)


def delete_task(tasks: Iterable[TaskEntity], task_id: str) -> list[TaskEntity]:
    return [task for task in tasks if task.id != task_id]

