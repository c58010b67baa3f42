from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Protocol

from taskwise.domain import factory
from taskwise.domain.entities import TaskEntity, TaskForm
from taskwise.domain.enums import Importance
from taskwise.domain.ranking import order_tasks

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    def save(self, tasks: list[TaskEntity]) -> None: ...
    def load(self) -> list[TaskEntity]: ...


class TaskService:
    """Session-wide owner of the task collection.

    Every mutation goes through the factory, then the whole collection is
    saved. Reads always re-rank against the current time.
    """

    def __init__(self, repo: TaskStore, clock: Callable[[], datetime] = datetime.now) -> None:
        self._repo = repo
        self._clock = clock
        self._tasks: list[TaskEntity] = []

    def load(self) -> list[TaskEntity]:
        self._tasks = list(self._repo.load())
        return self.list_tasks()

    def list_tasks(self, now: Optional[datetime] = None) -> list[TaskEntity]:
        return order_tasks(self._tasks, now or self._clock())

    def active_tasks(self, now: Optional[datetime] = None) -> list[TaskEntity]:
        return [task for task in self.list_tasks(now) if not task.completed]

    def completed_tasks(self, now: Optional[datetime] = None) -> list[TaskEntity]:
        return [task for task in self.list_tasks(now) if task.completed]

    def get_task(self, task_id: str) -> TaskEntity | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    def create_task(self, data: dict) -> TaskEntity | None:
        form = self._normalize_data(data)
        if not form.is_valid:
            logger.debug("Rejected task without a title")
            return None
        task = factory.create_task(form, self._clock())
        self._tasks.append(task)
        self._persist()
        logger.info("Created task id=%s rank=%s", task.id, task.rank)
        return task

    def quick_add(self, title: str) -> TaskEntity | None:
        return self.create_task({"title": title, "importance": Importance.NONE})

    def update_task(self, task_id: str, data: dict) -> TaskEntity | None:
        existing = self.get_task(task_id)
        if not existing:
            return None
        form = self._normalize_data(data)
        if not form.is_valid:
            logger.debug("Rejected update of task id=%s without a title", task_id)
            return None
        updated = factory.update_task(existing, form, self._clock())
        self._replace(updated)
        self._persist()
        return updated

    def toggle_complete(self, task_id: str) -> TaskEntity | None:
        existing = self.get_task(task_id)
        if not existing:
            return None
        updated = factory.toggle_complete(existing)
        self._replace(updated)
        self._persist()
        return updated

    def delete_task(self, task_id: str) -> None:
        if not self.get_task(task_id):
            return
        self._tasks = factory.delete_task(self._tasks, task_id)
        self._persist()
        logger.info("Deleted task id=%s", task_id)

    def _replace(self, updated: TaskEntity) -> None:
        self._tasks = [updated if task.id == updated.id else task for task in self._tasks]

    def _persist(self) -> None:
        self._repo.save(list(self._tasks))

    @staticmethod
    def _normalize_data(data: dict) -> TaskForm:
        importance = data.get("importance")
        if not isinstance(importance, Importance):
            importance = Importance.parse(importance)
        return TaskForm(
            title=(data.get("title") or "").strip(),
            description=data.get("description") or "",
            due_date=data.get("due_date"),
            importance=importance,
            subject=data.get("subject") or "",
        )
