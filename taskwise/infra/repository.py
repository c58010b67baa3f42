from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from taskwise.domain.entities import TaskEntity
from taskwise.domain.enums import Importance

from .db import SessionLocal
from .models import KeyValueModel

logger = logging.getLogger(__name__)

DEFAULT_TASKS_KEY = "taskwise-tasks"


class KeyValueStore:
    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            row = session.get(KeyValueModel, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            row = session.get(KeyValueModel, key)
            if row is None:
                session.add(KeyValueModel(key=key, value=value))
            else:
                row.value = value
            session.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            row = session.get(KeyValueModel, key)
            if not row:
                return
            session.delete(row)
            session.commit()


def _to_record(task: TaskEntity) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "dueDate": task.due_date.isoformat() if task.due_date else None,
        "importance": task.importance.value,
        "subject": task.subject,
        "completed": task.completed,
        "createdAt": task.created_at.isoformat(),
        "rank": task.rank,
    }


def _parse_datetime(raw: str) -> datetime:
    value = datetime.fromisoformat(raw)
    if value.tzinfo is not None:
        # Ranking compares against a naive local clock.
        value = value.astimezone().replace(tzinfo=None)
    return value


def _from_record(raw: dict[str, Any]) -> TaskEntity:
    due_raw = raw.get("dueDate")
    return TaskEntity(
        id=str(raw["id"]),
        title=str(raw["title"]),
        description=raw.get("description") or None,
        due_date=_parse_datetime(due_raw) if due_raw else None,
        importance=Importance.parse(raw.get("importance")),
        subject=raw.get("subject") or None,
        completed=bool(raw.get("completed", False)),
        created_at=_parse_datetime(raw["createdAt"]),
        rank=int(raw.get("rank") or 0),
    )


def dumps_tasks(tasks: list[TaskEntity]) -> str:
    return json.dumps([_to_record(task) for task in tasks], ensure_ascii=False)


def loads_tasks(payload: str) -> list[TaskEntity]:
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError("stored tasks payload is not a list")
    return [_from_record(item) for item in data]


class TaskRepository:
    """Saves the whole task collection as one JSON blob under one key."""

    def __init__(self, store: KeyValueStore | None = None, key: str = DEFAULT_TASKS_KEY) -> None:
        self._store = store or KeyValueStore()
        self._key = key

    def save(self, tasks: list[TaskEntity]) -> None:
        try:
            self._store.set(self._key, dumps_tasks(tasks))
        except (SQLAlchemyError, TypeError, ValueError):
            logger.exception("Failed to save %d tasks under key=%s", len(tasks), self._key)
            return
        logger.debug("Saved %d tasks under key=%s", len(tasks), self._key)

    def load(self) -> list[TaskEntity]:
        try:
            payload = self._store.get(self._key)
        except SQLAlchemyError:
            logger.exception("Failed to read tasks under key=%s", self._key)
            return []
        if not payload:
            return []
        try:
            tasks = loads_tasks(payload)
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.exception("Failed to parse stored tasks under key=%s", self._key)
            return []
        logger.info("Loaded %d tasks under key=%s", len(tasks), self._key)
        return tasks
