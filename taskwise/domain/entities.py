from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import Importance


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    description: Optional[str]
    due_date: Optional[datetime]
    importance: Importance
    subject: Optional[str]
    completed: bool
    created_at: datetime
    rank: int = 0


@dataclass(frozen=True)
class TaskForm:
    """Values submitted by a create/edit form.

    Blank ``description`` and ``subject`` are stored as ``None`` on the task.
    """

    title: str
    description: str = ""
    due_date: Optional[datetime] = None
    importance: Importance = Importance.NONE
    subject: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.title and self.title.strip())
