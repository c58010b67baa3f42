"""Urgency scoring and list ordering for tasks.

Every function here takes ``now`` explicitly. Ranks are recomputed on demand
and never trusted from storage, so an overdue task climbs the list as time
passes even if nobody re-saves it.
"""
from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .entities import TaskEntity
from .enums import Importance

ONE_DAY = timedelta(days=1)

OVERDUE_POINTS = 100
DUE_TODAY_POINTS = 80
DUE_TOMORROW_POINTS = 60
DUE_WITHIN_3_DAYS_POINTS = 40
DUE_WITHIN_WEEK_POINTS = 20
CREATED_TODAY_POINTS = 5

IMPORTANCE_POINTS: dict[Importance, int] = {
    Importance.CRITICAL: 50,
    Importance.HIGH: 35,
    Importance.MEDIUM: 20,
    Importance.LOW: 10,
    Importance.NONE: 0,
}


def days_until_due(due_date: datetime, now: datetime) -> int:
    # Ceiling of the fractional difference: a deadline that passed a few hours
    # ago still counts as 0 ("today"), not overdue.
    return math.ceil((due_date - now) / ONE_DAY)


def due_date_points(due_date: Optional[datetime], now: datetime) -> int:
    if due_date is None:
        return 0
    days = days_until_due(due_date, now)
    if days < 0:
        return OVERDUE_POINTS
    if days == 0:
        return DUE_TODAY_POINTS
    if days == 1:
        return DUE_TOMORROW_POINTS
    if days <= 3:
        return DUE_WITHIN_3_DAYS_POINTS
    if days <= 7:
        return DUE_WITHIN_WEEK_POINTS
    return 0


def importance_points(importance: Importance) -> int:
    return IMPORTANCE_POINTS.get(importance, 0)


def recency_points(created_at: datetime, now: datetime) -> int:
    days_since_created = math.floor((now - created_at) / ONE_DAY)
    return CREATED_TODAY_POINTS if days_since_created == 0 else 0


def compute_rank(task: TaskEntity, now: datetime) -> int:
    return (
        due_date_points(task.due_date, now)
        + importance_points(task.importance)
        + recency_points(task.created_at, now)
    )


def is_overdue(task: TaskEntity, now: datetime) -> bool:
    if task.due_date is None or task.completed:
        return False
    return days_until_due(task.due_date, now) < 0


def order_tasks(tasks: Iterable[TaskEntity], now: datetime) -> list[TaskEntity]:
    """Re-rank every task against ``now`` and sort for display.

    Incomplete tasks come first, then completed ones; each group is sorted by
    rank descending. ``sorted`` is stable, so equal keys keep input order.
    """
    ranked = [replace(task, rank=compute_rank(task, now)) for task in tasks]
    return sorted(ranked, key=lambda task: (task.completed, -task.rank))
