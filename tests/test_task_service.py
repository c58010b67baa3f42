from __future__ import annotations

from datetime import datetime, timedelta

from taskwise.domain.entities import TaskEntity
from taskwise.domain.enums import Importance
from taskwise.services.task_service import TaskService


class FakeRepo:
    def __init__(self, tasks: list[TaskEntity] | None = None) -> None:
        self.tasks: list[TaskEntity] = list(tasks or [])
        self.saves = 0

    def save(self, tasks: list[TaskEntity]) -> None:
        self.tasks = list(tasks)
        self.saves += 1

    def load(self) -> list[TaskEntity]:
        return list(self.tasks)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_service(now: datetime = datetime(2026, 3, 10, 9, 0)) -> tuple[TaskService, FakeRepo, FakeClock]:
    repo = FakeRepo()
    clock = FakeClock(now)
    return TaskService(repo, clock=clock), repo, clock


def test_create_task_persists_and_ranks() -> None:
    service, repo, clock = make_service()

    task = service.create_task({
        "title": "Midterm prep",
        "importance": "high",
        "due_date": clock.now + timedelta(days=1),
    })

    assert task is not None
    assert task.importance == Importance.HIGH
    assert task.rank == 100
    assert repo.saves == 1
    assert repo.tasks == [task]


def test_blank_title_is_rejected_without_saving() -> None:
    service, repo, _ = make_service()

    assert service.create_task({"title": "   "}) is None
    assert service.list_tasks() == []
    assert repo.saves == 0


def test_quick_add_uses_no_importance() -> None:
    service, _, _ = make_service()

    task = service.quick_add("Buy notebook")

    assert task is not None
    assert task.importance == Importance.NONE
    assert task.description is None


def test_update_keeps_id_and_created_at() -> None:
    service, _, clock = make_service()
    task = service.create_task({"title": "Essay"})
    clock.now += timedelta(days=2)

    updated = service.update_task(task.id, {"title": "Essay v2", "importance": Importance.LOW})

    assert updated is not None
    assert updated.id == task.id
    assert updated.created_at == task.created_at
    assert updated.title == "Essay v2"
    assert updated.rank == 10


def test_update_rejects_blank_title_and_unknown_id() -> None:
    service, repo, _ = make_service()
    task = service.create_task({"title": "Essay"})

    assert service.update_task(task.id, {"title": ""}) is None
    assert service.update_task("missing", {"title": "x"}) is None
    assert service.get_task(task.id).title == "Essay"
    assert repo.saves == 1


def test_toggle_moves_task_to_completed_section() -> None:
    service, _, _ = make_service()
    urgent = service.create_task({"title": "Urgent", "importance": "critical"})
    plain = service.create_task({"title": "Plain"})

    service.toggle_complete(urgent.id)

    assert [t.id for t in service.list_tasks()] == [plain.id, urgent.id]
    assert [t.id for t in service.active_tasks()] == [plain.id]
    assert [t.id for t in service.completed_tasks()] == [urgent.id]

    service.toggle_complete(urgent.id)
    assert [t.id for t in service.list_tasks()] == [urgent.id, plain.id]


def test_delete_removes_task_and_ignores_unknown() -> None:
    service, repo, _ = make_service()
    task = service.create_task({"title": "Temp"})

    service.delete_task(task.id)
    service.delete_task(task.id)

    assert service.get_task(task.id) is None
    assert repo.tasks == []
    assert repo.saves == 2


def test_list_reranks_against_current_time() -> None:
    service, _, clock = make_service()
    task = service.create_task({"title": "Report", "due_date": clock.now + timedelta(days=5)})
    assert task.rank == 25

    clock.now += timedelta(days=6)

    (listed,) = service.list_tasks()
    assert listed.rank == 100


def test_load_replaces_collection_from_repo() -> None:
    stored = TaskEntity(
        id="abc",
        title="Stored",
        description=None,
        due_date=None,
        importance=Importance.MEDIUM,
        subject=None,
        completed=False,
        created_at=datetime(2026, 1, 1),
        rank=999,
    )
    repo = FakeRepo([stored])
    service = TaskService(repo, clock=FakeClock(datetime(2026, 3, 10)))

    (loaded,) = service.load()

    assert loaded.id == "abc"
    assert loaded.rank == 20

