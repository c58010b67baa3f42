from __future__ import annotations

from concurrent.futures import Future
from datetime import datetime

import pytest

from taskwise.ai.client import CredentialMissingError, SuggestionError, SuggestionRequest
from taskwise.domain.entities import TaskEntity
from taskwise.domain.enums import Importance, SuggestionAction
from taskwise.services.suggestions import SuggestionCoordinator
from taskwise.services.task_service import TaskService

NOW = datetime(2026, 3, 10, 9, 0)


class FakeRepo:
    def __init__(self) -> None:
        self.tasks: list[TaskEntity] = []

    def save(self, tasks: list[TaskEntity]) -> None:
        self.tasks = list(tasks)

    def load(self) -> list[TaskEntity]:
        return list(self.tasks)


class ManualExecutor:
    """Holds submitted calls until the test decides to run them."""

    def __init__(self) -> None:
        self.queue: list[tuple[Future, object, tuple]] = []

    def submit(self, fn, *args):
        future: Future = Future()
        self.queue.append((future, fn, args))
        return future

    def run_all(self) -> None:
        queue, self.queue = self.queue, []
        for future, fn, args in queue:
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn(*args))
            except Exception as exc:
                future.set_exception(exc)

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        self.queue = []


class FakeRunner:
    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.actions: list[SuggestionAction] = []

    def run(self, action: SuggestionAction, request: SuggestionRequest):
        self.actions.append(action)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def make_coordinator(*replies):
    service = TaskService(FakeRepo(), clock=lambda: NOW)
    executor = ManualExecutor()
    runner = FakeRunner(*replies)
    return SuggestionCoordinator(service, runner, executor=executor), service, executor, runner


def test_priority_fills_form_without_touching_stored_task() -> None:
    coordinator, service, executor, _ = make_coordinator(Importance.CRITICAL)
    task = service.create_task({"title": "Final exam"})
    session = coordinator.open_session(task.id)

    coordinator.request(session, SuggestionAction.ANALYZE_PRIORITY, SuggestionRequest(title=task.title))
    assert coordinator.drain() == []
    assert coordinator.has_pending(session)

    executor.run_all()
    (outcome,) = coordinator.drain()

    assert outcome.ok
    assert outcome.value == Importance.CRITICAL
    assert service.get_task(task.id) == task
    assert not coordinator.has_pending()


def test_cancelled_edit_keeps_stored_task() -> None:
    coordinator, service, executor, _ = make_coordinator("Calc HW 3", "Problems 1-10.")
    task = service.create_task({"title": "calculus homework three"})
    session = coordinator.open_session(task.id)
    request = SuggestionRequest(title=task.title)

    coordinator.request(session, SuggestionAction.OPTIMIZE_TITLE, request)
    coordinator.request(session, SuggestionAction.GENERATE_DESCRIPTION, request)
    executor.run_all()
    outcomes = coordinator.drain()
    coordinator.close_session(session)

    assert [o.value for o in outcomes] == ["Calc HW 3", "Problems 1-10."]
    assert service.get_task(task.id) == task


def test_saved_suggestion_goes_through_update() -> None:
    coordinator, service, executor, _ = make_coordinator("urgent")
    task = service.create_task({"title": "Lab report", "importance": "low"})
    session = coordinator.open_session(task.id)
    coordinator.request(session, SuggestionAction.ANALYZE_PRIORITY, SuggestionRequest(title=task.title))

    executor.run_all()
    (outcome,) = coordinator.drain()
    coordinator.close_session(session)
    updated = service.update_task(task.id, {"title": task.title, "importance": outcome.value})

    assert outcome.value == Importance.MEDIUM
    assert updated.importance == Importance.MEDIUM
    assert updated.id == task.id


def test_deleted_task_is_not_resurrected() -> None:
    coordinator, service, executor, _ = make_coordinator(Importance.HIGH)
    task = service.create_task({"title": "Lab report"})
    session = coordinator.open_session(task.id)
    coordinator.request(session, SuggestionAction.ANALYZE_PRIORITY, SuggestionRequest(title=task.title))

    service.delete_task(task.id)
    executor.run_all()
    (outcome,) = coordinator.drain()

    assert outcome.stale
    assert service.list_tasks() == []


def test_closed_session_discards_results() -> None:
    coordinator, service, executor, runner = make_coordinator(Importance.HIGH)
    task = service.create_task({"title": "Essay"})
    session = coordinator.open_session(task.id)
    coordinator.request(session, SuggestionAction.ANALYZE_PRIORITY, SuggestionRequest(title=task.title))

    coordinator.close_session(session)
    executor.run_all()

    assert coordinator.drain() == []
    assert runner.actions == []
    assert service.get_task(task.id).importance == Importance.NONE
    with pytest.raises(ValueError):
        coordinator.request(session, SuggestionAction.ANALYZE_PRIORITY, SuggestionRequest(title="x"))


def test_failure_leaves_task_unchanged() -> None:
    coordinator, service, executor, _ = make_coordinator(SuggestionError("AI returned an empty response"))
    task = service.create_task({"title": "Quiz", "importance": "low"})
    session = coordinator.open_session(task.id)
    coordinator.request(session, SuggestionAction.OPTIMIZE_TITLE, SuggestionRequest(title=task.title))

    executor.run_all()
    (outcome,) = coordinator.drain()

    assert not outcome.ok
    assert outcome.message == "AI returned an empty response"
    assert service.get_task(task.id) == task


def test_missing_credentials_surface_as_outcome() -> None:
    coordinator, _, executor, _ = make_coordinator(CredentialMissingError("AI API key is not set"))
    session = coordinator.open_session(None)
    coordinator.request(session, SuggestionAction.ANALYZE_PRIORITY, SuggestionRequest(title="x"))

    executor.run_all()
    (outcome,) = coordinator.drain()

    assert isinstance(outcome.error, CredentialMissingError)
    assert "AI settings" in outcome.message


def test_unsaved_task_gets_value_only() -> None:
    coordinator, service, executor, _ = make_coordinator("Read chapter 4 and take notes.")
    session = coordinator.open_session(None)
    coordinator.request(session, SuggestionAction.GENERATE_DESCRIPTION, SuggestionRequest(title="Read ch 4"))

    executor.run_all()
    (outcome,) = coordinator.drain()

    assert outcome.ok
    assert outcome.value == "Read chapter 4 and take notes."
    assert service.list_tasks() == []
