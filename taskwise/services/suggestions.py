"""Background AI suggestions tied to edit sessions.

Requests run on worker threads. Results are handed out by ``drain()``,
which the UI calls on its own thread, and only while the originating edit
session is open and the target task still exists. They fill the edit form;
nothing is stored until the user saves it.
"""
from __future__ import annotations

import logging
import uuid
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Protocol

from taskwise.ai.client import SuggestionRequest, coerce_importance, friendly_error_message
from taskwise.domain.enums import Importance, SuggestionAction

from .task_service import TaskService

logger = logging.getLogger(__name__)


class SuggestionRunner(Protocol):
    def run(self, action: SuggestionAction, request: SuggestionRequest) -> Importance | str: ...


@dataclass(frozen=True)
class EditSession:
    token: str
    task_id: Optional[str]


@dataclass(frozen=True)
class SuggestionOutcome:
    session: EditSession
    action: SuggestionAction
    value: Importance | str | None = None
    error: Optional[Exception] = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.stale

    @property
    def message(self) -> Optional[str]:
        if self.error is None:
            return None
        return friendly_error_message(self.error)


@dataclass
class _Pending:
    session: EditSession
    action: SuggestionAction
    future: Future


class SuggestionCoordinator:
    def __init__(
        self,
        service: TaskService,
        client: SuggestionRunner,
        executor: Executor | None = None,
    ) -> None:
        self._service = service
        self._client = client
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="taskwise-ai")
        self._sessions: dict[str, EditSession] = {}
        self._pending: list[_Pending] = []

    def open_session(self, task_id: Optional[str]) -> EditSession:
        session = EditSession(token=uuid.uuid4().hex, task_id=task_id)
        self._sessions[session.token] = session
        return session

    def is_open(self, session: EditSession) -> bool:
        return session.token in self._sessions

    def close_session(self, session: EditSession) -> None:
        if self._sessions.pop(session.token, None) is None:
            return
        remaining: list[_Pending] = []
        for pending in self._pending:
            if pending.session.token == session.token:
                pending.future.cancel()
            else:
                remaining.append(pending)
        self._pending = remaining

    def has_pending(self, session: EditSession | None = None) -> bool:
        if session is None:
            return bool(self._pending)
        return any(p.session.token == session.token for p in self._pending)

    def request(
        self,
        session: EditSession,
        action: SuggestionAction,
        request: SuggestionRequest,
    ) -> Future:
        if not self.is_open(session):
            raise ValueError("edit session is closed")
        future = self._executor.submit(self._client.run, action, request)
        self._pending.append(_Pending(session=session, action=action, future=future))
        logger.debug("Queued %s for task id=%s", action.value, session.task_id)
        return future

    def drain(self) -> list[SuggestionOutcome]:
        finished = [p for p in self._pending if p.future.done()]
        if not finished:
            return []
        self._pending = [p for p in self._pending if p not in finished]
        outcomes = []
        for pending in finished:
            if pending.future.cancelled():
                continue
            outcomes.append(self._resolve(pending))
        return outcomes

    def shutdown(self) -> None:
        for pending in self._pending:
            pending.future.cancel()
        self._pending = []
        self._sessions.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _resolve(self, pending: _Pending) -> SuggestionOutcome:
        session, action = pending.session, pending.action
        if not self.is_open(session):
            return SuggestionOutcome(session=session, action=action, stale=True)

        error = pending.future.exception()
        if error is not None:
            logger.warning("Suggestion %s failed for task id=%s: %s", action.value, session.task_id, error)
            return SuggestionOutcome(session=session, action=action, error=error)

        value = pending.future.result()
        if action == SuggestionAction.ANALYZE_PRIORITY and not isinstance(value, Importance):
            value = coerce_importance(str(value))

        if session.task_id is not None and self._service.get_task(session.task_id) is None:
            logger.info("Dropped %s for deleted task id=%s", action.value, session.task_id)
            return SuggestionOutcome(session=session, action=action, value=value, stale=True)

        return SuggestionOutcome(session=session, action=action, value=value)
