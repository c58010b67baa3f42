from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from types import SimpleNamespace

import openai
import pytest

from taskwise.ai.client import (
    CredentialMissingError,
    SuggestionClient,
    SuggestionError,
    SuggestionRequest,
    coerce_importance,
    friendly_error_message,
)
from taskwise.config import SETTINGS
from taskwise.domain.enums import Importance, SuggestionAction
from taskwise.infra.credentials import StaticCredentialProvider

TEST_SETTINGS = replace(SETTINGS, ai_base_url="https://ai.test/v1/", ai_model="test-model", ai_timeout=5.0)


class FakeCompletions:
    def __init__(self, replies: list) -> None:
        self.replies = list(replies)
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeFactory:
    def __init__(self, *replies) -> None:
        self.completions = FakeCompletions(list(replies))
        self.created: list[tuple[str, str, float]] = []

    def __call__(self, api_key: str, base_url: str, timeout: float):
        self.created.append((api_key, base_url, timeout))
        return SimpleNamespace(chat=SimpleNamespace(completions=self.completions))


def make_client(*replies, key: str | None = "test-key") -> tuple[SuggestionClient, FakeFactory]:
    factory = FakeFactory(*replies)
    client = SuggestionClient(StaticCredentialProvider(key), settings=TEST_SETTINGS, client_factory=factory)
    return client, factory


def test_coerce_importance_defaults_to_medium() -> None:
    assert coerce_importance("urgent") == Importance.MEDIUM
    assert coerce_importance("") == Importance.MEDIUM
    assert coerce_importance(None) == Importance.MEDIUM
    assert coerce_importance(" High\n") == Importance.HIGH
    assert coerce_importance("none") == Importance.NONE


def test_analyze_priority_builds_prompt_and_parses_label() -> None:
    client, factory = make_client("critical")
    request = SuggestionRequest(
        title="Physics midterm",
        subject="Science",
        due_date=datetime(2026, 3, 11, 9, 0),
        user_context="worth 40% of the grade",
        today=date(2026, 3, 10),
    )

    assert client.analyze_priority(request) == Importance.CRITICAL

    (call,) = factory.completions.calls
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 10
    assert call["temperature"] == 0.3
    prompt = call["messages"][0]["content"]
    assert '- Title: "Physics midterm"' in prompt
    assert '- Description: "No description provided"' in prompt
    assert "- Due Date: 2026-03-11" in prompt
    assert "- Current Date: 2026-03-10" in prompt
    assert "- Additional Context: worth 40% of the grade" in prompt
    assert factory.created == [("test-key", "https://ai.test/v1/", 5.0)]


def test_unrecognised_priority_reply_is_medium() -> None:
    client, _ = make_client("urgent")
    assert client.analyze_priority(SuggestionRequest(title="x")) == Importance.MEDIUM


def test_text_actions_return_trimmed_reply() -> None:
    client, factory = make_client("  Calc HW 3 \n", "Solve 1-10.", "Read chapter 2.")

    assert client.optimize_title("do the calculus homework set 3", "Mathematics") == "Calc HW 3"
    assert client.optimize_description("solve problems one to ten", "Calc HW 3") == "Solve 1-10."
    assert client.generate_description("Read ch. 2") == "Read chapter 2."

    max_tokens = [call["max_tokens"] for call in factory.completions.calls]
    assert max_tokens == [50, 200, 150]
    last_prompt = factory.completions.calls[-1]["messages"][0]["content"]
    assert '- Subject: "No subject specified"' in last_prompt
    assert "- Due Date: No due date" in last_prompt


def test_run_dispatches_by_action() -> None:
    client, factory = make_client("low", "Short title")
    request = SuggestionRequest(title="A long title", description="d")

    assert client.run(SuggestionAction.ANALYZE_PRIORITY, request) == Importance.LOW
    assert client.run(SuggestionAction.OPTIMIZE_TITLE, request) == "Short title"
    assert len(factory.completions.calls) == 2


def test_missing_key_raises_before_any_request() -> None:
    client, factory = make_client("high", key=None)

    with pytest.raises(CredentialMissingError) as excinfo:
        client.analyze_priority(SuggestionRequest(title="x"))

    assert factory.created == []
    assert factory.completions.calls == []
    assert "AI settings" in friendly_error_message(excinfo.value)


def test_client_is_rebuilt_when_key_changes() -> None:
    factory = FakeFactory("a", "b", "c")
    credentials = StaticCredentialProvider("one")
    client = SuggestionClient(credentials, settings=TEST_SETTINGS, client_factory=factory)

    client.optimize_title("x")
    client.optimize_title("x")
    credentials.set_api_key("two")
    client.optimize_title("x")

    assert [created[0] for created in factory.created] == ["one", "two"]


def test_sdk_errors_become_suggestion_errors() -> None:
    client, _ = make_client(openai.OpenAIError("boom"))

    with pytest.raises(SuggestionError) as excinfo:
        client.optimize_title("x")

    assert isinstance(excinfo.value.__cause__, openai.OpenAIError)
    assert friendly_error_message(excinfo.value) == "AI request failed: OpenAIError"


@pytest.mark.parametrize("reply", ["", "   ", None])
def test_empty_reply_is_an_error(reply) -> None:
    client, _ = make_client(reply)

    with pytest.raises(SuggestionError):
        client.generate_description("x")


def test_request_from_form_carries_user_context_into_prompt() -> None:
    data = {
        "title": "Physics lab ",
        "description": "",
        "subject": "Science",
        "due_date": datetime(2026, 3, 12),
    }
    request = SuggestionRequest.from_form(data, user_context="  group of four  ")

    assert request.description is None
    assert request.user_context == "group of four"
    assert SuggestionRequest.from_form(data, user_context="   ").user_context is None

    client, factory = make_client("high")
    client.analyze_priority(replace(request, today=date(2026, 3, 10)))

    prompt = factory.completions.calls[0]["messages"][0]["content"]
    assert '- Title: "Physics lab"' in prompt
    assert "- Additional Context: group of four" in prompt
