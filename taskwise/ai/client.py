from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Optional

import openai
from openai import OpenAI

from taskwise.config import SETTINGS, Settings
from taskwise.domain.enums import Importance, SuggestionAction
from taskwise.infra.credentials import CredentialProvider

from . import prompts

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3

MAX_TOKENS = {
    SuggestionAction.ANALYZE_PRIORITY: 10,
    SuggestionAction.OPTIMIZE_TITLE: 50,
    SuggestionAction.OPTIMIZE_DESCRIPTION: 200,
    SuggestionAction.GENERATE_DESCRIPTION: 150,
}


class SuggestionError(RuntimeError):
    """The AI service did not produce a usable suggestion."""


class CredentialMissingError(SuggestionError):
    """No API key is configured; the UI should ask the user for one."""


@dataclass(frozen=True)
class SuggestionRequest:
    title: str
    description: Optional[str] = None
    subject: Optional[str] = None
    due_date: Optional[datetime] = None
    user_context: Optional[str] = None
    today: Optional[date] = None

    @classmethod
    def from_form(cls, data: dict, user_context: Optional[str] = None) -> SuggestionRequest:
        """Build a request from edit-dialog values; blank fields become ``None``."""
        return cls(
            title=(data.get("title") or "").strip(),
            description=(data.get("description") or "").strip() or None,
            subject=(data.get("subject") or "").strip() or None,
            due_date=data.get("due_date"),
            user_context=(user_context or "").strip() or None,
        )


def coerce_importance(raw: str | None) -> Importance:
    """Anything outside the five known labels counts as ``medium``."""
    label = (raw or "").strip().lower()
    try:
        return Importance(label)
    except ValueError:
        return Importance.MEDIUM


def friendly_error_message(err: Exception) -> str:
    if isinstance(err, CredentialMissingError):
        return "AI is not configured. Add your Gemini API key in AI settings."
    cause = err.__cause__
    if isinstance(cause, openai.AuthenticationError):
        return "AI authentication failed. Check your API key in AI settings."
    if isinstance(cause, openai.RateLimitError):
        return "AI is rate-limited. Try again later."
    if isinstance(cause, (openai.APIConnectionError, openai.APITimeoutError)):
        return "AI service is unreachable. Check your connection and try again."
    return str(err).strip() or "AI request failed."


def _default_client_factory(api_key: str, base_url: str, timeout: float) -> Any:
    return OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)


class SuggestionClient:
    """Priority and text suggestions over an OpenAI-compatible chat endpoint."""

    def __init__(
        self,
        credentials: CredentialProvider,
        settings: Settings = SETTINGS,
        client_factory: Callable[[str, str, float], Any] = _default_client_factory,
    ) -> None:
        self._credentials = credentials
        self._settings = settings
        self._client_factory = client_factory
        self._client: Any = None
        self._client_key: Optional[str] = None

    def _get_client(self) -> Any:
        api_key = self._credentials.get_api_key()
        if not api_key:
            raise CredentialMissingError("AI API key is not set")
        if self._client is None or self._client_key != api_key:
            self._client = self._client_factory(
                api_key,
                self._settings.ai_base_url,
                self._settings.ai_timeout,
            )
            self._client_key = api_key
        return self._client

    def _complete(self, prompt: str, action: SuggestionAction) -> str:
        client = self._get_client()
        logger.info("AI: %s model=%s", action.value, self._settings.ai_model)
        try:
            response = client.chat.completions.create(
                model=self._settings.ai_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS[action],
            )
        except openai.OpenAIError as exc:
            logger.warning("AI: %s failed (%s)", action.value, exc.__class__.__name__)
            raise SuggestionError(f"AI request failed: {exc.__class__.__name__}") from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise SuggestionError("AI response was malformed") from exc
        text = (content or "").strip()
        if not text:
            raise SuggestionError("AI returned an empty response")
        return text

    def analyze_priority(self, request: SuggestionRequest) -> Importance:
        prompt = prompts.priority_prompt(
            title=request.title,
            description=request.description,
            subject=request.subject,
            due_date=request.due_date,
            today=request.today or date.today(),
            user_context=request.user_context,
        )
        raw = self._complete(prompt, SuggestionAction.ANALYZE_PRIORITY)
        importance = coerce_importance(raw)
        logger.info("AI: suggested priority=%s (raw=%r)", importance.value, raw)
        return importance

    def optimize_title(self, title: str, subject: Optional[str] = None) -> str:
        prompt = prompts.optimize_title_prompt(title, subject)
        return self._complete(prompt, SuggestionAction.OPTIMIZE_TITLE)

    def optimize_description(
        self,
        description: Optional[str],
        title: str,
        subject: Optional[str] = None,
    ) -> str:
        prompt = prompts.optimize_description_prompt(description, title, subject)
        return self._complete(prompt, SuggestionAction.OPTIMIZE_DESCRIPTION)

    def generate_description(
        self,
        title: str,
        subject: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> str:
        prompt = prompts.generate_description_prompt(title, subject, due_date)
        return self._complete(prompt, SuggestionAction.GENERATE_DESCRIPTION)

    def run(self, action: SuggestionAction, request: SuggestionRequest) -> Importance | str:
        if action == SuggestionAction.ANALYZE_PRIORITY:
            return self.analyze_priority(request)
        if action == SuggestionAction.OPTIMIZE_TITLE:
            return self.optimize_title(request.title, request.subject)
        if action == SuggestionAction.OPTIMIZE_DESCRIPTION:
            return self.optimize_description(request.description, request.title, request.subject)
        if action == SuggestionAction.GENERATE_DESCRIPTION:
            return self.generate_description(request.title, request.subject, request.due_date)
        raise ValueError(f"unknown suggestion action: {action}")
