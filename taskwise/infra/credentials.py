from __future__ import annotations

import logging
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from .repository import KeyValueStore

logger = logging.getLogger(__name__)

API_KEY_NAME = "gemini_api_key"


class CredentialProvider(Protocol):
    def get_api_key(self) -> Optional[str]: ...
    def set_api_key(self, key: str) -> None: ...
    def clear_api_key(self) -> None: ...


class StaticCredentialProvider:
    def __init__(self, key: Optional[str] = None) -> None:
        self._key = (key or "").strip() or None

    def get_api_key(self) -> Optional[str]:
        return self._key

    def set_api_key(self, key: str) -> None:
        self._key = key.strip() or None

    def clear_api_key(self) -> None:
        self._key = None


class StoredCredentialProvider:
    """API key kept in the local key-value store.

    ``fallback`` (usually the value from the environment) is returned when
    nothing has been stored. Clearing removes the stored key only.
    """

    def __init__(
        self,
        store: KeyValueStore,
        fallback: Optional[str] = None,
        name: str = API_KEY_NAME,
    ) -> None:
        self._store = store
        self._fallback = (fallback or "").strip() or None
        self._name = name

    def get_api_key(self) -> Optional[str]:
        try:
            stored = self._store.get(self._name)
        except SQLAlchemyError:
            logger.exception("Failed to read stored API key")
            stored = None
        return (stored or "").strip() or self._fallback

    def set_api_key(self, key: str) -> None:
        key = key.strip()
        if not key:
            self.clear_api_key()
            return
        self._store.set(self._name, key)
        logger.info("AI API key saved")

    def clear_api_key(self) -> None:
        self._store.delete(self._name)
        logger.info("AI API key cleared")
