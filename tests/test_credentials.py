from __future__ import annotations

import pytest

from taskwise.infra.credentials import StaticCredentialProvider, StoredCredentialProvider
from taskwise.infra.db import init_db, make_engine, make_session_factory
from taskwise.infra.repository import KeyValueStore


@pytest.fixture()
def store(tmp_path) -> KeyValueStore:
    engine = make_engine(f"sqlite:///{tmp_path / 'keys.sqlite3'}")
    init_db(engine)
    yield KeyValueStore(make_session_factory(engine))
    engine.dispose()


def test_stored_key_wins_over_fallback(store: KeyValueStore) -> None:
    provider = StoredCredentialProvider(store, fallback="env-key")
    assert provider.get_api_key() == "env-key"

    provider.set_api_key("  saved-key ")
    assert provider.get_api_key() == "saved-key"
    assert StoredCredentialProvider(store).get_api_key() == "saved-key"

    provider.clear_api_key()
    assert provider.get_api_key() == "env-key"


def test_blank_key_clears_stored_value(store: KeyValueStore) -> None:
    provider = StoredCredentialProvider(store)
    provider.set_api_key("abc")

    provider.set_api_key("   ")

    assert provider.get_api_key() is None


def test_static_provider() -> None:
    provider = StaticCredentialProvider(" ")
    assert provider.get_api_key() is None

    provider.set_api_key("k")
    assert provider.get_api_key() == "k"

    provider.clear_api_key()
    assert provider.get_api_key() is None
