from __future__ import annotations

from pathlib import Path

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from taskwise.config import SETTINGS

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    return create_engine(database_url, pool_pre_ping=True)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False)


engine = make_engine(SETTINGS.database_url)
SessionLocal = make_session_factory(engine)


def _ensure_sqlite_dir(bind: Engine) -> None:
    if bind.url.get_backend_name() != "sqlite":
        return
    database = bind.url.database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def init_db(bind: Engine | None = None) -> None:
    from . import models  # noqa: F401  registers tables on Base.metadata

    bind = bind or engine
    _ensure_sqlite_dir(bind)
    Base.metadata.create_all(bind)
    with bind.connect() as connection:
        connection.execute(text("SELECT 1"))
