from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_AI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_AI_MODEL = "gemini-1.5-flash"


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


def _default_database_url() -> str:
    return f"sqlite:///{(PROJECT_ROOT / 'data' / 'taskwise.sqlite3').as_posix()}"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    storage_key: str = "taskwise-tasks"
    ai_base_url: str = DEFAULT_AI_BASE_URL
    ai_model: str = DEFAULT_AI_MODEL
    ai_timeout: float = 30.0
    ai_api_key: str | None = None


load_env()

SETTINGS = Settings(
    database_url=os.getenv("DATABASE_URL", "").strip() or _default_database_url(),
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_dir=os.getenv("LOG_DIR", "logs"),
    storage_key=os.getenv("TASKWISE_STORAGE_KEY", "").strip() or "taskwise-tasks",
    ai_base_url=os.getenv("TASKWISE_AI_BASE_URL", "").strip() or DEFAULT_AI_BASE_URL,
    ai_model=os.getenv("TASKWISE_AI_MODEL", "").strip() or DEFAULT_AI_MODEL,
    ai_timeout=_env_float("TASKWISE_AI_TIMEOUT", 30.0),
    ai_api_key=(
        os.getenv("TASKWISE_AI_API_KEY", "").strip()
        or os.getenv("GEMINI_API_KEY", "").strip()
        or None
    ),
)
