from __future__ import annotations

from enum import StrEnum


class Importance(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, raw: str | None, default: Importance | None = None) -> Importance:
        """Map a free-form label to a tier, falling back to ``default`` (or NONE)."""
        fallback = cls.NONE if default is None else default
        if not raw:
            return fallback
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return fallback


class SuggestionAction(StrEnum):
    ANALYZE_PRIORITY = "analyze-priority"
    OPTIMIZE_TITLE = "optimize-title"
    OPTIMIZE_DESCRIPTION = "optimize-description"
    GENERATE_DESCRIPTION = "generate-description"


SUBJECTS = (
    "Mathematics",
    "Science",
    "English",
    "History",
    "Computer Science",
    "Art",
    "Music",
    "Physical Education",
    "Other",
)
