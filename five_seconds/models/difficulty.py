"""Difficulty band models."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, model_validator


DifficultyLevel = Literal["easy", "medium", "hard", "expert"]

DIFFICULTY_LEVELS: tuple[DifficultyLevel, ...] = get_args(DifficultyLevel)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10


class DifficultyRange(BaseModel):
    """Inclusive slice of the catalog's difficulty scale."""

    min: int
    max: int
    label: str

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_bounds(self) -> DifficultyRange:
        if not MIN_DIFFICULTY <= self.min <= self.max <= MAX_DIFFICULTY:
            raise ValueError(
                f"difficulty range must satisfy {MIN_DIFFICULTY} <= min <= max <= {MAX_DIFFICULTY}"
            )
        return self

    def contains(self, difficulty: int) -> bool:
        return self.min <= difficulty <= self.max


DIFFICULTY_RANGES: dict[DifficultyLevel, DifficultyRange] = {
    "easy": DifficultyRange(min=1, max=3, label="Easy"),
    "medium": DifficultyRange(min=4, max=6, label="Medium"),
    "hard": DifficultyRange(min=7, max=8, label="Hard"),
    "expert": DifficultyRange(min=9, max=10, label="Expert"),
}


def is_difficulty_level(value: object) -> bool:
    """Check whether a raw value names a known difficulty level."""
    return isinstance(value, str) and value in DIFFICULTY_RANGES


def get_difficulty_range(level: str) -> DifficultyRange:
    """Get the band for a level string (case-insensitive, defaults to medium)."""
    key = str(level or "").strip().lower()
    return DIFFICULTY_RANGES.get(key, DIFFICULTY_RANGES["medium"])  # type: ignore[call-overload]
