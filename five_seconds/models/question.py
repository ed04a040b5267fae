"""Question catalog models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .difficulty import MAX_DIFFICULTY, MIN_DIFFICULTY


class Question(BaseModel):
    """A prompt the current player has to answer before the timer runs out."""

    id: int
    text: str
    for_kids: bool = Field(default=False, alias="forKids")
    difficulty: int = 5

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("difficulty")
    @classmethod
    def validate_difficulty(cls, v: int) -> int:
        if v < MIN_DIFFICULTY or v > MAX_DIFFICULTY:
            raise ValueError(
                f"difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}"
            )
        return v

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        """Create from dict with flexible field names."""
        return cls(
            id=int(data.get("id", data.get("questionId", 0))),
            text=str(data.get("text", data.get("prompt", ""))),
            for_kids=bool(data.get("forKids", data.get("for_kids", False))),
            difficulty=int(data.get("difficulty", 5)),
        )
