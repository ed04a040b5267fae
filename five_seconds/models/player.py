"""Player and per-player statistics models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ..coerce import as_bool


class Player(BaseModel):
    """A participant on the track."""

    name: str
    color: str = "#e74c3c"
    position: int = 0
    is_child: bool = Field(default=False, alias="isChild")
    emoji: Optional[str] = None

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("position")
    @classmethod
    def validate_position(cls, v: int) -> int:
        if v < 0:
            raise ValueError("position must be >= 0")
        return v

    def moved_to(self, position: int) -> Player:
        """Return a copy of this player standing on another cell."""
        return self.model_copy(update={"position": position})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        """Create from dict with flexible field names."""
        emoji = data.get("emoji")
        return cls(
            name=str(data.get("name", "")).strip(),
            color=str(data.get("color") or "#e74c3c"),
            position=int(data.get("position", 0) or 0),
            is_child=as_bool(data.get("isChild", data.get("is_child"))),
            emoji=str(emoji) if emoji else None,
        )


class PlayerStats(BaseModel):
    """Answer counters for one player. Counters only ever grow."""

    correct: int = 0
    wrong: int = 0
    skipped: int = 0

    model_config = {"frozen": True}

    def record(self, outcome: str) -> PlayerStats:
        """Return a copy with the named counter incremented."""
        if outcome not in ("correct", "wrong", "skipped"):
            raise ValueError(f"unknown outcome: {outcome}")
        return self.model_copy(update={outcome: getattr(self, outcome) + 1})
