"""Board cell models."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field, model_validator


class CellType(str, Enum):
    """Kind of track cell."""

    NORMAL = "normal"
    SPECIAL = "special"


class SpecialEffect(str, Enum):
    """Effect tag carried by a special cell."""

    BACK = "back"      # no progress on a correct answer
    SKIP = "skip"      # landing here costs the next turn
    SWAP = "swap"      # trade places with another player
    FAST = "fast"      # shorter timer
    DOUBLE = "double"  # two questions in a row
    BONUS = "bonus"    # move two cells


SPECIAL_EFFECTS: Tuple[SpecialEffect, ...] = tuple(SpecialEffect)


class Cell(BaseModel):
    """One position on the track."""

    type: CellType = CellType.NORMAL
    special_type: Optional[SpecialEffect] = Field(default=None, alias="specialType")

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def validate_effect(self) -> Cell:
        if self.type == CellType.SPECIAL and self.special_type is None:
            raise ValueError("special cells must carry an effect")
        if self.type == CellType.NORMAL and self.special_type is not None:
            raise ValueError("normal cells cannot carry an effect")
        return self

    @classmethod
    def normal(cls) -> Cell:
        return cls(type=CellType.NORMAL)

    @classmethod
    def special(cls, effect: SpecialEffect) -> Cell:
        return cls(type=CellType.SPECIAL, special_type=effect)

    @property
    def is_special(self) -> bool:
        return self.type == CellType.SPECIAL

    def has_effect(self, effect: SpecialEffect) -> bool:
        return self.is_special and self.special_type == effect


Board = Tuple[Cell, ...]
