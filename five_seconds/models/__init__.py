"""Pydantic models for the board game core."""

from .board import Board, Cell, CellType, SpecialEffect, SPECIAL_EFFECTS
from .difficulty import (
    DIFFICULTY_LEVELS,
    DIFFICULTY_RANGES,
    DifficultyLevel,
    DifficultyRange,
    get_difficulty_range,
    is_difficulty_level,
)
from .player import Player, PlayerStats
from .question import Question
from .state import CLOCKED_PHASES, GamePhase, GameState, GameSummary, SwapInfo

__all__ = [
    "Board",
    "Cell",
    "CellType",
    "SpecialEffect",
    "SPECIAL_EFFECTS",
    "DIFFICULTY_LEVELS",
    "DIFFICULTY_RANGES",
    "DifficultyLevel",
    "DifficultyRange",
    "get_difficulty_range",
    "is_difficulty_level",
    "Player",
    "PlayerStats",
    "Question",
    "CLOCKED_PHASES",
    "GamePhase",
    "GameState",
    "GameSummary",
    "SwapInfo",
]
