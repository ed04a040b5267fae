"""Game state models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field

from .board import Cell
from .difficulty import DifficultyLevel
from .player import Player, PlayerStats
from .question import Question


class GamePhase(str, Enum):
    """Stage of the current player's turn."""

    WAITING = "waiting"
    COUNTDOWN = "countdown"
    TIMER = "timer"
    JUDGING = "judging"
    EFFECT = "effect"
    SWAP_CHOOSING = "swap_choosing"
    SWAP_EFFECT = "swap_effect"


CLOCKED_PHASES = frozenset({GamePhase.COUNTDOWN, GamePhase.TIMER})


class SwapInfo(BaseModel):
    """Positions traded by an accepted swap, kept until the swap is dismissed."""

    current_player: str = Field(alias="currentPlayer")
    other_player: str = Field(alias="otherPlayer")
    current_player_old_position: int = Field(alias="currentPlayerOldPosition")
    other_player_old_position: int = Field(alias="otherPlayerOldPosition")

    model_config = {"populate_by_name": True, "frozen": True}


class GameState(BaseModel):
    """Everything the turn state machine owns.

    Instances are never mutated; every transition builds a new one with
    ``evolve`` so observers can compare snapshots with ``==``.
    """

    players: Tuple[Player, ...]
    current_player_index: int = Field(default=0, alias="currentPlayerIndex")
    board: Tuple[Cell, ...]
    phase: GamePhase = GamePhase.WAITING
    current_question: Optional[Question] = Field(default=None, alias="currentQuestion")
    timer_duration: int = Field(default=5, alias="timerDuration")
    skip_next_turn: Tuple[int, ...] = Field(default=(), alias="skipNextTurn")
    double_question: bool = Field(default=False, alias="doubleQuestion")
    double_step: int = Field(default=0, alias="doubleStep")
    questions_queue: Tuple[Question, ...] = Field(default=(), alias="questionsQueue")
    kids_questions_queue: Tuple[Question, ...] = Field(default=(), alias="kidsQuestionsQueue")
    winner: Optional[Player] = None
    swap_info: Optional[SwapInfo] = Field(default=None, alias="swapInfo")
    player_stats: Dict[str, PlayerStats] = Field(default_factory=dict, alias="playerStats")
    difficulty_level: DifficultyLevel = Field(default="medium", alias="difficultyLevel")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def board_length(self) -> int:
        return len(self.board)

    @property
    def finish_index(self) -> int:
        return len(self.board) - 1

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def current_cell(self) -> Cell:
        return self.board[self.current_player.position]

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    def evolve(self, **changes: Any) -> GameState:
        """Return a copy with the given fields replaced."""
        return self.model_copy(update=changes)

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the presentation layer (camelCase, JSON-safe)."""
        payload = self.model_dump(mode="json", by_alias=True)
        payload["boardLength"] = self.board_length
        return payload


class GameSummary(BaseModel):
    """What the game-end collaborator receives once a winner is set."""

    winner: Player
    players: Tuple[Player, ...]
    board: Tuple[Cell, ...]
    player_stats: Dict[str, PlayerStats] = Field(alias="playerStats")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def from_state(cls, state: GameState) -> GameSummary:
        if state.winner is None:
            raise ValueError("game has no winner yet")
        return cls(
            winner=state.winner,
            players=state.players,
            board=state.board,
            player_stats=dict(state.player_stats),
        )
