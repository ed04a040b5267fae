"""Actions accepted by the turn state machine.

The presentation layer dispatches exactly these actions; ``action_from_dict``
parses the ``{"type": ..., "payload": {...}}`` shape used over HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic import ValidationError

from .models.player import Player


class ActionType(str, Enum):
    """Action identifiers."""

    START_COUNTDOWN = "START_COUNTDOWN"
    COUNTDOWN_END = "COUNTDOWN_END"
    START_TIMER = "START_TIMER"
    TIMER_END = "TIMER_END"
    ANSWER_CORRECT = "ANSWER_CORRECT"
    ANSWER_WRONG = "ANSWER_WRONG"
    SKIP_QUESTION = "SKIP_QUESTION"
    SELECT_SWAP_PLAYER = "SELECT_SWAP_PLAYER"
    DECLINE_SWAP = "DECLINE_SWAP"
    DISMISS_SWAP = "DISMISS_SWAP"
    UPDATE_PLAYERS = "UPDATE_PLAYERS"
    CHANGE_DIFFICULTY = "CHANGE_DIFFICULTY"


@dataclass(frozen=True)
class Action:
    type: ActionType
    player_index: Optional[int] = None
    players: Tuple[Player, ...] = ()
    level: Optional[str] = None


def start_countdown() -> Action:
    return Action(ActionType.START_COUNTDOWN)


def countdown_end() -> Action:
    return Action(ActionType.COUNTDOWN_END)


def start_timer() -> Action:
    return Action(ActionType.START_TIMER)


def timer_end() -> Action:
    return Action(ActionType.TIMER_END)


def answer_correct() -> Action:
    return Action(ActionType.ANSWER_CORRECT)


def answer_wrong() -> Action:
    return Action(ActionType.ANSWER_WRONG)


def skip_question() -> Action:
    return Action(ActionType.SKIP_QUESTION)


def select_swap_player(player_index: int) -> Action:
    return Action(ActionType.SELECT_SWAP_PLAYER, player_index=player_index)


def decline_swap() -> Action:
    return Action(ActionType.DECLINE_SWAP)


def dismiss_swap() -> Action:
    return Action(ActionType.DISMISS_SWAP)


def update_players(players: Sequence[Player]) -> Action:
    return Action(ActionType.UPDATE_PLAYERS, players=tuple(players))


def change_difficulty(level: str) -> Action:
    return Action(ActionType.CHANGE_DIFFICULTY, level=level)


def action_from_dict(data: Dict[str, Any]) -> Optional[Action]:
    """Parse an action event; returns None when it is malformed."""
    if not isinstance(data, dict):
        return None
    try:
        action_type = ActionType(str(data.get("type") or "").upper().strip())
    except ValueError:
        return None

    payload = data.get("payload") or {}
    if not isinstance(payload, dict):
        return None

    if action_type == ActionType.SELECT_SWAP_PLAYER:
        raw_index = payload.get("playerIndex", payload.get("player_index"))
        try:
            return select_swap_player(int(raw_index))
        except (TypeError, ValueError):
            return None

    if action_type == ActionType.UPDATE_PLAYERS:
        raw_players = payload.get("players")
        if not isinstance(raw_players, list):
            return None
        try:
            players = [Player.from_dict(p) for p in raw_players if isinstance(p, dict)]
        except (TypeError, ValueError, ValidationError):
            return None
        return update_players(players)

    if action_type == ActionType.CHANGE_DIFFICULTY:
        level = payload.get("level", payload.get("difficultyLevel"))
        if not level:
            return None
        return change_difficulty(str(level).strip().lower())

    return Action(action_type)
