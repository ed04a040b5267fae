"""Roster setup and mid-game reconciliation."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from .errors import RosterValidationError
from .models.player import Player, PlayerStats
from .models.state import GameState

_logger = logging.getLogger("five_seconds.roster")

MIN_PLAYERS = 2
MAX_NAME_LENGTH = 20

PLAYER_COLORS: Tuple[str, ...] = (
    "#e74c3c",  # red
    "#3498db",  # blue
    "#2ecc71",  # green
    "#f39c12",  # orange
    "#9b59b6",  # purple
    "#1abc9c",  # teal
    "#e67e22",  # dark orange
    "#34495e",  # dark gray
    "#e91e63",  # pink
    "#00bcd4",  # cyan
)


def player_initials(name: str) -> str:
    """Two-character label drawn on a player's token."""
    trimmed = (name or "").strip()
    if not trimmed:
        return "??"
    return trimmed[:2].upper()


def build_players(entries: Sequence[Mapping[str, Any]], min_players: int = MIN_PLAYERS) -> List[Player]:
    """Validate a setup roster and assign palette colors.

    Args:
        entries: Dicts with ``name`` and optional ``color``, ``isChild``, ``emoji``
        min_players: Smallest roster allowed to start a game

    Returns:
        Players at position 0, in entry order

    Raises:
        RosterValidationError: On blank, overlong or duplicate names, or too few players
    """
    players: List[Player] = []
    seen: set[str] = set()
    for idx, entry in enumerate(entries):
        name = str(entry.get("name") or "").strip()
        if not name:
            raise RosterValidationError("player name must not be empty", {"index": idx})
        if len(name) > MAX_NAME_LENGTH:
            raise RosterValidationError(
                f"player name must be at most {MAX_NAME_LENGTH} characters", {"name": name}
            )
        if name in seen:
            raise RosterValidationError(f"duplicate player name: {name}", {"name": name})
        seen.add(name)

        data = dict(entry)
        data["name"] = name
        data["position"] = 0
        data.setdefault("color", PLAYER_COLORS[idx % len(PLAYER_COLORS)])
        try:
            players.append(Player.from_dict(data))
        except (ValueError, ValidationError) as exc:
            raise RosterValidationError(f"invalid player entry: {exc}", {"index": idx}) from exc

    if len(players) < min_players:
        raise RosterValidationError(
            f"at least {min_players} players are required", {"count": len(players)}
        )
    return players


def _unique_by_name(players: Sequence[Player]) -> List[Player]:
    unique: List[Player] = []
    seen: set[str] = set()
    for player in players:
        if player.name in seen:
            _logger.warning(f"[ROSTER] Dropping duplicate player name {player.name!r}")
            continue
        seen.add(player.name)
        unique.append(player)
    return unique


def _resolve_current_index(state: GameState, new_index: Mapping[str, int]) -> int:
    old_index = state.current_player_index
    current_name: Optional[str] = None
    if 0 <= old_index < len(state.players):
        current_name = state.players[old_index].name

    if current_name is not None and current_name in new_index:
        return new_index[current_name]
    # Current player left: the next retained player in the old seating order plays.
    count = len(state.players)
    for step in range(1, count + 1):
        name = state.players[(old_index + step) % count].name
        if name in new_index:
            return new_index[name]
    return 0


def reconcile_players(state: GameState, new_players: Sequence[Player]) -> GameState:
    """Splice an edited roster into a live game.

    Players are matched by name. Retained players keep their position,
    newcomers start on cell 0 and removed players lose their stats and skip
    marks. Phase, board and current question are left alone.
    """
    roster = _unique_by_name(new_players)
    if not roster:
        _logger.warning("[ROSTER] Ignoring roster edit with no players")
        return state

    previous: Dict[str, Player] = {p.name: p for p in state.players}
    merged: List[Player] = []
    for player in roster:
        kept = previous.get(player.name)
        position = min(kept.position, state.finish_index) if kept is not None else 0
        merged.append(player.moved_to(position))

    new_index = {p.name: i for i, p in enumerate(merged)}

    skip: List[int] = []
    for old_idx in state.skip_next_turn:
        if not 0 <= old_idx < len(state.players):
            continue
        idx = new_index.get(state.players[old_idx].name)
        if idx is not None and idx not in skip:
            skip.append(idx)

    stats = {p.name: state.player_stats.get(p.name, PlayerStats()) for p in merged}

    added = [p.name for p in merged if p.name not in previous]
    removed = [name for name in previous if name not in new_index]
    if added or removed:
        _logger.info(f"[ROSTER] Roster edited: added={added} removed={removed}")

    return state.evolve(
        players=tuple(merged),
        current_player_index=_resolve_current_index(state, new_index),
        skip_next_turn=tuple(skip),
        player_stats=stats,
    )
