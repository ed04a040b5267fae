"""Turn and round state machine.

``reduce(state, action, config, pool)`` is the only way a game moves on. It
never mutates its input: every accepted action yields a new ``GameState``,
and every action whose preconditions do not hold returns the input state
unchanged.

Phase flow for one turn::

    waiting -> [countdown] -> timer -> judging -> waiting (next player)
                                          |-> effect (winner)
                                          '-> swap_choosing -> swap_effect -> waiting | effect
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .actions import Action, ActionType
from .board import generate_board
from .models.board import SpecialEffect
from .models.difficulty import DifficultyLevel, is_difficulty_level
from .models.player import Player, PlayerStats
from .models.state import GamePhase, GameState, SwapInfo
from .questions.pool import QuestionPool
from .roster import reconcile_players
from .settings import MIN_TIMER_SECONDS, GameSettings

_logger = logging.getLogger("five_seconds.engine")

FAST_PENALTY_SECONDS = 2

Handler = Callable[[GameState, Action, GameSettings, QuestionPool], GameState]


def derive_timer_duration(state: GameState, config: GameSettings) -> int:
    """Seconds on the clock for the current player's turn."""
    player = state.current_player
    base = config.base_timer_seconds(player.is_child)
    if state.current_cell.has_effect(SpecialEffect.FAST):
        return max(MIN_TIMER_SECONDS, base - FAST_PENALTY_SECONDS)
    return base


def next_player_index(current: int, player_count: int, skip_next_turn: Sequence[int]) -> Tuple[int, Tuple[int, ...]]:
    """Rotate to the next player, consuming the skip marks passed on the way.

    Returns:
        Tuple of (next index, remaining skip marks)
    """
    remaining: List[int] = list(skip_next_turn)
    nxt = (current + 1) % player_count
    while nxt in remaining:
        remaining.remove(nxt)
        nxt = (nxt + 1) % player_count
    return nxt, tuple(remaining)


def _record(state: GameState, outcome: str) -> Dict[str, PlayerStats]:
    name = state.current_player.name
    stats = dict(state.player_stats)
    stats[name] = stats.get(name, PlayerStats()).record(outcome)
    return stats


def _draw_for(state: GameState, player: Player, pool: QuestionPool) -> GameState:
    draw = pool.draw(
        state.questions_queue,
        state.kids_questions_queue,
        state.difficulty_level,
        player.is_child,
    )
    return state.evolve(
        current_question=draw.question,
        questions_queue=draw.questions_queue,
        kids_questions_queue=draw.kids_questions_queue,
    )


def _advance_turn(state: GameState, config: GameSettings, pool: QuestionPool) -> GameState:
    """Hand the turn to the next eligible player and draw their question."""
    nxt, skip = next_player_index(
        state.current_player_index,
        len(state.players),
        state.skip_next_turn,
    )
    advanced = state.evolve(
        current_player_index=nxt,
        skip_next_turn=skip,
        phase=GamePhase.WAITING,
        double_question=False,
        double_step=0,
        swap_info=None,
    )
    advanced = _draw_for(advanced, advanced.current_player, pool)
    return advanced.evolve(timer_duration=derive_timer_duration(advanced, config))


def _declare_winner(state: GameState, winner: Player) -> GameState:
    _logger.info(f"[ENGINE] {winner.name} reached the finish")
    return state.evolve(
        winner=winner,
        phase=GamePhase.EFFECT,
        double_question=False,
        double_step=0,
        swap_info=None,
    )


def _resolve_move(state: GameState, amount: int, config: GameSettings, pool: QuestionPool) -> GameState:
    """Move the current player, then end the game or pass the turn."""
    idx = state.current_player_index
    player = state.current_player
    position = min(player.position + amount, state.finish_index)
    moved = player.moved_to(position)

    players = list(state.players)
    players[idx] = moved
    skip = tuple(i for i in state.skip_next_turn if i != idx)
    state = state.evolve(players=tuple(players), skip_next_turn=skip)

    if position >= state.finish_index:
        return _declare_winner(state, moved)

    if state.board[position].has_effect(SpecialEffect.SKIP):
        _logger.debug(f"[ENGINE] {moved.name} landed on skip; next turn forfeited")
        state = state.evolve(skip_next_turn=skip + (idx,))

    return _advance_turn(state, config, pool)


def _enter_clock(state: GameState, phase: GamePhase, config: GameSettings) -> GameState:
    return state.evolve(
        phase=phase,
        timer_duration=derive_timer_duration(state, config),
        double_question=state.current_cell.has_effect(SpecialEffect.DOUBLE),
    )


def _start_countdown(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.WAITING:
        return state
    return _enter_clock(state, GamePhase.COUNTDOWN, config)


def _countdown_end(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.COUNTDOWN:
        return state
    return _enter_clock(state, GamePhase.TIMER, config)


def _start_timer(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.WAITING:
        return state
    return _enter_clock(state, GamePhase.TIMER, config)


def _timer_end(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    # A late or repeated expiry finds the machine past TIMER and is dropped.
    if state.phase != GamePhase.TIMER:
        return state
    return state.evolve(phase=GamePhase.JUDGING)


def _answer_correct(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.JUDGING:
        return state

    state = state.evolve(player_stats=_record(state, "correct"))

    if state.double_question and state.double_step == 0:
        # First of two questions: same player goes again before moving.
        state = _draw_for(state, state.current_player, pool)
        return state.evolve(phase=GamePhase.WAITING, double_step=1)

    cell = state.current_cell
    if cell.has_effect(SpecialEffect.SWAP) and len(state.players) > 1:
        return state.evolve(phase=GamePhase.SWAP_CHOOSING, double_question=False, double_step=0)

    amount = 1
    if cell.has_effect(SpecialEffect.BACK):
        amount = 0
    elif cell.has_effect(SpecialEffect.BONUS):
        amount = 2
    return _resolve_move(state, amount, config, pool)


def _answer_wrong(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.JUDGING:
        return state
    idx = state.current_player_index
    state = state.evolve(
        player_stats=_record(state, "wrong"),
        skip_next_turn=tuple(i for i in state.skip_next_turn if i != idx),
    )
    return _advance_turn(state, config, pool)


def _skip_question(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.WAITING:
        return state
    state = state.evolve(player_stats=_record(state, "skipped"))
    return _draw_for(state, state.current_player, pool)


def _select_swap_player(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.SWAP_CHOOSING:
        return state
    target = action.player_index
    idx = state.current_player_index
    if target is None or not 0 <= target < len(state.players) or target == idx:
        _logger.debug(f"[ENGINE] Ignoring swap target {target!r}")
        return state

    current = state.players[idx]
    other = state.players[target]
    players = list(state.players)
    players[idx] = current.moved_to(other.position)
    players[target] = other.moved_to(current.position)

    return state.evolve(
        players=tuple(players),
        phase=GamePhase.SWAP_EFFECT,
        swap_info=SwapInfo(
            current_player=current.name,
            other_player=other.name,
            current_player_old_position=current.position,
            other_player_old_position=other.position,
        ),
    )


def _decline_swap(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.SWAP_CHOOSING:
        return state
    return _resolve_move(state, 1, config, pool)


def _dismiss_swap(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if state.phase != GamePhase.SWAP_EFFECT:
        return state
    state = state.evolve(swap_info=None)

    finishers = [p for p in state.players if p.position >= state.finish_index]
    if finishers:
        current = state.current_player
        winner = current if current in finishers else finishers[0]
        return _declare_winner(state, winner)

    return _advance_turn(state, config, pool)


def _update_players(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if not action.players:
        return state
    return reconcile_players(state, action.players)


def _change_difficulty(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    if not is_difficulty_level(action.level):
        _logger.debug(f"[ENGINE] Ignoring unknown difficulty {action.level!r}")
        return state
    questions_queue, kids_questions_queue = pool.seed(action.level)  # type: ignore[arg-type]
    state = state.evolve(
        difficulty_level=action.level,
        questions_queue=questions_queue,
        kids_questions_queue=kids_questions_queue,
    )
    return _draw_for(state, state.current_player, pool)


HANDLERS: Dict[ActionType, Handler] = {
    ActionType.START_COUNTDOWN: _start_countdown,
    ActionType.COUNTDOWN_END: _countdown_end,
    ActionType.START_TIMER: _start_timer,
    ActionType.TIMER_END: _timer_end,
    ActionType.ANSWER_CORRECT: _answer_correct,
    ActionType.ANSWER_WRONG: _answer_wrong,
    ActionType.SKIP_QUESTION: _skip_question,
    ActionType.SELECT_SWAP_PLAYER: _select_swap_player,
    ActionType.DECLINE_SWAP: _decline_swap,
    ActionType.DISMISS_SWAP: _dismiss_swap,
    ActionType.UPDATE_PLAYERS: _update_players,
    ActionType.CHANGE_DIFFICULTY: _change_difficulty,
}


def reduce(state: GameState, action: Action, config: GameSettings, pool: QuestionPool) -> GameState:
    """Apply one action.

    Args:
        state: Current game state
        action: Action to apply
        config: Settings in force for this transition
        pool: Question pool used to refill the current question

    Returns:
        The next state, or ``state`` itself when the action does not apply
    """
    if state.is_over:
        _logger.debug(f"[ENGINE] Game over; ignoring {action.type.value}")
        return state

    handler = HANDLERS.get(action.type)
    if handler is None:
        return state

    next_state = handler(state, action, config, pool)
    if next_state is state:
        _logger.debug(f"[ENGINE] {action.type.value} ignored in phase {state.phase.value}")
    return next_state


def start_game(
    players: Sequence[Player],
    config: GameSettings,
    pool: QuestionPool,
    board_length: Optional[int] = None,
    difficulty_level: Optional[DifficultyLevel] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """Build the opening state for a new game.

    Args:
        players: Validated roster (see ``roster.build_players``)
        config: Settings; supply board length, difficulty and special-cell flag defaults
        pool: Question pool for the game
        board_length: Overrides ``config.board_length``
        difficulty_level: Overrides ``config.difficulty_level``
        rng: Random source for the board; defaults to the pool's

    Raises:
        ValueError: If ``players`` is empty or the board is too short
    """
    if not players:
        raise ValueError("a game needs at least one player")

    level = difficulty_level or config.difficulty_level
    length = board_length or config.board_length
    board = generate_board(length, config.special_cells_enabled, rng or pool.rng)
    questions_queue, kids_questions_queue = pool.seed(level)

    roster = tuple(p.moved_to(0) for p in players)
    state = GameState(
        players=roster,
        current_player_index=0,
        board=board,
        phase=GamePhase.WAITING,
        skip_next_turn=(),
        questions_queue=questions_queue,
        kids_questions_queue=kids_questions_queue,
        player_stats={p.name: PlayerStats() for p in roster},
        difficulty_level=level,
    )
    state = _draw_for(state, state.current_player, pool)
    state = state.evolve(timer_duration=derive_timer_duration(state, config))

    _logger.info(
        f"[ENGINE] New game: players={[p.name for p in roster]} "
        f"length={length} difficulty={level}"
    )
    return state


def restart_game(state: GameState, config: GameSettings, pool: QuestionPool) -> GameState:
    """Play again with the same roster, board length and difficulty."""
    return start_game(
        state.players,
        config,
        pool,
        board_length=state.board_length,
        difficulty_level=state.difficulty_level,
    )
