"""Game session.

Single writer for the live ``GameState``. Every action goes through
``dispatch``, which runs the reducer, swaps the state reference, keeps the
countdown clock in step with the phase and tells observers about the change.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Any, Callable, List, Mapping, Optional, Sequence

from . import actions
from .actions import Action
from .clock import CountdownClock, ElapsedCallback
from .engine import reduce, restart_game, start_game
from .models.difficulty import DifficultyLevel
from .models.player import Player
from .models.question import Question
from .models.state import CLOCKED_PHASES, GamePhase, GameState, GameSummary
from .questions.pool import QuestionPool
from .settings import GameSettings

_logger = logging.getLogger("five_seconds.session")

Observer = Callable[[GameState], None]
GameEndCallback = Callable[[GameSummary], None]
ClockFactory = Callable[[ElapsedCallback], Any]


class SessionError(RuntimeError):
    """Raised when an action is dispatched before a game has started."""


class GameSession:
    """Owns one game at a time and drives it from external events."""

    def __init__(
        self,
        catalog: Sequence[Question],
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
        on_game_end: Optional[GameEndCallback] = None,
        clock_factory: Optional[ClockFactory] = None,
    ) -> None:
        self._settings = settings or GameSettings()
        self._pool = QuestionPool(catalog, rng)
        self._on_game_end = on_game_end

        self._lock = threading.RLock()
        self._state: Optional[GameState] = None
        self._observers: List[Observer] = []
        self._clock_run: Optional[int] = None

        if clock_factory is None:
            self._clock = CountdownClock(on_elapsed=self._on_clock_elapsed, logger=_logger)
        else:
            self._clock = clock_factory(self._on_clock_elapsed)

    @property
    def state(self) -> Optional[GameState]:
        return self._state

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def pool(self) -> QuestionPool:
        return self._pool

    @property
    def time_left(self) -> int:
        """Seconds shown on the countdown or answer timer."""
        return self._clock.remaining

    def configure(self, settings: GameSettings) -> None:
        """Swap in new settings; they apply from the next transition on."""
        with self._lock:
            self._settings = settings

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register a state observer. Returns a function that unsubscribes it."""
        with self._lock:
            self._observers.append(observer)

        def _unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return _unsubscribe

    def start(
        self,
        players: Sequence[Player],
        board_length: Optional[int] = None,
        difficulty_level: Optional[DifficultyLevel] = None,
    ) -> GameState:
        """Start a new game, replacing any game in progress."""
        with self._lock:
            self._cancel_clock()
            state = start_game(
                players,
                self._settings,
                self._pool,
                board_length=board_length,
                difficulty_level=difficulty_level,
            )
            return self._replace(state)

    def restart(self) -> GameState:
        """Play again with the current roster."""
        with self._lock:
            current = self._require_state()
            self._cancel_clock()
            return self._replace(restart_game(current, self._settings, self._pool))

    def resume(self, state: GameState) -> GameState:
        """Continue a saved game. Clocked phases fall back to waiting."""
        with self._lock:
            self._cancel_clock()
            if state.phase in CLOCKED_PHASES:
                state = state.evolve(phase=GamePhase.WAITING)
            return self._replace(state)

    def dispatch(self, action: Action) -> GameState:
        """Apply an action and return the resulting state."""
        with self._lock:
            current = self._require_state()
            next_state = reduce(current, action, self._settings, self._pool)
            if next_state is current:
                return current

            self._replace(next_state)
            if next_state.winner is not None and current.winner is None:
                self._finish(next_state)
            else:
                self._sync_clock(current, next_state)
            return self._state

    def begin_turn(self) -> GameState:
        """Start the current turn the way the settings ask for.

        With the question already on screen the answer timer starts at once;
        otherwise a countdown leads in and reveals it.
        """
        if self._settings.show_question_immediately:
            return self.dispatch(actions.start_timer())
        return self.dispatch(actions.start_countdown())

    def stop(self) -> None:
        """Stop the clock, e.g. when the player navigates away from the game."""
        with self._lock:
            self._cancel_clock()
            state = self._state
            if state is not None and state.phase in CLOCKED_PHASES:
                self._replace(state.evolve(phase=GamePhase.WAITING))

    def _require_state(self) -> GameState:
        if self._state is None:
            raise SessionError("no game in progress")
        return self._state

    def _replace(self, state: GameState) -> GameState:
        self._state = state
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception as exc:
                _logger.error(f"[SESSION] Observer failed: {exc}")
        return state

    def _sync_clock(self, previous: GameState, current: GameState) -> None:
        if current.phase == previous.phase:
            return
        if current.phase == GamePhase.COUNTDOWN:
            self._clock_run = self._clock.start(self._settings.countdown_seconds)
        elif current.phase == GamePhase.TIMER:
            self._clock_run = self._clock.start(current.timer_duration)
        elif previous.phase in CLOCKED_PHASES:
            self._cancel_clock()

    def _cancel_clock(self) -> None:
        self._clock_run = None
        self._clock.cancel()

    def _finish(self, state: GameState) -> None:
        self._cancel_clock()
        winner = state.winner.name if state.winner else None
        _logger.info(f"[SESSION] Game over, winner={winner}")
        if self._on_game_end is None:
            return
        try:
            self._on_game_end(GameSummary.from_state(state))
        except Exception as exc:
            _logger.error(f"[SESSION] Game-end handler failed: {exc}")

    def _on_clock_elapsed(self, run_id: int) -> None:
        with self._lock:
            # An expiry that waited on the lock while the run was replaced is stale.
            if run_id != self._clock_run:
                _logger.debug(f"[SESSION] Dropping stale expiry of run {run_id}")
                return
            self._clock_run = None
            state = self._state
            if state is None:
                return
            if state.phase == GamePhase.COUNTDOWN:
                self.dispatch(actions.countdown_end())
            elif state.phase == GamePhase.TIMER:
                self.dispatch(actions.timer_end())

    def snapshot(self) -> Mapping[str, Any]:
        """State payload plus the clock's displayed value."""
        with self._lock:
            state = self._require_state()
            payload = state.to_payload()
            payload["timeLeft"] = self._clock.remaining
            return payload
