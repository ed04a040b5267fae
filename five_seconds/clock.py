"""Countdown clock for the countdown and answer-timer phases.

The clock owns wall-clock mechanics so the state machine does not have to:
once started with a duration it ticks once per second and then fires a
single ``on_elapsed(run_id)``. A cancelled or already-fired run never fires
again, and the run id lets the owner drop an expiry that raced a restart.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

TickCallback = Callable[[int], None]
ElapsedCallback = Callable[[int], None]


@dataclass
class ClockConfig:
    """Tick interval, in seconds, between displayed countdown values."""

    tick_interval: float = 1.0


class CountdownClock:
    """Cancellable one-shot countdown.

    Thread-safe: ticks run on ``threading.Timer`` threads, and a run id guards
    against late ticks from a run that has been cancelled or restarted.
    """

    def __init__(
        self,
        on_elapsed: ElapsedCallback,
        on_tick: Optional[TickCallback] = None,
        config: Optional[ClockConfig] = None,
        logger: Optional[Any] = None,
    ) -> None:
        """Initialize the clock.

        Args:
            on_elapsed: Called once with the run id when a run reaches zero
            on_tick: Called with the remaining seconds after every tick
            config: Tick interval configuration
            logger: Optional logger for debug output
        """
        self._on_elapsed = on_elapsed
        self._on_tick = on_tick
        self._config = config or ClockConfig()
        self._logger = logger

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._run_id = 0
        self._remaining = 0
        self._fired = True

    @property
    def remaining(self) -> int:
        with self._lock:
            return self._remaining

    @property
    def running(self) -> bool:
        with self._lock:
            return not self._fired and self._timer is not None

    def start(self, duration: int) -> int:
        """Start a new run, cancelling any run in progress.

        Returns:
            Id of the new run
        """
        with self._lock:
            self._cancel_locked()
            self._run_id += 1
            self._remaining = max(0, int(duration))
            self._fired = False
            run_id = self._run_id
            if self._remaining > 0:
                self._schedule_locked(self._tick, self._config.tick_interval, run_id)
            else:
                self._schedule_locked(self._fire, 0, run_id)

        if self._logger:
            self._logger.debug(f"[CLOCK] Started run {run_id} for {duration}s")
        return run_id

    def cancel(self) -> bool:
        """Stop the current run without firing.

        Returns:
            True if a run was pending
        """
        with self._lock:
            pending = not self._fired
            self._cancel_locked()
            self._fired = True
        if pending and self._logger:
            self._logger.debug("[CLOCK] Cancelled")
        return pending

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_locked(self, function: Callable[[int], None], interval: float, run_id: int) -> None:
        timer = threading.Timer(
            interval,
            function,
            args=(run_id,),
        )
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self, run_id: int) -> None:
        with self._lock:
            if run_id != self._run_id or self._fired:
                return
            self._remaining = max(0, self._remaining - 1)
            remaining = self._remaining
            self._timer = None
            if remaining > 0:
                self._schedule_locked(self._tick, self._config.tick_interval, run_id)

        if self._on_tick is not None:
            try:
                self._on_tick(remaining)
            except Exception as e:
                if self._logger:
                    self._logger.error(f"[CLOCK] Error in tick callback: {e}")

        if remaining == 0:
            self._fire(run_id)

    def _fire(self, run_id: int) -> None:
        with self._lock:
            if run_id != self._run_id or self._fired:
                return
            self._fired = True
            self._timer = None

        if self._logger:
            self._logger.info(f"[CLOCK] Run {run_id} elapsed")
        try:
            self._on_elapsed(run_id)
        except Exception as e:
            if self._logger:
                self._logger.error(f"[CLOCK] Error in elapsed callback: {e}")
