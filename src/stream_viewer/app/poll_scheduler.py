"""Cancelable fixed-interval live refresh.

// [LAW:single-enforcer] PollScheduler is the only owner of the timer handle;
//   it is stopped synchronously, never left to garbage collection.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from stream_viewer.app.protocols import TimerFactory, TimerHandle
from stream_viewer.app.session_state import PollState, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 5000


class PollScheduler:
    """Two-state machine: IDLE <-> POLLING(interval_ms).

    While polling, tick() is invoked on a fixed schedule, not adapted to
    how long the previous tick's request took. Overlapping ticks are fine
    because the refresh they trigger is idempotent.
    """

    def __init__(
        self,
        timer_factory: TimerFactory,
        tick: Callable[[], None],
        store: SessionStore,
        interval_ms: int = DEFAULT_INTERVAL_MS,
    ):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._timer_factory = timer_factory
        self._tick = tick
        self._store = store
        self._interval_ms = interval_ms
        self._handle: TimerHandle | None = None
        self._armed = 0
        self._store.update(interval_ms=interval_ms, poll_state=PollState.IDLE)

    @property
    def state(self) -> PollState:
        return PollState.POLLING if self._handle is not None else PollState.IDLE

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def start(self) -> None:
        """Arm a fresh timer; any existing one is torn down first."""
        self.stop()
        self._armed += 1
        armed = self._armed
        self._handle = self._timer_factory(self._interval_ms / 1000.0, lambda: self._fire(armed))
        self._store.update(poll_state=PollState.POLLING)
        logger.debug("polling every %dms", self._interval_ms)

    def stop(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        handle.stop()
        self._store.update(poll_state=PollState.IDLE)
        logger.debug("polling stopped")

    def _fire(self, armed: int) -> None:
        # A tick from a timer that has since been replaced or stopped is ignored.
        if self._handle is None or armed != self._armed:
            return
        self._tick()
