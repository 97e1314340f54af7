"""StreamBrowser: the navigation and polling core behind the console.

// [LAW:locality-or-seam] Thin coordinator: owns one SessionStore and wires
//   BoundsTracker -> WindowController -> MessagePageFetcher, plus PollScheduler.
// [LAW:one-way-deps] No widget imports; the TUI subscribes to self.store.

Control flow:
    select_stream(ref)
      -> poll stopped, bounds/window/page reset
      -> one bounds refresh; its first success seeds the window
      -> every window change issues one page fetch
    live mode re-arms the poll for the new stream; ticks refresh bounds only.
"""

from __future__ import annotations

import logging

from stream_viewer.app.bounds_tracker import BoundsTracker
from stream_viewer.app.message_page import MessagePageFetcher
from stream_viewer.app.poll_scheduler import DEFAULT_INTERVAL_MS, PollScheduler
from stream_viewer.app.protocols import RequestRunner, StreamApi, TimerFactory
from stream_viewer.app.session_state import PollState, SessionState, SessionStore
from stream_viewer.app.window_controller import WindowController
from stream_viewer.core.model import DEFAULT_PAGE_SIZE, StreamRef, validate_page_size

logger = logging.getLogger(__name__)


class StreamBrowser:
    def __init__(
        self,
        api: StreamApi,
        runner: RequestRunner,
        timer_factory: TimerFactory,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        live: bool = True,
    ):
        validate_page_size(page_size)
        self.store = SessionStore(SessionState(page_size=page_size, live_enabled=live))

        self.bounds = BoundsTracker(api, runner, self.store)
        self.windows = WindowController(self.store)
        self.pages = MessagePageFetcher(api, runner, self.store)
        self.poll = PollScheduler(timer_factory, self.bounds.refresh, self.store, interval_ms)

        # [LAW:dataflow-not-control-flow] Wiring is data: each stage's output feeds the next.
        self.bounds.on_initialized = self.windows.seed
        self.windows.on_window_changed = lambda _window: self.pages.fetch()

        self._closed = False

    @property
    def state(self) -> SessionState:
        return self.store.state

    # ─── Stream selection ──────────────────────────────────────────────

    def select_stream(self, ref: StreamRef) -> bool:
        """Switch to ref, invalidating all derived state. Reselecting is a no-op."""
        if self._closed:
            return False
        if ref == self.state.stream:
            return False
        logger.info("selecting stream %s", ref.label)
        # Old timer is always torn down before anything for the new stream exists.
        self.poll.stop()
        self.pages.reset()
        self.windows.reset()
        self.bounds.reset(ref)
        self.store.update(stream=ref)
        self.bounds.refresh()
        if self.state.live_enabled:
            self.poll.start()
        return True

    # ─── Navigation (delegates; InvalidInput propagates to the caller) ──

    def first(self) -> bool:
        return self.windows.jump_to_first()

    def last(self) -> bool:
        return self.windows.jump_to_last()

    def previous(self) -> bool:
        return self.windows.previous()

    def next(self) -> bool:
        return self.windows.next()

    def jump_to_offset(self, offset: int) -> bool:
        if self.state.stream is None:
            return False
        return self.windows.jump_to_offset(offset)

    def set_page_size(self, size: int) -> bool:
        return self.windows.set_page_size(size)

    def cycle_page_size(self, step: int = 1) -> bool:
        return self.windows.cycle_page_size(step)

    # ─── Live mode ─────────────────────────────────────────────────────

    def set_live(self, enabled: bool) -> None:
        self.store.update(live_enabled=bool(enabled))
        if enabled and self.state.stream is not None and not self._closed:
            if self.poll.state is PollState.IDLE:
                self.poll.start()
        else:
            self.poll.stop()

    def toggle_live(self) -> bool:
        self.set_live(not self.state.live_enabled)
        return self.state.live_enabled

    # ─── Manual retry ──────────────────────────────────────────────────

    def refresh_bounds(self) -> None:
        self.bounds.refresh()

    def retry_page(self) -> bool:
        return self.pages.retry()

    # ─── Teardown ──────────────────────────────────────────────────────

    def close(self) -> None:
        """Stop polling and discard everything still in flight."""
        if self._closed:
            return
        self._closed = True
        self.poll.stop()
        self.pages.reset()
        self.bounds.reset(None)
        logger.debug("stream browser closed")
