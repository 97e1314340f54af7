"""Observable state record for one stream browsing session.

// [LAW:one-source-of-truth] The presentation layer reads only SessionState snapshots.
// [LAW:single-enforcer] Each field has exactly one writer:
//   stream/live_enabled -> StreamBrowser, bounds* -> BoundsTracker,
//   window/page_size -> WindowController, page* -> MessagePageFetcher,
//   poll_state/interval_ms -> PollScheduler.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from stream_viewer.core.errors import StreamViewerError
from stream_viewer.core.model import DEFAULT_PAGE_SIZE, StreamBounds, StreamRef, Window

logger = logging.getLogger(__name__)


class PollState(Enum):
    IDLE = "idle"
    POLLING = "polling"


@dataclass(frozen=True)
class SessionState:
    stream: StreamRef | None = None
    bounds: StreamBounds | None = None
    bounds_error: StreamViewerError | None = None
    bounds_loading: bool = False
    window: Window | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    page: object | None = None  # MessagePage; typed loosely to keep this module leaf-level
    page_error: StreamViewerError | None = None
    page_loading: bool = False
    poll_state: PollState = PollState.IDLE
    live_enabled: bool = True
    interval_ms: int = 5000

    @property
    def last_error(self) -> StreamViewerError | None:
        return self.page_error or self.bounds_error

    @property
    def navigation_enabled(self) -> bool:
        return self.bounds is not None and not self.bounds.is_empty


Subscriber = Callable[[SessionState], None]


class SessionStore:
    """Holds the current SessionState and notifies subscribers on replacement.

    Mutation is sequenced through the UI event loop; no locking is needed.
    """

    def __init__(self, initial: SessionState | None = None):
        self._state = initial or SessionState()
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> SessionState:
        return self._state

    def update(self, **changes) -> SessionState:
        """Replace the snapshot with changed fields and notify subscribers."""
        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return self._state
        self._state = new_state
        for subscriber in list(self._subscribers):
            try:
                subscriber(new_state)
            except Exception:
                logger.exception("session subscriber %r failed", subscriber)
        return new_state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback; returns a disposer that unregisters it."""
        self._subscribers.append(callback)

        def dispose() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return dispose
