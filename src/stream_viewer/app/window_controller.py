"""Offset window navigation clamped against the latest known bounds.

// [LAW:single-enforcer] Only WindowController writes window/page_size.
// [LAW:dataflow-not-control-flow] Each command computes a candidate Window; _apply
//   is the single place that decides whether it replaces the current one.

Every operation returns True when the window changed (and a fetch was
triggered) and False when it was a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from stream_viewer.app.session_state import SessionStore
from stream_viewer.core.model import (
    PAGE_SIZES,
    StreamBounds,
    Window,
    validate_offset,
    validate_page_size,
)

logger = logging.getLogger(__name__)


class WindowController:
    def __init__(self, store: SessionStore):
        self._store = store
        self.on_window_changed: Callable[[Window], None] | None = None

    # ─── Derived state ─────────────────────────────────────────────────

    @property
    def window(self) -> Window | None:
        return self._store.state.window

    @property
    def page_size(self) -> int:
        return self._store.state.page_size

    def _navigable_bounds(self) -> StreamBounds | None:
        """Latest bounds if they allow navigation; None when unknown or empty."""
        bounds = self._store.state.bounds
        if bounds is None or bounds.is_empty:
            return None
        return bounds

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def reset(self) -> None:
        """Unseed the window for a new stream; the page size is kept."""
        self._store.update(window=None)

    def seed(self, first_offset: int) -> bool:
        """Place the initial window at the stream's first offset.

        Only an unseeded window is seeded: a refresh must never move the
        reading position once the operator has one.
        """
        if self.window is not None:
            return False
        return self._apply(Window(max(0, first_offset), self.page_size))

    # ─── Navigation ────────────────────────────────────────────────────

    def jump_to_first(self) -> bool:
        bounds = self._navigable_bounds()
        if bounds is None:
            return False
        return self._apply(Window(bounds.first_offset, self.page_size))

    def jump_to_last(self) -> bool:
        bounds = self._navigable_bounds()
        if bounds is None:
            return False
        start = max(bounds.first_offset, bounds.last_offset - self.page_size + 1)
        return self._apply(Window(start, self.page_size))

    def previous(self) -> bool:
        current = self.window
        if current is None:
            return False
        bounds = self._store.state.bounds
        if bounds is not None and bounds.is_empty:
            return False
        floor = bounds.first_offset if bounds is not None else 0
        start = max(floor, current.start_offset - current.page_size)
        return self._apply(Window(start, current.page_size))

    def next(self) -> bool:
        current = self.window
        if current is None:
            return False
        bounds = self._store.state.bounds
        if bounds is not None and bounds.is_empty:
            return False
        start = current.start_offset + current.page_size
        # Conservative: a page starting past the known tail would be empty.
        if bounds is not None and start > bounds.last_offset:
            return False
        return self._apply(Window(start, current.page_size))

    def jump_to_offset(self, offset: int) -> bool:
        """Jump to any non-negative offset, unclamped against the tail.

        An offset past the tail is accepted and yields an empty page.
        Raises InvalidInput for negative or non-integer offsets.
        """
        validate_offset(offset)
        return self._apply(Window(offset, self.page_size))

    def set_page_size(self, size: int) -> bool:
        """Change the page size; the start offset is kept.

        Raises InvalidInput for sizes outside PAGE_SIZES.
        """
        validate_page_size(size)
        if size == self.page_size and (self.window is None or self.window.page_size == size):
            return False
        self._store.update(page_size=size)
        current = self.window
        if current is None:
            return False
        return self._apply(Window(current.start_offset, size))

    def cycle_page_size(self, step: int) -> bool:
        """Move to the next (step=1) or previous (step=-1) size in the menu, clamped."""
        index = PAGE_SIZES.index(self.page_size)
        target = PAGE_SIZES[max(0, min(len(PAGE_SIZES) - 1, index + step))]
        return self.set_page_size(target)

    # ─── Internals ─────────────────────────────────────────────────────

    def _apply(self, candidate: Window) -> bool:
        if candidate == self.window:
            return False
        self._store.update(window=candidate, page_size=candidate.page_size)
        logger.debug("window -> start=%d size=%d", candidate.start_offset, candidate.page_size)
        if self.on_window_changed is not None:
            self.on_window_changed(candidate)
        return True
