"""Fetch cycle for the slice of messages inside the current window.

// [LAW:single-enforcer] Only MessagePageFetcher writes page/page_error/page_loading.
// [LAW:one-source-of-truth] The generation counter decides which response may land:
//   later-issued wins, regardless of response arrival order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from stream_viewer.app.protocols import RequestRunner, StreamApi
from stream_viewer.app.session_state import SessionStore
from stream_viewer.core.errors import StreamViewerError
from stream_viewer.core.model import Message, StreamRef, Window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessagePage(Sequence):
    """Ordered messages produced by one fetch for one (stream, window)."""

    stream: StreamRef
    window: Window
    messages: tuple[Message, ...] = ()

    def __getitem__(self, index):
        return self.messages[index]

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    @property
    def is_empty(self) -> bool:
        return not self.messages

    def find(self, offset: int) -> Message | None:
        for message in self.messages:
            if message.offset == offset:
                return message
        return None


class MessagePageFetcher:
    """Issues one fetch per window and discards superseded results.

    Logical cancellation only: the underlying request keeps running, its
    result is dropped on arrival if a newer fetch was issued since, or if
    the stream/window it was issued for is no longer current.
    """

    def __init__(self, api: StreamApi, runner: RequestRunner, store: SessionStore):
        self._api = api
        self._runner = runner
        self._store = store
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def reset(self) -> None:
        """Invalidate any in-flight fetch and drop the held page."""
        self._generation += 1
        self._store.update(page=None, page_error=None, page_loading=False)

    def fetch(self) -> bool:
        """Fetch the page for the current window. Returns False when there is none."""
        state = self._store.state
        ref, window = state.stream, state.window
        if ref is None or window is None:
            return False
        self._generation += 1
        generation = self._generation
        # The previous page belongs to another window: discard it now.
        self._store.update(page=None, page_error=None, page_loading=True)
        self._runner.submit(
            lambda: self._api.get_messages(ref, window.start_offset, window.page_size),
            lambda result, error: self._on_result(generation, ref, window, result, error),
        )
        return True

    def retry(self) -> bool:
        return self.fetch()

    def _is_current(self, generation: int, ref: StreamRef, window: Window) -> bool:
        state = self._store.state
        return generation == self._generation and state.stream == ref and state.window == window

    def _on_result(
        self,
        generation: int,
        ref: StreamRef,
        window: Window,
        result: object,
        error: StreamViewerError | None,
    ) -> None:
        if not self._is_current(generation, ref, window):
            logger.debug(
                "dropping stale page gen=%d start=%d for %s",
                generation,
                window.start_offset,
                ref.label,
            )
            return
        if error is not None:
            logger.warning(
                "message fetch failed for %s at offset %d: %s",
                ref.label,
                window.start_offset,
                error,
            )
            self._store.update(page_error=error, page_loading=False)
            return
        page = MessagePage(stream=ref, window=window, messages=tuple(result or ()))
        self._store.update(page=page, page_error=None, page_loading=False)
