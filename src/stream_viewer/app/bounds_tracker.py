"""Authoritative offset bounds for the selected stream.

// [LAW:single-enforcer] Only BoundsTracker writes bounds/bounds_error/bounds_loading.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from stream_viewer.app.protocols import RequestRunner, StreamApi
from stream_viewer.app.session_state import SessionStore
from stream_viewer.core.errors import StreamViewerError
from stream_viewer.core.model import StreamRef

logger = logging.getLogger(__name__)


class BoundsTracker:
    """Refreshes StreamBounds snapshots; never touches the window or page.

    Every refresh yields a new immutable snapshot that replaces the previous
    one. Results are tagged with the stream epoch they were issued under and
    with a request sequence number: results for a previous stream, or older
    than the snapshot already held, are dropped.
    """

    def __init__(self, api: StreamApi, runner: RequestRunner, store: SessionStore):
        self._api = api
        self._runner = runner
        self._store = store
        self._ref: StreamRef | None = None
        self._epoch = 0
        self._issued = 0
        self._applied = 0
        self._in_flight = 0
        self._initialized = False

        # Fired once per stream with first_offset, on the first successful refresh.
        self.on_initialized: Callable[[int], None] | None = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def reset(self, ref: StreamRef | None) -> None:
        """Forget everything about the previous stream."""
        self._ref = ref
        self._epoch += 1
        self._issued = 0
        self._applied = 0
        self._in_flight = 0
        self._initialized = False
        self._store.update(bounds=None, bounds_error=None, bounds_loading=False)

    def refresh(self) -> None:
        """Issue one bounds request; idempotent and safe to overlap."""
        ref = self._ref
        if ref is None:
            return
        epoch = self._epoch
        self._issued += 1
        seq = self._issued
        self._in_flight += 1
        self._store.update(bounds_loading=True)
        self._runner.submit(
            lambda: self._api.get_stream_bounds(ref),
            lambda result, error: self._on_result(epoch, seq, ref, result, error),
        )

    def _on_result(
        self,
        epoch: int,
        seq: int,
        ref: StreamRef,
        result: object,
        error: StreamViewerError | None,
    ) -> None:
        if epoch != self._epoch:
            logger.debug("dropping bounds for superseded stream %s", ref.label)
            return
        self._in_flight = max(0, self._in_flight - 1)
        loading = self._in_flight > 0

        if seq < self._applied:
            logger.debug("dropping out-of-order bounds #%d for %s", seq, ref.label)
            self._store.update(bounds_loading=loading)
            return

        if error is not None:
            logger.warning("bounds refresh failed for %s: %s", ref.label, error)
            self._store.update(bounds_error=error, bounds_loading=loading)
            return

        self._applied = seq
        self._store.update(bounds=result, bounds_error=None, bounds_loading=loading)

        if not self._initialized:
            self._initialized = True
            logger.debug("bounds initialized for %s at offset %d", ref.label, result.first_offset)
            if self.on_initialized is not None:
                self.on_initialized(result.first_offset)
