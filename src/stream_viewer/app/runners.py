"""Synchronous RequestRunner for scripts and tests."""

from collections.abc import Callable

from stream_viewer.app.protocols import Completion
from stream_viewer.core.errors import StreamViewerError


class InlineRunner:
    """Runs each call immediately on the caller's thread."""

    def submit(self, call: Callable[[], object], on_done: Completion) -> None:
        try:
            result = call()
        except StreamViewerError as e:
            on_done(None, e)
            return
        on_done(result, None)
