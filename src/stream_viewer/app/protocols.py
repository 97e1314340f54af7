"""Protocol definitions for the seams of the navigation core.

The core never performs I/O or owns a clock itself: requests go through a
RequestRunner, periodic work through a TimerFactory. The TUI supplies
Textual-backed implementations; tests supply manual ones.
"""

from collections.abc import Callable
from typing import Protocol

from stream_viewer.core.errors import StreamViewerError
from stream_viewer.core.model import Message, StreamBounds, StreamRef

Completion = Callable[[object, StreamViewerError | None], None]


class StreamApi(Protocol):
    """The two collaborator reads the core depends on."""

    def get_stream_bounds(self, ref: StreamRef) -> StreamBounds: ...

    def get_messages(self, ref: StreamRef, offset: int, limit: int) -> list[Message]: ...


class RequestRunner(Protocol):
    """Executes a blocking call without blocking the event loop.

    on_done(result, error) must be invoked on the event loop, exactly once.
    StreamViewerError is delivered as error. Anything else is a bug: the
    inline runner lets it propagate, the Textual runner logs the traceback
    and delivers a NetworkError so no fetch stays loading forever.
    """

    def submit(self, call: Callable[[], object], on_done: Completion) -> None: ...


class TimerHandle(Protocol):
    def stop(self) -> None: ...


class TimerFactory(Protocol):
    """Arms a repeating timer firing callback every interval_s seconds."""

    def __call__(self, interval_s: float, callback: Callable[[], None]) -> TimerHandle: ...
