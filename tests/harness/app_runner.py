"""App lifecycle management for Textual in-process tests.

Creates StreamViewerApp instances wired for testing and manages run_test() lifecycle.
State isolation: every call creates a fresh fake API, runner, timer factory and app.
Requests complete inline, so the app state is settled as soon as the pilot pauses.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from textual.pilot import Pilot

from stream_viewer.app.runners import InlineRunner
from stream_viewer.app.settings_store import ViewerSettings
from stream_viewer.core.model import StreamRef
from stream_viewer.tui.app import StreamViewerApp
from tests.fakes import FakeStreamApi, FakeTimerFactory


@asynccontextmanager
async def run_app(
    *,
    api: FakeStreamApi | None = None,
    settings: ViewerSettings | None = None,
    initial_stream: StreamRef | None = None,
    timers: FakeTimerFactory | None = None,
    size: tuple[int, int] = (140, 45),
) -> AsyncIterator[tuple[Pilot, StreamViewerApp]]:
    """Create and run a StreamViewerApp in test mode.

    Yields (pilot, app). The live-refresh timer is a FakeTimerFactory:
    ticks only happen when a test fires them.
    """
    # [LAW:no-shared-mutable-globals] Fresh state for every test
    app = StreamViewerApp(
        api if api is not None else FakeStreamApi(),
        settings or ViewerSettings(),
        initial_stream=initial_stream,
        runner=InlineRunner(),
        timer_factory=timers if timers is not None else FakeTimerFactory(),
    )

    async with app.run_test(size=size) as pilot:
        # Ensure on_mount processing (stream list, initial stream) has completed
        await pilot.pause()
        yield pilot, app
