"""Textual-backed RequestRunner and TimerFactory.

Blocking collaborator calls run in thread workers; completions are
marshalled back onto the app's event loop with call_from_thread, so every
state mutation in the core happens on that single loop.
"""

import logging
from collections.abc import Callable

from textual.app import App

from stream_viewer.app.protocols import Completion, TimerFactory, TimerHandle
from stream_viewer.core.errors import NetworkError, StreamViewerError

logger = logging.getLogger(__name__)


class WorkerRunner:
    """Runs each submitted call in a Textual thread worker."""

    def __init__(self, app: App):
        self._app = app

    def submit(self, call: Callable[[], object], on_done: Completion) -> None:
        def work() -> None:
            try:
                result = call()
            except StreamViewerError as e:
                self._deliver(on_done, None, e)
                return
            except Exception as e:
                # Keep the console alive; the failure is reported like any other.
                logger.exception("unexpected error in request worker")
                self._deliver(on_done, None, NetworkError(f"unexpected error: {e}"))
                return
            self._deliver(on_done, result, None)

        self._app.run_worker(work, thread=True, exclusive=False, group="requests")

    def _deliver(self, on_done: Completion, result: object, error: StreamViewerError | None) -> None:
        if not self._app.is_running:
            logger.debug("app stopped; dropping request completion")
            return
        try:
            self._app.call_from_thread(on_done, result, error)
        except RuntimeError as e:
            # The app shut down between the check above and the hand-off.
            logger.debug("dropping request completion during shutdown: %s", e)


def interval_timer(app: App) -> TimerFactory:
    """TimerFactory arming App.set_interval timers."""

    def factory(interval_s: float, callback: Callable[[], None]) -> TimerHandle:
        return app.set_interval(interval_s, callback, name="live-refresh")

    return factory
