"""Main TUI application using Textual.

// [LAW:locality-or-seam] Thin shell around StreamBrowser: widgets render
//   SessionState snapshots, key actions call browser commands.
// [LAW:one-way-deps] Nothing under stream_viewer.app imports from here.
"""

from __future__ import annotations

import logging
import traceback

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.widgets import DataTable, Header, Input, Tree

from stream_viewer.app.browser import StreamBrowser
from stream_viewer.app.protocols import RequestRunner, TimerFactory
from stream_viewer.app.session_state import SessionState
from stream_viewer.app.settings_store import ViewerSettings
from stream_viewer.core.errors import InvalidInput, StreamViewerError
from stream_viewer.core.model import StreamRef, parse_offset
from stream_viewer.io.api_client import StreamApiClient
from stream_viewer.tui.input_modes import MODE_KEYMAP, InputMode
from stream_viewer.tui.scheduling import WorkerRunner, interval_timer
from stream_viewer.tui.widgets import (
    KeyHints,
    MessageDetail,
    MessageTable,
    NavBar,
    OffsetInput,
    StatsPanel,
    StreamTree,
)

logger = logging.getLogger(__name__)


class StreamViewerApp(App):
    """TUI application for stream-viewer."""

    TITLE = "stream-viewer"

    CSS = """
    #body {
        height: 1fr;
    }
    #stream-tree {
        width: 36;
        border-right: solid $primary;
    }
    #stats-panel, #nav-bar {
        height: auto;
        padding: 0 1;
    }
    #offset-input {
        display: none;
    }
    #message-table {
        height: 1fr;
    }
    #detail-scroll {
        height: 1fr;
        border-top: solid $primary;
    }
    #message-detail {
        padding: 0 1;
    }
    #key-hints {
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    def __init__(
        self,
        client: StreamApiClient,
        settings: ViewerSettings | None = None,
        initial_stream: StreamRef | None = None,
        runner: RequestRunner | None = None,
        timer_factory: TimerFactory | None = None,
    ):
        super().__init__()
        settings = settings or ViewerSettings()
        self._client = client
        self._settings = settings
        self._initial_stream = initial_stream
        self._runner = runner if runner is not None else WorkerRunner(self)
        self.browser = StreamBrowser(
            client,
            self._runner,
            timer_factory if timer_factory is not None else interval_timer(self),
            page_size=settings.page_size,
            interval_ms=settings.poll_interval_ms,
            live=settings.live_refresh,
        )
        self._unsubscribe = None
        self._streams_loading = False
        self._notified_error: str | None = None
        self._error_log: list[str] = []

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="body"):
            yield StreamTree(id="stream-tree")
            with Vertical(id="main"):
                yield StatsPanel(id="stats-panel")
                yield NavBar(id="nav-bar")
                yield OffsetInput(id="offset-input")
                yield MessageTable(id="message-table")
                with VerticalScroll(id="detail-scroll"):
                    yield MessageDetail(id="message-detail")
        yield KeyHints(id="key-hints")

    def on_mount(self) -> None:
        self.sub_title = self._settings.api_url
        self._unsubscribe = self.browser.store.subscribe(self._on_state)
        self._on_state(self.browser.state)
        self.action_reload_streams()
        if self._initial_stream is not None:
            self.select_stream(self._initial_stream)

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.browser.close()
        logger.info("stream-viewer TUI shutting down")

    def _handle_exception(self, error: Exception) -> None:
        """// [LAW:single-enforcer] Top-level exception handler - keeps the console running.

        Logs unhandled exceptions with a normal Python traceback and shows a
        notification instead of tearing down the terminal.
        """
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self._error_log.append(f"EXCEPTION: {error}")
        self._error_log.append(tb)
        logger.error("Unhandled exception: %s\n%s", error, tb)
        self.notify(f"{type(error).__name__}: {error}", severity="error", timeout=10)
        # DON'T call super() - keep running

    # ─── State → widgets ───────────────────────────────────────────────

    def _on_state(self, state: SessionState) -> None:
        """// [LAW:dataflow-not-control-flow] Every widget re-renders from the same snapshot."""
        try:
            stats = self.query_one(StatsPanel)
            nav = self.query_one(NavBar)
            table = self.query_one(MessageTable)
            detail = self.query_one(MessageDetail)
        except NoMatches:
            return  # not composed yet, or already torn down

        stats.refresh_from(state)
        nav.refresh_from(state)
        table.show_page(state.page)
        self._sync_detail(detail, state)

        # Repeated poll failures with the same text notify once.
        error = state.last_error
        text = error.message if error is not None else None
        if text is not None and text != self._notified_error:
            self.notify(text, title="Request failed", severity="error", timeout=6)
        self._notified_error = text

    def _sync_detail(self, detail: MessageDetail, state: SessionState) -> None:
        page = state.page
        if page is None or page.is_empty:
            detail.show_message(None, state)
            return
        current = detail.message
        if current is not None and page.find(current.offset) is current:
            return
        detail.show_message(page[0], state)

    # ─── Stream list ───────────────────────────────────────────────────

    def _on_streams_loaded(self, result, error: StreamViewerError | None) -> None:
        self._streams_loading = False
        try:
            tree = self.query_one(StreamTree)
        except NoMatches:
            return
        if error is not None:
            logger.warning("stream list failed: %s", error)
            tree.show_error(error)
            self.notify(error.message, title="Stream list unavailable", severity="error")
            return
        vhosts, connections = result
        count = tree.show_streams(vhosts, connections)
        logger.info("loaded %d streams", count)

    def select_stream(self, ref: StreamRef) -> None:
        if self.browser.select_stream(ref):
            self.sub_title = "{} | {}".format(self._settings.api_url, ref.label)

    # ─── Widget events ─────────────────────────────────────────────────

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        ref = event.node.data
        if isinstance(ref, StreamRef):
            self.select_stream(ref)
            self.query_one(MessageTable).focus()

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        table = self.query_one(MessageTable)
        message = table.message_at(event.row_key.value if event.row_key is not None else None)
        if message is not None:
            self.query_one(MessageDetail).show_message(message, self.browser.state)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if not isinstance(event.input, OffsetInput):
            return
        event.stop()
        try:
            self.browser.jump_to_offset(parse_offset(event.value))
        except InvalidInput as e:
            # Input stays open so the operator can correct it.
            self.notify(e.message, severity="warning")
            return
        self._close_jump()

    # ─── Key dispatch ──────────────────────────────────────────────────

    @property
    def input_mode(self) -> InputMode:
        if isinstance(self.focused, OffsetInput):
            return InputMode.OFFSET_EDIT
        return InputMode.NORMAL

    async def on_key(self, event) -> None:
        """// [LAW:single-enforcer] on_key is the sole key dispatcher.

        Keys the focused widget handles itself (tree/table cursor movement,
        text entry in the offset input) never reach this point.
        """
        keymap = MODE_KEYMAP.get(self.input_mode, MODE_KEYMAP[InputMode.NORMAL])
        action_name = keymap.get(event.key)
        if action_name:
            event.prevent_default()
            event.stop()
            await self.run_action(action_name)

    # ─── Actions ───────────────────────────────────────────────────────

    def action_first_page(self) -> None:
        self.browser.first()

    def action_last_page(self) -> None:
        self.browser.last()

    def action_previous_page(self) -> None:
        self.browser.previous()

    def action_next_page(self) -> None:
        self.browser.next()

    def action_page_size(self, step: int) -> None:
        self.browser.cycle_page_size(step)

    def action_start_jump(self) -> None:
        if self.browser.state.stream is None:
            self.notify("Select a stream first", severity="warning")
            return
        box = self.query_one(OffsetInput)
        box.value = ""
        box.display = True
        box.focus()

    def action_cancel_jump(self) -> None:
        self._close_jump()

    def _close_jump(self) -> None:
        box = self.query_one(OffsetInput)
        if not box.display:
            return
        box.display = False
        self.query_one(MessageTable).focus()

    def action_toggle_live(self) -> None:
        live = self.browser.toggle_live()
        self.notify("Live refresh on" if live else "Live refresh paused", timeout=2)

    def action_retry_page(self) -> None:
        self.browser.retry_page()

    def action_refresh_bounds(self) -> None:
        self.browser.refresh_bounds()

    def action_reload_streams(self) -> None:
        if self._streams_loading:
            return
        self._streams_loading = True
        client = self._client
        self._runner.submit(
            lambda: (client.list_vhosts(), client.list_connections()),
            self._on_streams_loaded,
        )
