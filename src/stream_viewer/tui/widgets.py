"""Custom widgets for the TUI interface.

Widgets hold no navigation state of their own: they render what the app
hands them and report selections back as Textual messages.
"""

from __future__ import annotations

from rich.text import Text
from textual.widgets import DataTable, Input, Static, Tree

from stream_viewer.core.errors import StreamViewerError
from stream_viewer.core.model import Connection, Message, VHost
from stream_viewer.tui import panel_renderers


class StreamTree(Tree):
    """Connections -> virtual hosts -> streams. Leaf data is the StreamRef."""

    def __init__(self, **kwargs):
        super().__init__("Streams", **kwargs)
        self.show_root = False
        self.guide_depth = 2

    def show_streams(self, vhosts: list[VHost], connections: list[Connection]) -> int:
        """Rebuild the tree; returns the number of streams shown."""
        self.clear()
        names = {conn.id: conn.name for conn in connections}
        by_connection: dict[str, list[VHost]] = {}
        for vhost in vhosts:
            by_connection.setdefault(vhost.connection_id, []).append(vhost)

        count = 0
        for conn_id in sorted(by_connection, key=lambda c: names.get(c, c)):
            conn_node = self.root.add(names.get(conn_id, conn_id) or "(default)", expand=True)
            for vhost in sorted(by_connection[conn_id], key=lambda v: v.name):
                vhost_node = conn_node.add("vhost {}".format(vhost.name), expand=True)
                if not vhost.streams:
                    vhost_node.add_leaf("(no streams)")
                for ref in vhost.streams:
                    vhost_node.add_leaf(ref.name, data=ref)
                    count += 1
        if count == 0:
            self.root.add_leaf("No streams found")
        self.root.expand()
        return count

    def show_error(self, error: StreamViewerError) -> None:
        self.clear()
        self.root.add_leaf("Failed to load streams: {}".format(error.message))
        self.root.add_leaf("(s to retry)")
        self.root.expand()


class StatsPanel(Static):
    """Selected stream header: counts, size, live indicator, bounds errors."""

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)
        self.rendered = Text()

    def refresh_from(self, state) -> None:
        self.rendered = panel_renderers.render_stats_panel(state)
        self.update(self.rendered)


class NavBar(Static):
    """Range readout and current window."""

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)
        self.rendered = Text()

    def refresh_from(self, state) -> None:
        self.rendered = panel_renderers.render_nav_bar(state)
        self.update(self.rendered)


class OffsetInput(Input):
    """Jump-to-offset prompt; hidden until requested."""

    def __init__(self, **kwargs):
        super().__init__(placeholder="offset (enter to jump, esc to cancel)", **kwargs)


class MessageTable(DataTable):
    """One row per message of the current page, keyed by offset."""

    COLUMNS = ("Offset", "Timestamp", "Message ID", "Routing Key")

    def __init__(self, **kwargs):
        super().__init__(cursor_type="row", zebra_stripes=True, **kwargs)
        self._page = None

    def on_mount(self) -> None:
        self._ensure_columns()

    def _ensure_columns(self) -> None:
        if not self.columns:
            self.add_columns(*self.COLUMNS)

    def show_page(self, page) -> bool:
        """Replace the rows with page's messages. Returns False if page is already shown."""
        if page is self._page:
            return False
        self._page = page
        self._ensure_columns()
        self.clear()
        for message in page or ():
            self.add_row(*panel_renderers.message_row(message), key=str(message.offset))
        return True

    def message_at(self, row_key: str | None) -> Message | None:
        if self._page is None or row_key is None:
            return None
        return self._page.find(int(row_key))


class MessageDetail(Static):
    """Properties and payload of the highlighted message."""

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)
        self.message: Message | None = None
        self.rendered = Text()

    def show_message(self, message: Message | None, state) -> None:
        self.message = message
        if message is None:
            self.rendered = panel_renderers.render_empty_page(state)
        else:
            self.rendered = panel_renderers.render_message_detail(message)
        self.update(self.rendered)


class KeyHints(Static):
    def __init__(self, **kwargs):
        super().__init__(panel_renderers.render_key_hints(), **kwargs)
