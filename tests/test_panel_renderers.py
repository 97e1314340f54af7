"""Tests for the pure panel renderers."""

from dataclasses import replace
from datetime import datetime, timezone

from stream_viewer.app.message_page import MessagePage
from stream_viewer.app.session_state import PollState, SessionState
from stream_viewer.core.errors import NetworkError, NotFound
from stream_viewer.core.model import Message, Window
from stream_viewer.core.properties import PropertyBag
from stream_viewer.tui import panel_renderers
from tests.fakes import EMPTY_BOUNDS, ORDERS, make_bounds, make_message

LOADED = SessionState(
    stream=ORDERS,
    bounds=make_bounds(1000, 1099, size_bytes=1536),
    window=Window(1025, 25),
    page_size=25,
    poll_state=PollState.POLLING,
    interval_ms=5000,
)


class TestStatsPanel:
    def test_no_stream(self):
        text = panel_renderers.render_stats_panel(SessionState()).plain
        assert "No stream selected" in text

    def test_loaded_stream(self):
        text = panel_renderers.render_stats_panel(LOADED).plain
        assert "local///orders" in text
        assert "Messages: 100" in text
        assert "Size: 1.5 KB" in text
        assert "First: 1,000 | Last: 1,099" in text
        assert "live (5s)" in text

    def test_paused_and_unknown_bounds(self):
        state = replace(LOADED, bounds=None, poll_state=PollState.IDLE)
        text = panel_renderers.render_stats_panel(state).plain
        assert "Messages: --" in text
        assert "paused" in text

    def test_bounds_error_shown_with_retry_hint(self):
        state = replace(LOADED, bounds_error=NetworkError("broker unavailable"))
        text = panel_renderers.render_stats_panel(state).plain
        assert "broker unavailable" in text
        assert "R to retry" in text


class TestNavBar:
    def test_range_and_window(self):
        text = panel_renderers.render_nav_bar(LOADED).plain
        assert "range: 1,000–1,099 (100 messages)" in text
        assert "window: 1,025–1,049" in text
        assert "page size: 25" in text

    def test_loading(self):
        assert "loading" in panel_renderers.render_nav_bar(replace(LOADED, page_loading=True)).plain

    def test_page_error_with_retry_hint(self):
        state = replace(LOADED, page_error=NetworkError("timed out"))
        text = panel_renderers.render_nav_bar(state).plain
        assert "timed out" in text
        assert "r to retry" in text

    def test_shown_count(self):
        page = MessagePage(ORDERS, Window(1025, 25), tuple(make_message(n) for n in range(1025, 1050)))
        assert "25 shown" in panel_renderers.render_nav_bar(replace(LOADED, page=page)).plain

    def test_empty_stream_disables_navigation(self):
        state = replace(LOADED, bounds=EMPTY_BOUNDS)
        text = panel_renderers.render_nav_bar(state).plain
        assert "range: no messages" in text
        assert "navigation unavailable" in text


def test_message_row_falls_back_to_subject():
    message = Message(
        offset=1200,
        timestamp=datetime(2024, 5, 1, 12, 0, 0, 250000, tzinfo=timezone.utc),
        properties=PropertyBag.from_wire({"subject": "orders.paid"}),
    )
    assert panel_renderers.message_row(message) == (
        "1,200",
        "2024-05-01 12:00:00.250+00:00",
        "-",
        "orders.paid",
    )


class TestMessageDetail:
    def test_sections_and_json_payload(self):
        text = panel_renderers.render_message_detail(make_message(1042)).plain
        assert "Offset 1,042" in text
        assert "Properties" in text
        assert "message_id:" in text
        assert "Application Properties" in text
        assert "tenant:" in text
        assert "Payload (JSON)" in text
        assert '"n": 1042' in text
        # Empty sections are not rendered.
        assert "Footer" not in text

    def test_binary_payload(self):
        message = Message(offset=1, timestamp=datetime.now(timezone.utc), data=b"\x00\xff")
        text = panel_renderers.render_message_detail(message).plain
        assert "Payload (binary)" in text
        assert "<binary data: 2 bytes>" in text
        assert "No properties" in text

    def test_nested_values_rendered_inline(self):
        message = Message(
            offset=1,
            timestamp=datetime.now(timezone.utc),
            properties=PropertyBag.from_wire({
                "message_annotations": {"x-opt": {"a": [1, None, True]}},
            }),
        )
        text = panel_renderers.render_message_detail(message).plain
        assert "x-opt: {a: [1, null, true]}" in text


def test_empty_page_placeholders():
    assert "Select a stream" in panel_renderers.render_empty_page(SessionState()).plain
    assert "No messages" in panel_renderers.render_empty_page(LOADED).plain
    errored = replace(LOADED, page_error=NotFound("Connection not found"))
    assert "Connection not found" in panel_renderers.render_empty_page(errored).plain


def test_key_hints_list_every_binding_group():
    text = panel_renderers.render_key_hints().plain
    for keys in ("g/G", "h/l", "o", "+/-", "a", "q"):
        assert keys in text
