"""In-process Textual tests: key dispatch, stream selection and panel rendering."""

import pytest

from stream_viewer.app.session_state import PollState
from stream_viewer.app.settings_store import ViewerSettings
from stream_viewer.core.errors import NetworkError
from stream_viewer.core.model import Window
from stream_viewer.tui.input_modes import InputMode
from stream_viewer.tui.widgets import MessageDetail, OffsetInput, StreamTree
from tests.fakes import ORDERS, PAYMENTS, FakeStreamApi, FakeTimerFactory, make_bounds
from tests.harness import (
    press_and_settle,
    press_sequence,
    run_app,
    table_offsets,
    type_and_submit,
    widget_text,
)

pytestmark = pytest.mark.textual

SETTINGS = ViewerSettings(page_size=25)


def _two_streams() -> FakeStreamApi:
    return FakeStreamApi(bounds={ORDERS: make_bounds(1000, 1099), PAYMENTS: make_bounds(0, 49)})


def _stream_leaf(tree: StreamTree, ref):
    stack = [tree.root]
    while stack:
        node = stack.pop()
        if node.data == ref:
            return node
        stack.extend(node.children)
    return None


async def test_startup_lists_streams_without_selection():
    async with run_app(api=_two_streams(), settings=SETTINGS) as (pilot, app):
        tree = app.query_one(StreamTree)
        assert _stream_leaf(tree, ORDERS) is not None
        assert _stream_leaf(tree, PAYMENTS) is not None
        assert "No stream selected" in widget_text(app, "#stats-panel")
        assert table_offsets(app) == []


async def test_initial_stream_loads_first_page():
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS) as (pilot, app):
        assert app.browser.state.window == Window(1000, 25)
        assert table_offsets(app) == list(range(1000, 1025))
        assert "range: 1,000–1,099 (100 messages)" in widget_text(app, "#nav-bar")
        assert app.query_one(MessageDetail).message.offset == 1000


async def test_selecting_tree_leaf_switches_stream():
    timers = FakeTimerFactory()
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS, timers=timers) as (pilot, app):
        tree = app.query_one(StreamTree)
        tree.select_node(_stream_leaf(tree, PAYMENTS))
        await pilot.pause()

        assert app.browser.state.stream == PAYMENTS
        assert table_offsets(app) == list(range(0, 25))
        assert timers.timers[0].stopped
        assert len(timers.active) == 1
        assert "local///payments" in widget_text(app, "#stats-panel")


async def test_navigation_keys():
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS) as (pilot, app):
        await press_and_settle(pilot, "G")
        assert app.browser.state.window == Window(1075, 25)
        assert table_offsets(app)[0] == 1075

        await press_and_settle(pilot, "l")
        assert app.browser.state.window == Window(1075, 25)

        await press_and_settle(pilot, "h")
        assert app.browser.state.window == Window(1050, 25)

        await press_and_settle(pilot, "g")
        assert app.browser.state.window == Window(1000, 25)
        assert table_offsets(app)[0] == 1000


async def test_page_size_keys():
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS) as (pilot, app):
        await press_and_settle(pilot, "plus")
        assert app.browser.state.window == Window(1000, 50)
        assert len(table_offsets(app)) == 50

        await press_sequence(pilot, ["minus", "minus"])
        assert app.browser.state.page_size == 10


async def test_jump_to_offset_via_input():
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS) as (pilot, app):
        await press_and_settle(pilot, "o")
        box = app.query_one(OffsetInput)
        assert box.display
        assert app.input_mode is InputMode.OFFSET_EDIT

        await type_and_submit(pilot, "1060")
        assert app.browser.state.window == Window(1060, 25)
        assert not box.display
        assert app.input_mode is InputMode.NORMAL


async def test_invalid_offset_keeps_input_open():
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS) as (pilot, app):
        await press_and_settle(pilot, "o")
        await type_and_submit(pilot, "abc")
        assert app.browser.state.window == Window(1000, 25)
        assert app.query_one(OffsetInput).display

        await press_and_settle(pilot, "escape")
        assert not app.query_one(OffsetInput).display


async def test_printable_keys_in_input_do_not_navigate():
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS) as (pilot, app):
        await press_and_settle(pilot, "o")
        await press_sequence(pilot, ["G", "q"])
        assert app.browser.state.window == Window(1000, 25)
        assert app.query_one(OffsetInput).value == "Gq"


async def test_live_toggle_key():
    timers = FakeTimerFactory()
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS, timers=timers) as (pilot, app):
        assert app.browser.state.poll_state is PollState.POLLING
        await press_and_settle(pilot, "a")
        assert app.browser.state.poll_state is PollState.IDLE
        assert timers.active == []
        assert "paused" in widget_text(app, "#stats-panel")


async def test_live_tick_updates_range_without_moving_window():
    api = _two_streams()
    timers = FakeTimerFactory()
    async with run_app(api=api, settings=SETTINGS, initial_stream=ORDERS, timers=timers) as (pilot, app):
        api.bounds[ORDERS] = make_bounds(1000, 1199)
        timers.tick()
        await pilot.pause()
        assert "(200 messages)" in widget_text(app, "#nav-bar")
        assert app.browser.state.window == Window(1000, 25)


async def test_page_failure_then_retry_key():
    api = _two_streams()
    async with run_app(api=api, settings=SETTINGS, initial_stream=ORDERS) as (pilot, app):
        api.messages_error = NetworkError("timed out")
        await press_and_settle(pilot, "l")
        assert "timed out" in widget_text(app, "#nav-bar")
        assert table_offsets(app) == []

        api.messages_error = None
        await press_and_settle(pilot, "r")
        assert table_offsets(app)[0] == 1025


async def test_stream_list_failure_shown_in_tree():
    api = _two_streams()
    api.vhosts = None

    def failing_vhosts():
        raise NetworkError("cannot reach http://localhost:8080")

    api.list_vhosts = failing_vhosts
    async with run_app(api=api, settings=SETTINGS) as (pilot, app):
        tree = app.query_one(StreamTree)
        labels = [str(node.label) for node in tree.root.children]
        assert any("cannot reach" in label for label in labels)


async def test_unmount_closes_browser():
    timers = FakeTimerFactory()
    async with run_app(api=_two_streams(), settings=SETTINGS, initial_stream=ORDERS, timers=timers) as (pilot, app):
        assert len(timers.active) == 1
    assert timers.active == []


async def test_unhandled_exception_is_kept_for_exit_report():
    async with run_app(api=_two_streams(), settings=SETTINGS) as (pilot, app):
        app._handle_exception(RuntimeError("boom"))
        await pilot.pause()
        assert app.is_running
        assert app._error_log[0] == "EXCEPTION: boom"
        assert "RuntimeError: boom" in app._error_log[1]
