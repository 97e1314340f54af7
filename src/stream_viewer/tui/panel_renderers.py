"""Panel rendering logic - pure functions for building display text.

Every function here takes plain values (a SessionState, a Message) and
returns rich Text or strings. Widgets only call these and push the result.
"""

from __future__ import annotations

from collections.abc import Mapping

from rich.text import Text

from stream_viewer.app.session_state import PollState, SessionState
from stream_viewer.core.model import Message
from stream_viewer.core.payload import format_bytes, format_count, format_payload, format_range
from stream_viewer.core.properties import SECTION_TITLES
from stream_viewer.tui.input_modes import KEY_HINTS

ERROR_STYLE = "bold red"
WARN_STYLE = "yellow"
ACCENT_STYLE = "bold cyan"

_PAYLOAD_TITLES = {
    "empty": "Payload (empty)",
    "json": "Payload (JSON)",
    "text": "Payload (text)",
    "binary": "Payload (binary)",
}


def _fmt_interval(interval_ms: int) -> str:
    """Format a poll interval: 500ms, 5s, 2.5s."""
    if interval_ms < 1000:
        return "{}ms".format(interval_ms)
    return "{:g}s".format(interval_ms / 1000)


def render_stats_panel(state: SessionState) -> Text:
    """Render the stream header: name, counts, size and live indicator.

    // [LAW:dataflow-not-control-flow] All fields always rendered; unknown values shown as "--".
    """
    result = Text()
    if state.stream is None:
        result.append("No stream selected", style="dim")
        result.append(" | pick one from the list on the left")
        return result

    result.append(state.stream.label, style=ACCENT_STYLE)

    bounds = state.bounds
    result.append(" | Messages: ")
    result.append(format_count(bounds.message_count) if bounds is not None else "--")
    result.append(" | Size: ")
    result.append(format_bytes(bounds.size_bytes) if bounds is not None else "--")
    if bounds is not None and not bounds.is_empty:
        result.append(" | First: {} | Last: {}".format(
            format_count(bounds.first_offset),
            format_count(bounds.last_offset),
        ))

    result.append(" | ")
    if state.poll_state is PollState.POLLING:
        result.append("● live", style="bold green")
        result.append(" ({})".format(_fmt_interval(state.interval_ms)))
    else:
        result.append("○ paused", style="dim")

    if state.bounds_loading:
        result.append(" | refreshing...", style="dim")
    if state.bounds_error is not None:
        result.append("\n")
        result.append("Stats: ", style=ERROR_STYLE)
        result.append(state.bounds_error.message)
        result.append(" (R to retry)", style="dim")
    return result


def render_nav_bar(state: SessionState) -> Text:
    """Render the range readout, the current window and the page status."""
    result = Text()
    result.append(format_range(state.bounds))

    window = state.window
    result.append(" | ")
    if window is None:
        result.append("window: --", style="dim")
    else:
        result.append("window: {}–{}".format(
            format_count(window.start_offset),
            format_count(window.end_offset),
        ))
    result.append(" | page size: {}".format(state.page_size))

    if state.page_loading:
        result.append(" | loading...", style="dim")
    elif state.page_error is not None:
        result.append(" | ")
        result.append(state.page_error.message, style=ERROR_STYLE)
        if state.page_error.retryable:
            result.append(" (r to retry)", style="dim")
    elif state.page is not None:
        result.append(" | {} shown".format(format_count(len(state.page))))

    if state.stream is not None and not state.navigation_enabled:
        result.append(" | navigation unavailable", style=WARN_STYLE)
    return result


def message_row(message: Message) -> tuple[str, str, str, str]:
    """Table cells for one message: offset, timestamp, message id, routing key."""
    props = message.properties
    return (
        format_count(message.offset),
        message.timestamp.isoformat(sep=" ", timespec="milliseconds"),
        props.message_id or "-",
        props.routing_key or "-",
    )


def render_empty_page(state: SessionState) -> Text:
    """Placeholder for the detail view when there is nothing to select."""
    if state.stream is None:
        return Text("Select a stream to browse its messages.", style="dim")
    if state.page_loading or state.window is None:
        return Text("Loading...", style="dim")
    if state.page_error is not None:
        return Text("Messages unavailable: {}".format(state.page_error.message), style=ERROR_STYLE)
    return Text("No messages at this offset.", style="dim")


def _format_value(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        return "{" + ", ".join("{}: {}".format(k, _format_value(v)) for k, v in value.items()) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return str(value)


def render_message_detail(message: Message) -> Text:
    """Render one message: header, every non-empty property section, then the payload."""
    text = Text()
    text.append("Offset {}".format(format_count(message.offset)), style=ACCENT_STYLE)
    text.append("  ")
    text.append(message.timestamp.isoformat(), style="dim")
    text.append("\n")

    sections = message.properties.sections()
    if not sections:
        text.append("\n")
        text.append("No properties", style="dim")
        text.append("\n")

    for name, values in sections:
        text.append("\n")
        text.append(SECTION_TITLES[name], style="bold")
        text.append("\n")
        label_width = max(len(str(key)) for key in values)
        for key, value in values.items():
            text.append("  ")
            text.append("{:<{}}".format(str(key) + ":", label_width + 1), style="bold")
            text.append(" ")
            text.append(_format_value(value))
            text.append("\n")

    kind, body = format_payload(message.data)
    text.append("\n")
    text.append(_PAYLOAD_TITLES[kind], style="bold")
    text.append(" {}".format(format_bytes(len(message.data))), style="dim")
    text.append("\n")
    if body:
        text.append(body, style=WARN_STYLE if kind == "binary" else "")
    return text


def render_key_hints() -> Text:
    text = Text()
    for i, (keys, description) in enumerate(KEY_HINTS):
        if i:
            text.append("  ")
        text.append(keys, style="bold")
        text.append(" " + description, style="dim")
    return text
