"""Display formatting for payloads, sizes and offset ranges.

Pure functions; the TUI renderers call these and never format numbers themselves.
"""

from __future__ import annotations

import json

from stream_viewer.core.model import StreamBounds

_HEX_PREVIEW_BYTES = 64
_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_payload(data: bytes) -> tuple[str, str]:
    """Classify and render a message body.

    Returns (kind, text) where kind is one of "empty", "json", "text", "binary".
    """
    if not data:
        return "empty", ""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        preview = data[:_HEX_PREVIEW_BYTES].hex(" ")
        suffix = " ..." if len(data) > _HEX_PREVIEW_BYTES else ""
        return "binary", f"<binary data: {len(data)} bytes>\n{preview}{suffix}"
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return "text", text
    return "json", json.dumps(parsed, indent=2, ensure_ascii=False)


def format_bytes(size: int) -> str:
    """Human-readable size with a 1024 base: 0 B, 512 B, 1.5 KB, 2.25 MB."""
    value = float(max(0, int(size)))
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            break
        value /= 1024
    rendered = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {unit}"


def format_count(n: int) -> str:
    return f"{int(n):,}"


def format_range(bounds: StreamBounds | None) -> str:
    """The "range: first-last (count messages)" readout."""
    if bounds is None:
        return "range: unknown"
    if bounds.is_empty:
        return "range: no messages"
    return "range: {}–{} ({} messages)".format(
        format_count(bounds.first_offset),
        format_count(bounds.last_offset),
        format_count(bounds.message_count),
    )
