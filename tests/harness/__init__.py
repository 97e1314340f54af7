"""Textual in-process test harness for stream-viewer.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, widget_text, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    type_and_submit,
)
from tests.harness.content import (
    table_offsets,
    widget_text,
)

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "type_and_submit",
    "table_offsets",
    "widget_text",
]
