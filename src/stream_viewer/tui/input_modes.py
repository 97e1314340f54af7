"""Pure mode system for key dispatch.

All keyboard input routes through on_key based on current mode.
Textual BINDINGS are not used - on_key is the sole dispatcher.
"""

from enum import Enum, auto


class InputMode(Enum):
    """Input modes derived from focus.

    OFFSET_EDIT while the jump-to-offset input has focus, NORMAL otherwise.
    """
    NORMAL = auto()
    OFFSET_EDIT = auto()


# [LAW:one-source-of-truth] Key→action mapping per mode.
# Keys bound by the focused Tree/DataTable (arrows, home/end, space, enter)
# are left to those widgets.
MODE_KEYMAP: dict[InputMode, dict[str, str]] = {
    InputMode.NORMAL: {
        # Window navigation
        "g": "first_page",
        "G": "last_page",
        "h": "previous_page",
        "l": "next_page",
        "[": "previous_page",
        "left_square_bracket": "previous_page",
        "]": "next_page",
        "right_square_bracket": "next_page",
        "o": "start_jump",

        # Page size (try both literal and descriptive names)
        "+": "page_size(1)",
        "plus": "page_size(1)",
        "=": "page_size(1)",
        "equals_sign": "page_size(1)",
        "-": "page_size(-1)",
        "minus": "page_size(-1)",

        # Live refresh and retries
        "a": "toggle_live",
        "r": "retry_page",
        "R": "refresh_bounds",
        "s": "reload_streams",

        "q": "quit",

        # Closes the offset prompt if focus already left it
        "escape": "cancel_jump",
    },

    # All printable keys belong to the offset input.
    InputMode.OFFSET_EDIT: {
        "escape": "cancel_jump",
    },
}


# Footer hints: (keys, description), in display order.
KEY_HINTS: tuple[tuple[str, str], ...] = (
    ("g/G", "first/last"),
    ("h/l", "prev/next"),
    ("o", "jump"),
    ("+/-", "page size"),
    ("a", "live"),
    ("r", "retry page"),
    ("R", "refresh"),
    ("s", "streams"),
    ("q", "quit"),
)
