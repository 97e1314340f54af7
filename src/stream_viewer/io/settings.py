"""Settings file I/O for stream-viewer.

One JSON object holding connection and refresh preferences; navigation
state is never written here. The file is only written by --save-config.

Import as: import stream_viewer.io.settings
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

# Explicit file location; wins over XDG_CONFIG_HOME.
CONFIG_PATH_ENV = "STREAM_VIEWER_CONFIG"
CONFIG_DIR_NAME = "stream-viewer"
CONFIG_FILE_NAME = "settings.json"


def get_config_path() -> Path:
    """$STREAM_VIEWER_CONFIG, else $XDG_CONFIG_HOME (default ~/.config)/stream-viewer/settings.json."""
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(Path.home(), ".config")
    return Path(base) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _read_object(path: Path) -> dict:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        logger.warning("cannot read settings file %s: %s", path, e)
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("ignoring malformed settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: top level is %s, not an object", path, type(data).__name__)
        return {}
    return data


def load_settings(known_keys: Iterable[str] | None = None) -> dict:
    """Settings from the file; {} when it is missing or unreadable.

    With known_keys, entries outside that set are left out of the result.
    """
    path = get_config_path()
    data = _read_object(path)
    if known_keys is None:
        return data
    known = set(known_keys)
    unknown = sorted(key for key in data if key not in known)
    if unknown:
        logger.debug("settings file %s: skipping unknown keys %s", path, ", ".join(unknown))
    return {key: value for key, value in data.items() if key in known}


def save_settings(data: dict) -> Path:
    """Replace the settings file atomically (temp file in the same directory, then rename)."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=".settings-", suffix=".tmp", delete=False
    ) as tmp:
        json.dump(data, tmp, indent=2, sort_keys=True)
        tmp.write("\n")
    try:
        os.replace(tmp.name, path)
    except OSError:
        os.unlink(tmp.name)
        raise
    return path


def update_settings(values: dict) -> Path:
    """Merge values over the current file contents, keeping keys this version does not know."""
    data = _read_object(get_config_path())
    data.update(values)
    return save_settings(data)
