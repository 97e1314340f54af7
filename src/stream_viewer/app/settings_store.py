"""Settings schema and layered resolution.

// [LAW:one-source-of-truth] All known settings and their defaults live in SCHEMA.
// [LAW:single-enforcer] Layering (defaults < file < environment < CLI) happens only in resolve().
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

import stream_viewer.io.settings
from stream_viewer.core.model import DEFAULT_PAGE_SIZE, PAGE_SIZES
from stream_viewer.io.api_client import DEFAULT_API_PREFIX, DEFAULT_API_URL, DEFAULT_TIMEOUT_S

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_MS = 5000
MIN_POLL_INTERVAL_MS = 250

SCHEMA: dict[str, object] = {
    "api_url": DEFAULT_API_URL,
    "api_prefix": DEFAULT_API_PREFIX,
    "page_size": DEFAULT_PAGE_SIZE,
    "live_refresh": True,
    "poll_interval_ms": DEFAULT_POLL_INTERVAL_MS,
    "request_timeout_s": DEFAULT_TIMEOUT_S,
}

# Environment variable -> settings key.
ENV_OVERRIDES: dict[str, str] = {
    "STREAM_VIEWER_API_URL": "api_url",
}


@dataclass(frozen=True)
class ViewerSettings:
    api_url: str = DEFAULT_API_URL
    api_prefix: str = DEFAULT_API_PREFIX
    page_size: int = DEFAULT_PAGE_SIZE
    live_refresh: bool = True
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    request_timeout_s: float = DEFAULT_TIMEOUT_S

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def _coerce(key: str, value: object) -> object:
    """Validate one raw value; raises ValueError/TypeError when unusable."""
    if key in ("api_url", "api_prefix"):
        if not isinstance(value, str):
            raise TypeError(f"{key} must be a string")
        if key == "api_url" and not value.strip():
            raise ValueError("api_url must not be empty")
        return value.strip()
    if key == "page_size":
        size = int(value)
        if size not in PAGE_SIZES:
            raise ValueError(f"page_size must be one of {PAGE_SIZES}")
        return size
    if key == "live_refresh":
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if key == "poll_interval_ms":
        interval = int(value)
        if interval < MIN_POLL_INTERVAL_MS:
            raise ValueError(f"poll_interval_ms must be >= {MIN_POLL_INTERVAL_MS}")
        return interval
    if key == "request_timeout_s":
        timeout = float(value)
        if timeout <= 0:
            raise ValueError("request_timeout_s must be positive")
        return timeout
    raise KeyError(key)


def _merge_layer(merged: dict[str, object], layer: dict, source: str) -> None:
    for key, value in layer.items():
        if key not in SCHEMA or value is None:
            continue
        try:
            merged[key] = _coerce(key, value)
        except (TypeError, ValueError) as e:
            logger.warning("ignoring %s setting %s=%r: %s", source, key, value, e)


def resolve(cli_overrides: dict | None = None) -> ViewerSettings:
    """Resolve effective settings from defaults, file, environment and CLI."""
    merged = dict(SCHEMA)
    _merge_layer(merged, stream_viewer.io.settings.load_settings(SCHEMA), "file")
    env_layer = {key: os.environ[var] for var, key in ENV_OVERRIDES.items() if var in os.environ}
    _merge_layer(merged, env_layer, "environment")
    _merge_layer(merged, dict(cli_overrides or {}), "command-line")
    return ViewerSettings(**merged)


def save(settings: ViewerSettings) -> Path:
    """Persist effective settings as the new defaults; returns the file written."""
    return stream_viewer.io.settings.update_settings(settings.to_dict())
