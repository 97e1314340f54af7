"""Pytest configuration and shared fixtures for stream-viewer tests."""

import pytest

import stream_viewer.io.logging_setup
from stream_viewer.app.browser import StreamBrowser
from tests.fakes import FakeStreamApi, FakeTimerFactory, ManualRunner


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep settings and log files out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("STREAM_VIEWER_LOG_DIR", str(tmp_path / "logs"))
    for var in ("STREAM_VIEWER_API_URL", "STREAM_VIEWER_CONFIG", "STREAM_VIEWER_LOG_LEVEL", "STREAM_VIEWER_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    yield
    stream_viewer.io.logging_setup.reset()


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

@pytest.fixture
def api():
    return FakeStreamApi()


@pytest.fixture
def runner():
    return ManualRunner()


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def browser(api, runner, timers):
    """StreamBrowser with queued requests and manual timers; page size 25."""
    b = StreamBrowser(api, runner, timers, page_size=25)
    yield b
    b.close()
