"""Common pytest fixtures for clicktoplay tests."""

import pytest

from clicktoplay.core.wait import WaitSettings
from clicktoplay.session import ClickToPlaySession

PAGE_URL = "http://mochi.test:8888/plugin_add_dynamically.html"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep settings away from the real home directory."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("ENV", "DATA_DIR", "LOG_LEVEL", "LOG_FILE", "CLICK_TO_PLAY", "WAIT_TIMEOUT"):
        monkeypatch.delenv(f"CLICKTOPLAY_{name}", raising=False)


@pytest.fixture
def fast_wait():
    """Poll settings that give up quickly."""
    return WaitSettings(timeout=0.2, interval=0.01, max_interval=0.05)


@pytest.fixture
def session():
    """Session with click-to-play enabled and a page loaded."""
    s = ClickToPlaySession(click_to_play=True)
    s.new_page(PAGE_URL)
    return s
