"""
Pytest fixtures for Conduit E2E unit tests
"""
import importlib.util
from unittest.mock import MagicMock

import pytest

from conduit_e2e.config.env_config import ENV_VARS, Config, Settings, TimeoutSettings
from conduit_e2e.services.session_store import SessionStore


def pytest_configure(config):
    """Register markers used across the suite."""
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests (require playwright and E2E_ENABLED=true)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip e2e tests if playwright is not installed."""
    if importlib.util.find_spec("playwright.sync_api") is None:
        skip_e2e = pytest.mark.skip(reason="Playwright not installed")
        for item in items:
            if "e2e" in item.keywords:
                item.add_marker(skip_e2e)


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every suite variable and reset the Config cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    Config.clear_cache()
    yield monkeypatch
    Config.clear_cache()


@pytest.fixture
def auth_dir(tmp_path):
    return tmp_path / ".auth"


@pytest.fixture
def store(auth_dir):
    return SessionStore(auth_dir)


@pytest.fixture
def settings(auth_dir):
    """Settings pointing at a temp cache with no flags set."""
    return Settings(
        base_url="https://conduit.test",
        api_base_url="https://conduit.test/api",
        auth_dir=auth_dir,
        lock_timeout=5,
        timeouts=TimeoutSettings(
            navigation=1000, action=1000, login_redirect=1000, network_idle=1000, marker=1000
        ),
    )


@pytest.fixture
def browser():
    """Playwright browser double whose contexts record close() calls."""
    browser = MagicMock(name="browser")
    browser.contexts_opened = []

    def new_context(**kwargs):
        context = MagicMock(name="context")
        context.storage_state.return_value = {"cookies": [], "origins": []}
        context.new_page.return_value.url = "https://conduit.test/"
        browser.contexts_opened.append(context)
        return context

    browser.new_context.side_effect = new_context
    return browser
