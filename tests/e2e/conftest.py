"""
Playwright E2E Test Configuration and Fixtures

Shared fixtures for browser tests against a live Conduit deployment.
Opt-in: set E2E_ENABLED=true and install the Playwright browsers
(``playwright install chromium``).
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator

import pytest

# Skip entire module if playwright not installed
pytest.importorskip("playwright")

from playwright.sync_api import Browser, BrowserType, Page
from playwright.sync_api import Error as PlaywrightError

from conduit_e2e.config.env_config import Config, Settings
from conduit_e2e.models import Credentials
from conduit_e2e.services.api_client import ConduitApiClient
from conduit_e2e.services.session_bootstrap import SessionBootstrap

ARTIFACTS_DIR = Path(__file__).parent / "artifacts"

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture(scope="session")
def e2e_settings() -> Settings:
    """Settings read once from the environment for the whole session."""
    logging.getLogger("conduit_e2e").setLevel(Config.LOG_LEVEL)
    return Settings.from_env()


# =============================================================================
# Browser Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def browser_type_launch_args(e2e_settings: Settings) -> Dict[str, Any]:
    """Browser launch arguments."""
    return {
        "headless": e2e_settings.headless,
        "slow_mo": e2e_settings.slow_mo,
    }


@pytest.fixture(scope="session")
def browser_context_args(e2e_settings: Settings) -> Dict[str, Any]:
    """Browser context arguments."""
    return {
        "base_url": e2e_settings.base_url,
        "viewport": {"width": 1280, "height": 720},
        "ignore_https_errors": True,
    }


@pytest.fixture(scope="session")
def browser(
    browser_type: BrowserType, browser_type_launch_args: Dict[str, Any]
) -> Generator[Browser, None, None]:
    """Launch the browser once; skip the suite when its executable is missing."""
    try:
        browser = browser_type.launch(**browser_type_launch_args)
    except PlaywrightError as e:
        pytest.skip(f"Playwright browser unavailable: {e}")

    yield browser

    browser.close()


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def session_bootstrap(browser: Browser, e2e_settings: Settings) -> SessionBootstrap:
    """Validated session shared by every authenticated test in the run."""
    bootstrap = SessionBootstrap.for_browser(browser, e2e_settings)
    bootstrap.ensure_storage_state()
    return bootstrap


@pytest.fixture(scope="session")
def test_credentials(session_bootstrap: SessionBootstrap) -> Credentials:
    return session_bootstrap.resolve_credentials()


@pytest.fixture
def authenticated_page(
    request,
    session_bootstrap: SessionBootstrap,
    browser_context_args: Dict[str, Any],
    e2e_settings: Settings,
) -> Generator[Page, None, None]:
    """Return a page on the home feed, already logged in from the cached state."""
    with session_bootstrap.authenticated_context(**browser_context_args) as context:
        context.set_default_timeout(e2e_settings.timeouts.action)
        context.set_default_navigation_timeout(e2e_settings.timeouts.navigation)
        page = context.new_page()
        page.goto(e2e_settings.base_url)

        yield page

        _screenshot_on_failure(request, page)


@pytest.fixture
def api_client(
    e2e_settings: Settings, test_credentials: Credentials
) -> Generator[ConduitApiClient, None, None]:
    """REST client logged in as the session user, for setup and cleanup."""
    client = ConduitApiClient(e2e_settings.api_base_url)
    client.login(test_credentials)

    yield client

    client.close()


@pytest.fixture
def screenshot_on_failure(request, page: Page):
    """Capture screenshot on test failure (anonymous ``page`` tests)."""
    yield
    _screenshot_on_failure(request, page)


def _screenshot_on_failure(request, page: Page) -> None:
    rep = getattr(request.node, "rep_call", None)
    if rep is None or not rep.failed:
        return

    ARTIFACTS_DIR.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    test_name = request.node.name.replace("/", "_").replace(":", "_")
    screenshot_path = ARTIFACTS_DIR / f"failure_{test_name}_{timestamp}.png"
    try:
        page.screenshot(path=str(screenshot_path), full_page=True)
    except PlaywrightError as e:
        logger.warning(f"Could not capture failure screenshot: {e}")
        return
    print(f"\n[E2E] Screenshot saved: {screenshot_path}")


# =============================================================================
# Hooks
# =============================================================================


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Store test results for use in fixtures."""
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "auth: marks tests requiring authentication")
    config.addinivalue_line("markers", "api: tests that set up data through the REST API")


def pytest_collection_modifyitems(config, items):
    """Skip browser tests unless E2E_ENABLED is set; tag authenticated ones."""
    enabled = Config.get("E2E_ENABLED", False)
    skip_e2e = pytest.mark.skip(reason="Set E2E_ENABLED=true to run browser tests")

    for item in items:
        if "e2e" not in item.keywords:
            continue
        if not enabled:
            item.add_marker(skip_e2e)
        if "authenticated_page" in item.fixturenames:
            item.add_marker(pytest.mark.auth)
        if "api_client" in item.fixturenames:
            item.add_marker(pytest.mark.api)
