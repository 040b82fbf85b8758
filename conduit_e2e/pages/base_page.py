"""
Base Page Object

Provides common functionality for all page objects.
"""
import re
from typing import Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page, expect

from conduit_e2e.config.env_config import TimeoutSettings
from conduit_e2e.constants import DEFAULT_BASE_URL
from conduit_e2e.services.retry import poll_until


class BasePage:
    """Base class for all page objects."""

    def __init__(
        self,
        page: Page,
        base_url: str = DEFAULT_BASE_URL,
        timeouts: Optional[TimeoutSettings] = None,
    ):
        self.page = page
        self.base_url = base_url.rstrip("/")
        self.timeouts = timeouts or TimeoutSettings()

    # =========================================================================
    # Navigation
    # =========================================================================

    def goto(self, path: str = "", wait_until: str = "domcontentloaded") -> None:
        """Navigate to a path relative to base URL."""
        self.page.goto(
            f"{self.base_url}{path}", wait_until=wait_until, timeout=self.timeouts.navigation
        )

    def reload(self) -> None:
        """Reload the current page."""
        self.page.reload(timeout=self.timeouts.navigation)

    def current_url(self) -> str:
        """Get current page URL."""
        return self.page.url

    def wait_for_url(self, url_pattern, timeout: int = None) -> None:
        """Wait for URL to match pattern (glob, regex or predicate)."""
        self.page.wait_for_url(url_pattern, timeout=timeout or self.timeouts.navigation)

    # =========================================================================
    # Element Interaction
    # =========================================================================

    def click(self, selector: str, timeout: int = None) -> None:
        """Click an element."""
        self.page.click(selector, timeout=timeout or self.timeouts.action)

    def fill(self, selector: str, value: str) -> None:
        """Fill an input field."""
        self.page.fill(selector, value, timeout=self.timeouts.action)

    def get_text(self, selector: str) -> str:
        """Get element text content."""
        return self.page.text_content(selector, timeout=self.timeouts.action) or ""

    def count(self, selector: str) -> int:
        """Count matching elements."""
        return self.page.locator(selector).count()

    def locator(self, selector: str) -> Locator:
        """Get a locator for the selector."""
        return self.page.locator(selector)

    # =========================================================================
    # Waiting
    # =========================================================================

    def wait_for_load_state(self, state: str = "load", timeout: int = None) -> None:
        """Wait for page load state."""
        self.page.wait_for_load_state(state, timeout=timeout or self.timeouts.navigation)

    def settle(self, timeout: int = None) -> None:
        """Wait for network idle, tolerating pages that keep polling."""
        try:
            self.page.wait_for_load_state("networkidle", timeout=timeout or self.timeouts.network_idle)
        except PlaywrightError:
            pass

    def wait_visible(self, locator: Locator, timeout: int = None) -> Locator:
        """Wait for the first match of a locator to become visible."""
        first = locator.first
        first.wait_for(state="visible", timeout=timeout or self.timeouts.action)
        return first

    def wait_until_enabled(
        self, locator: Locator, attempts: int = 20, interval_ms: int = 300
    ) -> bool:
        """
        Poll until a control is enabled.

        Angular forms keep submit buttons disabled until client-side validation
        passes, so a fixed number of short polls stands in for a form event.
        """
        return poll_until(
            lambda: locator.first.is_enabled(),
            attempts=attempts,
            interval=interval_ms / 1000,
            sleep=lambda seconds: self.page.wait_for_timeout(seconds * 1000),
        )

    def is_visible(self, selector: str) -> bool:
        """Check if any match of the selector is visible right now."""
        try:
            return self.page.locator(selector).first.is_visible()
        except PlaywrightError:
            return False

    def wait(self, milliseconds: int) -> None:
        """Wait for specified time (use sparingly)."""
        self.page.wait_for_timeout(milliseconds)

    # =========================================================================
    # Assertions
    # =========================================================================

    def expect_visible(self, selector: str) -> None:
        """Assert element is visible."""
        expect(self.locator(selector).first).to_be_visible(timeout=self.timeouts.action)

    def expect_url(self, pattern: str) -> None:
        """Assert URL matches pattern."""
        expect(self.page).to_have_url(re.compile(pattern), timeout=self.timeouts.navigation)

    # =========================================================================
    # Screenshots and Debugging
    # =========================================================================

    def screenshot(self, path: str = None, full_page: bool = False) -> bytes:
        """Take a screenshot."""
        return self.page.screenshot(path=path, full_page=full_page)
