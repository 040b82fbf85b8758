"""
Session Validator

Checks a storage-state snapshot by loading it into a fresh context and
looking for the logged-in markers on the home page.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from conduit_e2e.config.env_config import Settings
from conduit_e2e.pages.login_page import LoginPage

logger = logging.getLogger(__name__)

StorageState = Union[Dict[str, Any], str, Path]


class SessionValidator:
    """Answers "is this snapshot still logged in?"."""

    def __init__(
        self,
        browser,
        settings: Settings,
        logged_in_check: Optional[Callable[[Page], bool]] = None,
    ):
        self.browser = browser
        self.settings = settings
        self.logged_in_check = logged_in_check or self._default_logged_in_check
        self.last_url: Optional[str] = None

    def is_valid(self, storage_state: StorageState) -> bool:
        if isinstance(storage_state, Path):
            storage_state = str(storage_state)

        context = self.browser.new_context(storage_state=storage_state)
        try:
            page = context.new_page()
            page.set_default_timeout(self.settings.timeouts.action)
            login_page = LoginPage(page, self.settings.base_url, self.settings.timeouts)
            login_page.goto("/")
            login_page.settle()
            valid = self.logged_in_check(page)
            self.last_url = page.url
        except PlaywrightError as e:
            logger.warning(f"Session validation could not load the home page: {e}")
            return False
        finally:
            context.close()

        if not valid:
            logger.warning(f"Cached session is not logged in (url: {self.last_url})")
        return valid

    def _default_logged_in_check(self, page: Page) -> bool:
        return LoginPage(page, self.settings.base_url, self.settings.timeouts).is_logged_in()
