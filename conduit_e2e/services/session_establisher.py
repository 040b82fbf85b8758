"""
Session Establisher

Turns a credential pair into an authenticated Playwright storage state and
writes it to the session store once the logged-in check passes.

Two strategies are available:
    API - POST /users/login, then inject the token into browser storage
    UI  - drive the /login form

The API strategy falls back to UI; UI has no fallback.

Usage:
    establisher = SessionEstablisher(browser, settings, store)
    snapshot = establisher.establish(credentials)
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from conduit_e2e import constants as c
from conduit_e2e.config.env_config import Settings
from conduit_e2e.models import Credentials
from conduit_e2e.pages.login_page import LoginPage

from .api_client import ConduitApiClient
from .exceptions import ConduitE2EError, LoginFailed, SessionEstablishmentFailure
from .session_store import SessionStore

logger = logging.getLogger(__name__)

# Errors a strategy may raise that still allow the next strategy to run
STRATEGY_ERRORS = (ConduitE2EError, PlaywrightError, requests.RequestException, ValueError)

INJECT_AUTH_SCRIPT = """
({ token, user, tokenKey, userKey }) => {
    for (const storage of [window.localStorage, window.sessionStorage]) {
        if (!storage) continue;
        storage.setItem(tokenKey, token);
        storage.setItem(userKey, JSON.stringify(user));
    }
}
"""


class EstablishmentStrategy(Enum):
    """How a session snapshot is produced."""

    API = "api"
    UI = "ui"


def select_strategy(settings: Settings) -> EstablishmentStrategy:
    """UI when running in CI or when API bootstrap is disabled, API otherwise."""
    if settings.is_ci or settings.skip_api_bootstrap:
        return EstablishmentStrategy.UI
    return EstablishmentStrategy.API


def fallback_for(strategy: EstablishmentStrategy) -> Optional[EstablishmentStrategy]:
    if strategy is EstablishmentStrategy.API:
        return EstablishmentStrategy.UI
    return None


class SessionEstablisher:
    """Produce and persist a logged-in storage state for a credential pair."""

    def __init__(
        self,
        browser,
        settings: Settings,
        store: SessionStore,
        api_client_factory: Optional[Callable[[], ConduitApiClient]] = None,
        logged_in_check: Optional[Callable[[Page], bool]] = None,
    ):
        self.browser = browser
        self.settings = settings
        self.store = store
        self.api_client_factory = api_client_factory or (
            lambda: ConduitApiClient(settings.api_base_url, timeout=settings.timeouts.navigation / 1000)
        )
        self.logged_in_check = logged_in_check or self._default_logged_in_check
        self.last_url: Optional[str] = None

    def establish(self, credentials: Credentials) -> Dict[str, Any]:
        """
        Run the configured strategy, falling back once, and persist the result.

        Raises:
            SessionEstablishmentFailure: no strategy produced a logged-in session.
        """
        strategy: Optional[EstablishmentStrategy] = select_strategy(self.settings)
        failed: Optional[EstablishmentStrategy] = None
        last_error: Optional[BaseException] = None

        while strategy is not None:
            logger.info(f"Establishing session for {credentials.email} via {strategy.value}")
            try:
                snapshot = self._run(strategy, credentials)
            except STRATEGY_ERRORS as e:
                logger.warning(f"{strategy.value} session establishment failed: {e}")
                failed, last_error = strategy, e
                strategy = fallback_for(strategy)
                continue

            self.store.write_storage_state(snapshot)
            logger.info(f"Session established via {strategy.value}")
            return snapshot

        raise self._failure(failed, last_error)

    def _run(self, strategy: EstablishmentStrategy, credentials: Credentials) -> Dict[str, Any]:
        handlers = {
            EstablishmentStrategy.API: self._establish_via_api,
            EstablishmentStrategy.UI: self._establish_via_ui,
        }
        return handlers[strategy](credentials)

    # =========================================================================
    # Strategies
    # =========================================================================

    def _establish_via_api(self, credentials: Credentials) -> Dict[str, Any]:
        client = self.api_client_factory()
        try:
            body = client.login(credentials)
        finally:
            client.close()

        user = body["user"]
        context = self.browser.new_context()
        page = None
        try:
            page = context.new_page()
            page.set_default_timeout(self.settings.timeouts.action)
            login_page = self._login_page(page)

            login_page.goto("/")
            login_page.settle()
            page.evaluate(
                INJECT_AUTH_SCRIPT,
                {
                    "token": user["token"],
                    "user": user,
                    "tokenKey": c.TOKEN_STORAGE_KEY,
                    "userKey": c.USER_STORAGE_KEY,
                },
            )
            login_page.reload()
            login_page.settle()

            self._require_logged_in(page, EstablishmentStrategy.API)
            return context.storage_state()
        finally:
            self._remember_url(page)
            context.close()

    def _establish_via_ui(self, credentials: Credentials) -> Dict[str, Any]:
        context = self.browser.new_context()
        page = None
        try:
            page = context.new_page()
            page.set_default_timeout(self.settings.timeouts.action)
            login_page = self._login_page(page)

            login_page.goto("/")
            login_page.settle()
            if self.logged_in_check(page):
                logger.info("Fresh context is already logged in")
            else:
                login_page.navigate()
                login_page.login(credentials.email, credentials.password)
                login_page.goto("/")
                login_page.settle()

            self._require_logged_in(page, EstablishmentStrategy.UI)
            return context.storage_state()
        finally:
            self._remember_url(page)
            context.close()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _login_page(self, page: Page) -> LoginPage:
        return LoginPage(page, self.settings.base_url, self.settings.timeouts)

    def _default_logged_in_check(self, page: Page) -> bool:
        return self._login_page(page).is_logged_in()

    def _require_logged_in(self, page: Page, strategy: EstablishmentStrategy) -> None:
        if self.logged_in_check(page):
            return
        raise SessionEstablishmentFailure(
            "Login did not produce an authenticated session",
            stage=strategy.value,
            url=page.url,
            banner=self._login_page(page).get_error_message() or None,
        )

    def _remember_url(self, page: Optional[Page]) -> None:
        if page is not None:
            self.last_url = page.url

    def _failure(
        self, strategy: Optional[EstablishmentStrategy], error: Optional[BaseException]
    ) -> SessionEstablishmentFailure:
        stage = strategy.value if strategy else ""
        if isinstance(error, SessionEstablishmentFailure):
            return SessionEstablishmentFailure(
                "Failed to establish an authenticated session",
                stage=error.stage or stage,
                url=error.url,
                banner=error.banner,
            )

        banner = error.banner if isinstance(error, LoginFailed) else None
        url = getattr(error, "url", None)
        return SessionEstablishmentFailure(
            f"Failed to establish an authenticated session: {error}",
            stage=stage,
            url=url or self.last_url,
            banner=banner or None,
        )
