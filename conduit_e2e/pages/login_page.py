"""
Login Page Object

Encapsulates login page interactions and the "is logged in" check.
"""
import logging

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import expect

from conduit_e2e import constants as c
from conduit_e2e.services.exceptions import LoginFailed, TransientUIFailure

from .base_page import BasePage

logger = logging.getLogger(__name__)


class LoginPage(BasePage):
    """Page object for the login page."""

    # Selectors
    EMAIL_INPUT = c.EMAIL_INPUT
    PASSWORD_INPUT = c.PASSWORD_INPUT
    SUBMIT_BUTTON = c.SIGN_IN_BUTTON
    ERROR_MESSAGE = c.ERROR_BANNER

    def navigate(self) -> "LoginPage":
        """Navigate to login page."""
        self.goto(c.LOGIN_PATH)
        return self

    def login(self, email: str, password: str) -> None:
        """
        Complete the login form and wait for the redirect.

        Raises:
            ValueError: on blank email or password.
            TransientUIFailure: if the form never became usable.
            LoginFailed: if the app stayed on /login (with banner text when shown).
        """
        if not email or not email.strip():
            raise ValueError("Email is required for login")
        if not password or not password.strip():
            raise ValueError("Password is required for login")

        email_input = self.locator(self.EMAIL_INPUT).first
        password_input = self.locator(self.PASSWORD_INPUT).first
        submit = self.locator(self.SUBMIT_BUTTON).first

        try:
            self.wait_visible(email_input)
            self.wait_visible(password_input)
        except PlaywrightError as e:
            raise TransientUIFailure(f"Login form not ready: {e}", url=self.current_url())

        email_input.fill(email)
        expect(email_input).to_have_value(email, timeout=self.timeouts.action)
        password_input.fill(password)

        self.wait_visible(submit)
        if not self.wait_until_enabled(submit):
            raise TransientUIFailure("Sign in button stayed disabled", url=self.current_url())

        submit.click()

        try:
            self.wait_for_url(
                lambda url: c.LOGIN_PATH not in url, timeout=self.timeouts.login_redirect
            )
        except PlaywrightError:
            raise LoginFailed(self.get_error_message(), url=self.current_url())

        self.settle()
        logger.info(f"Login successful for {email}")

    def is_logged_in(self) -> bool:
        """
        Logged in iff an authenticated-only link is visible and the sign-in link is not.

        The positive wait is bounded; a page that never renders a marker counts
        as logged out.
        """
        markers = self.locator(", ".join(c.AUTHENTICATED_MARKERS)).first
        try:
            markers.wait_for(state="visible", timeout=self.timeouts.marker)
        except PlaywrightError:
            return False

        has_marker = any(self.is_visible(selector) for selector in c.AUTHENTICATED_MARKERS)
        has_sign_in = self.is_visible(c.SIGN_IN_LINK)
        return has_marker and not has_sign_in

    def get_error_message(self) -> str:
        """Get login error message if present."""
        if self.is_visible(self.ERROR_MESSAGE):
            try:
                return (self.locator(self.ERROR_MESSAGE).first.text_content() or "").strip()
            except PlaywrightError:
                return ""
        return ""

    # Assertions
    def expect_login_form_visible(self) -> None:
        """Assert login form is visible."""
        self.expect_visible(self.EMAIL_INPUT)
        self.expect_visible(self.PASSWORD_INPUT)
        self.expect_visible(self.SUBMIT_BUTTON)

    def expect_on_login_page(self) -> None:
        """Assert currently on login page."""
        self.expect_url(r".*/login")
