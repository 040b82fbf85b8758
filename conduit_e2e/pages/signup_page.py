"""
Signup Page Object
"""
import logging

from playwright.sync_api import Error as PlaywrightError

from conduit_e2e import constants as c
from conduit_e2e.services.exceptions import SignupFailed, TransientUIFailure

from .base_page import BasePage

logger = logging.getLogger(__name__)


class SignupPage(BasePage):
    """Page object for the registration page."""

    USERNAME_INPUT = c.USERNAME_INPUT
    EMAIL_INPUT = c.EMAIL_INPUT
    PASSWORD_INPUT = c.PASSWORD_INPUT
    SUBMIT_BUTTON = c.SIGN_UP_BUTTON
    ERROR_MESSAGE = c.ERROR_BANNER

    def navigate(self) -> "SignupPage":
        """Navigate to the registration page."""
        self.goto(c.REGISTER_PATH)
        return self

    def sign_up(self, username: str, email: str, password: str) -> None:
        """
        Register a new user and wait for the redirect off /register.

        Raises:
            TransientUIFailure: the submit button never became enabled.
            SignupFailed: the page stayed on /register.
        """
        try:
            self.wait_visible(self.locator(self.USERNAME_INPUT))
        except PlaywrightError as e:
            raise TransientUIFailure(f"Signup form not ready: {e}", url=self.current_url())

        self.fill(self.USERNAME_INPUT, username)
        self.fill(self.EMAIL_INPUT, email)
        self.fill(self.PASSWORD_INPUT, password)

        submit = self.locator(self.SUBMIT_BUTTON)
        self.wait_visible(submit)
        if not self.wait_until_enabled(submit, attempts=10, interval_ms=200):
            raise TransientUIFailure("Sign up button stayed disabled", url=self.current_url())

        submit.first.click()

        try:
            self.wait_for_url(
                lambda url: c.REGISTER_PATH not in url, timeout=self.timeouts.login_redirect
            )
        except PlaywrightError:
            raise SignupFailed(self.get_error_message(), url=self.current_url())

        self.settle()
        logger.info(f"Signed up {username} <{email}>")

    def get_error_message(self) -> str:
        if not self.is_visible(self.ERROR_MESSAGE):
            return ""
        return (self.locator(self.ERROR_MESSAGE).first.text_content() or "").strip()
