"""
Settings Page Object
"""
import logging

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import expect

from conduit_e2e import constants as c
from conduit_e2e.models import UserSettings

from .base_page import BasePage

logger = logging.getLogger(__name__)


class SettingsPage(BasePage):
    """Page object for /settings."""

    IMAGE_INPUT = c.IMAGE_INPUT
    USERNAME_INPUT = c.SETTINGS_USERNAME_INPUT
    BIO_INPUT = c.BIO_INPUT
    EMAIL_INPUT = 'input[formcontrolname="email"], input[type="email"]'
    PASSWORD_INPUT = 'input[formcontrolname="password"], input[type="password"]'
    UPDATE_BUTTON = c.UPDATE_SETTINGS_BUTTON
    LOGOUT_BUTTON = c.LOGOUT_BUTTON
    ERROR_MESSAGE = c.ERROR_BANNER

    def navigate(self) -> "SettingsPage":
        self.goto(c.SETTINGS_PATH)
        self.settle()
        return self

    def update_settings(self, settings: UserSettings) -> None:
        """
        Fill the provided fields and submit.

        Raises:
            ValueError: if no field is set.
        """
        values = settings.to_dict()
        if not values:
            raise ValueError("At least one setting field is required")

        fields = {
            "image": self.IMAGE_INPUT,
            "username": self.USERNAME_INPUT,
            "bio": self.BIO_INPUT,
            "email": self.EMAIL_INPUT,
            "password": self.PASSWORD_INPUT,
        }
        for name, value in values.items():
            field = self.wait_visible(self.locator(fields[name]))
            field.clear()
            field.fill(value)
            if name != "password":
                expect(field).to_have_value(value, timeout=self.timeouts.action)

        self.wait_visible(self.locator(self.UPDATE_BUTTON)).click()

        # The app may redirect to the profile page after saving
        try:
            self.wait_for_url(lambda url: "/profile/" in url or c.SETTINGS_PATH in url)
        except PlaywrightError:
            logger.warning(f"No navigation after updating settings, url={self.current_url()}")
        self.settle()

    def get_username(self) -> str:
        return self.locator(self.USERNAME_INPUT).first.input_value()

    def get_bio(self) -> str:
        return self.locator(self.BIO_INPUT).first.input_value()

    def get_email(self) -> str:
        return self.locator(self.EMAIL_INPUT).first.input_value()

    def get_image(self) -> str:
        return self.locator(self.IMAGE_INPUT).first.input_value()

    def get_error_message(self) -> str:
        if not self.is_visible(self.ERROR_MESSAGE):
            return ""
        return (self.locator(self.ERROR_MESSAGE).first.text_content() or "").strip()

    def logout(self) -> None:
        """Log out via the settings page button."""
        self.wait_visible(self.locator(self.LOGOUT_BUTTON)).click()
        self.settle()
