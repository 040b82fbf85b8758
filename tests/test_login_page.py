"""
Login Page Tests

The Playwright page is a MagicMock whose locators are keyed by selector, so
the logged-in rule and the login form flow run without a browser.
"""
from unittest.mock import MagicMock, Mock

import pytest
from playwright.sync_api import Error as PlaywrightError

from conduit_e2e import constants as c
from conduit_e2e.config.env_config import TimeoutSettings
from conduit_e2e.pages.login_page import LoginPage
from conduit_e2e.services.exceptions import LoginFailed, TransientUIFailure

MARKERS = ", ".join(c.AUTHENTICATED_MARKERS)


def make_page(visible=(), url="https://conduit.test/"):
    """Page double: ``page.locator(sel).first.is_visible()`` is True for ``visible``."""
    page = MagicMock(name="page")
    page.url = url
    locators = {}

    def locator(selector):
        if selector not in locators:
            loc = MagicMock(name=selector)
            loc.first.is_visible.return_value = selector in visible
            locators[selector] = loc
        return locators[selector]

    page.locator.side_effect = locator
    return page


def make_login_page(page):
    return LoginPage(page, "https://conduit.test", TimeoutSettings(marker=1234, login_redirect=4321))


class TestIsLoggedIn:
    """Test the authenticated-marker rule."""

    def test_marker_without_sign_in_link(self):
        page = make_page(visible={c.PROFILE_LINK})
        assert make_login_page(page).is_logged_in()

    def test_any_marker_counts(self):
        page = make_page(visible={c.NEW_ARTICLE_LINK})
        assert make_login_page(page).is_logged_in()

    def test_sign_in_link_overrides_marker(self):
        """A visible sign-in link means logged out even if a marker is shown."""
        page = make_page(visible={c.SETTINGS_LINK, c.SIGN_IN_LINK})
        assert not make_login_page(page).is_logged_in()

    def test_no_marker_within_bound(self):
        page = make_page()
        page.locator(MARKERS).first.wait_for.side_effect = PlaywrightError("Timeout 1234ms exceeded")

        assert not make_login_page(page).is_logged_in()
        page.locator(MARKERS).first.wait_for.assert_called_once_with(state="visible", timeout=1234)

    def test_marker_gone_after_wait(self):
        page = make_page(visible={c.SIGN_IN_LINK})
        assert not make_login_page(page).is_logged_in()


class TestLogin:
    """Test the login form flow."""

    @pytest.fixture(autouse=True)
    def _no_expect(self, monkeypatch):
        monkeypatch.setattr("conduit_e2e.pages.login_page.expect", Mock())

    def submit_button(self, page):
        # login() polls ``submit.first`` where submit is already ``.first``
        return page.locator(LoginPage.SUBMIT_BUTTON).first

    def test_successful_login(self):
        page = make_page()
        submit = self.submit_button(page)
        submit.first.is_enabled.return_value = True

        make_login_page(page).login("user_12@test.com", "Sx9!aa2211qq")

        page.locator(LoginPage.EMAIL_INPUT).first.fill.assert_called_once_with("user_12@test.com")
        page.locator(LoginPage.PASSWORD_INPUT).first.fill.assert_called_once_with("Sx9!aa2211qq")
        submit.click.assert_called_once()

        predicate = page.wait_for_url.call_args.args[0]
        assert page.wait_for_url.call_args.kwargs["timeout"] == 4321
        assert predicate("https://conduit.test/")
        assert not predicate("https://conduit.test/login")

    def test_disabled_submit_is_transient_failure(self):
        page = make_page(url="https://conduit.test/login")
        submit = self.submit_button(page)
        submit.first.is_enabled.return_value = False

        with pytest.raises(TransientUIFailure) as exc_info:
            make_login_page(page).login("user_12@test.com", "Sx9!aa2211qq")

        assert exc_info.value.url == "https://conduit.test/login"
        submit.click.assert_not_called()
        # 20 polls with a bounded wait between each
        assert submit.first.is_enabled.call_count == 20
        assert page.wait_for_timeout.call_count == 19

    def test_hidden_form_is_transient_failure(self):
        page = make_page()
        page.locator(LoginPage.EMAIL_INPUT).first.first.wait_for.side_effect = PlaywrightError(
            "Timeout exceeded"
        )

        with pytest.raises(TransientUIFailure):
            make_login_page(page).login("user_12@test.com", "Sx9!aa2211qq")

    def test_redirect_timeout_becomes_login_failed(self):
        page = make_page(visible={c.ERROR_BANNER}, url="https://conduit.test/login")
        self.submit_button(page).first.is_enabled.return_value = True
        page.locator(c.ERROR_BANNER).first.text_content.return_value = " email or password is invalid "
        page.wait_for_url.side_effect = PlaywrightError("Timeout 4321ms exceeded")

        with pytest.raises(LoginFailed) as exc_info:
            make_login_page(page).login("user_12@test.com", "wrong-password")

        assert exc_info.value.banner == "email or password is invalid"
        assert exc_info.value.url == "https://conduit.test/login"

    def test_redirect_timeout_without_banner(self):
        page = make_page(url="https://conduit.test/login")
        self.submit_button(page).first.is_enabled.return_value = True
        page.wait_for_url.side_effect = PlaywrightError("Timeout 4321ms exceeded")

        with pytest.raises(LoginFailed) as exc_info:
            make_login_page(page).login("user_12@test.com", "wrong-password")

        assert exc_info.value.banner == ""
        assert "still on login page" in str(exc_info.value)

    @pytest.mark.parametrize("email,password", [("", "pw"), ("a@b.c", " "), (None, "pw")])
    def test_blank_credentials_rejected(self, email, password):
        page = make_page()

        with pytest.raises(ValueError):
            make_login_page(page).login(email, password)

        page.locator.assert_not_called()
