"""
Home Page Object

Global feed, popular tags sidebar and the authenticated header links.
"""
from typing import List

from playwright.sync_api import Error as PlaywrightError

from conduit_e2e import constants as c

from .base_page import BasePage


class HomePage(BasePage):
    """Page object for the home feed."""

    NEW_ARTICLE_LINK = c.NEW_ARTICLE_LINK
    SETTINGS_LINK = c.SETTINGS_LINK
    PROFILE_LINK = c.PROFILE_LINK
    ARTICLE_PREVIEW = c.ARTICLE_PREVIEW
    ARTICLE_TITLE = c.ARTICLE_PREVIEW_TITLE
    POPULAR_TAGS = c.POPULAR_TAGS
    ACTIVE_TAG = c.ACTIVE_TAG

    def navigate(self) -> "HomePage":
        """Navigate to the home page."""
        self.goto("/")
        self.settle()
        return self

    def click_new_article(self) -> None:
        """Open the article editor."""
        self._click_header_link(self.NEW_ARTICLE_LINK)

    def click_settings(self) -> None:
        """Open the settings page."""
        self._click_header_link(self.SETTINGS_LINK)

    def click_tag(self, tag_name: str) -> None:
        """Filter the feed by a tag pill (sidebar or article tag)."""
        tag = self.locator(
            f'.tag-pill:has-text("{tag_name}"), .tag-default:has-text("{tag_name}")'
        )
        self.wait_visible(tag).click()
        self.wait_for_load_state("domcontentloaded")
        self.settle()

    def click_article(self, title: str) -> None:
        self.locator(f'{self.ARTICLE_PREVIEW}:has-text("{title}")').first.click()
        self.settle()

    def get_article_titles(self) -> List[str]:
        """Titles of the previews currently in the feed."""
        return [t.strip() for t in self.locator(self.ARTICLE_TITLE).all_text_contents()]

    def get_popular_tags(self) -> List[str]:
        return [t.strip() for t in self.locator(self.POPULAR_TAGS).all_text_contents()]

    def get_filtered_tag(self) -> str:
        """Text of the active feed tab, empty when no tag filter is active."""
        try:
            text = self.locator(self.ACTIVE_TAG).first.text_content(timeout=3000) or ""
        except PlaywrightError:
            return ""
        return text.strip()

    def is_article_visible(self, title: str, timeout: int = 5000) -> bool:
        article = self.locator(f'{self.ARTICLE_PREVIEW}:has-text("{title}")').first
        try:
            article.wait_for(state="visible", timeout=timeout)
        except PlaywrightError:
            return False
        return True

    def _click_header_link(self, selector: str) -> None:
        self.wait_visible(self.locator(selector)).click()
        self.wait_for_load_state("domcontentloaded")
        self.settle()
