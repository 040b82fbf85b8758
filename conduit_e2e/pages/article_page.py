"""
Article Page Object

Covers both the editor (/editor, /editor/<slug>) and the article view
(/article/<slug>).
"""
import logging
import re
from typing import List

from playwright.sync_api import Error as PlaywrightError

from conduit_e2e import constants as c
from conduit_e2e.models import ArticleData
from conduit_e2e.services.exceptions import ArticleFormError, TransientUIFailure

from .base_page import BasePage

logger = logging.getLogger(__name__)

ARTICLE_URL = re.compile(r".*/article/.*")
EDITOR_URL = re.compile(r".*/editor/.*")


class ArticlePage(BasePage):
    """Page object for the article editor and article view."""

    # Editor
    TITLE_INPUT = c.TITLE_INPUT
    DESCRIPTION_INPUT = c.DESCRIPTION_INPUT
    BODY_INPUT = c.BODY_INPUT
    TAGS_INPUT = c.TAGS_INPUT
    PUBLISH_BUTTON = c.PUBLISH_BUTTON
    TAG_REMOVE = c.EDITOR_TAG_REMOVE

    # View
    EDIT_BUTTON = c.EDIT_ARTICLE_BUTTON
    DELETE_BUTTON = c.DELETE_ARTICLE_BUTTON
    ARTICLE_TITLE = c.ARTICLE_TITLE
    ARTICLE_BODY = c.ARTICLE_BODY
    ARTICLE_TAGS = c.ARTICLE_TAGS
    ARTICLE_AUTHOR = c.ARTICLE_AUTHOR
    ERROR_MESSAGE = c.ERROR_BANNER

    def navigate_to_editor(self) -> "ArticlePage":
        self.goto(c.EDITOR_PATH)
        return self

    def navigate_to_article(self, slug: str) -> "ArticlePage":
        self.goto(f"/article/{slug}")
        self.settle()
        return self

    # =========================================================================
    # Editor actions
    # =========================================================================

    def create_article(self, article: ArticleData) -> None:
        """Fill the editor, publish, and wait for the article view."""
        self._wait_for_form()
        self._fill_form(article)
        self._add_tags(article.tags)
        self._publish()
        logger.info(f"Created article '{article.title}'")

    def edit_article(self, article: ArticleData) -> None:
        """Open the editor from the article view and replace every field."""
        self.wait_visible(self.locator(self.EDIT_BUTTON)).click()
        self.wait_for_url(EDITOR_URL)
        self._wait_for_form()
        # The form is populated asynchronously from GET /articles/<slug>
        self.settle()

        self._fill_form(article)
        self._remove_existing_tags()
        self._add_tags(article.tags)
        self._publish()
        logger.info(f"Edited article to '{article.title}'")

    def delete_article(self) -> None:
        """Click delete and wait until the app leaves the article view."""
        self.wait_visible(self.locator(self.DELETE_BUTTON)).click()
        try:
            self.wait_for_url(lambda url: "/article/" not in url)
        except PlaywrightError as e:
            raise ArticleFormError(f"Article was not deleted: {e}", url=self.current_url())
        self.settle()

    # =========================================================================
    # Article view getters
    # =========================================================================

    def wait_for_article_page(self) -> None:
        self.wait_for_url(ARTICLE_URL)
        self.wait_visible(self.locator(self.ARTICLE_TITLE))

    def get_slug(self) -> str:
        """Slug of the article currently open (from the /article/<slug> URL)."""
        return self.current_url().rsplit("/article/", 1)[-1].split("?")[0].split("#")[0]

    def get_article_title(self) -> str:
        return (self.locator(self.ARTICLE_TITLE).first.text_content() or "").strip()

    def get_article_body(self) -> str:
        texts = self.locator(self.ARTICLE_BODY).all_text_contents()
        return " ".join(t.strip() for t in texts).strip()

    def get_article_tags(self) -> List[str]:
        return [t.strip() for t in self.locator(self.ARTICLE_TAGS).all_text_contents()]

    def get_article_author(self) -> str:
        return (self.locator(self.ARTICLE_AUTHOR).first.text_content() or "").strip()

    def get_error_message(self) -> str:
        if not self.is_visible(self.ERROR_MESSAGE):
            return ""
        return (self.locator(self.ERROR_MESSAGE).first.text_content() or "").strip()

    def is_edit_button_visible(self, timeout: int = 3000) -> bool:
        return self._is_visible_within(self.EDIT_BUTTON, timeout)

    def is_delete_button_visible(self, timeout: int = 3000) -> bool:
        return self._is_visible_within(self.DELETE_BUTTON, timeout)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _wait_for_form(self) -> None:
        try:
            for selector in (self.TITLE_INPUT, self.DESCRIPTION_INPUT, self.BODY_INPUT):
                self.wait_visible(self.locator(selector))
        except PlaywrightError as e:
            raise TransientUIFailure(f"Article editor not ready: {e}", url=self.current_url())

    def _fill_form(self, article: ArticleData) -> None:
        for selector, value in (
            (self.TITLE_INPUT, article.title),
            (self.DESCRIPTION_INPUT, article.description),
            (self.BODY_INPUT, article.body),
        ):
            field = self.locator(selector).first
            field.clear()
            field.fill(value)

    def _add_tags(self, tags: List[str]) -> None:
        tags_input = self.locator(self.TAGS_INPUT).first
        for tag in tags:
            tags_input.fill(tag)
            tags_input.press("Enter")

    def _remove_existing_tags(self) -> None:
        remove_icons = self.locator(self.TAG_REMOVE)
        for index in reversed(range(remove_icons.count())):
            remove_icons.nth(index).click()

    def _publish(self) -> None:
        publish = self.locator(self.PUBLISH_BUTTON)
        self.wait_visible(publish)
        if not self.wait_until_enabled(publish, attempts=30, interval_ms=300):
            raise ArticleFormError(
                "Publish button is disabled - form validation may have failed",
                url=self.current_url(),
            )

        publish.first.click()
        try:
            self.wait_for_url(ARTICLE_URL)
        except PlaywrightError:
            error = self.get_error_message()
            if error:
                raise ArticleFormError(f"Article was rejected: {error}", url=self.current_url())
            raise ArticleFormError("Still on the editor after publishing", url=self.current_url())

        self.settle()
        self.wait_visible(self.locator(self.ARTICLE_TITLE))

    def _is_visible_within(self, selector: str, timeout: int) -> bool:
        try:
            self.locator(selector).first.wait_for(state="visible", timeout=timeout)
        except PlaywrightError:
            return False
        return True
