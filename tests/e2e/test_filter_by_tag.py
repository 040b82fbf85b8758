"""
Filter By Tag E2E Tests
"""
import pytest
from playwright.sync_api import Page

from conduit_e2e.pages import ArticlePage, HomePage
from conduit_e2e.services.data_generator import DataGenerator

pytestmark = pytest.mark.e2e


@pytest.fixture
def tagged_article(api_client):
    tag = f"{DataGenerator.generate_tag()}{DataGenerator.generate_string(4).lower()}"
    article = DataGenerator.generate_article_data(tag=tag)
    slug = api_client.create_article(article)["article"]["slug"]

    yield tag, article, slug

    api_client.delete_article(slug)


class TestFilterByTag:
    """Test the tag feed."""

    def test_api_filter_returns_tagged_article(self, api_client, tagged_article):
        tag, article, slug = tagged_article

        body = api_client.get_articles_by_tag(tag)

        assert body["articlesCount"] >= 1
        assert slug in [a["slug"] for a in body["articles"]]
        assert all(tag in a["tagList"] for a in body["articles"])

    def test_click_tag_filters_feed(self, authenticated_page: Page, e2e_settings, tagged_article):
        tag, article, slug = tagged_article
        article_page = ArticlePage(authenticated_page, e2e_settings.base_url, e2e_settings.timeouts)
        article_page.navigate_to_article(slug)

        home = HomePage(authenticated_page, e2e_settings.base_url, e2e_settings.timeouts)
        home.click_tag(tag)

        assert tag in home.get_filtered_tag()
        assert home.is_article_visible(article.title)

    @pytest.mark.smoke
    def test_popular_tags_listed(self, authenticated_page: Page, e2e_settings, api_client):
        home = HomePage(authenticated_page, e2e_settings.base_url, e2e_settings.timeouts)
        home.navigate()
        home.wait_visible(home.locator(home.POPULAR_TAGS))

        assert set(home.get_popular_tags()) & set(api_client.get_tags())
