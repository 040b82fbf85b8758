"""
Conduit API Client

Thin wrapper over the Conduit REST API, used for test preconditions and the
API session-bootstrap strategy.

Usage:
    client = ConduitApiClient("https://conduit.bondaracademy.com/api")
    body = client.login(Credentials("me@example.com", "secret"))
    client.create_article(ArticleData("Title", "About", "Body", ["tag"]))
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from conduit_e2e.models import ArticleData, Credentials, UserSettings

from .exceptions import ApiError
from .retry import API_LOGIN_POLICY, RetryPolicy, retry_call

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
LOGIN_TIMEOUT_STEP = 10.0


class ConduitApiClient:
    """requests-based client holding the JWT of the last successful login."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        login_policy: RetryPolicy = API_LOGIN_POLICY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self.login_policy = login_policy
        self._sleep = sleep
        self.token: Optional[str] = None

    def close(self) -> None:
        self.session.close()

    # =========================================================================
    # Authentication
    # =========================================================================

    def login(self, credentials: Credentials) -> Dict[str, Any]:
        """
        POST /users/login and remember the token.

        Retried with exponential backoff; each attempt gets a longer timeout.

        Returns:
            The full response body, ``{"user": {"token": ..., ...}}``.

        Raises:
            ValueError: missing email or password.
            RetryExhaustedError: every attempt failed (last ApiError attached).
        """
        if not credentials.email or not credentials.password:
            raise ValueError("Email and password are required for login")

        attempt = {"n": 0}

        def attempt_login() -> Dict[str, Any]:
            timeout = self.timeout + attempt["n"] * LOGIN_TIMEOUT_STEP
            attempt["n"] += 1
            body = self._request(
                "post",
                "/users/login",
                action="Login",
                json={"user": credentials.to_dict()},
                timeout=timeout,
            )
            user = body.get("user") if isinstance(body, dict) else None
            if not isinstance(user, dict) or not user.get("token"):
                raise ApiError("Login response missing user token")
            return body

        body = retry_call(
            self.login_policy,
            attempt_login,
            operation="API login",
            retry_on=(ApiError, requests.RequestException),
            sleep=self._sleep,
        )
        self.token = body["user"]["token"]
        logger.info(f"API login successful for {credentials.email}")
        return body

    def set_token(self, token: str) -> None:
        self.token = token

    # =========================================================================
    # Articles
    # =========================================================================

    def create_article(self, article: ArticleData) -> Dict[str, Any]:
        """POST /articles. Returns ``{"article": {...}}``."""
        self._require_token("create article")
        if not article.title or not article.body:
            raise ValueError("Article title and body are required")

        body = self._request(
            "post", "/articles", action="Failed to create article", json={"article": article.to_api()}
        )
        logger.info(f"Created article '{article.title}' via API")
        return body

    def get_article(self, slug: str) -> Dict[str, Any]:
        self._require_slug(slug)
        return self._request("get", f"/articles/{slug}", action="Failed to get article")

    def update_article(self, slug: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """PUT /articles/<slug> with a partial article payload."""
        self._require_token("update article")
        self._require_slug(slug)
        return self._request(
            "put", f"/articles/{slug}", action="Failed to update article", json={"article": updates}
        )

    def delete_article(self, slug: str) -> None:
        self._require_token("delete article")
        self._require_slug(slug)
        self._request("delete", f"/articles/{slug}", action="Failed to delete article")
        logger.info(f"Deleted article {slug} via API")

    def get_articles_by_tag(self, tag: str, limit: int = 10, offset: int = 0) -> Dict[str, Any]:
        """
        GET /articles filtered by tag.

        Returns ``{"articles": [...], "articlesCount": n}``.
        """
        if not tag or not tag.strip():
            raise ValueError("Tag is required")
        if limit < 1 or limit > 100:
            raise ValueError("Limit must be between 1 and 100")
        if offset < 0:
            raise ValueError("Offset must be non-negative")

        return self._request(
            "get",
            "/articles",
            action="Failed to get articles by tag",
            params={"tag": tag, "limit": limit, "offset": offset},
        )

    def get_tags(self) -> List[str]:
        body = self._request("get", "/tags", action="Failed to get tags")
        return list(body.get("tags", []))

    # =========================================================================
    # User
    # =========================================================================

    def get_current_user(self) -> Dict[str, Any]:
        self._require_token("get current user")
        return self._request("get", "/user", action="Failed to get current user")

    def update_user_settings(self, settings: UserSettings) -> Dict[str, Any]:
        self._require_token("update user settings")
        payload = settings.to_dict()
        if not payload:
            raise ValueError("At least one setting field is required")
        return self._request(
            "put", "/user", action="Failed to update user settings", json={"user": payload}
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Token {self.token}"}
        return {}

    def _require_token(self, operation: str) -> None:
        if not self.token:
            raise ApiError(f"Authentication required to {operation}")

    @staticmethod
    def _require_slug(slug: str) -> None:
        if not slug or not slug.strip():
            raise ValueError("Article slug is required")

    def _request(self, method: str, path: str, action: str, **kwargs) -> Dict[str, Any]:
        kwargs.setdefault("timeout", self.timeout)
        response = self.session.request(
            method.upper(), f"{self.base_url}{path}", headers=self._headers(), **kwargs
        )

        if not response.ok:
            raise ApiError(action, status=response.status_code, body=response.text)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{action}: unparseable response ({e})", status=response.status_code)
