"""
Credential Source

Decides which identity a run authenticates as:

    1. cached credentials (unless FORCE_NEW_USER)
    2. the fixed TEST_EMAIL/TEST_PASSWORD pair (USE_EXISTING_CREDENTIALS)
    3. a freshly minted user, signed up through the UI with retries, falling
       back to the fixed pair when signup keeps failing

Usage:
    source = CredentialSource(settings, store, UISignupWorkflow(browser, settings))
    credentials = source.resolve()
"""

import logging
import time
from typing import Callable, Optional

from conduit_e2e.config.env_config import Settings
from conduit_e2e.models import Credentials, SignupData
from conduit_e2e.pages.signup_page import SignupPage

from .data_generator import DataGenerator
from .exceptions import CredentialAcquisitionFailure, RetryExhaustedError
from .retry import SIGNUP_POLICY, RetryPolicy, retry_call
from .session_store import SessionStore

logger = logging.getLogger(__name__)

# Registers the given identity with the application; raises on failure
SignupWorkflow = Callable[[SignupData], None]


class UISignupWorkflow:
    """Sign a user up through /register in a fresh, always-closed browser context."""

    def __init__(self, browser, settings: Settings):
        self.browser = browser
        self.settings = settings

    def __call__(self, signup: SignupData) -> None:
        context = self.browser.new_context()
        try:
            page = context.new_page()
            page.set_default_timeout(self.settings.timeouts.action)
            signup_page = SignupPage(page, self.settings.base_url, self.settings.timeouts)
            signup_page.navigate()
            signup_page.settle()
            signup_page.sign_up(signup.username, signup.email, signup.password)
        finally:
            context.close()


class CredentialSource:
    """Resolve the credentials for this run, persisting them on success."""

    def __init__(
        self,
        settings: Settings,
        store: SessionStore,
        signup: SignupWorkflow,
        generate: Callable[[], SignupData] = DataGenerator.generate_signup_data,
        policy: RetryPolicy = SIGNUP_POLICY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.store = store
        self.signup = signup
        self.generate = generate
        self.policy = policy
        self._sleep = sleep
        # Identity registered by the last successful signup, if any
        self.minted: Optional[SignupData] = None

    def resolve(self) -> Credentials:
        """
        Raises:
            CredentialAcquisitionFailure: fixed credentials were requested but are
                not configured, or signup failed and there is nothing to fall back to.
        """
        if not self.settings.force_new_user:
            cached = self.store.load_credentials()
            if cached is not None:
                logger.info(f"Reusing cached credentials for {cached.email}")
                return cached

        if self.settings.use_existing_credentials:
            fixed = self._fixed_credentials()
            if fixed is None:
                raise CredentialAcquisitionFailure(
                    "USE_EXISTING_CREDENTIALS is set but TEST_EMAIL/TEST_PASSWORD are not configured"
                )
            logger.info(f"Using configured credentials for {fixed.email}")
            self.store.save_credentials(fixed)
            return fixed

        credentials = self._mint_or_fall_back()
        self.store.save_credentials(credentials)
        return credentials

    def _mint_or_fall_back(self) -> Credentials:
        signup = self.generate()
        try:
            retry_call(
                self.policy,
                self.signup,
                signup,
                operation=f"Signup of {signup.email}",
                sleep=self._sleep,
            )
        except RetryExhaustedError as e:
            fixed = self._fixed_credentials()
            if fixed is None:
                raise CredentialAcquisitionFailure(
                    f"Signup failed after {e.attempts} attempt(s) and no fallback "
                    f"credentials are configured: {e.last_error}"
                ) from e
            logger.warning(
                f"Signup failed after {e.attempts} attempt(s), falling back to {fixed.email}"
            )
            return fixed

        logger.info(f"Created new test user: {signup.email}")
        self.minted = signup
        return signup.credentials()

    def _fixed_credentials(self) -> Optional[Credentials]:
        if not self.settings.has_fallback_credentials:
            return None
        return Credentials(
            email=self.settings.fallback_email, password=self.settings.fallback_password
        )
