"""
Session Bootstrap

State machine that hands tests a validated, cached storage state:

    CHECK_CACHE -> VALIDATE            snapshot cached, no forced refresh
    CHECK_CACHE -> BOOTSTRAP           no snapshot, refresh forced, or new user forced
                                       (the last wipes the whole cache first)
    BOOTSTRAP   -> VALIDATE            credentials resolved, session established
    VALIDATE    -> READY               logged-in check passed
    VALIDATE    -> BOOTSTRAP           check failed, budget left (cache invalidated)
    VALIDATE    -> FAILED              check failed, budget spent
    BOOTSTRAP   -> FAILED              credentials or establishment failed

Usage:
    bootstrap = SessionBootstrap.for_browser(browser, Settings.from_env())
    with bootstrap.authenticated_context() as context:
        page = context.new_page()
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, Optional

from conduit_e2e.config.env_config import Settings
from conduit_e2e.models import Credentials

from .credential_source import CredentialSource, UISignupWorkflow
from .exceptions import ConduitE2EError, SessionValidationFailure
from .retry import VALIDATION_POLICY, RetryPolicy
from .session_establisher import SessionEstablisher
from .session_store import SessionStore
from .session_validator import SessionValidator

logger = logging.getLogger(__name__)


class BootstrapState(Enum):
    CHECK_CACHE = "check_cache"
    BOOTSTRAP = "bootstrap"
    VALIDATE = "validate"
    READY = "ready"
    FAILED = "failed"


class SessionBootstrap:
    """Owns the cache check, (re-)bootstrap and validation loop for one run."""

    def __init__(
        self,
        browser,
        settings: Settings,
        store: SessionStore,
        credential_source: CredentialSource,
        establisher: SessionEstablisher,
        validator: SessionValidator,
        policy: RetryPolicy = VALIDATION_POLICY,
    ):
        self.browser = browser
        self.settings = settings
        self.store = store
        self.credential_source = credential_source
        self.establisher = establisher
        self.validator = validator
        self.policy = policy
        self.state = BootstrapState.CHECK_CACHE
        self.validation_attempts = 0
        self._credentials: Optional[Credentials] = None
        self._snapshot: Optional[Dict[str, Any]] = None

    @classmethod
    def for_browser(cls, browser, settings: Settings) -> "SessionBootstrap":
        """Wire the default collaborators around a Playwright browser."""
        store = SessionStore(settings.auth_dir)
        return cls(
            browser,
            settings,
            store,
            credential_source=CredentialSource(settings, store, UISignupWorkflow(browser, settings)),
            establisher=SessionEstablisher(browser, settings, store),
            validator=SessionValidator(browser, settings),
        )

    def resolve_credentials(self) -> Credentials:
        """Credentials for this run, resolved on first use."""
        if self._credentials is None:
            self._credentials = self.credential_source.resolve()
        return self._credentials

    def ensure_storage_state(self) -> Dict[str, Any]:
        """
        Return a storage state that passed the logged-in check.

        Repeated calls on a READY instance return the same snapshot without
        touching the network.

        Raises:
            CredentialAcquisitionFailure, SessionEstablishmentFailure,
            SessionValidationFailure, CacheLockTimeout
        """
        if self.state is BootstrapState.READY and self._snapshot is not None:
            return self._snapshot

        with self.store.lock(timeout=self.settings.lock_timeout):
            self._snapshot = self._run()
        return self._snapshot

    @contextmanager
    def authenticated_context(self, **context_args) -> Iterator[Any]:
        """Yield a browser context built from the validated snapshot."""
        storage_state = self.ensure_storage_state()
        context = self.browser.new_context(storage_state=storage_state, **context_args)
        try:
            yield context
        finally:
            context.close()

    def _run(self) -> Dict[str, Any]:
        self.state = BootstrapState.CHECK_CACHE
        self.validation_attempts = 0
        snapshot: Optional[Dict[str, Any]] = None

        while True:
            logger.debug(f"Session bootstrap state: {self.state.value}")

            if self.state is BootstrapState.CHECK_CACHE:
                if self.settings.force_new_user:
                    logger.info("FORCE_NEW_USER set, discarding cached session and credentials")
                    self.store.clear()
                    self.state = BootstrapState.BOOTSTRAP
                    continue
                if self.settings.refresh_storage_state:
                    logger.info("Refreshing storage state on request")
                    self.store.delete_storage_state()
                snapshot = self.store.read_storage_state()
                self.state = BootstrapState.VALIDATE if snapshot else BootstrapState.BOOTSTRAP

            elif self.state is BootstrapState.BOOTSTRAP:
                try:
                    credentials = self.resolve_credentials()
                    snapshot = self.establisher.establish(credentials)
                except ConduitE2EError:
                    self.state = BootstrapState.FAILED
                    raise
                # Invalidation drops both files; keep the identity for the next run
                self.store.save_credentials(credentials)
                self.state = BootstrapState.VALIDATE

            elif self.state is BootstrapState.VALIDATE:
                self.validation_attempts += 1
                if self.validator.is_valid(snapshot):
                    logger.info("Authenticated session verified")
                    self.state = BootstrapState.READY
                    return snapshot

                if self.validation_attempts >= self.policy.max_attempts:
                    self.state = BootstrapState.FAILED
                    self.store.delete_storage_state()
                    raise SessionValidationFailure(
                        self.validation_attempts, url=self.validator.last_url
                    )

                logger.warning(
                    f"Session validation attempt {self.validation_attempts}/"
                    f"{self.policy.max_attempts} failed, re-bootstrapping"
                )
                try:
                    # Pin the identity before invalidation removes the cached record
                    self.resolve_credentials()
                except ConduitE2EError:
                    self.state = BootstrapState.FAILED
                    raise
                self.store.invalidate()
                self.state = BootstrapState.BOOTSTRAP
