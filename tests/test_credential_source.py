"""
Credential Source Tests

Covers the reuse / fixed / mint policy and the signup retry budget.
"""
import dataclasses
from unittest.mock import Mock

import pytest

from conduit_e2e.models import Credentials, SignupData
from conduit_e2e.services.credential_source import CredentialSource, UISignupWorkflow
from conduit_e2e.services.exceptions import CredentialAcquisitionFailure, SignupFailed

MINTED = SignupData(username="user12", email="user_12@test.com", password="Sx9!aa2211qq")
FIXED = Credentials("fixed@example.com", "fixed-pw")


def with_fallback(settings, **overrides):
    return dataclasses.replace(
        settings, fallback_email=FIXED.email, fallback_password=FIXED.password, **overrides
    )


class TestCredentialPolicy:
    """Test the credential priority order."""

    def setup_method(self):
        self.signup = Mock()
        self.sleep = Mock()
        self.generate = Mock(return_value=MINTED)

    def make_source(self, settings, store):
        return CredentialSource(
            settings, store, self.signup, generate=self.generate, sleep=self.sleep
        )

    def test_fresh_mint_persists_exact_credentials(self, settings, store):
        """Empty cache, no flags: the generated identity is signed up and cached."""
        credentials = self.make_source(settings, store).resolve()

        assert credentials == Credentials("user_12@test.com", "Sx9!aa2211qq")
        assert store.load_credentials() == credentials
        self.signup.assert_called_once_with(MINTED)

    def test_minted_identity_exposed(self, settings, store):
        source = self.make_source(settings, store)
        source.resolve()
        assert source.minted == MINTED

    def test_cached_credentials_reused(self, settings, store):
        cached = Credentials("cached@example.com", "cached-pw")
        store.save_credentials(cached)

        assert self.make_source(settings, store).resolve() == cached
        self.signup.assert_not_called()
        self.generate.assert_not_called()

    def test_force_new_user_bypasses_cache(self, settings, store):
        store.save_credentials(Credentials("cached@example.com", "cached-pw"))
        settings = dataclasses.replace(settings, force_new_user=True)

        credentials = self.make_source(settings, store).resolve()

        assert credentials.email == MINTED.email
        assert store.load_credentials().email == MINTED.email

    def test_use_existing_credentials(self, settings, store):
        settings = with_fallback(settings, use_existing_credentials=True)

        assert self.make_source(settings, store).resolve() == FIXED
        assert store.load_credentials() == FIXED
        self.signup.assert_not_called()

    def test_use_existing_without_pair_fails(self, settings, store):
        settings = dataclasses.replace(settings, use_existing_credentials=True)

        with pytest.raises(CredentialAcquisitionFailure):
            self.make_source(settings, store).resolve()

        assert not store.credentials_path.exists()

    def test_cache_wins_over_use_existing(self, settings, store):
        cached = Credentials("cached@example.com", "cached-pw")
        store.save_credentials(cached)
        settings = with_fallback(settings, use_existing_credentials=True)

        assert self.make_source(settings, store).resolve() == cached


class TestSignupRetries:
    """Test signup retries and fallback."""

    def setup_method(self):
        self.sleep = Mock()
        self.generate = Mock(return_value=MINTED)

    def test_transient_failure_then_success(self, settings, store):
        signup = Mock(side_effect=[ConnectionError("reset"), None])
        source = CredentialSource(settings, store, signup, generate=self.generate, sleep=self.sleep)

        assert source.resolve().email == MINTED.email
        assert signup.call_count == 2
        # Same identity on every attempt
        assert all(c.args == (MINTED,) for c in signup.call_args_list)
        self.sleep.assert_called_once_with(2.0)

    def test_three_failures_without_fallback(self, settings, store, auth_dir):
        """Signup failing three times with no fixed pair raises and writes nothing."""
        signup = Mock(side_effect=ConnectionError("network down"))
        source = CredentialSource(settings, store, signup, generate=self.generate, sleep=self.sleep)

        with pytest.raises(CredentialAcquisitionFailure) as exc_info:
            source.resolve()

        assert signup.call_count == 3
        assert [c.args[0] for c in self.sleep.call_args_list] == [2.0, 4.0]
        assert "network down" in str(exc_info.value)
        assert not auth_dir.exists()

    def test_three_failures_fall_back_to_fixed_pair(self, settings, store):
        signup = Mock(side_effect=SignupFailed("email has already been taken"))
        source = CredentialSource(
            with_fallback(settings), store, signup, generate=self.generate, sleep=self.sleep
        )

        assert source.resolve() == FIXED
        assert store.load_credentials() == FIXED
        assert source.minted is None


class TestUISignupWorkflow:
    """Test the browser-driven signup workflow."""

    def test_context_closed_on_failure(self, settings, browser, monkeypatch):
        sign_up = Mock(side_effect=SignupFailed("username has already been taken"))
        monkeypatch.setattr(
            "conduit_e2e.services.credential_source.SignupPage.sign_up", sign_up
        )
        monkeypatch.setattr("conduit_e2e.services.credential_source.SignupPage.navigate", Mock())
        monkeypatch.setattr("conduit_e2e.services.credential_source.SignupPage.settle", Mock())

        with pytest.raises(SignupFailed):
            UISignupWorkflow(browser, settings)(MINTED)

        assert len(browser.contexts_opened) == 1
        browser.contexts_opened[0].close.assert_called_once()
        sign_up.assert_called_once_with(MINTED.username, MINTED.email, MINTED.password)
