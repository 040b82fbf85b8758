"""
Error taxonomy for session bootstrap and the Conduit API client.

Fatal kinds raised to callers:
    CredentialAcquisitionFailure - no identity could be obtained
    SessionEstablishmentFailure  - neither API nor UI produced a logged-in session
    SessionValidationFailure     - the cached session never passed the logged-in check

Everything else is either absorbed locally (TransientUIFailure) or promoted
to one of the kinds above before reaching a test.
"""

from typing import Optional


class ConduitE2EError(Exception):
    """Base class for all suite errors."""


class ConfigError(ConduitE2EError):
    """Raised when configuration validation fails."""


class CredentialAcquisitionFailure(ConduitE2EError):
    """Signup exhausted its retries and no fallback credentials are configured."""


class SessionEstablishmentFailure(ConduitE2EError):
    """Both establishment strategies failed to produce an authenticated snapshot."""

    def __init__(
        self,
        message: str,
        stage: str = "",
        url: Optional[str] = None,
        banner: Optional[str] = None,
    ):
        self.stage = stage
        self.url = url
        self.banner = banner
        details = [message]
        if stage:
            details.append(f"stage={stage}")
        if url:
            details.append(f"url={url}")
        if banner:
            details.append(f"error banner: {banner}")
        super().__init__("; ".join(details))


class SessionValidationFailure(ConduitE2EError):
    """A snapshot did not pass the logged-in check within the retry budget."""

    def __init__(self, attempts: int, url: Optional[str] = None):
        self.attempts = attempts
        self.url = url
        message = (
            f"Failed to verify authenticated session after {attempts} "
            "bootstrap attempt(s) refreshing the storage state"
        )
        if url:
            message += f" (last url: {url})"
        super().__init__(message)


class TransientUIFailure(ConduitE2EError):
    """A bounded, retryable UI condition (element not ready, navigation pending)."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(f"{message} (url: {url})" if url else message)


class LoginFailed(ConduitE2EError):
    """The login form rejected the credentials or never redirected."""

    def __init__(self, banner: str = "", url: Optional[str] = None):
        self.banner = banner
        self.url = url
        if banner:
            message = f"Login failed: {banner}"
        else:
            message = "Login failed - still on login page"
        super().__init__(message)


class SignupFailed(ConduitE2EError):
    """The signup form reported an error instead of redirecting."""

    def __init__(self, banner: str = "", url: Optional[str] = None):
        self.banner = banner
        self.url = url
        super().__init__(f"Signup failed: {banner}" if banner else "Signup failed")


class ApiError(ConduitE2EError):
    """Non-2xx or malformed response from the Conduit API."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        self.status = status
        self.body = body
        detailed = message
        if status is not None:
            detailed = f"{message}: {status}"
        if body:
            detailed = f"{detailed} - {body}"
        super().__init__(detailed)


class RetryExhaustedError(ConduitE2EError):
    """Raised by retry_call once a RetryPolicy budget is spent."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} failed after {attempts} attempt(s): {last_error}")


class CacheLockTimeout(ConduitE2EError):
    """Another process held the session cache lock for too long."""

    def __init__(self, lock_path, timeout: float):
        self.lock_path = lock_path
        self.timeout = timeout
        super().__init__(f"Could not acquire session cache lock {lock_path} within {timeout}s")


class ArticleFormError(ConduitE2EError):
    """The editor rejected the article or never navigated to the article view."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(f"{message} (url: {url})" if url else message)
