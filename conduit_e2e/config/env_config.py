"""
Environment Variable Configuration with Validation

Provides centralized environment variable management for the Conduit suite:
- Type validation (str, int, bool, path)
- Default values
- Validation rules (min/max, choices, patterns)
- Sensitive values masked in logs and dumps

Usage:
    from conduit_e2e.config.env_config import Config, Settings, validate_config

    # Access a single validated value
    base_url = Config.BASE_URL

    # Build the explicit settings value handed to the bootstrap components
    settings = Settings.from_env()

    # Validate all at startup (raises ConfigError if invalid)
    validate_config()
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from conduit_e2e.services.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class EnvVar:
    """Environment variable definition with validation."""

    name: str
    default: Any = None
    var_type: str = "str"  # str, int, bool, path
    required: bool = False
    description: str = ""
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    choices: Optional[List[Any]] = None
    pattern: Optional[str] = None
    validator: Optional[Callable[[Any], bool]] = None
    sensitive: bool = False

    def parse(self, value: str) -> Any:
        """Parse string value to target type."""
        if value is None:
            return None

        if self.var_type == "int":
            try:
                return int(value)
            except ValueError:
                raise ConfigError(f"{self.name}: '{value}' is not a valid integer")
        elif self.var_type == "bool":
            return value.strip().lower() in ("true", "1", "yes", "on")
        elif self.var_type == "path":
            path = Path(value).expanduser()
            if not path.is_absolute():
                path = Path.cwd() / path
            return path
        return value

    def validate(self, value: Any) -> tuple[bool, str]:
        """Validate parsed value. Returns (is_valid, error_message)."""
        if value is None:
            if self.required:
                return False, f"{self.name} is required but not set"
            return True, ""

        if self.var_type == "int":
            if self.min_value is not None and value < self.min_value:
                return False, f"{self.name}: value {value} is below minimum {self.min_value}"
            if self.max_value is not None and value > self.max_value:
                return False, f"{self.name}: value {value} exceeds maximum {self.max_value}"

        if self.choices is not None and value not in self.choices:
            return (
                False,
                f"{self.name}: '{value}' is not a valid choice. Must be one of: {self.choices}",
            )

        if self.pattern and self.var_type == "str":
            if not re.match(self.pattern, value):
                return False, f"{self.name}: '{value}' does not match required pattern"

        if self.validator:
            try:
                if not self.validator(value):
                    return False, f"{self.name}: custom validation failed for value '{value}'"
            except Exception as e:
                return False, f"{self.name}: validation error - {e}"

        return True, ""

    def get_value(self) -> Any:
        """Get validated value from environment."""
        raw_value = os.environ.get(self.name)

        if raw_value is None or raw_value == "":
            if self.required:
                raise ConfigError(f"Required environment variable {self.name} is not set")
            if self.var_type == "path" and self.default is not None:
                return self.parse(str(self.default))
            return self.default

        parsed = self.parse(raw_value)
        is_valid, error = self.validate(parsed)

        if not is_valid:
            raise ConfigError(error)

        return parsed


_URL_PATTERN = r"^https?://[^\s]+$"

# Define all environment variables
ENV_VARS: Dict[str, EnvVar] = {
    # Target application
    "BASE_URL": EnvVar(
        name="BASE_URL",
        default="https://conduit.bondaracademy.com",
        pattern=_URL_PATTERN,
        description="Conduit web application URL",
    ),
    "API_BASE_URL": EnvVar(
        name="API_BASE_URL",
        default=None,  # Computed from BASE_URL
        pattern=_URL_PATTERN,
        description="Conduit REST API URL",
    ),
    # Session cache
    "AUTH_DIR": EnvVar(
        name="AUTH_DIR",
        default=".auth",
        var_type="path",
        description="Directory holding credentials.json and user.json",
    ),
    "AUTH_LOCK_TIMEOUT": EnvVar(
        name="AUTH_LOCK_TIMEOUT",
        default=120,
        var_type="int",
        min_value=1,
        max_value=3600,
        description="Seconds to wait for the session cache lock",
    ),
    # Credentials
    "TEST_EMAIL": EnvVar(
        name="TEST_EMAIL", default=None, description="Fixed fallback account email"
    ),
    "TEST_PASSWORD": EnvVar(
        name="TEST_PASSWORD",
        default=None,
        sensitive=True,
        description="Fixed fallback account password",
    ),
    # Bootstrap flags
    "FORCE_NEW_USER": EnvVar(
        name="FORCE_NEW_USER",
        default=False,
        var_type="bool",
        description="Ignore cached credentials and mint a new user",
    ),
    "USE_EXISTING_CREDENTIALS": EnvVar(
        name="USE_EXISTING_CREDENTIALS",
        default=False,
        var_type="bool",
        description="Use TEST_EMAIL/TEST_PASSWORD instead of signing up",
    ),
    "SKIP_API_BOOTSTRAP": EnvVar(
        name="SKIP_API_BOOTSTRAP",
        default=False,
        var_type="bool",
        description="Establish sessions through the login form only",
    ),
    "CI": EnvVar(
        name="CI",
        default=False,
        var_type="bool",
        description="Running under CI (implies SKIP_API_BOOTSTRAP)",
    ),
    "REFRESH_STORAGE_STATE": EnvVar(
        name="REFRESH_STORAGE_STATE",
        default=False,
        var_type="bool",
        description="Discard the cached storage state before validation",
    ),
    "FORCE_BOOTSTRAP": EnvVar(
        name="FORCE_BOOTSTRAP",
        default=False,
        var_type="bool",
        description="Bootstrap script: wipe the cache and mint a fresh user",
    ),
    # Browser settings
    "HEADLESS": EnvVar(
        name="HEADLESS",
        default=True,
        var_type="bool",
        description="Run the browser headless",
    ),
    "SLOW_MO": EnvVar(
        name="SLOW_MO",
        default=0,
        var_type="int",
        min_value=0,
        max_value=10000,
        description="Delay between browser operations (ms)",
    ),
    # Timeouts (milliseconds)
    "NAVIGATION_TIMEOUT": EnvVar(
        name="NAVIGATION_TIMEOUT",
        default=30000,
        var_type="int",
        min_value=1000,
        max_value=120000,
        description="Navigation timeout (ms)",
    ),
    "ACTION_TIMEOUT": EnvVar(
        name="ACTION_TIMEOUT",
        default=15000,
        var_type="int",
        min_value=1000,
        max_value=120000,
        description="Element wait timeout (ms)",
    ),
    "LOGIN_REDIRECT_TIMEOUT": EnvVar(
        name="LOGIN_REDIRECT_TIMEOUT",
        default=10000,
        var_type="int",
        min_value=1000,
        max_value=120000,
        description="Wait for the login/signup redirect (ms)",
    ),
    # Logging
    "LOG_LEVEL": EnvVar(
        name="LOG_LEVEL",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        description="Logging verbosity",
    ),
    # Browser tests
    "E2E_ENABLED": EnvVar(
        name="E2E_ENABLED",
        default=False,
        var_type="bool",
        description="Run the browser tests against the live application",
    ),
}


class ConfigMeta(type):
    """Metaclass to provide attribute access to config values."""

    _cache: Dict[str, Any] = {}

    def __getattr__(cls, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        if name in cls._cache:
            return cls._cache[name]

        if name in ENV_VARS:
            value = ENV_VARS[name].get_value()
            cls._cache[name] = value
            return value

        raise AttributeError(f"Unknown config variable: {name}")


class Config(metaclass=ConfigMeta):
    """
    Configuration class with environment variable access.

    Access config values as class attributes:
        Config.BASE_URL  # Returns str
        Config.HEADLESS  # Returns bool
        Config.AUTH_DIR  # Returns Path
    """

    @classmethod
    def get(cls, name: str, default: Any = None) -> Any:
        """Get config value with optional default."""
        try:
            return getattr(cls, name)
        except AttributeError:
            return default

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the config cache (useful for testing)."""
        cls._cache.clear()


def validate_config(strict: bool = False) -> Dict[str, Any]:
    """
    Validate all environment variables at startup.

    Args:
        strict: If True, raise on any validation error.
                If False, log warnings for optional vars.

    Returns:
        Dict of validated config values

    Raises:
        ConfigError: If required variables are missing or invalid
    """
    errors = []
    warnings = []
    validated = {}

    for name, env_var in ENV_VARS.items():
        try:
            value = env_var.get_value()
            validated[name] = value

            if env_var.sensitive:
                log_value = "***" if value else "not set"
            else:
                log_value = value
            logger.debug(f"Config: {name} = {log_value}")

        except ConfigError as e:
            if env_var.required or strict:
                errors.append(str(e))
            else:
                warnings.append(str(e))

    if validated.get("API_BASE_URL") is None and validated.get("BASE_URL"):
        validated["API_BASE_URL"] = f"{validated['BASE_URL'].rstrip('/')}/api"

    for warning in warnings:
        logger.warning(f"Config warning: {warning}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.error(error_msg)
        raise ConfigError(error_msg)

    logger.info(f"Configuration validated: {len(validated)} variables loaded")
    return validated


@dataclass(frozen=True)
class TimeoutSettings:
    """Per-operation bounds in milliseconds; every wait in the suite uses one."""

    navigation: int = 30000
    action: int = 15000
    login_redirect: int = 10000
    network_idle: int = 15000
    marker: int = 5000


@dataclass(frozen=True)
class Settings:
    """Explicit configuration value injected into the bootstrap components."""

    base_url: str = "https://conduit.bondaracademy.com"
    api_base_url: str = "https://conduit.bondaracademy.com/api"
    auth_dir: Path = field(default_factory=lambda: Path.cwd() / ".auth")
    fallback_email: Optional[str] = None
    fallback_password: Optional[str] = None
    force_new_user: bool = False
    use_existing_credentials: bool = False
    skip_api_bootstrap: bool = False
    is_ci: bool = False
    refresh_storage_state: bool = False
    force_bootstrap: bool = False
    headless: bool = True
    slow_mo: int = 0
    lock_timeout: int = 120
    timeouts: TimeoutSettings = field(default_factory=TimeoutSettings)

    @property
    def has_fallback_credentials(self) -> bool:
        return bool(self.fallback_email and self.fallback_password)

    @classmethod
    def from_env(cls) -> "Settings":
        """Read every bootstrap setting from the environment (uncached)."""
        values = validate_config(strict=True)
        navigation = values["NAVIGATION_TIMEOUT"]
        return cls(
            base_url=values["BASE_URL"].rstrip("/"),
            api_base_url=values["API_BASE_URL"].rstrip("/"),
            auth_dir=values["AUTH_DIR"],
            fallback_email=values["TEST_EMAIL"],
            fallback_password=values["TEST_PASSWORD"],
            force_new_user=values["FORCE_NEW_USER"],
            use_existing_credentials=values["USE_EXISTING_CREDENTIALS"],
            skip_api_bootstrap=values["SKIP_API_BOOTSTRAP"],
            is_ci=values["CI"],
            refresh_storage_state=values["REFRESH_STORAGE_STATE"],
            force_bootstrap=values["FORCE_BOOTSTRAP"],
            headless=values["HEADLESS"],
            slow_mo=values["SLOW_MO"],
            lock_timeout=values["AUTH_LOCK_TIMEOUT"],
            timeouts=TimeoutSettings(
                navigation=navigation,
                action=values["ACTION_TIMEOUT"],
                login_redirect=values["LOGIN_REDIRECT_TIMEOUT"],
                network_idle=min(navigation, 15000),
            ),
        )
