"""Configuration for the Conduit E2E suite."""

from .env_config import (
    ENV_VARS,
    Config,
    EnvVar,
    Settings,
    TimeoutSettings,
    validate_config,
)

__all__ = [
    "ENV_VARS",
    "Config",
    "EnvVar",
    "Settings",
    "TimeoutSettings",
    "validate_config",
]
