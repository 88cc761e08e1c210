"""Application configuration helpers."""

from __future__ import annotations

from .backend import BackendConfig, get_backend_config
from .env import env_flag, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .review import ReviewConfig, get_review_config

__all__ = [
    "BackendConfig",
    "CacheConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ReviewConfig",
    "configure_logging",
    "env_flag",
    "get_backend_config",
    "get_review_config",
    "require_env_var",
    "require_env_vars",
]
