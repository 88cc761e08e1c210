"""Review backend connection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    ShouldCacheHook,
)

BACKEND_URL_ENV = "COURTDESK_BACKEND_URL"
API_TOKEN_ENV = "COURTDESK_API_TOKEN"
BACKEND_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True, slots=True)
class BackendConfig:
    resilience: ResilienceConfig
    api_token: str | None = None


def get_backend_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> BackendConfig:
    values = require_env_vars((BACKEND_URL_ENV,))
    token = os.getenv(API_TOKEN_ENV) or None
    headers = {"Authorization": f"Bearer {token}"} if token else None

    return BackendConfig(
        resilience=resilience
        or ResilienceConfig(
            name="review-backend",
            base_url=values[BACKEND_URL_ENV].rstrip("/"),
            timeout_seconds=BACKEND_TIMEOUT_SECONDS,
            retry=RetryPolicy(),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=CacheConfig(should_cache=cache_predicate),
            default_headers=headers,
        ),
        api_token=token,
    )
