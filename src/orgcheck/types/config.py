"""Typed configuration structures for orgcheck settings."""

from __future__ import annotations

from dataclasses import dataclass

from orgcheck.constants.config import (
    DEFAULT_BOT_EMAIL,
    DEFAULT_BOT_NAME,
    DEFAULT_BRANCH_PREFIX,
    DEFAULT_EXEMPT_TOPICS,
    DEFAULT_TOKEN_ENV,
)
from orgcheck.constants.github import (
    DEFAULT_API_BASE_URL,
    DEFAULT_BACKOFF_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
)


@dataclass(frozen=True)
class ApiConfig:
    """Hosting-platform API connection settings."""

    base_url: str = DEFAULT_API_BASE_URL
    token_env: str = DEFAULT_TOKEN_ENV
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS


@dataclass(frozen=True)
class RemediationConfig:
    """Bot identity and branch naming for corrective pull requests."""

    enabled: bool = False
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    bot_name: str = DEFAULT_BOT_NAME
    bot_email: str = DEFAULT_BOT_EMAIL
    app_jwt_env: str | None = None
    installation_id: int | None = None


@dataclass(frozen=True)
class ExemptionPolicy:
    """Which repositories are marked exempt, or skipped, during enumeration."""

    repositories: tuple[str, ...] = ()
    topics: tuple[str, ...] = DEFAULT_EXEMPT_TOPICS
    archived: bool = True
    include_forks: bool = False
