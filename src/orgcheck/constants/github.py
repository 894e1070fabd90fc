"""GitHub REST API defaults."""

from __future__ import annotations

DEFAULT_API_BASE_URL: str = "https://api.github.com"
API_VERSION: str = "2022-11-28"
ACCEPT_HEADER: str = "application/vnd.github+json"
USER_AGENT: str = "orgcheck"

DEFAULT_TIMEOUT_SECONDS: float = 30.0
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_BACKOFF_SECONDS: float = 1.0
PAGE_SIZE: int = 100

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

# Installation tokens are refreshed this many seconds before they expire.
TOKEN_REFRESH_MARGIN_SECONDS: float = 60.0
