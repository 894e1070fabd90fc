"""Token providers for read access and for the remediation bot identity."""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Protocol

import requests

from orgcheck.constants.github import (
    ACCEPT_HEADER,
    API_VERSION,
    DEFAULT_API_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    TOKEN_REFRESH_MARGIN_SECONDS,
    USER_AGENT,
)
from orgcheck.exceptions import ApiUnavailable, AuthError
from orgcheck.types import ApiConfig, RemediationConfig

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    def token(self) -> str:
        ...


class StaticTokenProvider:
    """Long-lived token such as a personal access token or a CI-provided token."""

    def __init__(self, token: str) -> None:
        if not token:
            raise AuthError("empty API token")
        self._token = token

    def token(self) -> str:
        return self._token


class InstallationTokenProvider:
    """Exchange an app JWT for short-lived installation tokens, cached until near expiry."""

    def __init__(
        self,
        app_jwt: str,
        installation_id: int,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not app_jwt:
            raise AuthError("empty app JWT")
        self._app_jwt = app_jwt
        self._installation_id = installation_id
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._clock = clock
        self._timeout = timeout
        self._lock = threading.Lock()
        self._token: str | None = None
        self._expires_at = 0.0

    def token(self) -> str:
        with self._lock:
            if self._token is None or self._clock() >= self._expires_at - TOKEN_REFRESH_MARGIN_SECONDS:
                self._token, self._expires_at = self._exchange()
            return self._token

    def _exchange(self) -> tuple[str, float]:
        url = f"{self._base_url}/app/installations/{self._installation_id}/access_tokens"
        try:
            response = self._session.post(
                url,
                headers={
                    "Accept": ACCEPT_HEADER,
                    "Authorization": f"Bearer {self._app_jwt}",
                    "User-Agent": USER_AGENT,
                    "X-GitHub-Api-Version": API_VERSION,
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ApiUnavailable(f"token exchange failed: {exc}") from exc

        if response.status_code in (401, 403, 404):
            raise AuthError(
                f"installation token exchange rejected ({response.status_code})",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise ApiUnavailable(
                f"installation token exchange failed ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiUnavailable("installation token exchange returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise AuthError("installation token exchange returned no token")
        token = payload.get("token")
        if not isinstance(token, str) or not token:
            raise AuthError("installation token exchange returned no token")
        expires_at = _parse_expiry(payload.get("expires_at"), fallback=self._clock() + 3600)
        logger.debug("Obtained installation token for %d", self._installation_id)
        return token, expires_at


def resolve_token_provider(api: ApiConfig, environ: Mapping[str, str] | None = None) -> StaticTokenProvider:
    """Build the read-access token provider from the configured environment variable."""
    env = os.environ if environ is None else environ
    token = env.get(api.token_env, "").strip()
    if not token:
        raise AuthError(f"environment variable {api.token_env} is not set")
    return StaticTokenProvider(token)


def resolve_bot_token_provider(
    remediation: RemediationConfig,
    api: ApiConfig,
    fallback: TokenProvider,
    environ: Mapping[str, str] | None = None,
) -> TokenProvider:
    """Build the bot identity's provider; without app settings the read token is reused."""
    if remediation.app_jwt_env is None or remediation.installation_id is None:
        return fallback
    env = os.environ if environ is None else environ
    app_jwt = env.get(remediation.app_jwt_env, "").strip()
    if not app_jwt:
        raise AuthError(f"environment variable {remediation.app_jwt_env} is not set")
    return InstallationTokenProvider(
        app_jwt,
        remediation.installation_id,
        base_url=api.base_url,
        timeout=api.timeout_seconds,
    )


def _parse_expiry(value: object, *, fallback: float) -> float:
    if not isinstance(value, str):
        return fallback
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return fallback
