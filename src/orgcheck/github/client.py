"""Thin GitHub REST client with retry, pagination, and error classification."""

from __future__ import annotations

import base64
import logging
import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from orgcheck.constants.github import (
    ACCEPT_HEADER,
    API_VERSION,
    DEFAULT_API_BASE_URL,
    DEFAULT_BACKOFF_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    PAGE_SIZE,
    RETRYABLE_STATUS_CODES,
    USER_AGENT,
)
from orgcheck.exceptions import ApiError, ApiUnavailable, AuthError, FetchCancelled
from orgcheck.github.auth import TokenProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepoFile:
    """Decoded file content plus the blob sha needed to update or delete it."""

    path: str
    text: str
    sha: str


@dataclass(frozen=True)
class Committer:
    """Identity recorded on commits made through the contents API."""

    name: str
    email: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email}


class GitHubClient:
    """Read/write access to the hosting platform used by every orgcheck layer.

    Transient failures (connection errors, timeouts, 5xx, 429 and rate-limited
    403 responses) are retried with exponential backoff and end in
    ``ApiUnavailable``. Authentication failures raise ``AuthError`` at once.
    Any other transport failure or an undecodable body raises ``ApiError``.
    When ``cancel_event`` is set, the next request raises ``FetchCancelled``.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds
        self._session = session or requests.Session()
        self._sleep = sleep
        self.cancel_event = cancel_event or threading.Event()

    # Listing and reads

    def iter_org_repositories(self, organization: str) -> Iterator[dict[str, Any]]:
        """Yield repository payloads page by page; later pages load lazily."""
        url: str | None = f"{self._base_url}/orgs/{quote(organization)}/repos"
        params: dict[str, Any] | None = {"per_page": PAGE_SIZE, "type": "all", "sort": "full_name"}
        while url is not None:
            response = self._send("GET", url, params=params)
            assert response is not None
            payload = _decode(response)
            if not isinstance(payload, list):
                raise ApiError(f"unexpected repository listing payload for {organization}")
            yield from payload
            url = response.links.get("next", {}).get("url")
            params = None

    def get_file(self, repository: str, path: str, ref: str | None = None) -> RepoFile | None:
        """Return a decoded file, or ``None`` when it does not exist or is a directory."""
        response = self._send(
            "GET",
            self._contents_url(repository, path),
            params={"ref": ref} if ref else None,
            allow_404=True,
        )
        if response is None:
            return None
        payload = _decode(response)
        if not isinstance(payload, dict) or payload.get("type") != "file":
            return None
        raw = payload.get("content") or ""
        text = base64.b64decode(raw).decode("utf-8", errors="replace") if raw else ""
        return RepoFile(path=path, text=text, sha=str(payload.get("sha", "")))

    def get_file_text(self, repository: str, path: str, ref: str | None = None) -> str | None:
        repo_file = self.get_file(repository, path, ref)
        return repo_file.text if repo_file is not None else None

    def list_directory(self, repository: str, path: str, ref: str | None = None) -> tuple[str, ...] | None:
        """Return sorted entry names of a directory, or ``None`` when it is missing."""
        response = self._send(
            "GET",
            self._contents_url(repository, path),
            params={"ref": ref} if ref else None,
            allow_404=True,
        )
        if response is None:
            return None
        payload = _decode(response)
        if not isinstance(payload, list):
            return None
        return tuple(sorted(str(entry["name"]) for entry in payload if isinstance(entry, dict) and "name" in entry))

    def get_languages(self, repository: str) -> dict[str, int]:
        response = self._send("GET", f"{self._repo_url(repository)}/languages")
        assert response is not None
        payload = _decode(response)
        return {str(name): int(size) for name, size in payload.items()} if isinstance(payload, dict) else {}

    def get_branch_head(self, repository: str, branch: str) -> str:
        response = self._send("GET", f"{self._repo_url(repository)}/git/ref/heads/{quote(branch, safe='/')}")
        assert response is not None
        payload = _decode(response)
        target = payload.get("object") if isinstance(payload, dict) else None
        if not isinstance(target, dict) or not target.get("sha"):
            raise ApiError(f"branch {branch} of {repository} has no head commit")
        return str(target["sha"])

    def find_open_pull(self, repository: str, head: str) -> dict[str, Any] | None:
        """Return the first open pull request whose head is ``owner:branch``."""
        response = self._send(
            "GET",
            f"{self._repo_url(repository)}/pulls",
            params={"state": "open", "head": head, "per_page": PAGE_SIZE},
        )
        assert response is not None
        payload = _decode(response)
        if isinstance(payload, list) and payload:
            return payload[0]
        return None

    # Writes

    def create_or_reset_branch(self, repository: str, branch: str, sha: str) -> None:
        """Point ``branch`` at ``sha``, creating it or force-resetting a stale one."""
        response = self._send(
            "POST",
            f"{self._repo_url(repository)}/git/refs",
            json_body={"ref": f"refs/heads/{branch}", "sha": sha},
            allow_status=frozenset({422}),
        )
        if response is not None and response.status_code == 422:
            logger.debug("Branch %s exists in %s; resetting to %s", branch, repository, sha)
            self._send(
                "PATCH",
                f"{self._repo_url(repository)}/git/refs/heads/{quote(branch, safe='/')}",
                json_body={"sha": sha, "force": True},
            )

    def put_file(
        self,
        repository: str,
        path: str,
        *,
        content: str,
        message: str,
        branch: str,
        committer: Committer,
        sha: str | None = None,
    ) -> None:
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch,
            "committer": committer.to_dict(),
        }
        if sha:
            body["sha"] = sha
        self._send("PUT", self._contents_url(repository, path), json_body=body)

    def delete_file(
        self,
        repository: str,
        path: str,
        *,
        sha: str,
        message: str,
        branch: str,
        committer: Committer,
    ) -> None:
        self._send(
            "DELETE",
            self._contents_url(repository, path),
            json_body={"message": message, "sha": sha, "branch": branch, "committer": committer.to_dict()},
        )

    def create_pull(self, repository: str, *, title: str, head: str, base: str, body: str) -> dict[str, Any]:
        response = self._send(
            "POST",
            f"{self._repo_url(repository)}/pulls",
            json_body={"title": title, "head": head, "base": base, "body": body, "maintainer_can_modify": True},
        )
        assert response is not None
        payload = _decode(response)
        if not isinstance(payload, dict):
            raise ApiError(f"unexpected pull request payload for {repository}")
        return payload

    # Transport

    def _repo_url(self, repository: str) -> str:
        return f"{self._base_url}/repos/{quote(repository, safe='/')}"

    def _contents_url(self, repository: str, path: str) -> str:
        return f"{self._repo_url(repository)}/contents/{quote(path.strip('/'), safe='/')}"

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": ACCEPT_HEADER,
            "Authorization": f"Bearer {self._token_provider.token()}",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": API_VERSION,
        }

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        allow_404: bool = False,
        allow_status: frozenset[int] = frozenset(),
    ) -> requests.Response | None:
        last_problem = ""
        for attempt in range(self._max_retries + 1):
            if self.cancel_event.is_set():
                raise FetchCancelled(f"{method} {url} cancelled")
            if attempt:
                delay = self._backoff_seconds * (2 ** (attempt - 1))
                logger.debug("Retrying %s %s in %.1fs (%s)", method, url, delay, last_problem)
                self._sleep(delay)

            try:
                response = self._session.request(
                    method,
                    url,
                    headers=self._headers(),
                    params=params,
                    json=json_body,
                    timeout=self._timeout,
                )
            except (requests.ConnectionError, requests.Timeout, requests.exceptions.ChunkedEncodingError) as exc:
                last_problem = f"{type(exc).__name__}: {exc}"
                continue
            except requests.RequestException as exc:
                raise ApiError(f"{method} {url} failed: {type(exc).__name__}: {exc}") from exc

            status = response.status_code
            if status in allow_status:
                return response
            if status == 404 and allow_404:
                return None
            if status == 401:
                raise AuthError(f"{method} {url} rejected credentials (401)", status_code=status)
            if status == 403 and not _is_rate_limited(response):
                raise AuthError(f"{method} {url} forbidden (403): {_error_message(response)}", status_code=status)
            if status in RETRYABLE_STATUS_CODES or status == 403:
                last_problem = f"HTTP {status}"
                continue
            if status >= 400:
                raise ApiError(f"{method} {url} failed ({status}): {_error_message(response)}", status_code=status)
            return response

        raise ApiUnavailable(f"{method} {url} failed after {self._max_retries + 1} attempts ({last_problem})")


def _is_rate_limited(response: requests.Response) -> bool:
    return response.headers.get("X-RateLimit-Remaining") == "0" or "Retry-After" in response.headers


def _decode(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ApiError(
            f"invalid JSON from {response.url or 'the API'}: {exc}",
            status_code=response.status_code,
        ) from exc


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return str(payload)[:200]
