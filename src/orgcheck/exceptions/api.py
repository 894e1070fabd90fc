"""Hosting-platform API exceptions."""

from __future__ import annotations

from orgcheck.exceptions.base import OrgcheckError


class ApiError(OrgcheckError):
    """Base class for errors talking to the hosting platform."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiUnavailable(ApiError):
    """Raised when the API stays unreachable after all retries."""


class AuthError(ApiError):
    """Raised when credentials are missing, invalid, or expired. Never retried."""
