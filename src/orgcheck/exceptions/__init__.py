"""Shared exception hierarchy for orgcheck."""

from __future__ import annotations

from .api import ApiError, ApiUnavailable, AuthError
from .base import OrgcheckError
from .config import ConfigError
from .parsing import MalformedConfig
from .remediation import RemediationConflict
from .scanner import FetchCancelled

__all__ = [
    "ApiError",
    "ApiUnavailable",
    "AuthError",
    "ConfigError",
    "FetchCancelled",
    "MalformedConfig",
    "OrgcheckError",
    "RemediationConflict",
]
