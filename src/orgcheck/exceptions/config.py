"""Configuration-related exceptions."""

from __future__ import annotations

from orgcheck.exceptions.base import OrgcheckError


class ConfigError(OrgcheckError, ValueError):
    """Raised when orgcheck configuration or a rulepack is invalid."""
