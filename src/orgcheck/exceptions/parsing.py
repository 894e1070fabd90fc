"""Parsing-related exceptions."""

from __future__ import annotations

from orgcheck.exceptions.base import OrgcheckError


class MalformedConfig(OrgcheckError, ValueError):
    """Raised when a fetched repository file cannot be parsed as its expected format."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
