"""Remediation exceptions."""

from __future__ import annotations

from orgcheck.exceptions.base import OrgcheckError


class RemediationConflict(OrgcheckError):
    """Raised when an open pull request for the same fix already exists."""

    def __init__(self, repository: str, branch: str, pull_url: str | None = None) -> None:
        message = f"open pull request for branch '{branch}' already exists in {repository}"
        if pull_url:
            message = f"{message} ({pull_url})"
        super().__init__(message)
        self.repository = repository
        self.branch = branch
        self.pull_url = pull_url
