"""GitHub API access for enumeration, snapshot fetches, and remediation."""

from .auth import (
    InstallationTokenProvider,
    StaticTokenProvider,
    TokenProvider,
    resolve_bot_token_provider,
    resolve_token_provider,
)
from .client import Committer, GitHubClient, RepoFile

__all__ = [
    "Committer",
    "GitHubClient",
    "InstallationTokenProvider",
    "RepoFile",
    "StaticTokenProvider",
    "TokenProvider",
    "resolve_bot_token_provider",
    "resolve_token_provider",
]
