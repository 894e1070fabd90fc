"""Repository enumeration, snapshot fetching, and audit orchestration."""

from __future__ import annotations

from typing import Any

__all__ = ["enumerate_repositories", "fetch_snapshot", "run_audit"]


def __getattr__(name: str) -> Any:
    """Lazily expose scanner APIs to avoid import cycles at package import time."""
    if name == "run_audit":
        from .orchestrator import run_audit

        return run_audit
    if name == "enumerate_repositories":
        from .enumerator import enumerate_repositories

        return enumerate_repositories
    if name == "fetch_snapshot":
        from .fetch import fetch_snapshot

        return fetch_snapshot
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
