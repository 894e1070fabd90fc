"""Scanner run-control exceptions."""

from __future__ import annotations

from orgcheck.exceptions.base import OrgcheckError


class FetchCancelled(OrgcheckError):
    """Raised inside a worker when the run was cancelled before its fetch finished."""
