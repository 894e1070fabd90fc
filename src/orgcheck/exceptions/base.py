"""Root exception type."""

from __future__ import annotations


class OrgcheckError(Exception):
    """Base class for all orgcheck errors."""
