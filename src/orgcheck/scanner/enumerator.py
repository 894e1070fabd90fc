"""Repository enumeration with exemption marking."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterator
from dataclasses import replace
from typing import Any, Protocol

from orgcheck.model import RepositoryRef
from orgcheck.types import ExemptionPolicy

logger = logging.getLogger(__name__)


class RepositoryLister(Protocol):
    def iter_org_repositories(self, organization: str) -> Iterator[dict[str, Any]]:
        ...


def enumerate_repositories(
    client: RepositoryLister,
    organization: str,
    exemptions: ExemptionPolicy,
) -> Iterator[RepositoryRef]:
    """Yield every repository of ``organization`` with its exemption marking.

    Pages are requested only as the iterator is consumed. Exempt repositories,
    forks included unless ``exemptions.include_forks`` is set, are still
    yielded so they appear in the report.
    """
    for payload in client.iter_org_repositories(organization):
        ref = repository_ref(payload, organization)
        reason = exemption_reason(ref, exemptions)
        if reason:
            logger.debug("Marking %s exempt: %s", ref.full_name, reason)
            ref = replace(ref, exempt=True, exempt_reason=reason)
        yield ref


def repository_ref(payload: dict[str, Any], organization: str) -> RepositoryRef:
    """Build a RepositoryRef from a repository listing payload."""
    name = str(payload.get("name") or "")
    full_name = str(payload.get("full_name") or f"{organization}/{name}")
    topics = payload.get("topics") or []
    return RepositoryRef(
        full_name=full_name,
        default_branch=str(payload.get("default_branch") or "main"),
        archived=bool(payload.get("archived", False)),
        fork=bool(payload.get("fork", False)),
        topics=tuple(sorted(str(topic).lower() for topic in topics)),
    )


def exemption_reason(ref: RepositoryRef, exemptions: ExemptionPolicy) -> str:
    """Return why ``ref`` is exempt, or an empty string when it is not."""
    for pattern in exemptions.repositories:
        if fnmatch.fnmatchcase(ref.name, pattern) or fnmatch.fnmatchcase(ref.full_name, pattern):
            return f"matches exempt pattern '{pattern}'"
    for topic in exemptions.topics:
        if topic in ref.topics:
            return f"has exempt topic '{topic}'"
    if ref.archived and exemptions.archived:
        return "repository is archived"
    if ref.fork and not exemptions.include_forks:
        return "repository is a fork"
    return ""
