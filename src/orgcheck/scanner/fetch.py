"""Snapshot fetch phase: collect every input the rules read before evaluation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Protocol

from orgcheck.exceptions import FetchCancelled
from orgcheck.model import RepositoryRef, RepositorySnapshot, StandardVersion
from orgcheck.rules import Rule, required_inputs, select_rules

logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    def get_file_text(self, repository: str, path: str, ref: str | None = None) -> str | None:
        ...

    def list_directory(self, repository: str, path: str, ref: str | None = None) -> tuple[str, ...] | None:
        ...

    def get_languages(self, repository: str) -> dict[str, int]:
        ...


def fetch_snapshot(
    client: SnapshotSource,
    ref: RepositoryRef,
    rules: Sequence[Rule],
    standard: StandardVersion,
    cancel_event: threading.Event | None = None,
) -> RepositorySnapshot:
    """Fetch the files, directories, and languages the in-force rules need."""
    if ref.exempt:
        return RepositorySnapshot(
            repository=ref.full_name,
            default_branch=ref.default_branch,
            exempt=True,
            exempt_reason=ref.exempt_reason,
        )

    files_needed, dirs_needed, needs_languages = required_inputs(select_rules(rules, standard), standard)

    files: dict[str, str | None] = {}
    for path in files_needed:
        _raise_if_cancelled(cancel_event, ref)
        files[path] = client.get_file_text(ref.full_name, path, ref.default_branch)

    directories: dict[str, tuple[str, ...] | None] = {}
    for path in dirs_needed:
        _raise_if_cancelled(cancel_event, ref)
        directories[path] = client.list_directory(ref.full_name, path, ref.default_branch)

    languages: tuple[str, ...] = ()
    if needs_languages:
        _raise_if_cancelled(cancel_event, ref)
        languages = tuple(sorted(client.get_languages(ref.full_name)))

    logger.debug(
        "Fetched %s: %d/%d files present, languages=%s",
        ref.full_name,
        sum(1 for text in files.values() if text is not None),
        len(files),
        ",".join(languages) or "-",
    )
    return RepositorySnapshot(
        repository=ref.full_name,
        default_branch=ref.default_branch,
        files=files,
        directories=directories,
        languages=languages,
    )


def _raise_if_cancelled(cancel_event: threading.Event | None, ref: RepositoryRef) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise FetchCancelled(f"fetch of {ref.full_name} cancelled")
