"""Frozen domain entities shared by the scanner, rules, and reporting layers."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from orgcheck.constants.config import DEFAULT_CODE_TASKS, DEFAULT_REQUIRED_TASKS, DEFAULT_STANDARD_PHASE
from orgcheck.constants.rules import RESULT_ID_HASH_LENGTH
from orgcheck.constants.standard import (
    CI_WORKFLOW_PATH,
    MISE_CONFIG_FILENAME,
    MISE_LEGACY_CONFIG_FILENAME,
    MISE_TASK_DIR,
    PROSE_LANGUAGES,
)
from orgcheck.types import JsonObject, Outcome, RemediationStatus, RepositoryStatus


@dataclass(frozen=True)
class StandardVersion:
    """One rollout phase of the tooling standard, passed explicitly to evaluation."""

    phase: int = DEFAULT_STANDARD_PHASE
    required_tasks: tuple[str, ...] = DEFAULT_REQUIRED_TASKS
    code_tasks: tuple[str, ...] = DEFAULT_CODE_TASKS
    config_filename: str = MISE_CONFIG_FILENAME
    legacy_config_filename: str = MISE_LEGACY_CONFIG_FILENAME
    task_dir: str = MISE_TASK_DIR
    workflow_path: str = CI_WORKFLOW_PATH

    def tasks_for(self, task_set: str) -> tuple[str, ...]:
        """Return the task names of the ``required`` or ``code`` set."""
        return self.code_tasks if task_set == "code" else self.required_tasks


@dataclass(frozen=True)
class RepositoryRef:
    """Repository listed by the enumerator, with its exemption marking."""

    full_name: str
    default_branch: str = "main"
    archived: bool = False
    fork: bool = False
    topics: tuple[str, ...] = ()
    exempt: bool = False
    exempt_reason: str = ""

    @property
    def name(self) -> str:
        return self.full_name.rsplit("/", 1)[-1]

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]


@dataclass(frozen=True)
class RepositorySnapshot:
    """Fetched, read-only state of one repository at evaluation time.

    ``files`` maps a path to its text, or ``None`` when the file is absent.
    ``directories`` maps a directory path to its entry names, or ``None``.
    """

    repository: str
    default_branch: str = "main"
    files: Mapping[str, str | None] = field(default_factory=dict)
    directories: Mapping[str, tuple[str, ...] | None] = field(default_factory=dict)
    languages: tuple[str, ...] = ()
    exempt: bool = False
    exempt_reason: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.files, MappingProxyType):
            object.__setattr__(self, "files", MappingProxyType(dict(self.files)))
        if not isinstance(self.directories, MappingProxyType):
            object.__setattr__(self, "directories", MappingProxyType(dict(self.directories)))

    @property
    def has_code(self) -> bool:
        """Whether any detected language is outside the prose set."""
        return any(language not in PROSE_LANGUAGES for language in self.languages)

    def file_text(self, path: str) -> str | None:
        return self.files.get(path)

    def has_file(self, path: str) -> bool:
        return self.files.get(path) is not None

    def directory_entries(self, path: str) -> tuple[str, ...] | None:
        return self.directories.get(path)


def result_id(repository: str, rule_id: str) -> str:
    """Return a stable identifier for a (repository, rule) pair."""
    seed = f"{repository}\x00{rule_id}".encode("utf-8")
    return hashlib.sha256(seed).hexdigest()[:RESULT_ID_HASH_LENGTH]


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one rule against one repository snapshot."""

    repository: str
    rule_id: str
    outcome: Outcome
    detail: str = ""
    fixable: bool = False

    @property
    def id(self) -> str:
        return result_id(self.repository, self.rule_id)

    def to_dict(self) -> JsonObject:
        return {
            "id": self.id,
            "repository": self.repository,
            "rule_id": self.rule_id,
            "outcome": self.outcome,
            "detail": self.detail,
            "fixable": self.fixable,
        }


@dataclass(frozen=True)
class RepositoryReport:
    """Per-repository slice of a compliance report."""

    repository: str
    status: RepositoryStatus
    results: tuple[EvaluationResult, ...] = ()
    exempt: bool = False

    def to_dict(self) -> JsonObject:
        return {
            "repository": self.repository,
            "status": self.status,
            "exempt": self.exempt,
            "results": [result.to_dict() for result in self.results],
        }


@dataclass(frozen=True)
class RemediationOutcome:
    """What the dispatcher did for one failing result."""

    repository: str
    rule_id: str
    status: RemediationStatus
    branch: str = ""
    pull_url: str | None = None
    detail: str = ""

    def to_dict(self) -> JsonObject:
        return {
            "repository": self.repository,
            "rule_id": self.rule_id,
            "status": self.status,
            "branch": self.branch,
            "pull_url": self.pull_url,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class ComplianceReport:
    """Aggregated outcome set for one compliance run."""

    organization: str
    phase: int
    repositories: tuple[RepositoryReport, ...]
    counts_by_outcome: dict[Outcome, int]
    counts_by_status: dict[RepositoryStatus, int]
    duration_seconds: float = 0.0
    warnings: tuple[str, ...] = ()
    remediations: tuple[RemediationOutcome, ...] = ()
    config_fingerprint: str = ""
    schema_version: str = ""

    @property
    def failing_repositories(self) -> tuple[str, ...]:
        return tuple(repo.repository for repo in self.repositories if repo.status == "fail")

    @property
    def results(self) -> tuple[EvaluationResult, ...]:
        return tuple(result for repo in self.repositories for result in repo.results)

    def repository(self, name: str) -> RepositoryReport | None:
        for repo in self.repositories:
            if repo.repository == name:
                return repo
        return None

    def to_dict(self) -> JsonObject:
        return {
            "schema_version": self.schema_version,
            "organization": self.organization,
            "phase": self.phase,
            "config_fingerprint": self.config_fingerprint,
            "duration_seconds": round(self.duration_seconds, 3),
            "counts_by_outcome": dict(self.counts_by_outcome),
            "counts_by_status": dict(self.counts_by_status),
            "repositories": [repo.to_dict() for repo in self.repositories],
            "remediations": [outcome.to_dict() for outcome in self.remediations],
            "warnings": list(self.warnings),
        }
