"""Rule definitions: the closed set of check kinds and the immutable Rule record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from orgcheck.constants.rules import APPLICABILITY_KINDS, FIX_KINDS, RULE_ID_PATTERN, TASK_SETS
from orgcheck.constants.standard import MISE_ACTION
from orgcheck.types import Applicability


@dataclass(frozen=True)
class FilePresent:
    """The file at ``path`` must exist."""

    path: str


@dataclass(frozen=True)
class FileAbsent:
    """The file at ``path`` must not exist."""

    path: str


@dataclass(frozen=True)
class AnyFilePresent:
    """At least one of ``paths`` must exist."""

    paths: tuple[str, ...]


@dataclass(frozen=True)
class ConfigFilename:
    """The mise config uses the dot-prefixed name, parses as TOML, and no legacy name exists."""


@dataclass(frozen=True)
class TaskLayout:
    """Every task of ``task_set`` exists as a file in the standard task directory."""

    task_set: str = "required"


@dataclass(frozen=True)
class TasksFileBased:
    """No standard task is defined inline in the mise config."""


@dataclass(frozen=True)
class WorkflowInvokes:
    """The CI workflow installs mise through ``action`` and runs the standard tasks."""

    action: str = MISE_ACTION


@dataclass(frozen=True)
class JsonParses:
    """The first present file of ``paths`` exists and parses as JSON."""

    paths: tuple[str, ...]


Check: TypeAlias = (
    FilePresent
    | FileAbsent
    | AnyFilePresent
    | ConfigFilename
    | TaskLayout
    | TasksFileBased
    | WorkflowInvokes
    | JsonParses
)


@dataclass(frozen=True)
class Rule:
    """A single checkable convention, loaded once per process."""

    rule_id: str
    title: str
    check: Check
    since_phase: int = 1
    applies_when: Applicability = "always"
    fix: str | None = None
    description: str = ""
    recommendation: str = ""

    def __post_init__(self) -> None:
        if not RULE_ID_PATTERN.match(self.rule_id):
            raise ValueError(f"rule_id must be UPPER_SNAKE_CASE (got {self.rule_id!r})")
        if not isinstance(self.applies_when, str) or self.applies_when not in APPLICABILITY_KINDS:
            raise ValueError(f"{self.rule_id}: unknown applies_when {self.applies_when!r}")
        if self.fix is not None and (not isinstance(self.fix, str) or self.fix not in FIX_KINDS):
            raise ValueError(f"{self.rule_id}: unknown fix {self.fix!r}")
        if isinstance(self.check, TaskLayout) and str(self.check.task_set) not in TASK_SETS:
            raise ValueError(f"{self.rule_id}: unknown task_set {self.check.task_set!r}")


@dataclass(frozen=True)
class CheckOutcome:
    """Raw verdict of a check before it is turned into an EvaluationResult."""

    passed: bool
    detail: str = ""
    fixable: bool = True
